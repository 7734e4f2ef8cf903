"""Errors raised while downloading and storing Pokémon."""

from typing import Optional


class SyncError(Exception):
    """Base class for errors raised during a download or a save."""

    description = "sync failed"

    def __init__(self, message: Optional[str] = None, url: Optional[str] = None):
        self.url = url
        super().__init__(message or self.description)

    def __str__(self) -> str:
        message = super().__str__()
        if self.url:
            return f"{message} ({self.url})"
        return message


class InvalidUrlError(SyncError):
    """A malformed or unparseable URL was encountered."""

    description = "bad URL"


class NoDataError(SyncError):
    """A response carried no body when one was expected."""

    description = "no data"


class MalformedResponseError(SyncError):
    """A response body did not have the expected shape."""

    description = "bad data"


class NetworkError(SyncError):
    """The request failed or the server answered with an error status."""

    description = "network error"


class StoreError(SyncError):
    description = "store error"


class StoreUnavailableError(StoreError):
    """The record store is not open."""

    description = "record store is not available"


class StoreWriteFailedError(StoreError):
    """A durable save failed."""

    description = "cannot save records"
