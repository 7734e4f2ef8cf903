"""Background HTTP downloads from PokéAPI."""

import logging
import threading
from typing import Callable, Optional

import requests

from constants import REQUEST_TIMEOUT, USER_AGENT
from errors import NetworkError, NoDataError, SyncError

logger = logging.getLogger(__name__)

# Called on the worker thread with either the body or the error.
FetchCallback = Callable[[Optional[bytes], Optional[SyncError]], None]


class HttpFetcher:
    """Performs GET requests on daemon threads over a persistent session."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = REQUEST_TIMEOUT):
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.Session:
        """Get or create the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": USER_AGENT})
        return self._session

    def get(self, url: str) -> bytes:
        """Download url and return the body."""
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(str(e), url=url) from e
        if not resp.content:
            raise NoDataError(url=url)
        return resp.content

    def fetch(self, url: str, on_complete: FetchCallback) -> None:
        """Download url in the background and hand the outcome to on_complete."""
        thread = threading.Thread(
            target=self._fetch_thread,
            args=(url, on_complete),
            daemon=True
        )
        thread.start()

    def _fetch_thread(self, url: str, on_complete: FetchCallback) -> None:
        try:
            data = self.get(url)
        except SyncError as e:
            on_complete(None, e)
            return
        except Exception as e:
            logger.exception(f"Unexpected error downloading {url}")
            on_complete(None, NetworkError(str(e), url=url))
            return
        logger.debug(f"Downloaded {len(data)} bytes from {url}")
        on_complete(data, None)
