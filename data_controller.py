"""Controller that downloads Pokémon from PokéAPI into the local record store."""

import copy
import logging
from dataclasses import fields
from typing import Callable, FrozenSet, Optional, Set

from constants import FIRST_PAGE_URL
from database import PokemonDatabase
from dispatch import Task
from errors import InvalidUrlError, StoreError, SyncError
from fetcher import HttpFetcher
from managers import SettingsManager
from models import (
    CatalogPage, PokemonDetail, PokemonRecord, PokemonType, StatKind, is_valid_url
)

logger = logging.getLogger(__name__)

# Handles a downloaded body; may return a task to run once the URL is no longer pending.
Completion = Callable[[bytes], Optional[Task]]


class DataController:
    """
    Downloads the catalog page by page and the details and images of
    individual Pokémon on demand.

    Every method must be called on the thread that owns the store. Downloads
    run in the background and their completions are handed to dispatch,
    which runs them back on that thread. A URL is never requested twice at
    the same time.
    """

    def __init__(
        self,
        store: PokemonDatabase,
        settings: SettingsManager,
        fetcher: HttpFetcher,
        dispatch: Callable[[Task], None],
        first_page_url: str = FIRST_PAGE_URL,
    ):
        self.store = store
        self.settings = settings
        self.fetcher = fetcher
        self.dispatch = dispatch
        self.first_page_url = first_page_url
        self._pending_urls: Set[str] = set()
        # Bumped by reset_all() so downloads started before it are ignored.
        self._generation = 0

    @property
    def pending_urls(self) -> FrozenSet[str]:
        """The URLs currently being downloaded."""
        return frozenset(self._pending_urls)

    @property
    def is_idle(self) -> bool:
        return not self._pending_urls

    # ---- Look-up ----
    def pokemon_for_name(self, name: str) -> Optional[PokemonRecord]:
        return self.store.find_by_name(name)

    def pokemon_for_number(self, number: int) -> Optional[PokemonRecord]:
        return self.store.find_by_number(number)

    # ---- Downloading ----
    def _start_fetch(self, url: Optional[str], operation: str, completion: Completion) -> bool:
        """Mark url as pending and start downloading it. Returns False if nothing was started."""
        if not is_valid_url(url):
            logger.warning(f"Cannot {operation}: {InvalidUrlError(url=url)}")
            return False
        if url in self._pending_urls:
            logger.debug(f"Already downloading {url}")
            return False

        self._pending_urls.add(url)
        generation = self._generation
        logger.info(f"Starting download of {url}")

        def on_complete(data: Optional[bytes], error: Optional[SyncError]) -> None:
            self.dispatch(lambda: self._finish_fetch(url, generation, operation, completion, data, error))

        self.fetcher.fetch(url, on_complete)
        return True

    def _finish_fetch(
        self,
        url: str,
        generation: int,
        operation: str,
        completion: Completion,
        data: Optional[bytes],
        error: Optional[SyncError],
    ) -> None:
        """Handle a finished download on the owning thread."""
        if generation != self._generation:
            logger.info(f"Ignoring download of {url} started before reset")
            return

        follow_up = None
        try:
            if error is not None:
                raise error
            follow_up = completion(data)
            logger.info(f"Finished download of {url}")
        except SyncError as e:
            logger.warning(f"Cannot {operation} from {url}: {e}")
        finally:
            self._pending_urls.discard(url)

        if follow_up is not None:
            follow_up()

    # ---- Catalog ----
    def sync_all_catalog(self) -> None:
        """
        Start or resume downloading every page of the catalog.

        Pages are downloaded one after another; the URL of the next page is
        saved after each one so that a later call, even after a restart,
        carries on from there. Does nothing once every page is stored or
        while the current page is being downloaded.
        """
        if self.settings.have_downloaded_all_pages:
            logger.info("Have already downloaded all pages of Pokémon")
            return

        url = self.settings.current_page_url or self.first_page_url
        self._start_fetch(url, "download page of Pokémon", self._did_download_page)

    def _did_download_page(self, data: bytes) -> Optional[Task]:
        page = CatalogPage.from_bytes(data)
        created = self._create_pokemon(page)
        self.store.save_all()
        logger.info(f"Stored page of {len(page.entries)} Pokémon ({created} new)")

        if page.next_url:
            if not is_valid_url(page.next_url):
                raise InvalidUrlError("bad next page URL", url=page.next_url)
            self.settings.set_current_page_url(page.next_url)
            return self.sync_all_catalog

        self.settings.mark_all_pages_downloaded()
        logger.info("Finished downloading all pages of Pokémon")
        return None

    def _create_pokemon(self, page: CatalogPage) -> int:
        """Insert a stub for every new name in a page. Returns the number inserted."""
        created = 0
        for entry in page.entries:
            if not entry.name or not is_valid_url(entry.detail_url):
                logger.warning(f"Skipping catalog entry {entry.name!r} with URL {entry.detail_url!r}")
                continue
            if self.store.find_by_name(entry.name) is not None:
                continue
            # The guessed number keeps the list order stable until the details arrive.
            self.store.insert(PokemonRecord(
                name=entry.name,
                detail_url=entry.detail_url,
                number=entry.guessed_id or 0,
            ))
            created += 1
        return created

    # ---- Individual Pokémon ----
    def start_next_download(self, record: PokemonRecord) -> None:
        """
        Start the next download a Pokémon needs, if any.

        Details come first; the image can only be fetched once the details
        have supplied its URL. Records with image data are left alone.
        """
        if record.has_image:
            return
        if record.image_url is None:
            if not record.has_been_downloaded:
                self._download_details(record)
        else:
            self.load_image(record)

    def _download_details(self, record: PokemonRecord) -> None:
        self._start_fetch(
            record.detail_url,
            f"download Pokémon {record.name}",
            lambda data: self._did_download_details(record, data),
        )

    def _did_download_details(self, record: PokemonRecord, data: bytes) -> None:
        detail = PokemonDetail.from_bytes(data)
        backup = copy.deepcopy(record)
        self.update_pokemon(record, detail)
        try:
            self.store.save_all()
        except StoreError:
            _revert(record, backup)
            raise

    def update_pokemon(self, record: PokemonRecord, detail: PokemonDetail) -> None:
        """Merge downloaded details into a record."""
        candidates = [url for url in (detail.front_default, detail.front_shiny) if url]
        if not candidates:
            logger.warning(f"Missing image URL for {record.name}")
        else:
            image_url = next((url for url in candidates if is_valid_url(url)), None)
            if image_url:
                record.image_url = image_url
            else:
                logger.warning(f"Can't parse image URL {candidates[0]!r} for {record.name}")

        record.number = detail.id
        record.height = detail.height
        record.weight = detail.weight
        record.order = detail.order
        record.base_experience = detail.base_experience

        for stat in detail.stats:
            kind = StatKind.from_name(stat.name)
            if kind:
                record.set_statistic(kind, stat.base_stat, stat.effort)

        for entry in detail.types:
            kind = PokemonType.from_name(entry.name)
            if kind:
                record.set_type(entry.slot, kind)

    def load_image(self, record: PokemonRecord) -> None:
        """Start downloading the image of a Pokémon whose image URL is known."""
        if record.image_url is None:
            logger.debug(f"No image URL for {record.name} yet")
            return
        self._start_fetch(
            record.image_url,
            f"download image for {record.name}",
            lambda data: self._did_load_image(record, data),
        )

    def _did_load_image(self, record: PokemonRecord, data: bytes) -> None:
        record.image_data = data
        try:
            self.store.save_all()
        except StoreError:
            record.image_data = None
            raise

    # ---- Reset ----
    def reset_all(self) -> bool:
        """
        Delete every Pokémon and forget the catalog progress.

        Both happen or neither does. Downloads still in flight are ignored
        when they finish. Returns False if the reset failed.
        """
        try:
            records = self.store.snapshot()
        except StoreError as e:
            logger.error(f"Cannot delete Pokémon: {e}")
            return False
        previous_state = self.settings.resume_state()

        try:
            self.settings.reset()
        except SyncError as e:
            logger.error(f"Cannot reset download progress: {e}")
            return False

        try:
            self.store.delete_all()
        except StoreError as e:
            logger.error(f"Cannot delete Pokémon: {e}")
            self._roll_back_reset(previous_state, records)
            return False

        self._generation += 1
        self._pending_urls.clear()
        logger.info("Deleted all Pokémon")
        return True

    def _roll_back_reset(self, previous_state, records) -> None:
        try:
            self.settings.restore(previous_state)
        except SyncError as e:
            logger.error(f"Cannot restore download progress: {e}")
        try:
            self.store.restore(records)
        except StoreError as e:
            logger.error(f"Cannot restore Pokémon: {e}")


def _revert(record: PokemonRecord, backup: PokemonRecord) -> None:
    for f in fields(record):
        setattr(record, f.name, getattr(backup, f.name))
