"""Download Pokémon without a window."""

import logging
from typing import List

from constants import MAX_CONCURRENT_LOADS
from data_controller import DataController
from database import PokemonDatabase
from dispatch import QueueDispatcher
from models import PokemonRecord

logger = logging.getLogger(__name__)


def needs_download(record: PokemonRecord) -> bool:
    """Whether start_next_download() has anything left to do for a record."""
    if record.has_image:
        return False
    return record.image_url is not None or not record.has_been_downloaded


def _progress(records: List[PokemonRecord]) -> int:
    return sum(int(r.has_been_downloaded) + int(r.has_image) for r in records)


def wait_until_idle(controller: DataController, dispatcher: QueueDispatcher, poll_interval: float = 0.1) -> None:
    """Run completions until no download is pending."""
    while not controller.is_idle:
        dispatcher.run_pending(timeout=poll_interval)


def run_headless(
    controller: DataController,
    store: PokemonDatabase,
    dispatcher: QueueDispatcher,
    hydrate: bool = False,
    batch_size: int = MAX_CONCURRENT_LOADS,
    poll_interval: float = 0.1,
) -> int:
    """
    Download the catalog and, with hydrate, every Pokémon's details and image.

    Pokémon are hydrated batch_size at a time. Rounds are repeated while they
    make progress, so a record needing both details and image takes two
    rounds and records that keep failing end the run. Returns the number of
    stored Pokémon.
    """
    controller.sync_all_catalog()
    wait_until_idle(controller, dispatcher, poll_interval)
    logger.info(f"Catalog holds {len(store)} Pokémon")

    while hydrate:
        before = _progress(store.all_pokemon())
        remaining = [r for r in store.all_pokemon() if needs_download(r)]
        if not remaining:
            break
        logger.info(f"Downloading {len(remaining)} Pokémon")
        for start in range(0, len(remaining), batch_size):
            for record in remaining[start:start + batch_size]:
                controller.start_next_download(record)
            wait_until_idle(controller, dispatcher, poll_interval)
        if _progress(store.all_pokemon()) <= before:
            logger.warning("No progress downloading Pokémon, giving up for now")
            break

    return len(store)
