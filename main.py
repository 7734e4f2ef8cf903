"""
Poké Index
Main entry point for the application.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from constants import RECORDS_FILE, SETTINGS_FILE
from data_controller import DataController
from database import PokemonDatabase
from dispatch import QueueDispatcher
from errors import StoreUnavailableError
from fetcher import HttpFetcher
from headless import run_headless
from managers import SettingsManager

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browse Pokémon downloaded from PokéAPI.")
    parser.add_argument("--data-dir", default=".", help="Directory holding the local database and settings")
    parser.add_argument("--headless", action="store_true", help="Download without opening a window, then exit")
    parser.add_argument("--hydrate", action="store_true",
                        help="With --headless, also download every Pokémon's details and image")
    parser.add_argument("--reset", action="store_true", help="Delete all Pokémon and download progress first")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # urllib3 debug output drowns everything else
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def open_database(data_dir: Path) -> PokemonDatabase:
    """Open the record store. Failure here is fatal."""
    data_dir.mkdir(parents=True, exist_ok=True)
    return PokemonDatabase.open(data_dir / RECORDS_FILE)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the Poké Index application."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    data_dir = Path(args.data_dir)
    try:
        store = open_database(data_dir)
    except (StoreUnavailableError, OSError) as e:
        logger.critical(f"Could not open the Pokémon database: {e}")
        return 1
    settings = SettingsManager(data_dir / SETTINGS_FILE)

    try:
        if args.headless:
            dispatcher = QueueDispatcher()
            controller = DataController(store, settings, HttpFetcher(), dispatcher)
            if args.reset and not controller.reset_all():
                return 1
            count = run_headless(controller, store, dispatcher, hydrate=args.hydrate)
            logger.info(f"{count} Pokémon stored in {store.path}")
            return 0

        # Imported here so headless runs work without a display
        from main_app import run_app
        run_app(store, settings, HttpFetcher(), reset=args.reset)
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
