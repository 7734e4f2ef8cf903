"""Local record store for downloaded Pokémon."""

import json
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

from errors import StoreUnavailableError, StoreWriteFailedError
from models import PokemonRecord

logger = logging.getLogger(__name__)


class PokemonDatabase:
    """
    Stores Pokémon records keyed by name.
    Records live in memory and are written to a JSON file on save_all();
    a database without a path is never written to disk.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._records: Dict[str, PokemonRecord] = {}
        self._listeners: List[Callable[[], None]] = []
        self._closed = False

    @classmethod
    def open(cls, path: Path) -> "PokemonDatabase":
        """Open the database at path, loading any records saved there."""
        database = cls(path)
        database._load()
        return database

    def _load(self) -> None:
        """Load records from disk."""
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            records = [PokemonRecord.from_dict(item) for item in raw.get("pokemon", [])]
        except (OSError, ValueError, AttributeError) as e:
            raise StoreUnavailableError(f"cannot load records: {e}", url=str(self.path)) from e
        self._records = {r.name: r for r in records}
        logger.info(f"Loaded {len(self._records)} Pokémon from {self.path}")

    def _require_open(self) -> None:
        if self._closed:
            raise StoreUnavailableError()

    def close(self) -> None:
        self._closed = True
        self._listeners.clear()

    # ---- Look-up ----
    def find_by_name(self, name: str) -> Optional[PokemonRecord]:
        """Find a Pokémon by its complete, case-sensitive name."""
        self._require_open()
        return self._records.get(name)

    def find_by_number(self, number: int) -> Optional[PokemonRecord]:
        """Find a Pokémon by number."""
        self._require_open()
        for record in self._records.values():
            if record.number == number:
                return record
        return None

    def all_pokemon(self) -> List[PokemonRecord]:
        """All records ordered by number, then name."""
        self._require_open()
        return sorted(self._records.values(), key=lambda r: (r.number, r.name))

    def search(self, text: str) -> List[PokemonRecord]:
        """Records whose name contains text, or whose number is text."""
        query = text.strip().lower()
        if not query:
            return self.all_pokemon()
        try:
            number = int(query)
        except ValueError:
            number = None
        return [
            r for r in self.all_pokemon()
            if query in r.name.lower() or (number is not None and r.number == number)
        ]

    def __len__(self) -> int:
        return len(self._records)

    # ---- Mutation ----
    def insert(self, record: PokemonRecord) -> None:
        """Add a new record; names must be unique."""
        self._require_open()
        if record.name in self._records:
            raise ValueError(f"Pokémon '{record.name}' already exists")
        self._records[record.name] = record

    def save_all(self) -> None:
        """Durably write every record, then notify subscribers."""
        self._require_open()
        if self.path is not None:
            data = {"pokemon": [r.to_dict() for r in self.all_pokemon()]}
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except OSError as e:
                raise StoreWriteFailedError(str(e), url=str(self.path)) from e
        self._notify()

    def delete_all(self) -> None:
        """Delete every record and save."""
        self._require_open()
        self._records.clear()
        self.save_all()

    def snapshot(self) -> List[PokemonRecord]:
        self._require_open()
        return list(self._records.values())

    def restore(self, records: List[PokemonRecord]) -> None:
        """Replace the contents with records taken by snapshot() and save."""
        self._require_open()
        self._records = {r.name: r for r in records}
        self.save_all()

    # ---- Change notification ----
    def subscribe(self, callback: Callable[[], None]) -> None:
        """Call callback after every successful save."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()
