import json
from typing import Dict, List, Optional, Union

import pytest

from data_controller import DataController
from database import PokemonDatabase
from dispatch import ImmediateDispatcher
from errors import NetworkError, SyncError
from managers import SettingsManager

API = "https://pokeapi.co/api/v2/pokemon"
FIRST_PAGE = f"{API}/?offset=0&limit=100"
SPRITES = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon"


class ManualFetcher:
    """Records requests; tests decide when and how each one finishes."""

    def __init__(self) -> None:
        self.requests: List[str] = []
        self._callbacks: Dict[str, list] = {}

    def fetch(self, url, on_complete) -> None:
        self.requests.append(url)
        self._callbacks.setdefault(url, []).append(on_complete)

    def outstanding(self, url: str) -> int:
        return len(self._callbacks.get(url, []))

    def complete(self, url: str, data: Optional[bytes] = None, error: Optional[SyncError] = None) -> None:
        self._callbacks[url].pop(0)(data, error)

    def fail(self, url: str) -> None:
        self.complete(url, error=NetworkError("connection refused", url=url))


class AutoFetcher:
    """Answers every request at once from a table of canned responses."""

    def __init__(self, responses: Dict[str, Union[bytes, SyncError]]) -> None:
        self.responses = responses
        self.requests: List[str] = []

    def fetch(self, url, on_complete) -> None:
        self.requests.append(url)
        response = self.responses.get(url, NetworkError("not found", url=url))
        if isinstance(response, SyncError):
            on_complete(None, response)
        else:
            on_complete(response, None)


def page_json(names_numbers, next_url=None) -> bytes:
    results = [{"name": name, "url": f"{API}/{number}/"} for name, number in names_numbers]
    return json.dumps({"count": len(results), "next": next_url, "results": results}).encode()


def detail_json(number=35, name="clefairy", weight=75, height=6, stats=None, types=None,
                front_default="default", front_shiny=None) -> bytes:
    if front_default == "default":
        front_default = f"{SPRITES}/{number}.png"
    if stats is None:
        stats = [("hp", 70), ("attack", 45), ("defense", 48),
                 ("special-attack", 60), ("special-defense", 65), ("speed", 35)]
    if types is None:
        types = [(1, "fairy")]
    return json.dumps({
        "id": number,
        "name": name,
        "sprites": {"front_default": front_default, "front_shiny": front_shiny},
        "height": height,
        "weight": weight,
        "base_experience": 113,
        "order": 64,
        "stats": [{"base_stat": v, "effort": 0, "stat": {"name": n, "url": ""}} for n, v in stats],
        "types": [{"slot": s, "type": {"name": n, "url": ""}} for s, n in types],
    }).encode()


@pytest.fixture
def store() -> PokemonDatabase:
    return PokemonDatabase()


@pytest.fixture
def settings(tmp_path) -> SettingsManager:
    return SettingsManager(tmp_path / "settings.json")


@pytest.fixture
def fetcher() -> ManualFetcher:
    return ManualFetcher()


@pytest.fixture
def controller(store, settings, fetcher) -> DataController:
    return DataController(store, settings, fetcher, ImmediateDispatcher())
