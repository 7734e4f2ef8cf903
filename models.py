"""Data models, enums and server responses for the Pokémon index."""

import base64
import binascii
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from constants import STAT_COLOR_BANDS, STAT_COLOR_MAX, TYPE_COLORS
from errors import MalformedResponseError


SPECIAL_NAME_FIXES = {
    "mr-mime": "Mr. Mime",
    "mr-rime": "Mr. Rime",
    "mime-jr": "Mime Jr.",
    "type-null": "Type: Null",
    "ho-oh": "Ho-Oh",
    "porygon-z": "Porygon-Z",
    "jangmo-o": "Jangmo-o",
    "hakamo-o": "Hakamo-o",
    "kommo-o": "Kommo-o",
    "chien-pao": "Chien-Pao",
    "ting-lu": "Ting-Lu",
    "wo-chien": "Wo-Chien",
    "chi-yu": "Chi-Yu",
    "farfetchd": "Farfetch'd",
    "sirfetchd": "Sirfetch'd",
    "nidoran-f": "Nidoran♀",
    "nidoran-m": "Nidoran♂",
}


def is_valid_url(url: Any) -> bool:
    """Check that a value is an absolute http(s) URL."""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def guess_number(url: str) -> Optional[int]:
    """Guess a Pokémon's number from the last component of its URL path."""
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    components = [c for c in path.split("/") if c]
    if not components:
        return None
    try:
        return int(components[-1])
    except ValueError:
        return None


def slug_to_display(slug: str) -> str:
    """Convert an API slug to a display name."""
    if slug in SPECIAL_NAME_FIXES:
        return SPECIAL_NAME_FIXES[slug]
    return slug.replace("-", " ").title()


def stat_color(value: int) -> str:
    """Color of the gauge for a statistic value."""
    for upper, color in STAT_COLOR_BANDS:
        if value < upper:
            return color
    return STAT_COLOR_MAX


class StatKind(Enum):
    """Statistics tracked for each Pokémon."""
    HP = ("hp", "Health Points")
    ATTACK = ("attack", "Attack")
    DEFENSE = ("defense", "Defense")
    SPECIAL_ATTACK = ("special-attack", "Special Attack")
    SPECIAL_DEFENSE = ("special-defense", "Special Defense")
    SPEED = ("speed", "Speed")

    def __init__(self, api_name: str, label: str):
        self.api_name = api_name
        self.label = label

    @classmethod
    def from_name(cls, name: str) -> Optional["StatKind"]:
        """Look up a statistic by its API name; None if unknown."""
        for kind in cls:
            if kind.api_name == name:
                return kind
        return None


class PokemonType(Enum):
    """The eighteen elemental types."""
    NORMAL = ("normal", "Normal")
    FIRE = ("fire", "Fire")
    WATER = ("water", "Water")
    ELECTRIC = ("electric", "Electric")
    GRASS = ("grass", "Grass")
    ICE = ("ice", "Ice")
    FIGHTING = ("fighting", "Fighting")
    POISON = ("poison", "Poison")
    GROUND = ("ground", "Ground")
    FLYING = ("flying", "Flying")
    PSYCHIC = ("psychic", "Psychic")
    BUG = ("bug", "Bug")
    ROCK = ("rock", "Rock")
    GHOST = ("ghost", "Ghost")
    DRAGON = ("dragon", "Dragon")
    DARK = ("dark", "Dark")
    STEEL = ("steel", "Steel")
    FAIRY = ("fairy", "Fairy")

    def __init__(self, api_name: str, label: str):
        self.api_name = api_name
        self.label = label

    @property
    def color(self) -> str:
        return TYPE_COLORS.get(self.api_name, "gray")

    @classmethod
    def from_name(cls, name: str) -> Optional["PokemonType"]:
        """Look up a type by its API name; None if unknown."""
        for kind in cls:
            if kind.api_name == name:
                return kind
        return None


@dataclass
class StatEntry:
    kind: StatKind
    value: int
    effort: int = 0

    @property
    def color(self) -> str:
        return stat_color(self.value)


@dataclass
class TypeEntry:
    slot: int  # 1 or 2
    kind: PokemonType


@dataclass
class CatalogEntry:
    """Identity of a Pokémon as listed in a catalog page."""
    name: str
    detail_url: str
    guessed_id: Optional[int] = None

    @classmethod
    def from_url(cls, name: str, detail_url: str) -> "CatalogEntry":
        return cls(name=name, detail_url=detail_url, guessed_id=guess_number(detail_url))


@dataclass
class ResumeState:
    """Checkpoint of the catalog download."""
    next_page_url: Optional[str] = None
    all_pages_downloaded: bool = False


@dataclass
class PokemonRecord:
    """A locally stored Pokémon. Height is in decimetres, weight in hectograms."""
    name: str
    detail_url: str
    number: int = 0
    height: int = 0
    weight: int = 0
    base_experience: int = 0
    order: int = 0
    image_url: Optional[str] = None
    image_data: Optional[bytes] = None
    statistics: List[StatEntry] = field(default_factory=list)
    types: List[TypeEntry] = field(default_factory=list)

    @property
    def has_been_downloaded(self) -> bool:
        """Whether the details have been downloaded."""
        # Only the server sets a non-zero weight.
        return self.weight != 0

    @property
    def has_image(self) -> bool:
        return self.image_data is not None

    @property
    def total_statistic(self) -> int:
        return sum(s.value for s in self.statistics)

    @property
    def display_name(self) -> str:
        return slug_to_display(self.name)

    @property
    def formatted_number(self) -> str:
        return f"{self.number:04d}"

    @property
    def weight_description(self) -> str:
        return f"{_trim_decimal(self.weight / 10.0)} kg"

    @property
    def height_description(self) -> str:
        return f"{_trim_decimal(self.height / 10.0)} m"

    @property
    def sorted_types(self) -> List[TypeEntry]:
        return sorted(self.types, key=lambda t: t.slot)

    def set_statistic(self, kind: StatKind, value: int, effort: int = 0) -> None:
        """Replace the statistic of the same kind, or append it."""
        for statistic in self.statistics:
            if statistic.kind == kind:
                statistic.value = value
                statistic.effort = effort
                return
        self.statistics.append(StatEntry(kind=kind, value=value, effort=effort))

    def set_type(self, slot: int, kind: PokemonType) -> None:
        """Set the type in slot 1 or 2; other slots are ignored."""
        if slot not in (1, 2):
            return
        for entry in self.types:
            if entry.slot == slot:
                entry.kind = kind
                return
        self.types.append(TypeEntry(slot=slot, kind=kind))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "url": self.detail_url,
            "number": self.number,
            "height": self.height,
            "weight": self.weight,
            "base_experience": self.base_experience,
            "order": self.order,
            "image_url": self.image_url,
            "image_data": (base64.b64encode(self.image_data).decode("ascii")
                           if self.image_data is not None else None),
            "statistics": [
                {"kind": s.kind.api_name, "value": s.value, "effort": s.effort}
                for s in self.statistics
            ],
            "types": [{"slot": t.slot, "kind": t.kind.api_name} for t in self.types],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PokemonRecord":
        """Rebuild a record saved with to_dict. Raises ValueError on bad data."""
        try:
            image_data = data.get("image_data")
            record = cls(
                name=data["name"],
                detail_url=data["url"],
                number=int(data.get("number", 0)),
                height=int(data.get("height", 0)),
                weight=int(data.get("weight", 0)),
                base_experience=int(data.get("base_experience", 0)),
                order=int(data.get("order", 0)),
                image_url=data.get("image_url"),
                image_data=base64.b64decode(image_data) if image_data else None,
            )
            for stat in data.get("statistics", []):
                kind = StatKind.from_name(stat["kind"])
                if kind:
                    record.set_statistic(kind, int(stat["value"]), int(stat.get("effort", 0)))
            for entry in data.get("types", []):
                kind = PokemonType.from_name(entry["kind"])
                if kind:
                    record.set_type(int(entry["slot"]), kind)
        except (KeyError, TypeError, binascii.Error) as e:
            raise ValueError(f"bad record data: {e}") from e
        return record


def _trim_decimal(value: float) -> str:
    return f"{value:.1f}".rstrip("0").rstrip(".")


# ---- Server responses ----

_REQUIRED = object()


def _decode_json(data: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedResponseError(f"cannot decode JSON: {e}")
    if not isinstance(payload, dict):
        raise MalformedResponseError("expected a JSON object")
    return payload


def _get(obj: Any, key: str, expected: type, default: Any = _REQUIRED) -> Any:
    """Read a typed field; a null or missing field falls back to default if given."""
    if not isinstance(obj, dict):
        raise MalformedResponseError(f"expected an object holding '{key}'")
    value = obj.get(key)
    if value is None:
        if default is _REQUIRED:
            raise MalformedResponseError(f"missing '{key}'")
        return default
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise MalformedResponseError(f"'{key}' has the wrong type")
    return value


@dataclass
class CatalogPage:
    """One page of the catalog: {count, next, results: [{name, url}]}."""
    count: int
    next_url: Optional[str]
    entries: List[CatalogEntry]

    @classmethod
    def from_bytes(cls, data: bytes) -> "CatalogPage":
        payload = _decode_json(data)
        entries = []
        for item in _get(payload, "results", list):
            entries.append(CatalogEntry.from_url(_get(item, "name", str), _get(item, "url", str)))
        return cls(
            count=_get(payload, "count", int, 0),
            next_url=_get(payload, "next", str, None),
            entries=entries,
        )


@dataclass
class DetailStat:
    name: str
    base_stat: int
    effort: int


@dataclass
class DetailType:
    slot: int
    name: str


@dataclass
class PokemonDetail:
    """The details of a single Pokémon as served by /pokemon/{id}."""
    id: int
    name: str
    front_default: Optional[str]
    front_shiny: Optional[str]
    height: int
    weight: int
    base_experience: int
    order: int
    stats: List[DetailStat]
    types: List[DetailType]

    @classmethod
    def from_bytes(cls, data: bytes) -> "PokemonDetail":
        payload = _decode_json(data)
        sprites = _get(payload, "sprites", dict)
        stats = [
            DetailStat(
                name=_get(_get(item, "stat", dict), "name", str),
                base_stat=_get(item, "base_stat", int),
                effort=_get(item, "effort", int, 0),
            )
            for item in _get(payload, "stats", list)
        ]
        types = [
            DetailType(
                slot=_get(item, "slot", int),
                name=_get(_get(item, "type", dict), "name", str),
            )
            for item in _get(payload, "types", list)
        ]
        return cls(
            id=_get(payload, "id", int),
            name=_get(payload, "name", str),
            front_default=_get(sprites, "front_default", str, None),
            front_shiny=_get(sprites, "front_shiny", str, None),
            height=_get(payload, "height", int),
            weight=_get(payload, "weight", int),
            base_experience=_get(payload, "base_experience", int, 0),
            order=_get(payload, "order", int, 0),
            stats=stats,
            types=types,
        )
