import json

import pytest

from conftest import API, SPRITES, detail_json, page_json
from errors import MalformedResponseError
from models import (
    CatalogEntry, CatalogPage, PokemonDetail, PokemonRecord, PokemonType, StatEntry, StatKind,
    guess_number, is_valid_url, slug_to_display, stat_color
)


@pytest.mark.parametrize("url, expected", [
    (f"{API}/35/", 35),
    (f"{API}/35", 35),
    (f"{API}/10118/", 10118),
    (f"{API}/clefairy/", None),
    ("https://pokeapi.co/", None),
])
def test_guess_number_reads_last_path_component(url, expected) -> None:
    assert guess_number(url) == expected


def test_catalog_entry_guesses_id_from_url() -> None:
    entry = CatalogEntry.from_url("clefairy", f"{API}/35/")

    assert entry.guessed_id == 35


def test_is_valid_url() -> None:
    assert is_valid_url(f"{SPRITES}/35.png")
    assert not is_valid_url("")
    assert not is_valid_url(None)
    assert not is_valid_url("/pokemon/35/")
    assert not is_valid_url("ftp://example.com/file")


def test_catalog_page_decodes_entries_and_next_url() -> None:
    page = CatalogPage.from_bytes(page_json([("bulbasaur", 1), ("ivysaur", 2)], next_url=f"{API}/?offset=100&limit=100"))

    assert page.count == 2
    assert page.next_url == f"{API}/?offset=100&limit=100"
    assert [(e.name, e.guessed_id) for e in page.entries] == [("bulbasaur", 1), ("ivysaur", 2)]


def test_catalog_page_last_page_has_no_next_url() -> None:
    assert CatalogPage.from_bytes(page_json([("mew", 151)])).next_url is None


@pytest.mark.parametrize("body", [
    b"",
    b"not json",
    b"[]",
    b'{"count": 1, "next": null}',
    b'{"count": 1, "next": null, "results": [{"name": 5, "url": "x"}]}',
    b'{"count": 1, "next": null, "results": "none"}',
])
def test_catalog_page_rejects_malformed_bodies(body) -> None:
    with pytest.raises(MalformedResponseError):
        CatalogPage.from_bytes(body)


def test_pokemon_detail_decodes_response() -> None:
    detail = PokemonDetail.from_bytes(detail_json(types=[(1, "fairy"), (2, "poison")]))

    assert detail.id == 35
    assert detail.name == "clefairy"
    assert detail.front_default == f"{SPRITES}/35.png"
    assert detail.front_shiny is None
    assert (detail.height, detail.weight, detail.base_experience, detail.order) == (6, 75, 113, 64)
    assert [(s.name, s.base_stat) for s in detail.stats][0] == ("hp", 70)
    assert [(t.slot, t.name) for t in detail.types] == [(1, "fairy"), (2, "poison")]


def test_pokemon_detail_treats_null_experience_and_order_as_zero() -> None:
    payload = json.loads(detail_json())
    payload["base_experience"] = None
    payload["order"] = None

    detail = PokemonDetail.from_bytes(json.dumps(payload).encode())

    assert detail.base_experience == 0
    assert detail.order == 0


@pytest.mark.parametrize("field", ["id", "weight", "sprites", "stats"])
def test_pokemon_detail_requires_fields(field) -> None:
    payload = json.loads(detail_json())
    del payload[field]

    with pytest.raises(MalformedResponseError):
        PokemonDetail.from_bytes(json.dumps(payload).encode())


def test_pokemon_detail_rejects_wrong_types() -> None:
    payload = json.loads(detail_json())
    payload["weight"] = "heavy"

    with pytest.raises(MalformedResponseError):
        PokemonDetail.from_bytes(json.dumps(payload).encode())


def test_stat_kind_from_api_name() -> None:
    assert StatKind.from_name("special-attack") is StatKind.SPECIAL_ATTACK
    assert StatKind.from_name("hp").label == "Health Points"
    assert StatKind.from_name("accuracy") is None


def test_pokemon_type_has_eighteen_members() -> None:
    assert len(PokemonType) == 18
    assert PokemonType.from_name("fairy") is PokemonType.FAIRY
    assert PokemonType.from_name("shadow") is None
    assert PokemonType.FIRE.color == "orange"


def test_record_statistics_are_unique_per_kind() -> None:
    record = PokemonRecord(name="clefairy", detail_url=f"{API}/35/")
    record.set_statistic(StatKind.HP, 50)
    record.set_statistic(StatKind.ATTACK, 45)
    record.set_statistic(StatKind.HP, 70)

    assert len(record.statistics) == 2
    assert record.statistics[0] == StatEntry(StatKind.HP, 70)
    assert record.total_statistic == 115


def test_record_types_are_keyed_by_slot() -> None:
    record = PokemonRecord(name="clefairy", detail_url=f"{API}/35/")
    record.set_type(2, PokemonType.POISON)
    record.set_type(1, PokemonType.NORMAL)
    record.set_type(1, PokemonType.FAIRY)
    record.set_type(3, PokemonType.FIRE)

    assert [(t.slot, t.kind) for t in record.sorted_types] == [(1, PokemonType.FAIRY), (2, PokemonType.POISON)]


def test_record_zero_weight_means_not_downloaded() -> None:
    record = PokemonRecord(name="clefairy", detail_url=f"{API}/35/", number=35)

    assert not record.has_been_downloaded
    record.weight = 75
    assert record.has_been_downloaded


def test_record_presentation_helpers() -> None:
    record = PokemonRecord(name="mr-mime", detail_url=f"{API}/122/", number=122, height=13, weight=545)

    assert record.display_name == "Mr. Mime"
    assert record.formatted_number == "0122"
    assert record.weight_description == "54.5 kg"
    assert record.height_description == "1.3 m"
    assert slug_to_display("zygarde-10-power-construct") == "Zygarde 10 Power Construct"


def test_record_survives_serialisation_with_image_data() -> None:
    record = PokemonRecord(name="clefairy", detail_url=f"{API}/35/", number=35, weight=75,
                           image_url=f"{SPRITES}/35.png", image_data=b"\x89PNG\x00\xff")
    record.set_statistic(StatKind.HP, 70, effort=2)
    record.set_type(1, PokemonType.FAIRY)

    restored = PokemonRecord.from_dict(json.loads(json.dumps(record.to_dict())))

    assert restored == record


def test_record_from_bad_dict_raises_value_error() -> None:
    with pytest.raises(ValueError):
        PokemonRecord.from_dict({"name": "clefairy"})


@pytest.mark.parametrize("value, color", [
    (0, "red"), (29, "red"), (30, "orange"), (60, "yellow"), (90, "green"),
    (120, "cyan"), (150, "blue"), (179, "blue"), (180, "purple"), (255, "purple"),
])
def test_stat_color_bands(value, color) -> None:
    assert stat_color(value) == color


def test_record_has_image_once_data_is_stored() -> None:
    record = PokemonRecord(name="clefairy", detail_url=f"{API}/35/", image_url=f"{SPRITES}/35.png")

    assert not record.has_image
    record.image_data = b"png"
    assert record.has_image
