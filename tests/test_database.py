import json

import pytest

from conftest import API
from database import PokemonDatabase
from errors import StoreUnavailableError, StoreWriteFailedError
from models import PokemonRecord, StatKind


def _record(name: str, number: int) -> PokemonRecord:
    return PokemonRecord(name=name, detail_url=f"{API}/{number}/", number=number)


def test_find_by_name_is_case_sensitive_exact_match(store) -> None:
    store.insert(_record("clefairy", 35))

    assert store.find_by_name("clefairy").number == 35
    assert store.find_by_name("Clefairy") is None
    assert store.find_by_name("clef") is None


def test_find_by_number(store) -> None:
    store.insert(_record("clefairy", 35))

    assert store.find_by_number(35).name == "clefairy"
    assert store.find_by_number(36) is None


def test_insert_rejects_duplicate_names(store) -> None:
    store.insert(_record("clefairy", 35))

    with pytest.raises(ValueError):
        store.insert(_record("clefairy", 35))


def test_all_pokemon_sorted_by_number_then_name(store) -> None:
    for name, number in [("pikachu", 25), ("missingno", 0), ("bulbasaur", 1), ("abra", 0)]:
        store.insert(_record(name, number))

    assert [r.name for r in store.all_pokemon()] == ["abra", "missingno", "bulbasaur", "pikachu"]


def test_search_by_name_or_number(store) -> None:
    for name, number in [("clefairy", 35), ("clefable", 36), ("pikachu", 25), ("porygon", 137)]:
        store.insert(_record(name, number))

    assert [r.name for r in store.search("CLEF")] == ["clefairy", "clefable"]
    assert [r.name for r in store.search("25")] == ["pikachu"]
    assert len(store.search("  ")) == 4


def test_save_all_writes_file_that_open_reloads(tmp_path) -> None:
    path = tmp_path / "records.json"
    store = PokemonDatabase(path)
    record = _record("clefairy", 35)
    record.set_statistic(StatKind.HP, 70)
    record.image_data = b"png bytes"
    store.insert(record)

    store.save_all()
    reopened = PokemonDatabase.open(path)

    assert reopened.find_by_name("clefairy") == record
    assert not (tmp_path / "records.json.tmp").exists()


def test_open_missing_file_gives_empty_store(tmp_path) -> None:
    assert len(PokemonDatabase.open(tmp_path / "absent.json")) == 0


def test_open_corrupt_file_is_unavailable(tmp_path) -> None:
    path = tmp_path / "records.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreUnavailableError):
        PokemonDatabase.open(path)


def test_open_file_with_bad_record_is_unavailable(tmp_path) -> None:
    path = tmp_path / "records.json"
    path.write_text(json.dumps({"pokemon": [{"number": 3}]}), encoding="utf-8")

    with pytest.raises(StoreUnavailableError):
        PokemonDatabase.open(path)


def test_save_all_failure_raises_store_write_failed(tmp_path) -> None:
    path = tmp_path / "records.json"
    path.mkdir()
    store = PokemonDatabase(path)
    store.insert(_record("clefairy", 35))

    with pytest.raises(StoreWriteFailedError):
        store.save_all()


def test_subscribers_are_notified_after_save(store) -> None:
    calls = []
    callback = lambda: calls.append("saved")
    store.subscribe(callback)

    store.save_all()
    store.unsubscribe(callback)
    store.save_all()

    assert calls == ["saved"]


def test_no_notification_when_save_fails(tmp_path) -> None:
    path = tmp_path / "records.json"
    path.mkdir()
    store = PokemonDatabase(path)
    calls = []
    store.subscribe(lambda: calls.append("saved"))

    with pytest.raises(StoreWriteFailedError):
        store.save_all()

    assert calls == []


def test_delete_all_and_restore(tmp_path) -> None:
    path = tmp_path / "records.json"
    store = PokemonDatabase(path)
    store.insert(_record("clefairy", 35))
    snapshot = store.snapshot()

    store.delete_all()
    assert len(PokemonDatabase.open(path)) == 0

    store.restore(snapshot)
    assert PokemonDatabase.open(path).find_by_name("clefairy") is not None


def test_closed_store_is_unavailable(store) -> None:
    store.close()

    with pytest.raises(StoreUnavailableError):
        store.find_by_name("clefairy")
    with pytest.raises(StoreUnavailableError):
        store.save_all()
