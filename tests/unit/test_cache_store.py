"""Tests for the calendar cache file store."""

import json
from datetime import date
from pathlib import Path

from tpass.calendar.store import CacheLoadStatus, CalendarCacheStore
from tpass.models.calendar import CalendarCacheMetadata, CalendarEntry


def _metadata() -> CalendarCacheMetadata:
    return CalendarCacheMetadata(
        last_updated=date(2024, 10, 1), source="fake", years_covered=[2024]
    )


def _entries() -> list[CalendarEntry]:
    return [
        CalendarEntry(
            date=date(2024, 10, 11), is_working_day=False, is_holiday=True, name="國慶日補假"
        ),
        CalendarEntry(
            date=date(2024, 10, 10), is_working_day=False, is_holiday=True, name="國慶日"
        ),
        CalendarEntry(
            date=date(2024, 10, 5),
            is_working_day=True,
            is_holiday=False,
            name="補行上班",
            description="Saturday make-up working day",
        ),
    ]


def test_load_missing_file(store: CalendarCacheStore) -> None:
    loaded = store.load()

    assert loaded.status == CacheLoadStatus.NOT_FOUND
    assert loaded.found is False
    assert loaded.cache is None


def test_save_then_load(store: CalendarCacheStore) -> None:
    store.save(_metadata(), _entries())

    loaded = store.load()

    assert loaded.found
    assert loaded.cache is not None
    assert loaded.cache.metadata.years_covered == [2024]
    assert loaded.cache.metadata.last_updated == date(2024, 10, 1)
    # Entries come back whole, in date order
    assert loaded.cache.entries == sorted(_entries(), key=lambda e: e.date)
    assert [e.date for e in loaded.cache.entries] == [
        date(2024, 10, 5),
        date(2024, 10, 10),
        date(2024, 10, 11),
    ]


def test_saved_document_uses_camel_case_keys(store: CalendarCacheStore) -> None:
    store.save(_metadata(), _entries())

    document = json.loads(store.path.read_text(encoding="utf-8"))

    assert document["metadata"]["lastUpdated"] == "2024-10-01"
    assert document["metadata"]["yearsCovered"] == [2024]
    national_day = document["entries"][1]
    assert national_day == {
        "date": "2024-10-10",
        "isWorkingDay": False,
        "isHoliday": True,
        "name": "國慶日",
        "description": None,
    }
    # Non-ASCII names are stored readably
    assert "國慶日" in store.path.read_text(encoding="utf-8")


def test_save_backs_up_previous_file(store: CalendarCacheStore) -> None:
    store.save(_metadata(), _entries()[:1])
    first_document = store.path.read_text(encoding="utf-8")

    store.save(_metadata(), _entries())

    backups = list(store.path.parent.glob(f"{store.path.name}.backup.*.json"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == first_document

    loaded = store.load()
    assert loaded.cache is not None
    assert len(loaded.cache.entries) == 3


def test_save_leaves_no_temp_files(store: CalendarCacheStore) -> None:
    store.save(_metadata(), _entries())

    leftovers = [p for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_save_creates_parent_directory(tmp_path: Path) -> None:
    store = CalendarCacheStore(tmp_path / "nested" / "data" / "calendar-cache.json")

    store.save(_metadata(), _entries())

    assert store.path.exists()


def test_load_corrupt_json(store: CalendarCacheStore) -> None:
    store.path.write_text("{not json", encoding="utf-8")

    loaded = store.load()

    assert loaded.status == CacheLoadStatus.CORRUPT
    assert loaded.cache is None
    assert loaded.error


def test_load_document_missing_fields(store: CalendarCacheStore) -> None:
    store.path.write_text(json.dumps({"entries": []}), encoding="utf-8")

    loaded = store.load()

    assert loaded.status == CacheLoadStatus.CORRUPT


def test_backup_path_naming(tmp_path: Path) -> None:
    store = CalendarCacheStore(tmp_path / "calendar-cache.json")

    assert store.backup_path(1700000000000).name == "calendar-cache.json.backup.1700000000000.json"
