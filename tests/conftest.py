"""Shared pytest fixtures for all test suites."""

import asyncio
from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest

from tpass.adapters.calendar_sources import CalendarFetchResult, DataSourceUnavailableError
from tpass.adapters.provenance import provenance_for_http
from tpass.calendar.service import CalendarService
from tpass.calendar.store import CalendarCacheStore
from tpass.config import Settings
from tpass.models.calendar import CalendarEntry

TODAY = date(2024, 10, 15)


def _holiday(day: date, name: str) -> CalendarEntry:
    return CalendarEntry(date=day, is_working_day=False, is_holiday=True, name=name)


CALENDAR_ENTRIES: dict[int, list[CalendarEntry]] = {
    2024: [
        _holiday(date(2024, 10, 10), "國慶日"),
        # Saturday holiday observed on the Friday before
        _holiday(date(2024, 10, 11), "國慶日補假"),
    ],
    2025: [
        _holiday(date(2025, 1, 1), "開國紀念日"),
        _holiday(date(2025, 1, 28), "農曆除夕"),
        _holiday(date(2025, 1, 29), "春節"),
        # Saturday make-up working day
        CalendarEntry(
            date=date(2025, 2, 8), is_working_day=True, is_holiday=False, name="補行上班"
        ),
    ],
}


class FakeGateway:
    """Stands in for CalendarSourceGateway; records every requested year."""

    def __init__(
        self,
        entries: dict[int, list[CalendarEntry]] | None = None,
        fail_years: set[int] | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.entries = CALENDAR_ENTRIES if entries is None else entries
        self.fail_years = fail_years or set()
        self.gate = gate
        self.calls: list[int] = []

    @property
    def source_names(self) -> list[str]:
        return ["fake"]

    async def fetch_year(self, year: int) -> CalendarFetchResult:
        self.calls.append(year)
        if self.gate is not None:
            await self.gate.wait()
        if year in self.fail_years:
            raise DataSourceUnavailableError(year, ["fake: 503 Service Unavailable"])
        return CalendarFetchResult(
            year=year,
            source="fake",
            entries=list(self.entries.get(year, [])),
            provenance=provenance_for_http("fake", f"https://calendar.test/{year}.json"),
        )


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def fake_gateway_cls() -> type[FakeGateway]:
    """FakeGateway class, for tests needing failures or gating."""
    return FakeGateway


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def store(tmp_path: Path) -> CalendarCacheStore:
    return CalendarCacheStore(tmp_path / "calendar-cache.json")


@pytest.fixture
def make_service(
    store: CalendarCacheStore,
) -> Callable[..., CalendarService]:
    """Build a CalendarService around a gateway with the fixed test clock."""

    def _make(gateway: FakeGateway, today: date = TODAY, max_age_days: int = 30) -> CalendarService:
        return CalendarService(
            gateway,  # type: ignore[arg-type]
            store,
            max_age_days=max_age_days,
            today_fn=lambda: today,
        )

    return _make


@pytest.fixture
def calendar_service(
    gateway: FakeGateway, make_service: Callable[..., CalendarService]
) -> CalendarService:
    return make_service(gateway)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(calendar_cache_path=tmp_path / "calendar-cache.json")
