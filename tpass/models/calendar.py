"""Calendar models - working-day facts and their persisted cache shape."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tpass.models.common import DataQuality, Provenance


class CalendarEntry(BaseModel):
    """Classification of one civil date.

    is_working_day and is_holiday are normally complementary; neither is forced.
    A non-empty name marks the day as worth showing in holiday reports.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    date: date
    is_working_day: bool
    is_holiday: bool
    name: str | None = None
    description: str | None = None


class CalendarCacheMetadata(BaseModel):
    """Freshness and provenance of the persisted calendar cache."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str = "1.0.0"
    last_updated: date
    source: str
    years_covered: list[int] = Field(default_factory=list)

    def age_days(self, today: date) -> int:
        """Whole days elapsed since the last successful fetch."""
        return (today - self.last_updated).days


class CalendarCache(BaseModel):
    """On-disk document: metadata plus every known entry."""

    metadata: CalendarCacheMetadata
    entries: list[CalendarEntry]


class ServiceState(str, Enum):
    """Calendar service lifecycle."""

    uninitialized = "uninitialized"
    initializing = "initializing"
    ready = "ready"


class CalendarStatus(BaseModel):
    """Snapshot of the calendar service for status endpoints."""

    state: ServiceState
    quality: DataQuality | None
    entry_count: int
    source: str
    last_updated: date | None
    years_covered: list[int]
    providers: list[str] = Field(default_factory=list)  # priority order
    last_fetch: Provenance | None = None


class WorkingDayPeriod(BaseModel):
    """Working-day summary for an inclusive date range."""

    start_date: date
    end_date: date
    total_days: int
    working_days: int
    holidays: int


class HolidayDetail(BaseModel):
    """A named holiday falling inside the pass period."""

    date: date
    name: str
    day_of_week: str
    is_weekend: bool


class HolidayDetails(BaseModel):
    """Holidays inside the pass period, ascending by date."""

    total_holidays: int
    holiday_list: list[HolidayDetail]
