"""Month boundary detection and splitting for cross-month pass periods."""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True)
class DateSegment:
    """Inclusive date range inside a single calendar month."""

    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def detect_month_boundary(start: date, end: date) -> bool:
    """True if the range spans more than one calendar month."""
    return start.year != end.year or start.month != end.month


def split_by_month(start: date, end: date) -> list[DateSegment]:
    """Split [start, end] into one segment per calendar month touched.

    Segments are ordered, contiguous, and together cover the range exactly.

    Raises:
        ValueError: If end is before start
    """
    if end < start:
        raise ValueError(f"end {end} is before start {start}")

    segments: list[DateSegment] = []
    current = start
    while current <= end:
        segment_end = min(last_day_of_month(current), end)
        segments.append(DateSegment(start=current, end=segment_end))
        current = segment_end + timedelta(days=1)
    return segments
