"""Tests for month boundary detection and splitting."""

from datetime import date, timedelta

import pytest

from tpass.pricing.month_splitter import (
    DateSegment,
    detect_month_boundary,
    last_day_of_month,
    split_by_month,
)


def test_last_day_of_month_handles_leap_years() -> None:
    assert last_day_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
    assert last_day_of_month(date(2025, 2, 10)) == date(2025, 2, 28)
    assert last_day_of_month(date(2024, 12, 1)) == date(2024, 12, 31)


def test_detect_month_boundary() -> None:
    assert detect_month_boundary(date(2024, 10, 1), date(2024, 10, 30)) is False
    assert detect_month_boundary(date(2024, 10, 31), date(2024, 11, 29)) is True
    # Same month number, different year
    assert detect_month_boundary(date(2024, 1, 5), date(2025, 1, 5)) is True


def test_single_month() -> None:
    segments = split_by_month(date(2024, 10, 1), date(2024, 10, 30))

    assert segments == [DateSegment(start=date(2024, 10, 1), end=date(2024, 10, 30))]
    assert segments[0].days == 30


def test_leap_february() -> None:
    segments = split_by_month(date(2024, 2, 15), date(2024, 3, 15))

    assert [(s.start, s.end) for s in segments] == [
        (date(2024, 2, 15), date(2024, 2, 29)),
        (date(2024, 3, 1), date(2024, 3, 15)),
    ]
    assert [s.days for s in segments] == [15, 15]


def test_non_leap_february() -> None:
    segments = split_by_month(date(2025, 2, 15), date(2025, 3, 16))

    assert segments[0].end == date(2025, 2, 28)
    assert [s.days for s in segments] == [14, 16]


def test_year_rollover() -> None:
    segments = split_by_month(date(2024, 12, 20), date(2025, 1, 18))

    assert [(s.start, s.end) for s in segments] == [
        (date(2024, 12, 20), date(2024, 12, 31)),
        (date(2025, 1, 1), date(2025, 1, 18)),
    ]


def test_single_day() -> None:
    segments = split_by_month(date(2024, 10, 31), date(2024, 10, 31))

    assert len(segments) == 1
    assert segments[0].days == 1


def test_segments_partition_the_range() -> None:
    start = date(2024, 1, 17)
    end = date(2024, 7, 3)

    segments = split_by_month(start, end)

    assert segments[0].start == start
    assert segments[-1].end == end
    for current, following in zip(segments, segments[1:]):
        assert following.start == current.end + timedelta(days=1)
        assert current.start.month == current.end.month
    assert sum(s.days for s in segments) == (end - start).days + 1


def test_end_before_start_rejected() -> None:
    with pytest.raises(ValueError):
        split_by_month(date(2024, 10, 2), date(2024, 10, 1))
