"""Tests for per-month fare calculation."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal

import pytest

from tpass.calendar.service import CalendarService, CalendarUnavailableError
from tpass.models.common import DataQuality
from tpass.pricing.calculator import (
    CrossMonthCalculator,
    InvalidCalculationInputError,
    allocate_working_days,
    pass_end_date,
)
from tpass.pricing.month_splitter import split_by_month


@pytest.fixture
def calculator(calendar_service: CalendarService) -> CrossMonthCalculator:
    return CrossMonthCalculator(calendar_service)


def test_pass_end_date_is_inclusive() -> None:
    assert pass_end_date(date(2024, 10, 1)) == date(2024, 10, 30)
    assert pass_end_date(date(2024, 10, 31)) == date(2024, 11, 29)
    assert pass_end_date(date(2024, 10, 1), window_days=1) == date(2024, 10, 1)


def test_allocate_working_days_proportionally() -> None:
    segments = split_by_month(date(2024, 10, 31), date(2024, 11, 29))

    assert allocate_working_days(segments, 20) == [1, 19]
    assert allocate_working_days(segments, 0) == [0, 0]


def test_allocate_working_days_rounds_each_share_half_up() -> None:
    """Three segments of 1, 28 and 1 days: each half share rounds up."""
    segments = split_by_month(date(2025, 1, 31), date(2025, 3, 1))
    assert [s.days for s in segments] == [1, 28, 1]

    shares = allocate_working_days(segments, 15)

    assert shares == [1, 14, 1]
    # Shares are not reconciled back to the override
    assert sum(shares) == 16


@pytest.mark.asyncio
async def test_month_straddling_period_with_override(calculator: CrossMonthCalculator) -> None:
    result = await calculator.calculate(
        date(2024, 10, 31), Decimal(35), trips_per_day=2, custom_working_days=20
    )

    assert result.end_date == date(2024, 11, 29)
    assert result.crosses_month_boundary is True
    assert len(result.segments) == 2

    october, november = result.segments
    assert (october.year, october.month, october.month_name) == (2024, 10, "October")
    assert october.days == 1
    assert october.working_days == 1
    assert october.trips == 2
    assert october.discount_tier == 0
    assert october.final_cost == Decimal(70)

    assert (november.year, november.month) == (2024, 11)
    assert november.days == 29
    assert november.working_days == 19
    assert november.trips == 38
    assert november.discount_tier == 10
    assert november.original_cost == Decimal(1330)
    assert november.discount_amount == Decimal(133)
    assert november.final_cost == Decimal(1197)

    assert result.total_trips == 40
    assert result.total_original_cost == Decimal(1400)
    assert result.total_final_cost == Decimal(1267)

    assert result.previous_calculation is not None
    assert result.previous_calculation.method == "single-discount"
    assert result.previous_calculation.total_cost == Decimal(1260)
    assert result.previous_calculation.difference == Decimal(7)


@pytest.mark.asyncio
async def test_single_month_period(calculator: CrossMonthCalculator) -> None:
    result = await calculator.calculate(date(2024, 10, 1), 40, trips_per_day=2)

    assert result.crosses_month_boundary is False
    assert result.previous_calculation is None
    assert len(result.segments) == 1

    segment = result.segments[0]
    assert segment.start_date == date(2024, 10, 1)
    assert segment.end_date == date(2024, 10, 30)
    # 22 weekdays minus National Day and its observed Friday
    assert segment.working_days == 20
    assert segment.trips == 40
    assert segment.discount_tier == 10
    assert result.total_final_cost == Decimal(1440)
    assert result.data_quality == DataQuality.fresh


@pytest.mark.asyncio
async def test_year_boundary_period(
    gateway, calculator: CrossMonthCalculator
) -> None:
    result = await calculator.calculate(date(2024, 12, 20), 40, trips_per_day=2)

    assert result.end_date == date(2025, 1, 18)
    assert gateway.calls == [2024, 2025]

    december, january = result.segments
    assert (december.year, december.month, december.month_name) == (2024, 12, "December")
    assert (january.year, january.month, january.month_name) == (2025, 1, "January")

    assert december.working_days == 8
    assert december.discount_tier == 5
    assert december.final_cost == Decimal(608)

    # New Year's Day is excluded
    assert january.working_days == 12
    assert january.discount_tier == 10
    assert january.final_cost == Decimal(864)

    assert result.total_final_cost == Decimal(1472)
    assert result.previous_calculation is not None
    assert result.previous_calculation.total_cost == Decimal(1440)
    assert result.previous_calculation.difference == Decimal(32)


@pytest.mark.asyncio
async def test_totals_match_segments(calculator: CrossMonthCalculator) -> None:
    result = await calculator.calculate(date(2024, 12, 20), "32.5", trips_per_day=3)

    assert result.total_trips == sum(s.trips for s in result.segments)
    assert result.total_final_cost == sum(s.final_cost for s in result.segments)
    assert result.total_original_cost - result.total_discount_amount == result.total_final_cost
    assert result.total_days == 30


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("fare", "trips_per_day", "custom"),
    [
        (0, 2, None),
        (-5, 2, None),
        ("not-a-number", 2, None),
        ("NaN", 2, None),
        (40, 0, None),
        (40, 2, -1),
        (40, 2, 31),
    ],
)
async def test_invalid_input_rejected_before_calendar_work(
    gateway, calculator: CrossMonthCalculator, fare, trips_per_day, custom
) -> None:
    with pytest.raises(InvalidCalculationInputError):
        await calculator.calculate(
            date(2024, 10, 1), fare, trips_per_day=trips_per_day, custom_working_days=custom
        )

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_custom_days_bounded_by_window(calculator: CrossMonthCalculator) -> None:
    result = await calculator.calculate(date(2024, 10, 1), 40, custom_working_days=30)

    assert result.total_working_days == 30


@pytest.mark.asyncio
async def test_calendar_unavailable_propagates(
    fake_gateway_cls, make_service: Callable[..., CalendarService]
) -> None:
    calculator = CrossMonthCalculator(make_service(fake_gateway_cls(fail_years={2025})))

    with pytest.raises(CalendarUnavailableError):
        await calculator.calculate(date(2024, 12, 20), 40)
