"""Cross-month fare calculation.

The frequent-rider discount resets on the 1st of every month, so a pass period
that straddles months is priced month by month: each segment gets the tier for
its own trip count. The single-discount result over the whole period is kept
alongside for comparison.
"""

import calendar
import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from tpass.calendar.service import CalendarService
from tpass.models.fare import CrossMonthCalculation, MonthlySegment, PreviousCalculation
from tpass.pricing.discount import apply_discount, tier_for
from tpass.pricing.month_splitter import DateSegment, detect_month_boundary, split_by_month

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


class InvalidCalculationInputError(ValueError):
    """Calculation input rejected before any calendar work."""

    pass


def pass_end_date(start: date, window_days: int = DEFAULT_WINDOW_DAYS) -> date:
    """Last valid day of a pass starting on start (inclusive window)."""
    return start + timedelta(days=window_days - 1)


def allocate_working_days(segments: list[DateSegment], custom_working_days: int) -> list[int]:
    """Share a working-day override across segments in proportion to their length.

    Each share is rounded half-up on its own, so the shares can sum to a value
    that differs from the override by up to len(segments) - 1.
    """
    total_days = sum(s.days for s in segments)
    return [
        int(
            (Decimal(s.days) * custom_working_days / total_days).quantize(
                Decimal(1), rounding=ROUND_HALF_UP
            )
        )
        for s in segments
    ]


def price_segment(
    segment: DateSegment, working_days: int, fare_per_trip: Decimal, trips_per_day: int
) -> MonthlySegment:
    """Apply the tier for this month's trips to this month's cost."""
    trips = working_days * trips_per_day
    original_cost = fare_per_trip * trips
    tier = tier_for(trips)
    discount = original_cost * tier.discount_rate
    return MonthlySegment(
        year=segment.start.year,
        month=segment.start.month,
        month_name=calendar.month_name[segment.start.month],
        start_date=segment.start,
        end_date=segment.end,
        days=segment.days,
        working_days=working_days,
        trips=trips,
        base_fare=fare_per_trip,
        discount_tier=tier.percent,
        discount_rate=tier.discount_rate,
        discount_amount=discount,
        original_cost=original_cost,
        final_cost=original_cost - discount,
    )


def validate_inputs(
    fare_per_trip: Decimal,
    trips_per_day: int,
    custom_working_days: int | None,
    window_days: int,
) -> None:
    """Raises InvalidCalculationInputError for out-of-range input."""
    if not fare_per_trip.is_finite() or fare_per_trip <= 0:
        raise InvalidCalculationInputError(f"fare per trip must be positive, got {fare_per_trip}")
    if trips_per_day < 1:
        raise InvalidCalculationInputError(f"trips per day must be at least 1, got {trips_per_day}")
    if window_days < 1:
        raise InvalidCalculationInputError(f"pass window must be at least 1 day, got {window_days}")
    if custom_working_days is not None and not 0 <= custom_working_days <= window_days:
        raise InvalidCalculationInputError(
            f"custom working days must be between 0 and {window_days}, got {custom_working_days}"
        )


class CrossMonthCalculator:
    """Prices a pass period month by month using the shared calendar."""

    def __init__(
        self, calendar_service: CalendarService, window_days: int = DEFAULT_WINDOW_DAYS
    ) -> None:
        self._calendar = calendar_service
        self._window_days = window_days

    async def calculate(
        self,
        start_date: date,
        fare_per_trip: Decimal | int | str,
        trips_per_day: int = 2,
        custom_working_days: int | None = None,
        window_days: int | None = None,
    ) -> CrossMonthCalculation:
        """Calculate per-month discounted regular fare for one pass period.

        Args:
            start_date: First day of the pass
            fare_per_trip: One-way fare
            trips_per_day: Trips per working day
            custom_working_days: Optional override for the period's working days
            window_days: Pass length (default: calculator's window)

        Returns:
            CrossMonthCalculation with one segment per calendar month

        Raises:
            InvalidCalculationInputError: On out-of-range input
            CalendarUnavailableError: If a required calendar year can't be fetched
        """
        window = window_days if window_days is not None else self._window_days
        try:
            fare = Decimal(str(fare_per_trip))
        except InvalidOperation as e:
            raise InvalidCalculationInputError(
                f"fare per trip is not a number: {fare_per_trip!r}"
            ) from e
        validate_inputs(fare, trips_per_day, custom_working_days, window)

        end_date = pass_end_date(start_date, window)
        await self._calendar.ensure_data_for_period(start_date, end_date)

        date_segments = split_by_month(start_date, end_date)
        if custom_working_days is not None:
            working_days = allocate_working_days(date_segments, custom_working_days)
        else:
            working_days = [
                self._calendar.count_working_days(s.start, s.end) for s in date_segments
            ]

        segments = [
            price_segment(seg, days, fare, trips_per_day)
            for seg, days in zip(date_segments, working_days)
        ]

        total_trips = sum(s.trips for s in segments)
        total_original_cost = sum((s.original_cost for s in segments), Decimal(0))
        total_discount_amount = sum((s.discount_amount for s in segments), Decimal(0))
        total_final_cost = sum((s.final_cost for s in segments), Decimal(0))

        crosses = detect_month_boundary(start_date, end_date)
        previous = None
        if crosses:
            single_discount_cost = apply_discount(fare * total_trips, total_trips)
            previous = PreviousCalculation(
                total_cost=single_discount_cost,
                difference=total_final_cost - single_discount_cost,
            )
            logger.debug(
                "Cross-month period %s..%s: per-month %s vs single-discount %s",
                start_date,
                end_date,
                total_final_cost,
                single_discount_cost,
            )

        return CrossMonthCalculation(
            start_date=start_date,
            end_date=end_date,
            fare_per_trip=fare,
            trips_per_day=trips_per_day,
            custom_working_days=custom_working_days,
            total_days=(end_date - start_date).days + 1,
            total_working_days=sum(s.working_days for s in segments),
            total_trips=total_trips,
            crosses_month_boundary=crosses,
            segments=segments,
            total_original_cost=total_original_cost,
            total_discount_amount=total_discount_amount,
            total_final_cost=total_final_cost,
            previous_calculation=previous,
            data_quality=self._calendar.data_quality,
        )
