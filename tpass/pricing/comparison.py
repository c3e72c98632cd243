"""Monthly pass versus regular fare comparison."""

import logging
from collections.abc import Callable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from tpass.calendar.service import CalendarService
from tpass.config import Settings
from tpass.models.common import DataQuality, Recommendation
from tpass.models.fare import (
    AppliedDiscount,
    CalculationRequest,
    CrossMonthCalculation,
    FareComparison,
)
from tpass.pricing.calculator import CrossMonthCalculator, InvalidCalculationInputError
from tpass.pricing.discount import all_tiers, tier_for
from tpass.pricing.holidays import extract_holiday_details

logger = logging.getLogger(__name__)

PAST_START_WARNING = "Warning: Selected start date is in the past"
DEGRADED_WARNING = "Calendar data may be out of date; working days use the last cached calendar"
HEURISTIC_WARNING = "Calendar data unavailable; working days estimated as Monday to Friday"


def format_currency(amount: Decimal) -> str:
    """Whole-dollar NTD display string."""
    return f"NT${amount.quantize(Decimal(1), rounding=ROUND_HALF_UP)}"


class FareComparisonService:
    """Resolves request defaults, runs the calculator, and builds the recommendation."""

    def __init__(
        self,
        calendar_service: CalendarService,
        settings: Settings,
        today_fn: Callable[[], date] | None = None,
    ) -> None:
        self._calendar = calendar_service
        self._settings = settings
        self._today = today_fn or date.today
        self._calculator = CrossMonthCalculator(
            calendar_service, window_days=settings.pass_validity_days
        )

    def _resolve(self, request: CalculationRequest) -> tuple[date, Decimal, int]:
        start = request.start_date or self._today()
        fare = (
            request.one_way_fare
            if request.one_way_fare is not None
            else Decimal(self._settings.default_one_way_fare)
        )
        trips_per_day = request.trips_per_day or self._settings.default_trips_per_day

        s = self._settings
        if not s.min_fare <= fare <= s.max_fare:
            raise InvalidCalculationInputError(
                f"one-way fare must be between {s.min_fare} and {s.max_fare}, got {fare}"
            )
        if not s.min_trips_per_day <= trips_per_day <= s.max_trips_per_day:
            raise InvalidCalculationInputError(
                f"trips per day must be between {s.min_trips_per_day} "
                f"and {s.max_trips_per_day}, got {trips_per_day}"
            )
        return start, fare, trips_per_day

    async def breakdown(self, request: CalculationRequest) -> CrossMonthCalculation:
        """Per-month breakdown for the pass period starting at the requested date."""
        start, fare, trips_per_day = self._resolve(request)
        return await self._calculator.calculate(
            start, fare, trips_per_day, custom_working_days=request.custom_working_days
        )

    async def compare(self, request: CalculationRequest) -> FareComparison:
        """Compare the monthly pass with per-month discounted regular fare.

        Raises:
            InvalidCalculationInputError: On out-of-range input
            CalendarUnavailableError: If a required calendar year can't be fetched
        """
        start, fare, trips_per_day = self._resolve(request)
        calc = await self._calculator.calculate(
            start, fare, trips_per_day, custom_working_days=request.custom_working_days
        )

        period = self._calendar.working_day_period(calc.start_date, calc.end_date)
        working_days = (
            request.custom_working_days
            if request.custom_working_days is not None
            else period.working_days
        )
        total_trips = working_days * trips_per_day

        # Whole-period tier, for display only; the cost uses per-month tiers
        tier = tier_for(total_trips)
        applied = AppliedDiscount(
            min_trips=tier.min_trips,
            max_trips=tier.max_trips,
            discount_rate=tier.discount_rate,
            description=tier.describe(),
        )

        pass_cost = Decimal(self._settings.pass_price)
        regular_cost = calc.total_final_cost
        savings = pass_cost - regular_cost
        savings_percentage = float(savings / regular_cost) if regular_cost else 0.0

        if pass_cost < regular_cost:
            recommendation = Recommendation.BUY_PASS
            reason = f"Save {format_currency(abs(savings))} with TPASS monthly pass"
        else:
            recommendation = Recommendation.USE_REGULAR
            reason = (
                f"Save {format_currency(abs(savings))} by using regular fare "
                "with frequent rider discount"
            )

        warnings: list[str] = []
        if start < self._today():
            warnings.append(PAST_START_WARNING)
        if calc.data_quality == DataQuality.degraded:
            warnings.append(DEGRADED_WARNING)
        elif calc.data_quality == DataQuality.heuristic:
            warnings.append(HEURISTIC_WARNING)

        logger.info(
            "Fare comparison %s..%s: pass %s vs regular %s -> %s",
            calc.start_date,
            calc.end_date,
            pass_cost,
            regular_cost,
            recommendation.value,
        )

        return FareComparison(
            start_date=start,
            one_way_fare=fare,
            trips_per_day=trips_per_day,
            period=period,
            total_trips=total_trips,
            applied_discount=applied,
            pass_cost=pass_cost,
            regular_cost=regular_cost,
            regular_cost_before_discount=fare * total_trips,
            naive_regular_cost=(
                calc.previous_calculation.total_cost if calc.previous_calculation else None
            ),
            savings_amount=savings,
            savings_percentage=savings_percentage,
            recommendation=recommendation,
            recommendation_reason=reason,
            breakdown=calc,
            holiday_details=extract_holiday_details(
                self._calendar, calc.start_date, calc.end_date
            ),
            data_quality=calc.data_quality,
            warnings=warnings,
        )

    def discount_info(self) -> dict[str, Any]:
        """Frequent-rider tiers and monthly pass facts."""
        return {
            "frequent_rider_program": {
                "discount_tiers": all_tiers(),
                "reset_cycle": "Monthly on the 1st",
                "eligibility": "All Taipei Metro users",
            },
            "pass_program": {
                "price": format_currency(Decimal(self._settings.pass_price)),
                "validity": f"{self._settings.pass_validity_days} consecutive days",
                "benefits": [
                    "Unlimited trips within validity period",
                    "No need to track trip count",
                ],
                "coverage": "Taipei Metro system",
            },
            "comparison_tip": (
                "TPASS is typically beneficial for commuters making 30+ trips per month"
            ),
        }
