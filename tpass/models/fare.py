"""Fare calculation models - requests, monthly segments, and comparisons."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from tpass.models.calendar import HolidayDetails, WorkingDayPeriod
from tpass.models.common import DataQuality, Money, Recommendation


class CalculationRequest(BaseModel):
    """Caller input; omitted fields fall back to configured defaults."""

    start_date: date | None = None
    one_way_fare: Decimal | None = Field(default=None, gt=0)
    trips_per_day: int | None = Field(default=None, ge=1)
    custom_working_days: int | None = Field(default=None, ge=0)


class MonthlySegment(BaseModel):
    """The part of a pass period that falls in one calendar month."""

    year: int
    month: int = Field(..., ge=1, le=12)
    month_name: str
    start_date: date
    end_date: date
    days: int
    working_days: int
    trips: int
    base_fare: Money
    discount_tier: int  # percent: 0, 5, 10 or 15
    discount_rate: Decimal
    discount_amount: Money
    original_cost: Money
    final_cost: Money


class PreviousCalculation(BaseModel):
    """What a single discount over the whole period would have charged."""

    method: Literal["single-discount"] = "single-discount"
    total_cost: Money
    difference: Money  # total_final_cost - total_cost


class CrossMonthCalculation(BaseModel):
    """Per-month discounted fare for one pass period."""

    start_date: date
    end_date: date
    fare_per_trip: Money
    trips_per_day: int
    custom_working_days: int | None = None

    total_days: int
    total_working_days: int
    total_trips: int

    crosses_month_boundary: bool
    segments: list[MonthlySegment]

    total_original_cost: Money
    total_discount_amount: Money
    total_final_cost: Money

    previous_calculation: PreviousCalculation | None = None
    data_quality: DataQuality


class AppliedDiscount(BaseModel):
    """Single-tier discount for the whole period, shown for reference only."""

    min_trips: int
    max_trips: int | None
    discount_rate: Decimal
    description: str


class FareComparison(BaseModel):
    """Monthly pass versus per-trip fare for one pass period."""

    start_date: date
    one_way_fare: Money
    trips_per_day: int

    period: WorkingDayPeriod
    total_trips: int
    applied_discount: AppliedDiscount

    pass_cost: Money
    regular_cost: Money
    regular_cost_before_discount: Money
    naive_regular_cost: Money | None = None
    savings_amount: Money
    savings_percentage: float

    recommendation: Recommendation
    recommendation_reason: str

    breakdown: CrossMonthCalculation
    holiday_details: HolidayDetails
    data_quality: DataQuality
    warnings: list[str] = Field(default_factory=list)
