"""Models package - re-exports for convenience."""

from tpass.models.calendar import (
    CalendarCache,
    CalendarCacheMetadata,
    CalendarEntry,
    CalendarStatus,
    HolidayDetail,
    HolidayDetails,
    ServiceState,
    WorkingDayPeriod,
)
from tpass.models.common import DataQuality, Money, Provenance, Recommendation
from tpass.models.fare import (
    AppliedDiscount,
    CalculationRequest,
    CrossMonthCalculation,
    FareComparison,
    MonthlySegment,
    PreviousCalculation,
)

__all__ = [
    # Common
    "DataQuality",
    "Money",
    "Provenance",
    "Recommendation",
    # Calendar
    "CalendarEntry",
    "CalendarCacheMetadata",
    "CalendarCache",
    "CalendarStatus",
    "ServiceState",
    "WorkingDayPeriod",
    "HolidayDetail",
    "HolidayDetails",
    # Fare
    "CalculationRequest",
    "MonthlySegment",
    "PreviousCalculation",
    "CrossMonthCalculation",
    "AppliedDiscount",
    "FareComparison",
]
