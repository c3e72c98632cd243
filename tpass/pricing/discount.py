"""Taipei Metro frequent-rider discount tiers.

The tier is chosen from the number of trips taken within one calendar month.
Tiers are contiguous closed ranges covering every non-negative trip count.
"""

from bisect import bisect_right
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DiscountTier:
    """Trip-count range (inclusive) and its discount rate."""

    min_trips: int
    max_trips: int | None  # None = unbounded
    discount_rate: Decimal

    @property
    def percent(self) -> int:
        return int(self.discount_rate * 100)

    def contains(self, trips: int) -> bool:
        return trips >= self.min_trips and (self.max_trips is None or trips <= self.max_trips)

    def trip_range(self) -> str:
        if self.max_trips is None:
            return f"{self.min_trips}+ trips"
        return f"{self.min_trips}-{self.max_trips} trips"

    def describe(self) -> str:
        return f"{self.trip_range()}: {self.percent}% off"


DISCOUNT_TIERS: tuple[DiscountTier, ...] = (
    DiscountTier(min_trips=0, max_trips=10, discount_rate=Decimal("0")),
    DiscountTier(min_trips=11, max_trips=20, discount_rate=Decimal("0.05")),
    DiscountTier(min_trips=21, max_trips=40, discount_rate=Decimal("0.10")),
    DiscountTier(min_trips=41, max_trips=None, discount_rate=Decimal("0.15")),
)


def validate_tiers(tiers: Sequence[DiscountTier]) -> None:
    """Ensure tiers start at 0, leave no gaps or overlaps, and end unbounded.

    Raises:
        ValueError: If the table is not contiguous and exhaustive
    """
    if not tiers or tiers[0].min_trips != 0:
        raise ValueError("discount tiers must start at 0 trips")
    for current, following in zip(tiers, tiers[1:]):
        if current.max_trips is None or current.max_trips + 1 != following.min_trips:
            raise ValueError(f"discount tiers not contiguous at {current.trip_range()}")
    if tiers[-1].max_trips is not None:
        raise ValueError("last discount tier must be unbounded")


validate_tiers(DISCOUNT_TIERS)

_TIER_STARTS = [t.min_trips for t in DISCOUNT_TIERS]


def tier_for(trips: int) -> DiscountTier:
    """Return the single tier containing a trip count.

    Raises:
        ValueError: If trips is negative
    """
    if trips < 0:
        raise ValueError(f"trip count must be non-negative, got {trips}")
    return DISCOUNT_TIERS[bisect_right(_TIER_STARTS, trips) - 1]


def discount_amount(cost: Decimal, trips: int) -> Decimal:
    """Discount on a cost for the tier matching trips."""
    return cost * tier_for(trips).discount_rate


def apply_discount(cost: Decimal, trips: int) -> Decimal:
    """Cost after the tier discount for trips."""
    return cost - discount_amount(cost, trips)


def all_tiers() -> list[dict[str, str]]:
    """Display rows for every tier."""
    return [{"trip_range": t.trip_range(), "discount": f"{t.percent}%"} for t in DISCOUNT_TIERS]
