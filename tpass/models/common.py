"""Common types and enums shared across all models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, PlainSerializer

# Monetary amount in NTD. Kept exact internally; emitted as a JSON number.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class DataQuality(str, Enum):
    """Where working-day counts came from."""

    fresh = "fresh"
    degraded = "degraded"
    heuristic = "heuristic"


class Recommendation(str, Enum):
    """Outcome of the pass-versus-regular comparison."""

    BUY_PASS = "BUY_PASS"
    USE_REGULAR = "USE_REGULAR"


class Provenance(BaseModel):
    """Provenance metadata for fetched calendar data."""

    source: str  # Provider-specific identifier (e.g., "calendar.ruyut")
    ref_id: str | None = None
    source_url: str | None = None
    fetched_at: datetime
    cache_hit: bool | None = None
