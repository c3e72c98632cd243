"""Provenance helpers for calendar adapters."""

from datetime import UTC, datetime
from pathlib import Path

from tpass.models.common import Provenance


def provenance_for_http(source: str, url: str) -> Provenance:
    """Create provenance for an HTTP-fetched calendar year.

    Args:
        source: Human-readable provider name
        url: Full URL of the HTTP request

    Returns:
        Provenance with source=calendar-specific string, fetched_at=now(UTC)
    """
    return Provenance(
        source=f"calendar.{source}",
        ref_id=source,
        source_url=url,
        fetched_at=datetime.now(UTC),
        cache_hit=False,
    )


def provenance_for_cache(path: Path, source: str) -> Provenance:
    """Create provenance for calendar data loaded from the cache file.

    Args:
        path: Cache file the entries were read from
        source: Provider name recorded in the cache metadata
    """
    return Provenance(
        source=f"calendar.{source}",
        ref_id=source,
        source_url=path.resolve().as_uri(),
        fetched_at=datetime.now(UTC),
        cache_hit=True,
    )
