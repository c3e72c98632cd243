"""Government working-day calendar adapter (keyless public JSON feeds).

Providers are tried in priority order; the first 2xx response with a body in a
recognised shape wins. Three shapes are understood:

- array of day events: ``[{"date": "20250101", "week": "三", "isHoliday": true,
  "description": "開國紀念日"}, ...]``
- holiday table: ``{"holidays": [{"date": ..., "name": ..., "description": ...}]}``
- open-data table: ``{"data": [{"西元日期": ..., "是否放假": "Y", "備註": ...}]}``
"""

import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

import httpx

from tpass.adapters.provenance import provenance_for_http
from tpass.config import CalendarSourceConfig
from tpass.models.calendar import CalendarEntry
from tpass.models.common import Provenance
from tpass.utils.logging import StructuredFetchLogger
from tpass.utils.metrics import FetchMetrics

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
WEEKEND_LABELS = ("六", "日")
DEFAULT_HOLIDAY_NAME = "休假日"
DEFAULT_OPEN_DATA_NAME = "放假日"


class DataSourceUnavailableError(Exception):
    """Every configured calendar provider failed for a year."""

    def __init__(self, year: int, errors: Sequence[str]) -> None:
        self.year = year
        self.errors = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors) or "  - no sources configured"
        super().__init__(f"Failed to fetch calendar data for {year} from all sources:\n{lines}")


class CalendarParseError(Exception):
    """Provider body is not in any recognised calendar shape."""

    pass


@dataclass
class CalendarFetchResult:
    """One year of calendar entries with the provider that supplied them."""

    year: int
    source: str
    entries: list[CalendarEntry]
    provenance: Provenance


def normalize_date(value: Any) -> str:
    """Turn ``YYYYMMDD`` into ``YYYY-MM-DD``; other strings pass through."""
    text = str(value).strip() if value is not None else ""
    if len(text) == 8 and text.isdigit():
        return f"{text[:4]}-{text[4:6]}-{text[6:8]}"
    return text


def _parse_event_array(items: list[Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict) or not item.get("date"):
            continue
        is_holiday = item.get("isHoliday") is True
        description = item.get("description") or ""
        if not (is_holiday or description):
            continue
        # Plain weekends carry no information beyond the weekday heuristic
        if not description and item.get("week") in WEEKEND_LABELS:
            continue
        rows.append(
            {
                "date": normalize_date(item["date"]),
                "is_working_day": not is_holiday,
                "is_holiday": is_holiday,
                "name": description or (DEFAULT_HOLIDAY_NAME if is_holiday else ""),
                "description": description,
            }
        )
    return rows


def _parse_holiday_table(items: list[Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        rows.append(
            {
                "date": normalize_date(item.get("date") or item.get("Date")),
                "is_working_day": False,
                "is_holiday": True,
                "name": item.get("name") or item.get("Name") or item.get("holidayName"),
                "description": item.get("description") or item.get("Description"),
            }
        )
    return rows


def _parse_open_data_table(items: list[Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        is_holiday = item.get("是否放假") == "Y"
        rows.append(
            {
                "date": normalize_date(item.get("西元日期") or item.get("date")),
                "is_working_day": not is_holiday,
                "is_holiday": is_holiday,
                "name": item.get("備註") or item.get("name") or DEFAULT_OPEN_DATA_NAME,
                "description": item.get("說明") or item.get("description"),
            }
        )
    return rows


def parse_calendar_payload(payload: Any, source: str) -> list[CalendarEntry]:
    """Normalize a provider payload into calendar entries sorted by date.

    Args:
        payload: Decoded JSON body
        source: Provider name (for log messages)

    Returns:
        Entries with valid ``YYYY-MM-DD`` dates, ascending

    Raises:
        CalendarParseError: If the payload matches no known shape
    """
    if isinstance(payload, list):
        rows = _parse_event_array(payload)
    elif isinstance(payload, dict) and isinstance(payload.get("holidays"), list):
        rows = _parse_holiday_table(payload["holidays"])
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        rows = _parse_open_data_table(payload["data"])
    else:
        raise CalendarParseError(f"Unrecognised calendar format from {source}")

    entries: list[CalendarEntry] = []
    for row in rows:
        raw_date = row["date"]
        if not ISO_DATE_RE.match(raw_date):
            logger.warning("Dropping entry with malformed date %r from %s", raw_date, source)
            continue
        try:
            row["date"] = date.fromisoformat(raw_date)
        except ValueError:
            logger.warning("Dropping entry with impossible date %r from %s", raw_date, source)
            continue
        entries.append(CalendarEntry(**row))

    entries.sort(key=lambda e: e.date)
    return entries


class CalendarSourceGateway:
    """Fetches one year of calendar facts from the first provider that answers."""

    def __init__(
        self,
        sources: Sequence[CalendarSourceConfig],
        timeout_s: float = 10.0,
        user_agent: str = "TPASS-Calculator/1.0",
        client: httpx.AsyncClient | None = None,
        metrics: FetchMetrics | None = None,
        fetch_logger: StructuredFetchLogger | None = None,
    ) -> None:
        """Initialize gateway.

        Args:
            sources: Providers in priority order
            timeout_s: Per-request timeout in seconds
            user_agent: User-Agent header sent to providers
            client: Optional httpx client (for testing with mocks)
            metrics: Metrics recorder (optional, defaults to no-op)
            fetch_logger: Structured logger (optional)
        """
        self._sources = list(sources)
        self._timeout_s = timeout_s
        self._user_agent = user_agent
        self._client = client
        self._metrics = metrics or FetchMetrics()
        self._fetch_logger = fetch_logger or StructuredFetchLogger()

    @property
    def source_names(self) -> list[str]:
        return [s.name for s in self._sources]

    async def fetch_year(self, year: int) -> CalendarFetchResult:
        """Fetch calendar entries for a year.

        Raises:
            DataSourceUnavailableError: If every provider failed
        """
        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_s)
            close_client = True

        errors: list[str] = []
        try:
            for source in self._sources:
                url = source.url_for(year)
                start = time.monotonic()
                try:
                    entries = await self._fetch_from(client, source, url, year)
                except (httpx.HTTPError, httpx.InvalidURL, ValueError, CalendarParseError) as e:
                    elapsed_ms = (time.monotonic() - start) * 1000
                    reason = type(e).__name__
                    self._metrics.inc_error(source.name, reason)
                    self._metrics.record_latency(source.name, "error", elapsed_ms)
                    self._fetch_logger.log_attempt(
                        source.name, year, "error", elapsed_ms, error_reason=reason
                    )
                    errors.append(f"{source.name}: {e}")
                    continue

                elapsed_ms = (time.monotonic() - start) * 1000
                self._metrics.record_latency(source.name, "success", elapsed_ms)
                self._fetch_logger.log_attempt(
                    source.name, year, "success", elapsed_ms, entry_count=len(entries)
                )
                return CalendarFetchResult(
                    year=year,
                    source=source.name,
                    entries=entries,
                    provenance=provenance_for_http(source.name, url),
                )
        finally:
            if close_client:
                await client.aclose()

        raise DataSourceUnavailableError(year, errors)

    async def _fetch_from(
        self, client: httpx.AsyncClient, source: CalendarSourceConfig, url: str, year: int
    ) -> list[CalendarEntry]:
        response = await client.get(
            url,
            headers={"User-Agent": self._user_agent},
            timeout=self._timeout_s,
        )
        response.raise_for_status()
        payload = response.json()

        entries = parse_calendar_payload(payload, source.name)
        # Some feeds are not year-scoped; keep only the requested year
        return [e for e in entries if e.date.year == year]
