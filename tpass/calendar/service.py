"""Calendar service - working-day lookups backed by a refreshable cache.

Lifecycle: UNINITIALIZED -> INITIALIZING -> READY, with data quality FRESH
(cache younger than the max age, or just fetched) or DEGRADED (stale cache or
no data; lookups fall back to the Mon-Fri heuristic).

One instance is shared by every request. Concurrent callers share a single
bootstrap and at most one in-flight fetch per year.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import date, timedelta

from tpass.adapters.calendar_sources import (
    CalendarFetchResult,
    CalendarSourceGateway,
    DataSourceUnavailableError,
)
from tpass.adapters.provenance import provenance_for_cache
from tpass.calendar.store import CalendarCacheStore
from tpass.models.calendar import (
    CalendarCache,
    CalendarCacheMetadata,
    CalendarEntry,
    CalendarStatus,
    ServiceState,
    WorkingDayPeriod,
)
from tpass.models.common import DataQuality, Provenance

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0.0"


class CalendarUnavailableError(Exception):
    """A year required for a calculation could not be fetched."""

    def __init__(self, year: int, reason: str) -> None:
        self.year = year
        self.reason = reason
        super().__init__(f"Calendar data for {year} is unavailable: {reason}")


def years_in_range(start: date, end: date) -> list[int]:
    """Every calendar year touched by [start, end]."""
    return list(range(start.year, end.year + 1))


class CalendarService:
    """Shared, explicitly constructed calendar facade."""

    def __init__(
        self,
        gateway: CalendarSourceGateway,
        store: CalendarCacheStore,
        max_age_days: int = 30,
        today_fn: Callable[[], date] | None = None,
    ) -> None:
        """Initialize service.

        Args:
            gateway: Provider gateway used for fetches
            store: Persistent cache file
            max_age_days: Cache age at which a refetch is attempted
            today_fn: Injectable clock (default: date.today)
        """
        self._gateway = gateway
        self._store = store
        self._max_age_days = max_age_days
        self._today = today_fn or date.today

        self._index: dict[date, CalendarEntry] = {}
        self._metadata: CalendarCacheMetadata | None = None
        self._state = ServiceState.uninitialized
        self._quality: DataQuality | None = None
        self._last_fetch: Provenance | None = None

        self._init_task: asyncio.Task[None] | None = None
        self._inflight: dict[int, asyncio.Task[CalendarFetchResult]] = {}
        self._write_lock = asyncio.Lock()
        self._dirty = False

    # Lifecycle

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def quality(self) -> DataQuality | None:
        return self._quality

    @property
    def years_covered(self) -> list[int]:
        return list(self._metadata.years_covered) if self._metadata else []

    @property
    def data_quality(self) -> DataQuality:
        """Quality label for results computed from the current index."""
        if self._metadata is None and not self._index:
            return DataQuality.heuristic
        if self._quality == DataQuality.degraded:
            return DataQuality.degraded
        return DataQuality.fresh

    async def initialize(self) -> None:
        """Load or fetch calendar data once; later calls await the same bootstrap."""
        if self._init_task is None:
            self._state = ServiceState.initializing
            self._init_task = asyncio.create_task(self._bootstrap())
        await asyncio.shield(self._init_task)

    async def _bootstrap(self) -> None:
        loaded = await asyncio.to_thread(self._store.load)
        existing = loaded.cache if loaded.found else None

        if existing is not None and self._is_fresh(existing.metadata):
            self._install(existing)
            self._finish(DataQuality.fresh)
            return

        if existing is not None:
            logger.info(
                "Calendar cache expired (%d days old)", existing.metadata.age_days(self._today())
            )
        else:
            logger.info(
                "Calendar cache %s (%s)",
                loaded.status.value,
                loaded.error or self._store.path,
            )

        year = self._today().year
        logger.info(
            "Fetching calendar data for %d from: %s", year, ", ".join(self._gateway.source_names)
        )
        try:
            result = await self._gateway.fetch_year(year)
        except DataSourceUnavailableError as e:
            logger.error("Calendar auto-fetch failed: %s", e)
            self._fall_back(existing)
            return
        except Exception:
            # Bootstrap must always reach READY
            logger.exception("Unexpected error during calendar auto-fetch for %d", year)
            self._fall_back(existing)
            return

        self._last_fetch = result.provenance
        self._metadata = CalendarCacheMetadata(
            version=CACHE_VERSION,
            last_updated=self._today(),
            source=result.source,
            years_covered=[year],
        )
        self._index = {e.date: e for e in result.entries}
        self._dirty = True
        await self._persist_if_dirty()
        self._finish(DataQuality.fresh)

    def _fall_back(self, existing: CalendarCache | None) -> None:
        if existing is not None:
            logger.warning("Using expired calendar cache as fallback")
            self._install(existing)
        else:
            logger.warning("No calendar data available; using weekday estimation")
        self._finish(DataQuality.degraded)

    def _finish(self, quality: DataQuality) -> None:
        self._quality = quality
        self._state = ServiceState.ready
        logger.info(
            "Calendar service ready: %d entries (%s)", len(self._index), quality.value
        )

    def _is_fresh(self, metadata: CalendarCacheMetadata) -> bool:
        return metadata.age_days(self._today()) < self._max_age_days

    def _install(self, cache: CalendarCache) -> None:
        self._metadata = cache.metadata
        self._index = {e.date: e for e in cache.entries}
        self._last_fetch = provenance_for_cache(self._store.path, cache.metadata.source)

    # Year coverage

    async def ensure_data_for_period(self, start: date, end: date) -> None:
        """Fetch and merge every year of [start, end] not yet covered.

        Raises:
            CalendarUnavailableError: If a missing year could not be fetched
        """
        if end < start:
            raise ValueError(f"end {end} is before start {start}")

        await self.initialize()

        missing = [y for y in years_in_range(start, end) if y not in self.years_covered]
        if not missing:
            return

        logger.info("Fetching calendar data for years: %s", ", ".join(map(str, missing)))
        try:
            for year in missing:
                if year in self.years_covered:
                    # Another caller's fetch finished while we were waiting
                    continue
                await self._fetch_year(year)
        finally:
            await self._persist_if_dirty()

    async def refresh(self, year: int | None = None) -> CalendarStatus:
        """Refetch one year (default: current) even if already covered.

        Raises:
            CalendarUnavailableError: If the year could not be fetched
        """
        await self.initialize()
        target = year or self._today().year
        result = await self._fetch_year(target)

        if target == self._today().year and self._metadata is not None:
            self._metadata.last_updated = self._today()
            self._metadata.source = result.source
            self._quality = DataQuality.fresh
        await self._persist_if_dirty()
        return self.status()

    async def _fetch_year(self, year: int) -> CalendarFetchResult:
        task = self._inflight.get(year)
        if task is None:
            task = asyncio.create_task(self._fetch_and_merge(year))
            self._inflight[year] = task
            task.add_done_callback(lambda t, y=year: self._forget_inflight(y, t))

        try:
            return await asyncio.shield(task)
        except DataSourceUnavailableError as e:
            raise CalendarUnavailableError(year, str(e)) from e

    async def _fetch_and_merge(self, year: int) -> CalendarFetchResult:
        try:
            result = await self._gateway.fetch_year(year)
        except DataSourceUnavailableError as e:
            logger.error("Failed to fetch calendar data for %d: %s", year, e)
            raise
        self._merge(result)
        return result

    def _forget_inflight(self, year: int, task: asyncio.Task[CalendarFetchResult]) -> None:
        if self._inflight.get(year) is task:
            del self._inflight[year]

    def _merge(self, result: CalendarFetchResult) -> None:
        """Replace one year's entries in the index and mark it covered."""
        year = result.year
        self._last_fetch = result.provenance
        self._index = {d: e for d, e in self._index.items() if d.year != year}
        self._index.update((e.date, e) for e in result.entries)

        if self._metadata is None:
            self._metadata = CalendarCacheMetadata(
                version=CACHE_VERSION,
                last_updated=self._today(),
                source=result.source,
                years_covered=[year],
            )
        elif year not in self._metadata.years_covered:
            self._metadata.years_covered = sorted({*self._metadata.years_covered, year})

        self._dirty = True
        logger.info("Added %d calendar entries for year %d", len(result.entries), year)

    async def _persist_if_dirty(self) -> None:
        async with self._write_lock:
            if not self._dirty or self._metadata is None:
                return
            metadata = self._metadata.model_copy(deep=True)
            entries = list(self._index.values())
            self._dirty = False
            try:
                await asyncio.to_thread(self._store.save, metadata, entries)
            except OSError as e:
                # In-memory data stays valid; retry on the next merge
                self._dirty = True
                logger.error("Failed to persist calendar cache: %s", e)

    # Queries

    def is_working_day(self, day: date) -> bool:
        """Stored classification, else Mon-Fri. Never raises."""
        entry = self._index.get(day)
        if entry is not None:
            return entry.is_working_day
        return day.weekday() < 5

    def count_working_days(self, start: date, end: date) -> int:
        """Working days in [start, end], inclusive."""
        count = 0
        current = start
        while current <= end:
            if self.is_working_day(current):
                count += 1
            current += timedelta(days=1)
        return count

    def get_entry(self, day: date) -> CalendarEntry | None:
        return self._index.get(day)

    def working_day_period(self, start: date, end: date) -> WorkingDayPeriod:
        total_days = (end - start).days + 1
        working_days = self.count_working_days(start, end)
        return WorkingDayPeriod(
            start_date=start,
            end_date=end,
            total_days=total_days,
            working_days=working_days,
            holidays=total_days - working_days,
        )

    def status(self) -> CalendarStatus:
        return CalendarStatus(
            state=self._state,
            quality=self._quality,
            entry_count=len(self._index),
            source=self._metadata.source if self._metadata else "local-cache",
            last_updated=self._metadata.last_updated if self._metadata else None,
            years_covered=self.years_covered,
            providers=self._gateway.source_names,
            last_fetch=self._last_fetch,
        )
