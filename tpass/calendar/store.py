"""File-backed persistence for the calendar cache.

Writes never truncate the live file: the new document goes to a temp file in
the same directory, the previous document is copied to
``<cachefile>.backup.<epoch-ms>.json``, and the temp file then replaces the
cache with ``os.replace``.
"""

import json
import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from tpass.models.calendar import CalendarCache, CalendarCacheMetadata, CalendarEntry
from tpass.utils.metrics import record_cache_write

logger = logging.getLogger(__name__)


class CacheLoadStatus(str, Enum):
    """Outcome of reading the cache file."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    CORRUPT = "corrupt"


@dataclass
class CacheLoad:
    """Result of CalendarCacheStore.load()."""

    status: CacheLoadStatus
    cache: CalendarCache | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status == CacheLoadStatus.FOUND


class CalendarCacheStore:
    """JSON cache file holding calendar metadata and entries."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def backup_path(self, epoch_ms: int) -> Path:
        return self._path.with_name(f"{self._path.name}.backup.{epoch_ms}.json")

    def load(self) -> CacheLoad:
        """Read and validate the cache file.

        Malformed JSON or a document missing required fields yields CORRUPT
        rather than raising, so callers can treat it as absent.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return CacheLoad(status=CacheLoadStatus.NOT_FOUND)
        except OSError as e:
            logger.warning("Failed to read calendar cache %s: %s", self._path, e)
            return CacheLoad(status=CacheLoadStatus.CORRUPT, error=str(e))

        try:
            cache = CalendarCache.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Calendar cache %s is corrupt: %s", self._path, e)
            return CacheLoad(status=CacheLoadStatus.CORRUPT, error=str(e))

        return CacheLoad(status=CacheLoadStatus.FOUND, cache=cache)

    def save(self, metadata: CalendarCacheMetadata, entries: list[CalendarEntry]) -> None:
        """Persist metadata and entries, keeping a backup of the prior file.

        Raises:
            OSError: If the new document cannot be written or moved into place
        """
        document = CalendarCache(metadata=metadata, entries=sorted(entries, key=lambda e: e.date))
        payload = json.dumps(
            document.model_dump(mode="json", by_alias=True),
            ensure_ascii=False,
            indent=2,
        )

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())

            self._backup_existing()
            os.replace(tmp_name, self._path)
        except OSError:
            record_cache_write("error")
            Path(tmp_name).unlink(missing_ok=True)
            raise

        record_cache_write("success")
        logger.info("Calendar cache saved with %d entries to %s", len(entries), self._path)

    def _backup_existing(self) -> None:
        if not self._path.exists():
            return
        backup = self.backup_path(int(time.time() * 1000))
        try:
            shutil.copy2(self._path, backup)
            logger.info("Backup created: %s", backup)
        except OSError as e:
            # Backups are best effort; the save itself proceeds
            logger.warning("Failed to create calendar cache backup: %s", e)
