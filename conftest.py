"""Global pytest configuration."""

import os
import tempfile

# Point the import-time app at a scratch cache file before any imports
os.environ.setdefault(
    "CALENDAR_CACHE_PATH", os.path.join(tempfile.gettempdir(), "tpass-test-calendar-cache.json")
)
