"""Logging setup and structured logging for calendar fetches."""

import logging
import sys
from typing import Any

logger = logging.getLogger(__name__)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Console logging with module names and line numbers."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s %(funcName)s():%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)


class StructuredFetchLogger:
    """Structured logger for calendar provider fetch attempts."""

    def log_attempt(
        self,
        source: str,
        year: int,
        outcome: str,
        latency_ms: float,
        entry_count: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one provider attempt with structured data."""
        log_data: dict[str, Any] = {
            "source": source,
            "year": year,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if entry_count is not None:
            log_data["entry_count"] = entry_count
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Calendar fetch: {source} ({year}) - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
