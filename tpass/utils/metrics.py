"""Prometheus metrics for calendar fetches and cache writes."""

from prometheus_client import Counter, Histogram

calendar_fetch_latency_ms = Histogram(
    "calendar_fetch_latency_ms",
    "Calendar provider fetch latency in milliseconds",
    ["source", "outcome"],
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, 10000],
)

calendar_fetch_errors_total = Counter(
    "calendar_fetch_errors_total",
    "Total calendar provider fetch errors",
    ["source", "reason"],
)

calendar_cache_writes_total = Counter(
    "calendar_cache_writes_total",
    "Total calendar cache file writes",
    ["outcome"],
)


class FetchMetrics:
    """Interface for calendar fetch metrics (no-op default)."""

    def record_latency(self, source: str, outcome: str, latency_ms: float) -> None:
        """Record provider fetch latency."""
        pass

    def inc_error(self, source: str, reason: str) -> None:
        """Increment error counter."""
        pass


class PrometheusFetchMetrics(FetchMetrics):
    """Prometheus-based calendar fetch metrics implementation."""

    def record_latency(self, source: str, outcome: str, latency_ms: float) -> None:
        """Record provider fetch latency."""
        calendar_fetch_latency_ms.labels(source=source, outcome=outcome).observe(latency_ms)

    def inc_error(self, source: str, reason: str) -> None:
        """Increment error counter."""
        calendar_fetch_errors_total.labels(source=source, reason=reason).inc()


def record_cache_write(outcome: str) -> None:
    """Count a cache save ("success" or "error")."""
    calendar_cache_writes_total.labels(outcome=outcome).inc()
