from __future__ import annotations

from prometheus_client import Counter, Histogram

LOOKUP_REQUESTS_TOTAL = Counter(
    "mediasearch_lookup_requests_total",
    "Entity search lookups grouped by strategy and outcome",
    labelnames=("strategy", "outcome"),
)

LOOKUP_REQUEST_LATENCY_SECONDS = Histogram(
    "mediasearch_lookup_request_latency_seconds",
    "Latency of individual entity search lookups",
    labelnames=("strategy",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, float("inf")),
)

LOOKUP_RETRIES_TOTAL = Counter(
    "mediasearch_lookup_retries_total",
    "Entity search retries grouped by reason",
    labelnames=("reason",),
)

LOOKUP_CYCLES_TOTAL = Counter(
    "mediasearch_lookup_cycles_total",
    "Autocomplete lookup cycles grouped by final status",
    labelnames=("status",),
)

SUGGESTIONS_RETURNED = Histogram(
    "mediasearch_suggestions_returned",
    "Number of suggestions committed per lookup cycle",
    buckets=(0, 1, 2, 3, 4, 5, 6, 7, 10, 20),
)


def observe_lookup_request(*, strategy: str, outcome: str, latency: float | None = None) -> None:
    LOOKUP_REQUESTS_TOTAL.labels(strategy=strategy, outcome=outcome).inc()
    if latency is not None:
        LOOKUP_REQUEST_LATENCY_SECONDS.labels(strategy=strategy).observe(latency)


def increment_lookup_retry(*, reason: str) -> None:
    LOOKUP_RETRIES_TOTAL.labels(reason=reason).inc()


def increment_lookup_cycle(*, status: str) -> None:
    LOOKUP_CYCLES_TOTAL.labels(status=status).inc()


def observe_suggestions(*, count: int) -> None:
    SUGGESTIONS_RETURNED.observe(count)
