"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"socialfeed_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"socialfeed_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

FEED_REQUESTS = Counter(
	"socialfeed_feed_requests_total",
	"Feed assemblies segmented by mode and outcome",
	["mode", "outcome"],
)

FEED_ASSEMBLE_LATENCY = Histogram(
	"socialfeed_feed_assemble_seconds",
	"Feed assembly latency in seconds",
	["mode"],
	buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

FEED_PAGE_SIZE = Histogram(
	"socialfeed_feed_page_records",
	"Number of records returned per feed page",
	["mode"],
	buckets=(0, 1, 5, 10, 20, 50, 100),
)

FEED_DEGRADED = Counter(
	"socialfeed_feed_degraded_total",
	"Feed decorations that degraded instead of failing",
	["kind"],
)

IDENTITY_CACHE = Counter(
	"socialfeed_identity_cache_total",
	"Identity display cache lookups",
	["result"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def observe_feed(mode: str, outcome: str, elapsed_seconds: float) -> None:
	FEED_REQUESTS.labels(mode=mode, outcome=outcome).inc()
	FEED_ASSEMBLE_LATENCY.labels(mode=mode).observe(elapsed_seconds)


def observe_page(mode: str, records: int) -> None:
	FEED_PAGE_SIZE.labels(mode=mode).observe(records)


def inc_degraded(kind: str) -> None:
	FEED_DEGRADED.labels(kind=kind).inc()


def inc_identity_cache(result: str) -> None:
	IDENTITY_CACHE.labels(result=result).inc()
