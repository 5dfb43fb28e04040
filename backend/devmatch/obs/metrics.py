"""Central registry for Prometheus metrics used by the moderation console."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


REQUEST_COUNTER = Counter(
	"devmatch_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"devmatch_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

MOD_REPORT_PAGE_LOADS_TOTAL = Counter(
	"mod_report_page_loads_total",
	"Report list pages requested from the report service",
	["outcome"],
)

MOD_REPORT_STALE_RESPONSES_TOTAL = Counter(
	"mod_report_stale_responses_total",
	"Report list responses discarded because a newer request was issued",
)

MOD_REPORT_RESOLUTIONS_TOTAL = Counter(
	"mod_report_resolutions_total",
	"Report resolution attempts",
	["action", "outcome"],
)

MOD_REPORT_SERVICE_LATENCY_SECONDS = Histogram(
	"mod_report_service_latency_seconds",
	"Latency of calls to the remote report service",
	["operation"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def page_load(outcome: str) -> None:
	MOD_REPORT_PAGE_LOADS_TOTAL.labels(outcome=outcome).inc()


def stale_response() -> None:
	MOD_REPORT_STALE_RESPONSES_TOTAL.inc()


def resolution(action: str, outcome: str) -> None:
	MOD_REPORT_RESOLUTIONS_TOTAL.labels(action=action, outcome=outcome).inc()
