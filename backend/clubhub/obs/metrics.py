"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"clubhub_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"clubhub_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

REGISTRATIONS = Counter(
	"clubhub_registrations_total",
	"Student registration attempts by outcome",
	["outcome"],
)

MUTATIONS = Counter(
	"clubhub_registry_mutations_total",
	"Applied registry mutations",
	["operation"],
)

MUTATIONS_REJECTED = Counter(
	"clubhub_registry_mutations_rejected_total",
	"Rejected registry mutations",
	["operation", "code"],
)

SYNC_PUSHES = Counter(
	"clubhub_sync_push_total",
	"Aggregate snapshot pushes by result",
	["result"],
)

SYNC_PUSH_LATENCY = Histogram(
	"clubhub_sync_push_duration_seconds",
	"Remote push latency in seconds",
	buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

SYNC_LOADS = Counter(
	"clubhub_sync_load_total",
	"Initial state loads by source",
	["source"],
)

SYNC_PENDING = Gauge(
	"clubhub_sync_pending",
	"Whether a debounced push is currently scheduled",
)

REGISTRY_SIZE = Gauge(
	"clubhub_registry_entities",
	"Entities currently held by the registry store",
	["kind"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_registration(outcome: str) -> None:
	REGISTRATIONS.labels(outcome=outcome).inc()


def inc_mutation(operation: str) -> None:
	MUTATIONS.labels(operation=operation).inc()


def inc_mutation_rejected(operation: str, code: str) -> None:
	MUTATIONS_REJECTED.labels(operation=operation, code=code).inc()


def inc_sync_push(result: str, *, latency_seconds: float | None = None) -> None:
	SYNC_PUSHES.labels(result=result).inc()
	if latency_seconds is not None:
		SYNC_PUSH_LATENCY.observe(latency_seconds)


def inc_sync_load(source: str) -> None:
	SYNC_LOADS.labels(source=source).inc()


def set_sync_pending(pending: bool) -> None:
	SYNC_PENDING.set(1 if pending else 0)


def set_registry_size(*, teachers: int, students: int, clubs: int, announcements: int) -> None:
	REGISTRY_SIZE.labels(kind="teachers").set(teachers)
	REGISTRY_SIZE.labels(kind="students").set(students)
	REGISTRY_SIZE.labels(kind="clubs").set(clubs)
	REGISTRY_SIZE.labels(kind="announcements").set(announcements)
