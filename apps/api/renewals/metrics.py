from __future__ import annotations

import re

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

installments_processed_total = Counter(
    "installments_processed_total",
    "Total installments processed by outcome",
    ["outcome"],
)

consolidated_runs_total = Counter(
    "consolidated_runs_total",
    "Total consolidated installment runs by status",
    ["status"],
)

consolidated_run_duration_seconds = Histogram(
    "consolidated_run_duration_seconds",
    "Consolidated installment run duration in seconds",
)

checkout_halts_total = Counter(
    "checkout_halts_total",
    "Total checkout runs halted before completion by state and reason",
    ["state", "reason"],
)


_UUID_RE = re.compile(
    r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}\b"
)


def resolve_http_path_label(request: Request) -> str:
    route = request.scope.get("route")
    route_path = getattr(route, "path", None) if route is not None else None
    if isinstance(route_path, str) and route_path:
        return route_path
    return _UUID_RE.sub("{id}", request.url.path)


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    http_requests_total.labels(method=method, path=path, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_installment_outcome(outcome: str, count: int = 1) -> None:
    if count > 0:
        installments_processed_total.labels(outcome=outcome).inc(count)


def observe_consolidated_run(status: str, duration: float) -> None:
    consolidated_runs_total.labels(status=status).inc()
    consolidated_run_duration_seconds.observe(duration)


def observe_checkout_halt(state: str, reason: str) -> None:
    checkout_halts_total.labels(state=state, reason=reason).inc()


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
