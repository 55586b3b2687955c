"""Prometheus metrics utilities for the API and worker processes."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_LATENCY_SECONDS = Histogram(
    "http_request_latency_seconds",
    "Latency of HTTP requests in seconds.",
    labelnames=("method", "path"),
)
REQUEST_COUNTER = Counter(
    "http_requests_total",
    "Total number of HTTP requests processed.",
    labelnames=("method", "path", "status"),
)
REQUEST_ERROR_COUNTER = Counter(
    "http_request_errors_total",
    "Total number of HTTP requests that resulted in server errors.",
    labelnames=("method", "path", "status"),
)
REPORT_GENERATION_COUNTER = Counter(
    "report_generations_total",
    "Monthly report generation attempts by outcome.",
    labelnames=("outcome",),
)
REPORT_RENDER_SECONDS = Histogram(
    "report_render_seconds",
    "Time spent laying out report PDFs.",
)
REPORT_ARTIFACT_BYTES = Histogram(
    "report_artifact_bytes",
    "Size of stored report PDFs in bytes.",
    buckets=(1_000, 5_000, 10_000, 50_000, 100_000, 500_000, 1_000_000, 5_000_000),
)


UNMATCHED_PATH = "<unmatched>"


def route_template(request: Request) -> str:
    """Return the path template of the route that served ``request``.

    Report ids stay out of the ``path`` label this way, e.g. every download is
    counted under ``/api/reports/{report_id}/download``. Requests that matched
    no route share one label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_PATH


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Counts and times requests per method, route template and status."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            labels = {"method": request.method, "path": route_template(request)}
            status = str(status_code)
            REQUEST_LATENCY_SECONDS.labels(**labels).observe(time.perf_counter() - started)
            REQUEST_COUNTER.labels(status=status, **labels).inc()
            if status_code >= 500:
                REQUEST_ERROR_COUNTER.labels(status=status, **labels).inc()


metrics_router = APIRouter(tags=["observability"])


@metrics_router.get("/metrics", include_in_schema=False)
def metrics_endpoint() -> Response:
    """Prometheus text exposition of every registered collector."""
    payload = generate_latest()
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


def record_report_outcome(outcome: str) -> None:
    REPORT_GENERATION_COUNTER.labels(outcome=outcome).inc()


__all__ = [
    "PrometheusMiddleware",
    "REPORT_ARTIFACT_BYTES",
    "REPORT_GENERATION_COUNTER",
    "REPORT_RENDER_SECONDS",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "UNMATCHED_PATH",
    "metrics_endpoint",
    "metrics_router",
    "record_report_outcome",
    "route_template",
]
