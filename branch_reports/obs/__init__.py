"""Observability utilities."""

from .audit import AuditLogRecord, AuditMiddleware
from .metrics import (
    REPORT_ARTIFACT_BYTES,
    REPORT_GENERATION_COUNTER,
    REPORT_RENDER_SECONDS,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    PrometheusMiddleware,
    metrics_router,
    record_report_outcome,
)
from .tracing import (
    initialise_tracing,
    instrument_fastapi_app,
    instrument_sqlalchemy_engine,
    report_span,
)

__all__ = [
    "AuditLogRecord",
    "AuditMiddleware",
    "PrometheusMiddleware",
    "REPORT_ARTIFACT_BYTES",
    "REPORT_GENERATION_COUNTER",
    "REPORT_RENDER_SECONDS",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "metrics_router",
    "record_report_outcome",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "report_span",
]
