"""Shared observability helpers for worker processes."""

from __future__ import annotations

from branch_reports.core.config import get_settings
from branch_reports.core.logging import configure_logging
from branch_reports.obs import initialise_tracing


def configure_worker(service_name: str) -> None:
    """Initialise logging and tracing for a worker service."""

    configure_logging()
    settings = get_settings()
    if settings.enable_tracing:
        initialise_tracing(
            service_name=service_name,
            endpoint=settings.otel_exporter_endpoint,
            instrument_logging=False,
        )


__all__ = ["configure_worker"]
