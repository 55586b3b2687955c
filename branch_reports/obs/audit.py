"""Request audit logging middleware."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

_SENSITIVE_QUERY_KEYS = {"token", "access_token", "apikey"}


@dataclass(slots=True)
class AuditLogRecord:
    """Structured log entry emitted once per request."""

    timestamp: str
    request_id: str
    method: str
    path: str
    status: int
    duration_ms: float
    actor: str | None
    ip_address: str | None
    query: dict[str, Any]

    def to_json(self) -> str:
        payload = asdict(self)
        payload["duration_ms"] = round(self.duration_ms, 2)
        return json.dumps(payload, default=str)


class AuditMiddleware(BaseHTTPMiddleware):
    """Writes one JSON audit line per request and echoes ``X-Request-ID``."""

    def __init__(self, app: ASGIApp, *, logger: logging.Logger | None = None) -> None:
        super().__init__(app)
        self._logger = logger or logging.getLogger("audit")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        query = {
            key: "***" if key.lower() in _SENSITIVE_QUERY_KEYS else value
            for key, value in request.query_params.multi_items()
        }
        record = AuditLogRecord(
            timestamp=datetime.now(timezone.utc).isoformat(),
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=(time.perf_counter() - start) * 1000,
            actor=getattr(request.state, "actor_id", None),
            ip_address=request.client.host if request.client else None,
            query=query,
        )
        self._logger.info(record.to_json())

        response.headers["X-Request-ID"] = request_id
        return response


__all__ = ["AuditLogRecord", "AuditMiddleware"]
