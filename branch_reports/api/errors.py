"""Exception handlers rendering every failure as ``{"error": message}``."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from branch_reports.services.errors import (
    MixedCurrencyError,
    NoTransactionsError,
    RenderFailureError,
    ReportGenerationError,
    ReportNotFoundError,
    UnauthorizedError,
    UpstreamFailureError,
    UpstreamTimeoutError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[ReportGenerationError], int], ...] = (
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (NoTransactionsError, status.HTTP_404_NOT_FOUND),
    (ReportNotFoundError, status.HTTP_404_NOT_FOUND),
    (MixedCurrencyError, 422),
    (UpstreamTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (UpstreamFailureError, status.HTTP_502_BAD_GATEWAY),
    (RenderFailureError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: ReportGenerationError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def report_error_handler(request: Request, exc: ReportGenerationError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(
            "report request failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__, "error": str(exc)},
        )
    return _error_response(str(exc), status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    )
    return _error_response(f"Invalid request: {details}", status.HTTP_400_BAD_REQUEST)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(str(exc.detail), exc.status_code)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error", extra={"path": request.url.path})
    return _error_response(str(exc) or "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(ReportGenerationError, report_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_error_handler)
    application.add_exception_handler(Exception, unexpected_error_handler)


__all__ = ["register_exception_handlers", "status_for"]
