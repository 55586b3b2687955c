"""Pydantic schemas package."""

from .report import (
    ErrorResponse,
    GenerateReportRequest,
    GenerateReportResponse,
    GeneratedReportRead,
    ReportDownloadResponse,
)
from .transaction import TransactionRecord

__all__ = [
    "ErrorResponse",
    "GenerateReportRequest",
    "GenerateReportResponse",
    "GeneratedReportRead",
    "ReportDownloadResponse",
    "TransactionRecord",
]
