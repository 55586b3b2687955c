"""Pydantic schemas for report generation requests and ledger rows."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from branch_reports.models import ReportStatus, ReportType


class GenerateReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    branch_id: str | None = Field(default=None, alias="branchId", max_length=36)
    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)


class GeneratedReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: str
    branch_id: str | None
    report_type: ReportType
    report_period: str
    file_name: str
    file_path: str
    file_size: int
    transaction_count: int
    total_amount: Decimal
    currency: str
    generated_by: str | None
    status: ReportStatus
    created_at: datetime


class GenerateReportResponse(BaseModel):
    success: bool = True
    report: GeneratedReportRead


class ReportDownloadResponse(BaseModel):
    url: str
    expires_in: int


class ErrorResponse(BaseModel):
    error: str


__all__ = [
    "ErrorResponse",
    "GenerateReportRequest",
    "GenerateReportResponse",
    "GeneratedReportRead",
    "ReportDownloadResponse",
]
