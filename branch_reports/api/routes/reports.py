"""Monthly report generation and retrieval routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from branch_reports.api.auth import AuthenticatedUser, get_current_user
from branch_reports.api.deps import get_db_session
from branch_reports.schemas.report import (
    ErrorResponse,
    GenerateReportRequest,
    GenerateReportResponse,
    GeneratedReportRead,
    ReportDownloadResponse,
)
from branch_reports.services.ledger import ReportLedger
from branch_reports.services.monthly_reports import MonthlyReportService, ReportRequest
from branch_reports.services.storage import ReportArtifactStore

router = APIRouter(prefix="/reports", responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})


@router.post(
    "/monthly",
    response_model=GenerateReportResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Generate the monthly transaction report for a branch or all branches",
)
async def generate_monthly_report(
    payload: GenerateReportRequest,
    request: Request,
    session: Session = Depends(get_db_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> GenerateReportResponse:
    service = MonthlyReportService(session)
    report = await service.generate(
        ReportRequest(branch_id=payload.branch_id, year=payload.year, month=payload.month),
        actor_user_id=user.user_id,
    )
    return GenerateReportResponse(success=True, report=GeneratedReportRead.model_validate(report))


@router.get("", response_model=list[GeneratedReportRead], summary="List generated reports")
def list_reports(
    period: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$"),
    branch_id: str | None = Query(default=None, max_length=36),
    limit: int = Query(default=50, ge=1, le=200),
    session: Session = Depends(get_db_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> list[GeneratedReportRead]:
    reports = ReportLedger(session).list_reports(period=period, branch_id=branch_id, limit=limit)
    return [GeneratedReportRead.model_validate(report) for report in reports]


@router.get(
    "/{report_id}/download",
    response_model=ReportDownloadResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Issue a time-limited download link for a generated report",
)
def download_report(
    report_id: str,
    session: Session = Depends(get_db_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ReportDownloadResponse:
    report = ReportLedger(session).get(report_id)
    store = ReportArtifactStore()
    url = store.presigned_url(report.file_path)
    return ReportDownloadResponse(url=url, expires_in=store.url_expiry_seconds)


__all__ = ["download_report", "generate_monthly_report", "list_reports", "router"]
