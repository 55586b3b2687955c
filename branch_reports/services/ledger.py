"""Append-only ledger of generated reports."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from branch_reports.models import GeneratedReport, ReportStatus, ReportType
from branch_reports.services.errors import LedgerWriteError, ReportNotFoundError, UpstreamFailureError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LedgerEntry:
    """Values recorded for one successful generation."""

    branch_id: str | None
    report_period: str
    file_name: str
    file_path: str
    file_size: int
    transaction_count: int
    total_amount: Decimal
    currency: str
    generated_by: str | None
    report_type: ReportType = ReportType.MONTHLY


class ReportLedger:
    """Inserts and reads ``generated_reports`` rows."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def record(self, entry: LedgerEntry, *, abandoned: threading.Event | None = None) -> GeneratedReport:
        """Insert and commit one row.

        The row is flushed first; if ``abandoned`` has been set by then the
        insert is rolled back instead of committed.
        """
        report = GeneratedReport(
            branch_id=entry.branch_id,
            report_type=entry.report_type,
            report_period=entry.report_period,
            file_name=entry.file_name,
            file_path=entry.file_path,
            file_size=entry.file_size,
            transaction_count=entry.transaction_count,
            total_amount=entry.total_amount,
            currency=entry.currency,
            generated_by=entry.generated_by,
            status=ReportStatus.COMPLETED,
        )
        self._session.add(report)
        try:
            self._session.flush()
            if abandoned is not None and abandoned.is_set():
                self._session.rollback()
                logger.warning("report ledger insert abandoned", extra={"file_path": entry.file_path})
                raise LedgerWriteError("Report ledger insert was abandoned")
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "report ledger insert failed",
                extra={"file_path": entry.file_path, "error": str(exc)},
            )
            raise LedgerWriteError(f"Failed to record report: {exc}") from exc
        self._session.refresh(report)
        logger.info(
            "recorded generated report",
            extra={
                "report_id": report.id,
                "file_path": report.file_path,
                "transaction_count": report.transaction_count,
            },
        )
        return report

    def list_reports(
        self,
        *,
        period: str | None = None,
        branch_id: str | None = None,
        limit: int = 50,
    ) -> list[GeneratedReport]:
        statement = select(GeneratedReport)
        if period:
            statement = statement.where(GeneratedReport.report_period == period)
        if branch_id:
            statement = statement.where(GeneratedReport.branch_id == branch_id)
        statement = statement.order_by(GeneratedReport.created_at.desc(), GeneratedReport.report_period.desc())
        try:
            return list(self._session.scalars(statement.limit(limit)).all())
        except SQLAlchemyError as exc:
            raise UpstreamFailureError(f"Report ledger query failed: {exc}") from exc

    def get(self, report_id: str) -> GeneratedReport:
        try:
            report = self._session.get(GeneratedReport, report_id)
        except SQLAlchemyError as exc:
            raise UpstreamFailureError(f"Report ledger query failed: {exc}") from exc
        if report is None:
            raise ReportNotFoundError(f"Report '{report_id}' was not found")
        return report


__all__ = ["LedgerEntry", "ReportLedger"]
