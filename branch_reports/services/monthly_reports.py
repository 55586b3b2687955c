"""Monthly report generation pipeline: query, render, upload, record."""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from branch_reports.core.config import Settings, get_settings
from branch_reports.models import GeneratedReport
from branch_reports.obs import REPORT_ARTIFACT_BYTES, REPORT_RENDER_SECONDS, record_report_outcome, report_span
from branch_reports.services.errors import ReportGenerationError, UpstreamTimeoutError
from branch_reports.services.ledger import LedgerEntry, ReportLedger
from branch_reports.services.rendering import MonthlyReportRenderer
from branch_reports.services.storage import (
    PDF_CONTENT_TYPE,
    ReportArtifactStore,
    build_artifact_key,
    build_file_name,
)
from branch_reports.services.transactions import TransactionQueryService, format_period

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class ReportRequest:
    """Branch (``None`` for all branches) and calendar month to report on."""

    branch_id: str | None
    year: int
    month: int

    @property
    def period(self) -> str:
        return format_period(self.year, self.month)


class MonthlyReportService:
    """Runs one report generation end to end within a single request.

    Steps that touch the database session run in a worker thread and are never
    abandoned: when one exceeds its time budget the service waits for the
    thread to hand the session back (the PostgreSQL ``statement_timeout``
    bounds that wait), rolls back and only then reports the timeout. The
    ledger insert checks for abandonment before committing, so a row exists
    exactly when success is reported.
    """

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        query_service: TransactionQueryService | None = None,
        renderer: MonthlyReportRenderer | None = None,
        artifact_store: ReportArtifactStore | None = None,
        ledger: ReportLedger | None = None,
    ) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._queries = query_service or TransactionQueryService(session, settings=self._settings)
        self._renderer = renderer or MonthlyReportRenderer(repeat_header=self._settings.report_repeat_header)
        self._store = artifact_store or ReportArtifactStore(settings=self._settings)
        self._ledger = ledger or ReportLedger(session)

    async def generate(self, request: ReportRequest, *, actor_user_id: str | None = None) -> GeneratedReport:
        try:
            report = await self._generate(request, actor_user_id=actor_user_id)
        except ReportGenerationError as exc:
            record_report_outcome(type(exc).__name__)
            raise
        record_report_outcome("completed")
        return report

    async def _generate(self, request: ReportRequest, *, actor_user_id: str | None) -> GeneratedReport:
        period = request.period
        settings = self._settings

        with report_span("reports.query", branch_id=request.branch_id, period=period):
            records = await self._run_session_step(
                "transaction query",
                settings.report_query_timeout_seconds,
                self._queries.fetch_for_period,
                branch_id=request.branch_id,
                year=request.year,
                month=request.month,
            )
            branch_name = await self._run_session_step(
                "branch lookup",
                settings.report_query_timeout_seconds,
                self._queries.resolve_branch_name,
                request.branch_id,
            )
        summary = self._queries.summarize(records)

        with report_span("reports.render", period=period, rows=len(records)):
            started = time.perf_counter()
            rendered = self._renderer.render(records, branch_name=branch_name, period=period, summary=summary)
            REPORT_RENDER_SECONDS.observe(time.perf_counter() - started)

        file_name = build_file_name(period, branch_name)
        key = build_artifact_key(period, branch_name)
        with report_span("reports.upload", key=key, size=rendered.size):
            artifact = await self._run_detached(
                "report upload",
                settings.report_upload_timeout_seconds,
                self._store.store,
                key,
                rendered.content,
                PDF_CONTENT_TYPE,
            )
        REPORT_ARTIFACT_BYTES.observe(artifact.size)

        with report_span("reports.record", key=key):
            generated_by = await self._run_session_step(
                "profile lookup",
                settings.report_query_timeout_seconds,
                self._queries.resolve_profile_id,
                actor_user_id,
            )
            entry = LedgerEntry(
                branch_id=request.branch_id,
                report_period=period,
                file_name=file_name,
                file_path=artifact.key,
                file_size=artifact.size,
                transaction_count=summary.transaction_count,
                total_amount=summary.total_amount,
                currency=summary.currency,
                generated_by=generated_by,
            )
            report = await self._run_session_step(
                "ledger insert",
                settings.report_ledger_timeout_seconds,
                self._ledger.record,
                entry,
                abandoned=threading.Event(),
            )

        logger.info(
            "generated monthly report",
            extra={
                "report_id": report.id,
                "branch_id": request.branch_id,
                "period": period,
                "pages": rendered.page_count,
                "transaction_count": summary.transaction_count,
            },
        )
        return report

    async def _run_session_step(
        self,
        step: str,
        timeout: float,
        func: Callable[..., T],
        *args: Any,
        abandoned: threading.Event | None = None,
        **kwargs: Any,
    ) -> T:
        """Run a session-bound step in a thread and wait for it even past its budget.

        When ``abandoned`` is given it is handed to ``func``, which must check it
        before making its work durable. A write that still completes after the
        budget is kept and reported as a success.
        """

        if abandoned is not None:
            kwargs["abandoned"] = abandoned
        task = asyncio.ensure_future(asyncio.to_thread(func, *args, **kwargs))
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError as exc:
            if abandoned is not None:
                abandoned.set()
            logger.error("report step timed out", extra={"step": step, "timeout_seconds": timeout})
            message = f"{step.capitalize()} timed out after {timeout:g}s"
            try:
                result = await task
            except Exception as late_exc:
                self._session.rollback()
                raise UpstreamTimeoutError(message) from late_exc
            if abandoned is None:
                self._session.rollback()
                raise UpstreamTimeoutError(message) from exc
            logger.warning("report step finished after its time budget", extra={"step": step})
            return result

    async def _run_detached(self, step: str, timeout: float, func: Callable[..., T], *args: Any) -> T:
        """Run a step that holds no session; on timeout its thread is left to finish alone."""

        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.error("report step timed out", extra={"step": step, "timeout_seconds": timeout})
            raise UpstreamTimeoutError(f"{step.capitalize()} timed out after {timeout:g}s") from exc


__all__ = ["MonthlyReportService", "ReportRequest"]
