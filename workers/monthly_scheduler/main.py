"""Worker generating last month's reports at the start of every month."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from branch_reports.core.config import Settings, get_settings
from branch_reports.db.session import SessionLocal
from branch_reports.models import Branch
from branch_reports.services.errors import MixedCurrencyError, NoTransactionsError, ReportGenerationError
from branch_reports.services.monthly_reports import MonthlyReportService, ReportRequest
from branch_reports.workers.observability import configure_worker
from workers.monthly_scheduler.scheduler import run_monthly_scheduler

logger = logging.getLogger(__name__)


class MonthlyReportWorker:
    """Generates the all-branches report and, optionally, one per branch."""

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        settings: Settings | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or get_settings()

    async def generate_period(self, year: int, month: int) -> list[str]:
        """Generate every report for the period and return the new ledger ids."""

        session = self._session_factory()
        try:
            branch_ids: list[str | None] = [None]
            if self._settings.scheduler_include_branches:
                branch_ids.extend(session.scalars(select(Branch.id).order_by(Branch.name)).all())

            service = MonthlyReportService(session, settings=self._settings)
            report_ids: list[str] = []
            for branch_id in branch_ids:
                request = ReportRequest(branch_id=branch_id, year=year, month=month)
                try:
                    report = await service.generate(request)
                except (NoTransactionsError, MixedCurrencyError) as exc:
                    session.rollback()
                    logger.info(
                        "skipped scheduled report",
                        extra={"branch_id": branch_id, "period": request.period, "reason": str(exc)},
                    )
                    continue
                except ReportGenerationError:
                    session.rollback()
                    logger.exception(
                        "scheduled report failed",
                        extra={"branch_id": branch_id, "period": request.period},
                    )
                    continue
                report_ids.append(report.id)
        finally:
            session.close()

        logger.info(
            "scheduled reports generated",
            extra={"period": f"{year:04d}-{month:02d}", "count": len(report_ids)},
        )
        return report_ids

    async def run_forever(self) -> None:
        logger.info("monthly report worker started")

        async def _callback(year: int, month: int) -> None:
            await self.generate_period(year, month)

        await run_monthly_scheduler(_callback)


async def run() -> None:
    configure_worker("monthly-report-worker")
    await MonthlyReportWorker().run_forever()


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:  # pragma: no cover - signal handling for CLI
        logger.info("monthly report worker stopped")


if __name__ == "__main__":
    main()
