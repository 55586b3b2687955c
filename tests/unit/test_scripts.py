from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from pathlib import Path

from branch_reports.services.monthly_reports import MonthlyReportService, ReportRequest
from scripts.generate_openapi import main as export_openapi
from scripts.seed_demo_data import seed


def test_seed_is_idempotent_and_reportable(db_session) -> None:
    assert seed(db_session, year=2025, month=3) == 4
    db_session.commit()
    assert seed(db_session, year=2025, month=3) == 0
    db_session.commit()

    report = asyncio.run(
        MonthlyReportService(db_session).generate(ReportRequest(branch_id=None, year=2025, month=3))
    )

    assert report.transaction_count == 4
    assert report.total_amount == Decimal("4250.50")


def test_openapi_export_lists_report_routes(tmp_path: Path) -> None:
    destination = export_openapi(tmp_path / "docs" / "openapi.json")

    schema = json.loads(destination.read_text(encoding="utf-8"))
    assert "/api/reports/monthly" in schema["paths"]
    assert "/api/reports/{report_id}/download" in schema["paths"]
