from __future__ import annotations

import pytest

from branch_reports.api.errors import status_for
from branch_reports.services.errors import (
    ArtifactUploadError,
    LedgerWriteError,
    MixedCurrencyError,
    NoTransactionsError,
    RenderFailureError,
    ReportNotFoundError,
    UnauthorizedError,
    UpstreamTimeoutError,
)


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (UnauthorizedError("Unauthorized"), 401),
        (NoTransactionsError("No transactions found for the specified period"), 404),
        (ReportNotFoundError("Report 'x' was not found"), 404),
        (MixedCurrencyError(["AFN", "USD"]), 422),
        (UpstreamTimeoutError("Transaction query timed out after 30s"), 504),
        (ArtifactUploadError("Failed to upload PDF: quota"), 502),
        (LedgerWriteError("Failed to record report: gone"), 502),
        (RenderFailureError("Failed to generate PDF: boom"), 500),
    ],
)
def test_status_for_maps_report_errors(exc, expected) -> None:  # type: ignore[no-untyped-def]
    assert status_for(exc) == expected
