"""Error taxonomy shared by the report generation pipeline."""
from __future__ import annotations


class ReportGenerationError(RuntimeError):
    """Base class for report generation errors."""


class UnauthorizedError(ReportGenerationError):
    """Raised when the caller's bearer credential is missing or invalid."""


class NoTransactionsError(ReportGenerationError):
    """Raised when no transactions match the requested period."""

    def __init__(self, message: str = "No transactions found for this period") -> None:
        super().__init__(message)


class MixedCurrencyError(ReportGenerationError):
    """Raised when a period mixes currencies and cannot be totalled."""

    def __init__(self, currencies: list[str]) -> None:
        self.currencies = sorted(currencies)
        super().__init__(
            "Transactions in this period use multiple currencies: " + ", ".join(self.currencies)
        )


class ReportNotFoundError(ReportGenerationError):
    """Raised when a ledger entry cannot be located."""


class UpstreamFailureError(ReportGenerationError):
    """Raised when a database or storage collaborator fails."""


class TransactionQueryError(UpstreamFailureError):
    """Raised when the transaction query itself fails."""


class ArtifactUploadError(UpstreamFailureError):
    """Raised when the rendered artifact cannot be stored."""


class LedgerWriteError(UpstreamFailureError):
    """Raised when the ledger insert fails."""


class UpstreamTimeoutError(UpstreamFailureError):
    """Raised when an I/O step exceeds its time budget."""


class RenderFailureError(ReportGenerationError):
    """Raised when document assembly fails."""


__all__ = [
    "ArtifactUploadError",
    "LedgerWriteError",
    "MixedCurrencyError",
    "NoTransactionsError",
    "RenderFailureError",
    "ReportGenerationError",
    "ReportNotFoundError",
    "TransactionQueryError",
    "UnauthorizedError",
    "UpstreamFailureError",
    "UpstreamTimeoutError",
]
