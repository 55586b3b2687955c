"""ORM models package."""
from .base import Base, CreatedAtMixin
from .branch import Branch
from .generated_report import GeneratedReport, ReportStatus, ReportType
from .profile import Profile
from .transaction import Transaction, TransactionStatus, TransferMethod

__all__ = [
    "Base",
    "Branch",
    "CreatedAtMixin",
    "GeneratedReport",
    "Profile",
    "ReportStatus",
    "ReportType",
    "Transaction",
    "TransactionStatus",
    "TransferMethod",
]
