"""Ledger of generated report artifacts."""
from __future__ import annotations

import enum
import uuid
from decimal import Decimal

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from branch_reports.models.base import Base, CreatedAtMixin


class ReportType(str, enum.Enum):
    MONTHLY = "monthly"


class ReportStatus(str, enum.Enum):
    COMPLETED = "completed"


class GeneratedReport(CreatedAtMixin, Base):
    """One row per successful report generation; never updated."""

    __tablename__ = "generated_reports"
    __table_args__ = (
        Index("ix_generated_reports_lookup", "branch_id", "report_period", "report_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    branch_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("branches.id", ondelete="SET NULL"), nullable=True
    )
    report_type: Mapped[ReportType] = mapped_column(
        SAEnum(
            ReportType,
            name="report_type",
            native_enum=False,
            length=16,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=ReportType.MONTHLY,
    )
    report_period: Mapped[str] = mapped_column(String(7), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    generated_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[ReportStatus] = mapped_column(
        SAEnum(
            ReportStatus,
            name="report_status",
            native_enum=False,
            length=16,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=ReportStatus.COMPLETED,
    )


__all__ = ["GeneratedReport", "ReportStatus", "ReportType"]
