"""Transaction queries backing the monthly reports."""
from __future__ import annotations

import calendar
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from branch_reports.core.config import Settings, get_settings
from branch_reports.models import Branch, Profile, Transaction
from branch_reports.schemas.transaction import TransactionRecord
from branch_reports.services.errors import (
    MixedCurrencyError,
    NoTransactionsError,
    TransactionQueryError,
)

logger = logging.getLogger(__name__)

ALL_BRANCHES_LABEL = "All Branches"


@dataclass(slots=True, frozen=True)
class ReportSummary:
    """Aggregates shared by the rendered document and its ledger entry."""

    transaction_count: int
    total_amount: Decimal
    currency: str


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last calendar day of ``year``-``month``."""

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def format_period(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def summarize(records: Sequence[TransactionRecord], *, default_currency: str = "AFN") -> ReportSummary:
    """Total the records, refusing batches that mix currencies."""

    currencies = {record.currency for record in records}
    if len(currencies) > 1:
        raise MixedCurrencyError(list(currencies))
    total = sum((record.amount for record in records), Decimal("0"))
    currency = records[0].currency if records else default_currency
    return ReportSummary(
        transaction_count=len(records),
        total_amount=total,
        currency=currency or default_currency,
    )


class TransactionQueryService:
    """Reads transactions and display names for report periods."""

    def __init__(self, session: Session, *, settings: Settings | None = None) -> None:
        self._session = session
        self._settings = settings or get_settings()

    def fetch_for_period(self, *, branch_id: str | None, year: int, month: int) -> list[TransactionRecord]:
        start, end = month_bounds(year, month)
        from_branch = aliased(Branch)
        to_branch = aliased(Branch)
        from_staff = aliased(Profile)
        to_staff = aliased(Profile)

        statement = (
            select(
                Transaction,
                from_branch.name,
                to_branch.name,
                from_staff.full_name,
                to_staff.full_name,
            )
            .outerjoin(from_branch, from_branch.id == Transaction.from_branch_id)
            .outerjoin(to_branch, to_branch.id == Transaction.to_branch_id)
            .outerjoin(from_staff, from_staff.id == Transaction.from_staff_id)
            .outerjoin(to_staff, to_staff.id == Transaction.to_staff_id)
            .where(Transaction.transaction_date >= start, Transaction.transaction_date <= end)
            .order_by(Transaction.transaction_date.asc(), Transaction.transaction_number.asc())
        )
        if branch_id:
            statement = statement.where(
                or_(Transaction.from_branch_id == branch_id, Transaction.to_branch_id == branch_id)
            )

        try:
            rows = self._session.execute(statement).all()
        except SQLAlchemyError as exc:
            logger.error(
                "transaction query failed",
                extra={"branch_id": branch_id, "period": format_period(year, month), "error": str(exc)},
            )
            raise TransactionQueryError(f"Transaction query failed: {exc}") from exc

        if not rows:
            raise NoTransactionsError()

        try:
            records = [self._to_record(*row) for row in rows]
        except ValidationError as exc:
            raise TransactionQueryError(f"Transaction data failed validation: {exc}") from exc

        logger.info(
            "fetched transactions for report",
            extra={"branch_id": branch_id, "period": format_period(year, month), "count": len(records)},
        )
        return records

    def resolve_branch_name(self, branch_id: str | None) -> str:
        if not branch_id:
            return ALL_BRANCHES_LABEL
        try:
            name = self._session.scalar(select(Branch.name).where(Branch.id == branch_id))
        except SQLAlchemyError as exc:
            raise TransactionQueryError(f"Branch lookup failed: {exc}") from exc
        if name is None:
            logger.warning("branch not found, labelling report by id", extra={"branch_id": branch_id})
            return branch_id
        return name

    def resolve_profile_id(self, auth_user_id: str | None) -> str | None:
        if not auth_user_id:
            return None
        try:
            return self._session.scalar(select(Profile.id).where(Profile.auth_user_id == auth_user_id))
        except SQLAlchemyError as exc:
            raise TransactionQueryError(f"Profile lookup failed: {exc}") from exc

    def summarize(self, records: Sequence[TransactionRecord]) -> ReportSummary:
        return summarize(records, default_currency=self._settings.default_currency)

    @staticmethod
    def _to_record(
        transaction: Transaction,
        from_branch_name: str | None,
        to_branch_name: str | None,
        from_staff_name: str | None,
        to_staff_name: str | None,
    ) -> TransactionRecord:
        return TransactionRecord(
            id=transaction.id,
            transaction_number=transaction.transaction_number,
            transaction_date=transaction.transaction_date,
            from_branch_id=transaction.from_branch_id,
            to_branch_id=transaction.to_branch_id,
            from_branch_name=from_branch_name,
            to_branch_name=to_branch_name,
            from_staff_name=from_staff_name,
            to_staff_name=to_staff_name,
            amount=Decimal(transaction.amount),
            currency=transaction.currency,
            transfer_method=getattr(transaction.transfer_method, "value", transaction.transfer_method),
            status=getattr(transaction.status, "value", transaction.status),
            received_date=transaction.received_date,
            confirmation_code=transaction.confirmation_code,
            notes=transaction.notes,
        )


__all__ = [
    "ALL_BRANCHES_LABEL",
    "ReportSummary",
    "TransactionQueryService",
    "format_period",
    "month_bounds",
    "summarize",
]
