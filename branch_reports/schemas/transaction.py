"""Pydantic schemas for transaction records consumed by the reports."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class TransactionRecord(BaseModel):
    """Transaction joined with its branch and staff display names."""

    model_config = ConfigDict(frozen=True)

    id: str
    transaction_number: str
    transaction_date: date
    from_branch_id: str | None = None
    to_branch_id: str | None = None
    from_branch_name: str | None = None
    to_branch_name: str | None = None
    from_staff_name: str | None = None
    to_staff_name: str | None = None
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(..., min_length=1, max_length=3)
    transfer_method: str
    status: str
    received_date: date | None = None
    confirmation_code: str | None = None
    notes: str | None = None


__all__ = ["TransactionRecord"]
