"""Seed script for demo branches, staff and a month of transfers."""
from __future__ import annotations

import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from branch_reports.db.session import engine, session_scope
from branch_reports.models import Base, Branch, Profile, Transaction, TransactionStatus, TransferMethod

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_BRANCHES = ("Kabul Branch", "Herat Branch", "Mazar-i-Sharif")
DEMO_TRANSFERS = (
    ("Kabul Branch", "Herat Branch", "1000", TransferMethod.HAWALA, 3),
    ("Herat Branch", "Kabul Branch", "2000", TransferMethod.BANK_TRANSFER, 9),
    ("Kabul Branch", "Mazar-i-Sharif", "500", TransferMethod.WESTERN_UNION, 17),
    ("Mazar-i-Sharif", "Herat Branch", "750.50", TransferMethod.CASH, 24),
)


def seed(session: Session, *, year: int, month: int) -> int:
    """Create demo branches and staff if missing, then add the month's transfers.

    Returns the number of transactions inserted.
    """

    branches = {branch.name: branch for branch in session.scalars(select(Branch))}
    for name in DEMO_BRANCHES:
        if name in branches:
            logger.info("Branch %s already exists", name)
            continue
        branches[name] = Branch(name=name)
        session.add(branches[name])
        logger.info("Created branch %s", name)
    session.flush()

    staff = {profile.branch_id: profile for profile in session.scalars(select(Profile))}
    for branch in branches.values():
        if branch.id not in staff:
            staff[branch.id] = Profile(full_name=f"{branch.name} Cashier", branch_id=branch.id)
            session.add(staff[branch.id])
    session.flush()

    inserted = 0
    for index, (source, target, amount, method, day) in enumerate(DEMO_TRANSFERS, start=1):
        number = f"TX-{year:04d}{month:02d}-{index:04d}"
        if session.scalar(select(Transaction.id).where(Transaction.transaction_number == number)):
            logger.info("Transaction %s already exists", number)
            continue
        session.add(
            Transaction(
                transaction_number=number,
                from_branch_id=branches[source].id,
                to_branch_id=branches[target].id,
                from_staff_id=staff[branches[source].id].id,
                to_staff_id=staff[branches[target].id].id,
                amount=Decimal(amount),
                currency="AFN",
                transfer_method=method,
                transaction_date=date(year, month, day),
                status=TransactionStatus.CONFIRMED,
            )
        )
        inserted += 1
        logger.info("Added transaction %s", number)
    return inserted


def main() -> None:
    today = date.today()
    year, month = (today.year - 1, 12) if today.month == 1 else (today.year, today.month - 1)
    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        seed(session, year=year, month=month)


if __name__ == "__main__":
    main()
