from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from branch_reports.schemas.transaction import TransactionRecord
from branch_reports.services.errors import MixedCurrencyError, NoTransactionsError
from branch_reports.services.rendering import from_to_label
from branch_reports.services.transactions import (
    ALL_BRANCHES_LABEL,
    TransactionQueryService,
    format_period,
    month_bounds,
    summarize,
)
from tests.conftest import AUTH_USER_ID


def test_month_bounds_handles_month_lengths() -> None:
    assert month_bounds(2025, 3) == (date(2025, 3, 1), date(2025, 3, 31))
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2025, 2) == (date(2025, 2, 1), date(2025, 2, 28))
    assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))


def test_format_period_zero_pads() -> None:
    assert format_period(2025, 3) == "2025-03"
    assert format_period(987, 11) == "0987-11"


def test_fetch_includes_only_dates_inside_the_month(db_session, branches, make_transaction) -> None:
    kabul = branches["kabul"].id
    herat = branches["herat"].id
    for number, day in [
        ("TX-FEB28", date(2025, 2, 28)),
        ("TX-MAR01", date(2025, 3, 1)),
        ("TX-MAR31", date(2025, 3, 31)),
        ("TX-APR01", date(2025, 4, 1)),
    ]:
        make_transaction(
            from_branch_id=kabul, to_branch_id=herat, transaction_date=day, transaction_number=number
        )

    records = TransactionQueryService(db_session).fetch_for_period(branch_id=None, year=2025, month=3)

    assert [record.transaction_number for record in records] == ["TX-MAR01", "TX-MAR31"]


def test_branch_filter_matches_either_side(db_session, branches, make_transaction) -> None:
    kabul = branches["kabul"].id
    herat = branches["herat"].id
    mazar = branches["mazar"].id
    make_transaction(from_branch_id=kabul, to_branch_id=herat, transaction_number="TX-OUT")
    make_transaction(from_branch_id=herat, to_branch_id=kabul, transaction_number="TX-IN")
    make_transaction(from_branch_id=herat, to_branch_id=mazar, transaction_number="TX-OTHER")

    service = TransactionQueryService(db_session)
    kabul_records = service.fetch_for_period(branch_id=kabul, year=2025, month=3)
    all_records = service.fetch_for_period(branch_id=None, year=2025, month=3)

    assert {record.transaction_number for record in kabul_records} == {"TX-OUT", "TX-IN"}
    assert all(kabul in (record.from_branch_id, record.to_branch_id) for record in kabul_records)
    assert len(all_records) == 3


def test_records_are_ordered_by_date_then_number(db_session, branches, make_transaction) -> None:
    kabul = branches["kabul"].id
    herat = branches["herat"].id
    make_transaction(
        from_branch_id=kabul, to_branch_id=herat, transaction_date=date(2025, 3, 20), transaction_number="TX-B"
    )
    make_transaction(
        from_branch_id=kabul, to_branch_id=herat, transaction_date=date(2025, 3, 5), transaction_number="TX-Z"
    )
    make_transaction(
        from_branch_id=kabul, to_branch_id=herat, transaction_date=date(2025, 3, 20), transaction_number="TX-A"
    )

    records = TransactionQueryService(db_session).fetch_for_period(branch_id=kabul, year=2025, month=3)

    assert [record.transaction_number for record in records] == ["TX-Z", "TX-A", "TX-B"]


def test_records_carry_branch_and_staff_names(db_session, branches, staff, make_transaction) -> None:
    make_transaction(
        from_branch_id=branches["kabul"].id,
        to_branch_id=branches["herat"].id,
        from_staff_id=staff["admin"].id,
        to_staff_id=staff["cashier"].id,
        amount="2500.75",
    )

    (record,) = TransactionQueryService(db_session).fetch_for_period(
        branch_id=branches["kabul"].id, year=2025, month=3
    )

    assert record.from_branch_name == "Kabul Branch"
    assert record.to_branch_name == "Herat Branch"
    assert record.from_staff_name == "Farida Ahmadi"
    assert record.to_staff_name == "Omid Rahimi"
    assert record.amount == Decimal("2500.75")
    assert record.transfer_method == "Hawala"
    assert record.status == "confirmed"


def test_dangling_branch_reference_yields_missing_name(db_session, branches, make_transaction) -> None:
    make_transaction(from_branch_id="deleted-branch", to_branch_id=branches["kabul"].id)

    (record,) = TransactionQueryService(db_session).fetch_for_period(
        branch_id=branches["kabul"].id, year=2025, month=3
    )

    assert record.from_branch_id == "deleted-branch"
    assert record.from_branch_name is None
    assert from_to_label(record.from_branch_name, record.to_branch_name) == "N/A - Kabul Bran"


def test_empty_period_raises_no_transactions(db_session, branches, make_transaction) -> None:
    make_transaction(
        from_branch_id=branches["kabul"].id,
        to_branch_id=branches["herat"].id,
        transaction_date=date(2025, 1, 15),
    )

    with pytest.raises(NoTransactionsError, match="No transactions found for this period"):
        TransactionQueryService(db_session).fetch_for_period(branch_id=None, year=2025, month=3)


def test_resolve_branch_name(db_session, branches) -> None:
    service = TransactionQueryService(db_session)

    assert service.resolve_branch_name(None) == ALL_BRANCHES_LABEL
    assert service.resolve_branch_name("") == ALL_BRANCHES_LABEL
    assert service.resolve_branch_name(branches["herat"].id) == "Herat Branch"
    assert service.resolve_branch_name("unknown-branch") == "unknown-branch"


def test_resolve_profile_id(db_session, staff) -> None:
    service = TransactionQueryService(db_session)

    assert service.resolve_profile_id(AUTH_USER_ID) == staff["admin"].id
    assert service.resolve_profile_id("someone-else") is None
    assert service.resolve_profile_id(None) is None


def _record(number: str, amount: str, currency: str = "AFN") -> TransactionRecord:
    return TransactionRecord(
        id=number,
        transaction_number=number,
        transaction_date=date(2025, 3, 1),
        amount=Decimal(amount),
        currency=currency,
        transfer_method="Cash",
        status="pending",
    )


def test_summarize_totals_records() -> None:
    summary = summarize([_record("a", "1000"), _record("b", "2000"), _record("c", "500.25")])

    assert summary.transaction_count == 3
    assert summary.total_amount == Decimal("3500.25")
    assert summary.currency == "AFN"


def test_summarize_rejects_mixed_currencies() -> None:
    with pytest.raises(MixedCurrencyError) as excinfo:
        summarize([_record("a", "100", "USD"), _record("b", "200", "AFN")])

    assert excinfo.value.currencies == ["AFN", "USD"]
    assert str(excinfo.value) == "Transactions in this period use multiple currencies: AFN, USD"


def test_summarize_empty_uses_default_currency() -> None:
    summary = summarize([], default_currency="USD")

    assert summary.transaction_count == 0
    assert summary.total_amount == Decimal("0")
    assert summary.currency == "USD"
