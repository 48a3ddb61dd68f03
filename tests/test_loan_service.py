"""Loan servicing tests: schedules, payments, closure and debt aggregates."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from moneytrack.errors import NotFoundError, StorageError, ValidationError
from moneytrack.models import Currency, LoanStatus, PaymentFrequency


@pytest.fixture
def payer(account_factory):
    return account_factory("Payer", balance="5000")


def test_create_loan_persists_schedule(loans, loan_factory):
    loan = loan_factory()

    assert loan.id is not None
    assert loan.status is LoanStatus.ACTIVE
    assert loan.currency is Currency.ARS
    assert loan.principal == Decimal("1200")

    installments = loans.get_installments(loan.id)
    assert [row.sequence for row in installments] == list(range(1, 13))
    first = installments[0]
    assert first.due_date == date(2025, 2, 1)
    assert first.interest_amount == Decimal("12.00")
    assert first.principal_amount == Decimal("94.62")
    assert first.total_amount == Decimal("106.62")
    assert not any(row.paid for row in installments)


def test_installment_totals_match_their_parts(loans, loan_factory):
    loan = loan_factory(principal="50000", interest_rate="0.35", installment_count=24)
    for row in loans.get_installments(loan.id):
        assert row.total_amount == row.principal_amount + row.interest_amount + row.fees_amount


def test_loan_without_installment_count_has_no_schedule(loans, loan_factory):
    loan = loan_factory(installment_count=None)
    assert loans.get_installments(loan.id) == []
    assert loans.get_loan(loan.id).status is LoanStatus.ACTIVE


def test_missing_interest_rate_means_interest_free(loans, account_factory):
    borrower = account_factory("Borrower")
    loan = loans.create_loan(borrower.id, "600", None, date(2025, 1, 1), installment_count=6)

    assert loan.interest_rate == Decimal("0")
    assert all(row.interest_amount == Decimal("0.00") for row in loans.get_installments(loan.id))


def test_create_loan_validation(loans, account_factory):
    borrower = account_factory("Borrower")

    with pytest.raises(ValidationError):
        loans.create_loan(borrower.id, "1000", "-0.1", date(2025, 1, 1), installment_count=3)
    with pytest.raises(ValidationError):
        loans.create_loan(borrower.id, "0", "0.1", date(2025, 1, 1))
    with pytest.raises(ValidationError):
        loans.create_loan(
            borrower.id, "1000", "0.1", date(2025, 1, 1), end_date=date(2024, 12, 31)
        )
    with pytest.raises(ValidationError):
        loans.create_loan(
            borrower.id, "1000", "0.1", date(2025, 1, 1), payment_frequency="Daily"
        )
    with pytest.raises(NotFoundError):
        loans.create_loan(9999, "1000", "0.1", date(2025, 1, 1))
    with pytest.raises(NotFoundError):
        loans.create_loan(borrower.id, "1000", "0.1", date(2025, 1, 1), lender_account_id=9999)

    assert loans.list_loans() == []


def test_storage_failure_while_writing_schedule_leaves_no_loan(ctx, loans, account_factory, monkeypatch):
    borrower = account_factory("Borrower")

    def broken(installments, *, session=None):
        raise OperationalError("INSERT INTO loan_installment", {}, Exception("database is locked"))

    monkeypatch.setattr(ctx.installment_repo, "create_many", broken)

    with pytest.raises(StorageError):
        loans.create_loan(borrower.id, "1200", "0.12", date(2025, 1, 1), installment_count=12)

    assert loans.list_loans() == []
    assert ctx.installment_repo.list_by_loan(1) == []


# =============================================================================
# Payments and closure
# =============================================================================


def test_loan_closes_when_last_installment_is_paid(loans, loan_factory, payer):
    loan = loan_factory()
    installments = loans.get_installments(loan.id)

    for row in installments[:-1]:
        loans.mark_installment_as_paid(row.id, payer.id)
        assert loans.get_loan(loan.id).status is LoanStatus.ACTIVE

    paid = loans.mark_installment_as_paid(installments[-1].id, payer.id)

    assert paid.paid is True
    assert paid.payment_account_id == payer.id
    assert paid.paid_date is not None
    assert loans.get_loan(loan.id).status is LoanStatus.CLOSED


def test_payment_order_does_not_matter_for_closure(loans, loan_factory, payer):
    loan = loan_factory(installment_count=3)
    for row in reversed(loans.get_installments(loan.id)):
        loans.mark_installment_as_paid(row.id, payer.id)
    assert loans.get_loan(loan.id).status is LoanStatus.CLOSED


def test_paying_twice_keeps_first_payment(loans, loan_factory, payer, account_factory):
    loan = loan_factory(installment_count=2)
    first = loans.get_installments(loan.id)[0]
    when = datetime(2025, 2, 1, 9, 30, tzinfo=timezone.utc)

    loans.mark_installment_as_paid(first.id, payer.id, paid_at=when)
    other = account_factory("Other")
    again = loans.mark_installment_as_paid(first.id, other.id)

    assert again.payment_account_id == payer.id
    assert again.paid_date.replace(tzinfo=None) == when.replace(tzinfo=None)
    assert loans.get_loan(loan.id).status is LoanStatus.ACTIVE


def test_mark_paid_unknown_installment_or_account(loans, loan_factory, payer):
    loan = loan_factory(installment_count=1)
    row = loans.get_installments(loan.id)[0]

    with pytest.raises(NotFoundError):
        loans.mark_installment_as_paid(9999, payer.id)
    with pytest.raises(NotFoundError):
        loans.mark_installment_as_paid(row.id, 9999)

    assert loans.get_installments(loan.id)[0].paid is False


def test_paying_defaulted_loan_does_not_reopen_or_close_it(loans, loan_factory, payer):
    loan = loan_factory(installment_count=1)
    loans.mark_defaulted(loan.id)

    loans.mark_installment_as_paid(loans.get_installments(loan.id)[0].id, payer.id)

    assert loans.get_loan(loan.id).status is LoanStatus.DEFAULTED


def test_payment_logs_events(loans, loan_factory, payer, caplog):
    loan = loan_factory(installment_count=1)
    row = loans.get_installments(loan.id)[0]

    with caplog.at_level("INFO", logger="moneytrack"):
        loans.mark_installment_as_paid(row.id, payer.id)

    messages = [record.getMessage() for record in caplog.records]
    assert "PAY_LOAN_INSTALLMENT" in messages
    assert "CLOSE_LOAN" in messages


# =============================================================================
# Status transitions and deletion
# =============================================================================


def test_close_and_default_transitions(loans, loan_factory):
    closed = loan_factory()
    defaulted = loan_factory()

    assert loans.close_loan(closed.id).status is LoanStatus.CLOSED
    assert loans.close_loan(closed.id).status is LoanStatus.CLOSED
    assert loans.mark_defaulted(defaulted.id).status is LoanStatus.DEFAULTED

    with pytest.raises(ValidationError):
        loans.mark_defaulted(closed.id)
    with pytest.raises(ValidationError):
        loans.close_loan(defaulted.id)
    with pytest.raises(NotFoundError):
        loans.close_loan(9999)

    assert [loan.id for loan in loans.list_active_loans()] == []


def test_delete_loan_removes_installments(ctx, loans, loan_factory):
    loan = loan_factory()
    keep = loan_factory(installment_count=2)

    assert loans.delete_loan(loan.id) is True
    assert loans.get_loan(loan.id) is None
    assert ctx.installment_repo.list_by_loan(loan.id) == []
    assert len(loans.get_installments(keep.id)) == 2
    assert loans.delete_loan(loan.id) is False


def test_update_loan_fields(loans, loan_factory, account_factory):
    loan = loan_factory()
    lender = account_factory("Bank")

    updated = loans.update_loan(loan.id, lender_account_id=lender.id, notes="Car", term_months=12)

    assert updated.lender_account_id == lender.id
    assert updated.notes == "Car"
    assert len(loans.get_installments(loan.id)) == 12

    with pytest.raises(ValidationError):
        loans.update_loan(loan.id, principal="1")
    with pytest.raises(NotFoundError):
        loans.update_loan(loan.id, lender_account_id=9999)


def test_update_loan_rejects_end_date_before_start(loans, loan_factory):
    loan = loan_factory(start_date=date(2025, 1, 1))
    loans.update_loan(loan.id, end_date=date(2026, 1, 1))

    with pytest.raises(ValidationError, match="end_date"):
        loans.update_loan(loan.id, end_date=date(2024, 12, 31))

    assert loans.get_loan(loan.id).end_date == date(2026, 1, 1)
    assert loans.update_loan(loan.id, end_date=date(2025, 1, 1)).end_date == date(2025, 1, 1)


def test_list_by_borrower(loans, loan_factory, account_factory):
    mine = account_factory("Mine")
    first = loan_factory(borrower=mine)
    second = loan_factory(borrower=mine)
    loan_factory()

    assert [loan.id for loan in loans.list_by_borrower(mine.id)] == [second.id, first.id]


# =============================================================================
# Debt aggregates
# =============================================================================


def test_total_debt_sums_unpaid_installments_of_active_loans(loans, loan_factory, payer):
    assert loans.get_total_debt() == Decimal("0")

    loan = loan_factory()
    installments = loans.get_installments(loan.id)
    full = sum(row.total_amount for row in installments)
    assert loans.get_total_debt() == full

    loans.mark_installment_as_paid(installments[0].id, payer.id)
    assert loans.get_total_debt() == full - installments[0].total_amount

    other = loan_factory(principal="300", installment_count=3)
    loans.mark_defaulted(other.id)
    assert loans.get_total_debt() == full - installments[0].total_amount


def test_next_payment_due_is_earliest_across_loans(loans, loan_factory, payer):
    assert loans.get_next_payment_due() is None

    monthly = loan_factory(start_date=date(2025, 1, 1))
    weekly = loan_factory(
        start_date=date(2024, 12, 20),
        payment_frequency=PaymentFrequency.WEEKLY,
        installment_count=10,
    )

    upcoming = loans.get_next_payment_due()
    assert upcoming.loan.id == weekly.id
    assert upcoming.installment.sequence == 1
    assert upcoming.installment.due_date == date(2024, 12, 27)

    loans.mark_installment_as_paid(upcoming.installment.id, payer.id)
    upcoming = loans.get_next_payment_due()
    assert upcoming.loan.id == weekly.id
    assert upcoming.installment.due_date == date(2025, 1, 3)

    loans.close_loan(weekly.id)
    upcoming = loans.get_next_payment_due()
    assert upcoming.loan.id == monthly.id
    assert upcoming.installment.due_date == date(2025, 2, 1)


def test_next_payment_tie_goes_to_newest_loan(loans, loan_factory):
    older = loan_factory()
    newer = loan_factory()

    upcoming = loans.get_next_payment_due()

    assert newer.id > older.id
    assert upcoming.loan.id == newer.id
    assert upcoming.installment.due_date == date(2025, 2, 1)


def test_fully_paid_loans_have_no_next_payment(loans, loan_factory, payer):
    loan = loan_factory(installment_count=2)
    for row in loans.get_installments(loan.id):
        loans.mark_installment_as_paid(row.id, payer.id)
    assert loans.get_next_payment_due() is None
    assert loans.get_total_debt() == Decimal("0")
