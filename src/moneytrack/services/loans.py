"""Loan lifecycle, installment payments and debt aggregates."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlmodel import Session

from ..domain.repositories import AccountRepository, LoanInstallmentRepository, LoanRepository
from ..errors import NotFoundError, ValidationError
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.enums import Currency, LoanStatus, PaymentFrequency, coerce_enum
from ..models.loan import Loan, LoanInstallment
from ..money import ZERO, MoneyInput, positive_amount, to_decimal
from .amortization import generate_schedule

logger = get_logger("services.loans")

UPDATABLE_LOAN_FIELDS = frozenset({"lender_account_id", "end_date", "term_months", "notes"})

# Active is the only state with outgoing transitions.
_TRANSITIONS: dict[LoanStatus, frozenset[LoanStatus]] = {
    LoanStatus.ACTIVE: frozenset({LoanStatus.CLOSED, LoanStatus.DEFAULTED}),
    LoanStatus.CLOSED: frozenset(),
    LoanStatus.DEFAULTED: frozenset(),
}


@dataclass(slots=True)
class NextPayment:
    """The earliest unpaid installment across all active loans."""

    loan: Loan
    installment: LoanInstallment


class LoanService:
    """Create loans with their schedules and service them until closure."""

    def __init__(
        self,
        *,
        session_factory: SessionFactory,
        loan_repo: LoanRepository,
        installment_repo: LoanInstallmentRepository,
        account_repo: AccountRepository,
        lock: Optional[threading.RLock] = None,
    ):
        self.session_factory = session_factory
        self.loan_repo = loan_repo
        self.installment_repo = installment_repo
        self.account_repo = account_repo
        self._lock = lock or threading.RLock()

    def get_loan(self, loan_id: int) -> Optional[Loan]:
        return self.loan_repo.get_by_id(loan_id)

    def list_loans(self) -> list[Loan]:
        return self.loan_repo.list_all()

    def list_active_loans(self) -> list[Loan]:
        return self.loan_repo.list_by_status(LoanStatus.ACTIVE)

    def list_by_borrower(self, account_id: int) -> list[Loan]:
        return self.loan_repo.list_by_borrower(account_id)

    def get_installments(self, loan_id: int) -> list[LoanInstallment]:
        return self.installment_repo.list_by_loan(loan_id)

    def create_loan(
        self,
        borrower_account_id: int,
        principal: MoneyInput,
        interest_rate: Optional[MoneyInput],
        start_date: date,
        *,
        lender_account_id: Optional[int] = None,
        currency: Currency | str = Currency.ARS,
        end_date: Optional[date] = None,
        term_months: Optional[int] = None,
        installment_count: Optional[int] = None,
        payment_frequency: PaymentFrequency | str = PaymentFrequency.MONTHLY,
        notes: Optional[str] = None,
    ) -> Loan:
        """Persist a loan and, when ``installment_count > 0``, its full schedule.

        The loan row and every installment are written in one transaction.
        """
        amount = positive_amount(principal, field="principal")
        rate = ZERO if interest_rate is None else to_decimal(interest_rate, field="interest_rate")
        if rate < ZERO:
            raise ValidationError(f"interest_rate must not be negative, got {rate}")
        loan_currency = coerce_enum(Currency, currency, field="currency")
        frequency = coerce_enum(PaymentFrequency, payment_frequency, field="payment_frequency")
        if end_date is not None and end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        schedule = generate_schedule(
            principal=amount,
            annual_rate=rate,
            installment_count=installment_count or 0,
            start_date=start_date,
            frequency=frequency,
        )

        with unit_of_work(self.session_factory, lock=self._lock, operation="create_loan") as session:
            self._require_account(session, borrower_account_id)
            if lender_account_id is not None:
                self._require_account(session, lender_account_id)

            loan = self.loan_repo.create(
                Loan(
                    borrower_account_id=borrower_account_id,
                    lender_account_id=lender_account_id,
                    principal=amount,
                    currency=loan_currency,
                    interest_rate=rate,
                    start_date=start_date,
                    end_date=end_date,
                    term_months=term_months,
                    installment_count=installment_count,
                    payment_frequency=frequency,
                    status=LoanStatus.ACTIVE,
                    notes=notes,
                ),
                session=session,
            )
            self.installment_repo.create_many(
                (
                    LoanInstallment(
                        loan_id=loan.id,
                        sequence=row.sequence,
                        due_date=row.due_date,
                        principal_amount=row.principal_amount,
                        interest_amount=row.interest_amount,
                        fees_amount=row.fees_amount,
                    )
                    for row in schedule
                ),
                session=session,
            )

        logger.info(
            "CREATE_LOAN",
            extra={
                "loan_id": loan.id,
                "borrower_account_id": borrower_account_id,
                "principal": str(amount),
                "interest_rate": str(rate),
                "currency": loan_currency.value,
                "installments": len(schedule),
            },
        )
        return loan

    def update_loan(self, loan_id: int, **changes: Any) -> Loan:
        """Edit descriptive loan fields. The schedule is left untouched."""
        unknown = set(changes) - UPDATABLE_LOAN_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update loan fields: {', '.join(sorted(unknown))}")

        with unit_of_work(self.session_factory, lock=self._lock, operation="update_loan") as session:
            loan = self._require_loan(session, loan_id)
            end_date = changes.get("end_date")
            if end_date is not None and end_date < loan.start_date:
                raise ValidationError("end_date must not be before start_date")
            if changes.get("lender_account_id") is not None:
                self._require_account(session, changes["lender_account_id"])
            for field, value in changes.items():
                setattr(loan, field, value)
            loan = self.loan_repo.update(loan, session=session)

        logger.info("UPDATE_LOAN", extra={"loan_id": loan_id, "fields": sorted(changes)})
        return loan

    def close_loan(self, loan_id: int) -> Loan:
        """Move an active loan to ``Closed``; closing a closed loan is a no-op."""
        return self._set_status(loan_id, LoanStatus.CLOSED, event="CLOSE_LOAN")

    def mark_defaulted(self, loan_id: int) -> Loan:
        """Move an active loan to ``Defaulted``."""
        return self._set_status(loan_id, LoanStatus.DEFAULTED, event="DEFAULT_LOAN")

    def delete_loan(self, loan_id: int) -> bool:
        """Delete a loan and all of its installments. Returns False if unknown."""
        with unit_of_work(self.session_factory, lock=self._lock, operation="delete_loan") as session:
            deleted = self.loan_repo.delete(loan_id, session=session)
        if deleted:
            logger.info("DELETE_LOAN", extra={"loan_id": loan_id})
        return deleted

    def mark_installment_as_paid(
        self,
        installment_id: int,
        payment_account_id: int,
        *,
        paid_at: Optional[datetime] = None,
    ) -> LoanInstallment:
        """Record that an installment was paid from ``payment_account_id``.

        No money moves here; the matching ledger transaction is the caller's
        job. When this was the last unpaid installment of an active loan, the
        loan is closed in the same transaction. Paying an already-paid
        installment changes nothing.
        """
        closed_loan_id: Optional[int] = None
        with unit_of_work(self.session_factory, lock=self._lock, operation="pay_installment") as session:
            installment = self.installment_repo.get_by_id(installment_id, session=session)
            if installment is None:
                raise NotFoundError("LoanInstallment", installment_id)
            self._require_account(session, payment_account_id)
            if installment.paid:
                return installment

            installment = self.installment_repo.mark_as_paid(
                installment_id,
                payment_account_id=payment_account_id,
                paid_at=paid_at or datetime.now(timezone.utc),
                session=session,
            )
            loan = self._require_loan(session, installment.loan_id)
            siblings = self.installment_repo.list_by_loan(loan.id, session=session)
            if loan.status is LoanStatus.ACTIVE and all(row.paid for row in siblings):
                loan.status = LoanStatus.CLOSED
                self.loan_repo.update(loan, session=session)
                closed_loan_id = loan.id

        logger.info(
            "PAY_LOAN_INSTALLMENT",
            extra={
                "installment_id": installment_id,
                "loan_id": installment.loan_id,
                "payment_account_id": payment_account_id,
                "amount": str(installment.total_amount),
            },
        )
        if closed_loan_id is not None:
            logger.info("CLOSE_LOAN", extra={"loan_id": closed_loan_id, "reason": "fully_paid"})
        return installment

    def get_total_debt(self) -> Decimal:
        """Sum the unpaid installments of every active loan."""
        total = ZERO
        with self.session_factory() as session:
            for loan in self.loan_repo.list_by_status(LoanStatus.ACTIVE, session=session):
                for row in self.installment_repo.list_by_loan(loan.id, session=session):
                    if not row.paid:
                        total += row.total_amount
        return total

    def get_next_payment_due(self) -> Optional[NextPayment]:
        """Return the globally earliest unpaid installment among active loans.

        Active loans are walked newest first, so a due-date tie goes to the
        most recently created loan.
        """
        best: Optional[NextPayment] = None
        with self.session_factory() as session:
            for loan in self.loan_repo.list_by_status(LoanStatus.ACTIVE, session=session):
                unpaid = [
                    row
                    for row in self.installment_repo.list_by_loan(loan.id, session=session)
                    if not row.paid
                ]
                if not unpaid:
                    continue
                candidate = min(unpaid, key=lambda row: (row.due_date, row.sequence))
                if best is None or candidate.due_date < best.installment.due_date:
                    best = NextPayment(loan=loan, installment=candidate)
        return best

    def _set_status(self, loan_id: int, target: LoanStatus, *, event: str) -> Loan:
        with unit_of_work(self.session_factory, lock=self._lock, operation=event.lower()) as session:
            loan = self._require_loan(session, loan_id)
            if loan.status is target:
                return loan
            if target not in _TRANSITIONS[loan.status]:
                raise ValidationError(
                    f"Loan {loan_id} is {loan.status.value} and cannot become {target.value}"
                )
            previous = loan.status
            loan.status = target
            loan = self.loan_repo.update(loan, session=session)

        logger.info(
            event,
            extra={"loan_id": loan_id, "from_status": previous.value, "to_status": target.value},
        )
        return loan

    def _require_loan(self, session: Session, loan_id: int) -> Loan:
        loan = self.loan_repo.get_by_id(loan_id, session=session)
        if loan is None:
            raise NotFoundError("Loan", loan_id)
        return loan

    def _require_account(self, session: Session, account_id: int) -> None:
        if self.account_repo.get_by_id(account_id, session=session) is None:
            raise NotFoundError("Account", account_id)
