"""SQLModel implementations of the Loan and LoanInstallment repositories."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from sqlmodel import Session, select

from ...models.enums import LoanStatus
from ...models.loan import Loan, LoanInstallment
from .base import SessionScopedRepository


def _delete_installments(session: Session, loan_id: int) -> None:
    rows = session.exec(select(LoanInstallment).where(LoanInstallment.loan_id == loan_id)).all()
    for row in rows:
        session.delete(row)
    # Installments must be gone before the parent row is removed.
    session.flush()


class SQLModelLoanRepository(SessionScopedRepository):
    """SQLModel-based loan repository implementation."""

    def get_by_id(self, loan_id: int, *, session: Optional[Session] = None) -> Optional[Loan]:
        """Retrieve a loan by ID."""
        with self._session(session) as s:
            return s.get(Loan, loan_id)

    def list_all(self, *, session: Optional[Session] = None) -> list[Loan]:
        """List all loans, newest first."""
        with self._session(session) as s:
            return list(s.exec(select(Loan).order_by(Loan.id.desc())).all())  # type: ignore[union-attr]

    def list_by_status(self, status: LoanStatus, *, session: Optional[Session] = None) -> list[Loan]:
        """List loans in a given status, newest first."""
        with self._session(session) as s:
            statement = select(Loan).where(Loan.status == status).order_by(Loan.id.desc())  # type: ignore[union-attr]
            return list(s.exec(statement).all())

    def list_by_borrower(
        self, account_id: int, *, session: Optional[Session] = None
    ) -> list[Loan]:
        """List loans taken by a borrower account."""
        with self._session(session) as s:
            statement = (
                select(Loan)
                .where(Loan.borrower_account_id == account_id)
                .order_by(Loan.id.desc())  # type: ignore[union-attr]
            )
            return list(s.exec(statement).all())

    def create(self, loan: Loan, *, session: Optional[Session] = None) -> Loan:
        """Create a new loan."""
        with self._session(session) as s:
            return self._persist(s, loan)

    def update(self, loan: Loan, *, session: Optional[Session] = None) -> Loan:
        """Update an existing loan."""
        with self._session(session) as s:
            return self._persist(s, loan)

    def delete(self, loan_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete a loan and, first, all of its installments."""
        with self._session(session) as s:
            loan = s.get(Loan, loan_id)
            if loan is None:
                return False
            _delete_installments(s, loan_id)
            s.delete(loan)
            s.flush()
            return True


class SQLModelLoanInstallmentRepository(SessionScopedRepository):
    """SQLModel-based installment repository implementation."""

    def get_by_id(
        self, installment_id: int, *, session: Optional[Session] = None
    ) -> Optional[LoanInstallment]:
        """Retrieve an installment by ID."""
        with self._session(session) as s:
            return s.get(LoanInstallment, installment_id)

    def list_by_loan(
        self, loan_id: int, *, session: Optional[Session] = None
    ) -> list[LoanInstallment]:
        """List a loan's installments in sequence order."""
        with self._session(session) as s:
            statement = (
                select(LoanInstallment)
                .where(LoanInstallment.loan_id == loan_id)
                .order_by(LoanInstallment.sequence)  # type: ignore[arg-type]
            )
            return list(s.exec(statement).all())

    def create(
        self, installment: LoanInstallment, *, session: Optional[Session] = None
    ) -> LoanInstallment:
        """Insert one installment; the total is always derived from its parts."""
        with self._session(session) as s:
            installment.recompute_total()
            return self._persist(s, installment)

    def create_many(
        self, installments: Iterable[LoanInstallment], *, session: Optional[Session] = None
    ) -> list[LoanInstallment]:
        """Insert a batch of installments in one flush."""
        with self._session(session) as s:
            rows = list(installments)
            for row in rows:
                row.recompute_total()
                s.add(row)
            s.flush()
            for row in rows:
                s.refresh(row)
            return rows

    def mark_as_paid(
        self,
        installment_id: int,
        *,
        payment_account_id: int,
        paid_at: datetime,
        session: Optional[Session] = None,
    ) -> Optional[LoanInstallment]:
        """Flag an installment as paid by *payment_account_id*."""
        with self._session(session) as s:
            installment = s.get(LoanInstallment, installment_id)
            if installment is None:
                return None
            installment.paid = True
            installment.paid_date = paid_at
            installment.payment_account_id = payment_account_id
            return self._persist(s, installment)

    def delete_by_loan(self, loan_id: int, *, session: Optional[Session] = None) -> None:
        """Delete every installment of a loan."""
        with self._session(session) as s:
            _delete_installments(s, loan_id)
