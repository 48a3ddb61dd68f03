"""Loan and installment repository protocols."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol

from sqlmodel import Session

from ...models.enums import LoanStatus
from ...models.loan import Loan, LoanInstallment


class LoanRepository(Protocol):
    """Repository for managing loan entities."""

    def get_by_id(self, loan_id: int, *, session: Optional[Session] = None) -> Optional[Loan]:
        """Retrieve a loan by ID."""
        ...

    def list_all(self, *, session: Optional[Session] = None) -> list[Loan]:
        """List all loans."""
        ...

    def list_by_status(self, status: LoanStatus, *, session: Optional[Session] = None) -> list[Loan]:
        """List loans in a given status."""
        ...

    def list_by_borrower(self, account_id: int, *, session: Optional[Session] = None) -> list[Loan]:
        """List loans taken by a borrower account."""
        ...

    def create(self, loan: Loan, *, session: Optional[Session] = None) -> Loan:
        """Create a new loan."""
        ...

    def update(self, loan: Loan, *, session: Optional[Session] = None) -> Loan:
        """Update an existing loan."""
        ...

    def delete(self, loan_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete a loan together with its installments."""
        ...


class LoanInstallmentRepository(Protocol):
    """Repository for managing loan installments."""

    def get_by_id(
        self, installment_id: int, *, session: Optional[Session] = None
    ) -> Optional[LoanInstallment]:
        """Retrieve an installment by ID."""
        ...

    def list_by_loan(
        self, loan_id: int, *, session: Optional[Session] = None
    ) -> list[LoanInstallment]:
        """List a loan's installments in sequence order."""
        ...

    def create(
        self, installment: LoanInstallment, *, session: Optional[Session] = None
    ) -> LoanInstallment:
        """Insert one installment."""
        ...

    def create_many(
        self, installments: Iterable[LoanInstallment], *, session: Optional[Session] = None
    ) -> list[LoanInstallment]:
        """Insert a batch of installments."""
        ...

    def mark_as_paid(
        self,
        installment_id: int,
        *,
        payment_account_id: int,
        paid_at: datetime,
        session: Optional[Session] = None,
    ) -> Optional[LoanInstallment]:
        """Flag an installment as paid."""
        ...

    def delete_by_loan(self, loan_id: int, *, session: Optional[Session] = None) -> None:
        """Delete every installment of a loan."""
        ...
