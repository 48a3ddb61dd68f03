"""SQLModel implementation of Account repository."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session, select

from ...errors import NotFoundError
from ...models.account import Account
from ...models.enums import Currency
from ...models.loan import Loan, LoanInstallment
from ...models.transaction import Transaction
from .base import SessionScopedRepository


class SQLModelAccountRepository(SessionScopedRepository):
    """SQLModel-based account repository implementation."""

    def get_by_id(self, account_id: int, *, session: Optional[Session] = None) -> Optional[Account]:
        """Retrieve an account by ID."""
        with self._session(session) as s:
            return s.get(Account, account_id)

    def list_all(self, *, session: Optional[Session] = None) -> list[Account]:
        """List all accounts, newest first."""
        with self._session(session) as s:
            statement = select(Account).order_by(Account.created_at.desc(), Account.id.desc())  # type: ignore[union-attr]
            return list(s.exec(statement).all())

    def list_by_owner(self, owner_id: int, *, session: Optional[Session] = None) -> list[Account]:
        """List accounts held by one owner."""
        with self._session(session) as s:
            statement = select(Account).where(Account.owner_id == owner_id).order_by(Account.name)  # type: ignore[arg-type]
            return list(s.exec(statement).all())

    def list_by_bank(self, bank: str, *, session: Optional[Session] = None) -> list[Account]:
        """List accounts opened at a given bank."""
        with self._session(session) as s:
            statement = select(Account).where(Account.bank == bank).order_by(Account.name)  # type: ignore[arg-type]
            return list(s.exec(statement).all())

    def list_by_currency(
        self, currency: Currency, *, session: Optional[Session] = None
    ) -> list[Account]:
        """List accounts denominated in *currency*."""
        with self._session(session) as s:
            statement = select(Account).where(Account.currency == currency).order_by(Account.name)  # type: ignore[arg-type]
            return list(s.exec(statement).all())

    def create(self, account: Account, *, session: Optional[Session] = None) -> Account:
        """Create a new account."""
        with self._session(session) as s:
            return self._persist(s, account)

    def update(self, account: Account, *, session: Optional[Session] = None) -> Account:
        """Update an existing account."""
        with self._session(session) as s:
            account.updated_at = datetime.now(timezone.utc)
            return self._persist(s, account)

    def update_balance(
        self, account_id: int, new_balance: Decimal, *, session: Optional[Session] = None
    ) -> Account:
        """Overwrite the cached balance of an account.

        Only the ledger calls this; it always passes its own session so the
        write lands in the same transaction as the ledger row.
        """
        with self._session(session) as s:
            account = s.get(Account, account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            account.balance = new_balance
            account.updated_at = datetime.now(timezone.utc)
            s.add(account)
            s.flush()
            return account

    def delete(self, account_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete an account by ID. Returns False when it does not exist."""
        with self._session(session) as s:
            account = s.get(Account, account_id)
            if account is None:
                return False
            s.delete(account)
            s.flush()
            return True

    def has_references(self, account_id: int, *, session: Optional[Session] = None) -> bool:
        """Return True if any transaction, loan or installment points at the account."""
        with self._session(session) as s:
            txn = s.exec(
                select(Transaction.id).where(
                    or_(
                        Transaction.from_account_id == account_id,
                        Transaction.to_account_id == account_id,
                    )
                )
            ).first()
            if txn is not None:
                return True
            loan = s.exec(
                select(Loan.id).where(
                    or_(
                        Loan.borrower_account_id == account_id,
                        Loan.lender_account_id == account_id,
                    )
                )
            ).first()
            if loan is not None:
                return True
            installment = s.exec(
                select(LoanInstallment.id).where(
                    LoanInstallment.payment_account_id == account_id
                )
            ).first()
            return installment is not None
