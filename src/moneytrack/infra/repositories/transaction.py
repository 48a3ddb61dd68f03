"""SQLModel implementation of Transaction repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import or_
from sqlmodel import Session, select

from ...models.enums import TransactionType
from ...models.transaction import Transaction
from .base import SessionScopedRepository

_NEWEST_FIRST = (Transaction.occurred_on.desc(), Transaction.id.desc())  # type: ignore[attr-defined,union-attr]


class SQLModelTransactionRepository(SessionScopedRepository):
    """SQLModel-based transaction repository implementation.

    Only the ledger service writes through this repository, because every
    insert, update or delete must be paired with a balance adjustment.
    """

    def get_by_id(
        self, transaction_id: int, *, session: Optional[Session] = None
    ) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self._session(session) as s:
            return s.get(Transaction, transaction_id)

    def list_all(
        self, *, limit: int = 100, offset: int = 0, session: Optional[Session] = None
    ) -> list[Transaction]:
        """List transactions with pagination."""
        with self._session(session) as s:
            statement = select(Transaction).order_by(*_NEWEST_FIRST).offset(offset).limit(limit)
            return list(s.exec(statement).all())

    def filter_by_date_range(
        self, start_date: date, end_date: date, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions dated within [start_date, end_date]."""
        with self._session(session) as s:
            statement = (
                select(Transaction)
                .where(Transaction.occurred_on >= start_date)
                .where(Transaction.occurred_on <= end_date)
                .order_by(*_NEWEST_FIRST)
            )
            return list(s.exec(statement).all())

    def filter_by_account(
        self, account_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions touching an account on either side."""
        with self._session(session) as s:
            statement = (
                select(Transaction)
                .where(
                    or_(
                        Transaction.from_account_id == account_id,
                        Transaction.to_account_id == account_id,
                    )
                )
                .order_by(*_NEWEST_FIRST)
            )
            return list(s.exec(statement).all())

    def filter_by_from_account(
        self, account_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions debiting an account."""
        with self._session(session) as s:
            statement = (
                select(Transaction)
                .where(Transaction.from_account_id == account_id)
                .order_by(*_NEWEST_FIRST)
            )
            return list(s.exec(statement).all())

    def filter_by_to_account(
        self, account_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions crediting an account."""
        with self._session(session) as s:
            statement = (
                select(Transaction)
                .where(Transaction.to_account_id == account_id)
                .order_by(*_NEWEST_FIRST)
            )
            return list(s.exec(statement).all())

    def filter_by_category(
        self, category_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get all transactions for a specific category."""
        with self._session(session) as s:
            statement = (
                select(Transaction)
                .where(Transaction.category_id == category_id)
                .order_by(*_NEWEST_FIRST)
            )
            return list(s.exec(statement).all())

    def filter_by_asset(
        self, asset_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get all transactions for a specific asset."""
        with self._session(session) as s:
            statement = (
                select(Transaction)
                .where(Transaction.asset_id == asset_id)
                .order_by(*_NEWEST_FIRST)
            )
            return list(s.exec(statement).all())

    def filter_by_type(
        self, transaction_type: TransactionType, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get all transactions of one type."""
        with self._session(session) as s:
            statement = (
                select(Transaction)
                .where(Transaction.transaction_type == transaction_type)
                .order_by(*_NEWEST_FIRST)
            )
            return list(s.exec(statement).all())

    def search(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        text: Optional[str] = None,
        session: Optional[Session] = None,
    ) -> list[Transaction]:
        """Advanced search with multiple filters."""
        with self._session(session) as s:
            statement = select(Transaction)

            if start_date is not None:
                statement = statement.where(Transaction.occurred_on >= start_date)
            if end_date is not None:
                statement = statement.where(Transaction.occurred_on <= end_date)
            if account_id is not None:
                statement = statement.where(
                    or_(
                        Transaction.from_account_id == account_id,
                        Transaction.to_account_id == account_id,
                    )
                )
            if category_id is not None:
                statement = statement.where(Transaction.category_id == category_id)
            if transaction_type is not None:
                statement = statement.where(Transaction.transaction_type == transaction_type)
            if text:
                statement = statement.where(Transaction.description.contains(text))  # type: ignore[union-attr]

            return list(s.exec(statement.order_by(*_NEWEST_FIRST)).all())

    def create(self, transaction: Transaction, *, session: Optional[Session] = None) -> Transaction:
        """Insert a transaction row."""
        with self._session(session) as s:
            return self._persist(s, transaction)

    def update(self, transaction: Transaction, *, session: Optional[Session] = None) -> Transaction:
        """Write back an edited transaction row."""
        with self._session(session) as s:
            transaction.updated_at = datetime.now(timezone.utc)
            return self._persist(s, transaction)

    def delete(self, transaction_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete a transaction row. Returns False when it does not exist."""
        with self._session(session) as s:
            transaction = s.get(Transaction, transaction_id)
            if transaction is None:
                return False
            s.delete(transaction)
            s.flush()
            return True
