"""Transaction repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from sqlmodel import Session

from ...models.enums import TransactionType
from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for managing transaction entities."""

    def get_by_id(
        self, transaction_id: int, *, session: Optional[Session] = None
    ) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_all(
        self, *, limit: int = 100, offset: int = 0, session: Optional[Session] = None
    ) -> list[Transaction]:
        """List transactions with pagination."""
        ...

    def filter_by_date_range(
        self, start_date: date, end_date: date, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions within a date range."""
        ...

    def filter_by_account(
        self, account_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions touching an account."""
        ...

    def filter_by_from_account(
        self, account_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions debiting an account."""
        ...

    def filter_by_to_account(
        self, account_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get transactions crediting an account."""
        ...

    def filter_by_category(
        self, category_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get all transactions for a specific category."""
        ...

    def filter_by_asset(
        self, asset_id: int, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get all transactions for a specific asset."""
        ...

    def filter_by_type(
        self, transaction_type: TransactionType, *, session: Optional[Session] = None
    ) -> list[Transaction]:
        """Get all transactions of one type."""
        ...

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
        ...

    def create(self, transaction: Transaction, *, session: Optional[Session] = None) -> Transaction:
        """Create a new transaction."""
        ...

    def update(self, transaction: Transaction, *, session: Optional[Session] = None) -> Transaction:
        """Update an existing transaction."""
        ...

    def delete(self, transaction_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete a transaction by ID."""
        ...
