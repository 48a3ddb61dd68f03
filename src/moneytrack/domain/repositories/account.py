"""Account repository protocol."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from sqlmodel import Session

from ...models.account import Account
from ...models.enums import Currency


class AccountRepository(Protocol):
    """Repository for managing account entities."""

    def get_by_id(self, account_id: int, *, session: Optional[Session] = None) -> Optional[Account]:
        """Retrieve an account by ID."""
        ...

    def list_all(self, *, session: Optional[Session] = None) -> list[Account]:
        """List all accounts."""
        ...

    def list_by_owner(self, owner_id: int, *, session: Optional[Session] = None) -> list[Account]:
        """List accounts held by one owner."""
        ...

    def list_by_bank(self, bank: str, *, session: Optional[Session] = None) -> list[Account]:
        """List accounts opened at a given bank."""
        ...

    def list_by_currency(
        self, currency: Currency, *, session: Optional[Session] = None
    ) -> list[Account]:
        """List accounts in one currency."""
        ...

    def create(self, account: Account, *, session: Optional[Session] = None) -> Account:
        """Create a new account."""
        ...

    def update(self, account: Account, *, session: Optional[Session] = None) -> Account:
        """Update an existing account."""
        ...

    def update_balance(
        self, account_id: int, new_balance: Decimal, *, session: Optional[Session] = None
    ) -> Account:
        """Overwrite the cached balance of an account."""
        ...

    def delete(self, account_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete an account by ID."""
        ...

    def has_references(self, account_id: int, *, session: Optional[Session] = None) -> bool:
        """Return True if ledger rows or loans still point at the account."""
        ...
