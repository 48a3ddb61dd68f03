"""Owner repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from sqlmodel import Session

from ...models.owner import Owner


class OwnerRepository(Protocol):
    """Repository for account owners."""

    def get_by_id(self, owner_id: int, *, session: Optional[Session] = None) -> Optional[Owner]:
        """Retrieve an owner by ID."""
        ...

    def list_all(self, *, session: Optional[Session] = None) -> list[Owner]:
        """List all owners."""
        ...

    def create(self, owner: Owner, *, session: Optional[Session] = None) -> Owner:
        """Create a new owner."""
        ...
