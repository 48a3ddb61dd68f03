"""SQLModel implementation of Owner repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.owner import Owner
from .base import SessionScopedRepository


class SQLModelOwnerRepository(SessionScopedRepository):
    """SQLModel-based owner repository implementation."""

    def get_by_id(self, owner_id: int, *, session: Optional[Session] = None) -> Optional[Owner]:
        """Retrieve an owner by ID."""
        with self._session(session) as s:
            return s.get(Owner, owner_id)

    def list_all(self, *, session: Optional[Session] = None) -> list[Owner]:
        """List all owners by name."""
        with self._session(session) as s:
            return list(s.exec(select(Owner).order_by(Owner.name)).all())  # type: ignore[arg-type]

    def create(self, owner: Owner, *, session: Optional[Session] = None) -> Owner:
        """Create a new owner."""
        with self._session(session) as s:
            return self._persist(s, owner)
