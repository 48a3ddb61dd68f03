"""SQLModel implementation of Category repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.category import Category
from .base import SessionScopedRepository


class SQLModelCategoryRepository(SessionScopedRepository):
    """SQLModel-based category repository implementation."""

    def get_by_id(
        self, category_id: int, *, session: Optional[Session] = None
    ) -> Optional[Category]:
        """Retrieve a category by ID."""
        with self._session(session) as s:
            return s.get(Category, category_id)

    def get_by_name(self, name: str, *, session: Optional[Session] = None) -> Optional[Category]:
        """Retrieve a category by name."""
        with self._session(session) as s:
            return s.exec(select(Category).where(Category.name == name)).first()

    def list_all(self, *, session: Optional[Session] = None) -> list[Category]:
        """List all categories ordered by name."""
        with self._session(session) as s:
            return list(s.exec(select(Category).order_by(Category.name)).all())  # type: ignore[arg-type]

    def create(self, category: Category, *, session: Optional[Session] = None) -> Category:
        """Create a new category."""
        with self._session(session) as s:
            return self._persist(s, category)

    def delete(self, category_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete a category by ID. Returns False when it does not exist."""
        with self._session(session) as s:
            category = s.get(Category, category_id)
            if category is None:
                return False
            s.delete(category)
            s.flush()
            return True
