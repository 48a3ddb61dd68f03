"""Category repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from sqlmodel import Session

from ...models.category import Category


class CategoryRepository(Protocol):
    """Repository for transaction categories."""

    def get_by_id(
        self, category_id: int, *, session: Optional[Session] = None
    ) -> Optional[Category]:
        """Retrieve a category by ID."""
        ...

    def get_by_name(self, name: str, *, session: Optional[Session] = None) -> Optional[Category]:
        """Retrieve a category by name."""
        ...

    def list_all(self, *, session: Optional[Session] = None) -> list[Category]:
        """List all categories."""
        ...

    def create(self, category: Category, *, session: Optional[Session] = None) -> Category:
        """Create a new category."""
        ...

    def delete(self, category_id: int, *, session: Optional[Session] = None) -> bool:
        """Delete a category by ID."""
        ...
