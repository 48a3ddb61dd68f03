"""Account owner model."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Owner(SQLModel, table=True):
    """Person or entity that holds accounts."""

    __tablename__: ClassVar[str] = "owner"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=32, index=True)
    description: Optional[str] = Field(default=None, max_length=512)
