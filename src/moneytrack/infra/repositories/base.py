"""Session handling shared by the SQLModel repositories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlmodel import Session

from ..database import SessionFactory


class SessionScopedRepository:
    """Repository that can join a caller's session or open its own.

    Passing ``session=`` lets a service group several repository calls into one
    database transaction. Without it each call is its own unit of work.
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @contextmanager
    def _session(self, session: Optional[Session]) -> Iterator[Session]:
        if session is not None:
            yield session
            return
        with self.session_factory() as own:
            yield own

    @staticmethod
    def _persist(session: Session, obj):
        session.add(obj)
        session.flush()
        session.refresh(obj)
        return obj
