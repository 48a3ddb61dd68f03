"""Database infrastructure: engine, schema and transactional scopes."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Tuple

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig
from ..errors import StorageError
from ..logging_config import get_logger

SessionFactory = Callable[[], ContextManager[Session]]

logger = get_logger("infra.database")


def _install_sqlite_pragmas(engine: Engine, pragmas: dict[str, str]) -> None:
    """Run ``PRAGMA`` statements on every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record) -> None:  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        try:
            for key, value in pragmas.items():
                cursor.execute(f"PRAGMA {key}={value}")
        finally:
            cursor.close()


def create_db_engine(config: BaseConfig) -> Engine:
    """Create SQLModel engine from configuration."""
    engine = create_engine(config.DATABASE_URL, **config.sqlalchemy_engine_options())
    if config.is_sqlite:
        _install_sqlite_pragmas(engine, config.SQLITE_PRAGMAS)
    return engine


def init_database(engine: Engine) -> None:
    """Initialize database schema."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def create_session_factory(engine: Engine) -> SessionFactory:
    """Create a session factory whose sessions commit on exit and roll back on error."""

    @contextmanager
    def factory() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return factory


@contextmanager
def unit_of_work(
    session_factory: SessionFactory,
    *,
    lock: threading.RLock,
    operation: str,
) -> Iterator[Session]:
    """Serialize a write and run it inside a single database transaction.

    Everything done with the yielded session commits together or not at all.
    Database failures surface as :class:`StorageError` once the session has
    rolled back; other exceptions propagate unchanged.
    """

    with lock:
        try:
            with session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.exception("Storage failure", extra={"operation": operation})
            raise StorageError(f"{operation} failed: {exc}") from exc


def bootstrap_database(config: BaseConfig | None = None) -> Tuple[Engine, SessionFactory]:
    """Convenience bootstrap for engine + session_factory with schema init.

    Returns (engine, session_factory).
    """

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg)
    init_database(engine)
    return engine, create_session_factory(engine)
