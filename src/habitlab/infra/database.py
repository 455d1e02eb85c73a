"""Database infrastructure for the habit store."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from sqlmodel import Session, SQLModel, create_engine

from ..config import BaseConfig


def create_db_engine(config: BaseConfig, *, sync_enabled: bool = False):
    """Create SQLModel engine for the local or synced store."""

    engine_options = config.sqlalchemy_engine_options()
    engine = create_engine(config.database_url(sync_enabled=sync_enabled), **engine_options)

    return engine


def init_database(engine) -> None:
    """Initialize database schema."""
    # Import all models to ensure they're registered
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def create_session_factory(engine):
    """Create a session factory function."""

    @contextmanager
    def factory() -> Iterator[Session]:
        """Create a new session."""
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


def create_store(config: Optional[BaseConfig] = None, *, sync_enabled: bool = False) -> Tuple:
    """Build engine + session_factory for the store selected by ``sync_enabled``.

    The sync flag is an explicit argument; callers read it from
    ``SyncSettings`` (or config defaults) before constructing the store.
    Returns (engine, session_factory).
    """

    cfg = config or BaseConfig()
    engine = create_db_engine(cfg, sync_enabled=sync_enabled)
    init_database(engine)
    return engine, create_session_factory(engine)
