"""Database configuration and session management.

Provides the SQLAlchemy engine and session factory used by the SQL
record stores.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from sitecatalog.infrastructure.config import settings

# Base class for models
Base = declarative_base()


def create_db_engine(url: str | None = None) -> Engine:
    """Create an engine for the configured database.

    Args:
        url: Database URL, defaults to ``settings.database_url``.

    Returns:
        SQLAlchemy engine.
    """
    return create_engine(
        url or settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory bound to the process-wide engine."""
    global _engine, _session_factory
    if _session_factory is None:
        _engine = create_db_engine()
        _session_factory = sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


def init_db(engine: Engine | None = None) -> None:
    """Create all catalog tables.

    Args:
        engine: Engine to create tables on, defaults to the process engine.
    """
    from sitecatalog.infrastructure import models  # noqa: F401

    if engine is None:
        get_session_factory()
        engine = _engine
    Base.metadata.create_all(engine)


@contextmanager
def session_scope(
    factory: sessionmaker[Session] | None = None,
) -> Generator[Session, None, None]:
    """Get database session.

    Commits when the block succeeds and rolls back when it raises.

    Args:
        factory: Session factory, defaults to the process-wide one.

    Yields:
        Session for database operations.
    """
    factory = factory or get_session_factory()
    with factory() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
