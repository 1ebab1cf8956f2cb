"""Database session management with connection pooling."""

from contextlib import contextmanager
from functools import lru_cache
from typing import Callable, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tender_search.settings import settings

SessionFactory = Callable[[], Session]


@lru_cache(maxsize=None)
def get_engine(database_url: str | None = None) -> Engine:
    """Create the engine on first use.

    SQLite URLs get the default pool; server databases get a sized
    connection pool with pre-ping and recycling.
    """
    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        return create_engine(url, echo=False)
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_pool_max_overflow,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=False,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Build a session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def SessionLocal() -> Session:
    """Open a session on the configured database."""
    return make_session_factory(get_engine())()


@contextmanager
def get_session(
    session_factory: SessionFactory = SessionLocal,
) -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic commit/rollback.

    Usage:
        with get_session() as session:
            session.add(obj)
            # Commits automatically on exit, rollbacks on exception

    Yields:
        Database session
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
