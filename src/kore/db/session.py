"""Database session management.

One SQLite file per deployment. Engines and session factories are
cached per resolved path so every request for the same file shares a
connection pool.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kore.db.schema import Base

logger = logging.getLogger(__name__)

# Default database path, overridable with KORE_DB_PATH
DEFAULT_DB_PATH = Path("data/kore.db")

# Caches keyed by absolute database path
_engine_cache: dict[str, Engine] = {}
_session_factory_cache: dict[str, sessionmaker] = {}


def resolve_db_path(db_path: Path | None = None) -> Path:
    """Resolve the database path.

    Explicit argument wins, then KORE_DB_PATH, then DEFAULT_DB_PATH.
    """
    if db_path is not None:
        return Path(db_path)
    env_path = os.environ.get("KORE_DB_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_DB_PATH


def _cache_key(db_path: Path) -> str:
    return str(db_path.resolve())


def get_engine(db_path: Path | None = None) -> Engine:
    """Get the (cached) SQLAlchemy engine for a database file.

    The parent directory is created on first use. Sync FastAPI
    endpoints run on a threadpool, so the connection is opened with
    check_same_thread=False and shared through StaticPool.

    Args:
        db_path: SQLite file. See resolve_db_path.

    Returns:
        Engine bound to the file.
    """
    db_path = resolve_db_path(db_path)
    key = _cache_key(db_path)

    engine = _engine_cache.get(key)
    if engine is not None:
        return engine

    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _engine_cache[key] = engine
    logger.info(f"Opened database at {db_path}")

    return engine


def _get_session_factory(db_path: Path | None = None) -> sessionmaker:
    db_path = resolve_db_path(db_path)
    key = _cache_key(db_path)

    factory = _session_factory_cache.get(key)
    if factory is None:
        factory = sessionmaker(bind=get_engine(db_path))
        _session_factory_cache[key] = factory

    return factory


def get_session(db_path: Path | None = None) -> Session:
    """Open a new session. The caller must close it."""
    return _get_session_factory(db_path)()


@contextmanager
def get_db_session(db_path: Path | None = None) -> Generator[Session, None, None]:
    """Scoped session for scripts and jobs.

    Commits when the block exits cleanly, rolls back when it raises,
    and always closes.

    Example:
        with get_db_session() as session:
            portfolios.create_portfolio(session, "demo", "Main")
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | None = None) -> None:
    """Create any missing tables. Safe to call on every startup."""
    Base.metadata.create_all(get_engine(db_path))
