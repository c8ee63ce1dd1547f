"""Database engine and session management (DATABASE_URL)."""

import logging
import os
from contextlib import contextmanager
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from rds_postgres.models import Base

load_dotenv()

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Create (once) and return the engine for DATABASE_URL."""
    global _engine, _session_factory
    if _engine is None:
        database_url = os.environ.get("DATABASE_URL")
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required")

        connect_args = {}
        if database_url.startswith("sqlite"):
            # Story fan-out shares the pool across threads
            connect_args["check_same_thread"] = False

        _engine = create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)
        _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


def reset_engine() -> None:
    """Dispose the cached engine so the next call re-reads DATABASE_URL."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


@contextmanager
def get_session() -> Iterator[Session]:
    """Context manager for a session with rollback on error. Callers commit."""
    get_engine()
    session = _session_factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ensure_tables() -> None:
    """Create the scraper_status, topics and articles tables if missing."""
    Base.metadata.create_all(get_engine())
    logger.info("Ensured tables: %s", ", ".join(sorted(Base.metadata.tables)))


def dialect_insert(session: Session, model):
    """Return an INSERT construct supporting ON CONFLICT for the bound dialect."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
