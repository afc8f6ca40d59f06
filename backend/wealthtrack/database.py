# backend/wealthtrack/database.py
"""
Database engine and session management.

The engine is built on demand from DATABASE_URL rather than at import time,
because the asset store is optional: the valuation engine can run against
any repository that satisfies the protocols in `services.protocols`.

- SQLite (tests, local): StaticPool so an in-memory database is shared
- Anything else: QueuePool with pre-ping
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from wealthtrack.config import settings
from wealthtrack.models import Base

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str) -> Engine:
    """
    Create an SQLAlchemy engine with URL-appropriate pooling.

    Args:
        database_url: SQLAlchemy URL
    """
    if database_url.startswith("sqlite"):
        logger.info("Configuring SQLite database")
        return create_engine(
            database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    logger.info("Configuring pooled database engine")
    return create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_timeout=30,
    )


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    """
    Session factory for the configured DATABASE_URL (cached singleton).

    Raises:
        ValueError: DATABASE_URL is not configured
    """
    if not settings.database_url:
        raise ValueError("DATABASE_URL is not configured")
    engine = create_db_engine(settings.database_url)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Provide a session that always closes.

    Usage:
        with session_scope() as db:
            service = build_portfolio_service(db)
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def create_tables(engine: Engine) -> None:
    """Create all tables (local development and tests)."""
    Base.metadata.create_all(bind=engine)
