"""
Database engine and session management
PostgreSQL in staging/production, SQLite accepted for local development
"""
import logging
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..config import config
from .base import Base

logger = logging.getLogger(__name__)


def create_database_engine(database_url: str):
    """Create the SQLAlchemy engine for the configured database"""
    if database_url.startswith("postgresql"):
        logger.info("Creating PostgreSQL engine")
        return create_engine(
            database_url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_recycle=config.DB_POOL_RECYCLE,
            echo=False,
            connect_args={
                "connect_timeout": 10,
                "application_name": "wellness_ledger",
            },
        )

    if database_url.startswith("sqlite"):
        logger.info("Creating SQLite engine (local development)")
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # In-memory databases must share one connection across threads
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    logger.warning(f"DATABASE_URL uses unknown format: {database_url[:20]}...")
    return create_engine(database_url, pool_pre_ping=True)


engine = create_database_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create all tables (local development and tests; production uses Alembic)"""
    from . import models  # noqa: F401 - register models on Base.metadata

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")
