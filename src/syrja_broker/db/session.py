"""Database session configuration."""

from __future__ import annotations

import logging
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from syrja_broker.core.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import syrja_broker.models  # noqa: E402,F401

_connect_args = (
    {"check_same_thread": False}
    if settings.effective_database_url.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_storage(bind: Engine | None = None) -> None:
    """Prepare durable storage before any directory request is served.

    Creates the storage directory when the default SQLite location is in use,
    then creates all tables that do not exist yet.
    """
    if not settings.database_url:
        settings.storage_path.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Directory storage initialized at %s", settings.effective_database_url)
