"""SQLAlchemy engine construction for the point-of-sale database."""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

from smartinvoice.core.config import DatabaseSettings

logger = logging.getLogger(__name__)


def build_database_url(settings: DatabaseSettings) -> str | URL:
    """Prefer an explicit DATABASE_URL, otherwise assemble an MSSQL URL."""
    if settings.url:
        return settings.url
    return URL.create(
        "mssql+pymssql",
        username=settings.user,
        password=settings.password,
        host=settings.server,
        port=settings.port,
        database=settings.name,
    )


def create_database_engine(settings: DatabaseSettings) -> Engine:
    """Create the pooled engine used for the lifetime of the process."""
    url = build_database_url(settings)
    if str(url).startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False}, echo=False)
    else:
        engine = create_engine(url, pool_pre_ping=True, echo=False)

    logger.info("Database engine created: dialect=%s", engine.dialect.name)
    return engine


__all__ = ["build_database_url", "create_database_engine"]
