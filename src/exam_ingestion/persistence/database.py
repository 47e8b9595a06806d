"""
SQLAlchemy engine with connection pooling for the persistence layer.

One engine per process; the pool is shared by every request.
"""

import logging
from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url

from exam_ingestion.config import Settings

logger = logging.getLogger(__name__)


class Database:
    """
    Process-wide SQLAlchemy engine holder.
    """

    _engine: Optional[Engine] = None

    @classmethod
    def get_engine(cls, settings: Settings) -> Engine:
        """
        Get the shared engine, creating it on first use.

        Args:
            settings: Application settings

        Returns:
            Engine instance
        """
        if cls._engine is None:
            cls._engine = create_engine_from_settings(settings)
            logger.info(
                f"Initialized database engine ({cls._engine.dialect.name}, "
                f"pool size {settings.DB_POOL_SIZE})"
            )
        return cls._engine

    @classmethod
    def dispose(cls) -> None:
        """Close every pooled connection (call on shutdown)."""
        if cls._engine is not None:
            cls._engine.dispose()
            cls._engine = None
            logger.info("Disposed database engine")


def create_engine_from_settings(settings: Settings) -> Engine:
    """
    Build an engine from DATABASE_URL.

    SQLite URLs get the default SQLite pool; pool sizing only applies to
    server databases.
    """
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite":
        return create_engine(url, echo=settings.DB_ECHO)

    return create_engine(
        url,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )
