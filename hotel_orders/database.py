"""
Database Connection Module
Handles the order database using the SQLAlchemy async engine.

The HTTP process keeps a pooled engine; Celery tasks build their own
NullPool engine because every task run gets a fresh event loop.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool
from sqlalchemy.types import TypeDecorator

from hotel_orders.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


# Base class for all our models
class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored as naive UTC and returned as an aware UTC datetime.

    Naive values coming in are assumed to already be UTC.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def mask_database_url(url: str) -> str:
    """Hide credentials before a connection string reaches the logs."""
    return re.sub(r"//[^:/@]+:[^@]+@", "//<credentials>@", url)


def build_engine(url: str, *, pooled: bool = True) -> AsyncEngine:
    """
    Create an async engine with the configured timeouts.

    Args:
        url: Async SQLAlchemy URL
        pooled: False gives a NullPool engine (one connection per checkout)
    """
    kwargs: dict = {"echo": False, "pool_pre_ping": pooled}

    if url.startswith("postgresql"):
        kwargs["connect_args"] = {
            "connect_timeout": settings.db_connect_timeout,
            "options": f"-c statement_timeout={settings.db_socket_timeout * 1000}",
        }
    elif url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": settings.db_socket_timeout}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool

    if not pooled and "poolclass" not in kwargs:
        kwargs["poolclass"] = NullPool

    return create_async_engine(url, **kwargs)


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to an engine."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False  # Objects remain accessible after commit
    )


# Process-wide engine used by the HTTP app
engine = build_engine(settings.database_url)
async_session_maker = build_session_maker(engine)


async def init_db(bind: AsyncEngine = engine) -> None:
    """
    Create all tables in database.
    Raises whatever the driver raises when the server is unreachable.
    """
    # Registers the tables on Base.metadata
    from hotel_orders import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def connect_with_retry(
    bind: AsyncEngine = engine,
    interval: Optional[float] = None,
    max_attempts: Optional[int] = None,
) -> bool:
    """
    Connect and create tables, retrying every `interval` seconds.

    Retries forever unless `max_attempts` is given.

    Returns:
        True once connected, False if `max_attempts` ran out
    """
    interval = settings.db_retry_interval if interval is None else interval
    masked_url = mask_database_url(str(bind.url.render_as_string(hide_password=False)))
    attempt = 0

    while True:
        attempt += 1
        try:
            await init_db(bind)
            logger.info(f"✅ Connected to database: {masked_url}")
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database connection error: {e}")
            logger.error(f"Database URL: {masked_url}")

        if max_attempts is not None and attempt >= max_attempts:
            return False

        logger.info(f"Retrying connection in {interval:g} seconds...")
        await asyncio.sleep(interval)
