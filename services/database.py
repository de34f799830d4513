"""Database connection management for the notes datastore.

Async SQLAlchemy engine + SQLModel sessions over asyncpg. The engine is
created lazily on first use so the app (and tests) can start without
DATABASE_URL set.
"""
import os
import ssl
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)

# asyncpg rejects these libpq-style query parameters
_INCOMPATIBLE_PARAMS = ("sslmode", "channel_binding", "options")
_SSL_MODES = ("require", "verify-ca", "verify-full")

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker | None = None


def get_database_url() -> tuple[str, dict]:
    """Read DATABASE_URL and rewrite it for the asyncpg driver.

    Returns:
        Tuple of (database URL with asyncpg driver, connect_args dict).

    Raises:
        ValueError: If DATABASE_URL is not set.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable is not set")

    parsed = urlparse(database_url)
    query_params = parse_qs(parsed.query)

    connect_args = {}
    sslmode = query_params.get("sslmode", [None])[0]
    if sslmode in _SSL_MODES:
        ssl_context = ssl.create_default_context()
        if sslmode == "require":
            # require = encrypt without verifying the server certificate
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_context

    filtered_params = {k: v for k, v in query_params.items() if k not in _INCOMPATIBLE_PARAMS}
    clean_url = urlunparse((
        "postgresql+asyncpg",
        parsed.netloc,
        parsed.path,
        parsed.params,
        urlencode(filtered_params, doseq=True) if filtered_params else "",
        parsed.fragment
    ))

    return clean_url, connect_args


def get_engine() -> AsyncEngine:
    """Get or create the async database engine."""
    global _engine

    if _engine is None:
        database_url, connect_args = get_database_url()
        _engine = create_async_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=int(os.getenv("DATABASE_POOL_SIZE", "5")),
            max_overflow=10,
            pool_recycle=300,
            echo=False,
            connect_args=connect_args,
        )
        logger.info("Database engine created successfully")

    return _engine


def get_session_maker() -> async_sessionmaker:
    """Get or create the async session maker."""
    global _session_maker

    if _session_maker is None:
        _session_maker = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False
        )

    return _session_maker


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Async context manager for database sessions.

    Usage:
        async with get_async_session() as session:
            result = await session.execute(query)

    Yields:
        An AsyncSession instance. Rolled back and re-raised on error.
    """
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}", exc_info=True)
            raise


async def close_engine() -> None:
    """Dispose of the engine; called on application shutdown."""
    global _engine, _session_maker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_maker = None
        logger.info("Database engine closed")
