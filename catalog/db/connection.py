"""Async engine and session factory construction.

Nothing here is a module-level singleton: the store owns the engine it
gets from create_engine() and disposes it on close.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from catalog.config import settings

logger = logging.getLogger(__name__)

# asyncpg sslmode values
SSL_VERIFY_FULL = "verify-full"
SSL_PREFER = "prefer"


def build_connect_args(database_url: str, tls_insecure: bool) -> dict[str, Any]:
    """Driver connect arguments for database_url.

    PostgreSQL always gets TLS. With tls_insecure the connection falls back
    to plaintext if the server refuses TLS and the server certificate is
    not checked; otherwise the certificate and hostname must verify.
    """
    url = make_url(database_url)
    if not url.drivername.startswith("postgresql"):
        return {}

    if tls_insecure:
        logger.warning(
            f"TLS certificate verification disabled for {url.host}:{url.port or 5432}"
            " (DATABASE_TLS_INSECURE)"
        )
        return {"ssl": SSL_PREFER}
    return {"ssl": SSL_VERIFY_FULL}


def create_engine(
    database_url: str,
    tls_insecure: Optional[bool] = None,
    pool_size: Optional[int] = None,
    max_overflow: Optional[int] = None,
) -> AsyncEngine:
    """Create a pooled async engine for database_url."""
    if tls_insecure is None:
        tls_insecure = settings.DATABASE_TLS_INSECURE

    url = make_url(database_url)
    engine_kwargs: dict[str, Any] = {
        "connect_args": build_connect_args(database_url, tls_insecure),
        "pool_pre_ping": True,
    }
    # SQLite engines use their own pool class without size limits
    if not url.drivername.startswith("sqlite"):
        engine_kwargs["pool_size"] = pool_size or settings.DATABASE_POOL_SIZE
        engine_kwargs["max_overflow"] = (
            settings.DATABASE_MAX_OVERFLOW if max_overflow is None else max_overflow
        )

    logger.info(f"Creating database engine for {url.render_as_string(hide_password=True)}")
    return create_async_engine(url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session, rolling back if the block raises."""
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
