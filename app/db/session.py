"""
Database Session Management
===========================

One engine and one session factory per process, built on first use from
``SUPABASE_DATABASE_URL`` and disposed by ``close_db`` at shutdown.

A session borrows a pooled connection only when it runs its first
statement, so requests rejected before reaching the store never touch
the database.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings

logger = logging.getLogger(__name__)

POOL_SIZE = 10
POOL_WARM_CONNECTIONS = 2

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """
    Return the shared engine, creating it on the first call.

    Supabase's pooler drops idle connections after a few minutes, so
    connections are recycled at 300s and handed out most-recent first.
    """
    global _engine

    if _engine is None:
        _engine = create_async_engine(
            settings.database_url_async,
            pool_size=POOL_SIZE,
            max_overflow=2 * POOL_SIZE,
            pool_recycle=300,
            pool_use_lifo=True,
            pool_timeout=30,
        )
        logger.debug("Created database engine (pool_size=%d)", POOL_SIZE)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the shared session factory bound to ``get_engine()``."""
    global _async_session_factory

    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
            autoflush=False,
        )

    return _async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session dependency.

    The subscription store commits its own writes; anything left pending
    when the handler returns is committed here, and an exception rolls
    it back.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Open a couple of pooled connections at startup so first requests skip the handshake."""
    engine = get_engine()

    conns = []
    try:
        for _ in range(POOL_WARM_CONNECTIONS):
            conn = await engine.connect()
            await conn.execute(text("SELECT 1"))
            conns.append(conn)
    except Exception as exc:
        logger.warning("Pool warmup partially failed: %s", exc)
    finally:
        for conn in conns:
            await conn.close()

    logger.info("Database reachable, %d pooled connection(s) warmed", len(conns))


async def close_db() -> None:
    """Dispose the engine; the next ``get_engine()`` call builds a fresh one."""
    global _engine, _async_session_factory

    if _engine is None:
        return

    await _engine.dispose()
    _engine = None
    _async_session_factory = None
    logger.info("Database connections closed")
