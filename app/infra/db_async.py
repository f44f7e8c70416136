# app/infra/db_async.py
"""
asyncpg connection pool for the ``postgres`` state backend.

``startup()`` in :mod:`app.infra.collaborators` opens the pool and
``shutdown()`` closes it; everything else borrows connections through
:func:`db_conn`.
"""
from __future__ import annotations
from typing import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg
from app.config import settings
from app.infra.logging_config import get_logger

logger = get_logger(__name__)

_pool: asyncpg.Pool | None = None


def pool_ready() -> bool:
    return _pool is not None


async def init_pool() -> None:
    """Open the pool once; later calls are no-ops."""
    global _pool

    if _pool is not None:
        return

    if not settings.database_url:
        raise RuntimeError("STATE_BACKEND=postgres requires DATABASE_URL")

    _pool = await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=settings.pg_pool_min,
        max_size=settings.pg_pool_max,
        command_timeout=30,
        server_settings={"application_name": "facility_bot"},
    )
    logger.info("State database pool open: min=%d max=%d", settings.pg_pool_min, settings.pg_pool_max)


async def close_pool() -> None:
    global _pool

    if _pool is None:
        return

    pool, _pool = _pool, None
    await pool.close()
    logger.info("State database pool closed")


@asynccontextmanager
async def db_conn(autocommit: bool = True) -> AsyncIterator[asyncpg.Connection]:
    """
    Borrow a pooled connection.

    With ``autocommit=False`` the block runs in one transaction that commits
    on normal exit and rolls back if the block raises.
    """
    if not pool_ready():
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")

    async with _pool.acquire() as conn:
        if autocommit:
            yield conn
        else:
            async with conn.transaction():
                yield conn
