# app/infra/pg_state_store_async.py
from __future__ import annotations
import copy
import json
from typing import Any

from app.infra.db_async import db_conn
from app.infra.metrics import AppMetrics
from app.infra.logging_config import get_logger

logger = get_logger(__name__)


class AsyncPostgresStateStore:
    """
    Async implementation of AsyncStateStore using asyncpg.

    ``set`` stages the value in memory; ``save`` upserts all staged keys in a
    single transaction.  Staged values are dropped whether the save commits
    or fails.  Keys are namespaced by the caller
    (``conversation:<id>:...`` / ``user:<id>:...``).
    """

    def __init__(self, name: str = "postgres") -> None:
        self.name = name
        self._pending: dict[str, Any] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        if key in self._pending:
            return copy.deepcopy(self._pending[key])
        try:
            async with db_conn() as conn:
                row = await conn.fetchrow(
                    "SELECT value_json::text AS value_json FROM bot_state WHERE key=$1",
                    key,
                )
        except Exception:
            logger.error("Failed to get state: store=%s key=%s", self.name, key, exc_info=True)
            AppMetrics.database_error("state_get")
            raise
        if not row:
            return default
        return json.loads(row["value_json"])

    async def set(self, key: str, value: Any) -> None:
        self._pending[key] = copy.deepcopy(value)

    async def save(self) -> None:
        if not self._pending:
            return
        staged = list(self._pending.items())
        try:
            async with db_conn(autocommit=False) as conn:
                await conn.executemany(
                    """
                    INSERT INTO bot_state(key, value_json)
                    VALUES ($1, $2::jsonb)
                    ON CONFLICT (key)
                    DO UPDATE SET
                      value_json = EXCLUDED.value_json,
                      updated_at = now()
                    """,
                    [(key, json.dumps(value)) for key, value in staged],
                )
        except Exception:
            logger.error("Failed to save state: store=%s keys=%d", self.name, len(staged), exc_info=True)
            AppMetrics.database_error("state_save")
            raise
        finally:
            self._pending.clear()

    def discard(self) -> None:
        self._pending.clear()

    async def delete(self, key: str) -> None:
        self._pending.pop(key, None)
        try:
            async with db_conn() as conn:
                await conn.execute("DELETE FROM bot_state WHERE key=$1", key)
        except Exception:
            logger.error("Failed to delete state: store=%s key=%s", self.name, key, exc_info=True)
            AppMetrics.database_error("state_delete")
            raise

    async def cleanup_expired(self, ttl_seconds: int) -> int:
        try:
            async with db_conn() as conn:
                result = await conn.execute(
                    "DELETE FROM bot_state WHERE updated_at < now() - ($1 || ' seconds')::interval",
                    str(ttl_seconds),
                )
                # asyncpg execute returns "DELETE N" string
                deleted = int(result.split()[-1]) if result else 0
                if deleted > 0:
                    logger.info("Cleaned up %d expired state rows (ttl=%ds)", deleted, ttl_seconds)
                return deleted
        except Exception:
            logger.error("Failed to cleanup expired state: ttl=%d", ttl_seconds, exc_info=True)
            AppMetrics.database_error("state_cleanup")
            raise
