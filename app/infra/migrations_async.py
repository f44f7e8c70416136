# app/infra/migrations_async.py
"""
Async database migrations runner (asyncpg).
"""
from __future__ import annotations
from pathlib import Path

from app.infra.db_async import db_conn
from app.infra.logging_config import get_logger

logger = get_logger(__name__)


def _sql_dir() -> Path:
    """Get SQL migrations directory path."""
    # Next to this file: app/infra/sql
    return Path(__file__).resolve().parent / "sql"


def pending_migration_files(applied: set[str]) -> list[Path]:
    """SQL files not yet recorded in ``schema_migrations``, in apply order."""
    files = sorted(p for p in _sql_dir().glob("*.sql") if p.is_file())
    return [p for p in files if p.name not in applied]


async def apply_migrations() -> dict:
    """
    Apply SQL migrations from app/infra/sql directory.

    Migrations are applied in alphabetical order (001_bot_state.sql, ...).
    Already applied migrations are tracked in schema_migrations table.

    Returns:
        dict with keys:
            - ok: bool (True if successful)
            - applied: list[str] (migration filenames applied in this run)
            - count: int (number of migrations applied)
    """
    async with db_conn(autocommit=False) as conn:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations(
              version text PRIMARY KEY,
              applied_at timestamptz NOT NULL DEFAULT now()
            )
            """
        )

        rows = await conn.fetch("SELECT version FROM schema_migrations")
        applied = {row['version'] for row in rows}

        applied_now = []
        for p in pending_migration_files(applied):
            version = p.name
            logger.info("Applying migration: %s", version)
            await conn.execute(p.read_text(encoding="utf-8"))
            await conn.execute(
                "INSERT INTO schema_migrations(version) VALUES ($1)",
                version
            )
            applied_now.append(version)
            logger.info("Migration %s applied successfully", version)

        # Transaction auto-commits on exit

    logger.info("Migrations complete: %d applied", len(applied_now))
    return {"ok": True, "applied": applied_now, "count": len(applied_now)}
