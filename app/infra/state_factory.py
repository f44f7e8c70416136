# app/infra/state_factory.py
"""
State store factory.

Conversation-scoped (navigation flow) and user-scoped (slot values) state
are kept in two separate stores of the same backend.
"""
from __future__ import annotations

from typing import Optional, Tuple

from app.core.engine.ports import AsyncStateStore
from app.infra.logging_config import get_logger

logger = get_logger(__name__)


def build_state_stores(backend: Optional[str] = None) -> Tuple[AsyncStateStore, AsyncStateStore]:
    """
    Create the (conversation_state, user_state) pair.

    Args:
        backend: ``"memory"`` or ``"postgres"``; defaults to ``settings.state_backend``

    Raises:
        ValueError: unknown backend name
    """
    from app.config import settings

    backend = backend or settings.state_backend

    if backend == "memory":
        from app.infra.memory_state_store import InMemoryStateStore

        logger.info("Using in-memory state stores")
        return InMemoryStateStore("conversation"), InMemoryStateStore("user")

    if backend == "postgres":
        from app.infra.pg_state_store_async import AsyncPostgresStateStore

        logger.info("Using PostgreSQL state stores")
        return AsyncPostgresStateStore("conversation"), AsyncPostgresStateStore("user")

    raise ValueError(f"Unknown state backend: {backend!r}")
