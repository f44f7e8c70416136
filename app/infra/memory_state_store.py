# app/infra/memory_state_store.py
"""
In-process key-value state store.

``set`` stages a copy of the value and ``save`` commits everything staged.
``get`` reads staged values first, so code running inside the same turn sees
its own writes; ``snapshot`` shows committed state only.  Staged values that
are never saved are dropped by ``discard``.
"""
from __future__ import annotations

import asyncio
import copy
from typing import Any

from app.infra.logging_config import get_logger

logger = get_logger(__name__)


class InMemoryStateStore:
    """Async in-memory implementation of AsyncStateStore"""

    def __init__(self, name: str = "memory") -> None:
        self.name = name
        self._committed: dict[str, Any] = {}
        self._pending: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str, default: Any = None) -> Any:
        if key in self._pending:
            return copy.deepcopy(self._pending[key])
        if key in self._committed:
            return copy.deepcopy(self._committed[key])
        return default

    async def set(self, key: str, value: Any) -> None:
        self._pending[key] = copy.deepcopy(value)

    async def save(self) -> None:
        async with self._lock:
            if not self._pending:
                return
            self._committed.update(self._pending)
            logger.debug("State store '%s' saved %d key(s)", self.name, len(self._pending))
            self._pending.clear()

    def discard(self) -> None:
        if self._pending:
            logger.debug("State store '%s' dropped %d staged key(s)", self.name, len(self._pending))
        self._pending.clear()

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._pending.pop(key, None)
            self._committed.pop(key, None)

    def snapshot(self) -> dict[str, Any]:
        """Committed state only (for diagnostics and tests)."""
        return copy.deepcopy(self._committed)
