# app/core/engine/ports.py
from __future__ import annotations
from typing import Any, Protocol
from app.core.engine.domain import RecognizerResult, KbAnswer


# ============================================================================
# ASYNC PROTOCOLS (collaborators the core calls through)
# ============================================================================

class IntentClassifier(Protocol):
    async def classify(self, text: str) -> RecognizerResult: ...


class KnowledgeBase(Protocol):
    async def query(self, text: str) -> list[KbAnswer]:
        """
        Ordered best-first.
        Empty list => no answer found.
        """
        ...


class AsyncStateStore(Protocol):
    """
    Key-value state persistence.

    ``set`` only stages a value; nothing is durable until ``save`` is called,
    which the orchestrator does exactly once per turn.  ``get`` sees this
    store's own staged values.  A failed ``save`` drops what was staged, and
    ``discard`` drops it explicitly, so a broken turn never leaks into the next.
    """
    async def get(self, key: str, default: Any = None) -> Any: ...
    async def set(self, key: str, value: Any) -> None: ...
    async def save(self) -> None: ...
    def discard(self) -> None: ...


class MessageChannel(Protocol):
    async def send(self, text: str) -> None: ...
    async def send_with_suggested_replies(self, text: str, choices: list[str]) -> None: ...
