# app/infra/channels.py
"""
Message channel implementations.

The hosting transport (Bot Framework adapter, webhook, etc.) is not part of
this repository; it hands the orchestrator a ``MessageChannel``.  The
buffered channel collects replies so the caller can deliver them itself.
"""
from __future__ import annotations

from app.core.engine.domain import OutboundMessage


class BufferedChannel:
    """Collects outgoing messages in order."""

    def __init__(self) -> None:
        self.messages: list[OutboundMessage] = []

    async def send(self, text: str) -> None:
        self.messages.append(OutboundMessage(text))

    async def send_with_suggested_replies(self, text: str, choices: list[str]) -> None:
        self.messages.append(OutboundMessage(text, suggested_replies=list(choices)))

    @property
    def texts(self) -> list[str]:
        return [m.text for m in self.messages]

    def clear(self) -> None:
        self.messages.clear()
