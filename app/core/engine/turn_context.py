# app/core/engine/turn_context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from app.core.engine.domain import (
    ConversationFlow,
    InboundTurn,
    LocateFacility,
    OutboundMessage,
)
from app.core.engine.errors import Outcome
from app.core.engine.ports import MessageChannel


@dataclass
class TurnContext:
    """
    Everything one turn works on: the inbound message, the reply channel and
    the state records loaded for this conversation/user.
    """
    turn: InboundTurn
    channel: MessageChannel
    flow: ConversationFlow = field(default_factory=ConversationFlow)
    locate: LocateFacility = field(default_factory=LocateFacility)
    outcome: Optional[Outcome] = None

    @property
    def text(self) -> str:
        return self.turn.text or ""

    async def send(self, message: OutboundMessage) -> None:
        if message.has_suggestions():
            await self.channel.send_with_suggested_replies(message.text, message.suggested_replies)
        else:
            await self.channel.send(message.text)

    async def send_all(self, messages: list[OutboundMessage]) -> None:
        for message in messages:
            await self.send(message)
