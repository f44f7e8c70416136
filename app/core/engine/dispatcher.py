# app/core/engine/dispatcher.py
"""
Intent dispatcher: routes a classified turn to the navigation dialog or to
one of the two knowledge bases.
"""
from __future__ import annotations

from typing import Optional

from app.core.bots.facility_bot.config import (
    ENTITY_FROM_LOCATION,
    ENTITY_TO_LOCATION,
    INTENT_EVENT_HISTORY,
    INTENT_FRIENDLY_CHAT,
    INTENT_LOCATE_FACILITY,
)
from app.core.bots.facility_bot.texts import get_text
from app.core.engine.domain import OutboundMessage, QuestionAsked, RecognizerResult
from app.core.engine.errors import Outcome
from app.core.engine.ports import KnowledgeBase
from app.core.engine.turn_context import TurnContext
from app.core.handlers.facility_bot_handler import FacilityBotHandler
from app.infra.logging_config import get_logger

logger = get_logger(__name__)


class IntentDispatcher:
    """
    Routes each turn by intent.

    While a conversation is mid-navigation (``flow.in_navigation``) every
    turn goes to the navigation dialog, whatever the classifier says, so a
    misclassified answer cannot break the slot-filling sequence.
    """

    def __init__(
        self,
        *,
        flow_handler: FacilityBotHandler,
        friendly_chat: Optional[KnowledgeBase],
        event_history: Optional[KnowledgeBase],
    ) -> None:
        self.flow_handler = flow_handler
        self.friendly_chat = friendly_chat
        self.event_history = event_history

    @staticmethod
    def resolve_intent(context: TurnContext, recognizer_result: RecognizerResult) -> str:
        """Effective intent for this turn (navigation overrides the classifier)."""
        if context.flow.in_navigation:
            return INTENT_LOCATE_FACILITY
        return recognizer_result.top_intent

    async def route(self, context: TurnContext, recognizer_result: RecognizerResult) -> Outcome:
        intent = self.resolve_intent(context, recognizer_result)
        return await self.dispatch(context, intent, recognizer_result)

    async def dispatch(
        self,
        context: TurnContext,
        intent: str,
        recognizer_result: RecognizerResult,
    ) -> Outcome:
        if intent == INTENT_LOCATE_FACILITY:
            outcome = await self._process_locate_facility(context, recognizer_result)
        elif intent == INTENT_FRIENDLY_CHAT:
            outcome = await self._process_knowledge_base(context, self.friendly_chat, INTENT_FRIENDLY_CHAT)
        elif intent == INTENT_EVENT_HISTORY:
            outcome = await self._process_knowledge_base(context, self.event_history, INTENT_EVENT_HISTORY)
        else:
            logger.info("Dispatch unrecognized intent: %s", intent)
            await context.send(OutboundMessage(get_text("err_unrecognized_intent", intent=str(intent))))
            outcome = Outcome.UNRECOGNIZED_INTENT

        context.outcome = outcome
        return outcome

    async def _process_locate_facility(
        self,
        context: TurnContext,
        recognizer_result: RecognizerResult,
    ) -> Outcome:
        flow, locate = context.flow, context.locate

        if flow.first_navigation_turn:
            # A fresh dialog starts from empty slots, then takes whatever the
            # classifier already extracted from the opening utterance.
            locate.clear()
            to_values = recognizer_result.entity_values(ENTITY_TO_LOCATION)
            from_values = recognizer_result.entity_values(ENTITY_FROM_LOCATION)
            if to_values:
                locate.to_location = to_values[-1]
            if from_values:
                locate.from_location = from_values[-1]
            if locate.to_location is not None:
                flow.last_question_asked = QuestionAsked.TO_LOCATION
            if not locate.is_empty():
                logger.debug(
                    "Pre-filled from entities: to=%s from=%s",
                    locate.to_location, locate.from_location,
                )

        flow.in_navigation = True
        replies, _, _, outcome = self.flow_handler.advance(flow, locate, context.text)
        await context.send_all(replies)
        return outcome

    async def _process_knowledge_base(
        self,
        context: TurnContext,
        knowledge_base: Optional[KnowledgeBase],
        name: str,
    ) -> Outcome:
        if knowledge_base is None:
            logger.warning("%s knowledge base is not configured", name)
            results = []
        else:
            results = await knowledge_base.query(context.text)

        if results:
            await context.send(OutboundMessage(results[0].answer))
            return Outcome.ANSWERED

        await context.send(OutboundMessage(get_text("err_no_answer")))
        return Outcome.NO_ANSWER_FOUND
