# app/core/engine/use_cases.py
from __future__ import annotations

from typing import Optional

from app.core.bots.facility_bot.config import (
    CONVERSATION_FLOW_PROPERTY,
    LOCATE_FACILITY_PROPERTY,
)
from app.core.engine.dispatcher import IntentDispatcher
from app.core.engine.domain import InboundTurn, OutboundMessage
from app.core.engine.errors import CollaboratorError
from app.core.engine.ports import AsyncStateStore, IntentClassifier, MessageChannel
from app.core.engine.serialization import (
    flow_from_dict,
    flow_to_dict,
    locate_from_dict,
    locate_to_dict,
)
from app.core.engine.turn_context import TurnContext
from app.infra.channels import BufferedChannel
from app.infra.logging_config import LogContext, get_logger
from app.infra.metrics import AppMetrics

logger = get_logger(__name__)

_EMPTY_MESSAGE_REPLY = "Sorry, I didn't receive any message content."


class TurnOrchestrator:
    """
    Application service / use-case layer.
    Workflow: load state -> classify -> dispatch -> reply -> persist.

    The flow record is stored per conversation and the slot values per user,
    each in its own store.  Both stores are saved once, after the turn has
    been fully processed; a collaborator failure leaves them untouched.
    """

    def __init__(
        self,
        *,
        classifier: IntentClassifier,
        dispatcher: IntentDispatcher,
        conversation_state: AsyncStateStore,
        user_state: AsyncStateStore,
        greeting_text: Optional[str] = None,
        greeting_choices: Optional[list[str]] = None,
    ) -> None:
        from app.config import settings

        self.classifier = classifier
        self.dispatcher = dispatcher
        self.conversation_state = conversation_state
        self.user_state = user_state
        self.greeting_text = greeting_text or settings.greeting_text
        self.greeting_choices = (
            list(greeting_choices) if greeting_choices is not None else settings.greeting_choice_list
        )

    @staticmethod
    def flow_key(conversation_id: str) -> str:
        return f"conversation:{conversation_id}:{CONVERSATION_FLOW_PROPERTY}"

    @staticmethod
    def locate_key(user_id: str) -> str:
        return f"user:{user_id}:{LOCATE_FACILITY_PROPERTY}"

    async def process_turn(
        self,
        turn: InboundTurn,
        channel: Optional[MessageChannel] = None,
    ) -> dict:
        """
        Run one user turn end to end.

        Args:
            turn: Normalized inbound message
            channel: Where replies go; a fresh :class:`BufferedChannel` if omitted

        Returns:
            dict with ``intent``, ``outcome``, ``question`` (flow state after
            the turn) and ``replies`` (messages sent, when buffered)
        """
        channel = channel or BufferedChannel()
        log = LogContext(logger, conversation_id=turn.conversation_id, user_id=turn.user_id)
        log.info("Processing message activity")

        flow_key = self.flow_key(turn.conversation_id)
        locate_key = self.locate_key(turn.user_id)

        flow = flow_from_dict(await self.conversation_state.get(flow_key, None))
        locate = locate_from_dict(await self.user_state.get(locate_key, None))
        context = TurnContext(turn=turn, channel=channel, flow=flow, locate=locate)

        if not turn.has_text():
            await context.send(OutboundMessage(_EMPTY_MESSAGE_REPLY))
            return self._result(context, channel, intent=None)

        try:
            recognizer_result = await self.classifier.classify(context.text)
        except CollaboratorError as exc:
            AppMetrics.collaborator_error(exc.collaborator)
            log.error("Intent classification failed: %s", exc.detail)
            raise

        intent = self.dispatcher.resolve_intent(context, recognizer_result)
        log = log.bind(intent=intent)
        if intent != recognizer_result.top_intent:
            log.debug("Classifier said %s; navigation in progress", recognizer_result.top_intent)

        with AppMetrics.track_turn_time(intent):
            try:
                outcome = await self.dispatcher.dispatch(context, intent, recognizer_result)
            except CollaboratorError as exc:
                AppMetrics.collaborator_error(exc.collaborator)
                log.error("Dispatch failed: %s", exc.detail)
                raise

            try:
                await self.conversation_state.set(flow_key, flow_to_dict(context.flow))
                await self.user_state.set(locate_key, locate_to_dict(context.locate))
                await self.conversation_state.save()
                await self.user_state.save()
            except Exception:
                self.conversation_state.discard()
                self.user_state.discard()
                log.error("Saving turn state failed", exc_info=True)
                raise

        AppMetrics.turn_received(intent)
        AppMetrics.outcome(outcome.value)
        log.info("Turn done: outcome=%s question=%s", outcome.value, context.flow.last_question_asked.value)

        return self._result(context, channel, intent=intent)

    async def greet(
        self,
        *,
        conversation_id: str,
        member_ids: list[str],
        bot_id: str,
        channel: Optional[MessageChannel] = None,
    ) -> dict:
        """Welcome every member who joined the conversation, except the bot itself."""
        channel = channel or BufferedChannel()
        greeted = 0
        for member_id in member_ids:
            if member_id == bot_id:
                continue
            await channel.send(self.greeting_text)
            await channel.send_with_suggested_replies("", self.greeting_choices)
            greeted += 1

        if greeted:
            AppMetrics.members_greeted(greeted)
            LogContext(logger, conversation_id=conversation_id).info("Greeted %d new member(s)", greeted)

        result = {"greeted": greeted}
        if isinstance(channel, BufferedChannel):
            result["replies"] = list(channel.messages)
        return result

    @staticmethod
    def _result(context: TurnContext, channel: MessageChannel, intent: Optional[str]) -> dict:
        result = {
            "intent": intent,
            "outcome": context.outcome.value if context.outcome else None,
            "question": context.flow.last_question_asked.value,
        }
        if isinstance(channel, BufferedChannel):
            result["replies"] = list(channel.messages)
        return result
