# app/core/handlers/facility_bot_handler.py
"""
Facility Bot Handler - the navigation slot-filling state machine.

Collects a destination ("to") and a current location ("from"), validates
both against the reference lists and reports the precomputed path.

States (``ConversationFlow.last_question_asked``)::

    NONE -> TO_LOCATION -> FROM_LOCATION -> NONE

Each state has exactly one handler method.  A handler either waits for the
next user turn or, when the slot of the state it moved to was already
filled from classifier entities, lets ``advance`` run the next handler in
the same turn.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

from app.core.bots.facility_bot.reference_data import ReferenceData
from app.core.bots.facility_bot.texts import get_text
from app.core.bots.facility_bot.validators import resolve_path, validate_location
from app.core.engine.domain import (
    ConversationFlow,
    LocateFacility,
    LocationRole,
    OutboundMessage,
    QuestionAsked,
)
from app.core.engine.errors import InvalidStateError, Outcome
from app.infra.logging_config import get_logger

logger = get_logger(__name__)

# (outcome, wait_for_user)
_StepResult = Tuple[Outcome, bool]


class FacilityBotHandler:
    """Handler for the "where is ..." navigation dialog"""

    def __init__(
        self,
        reference: Optional[ReferenceData] = None,
        from_location_choices: Optional[list[str]] = None,
        max_attempts: Optional[int] = None,
    ):
        from app.config import settings

        self._reference = reference
        self._from_choices = (
            list(from_location_choices)
            if from_location_choices is not None
            else settings.from_location_choice_list
        )
        self._max_attempts = settings.navigation_max_attempts if max_attempts is None else max_attempts
        self._handlers: dict[QuestionAsked, Callable[..., _StepResult]] = {
            QuestionAsked.NONE: self._handle_none,
            QuestionAsked.TO_LOCATION: self._handle_to_location,
            QuestionAsked.FROM_LOCATION: self._handle_from_location,
        }

    def advance(
        self,
        flow: ConversationFlow,
        locate: LocateFacility,
        text: Optional[str],
    ) -> Tuple[list[OutboundMessage], ConversationFlow, LocateFacility, Outcome]:
        """
        Process one user turn of the navigation dialog.

        Args:
            flow: Conversation-scoped flow record (mutated in place)
            locate: User-scoped slot values (mutated in place)
            text: Raw user text for this turn

        Returns:
            Tuple of (replies, flow, locate, outcome)
        """
        replies: list[OutboundMessage] = []

        while True:
            handler = self._handlers.get(flow.last_question_asked)
            if handler is None:
                raise InvalidStateError(f"No handler for state {flow.last_question_asked!r}")

            flow.first_navigation_turn = False
            state_before = flow.last_question_asked
            outcome, wait = handler(flow, locate, text, replies)
            logger.debug(
                "Navigation step %s -> %s (outcome=%s)",
                state_before.value, flow.last_question_asked.value, outcome.value,
            )
            if wait:
                break

        flow.in_navigation = flow.last_question_asked != QuestionAsked.NONE
        return replies, flow, locate, outcome

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    def _handle_none(self, flow, locate, text, replies) -> _StepResult:
        replies.append(OutboundMessage(get_text("q_to_location")))
        flow.last_question_asked = QuestionAsked.TO_LOCATION
        return Outcome.PROMPTED, True

    def _handle_to_location(self, flow, locate, text, replies) -> _StepResult:
        if locate.to_location is None:
            result = validate_location(LocationRole.TO, text, self._reference)
            if not result.success:
                return self._reject(flow, locate, result.message, replies)
            locate.to_location = result.value

        flow.failed_attempts = 0
        replies.append(OutboundMessage(get_text("ack_to_location", to_location=locate.to_location)))
        flow.last_question_asked = QuestionAsked.FROM_LOCATION

        if locate.from_location is not None:
            # Current location came with the first utterance: resolve right away
            return Outcome.PROMPTED, False

        replies.append(OutboundMessage(get_text("q_from_location")))
        replies.append(OutboundMessage("", suggested_replies=list(self._from_choices)))
        return Outcome.PROMPTED, True

    def _handle_from_location(self, flow, locate, text, replies) -> _StepResult:
        if locate.to_location is None:
            # Slots are per user and the flow is per conversation, so this user
            # may reach FROM_LOCATION with no destination yet.
            logger.info("Current location asked without a destination; asking for the destination")
            flow.failed_attempts = 0
            flow.last_question_asked = QuestionAsked.TO_LOCATION
            replies.append(OutboundMessage(get_text("q_to_location")))
            return Outcome.PROMPTED, True

        if locate.from_location is None:
            result = validate_location(LocationRole.FROM, text, self._reference)
            if not result.success:
                return self._reject(flow, locate, result.message, replies)
            locate.from_location = result.value

        found = resolve_path(locate.from_location, locate.to_location, self._reference)

        replies.append(OutboundMessage(get_text(
            "ack_both_locations",
            to_location=locate.to_location,
            from_location=locate.from_location,
        )))
        if found.success:
            replies.append(OutboundMessage(get_text("path_found", path=found.value)))
            outcome = Outcome.PATH_FOUND
        else:
            replies.append(OutboundMessage(get_text(
                "err_path_not_found",
                from_location=locate.from_location,
                to_location=locate.to_location,
            )))
            replies.append(OutboundMessage(get_text("escalate")))
            outcome = Outcome.PATH_NOT_FOUND
            logger.info(
                "No path from '%s' to '%s'", locate.from_location, locate.to_location,
            )

        flow.reset()
        locate.clear()
        return outcome, True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _reject(self, flow, locate, message, replies) -> _StepResult:
        """Re-prompt in the same state, or give up once the attempt cap is hit."""
        replies.append(OutboundMessage(message or get_text("err_not_understood")))
        flow.failed_attempts += 1

        if self._max_attempts > 0 and flow.failed_attempts >= self._max_attempts:
            logger.info(
                "Navigation abandoned after %d rejected answers in %s",
                flow.failed_attempts, flow.last_question_asked.value,
            )
            replies.append(OutboundMessage(get_text("err_attempts_exhausted")))
            replies.append(OutboundMessage(get_text("escalate")))
            flow.reset()
            locate.clear()
            return Outcome.ATTEMPTS_EXHAUSTED, True

        return Outcome.VALIDATION_REJECTED, True
