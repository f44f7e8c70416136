# app/core/engine/serialization.py
"""
Plain-dict (JSON-able) representation of the persisted state records.

Keys keep the original bot's property names (``lastQuestionAsked``,
``tolocation``, ``fromlocation``) so existing stored state stays readable.
"""
from __future__ import annotations

from typing import Any, Optional

from app.core.engine.domain import ConversationFlow, LocateFacility, QuestionAsked
from app.core.engine.errors import InvalidStateError


def flow_to_dict(flow: ConversationFlow) -> dict:
    return {
        "lastQuestionAsked": flow.last_question_asked.value,
        "inNavigation": flow.in_navigation,
        "firstNavigationTurn": flow.first_navigation_turn,
        "failedAttempts": flow.failed_attempts,
    }


def flow_from_dict(data: Optional[dict[str, Any]]) -> ConversationFlow:
    """Rebuild a flow record; ``None``/empty gives a fresh conversation."""
    if not data:
        return ConversationFlow()

    raw = data.get("lastQuestionAsked", QuestionAsked.NONE.value)
    try:
        question = QuestionAsked(raw)
    except ValueError:
        raise InvalidStateError(f"Unknown lastQuestionAsked value: {raw!r}") from None

    return ConversationFlow(
        last_question_asked=question,
        in_navigation=bool(data.get("inNavigation", question != QuestionAsked.NONE)),
        first_navigation_turn=bool(data.get("firstNavigationTurn", question == QuestionAsked.NONE)),
        failed_attempts=int(data.get("failedAttempts", 0)),
    )


def locate_to_dict(locate: LocateFacility) -> dict:
    out: dict[str, str] = {}
    if locate.to_location is not None:
        out["tolocation"] = locate.to_location
    if locate.from_location is not None:
        out["fromlocation"] = locate.from_location
    return out


def locate_from_dict(data: Optional[dict[str, Any]]) -> LocateFacility:
    if not data:
        return LocateFacility()
    return LocateFacility(
        to_location=data.get("tolocation"),
        from_location=data.get("fromlocation"),
    )
