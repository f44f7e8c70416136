# app/core/engine/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ============================================================================
# CONVERSATION FLOW (conversation-scoped state)
# ============================================================================

class QuestionAsked(str, Enum):
    """Identifies the last question the bot asked in the navigation dialog."""
    NONE = "none"
    TO_LOCATION = "tolocation"
    FROM_LOCATION = "fromlocation"


@dataclass
class ConversationFlow:
    """
    Per-conversation navigation state.

    ``in_navigation`` and ``first_navigation_turn`` live here (not in module
    globals) so that concurrent conversations never see each other's flags.
    """
    last_question_asked: QuestionAsked = QuestionAsked.NONE
    in_navigation: bool = False
    first_navigation_turn: bool = True
    failed_attempts: int = 0  # consecutive rejected answers in the current state

    def reset(self) -> None:
        """Return to the pre-navigation defaults"""
        self.last_question_asked = QuestionAsked.NONE
        self.in_navigation = False
        self.first_navigation_turn = True
        self.failed_attempts = 0


# ============================================================================
# LOCATE FACILITY (user-scoped slot values)
# ============================================================================

@dataclass
class LocateFacility:
    """Slot values collected from the user, filled one turn at a time."""
    to_location: Optional[str] = None
    from_location: Optional[str] = None

    def clear(self) -> None:
        self.to_location = None
        self.from_location = None

    def is_empty(self) -> bool:
        return self.to_location is None and self.from_location is None


# ============================================================================
# REFERENCE DATA
# ============================================================================

class LocationRole(str, Enum):
    """Which reference list a location is validated against."""
    TO = "to"
    FROM = "from"


@dataclass(frozen=True)
class LocationEntry:
    location: str


@dataclass(frozen=True)
class PathEntry:
    from_location: str
    to_location: str
    path: str


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a validation or path lookup. Never persisted."""
    success: bool
    message: Optional[str] = None
    value: Optional[str] = None


# ============================================================================
# COLLABORATOR PAYLOADS
# ============================================================================

@dataclass(frozen=True)
class Entity:
    """A span extracted by the intent classifier, e.g. ``Entity("ToLocation", "lobby")``."""
    type: str
    value: str


@dataclass
class RecognizerResult:
    """Normalized intent classifier output."""
    text: str
    top_intent: str
    entities: list[Entity] = field(default_factory=list)
    intents: dict[str, float] = field(default_factory=dict)

    def entity_values(self, entity_type: str) -> list[str]:
        return [e.value for e in self.entities if e.type == entity_type]


@dataclass(frozen=True)
class KbAnswer:
    answer: str
    confidence: float = 0.0


# ============================================================================
# MESSAGES
# ============================================================================

@dataclass
class InboundTurn:
    """
    Normalized inbound user message.
    The hosting transport builds this from its channel activity.
    """
    conversation_id: str
    user_id: str
    text: Optional[str] = None
    message_id: Optional[str] = None

    def has_text(self) -> bool:
        """Check if message contains text"""
        return bool(self.text and self.text.strip())


@dataclass
class OutboundMessage:
    """A single outgoing activity: plain text or suggested-reply buttons."""
    text: str
    suggested_replies: list[str] = field(default_factory=list)

    def has_suggestions(self) -> bool:
        return bool(self.suggested_replies)
