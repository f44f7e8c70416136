# app/core/engine/errors.py
"""
Error taxonomy for the facility bot.

User-input failures never raise: they are recovered inside the turn and
recorded as an :class:`Outcome`.  Only configuration / reference-data and
collaborator failures propagate out of the core as exceptions.
"""
from __future__ import annotations

from enum import Enum


class Outcome(str, Enum):
    """What a turn ended with (reported to the user and counted in metrics)."""
    PROMPTED = "prompted"
    VALIDATION_REJECTED = "validation_rejected"
    PATH_FOUND = "path_found"
    PATH_NOT_FOUND = "path_not_found"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    ANSWERED = "answered"
    NO_ANSWER_FOUND = "no_answer_found"
    UNRECOGNIZED_INTENT = "unrecognized_intent"


class FacilityBotError(Exception):
    """Base class for all facility bot errors."""

    def __init__(self, detail: str = "Internal error"):
        self.detail = detail
        super().__init__(detail)


class ReferenceDataUnavailable(FacilityBotError):
    """Reference file missing or malformed. There is no safe default table."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Reference data unavailable: {path}: {reason}")


class CollaboratorError(FacilityBotError):
    """An external collaborator (classifier, knowledge base, store) failed."""

    def __init__(self, collaborator: str, detail: str):
        self.collaborator = collaborator
        super().__init__(f"{collaborator}: {detail}")


class InvalidStateError(FacilityBotError):
    """Persisted conversation state holds a value the state machine cannot handle."""
