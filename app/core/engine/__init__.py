# app/core/engine/__init__.py
"""
Core engine -- provider-agnostic domain logic.

This package contains the domain records, the collaborator protocols
(ports), the intent dispatcher and the turn orchestrator.  Only the
dependency-free records, errors and ports are re-exported here; the
dispatcher and orchestrator pull in the dialog handlers and bot data, so
they are imported from their own modules.

Canonical imports:
    from app.core.engine.use_cases import TurnOrchestrator
    from app.core.engine.dispatcher import IntentDispatcher
    from app.core.engine.domain import ConversationFlow, LocateFacility
    from app.core.engine.ports import AsyncStateStore
"""
from app.core.engine.domain import (  # noqa: F401
    QuestionAsked,
    ConversationFlow,
    LocateFacility,
    RecognizerResult,
    InboundTurn,
    OutboundMessage,
)
from app.core.engine.errors import (  # noqa: F401
    Outcome,
    FacilityBotError,
    ReferenceDataUnavailable,
    CollaboratorError,
    InvalidStateError,
)
from app.core.engine.ports import (  # noqa: F401
    IntentClassifier,
    KnowledgeBase,
    AsyncStateStore,
    MessageChannel,
)
