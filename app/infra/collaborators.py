# app/infra/collaborators.py
"""
Wiring: builds the classifier, knowledge bases and the turn orchestrator
from ``settings``, plus the host ``startup`` / ``shutdown`` hooks.
"""
from __future__ import annotations

from typing import Optional, Tuple

from app.core.engine.ports import AsyncStateStore, IntentClassifier, KnowledgeBase
from app.infra.logging_config import get_logger
from app.infra.luis_recognizer import LuisRecognizer
from app.infra.qna_maker import QnAMakerKnowledgeBase

logger = get_logger(__name__)


def build_classifier() -> IntentClassifier:
    """Dispatch LUIS recognizer. The bot cannot route turns without it."""
    from app.config import settings

    if not settings.luis_enabled:
        raise RuntimeError(
            "Dispatch LUIS app is not configured "
            "(DISPATCH_LUIS_APP_ID / DISPATCH_LUIS_API_KEY / DISPATCH_LUIS_API_HOST_NAME)"
        )

    return LuisRecognizer(
        app_id=settings.dispatch_luis_app_id,
        api_key=settings.dispatch_luis_api_key,
        host_name=settings.dispatch_luis_api_host_name,
        timeout=settings.collaborator_timeout_seconds,
        retries=settings.collaborator_retries,
    )


def build_knowledge_bases() -> Tuple[Optional[KnowledgeBase], Optional[KnowledgeBase]]:
    """
    Create the (friendly_chat, event_history) knowledge bases.

    An unconfigured knowledge base is ``None``; its intent then always gets
    the "no answer" reply.
    """
    from app.config import settings

    friendly_chat: Optional[KnowledgeBase] = None
    if settings.friendly_chat_enabled:
        friendly_chat = QnAMakerKnowledgeBase(
            knowledge_base_id=settings.friendly_chat_qna_knowledgebase_id,
            endpoint_key=settings.friendly_chat_qna_endpoint_key,
            host=settings.friendly_chat_qna_endpoint_host_name,
            name="friendly_chat",
            timeout=settings.collaborator_timeout_seconds,
            retries=settings.collaborator_retries,
        )
    else:
        logger.warning("FriendlyChat knowledge base disabled (not configured)")

    event_history: Optional[KnowledgeBase] = None
    if settings.event_history_enabled:
        event_history = QnAMakerKnowledgeBase(
            knowledge_base_id=settings.event_history_qna_knowledgebase_id,
            endpoint_key=settings.event_history_qna_endpoint_key,
            host=settings.event_history_qna_endpoint_host_name,
            name="event_history",
            timeout=settings.collaborator_timeout_seconds,
            retries=settings.collaborator_retries,
        )
    else:
        logger.warning("EventHistory knowledge base disabled (not configured)")

    return friendly_chat, event_history


def build_orchestrator(
    *,
    classifier: Optional[IntentClassifier] = None,
    conversation_state: Optional[AsyncStateStore] = None,
    user_state: Optional[AsyncStateStore] = None,
):
    """Assemble a ready-to-use TurnOrchestrator; any part can be overridden."""
    from app.core.bots.facility_bot.reference_data import get_reference_data
    from app.core.engine.dispatcher import IntentDispatcher
    from app.core.engine.use_cases import TurnOrchestrator
    from app.core.handlers.facility_bot_handler import FacilityBotHandler
    from app.infra.state_factory import build_state_stores

    if conversation_state is None or user_state is None:
        default_conversation, default_user = build_state_stores()
        conversation_state = conversation_state or default_conversation
        user_state = user_state or default_user

    # Fail fast on unreadable reference files instead of on the first navigation turn
    get_reference_data()

    friendly_chat, event_history = build_knowledge_bases()
    dispatcher = IntentDispatcher(
        flow_handler=FacilityBotHandler(),
        friendly_chat=friendly_chat,
        event_history=event_history,
    )
    return TurnOrchestrator(
        classifier=classifier or build_classifier(),
        dispatcher=dispatcher,
        conversation_state=conversation_state,
        user_state=user_state,
    )


async def startup() -> None:
    """
    Host start hook: configure logging, check settings and, for the
    ``postgres`` backend, open the pool and apply migrations.

    Call once before the first turn; pair with :func:`shutdown`.
    """
    from app.config import settings, validate_or_warn
    from app.infra import db_async, logging_config, migrations_async

    logging_config.setup_logging(level=settings.log_level, use_json=settings.log_json)
    logger.info("Starting facility bot: env=%s state_backend=%s", settings.app_env, settings.state_backend)
    validate_or_warn(settings)

    if settings.state_backend != "postgres":
        return

    await db_async.init_pool()
    try:
        result = await migrations_async.apply_migrations()
    except Exception:
        logger.critical("State database migrations failed", exc_info=True)
        await db_async.close_pool()
        raise
    logger.info("State database ready: %d migration(s) applied", result["count"])

    if settings.state_ttl_seconds > 0:
        from app.infra.pg_state_store_async import AsyncPostgresStateStore

        await AsyncPostgresStateStore("cleanup").cleanup_expired(settings.state_ttl_seconds)


async def shutdown() -> None:
    """Host stop hook: release the database pool if one was opened."""
    from app.infra import db_async

    await db_async.close_pool()
    logger.info("Facility bot stopped")
