# app/config.py
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.infra.logging_config import get_logger

logger = get_logger(__name__)

_DATA_DIR = Path(__file__).resolve().parent / "core" / "bots" / "facility_bot" / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: Literal["dev", "staging", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False

    # Reference data (JSON files, loaded once and re-read only when changed on disk)
    valid_to_locations_path: str = str(_DATA_DIR / "valid-to-location.json")
    valid_from_locations_path: str = str(_DATA_DIR / "valid-from-location.json")
    paths_table_path: str = str(_DATA_DIR / "from-to-location.json")

    # Dispatch LUIS app (intent classifier)
    dispatch_luis_app_id: str | None = None
    dispatch_luis_api_key: str | None = None
    dispatch_luis_api_host_name: str | None = None  # e.g. "westus" -> westus.api.cognitive.microsoft.com

    # QnA Maker knowledge bases
    friendly_chat_qna_knowledgebase_id: str | None = None
    friendly_chat_qna_endpoint_key: str | None = None
    friendly_chat_qna_endpoint_host_name: str | None = None  # e.g. https://my-kb.azurewebsites.net/qnamaker

    event_history_qna_knowledgebase_id: str | None = None
    event_history_qna_endpoint_key: str | None = None
    event_history_qna_endpoint_host_name: str | None = None

    # Outbound calls to collaborators
    collaborator_timeout_seconds: int = 10
    collaborator_retries: int = 2

    # Navigation flow
    navigation_max_attempts: int = 0  # 0 = unlimited re-prompts on rejected input
    from_location_choices: str = "Lobby,Gate 1,Gate 2"
    greeting_text: str = "Hello, I am Slug an AI chat-bot. How may I help you?"
    greeting_choices: str = "Hi!,Hello!"

    # State persistence
    # "memory"   - in-process store (dev, tests, single instance)
    # "postgres" - asyncpg-backed bot_state table
    state_backend: Literal["memory", "postgres"] = "memory"
    database_url: str | None = None
    pg_pool_min: int = 2
    pg_pool_max: int = 10
    state_ttl_seconds: int = 0  # > 0: delete state rows idle this long at startup

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"

    @property
    def luis_enabled(self) -> bool:
        """Check if the dispatch LUIS app is configured"""
        return bool(
            self.dispatch_luis_app_id
            and self.dispatch_luis_api_key
            and self.dispatch_luis_api_host_name
        )

    @property
    def friendly_chat_enabled(self) -> bool:
        return bool(
            self.friendly_chat_qna_knowledgebase_id
            and self.friendly_chat_qna_endpoint_key
            and self.friendly_chat_qna_endpoint_host_name
        )

    @property
    def event_history_enabled(self) -> bool:
        return bool(
            self.event_history_qna_knowledgebase_id
            and self.event_history_qna_endpoint_key
            and self.event_history_qna_endpoint_host_name
        )

    @property
    def from_location_choice_list(self) -> list[str]:
        return _split_csv(self.from_location_choices)

    @property
    def greeting_choice_list(self) -> list[str]:
        return _split_csv(self.greeting_choices)

    def validate_required_for_production(self) -> list[str]:
        """Validate that required settings exist for production"""
        if not self.is_production:
            return []

        missing = []

        required_fields = [
            ("dispatch_luis_app_id", self.dispatch_luis_app_id),
            ("dispatch_luis_api_key", self.dispatch_luis_api_key),
            ("dispatch_luis_api_host_name", self.dispatch_luis_api_host_name),
            ("friendly_chat_qna_knowledgebase_id", self.friendly_chat_qna_knowledgebase_id),
            ("friendly_chat_qna_endpoint_key", self.friendly_chat_qna_endpoint_key),
            ("friendly_chat_qna_endpoint_host_name", self.friendly_chat_qna_endpoint_host_name),
            ("event_history_qna_knowledgebase_id", self.event_history_qna_knowledgebase_id),
            ("event_history_qna_endpoint_key", self.event_history_qna_endpoint_key),
            ("event_history_qna_endpoint_host_name", self.event_history_qna_endpoint_host_name),
        ]
        if self.state_backend == "postgres":
            required_fields.append(("database_url", self.database_url))

        for field_name, value in required_fields:
            if not value:
                missing.append(field_name)

        return missing


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def warn_on_risky_config(s: "Settings") -> list[str]:
    warnings: list[str] = []

    if not s.luis_enabled:
        warnings.append("Dispatch LUIS app is not configured (intent classification will not work).")
    if not s.friendly_chat_enabled:
        warnings.append("FriendlyChat QnA knowledge base is not configured.")
    if not s.event_history_enabled:
        warnings.append("EventHistory QnA knowledge base is not configured.")

    if s.state_backend == "memory" and s.is_production:
        warnings.append("prod: state_backend=memory (conversation state is lost on restart).")
    if s.state_backend == "postgres" and not s.database_url:
        warnings.append("state_backend=postgres but database_url is missing.")

    if s.navigation_max_attempts < 0:
        warnings.append("navigation_max_attempts < 0 is treated as unlimited.")

    if not s.from_location_choice_list:
        warnings.append("from_location_choices is empty (no suggested replies for the current location).")

    return warnings


def validate_or_warn(s: "Settings") -> None:
    """
    In prod: enforce required settings (hard fail).
    In non-prod: warn only.
    """
    missing = s.validate_required_for_production()

    if missing:
        raise RuntimeError(f"Missing required settings for production: {', '.join(missing)}")

    for msg in warn_on_risky_config(s):
        logger.warning("[config] %s", msg)

settings = Settings()
validate_or_warn(settings)
