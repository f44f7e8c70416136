# app/infra/luis_recognizer.py
"""
Dispatch intent classifier backed by a LUIS v2 prediction endpoint.

``GET https://{host}.api.cognitive.microsoft.com/luis/v2.0/apps/{app_id}
?subscription-key=...&verbose=true&q=...``

The response's ``topScoringIntent`` becomes ``top_intent``; entities keep
the user's own casing by slicing the query with ``startIndex``/``endIndex``
(the ``entity`` field itself is lowercased by LUIS).
"""
from __future__ import annotations

from typing import Any

import httpx

from app.core.engine.domain import Entity, RecognizerResult
from app.infra.http_collaborator import HttpCollaborator
from app.infra.logging_config import get_logger

logger = get_logger(__name__)

NONE_INTENT = "None"


class LuisRecognizer(HttpCollaborator):
    """IntentClassifier implementation for the dispatch LUIS app."""

    name = "luis"

    def __init__(
        self,
        app_id: str,
        api_key: str,
        host_name: str,
        timeout: int = 10,
        retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout=timeout, retries=retries, transport=transport)
        self._app_id = app_id
        self._api_key = api_key
        self._host_name = host_name

    @property
    def endpoint(self) -> str:
        return f"https://{self._host_name}.api.cognitive.microsoft.com/luis/v2.0/apps/{self._app_id}"

    async def classify(self, text: str) -> RecognizerResult:
        if not text or not text.strip():
            return RecognizerResult(text=text or "", top_intent=NONE_INTENT)

        data = await self._with_retries(lambda: self._call_api(text))
        result = self.parse_response(text, data)
        logger.debug("LUIS top intent: %s (%d entities)", result.top_intent, len(result.entities))
        return result

    async def _call_api(self, text: str) -> dict[str, Any]:
        async with self._client() as client:
            resp = await client.get(
                self.endpoint,
                params={
                    "subscription-key": self._api_key,
                    "verbose": "true",
                    "q": text,
                },
            )
            resp.raise_for_status()
            return resp.json()

    @staticmethod
    def parse_response(text: str, data: dict[str, Any]) -> RecognizerResult:
        """Normalize a LUIS v2 prediction payload."""
        intents: dict[str, float] = {}
        for item in data.get("intents") or []:
            name = item.get("intent")
            if name:
                intents[name] = float(item.get("score") or 0.0)

        top = data.get("topScoringIntent") or {}
        top_intent = top.get("intent")
        if not top_intent and intents:
            top_intent = max(intents, key=intents.get)

        entities: list[Entity] = []
        for item in data.get("entities") or []:
            entity_type = item.get("type")
            if not entity_type:
                continue
            entities.append(Entity(type=entity_type, value=_entity_text(text, item)))

        return RecognizerResult(
            text=text,
            top_intent=top_intent or NONE_INTENT,
            entities=entities,
            intents=intents,
        )


def _entity_text(text: str, item: dict[str, Any]) -> str:
    """Original-cased span of the entity, falling back to LUIS's own value."""
    start, end = item.get("startIndex"), item.get("endIndex")
    if isinstance(start, int) and isinstance(end, int) and 0 <= start <= end < len(text):
        return text[start:end + 1]
    return str(item.get("entity", ""))
