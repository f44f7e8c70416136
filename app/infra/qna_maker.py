# app/infra/qna_maker.py
"""
Knowledge base backed by a QnA Maker ``generateAnswer`` endpoint.

Two instances are used: FriendlyChat (small talk) and EventHistory
(university facts).  Scores are normalized to 0..1; candidates below the
threshold and the service's "no match" placeholder (``id == -1``) are
dropped, so an empty list always means "no answer".
"""
from __future__ import annotations

from typing import Any

import httpx

from app.core.engine.domain import KbAnswer
from app.infra.http_collaborator import HttpCollaborator
from app.infra.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SCORE_THRESHOLD = 0.3
NO_MATCH_ID = -1


class QnAMakerKnowledgeBase(HttpCollaborator):
    """KnowledgeBase implementation for one QnA Maker knowledge base."""

    def __init__(
        self,
        knowledge_base_id: str,
        endpoint_key: str,
        host: str,
        name: str = "qnamaker",
        top: int = 1,
        score_threshold: float = DEFAULT_SCORE_THRESHOLD,
        timeout: int = 10,
        retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout=timeout, retries=retries, transport=transport)
        self.name = name
        self._kb_id = knowledge_base_id
        self._endpoint_key = endpoint_key
        self._host = host.rstrip("/")
        self._top = top
        self._score_threshold = score_threshold

    @property
    def endpoint(self) -> str:
        return f"{self._host}/knowledgebases/{self._kb_id}/generateAnswer"

    async def query(self, text: str) -> list[KbAnswer]:
        if not text or not text.strip():
            return []

        data = await self._with_retries(lambda: self._call_api(text))
        answers = self.parse_response(data, self._score_threshold)
        logger.debug("%s returned %d answer(s)", self.name, len(answers))
        return answers

    async def _call_api(self, text: str) -> dict[str, Any]:
        async with self._client() as client:
            resp = await client.post(
                self.endpoint,
                headers={
                    "Authorization": f"EndpointKey {self._endpoint_key}",
                    "Content-Type": "application/json",
                },
                json={"question": text, "top": self._top},
            )
            resp.raise_for_status()
            return resp.json()

    @staticmethod
    def parse_response(data: dict[str, Any], score_threshold: float = DEFAULT_SCORE_THRESHOLD) -> list[KbAnswer]:
        """Map ``answers[]`` to KbAnswer, best first."""
        answers: list[KbAnswer] = []
        for item in data.get("answers") or []:
            if item.get("id") == NO_MATCH_ID:
                continue
            answer = item.get("answer")
            if not answer:
                continue
            confidence = float(item.get("score") or 0.0) / 100.0
            if confidence < score_threshold:
                continue
            answers.append(KbAnswer(answer=answer, confidence=confidence))

        answers.sort(key=lambda a: a.confidence, reverse=True)
        return answers
