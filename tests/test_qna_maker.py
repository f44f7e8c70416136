# tests/test_qna_maker.py
"""Tests for the QnA Maker knowledge base adapter"""
import json

import httpx
import pytest

from app.core.engine.domain import KbAnswer
from app.core.engine.errors import CollaboratorError
from app.infra.http_collaborator import HttpCollaborator
from app.infra.qna_maker import QnAMakerKnowledgeBase


@pytest.fixture(autouse=True)
def _no_backoff(monkeypatch):
    monkeypatch.setattr(HttpCollaborator, "_backoff", staticmethod(lambda attempt: 0))


def _kb(handler, **kwargs):
    return QnAMakerKnowledgeBase(
        knowledge_base_id="kb-42",
        endpoint_key="endpoint-secret",
        host="https://campus-qna.azurewebsites.net/qnamaker/",
        name="event_history",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestParseResponse:
    def test_sorted_best_first(self):
        data = {"answers": [
            {"id": 3, "answer": "In 1950.", "score": 55.0},
            {"id": 7, "answer": "The chapel was built in 1948.", "score": 91.2},
        ]}
        answers = QnAMakerKnowledgeBase.parse_response(data)
        assert [a.answer for a in answers] == ["The chapel was built in 1948.", "In 1950."]
        assert answers[0].confidence == pytest.approx(0.912)

    def test_no_match_placeholder_is_no_answer(self):
        data = {"answers": [{"id": -1, "answer": "No good match found in KB.", "score": 0.0}]}
        assert QnAMakerKnowledgeBase.parse_response(data) == []

    def test_low_scores_dropped(self):
        data = {"answers": [{"id": 1, "answer": "Maybe.", "score": 12.0}]}
        assert QnAMakerKnowledgeBase.parse_response(data) == []
        assert QnAMakerKnowledgeBase.parse_response(data, score_threshold=0.1) == [KbAnswer("Maybe.", 0.12)]

    def test_empty_payload(self):
        assert QnAMakerKnowledgeBase.parse_response({}) == []


class TestQuery:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"answers": [{"id": 1, "answer": "Hello!", "score": 80}]})

        answers = await _kb(handler).query("hi")

        assert answers == [KbAnswer("Hello!", 0.8)]
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://campus-qna.azurewebsites.net/qnamaker/knowledgebases/kb-42/generateAnswer"
        assert request.headers["Authorization"] == "EndpointKey endpoint-secret"
        assert json.loads(request.content) == {"question": "hi", "top": 1}

    @pytest.mark.asyncio
    async def test_blank_question_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert await _kb(handler).query("") == []

    @pytest.mark.asyncio
    async def test_failure_names_knowledge_base(self):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(CollaboratorError) as exc_info:
            await _kb(handler, retries=1).query("when was the chapel built?")

        assert exc_info.value.collaborator == "event_history"

    @pytest.mark.asyncio
    async def test_timeout_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={"answers": []})

        assert await _kb(handler).query("hi") == []
        assert len(calls) == 2
