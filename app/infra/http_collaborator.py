# app/infra/http_collaborator.py
"""
Shared retry policy for the HTTP collaborators (LUIS, QnA Maker).

- Strict per-request timeouts (httpx).
- Transient failures retried with linear backoff.
- 401/403 are configuration errors: never retried.
- When every attempt fails, :class:`CollaboratorError` is raised; the turn
  is aborted without saving state.
"""
from __future__ import annotations

import asyncio
from abc import ABC
from typing import Awaitable, Callable, TypeVar

import httpx

from app.core.engine.errors import CollaboratorError
from app.infra.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_NON_RETRYABLE_STATUS = (400, 401, 403, 404)


class HttpCollaborator(ABC):
    """Base for collaborators reached over HTTP."""

    name: str = "collaborator"

    def __init__(
        self,
        timeout: int = 10,
        retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._retries = retries
        self._transport = transport  # injected in tests (httpx.MockTransport)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    @staticmethod
    def _backoff(attempt: int) -> float:
        return (attempt + 1) * 2

    async def _with_retries(self, call: Callable[[], Awaitable[T]]) -> T:
        last_error: Exception | None = None
        attempts = 0
        for attempt in range(self._retries + 1):
            attempts = attempt + 1
            try:
                return await call()
            except httpx.HTTPStatusError as exc:
                last_error = exc
                status = exc.response.status_code
                if status in _NON_RETRYABLE_STATUS:
                    logger.error("%s request rejected (HTTP %d), not retrying", self.name, status)
                    break
                if attempt < self._retries:
                    wait = self._backoff(attempt)
                    logger.warning(
                        "%s attempt %d/%d failed (HTTP %d), retrying in %ds",
                        self.name, attempt + 1, self._retries + 1, status, wait,
                    )
                    await asyncio.sleep(wait)
            except (httpx.HTTPError, ValueError, KeyError) as exc:
                last_error = exc
                if attempt < self._retries:
                    wait = self._backoff(attempt)
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %ds",
                        self.name, attempt + 1, self._retries + 1, type(exc).__name__, wait,
                    )
                    await asyncio.sleep(wait)

        logger.error(
            "%s failed after %d attempt(s): %s",
            self.name, attempts, type(last_error).__name__,
        )
        raise CollaboratorError(self.name, f"{type(last_error).__name__}: {last_error}")
