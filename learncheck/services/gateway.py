"""Boundary to the remote quiz backend."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import requests
from pydantic import ValidationError

from learncheck.config import BACKEND_TIMEOUT_SECONDS, BACKEND_URL
from learncheck.models.quiz import HintRequest, Question, QuizData, RegeneratedQuestions

log = logging.getLogger(__name__)


class GatewayError(Exception):
    """A remote operation failed or returned an unusable payload."""


class QuizGateway(ABC):
    """The four remote operations the quiz controller depends on."""

    @abstractmethod
    async def fetch_quiz_data(self, tutorial_id: str, user_id: str) -> QuizData:
        """Fetch questions, tutorial metadata and user preferences."""

    @abstractmethod
    async def generate_hint(self, request: HintRequest) -> str:
        """Generate a hint for an incorrectly answered question."""

    @abstractmethod
    async def reset_single_question(
        self, tutorial_id: str, user_id: str, question_index: int
    ) -> Question:
        """Regenerate the question at `question_index`."""

    @abstractmethod
    async def reset_all_questions(self, tutorial_id: str, user_id: str) -> None:
        """Regenerate every question of the tutorial on the backend."""


class HttpQuizGateway(QuizGateway):
    """
    JSON-over-HTTP gateway.
    requests is blocking, so each call runs in a worker thread.
    """

    def __init__(
        self,
        base_url: str = BACKEND_URL,
        timeout: float = BACKEND_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._session.request(
                method, self._url(path), timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise GatewayError(f"{method} {path} failed: {exc}") from exc
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"{method} {path} returned invalid JSON") from exc

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    async def fetch_quiz_data(self, tutorial_id: str, user_id: str) -> QuizData:
        payload = await self._call(
            "GET", f"/api/tutorials/{tutorial_id}/quiz", params={"userId": user_id}
        )
        try:
            data = QuizData.model_validate(payload)
        except ValidationError as exc:
            raise GatewayError(f"Invalid quiz payload for {tutorial_id}: {exc}") from exc
        log.debug("Fetched %s questions for tutorial %s", len(data.questions), tutorial_id)
        return data

    async def generate_hint(self, request: HintRequest) -> str:
        payload = await self._call("POST", "/api/hints", json=request.model_dump(mode="json"))
        if isinstance(payload, str):
            return payload
        if isinstance(payload, dict):
            hint = payload.get("hint")
            if hint is None or isinstance(hint, str):
                return hint or ""
        raise GatewayError("Invalid hint payload")

    async def reset_single_question(
        self, tutorial_id: str, user_id: str, question_index: int
    ) -> Question:
        payload = await self._call(
            "POST",
            f"/api/tutorials/{tutorial_id}/questions/{question_index}/regenerate",
            json={"userId": user_id},
        )
        try:
            data = RegeneratedQuestions.model_validate(payload)
        except ValidationError as exc:
            raise GatewayError(f"Invalid regenerate payload: {exc}") from exc
        if not data.questions:
            raise GatewayError("Regenerate returned no question")
        return data.questions[0]

    async def reset_all_questions(self, tutorial_id: str, user_id: str) -> None:
        await self._call(
            "POST", f"/api/tutorials/{tutorial_id}/reset", json={"userId": user_id}
        )
