import asyncio
import json

import pytest
import requests

from learncheck.models.quiz import HintRequest, Option
from learncheck.services.gateway import GatewayError, HttpQuizGateway

QUESTION = {
    "id": "q1",
    "question": "Which keyword defines a function?",
    "options": [
        {"id": "A", "text": "def", "is_correct": True},
        {"id": "B", "text": "func", "is_correct": False},
    ],
    "feedback": "Functions are defined with def.",
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, content=None):
        self.status_code = status_code
        if content is None:
            content = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return json.loads(self.content)


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.headers = {}
        self.calls = []
        self._responses = list(responses or [])
        self._error = error

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, timeout, kwargs))
        if self._error is not None:
            raise self._error
        return self._responses.pop(0)


def _gateway(session: FakeSession) -> HttpQuizGateway:
    return HttpQuizGateway(base_url="http://backend.test/", timeout=5, session=session)


def test_fetch_quiz_data_parses_payload() -> None:
    session = FakeSession(
        [
            FakeResponse(
                {
                    "questions": [QUESTION],
                    "metadata": {"moduleTitle": "Python Basics", "contextText": "Intro"},
                    "userPreferences": {"theme": "dark"},
                }
            )
        ]
    )

    data = asyncio.run(_gateway(session).fetch_quiz_data("t1", "u1"))

    assert [question.id for question in data.questions] == ["q1"]
    assert data.questions[0].correct_option_ids() == {"A"}
    assert data.metadata.moduleTitle == "Python Basics"
    assert data.userPreferences == {"theme": "dark"}
    assert session.calls == [
        ("GET", "http://backend.test/api/tutorials/t1/quiz", 5, {"params": {"userId": "u1"}})
    ]
    assert session.headers["Accept"] == "application/json"


def test_fetch_quiz_data_accepts_numeric_ids() -> None:
    question = dict(QUESTION, id=7, options=[{"id": 1, "text": "a", "is_correct": True}])
    session = FakeSession([FakeResponse({"questions": [question]})])

    data = asyncio.run(_gateway(session).fetch_quiz_data("t1", "u1"))

    assert data.questions[0].id == "7"
    assert data.questions[0].options[0].id == "1"
    assert data.metadata.moduleTitle is None
    assert data.userPreferences is None


def test_fetch_quiz_data_rejects_invalid_payload() -> None:
    session = FakeSession([FakeResponse({"questions": [{"options": "nope"}]})])

    with pytest.raises(GatewayError):
        asyncio.run(_gateway(session).fetch_quiz_data("t1", "u1"))


def test_http_error_becomes_gateway_error() -> None:
    session = FakeSession([FakeResponse({"detail": "boom"}, status_code=500)])

    with pytest.raises(GatewayError):
        asyncio.run(_gateway(session).fetch_quiz_data("t1", "u1"))


def test_connection_error_becomes_gateway_error() -> None:
    session = FakeSession(error=requests.ConnectionError("refused"))

    with pytest.raises(GatewayError):
        asyncio.run(_gateway(session).reset_all_questions("t1", "u1"))


def test_invalid_json_becomes_gateway_error() -> None:
    session = FakeSession([FakeResponse(content=b"<html>")])

    with pytest.raises(GatewayError):
        asyncio.run(_gateway(session).fetch_quiz_data("t1", "u1"))


def test_generate_hint_posts_request() -> None:
    session = FakeSession([FakeResponse({"hint": "Look at the keyword."})])
    request = HintRequest(
        tutorialId="t1",
        questionId="q1",
        questionText="Which keyword defines a function?",
        contextText="Intro",
        studentAnswerIds=["B"],
        options=[Option(id="A", text="def", is_correct=True), Option(id="B", text="func")],
    )

    hint = asyncio.run(_gateway(session).generate_hint(request))

    assert hint == "Look at the keyword."
    method, url, _, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://backend.test/api/hints")
    assert kwargs["json"]["studentAnswerIds"] == ["B"]
    assert kwargs["json"]["options"][0] == {"id": "A", "text": "def", "is_correct": True}


@pytest.mark.parametrize(
    "payload, expected",
    [("Plain hint", "Plain hint"), ({"hint": None}, ""), ({}, "")],
)
def test_generate_hint_payload_shapes(payload, expected) -> None:
    session = FakeSession([FakeResponse(payload)])
    request = HintRequest(tutorialId="t1", questionId="q1", questionText="?")

    assert asyncio.run(_gateway(session).generate_hint(request)) == expected


def test_generate_hint_rejects_unexpected_payload() -> None:
    session = FakeSession([FakeResponse(["not", "a", "hint"])])
    request = HintRequest(tutorialId="t1", questionId="q1", questionText="?")

    with pytest.raises(GatewayError):
        asyncio.run(_gateway(session).generate_hint(request))


def test_reset_single_question_returns_first_question() -> None:
    session = FakeSession([FakeResponse({"questions": [dict(QUESTION, id="new")]})])

    question = asyncio.run(_gateway(session).reset_single_question("t1", "u1", 2))

    assert question.id == "new"
    method, url, _, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://backend.test/api/tutorials/t1/questions/2/regenerate")
    assert kwargs == {"json": {"userId": "u1"}}


def test_reset_single_question_without_questions_fails() -> None:
    session = FakeSession([FakeResponse({"questions": []})])

    with pytest.raises(GatewayError):
        asyncio.run(_gateway(session).reset_single_question("t1", "u1", 0))


def test_reset_all_questions_accepts_empty_body() -> None:
    session = FakeSession([FakeResponse(status_code=204)])

    assert asyncio.run(_gateway(session).reset_all_questions("t1", "u1")) is None
    method, url, _, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://backend.test/api/tutorials/t1/reset")
    assert kwargs == {"json": {"userId": "u1"}}
