import pytest
from fastapi.testclient import TestClient

from fakes import FakeGateway
from learncheck.app import app
from learncheck.dependencies.quiz import get_registry
from learncheck.services.controller_registry import ControllerRegistry
from learncheck.services.quiz_controller import PacingDelays
from learncheck.services.session_store import SessionKey, SessionStore

IDENTITY = {"userId": "u1", "tutorialId": "t1"}


@pytest.fixture
def registry(gateway: FakeGateway, store: SessionStore) -> ControllerRegistry:
    return ControllerRegistry(gateway, store, pacing=PacingDelays.none())


@pytest.fixture
def client(registry: ControllerRegistry):
    app.dependency_overrides[get_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()


def _post(client: TestClient, path: str, **kwargs) -> dict:
    response = client.post(f"/api/quiz{path}", params=IDENTITY, **kwargs)
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_get_quiz_loads_welcome_snapshot(client: TestClient, gateway: FakeGateway) -> None:
    response = client.get("/api/quiz", params=IDENTITY)

    assert response.status_code == 200
    snapshot = response.json()
    assert snapshot["screen"] == "welcome"
    assert snapshot["userId"] == "u1"
    assert snapshot["session"]["moduleTitle"] == "Python Basics"
    assert len(snapshot["session"]["questions"]) == 3
    assert gateway.call_names() == ["fetch_quiz_data"]

    # A second request reuses the bound controller
    client.get("/api/quiz", params=IDENTITY)
    assert gateway.call_names() == ["fetch_quiz_data"]


@pytest.mark.parametrize(
    "params",
    [{"userId": "u1"}, {"tutorialId": "t1"}],
)
def test_missing_identity_is_rejected(client: TestClient, params: dict) -> None:
    assert client.get("/api/quiz", params=params).status_code == 422


@pytest.mark.parametrize(
    "params",
    [
        {"userId": "", "tutorialId": "t1"},
        {"userId": "u1", "tutorialId": "a/b"},
        {"userId": "u1", "tutorialId": "t" * 200},
    ],
)
def test_invalid_identity_is_rejected(client: TestClient, params: dict) -> None:
    assert client.get("/api/quiz", params=params).status_code == 400


def test_full_quiz_flow(client: TestClient, store: SessionStore) -> None:
    started = _post(client, "/start")
    assert started["applied"] is True
    assert started["snapshot"]["screen"] == "in_progress"
    assert started["snapshot"]["progress"]["questionNumber"] == 1

    for question_id, option_ids in (("q1", ["A"]), ("q2", ["A", "C"]), ("q3", ["Y"])):
        for option_id in option_ids:
            selected = _post(
                client, "/answers", json={"questionId": question_id, "optionId": option_id}
            )
            assert selected["applied"] is True
        checked = _post(client, "/check")
        assert checked["snapshot"]["progress"]["isSubmitted"] is True
        if question_id != "q3":
            assert _post(client, "/next")["applied"] is True

    assert _post(client, "/next")["applied"] is False

    scored = _post(client, "/score")
    assert scored["applied"] is True
    assert scored["snapshot"]["screen"] == "results"
    assert scored["snapshot"]["results"] == {"correct": 2, "total": 3, "score": 67}
    assert store.read(SessionKey("u1", "t1")).isCompleted is True

    exited = _post(client, "/exit")
    assert exited["snapshot"]["screen"] == "in_progress"
    assert exited["snapshot"]["viewState"]["currentQuestionIndex"] == 0


def test_incorrect_answer_shows_feedback_and_hint(
    client: TestClient, gateway: FakeGateway
) -> None:
    _post(client, "/start")
    _post(client, "/answers", json={"questionId": "q1", "optionId": "B"})

    progress = _post(client, "/check")["snapshot"]["progress"]

    assert progress["isCorrect"] is False
    assert progress["feedback"] == "Functions are defined with def."
    assert progress["aiHint"] == gateway.hint_text
    assert [option["state"] for option in progress["options"]] == ["correct", "incorrect"]


def test_toggle_hint_and_navigation(client: TestClient) -> None:
    _post(client, "/start")

    shown = _post(client, "/hint")["snapshot"]
    assert shown["viewState"]["isHintVisible"] is True
    assert shown["progress"]["preHint"] == "Think of the word 'define'."

    assert _post(client, "/prev")["applied"] is False
    moved = _post(client, "/next")["snapshot"]
    assert moved["viewState"]["currentQuestionIndex"] == 1
    assert moved["viewState"]["isHintVisible"] is False


def test_answer_with_unknown_ids_is_rejected(client: TestClient) -> None:
    _post(client, "/start")

    unknown_question = client.post(
        "/api/quiz/answers", params=IDENTITY, json={"questionId": "nope", "optionId": "A"}
    )
    unknown_option = client.post(
        "/api/quiz/answers", params=IDENTITY, json={"questionId": "q1", "optionId": "Z"}
    )

    assert unknown_question.status_code == 400
    assert unknown_option.status_code == 400


def test_answer_without_loaded_quiz_conflicts(
    client: TestClient, gateway: FakeGateway
) -> None:
    gateway.fail.add("fetch_quiz_data")

    response = client.post(
        "/api/quiz/answers", params=IDENTITY, json={"questionId": "q1", "optionId": "A"}
    )

    assert response.status_code == 409


def test_locked_answer_is_not_applied(client: TestClient) -> None:
    _post(client, "/start")
    _post(client, "/answers", json={"questionId": "q1", "optionId": "A"})
    _post(client, "/check")

    response = _post(client, "/answers", json={"questionId": "q1", "optionId": "B"})

    assert response["applied"] is False
    assert response["snapshot"]["session"]["answers"] == {"q1": ["A"]}


def test_score_rejected_before_all_questions_checked(client: TestClient) -> None:
    _post(client, "/start")

    response = _post(client, "/score")

    assert response["applied"] is False
    assert response["snapshot"]["screen"] == "in_progress"


def test_reset_endpoints(client: TestClient, gateway: FakeGateway) -> None:
    _post(client, "/start")
    _post(client, "/answers", json={"questionId": "q1", "optionId": "A"})
    _post(client, "/check")

    regenerated = _post(client, "/questions/current/reset")["snapshot"]
    assert regenerated["session"]["questions"][0]["id"] == "regen-0"
    assert regenerated["session"]["checkedStatus"] == {}

    reset = _post(client, "/reset")["snapshot"]
    assert reset["screen"] == "welcome"
    assert reset["viewState"]["preferences"] == {"theme": "dark"}
    assert gateway.call_names()[-2:] == ["reset_all_questions", "fetch_quiz_data"]


def test_load_failure_notice_is_reported(client: TestClient, gateway: FakeGateway) -> None:
    gateway.fail.add("fetch_quiz_data")

    snapshot = client.get("/api/quiz", params=IDENTITY).json()

    assert snapshot["screen"] == "loading"
    assert snapshot["session"] is None
    assert snapshot["viewState"]["notice"] == "Failed to load the quiz."

    gateway.fail.clear()
    reloaded = _post(client, "/load")
    assert reloaded["applied"] is True
    assert reloaded["snapshot"]["screen"] == "welcome"


def test_clear_session(client: TestClient, store: SessionStore) -> None:
    client.get("/api/quiz", params=IDENTITY)
    assert store.read(SessionKey("u1", "t1")) is not None

    response = client.delete("/api/quiz/session", params=IDENTITY)

    assert response.status_code == 200
    assert response.json()["applied"] is True
    assert store.read(SessionKey("u1", "t1")) is None


def test_switching_tutorial_starts_over(client: TestClient, registry: ControllerRegistry) -> None:
    _post(client, "/start")
    _post(client, "/next")

    snapshot = client.get("/api/quiz", params={"userId": "u1", "tutorialId": "t2"}).json()

    assert snapshot["tutorialId"] == "t2"
    assert snapshot["screen"] == "welcome"
    assert snapshot["viewState"]["currentQuestionIndex"] == 0
    assert len(registry) == 1


def test_check_before_start_is_not_applied(client: TestClient) -> None:
    client.get("/api/quiz", params=IDENTITY)

    response = _post(client, "/check")

    assert response["applied"] is False
    assert response["snapshot"]["screen"] == "welcome"
    assert response["snapshot"]["session"]["checkedStatus"] == {}
