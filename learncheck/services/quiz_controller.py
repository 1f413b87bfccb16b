"""
Quiz session controller.

Owns the persisted quiz session of one student plus the transient view
state, and is the only writer of the session store. Every action that
awaits anything runs behind a single busy gate: while an action is in
flight, all other mutating actions return False without effect.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from learncheck import config
from learncheck.models.quiz import CheckedStatus, HintRequest, Question, QuizSession
from learncheck.models.view import (
    QuestionProgress,
    QuizResults,
    QuizSnapshot,
    Screen,
    ViewState,
)
from learncheck.services.gateway import QuizGateway
from learncheck.services.quiz_logic import compute_score, is_question_correct, review_options
from learncheck.services.session_store import SessionKey, SessionStore

logger = logging.getLogger(__name__)

LOAD_FAILED_NOTICE = "Failed to load the quiz."
REGENERATE_FAILED_NOTICE = "Failed to fetch a new question."
RESET_FAILED_NOTICE = "Failed to reset the questions."


def _seconds(ms: int) -> float:
    return ms / 1000


@dataclass(frozen=True)
class PacingDelays:
    """Minimum time, in seconds, the busy gate stays closed per action kind."""

    load: float = _seconds(config.LOAD_DELAY_MS)
    navigation: float = _seconds(config.NAVIGATION_DELAY_MS)
    check: float = _seconds(config.CHECK_DELAY_MS)
    start: float = _seconds(config.START_DELAY_MS)
    regenerate: float = _seconds(config.REGENERATE_DELAY_MS)
    reset: float = _seconds(config.RESET_DELAY_MS)
    score: float = _seconds(config.SCORE_DELAY_MS)

    @classmethod
    def none(cls) -> PacingDelays:
        return cls(0, 0, 0, 0, 0, 0, 0)


class QuizController:
    def __init__(
        self,
        gateway: QuizGateway,
        store: SessionStore,
        pacing: PacingDelays | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._gateway = gateway
        self._store = store
        self._pacing = pacing or PacingDelays()
        self._sleep = sleep

        self._key: SessionKey | None = None
        # Bumped on every identity change; responses tagged with an older
        # generation are discarded.
        self._generation = 0
        self._session: QuizSession | None = None
        self._view = ViewState()
        self._busy = False

    @property
    def key(self) -> SessionKey | None:
        return self._key

    @property
    def is_busy(self) -> bool:
        return self._busy

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def bind(self, user_id: str, tutorial_id: str) -> None:
        """
        Attach the controller to a (user, tutorial) identity.

        A new identity resets the view state and adopts the stored
        session if there is a usable one; otherwise a fresh load runs.
        """
        key = SessionKey(user_id=user_id, tutorial_id=tutorial_id)
        if key != self._key:
            self._switch_identity(key)
        if self._session is None:
            await self.load()

    def _switch_identity(self, key: SessionKey) -> None:
        self._key = key
        self._generation += 1
        self._view = ViewState()
        try:
            stored = self._store.read(key)
        except SQLAlchemyError:
            logger.exception("Failed to read stored quiz session for %s", key)
            stored = None
        if stored is not None and stored.questions:
            self._session = stored
            self._view.preferences = dict(stored.userPreferences)
            logger.info("Restored stored quiz session for %s", key)
        else:
            self._session = None

    def _is_current(self, generation: int, session: QuizSession | None = None) -> bool:
        if generation != self._generation:
            return False
        return session is None or self._session is session

    # ------------------------------------------------------------------
    # Busy gate and persistence
    # ------------------------------------------------------------------

    async def _run_gated(
        self, handler: Callable[[], Awaitable[None]], delay: float
    ) -> bool:
        if self._busy:
            return False
        self._busy = True
        self._view.notice = None
        try:
            await handler()
        except Exception:
            logger.exception("Quiz action failed for %s", self._key)
        finally:
            await self._sleep(delay)
            self._busy = False
        return True

    def _persist(self) -> None:
        if self._key is None or self._session is None:
            return
        try:
            self._store.write(self._key, self._session)
        except SQLAlchemyError:
            logger.exception("Failed to persist quiz session for %s", self._key)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def _total_questions(self) -> int:
        return self._session.total_questions if self._session else 0

    def _current_question(self) -> Question | None:
        if self._session is None:
            return None
        index = self._view.currentQuestionIndex
        if 0 <= index < self._session.total_questions:
            return self._session.questions[index]
        return None

    def _is_first_question(self) -> bool:
        return self._view.currentQuestionIndex == 0

    def _is_last_question(self) -> bool:
        return self._view.currentQuestionIndex == self._total_questions() - 1

    def _is_on_question_screen(self) -> bool:
        return (
            self._current_question() is not None
            and not self._view.isWelcomeScreen
            and not self._view.showResults
        )

    def can_view_score(self) -> bool:
        if not self._is_on_question_screen():
            return False
        question = self._current_question()
        return (
            self._is_last_question()
            and self._session.is_submitted(question.id)
            and self._session.is_all_questions_checked()
        )

    # ------------------------------------------------------------------
    # Load / start
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Fetch a fresh quiz and overwrite the session with it."""
        if self._busy or self._key is None:
            return False
        return await self._run_gated(self._load_quiz, self._pacing.load)

    async def _load_quiz(
        self, key: SessionKey | None = None, generation: int | None = None
    ) -> None:
        """Fetch and adopt a quiz for `key`, as issued under `generation`."""
        if key is None:
            key, generation = self._key, self._generation
        try:
            data = await self._gateway.fetch_quiz_data(key.tutorial_id, key.user_id)
        except Exception:
            logger.exception("Failed to load quiz for %s", key)
            if self._is_current(generation):
                self._view.notice = LOAD_FAILED_NOTICE
            return

        if not self._is_current(generation):
            logger.info("Discarding quiz data fetched for previous identity %s", key)
            return
        if not data.questions:
            logger.error("Quiz for %s has no questions", key)
            self._view.notice = LOAD_FAILED_NOTICE
            return

        preferences = dict(data.userPreferences or {})
        self._session = QuizSession(
            userId=key.user_id,
            tutorialId=key.tutorial_id,
            questions=data.questions,
            moduleTitle=data.metadata.moduleTitle or config.DEFAULT_MODULE_TITLE,
            contextText=data.metadata.contextText or "",
            userPreferences=preferences,
        )
        self._view = ViewState(preferences=preferences)
        self._persist()
        logger.info("Loaded %s questions for %s", len(data.questions), key)

    async def start_quiz(self) -> bool:
        if self._busy or self._key is None:
            return False
        return await self._run_gated(self._start_quiz, self._pacing.start)

    async def _start_quiz(self) -> None:
        generation = self._generation
        if self._total_questions() == 0:
            await self._load_quiz()
        if not self._is_current(generation) or self._total_questions() == 0:
            return
        self._view.isWelcomeScreen = False
        self._view.showResults = False
        self._view.currentQuestionIndex = 0

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    def select_answer(self, question_id: str, option_id: str) -> bool:
        """Toggle `option_id` in the answer set of an unsubmitted question."""
        if self._busy or self._session is None:
            return False
        found = self._session.find_question(question_id)
        if found is None:
            return False
        question, _ = found
        if option_id not in question.option_ids() or self._session.is_submitted(question_id):
            return False

        current = self._session.answers.get(question_id, [])
        if option_id in current:
            updated = [item for item in current if item != option_id]
        else:
            updated = [*current, option_id]

        # Absent and empty mean the same thing
        if updated:
            self._session.answers[question_id] = updated
        else:
            self._session.answers.pop(question_id, None)
        self._persist()
        return True

    async def check_answer(self) -> bool:
        question = self._current_question()
        if self._busy or not self._is_on_question_screen():
            return False
        if self._session.is_submitted(question.id):
            return False
        return await self._run_gated(self._check_answer, self._pacing.check)

    async def _check_answer(self) -> None:
        session, generation = self._session, self._generation
        question = self._current_question()
        selected = session.selected_options(question.id)
        is_correct = is_question_correct(question, selected)
        previous = session.checkedStatus.get(question.id)

        session.checkedStatus[question.id] = CheckedStatus(
            submitted=True,
            isCorrect=is_correct,
            attemptCount=(previous.attemptCount if previous else 0) + 1,
        )
        session.aiHints[question.id] = question.hint or None
        self._view.isHintVisible = False
        self._persist()

        if is_correct or question.hint:
            return
        await self._fetch_hint(session, generation, question, selected)

    async def _fetch_hint(
        self,
        session: QuizSession,
        generation: int,
        question: Question,
        selected: list[str],
    ) -> None:
        request = HintRequest(
            tutorialId=session.tutorialId,
            questionId=question.id,
            questionText=question.question,
            contextText=session.contextText,
            studentAnswerIds=selected,
            options=question.options,
        )
        try:
            hint = await self._gateway.generate_hint(request)
        except Exception:
            logger.warning("Hint generation failed for question %s", question.id, exc_info=True)
            return

        if not self._is_current(generation, session) or not session.is_submitted(question.id):
            logger.info("Discarding stale hint for question %s", question.id)
            return
        session.aiHints[question.id] = hint or config.HINT_UNAVAILABLE_TEXT
        self._persist()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def next(self) -> bool:
        if self._busy or not self._is_on_question_screen() or self._is_last_question():
            return False
        return await self._run_gated(lambda: self._move(1), self._pacing.navigation)

    async def prev(self) -> bool:
        if self._busy or not self._is_on_question_screen() or self._is_first_question():
            return False
        return await self._run_gated(lambda: self._move(-1), self._pacing.navigation)

    async def _move(self, step: int) -> None:
        target = self._view.currentQuestionIndex + step
        if 0 <= target < self._total_questions():
            self._view.currentQuestionIndex = target
            self._view.isHintVisible = False

    def toggle_hint(self) -> bool:
        if self._busy or self._session is None:
            return False
        self._view.isHintVisible = not self._view.isHintVisible
        return True

    # ------------------------------------------------------------------
    # Resets
    # ------------------------------------------------------------------

    async def reset_current_question(self) -> bool:
        """Replace the current question with a regenerated one."""
        if self._busy or not self._is_on_question_screen():
            return False
        return await self._run_gated(self._regenerate_current, self._pacing.regenerate)

    async def _regenerate_current(self) -> None:
        session, key, generation = self._session, self._key, self._generation
        index = self._view.currentQuestionIndex
        stale_id = session.questions[index].id

        replacement = None
        try:
            replacement = await self._gateway.reset_single_question(
                key.tutorial_id, key.user_id, index
            )
        except Exception:
            logger.exception("Failed to regenerate question %s for %s", index, key)

        if not self._is_current(generation, session):
            logger.info("Discarding regenerated question for previous identity %s", key)
            return

        if replacement is not None:
            session.questions[index] = replacement
        else:
            self._view.notice = REGENERATE_FAILED_NOTICE
        # The stale question is unlocked even when regeneration failed
        session.answers.pop(stale_id, None)
        session.checkedStatus.pop(stale_id, None)
        session.aiHints.pop(stale_id, None)
        self._view.isHintVisible = False
        self._persist()

    async def reset_all(self) -> bool:
        """Regenerate every question on the backend and start over."""
        if self._busy or self._key is None:
            return False
        return await self._run_gated(self._reset_all, self._pacing.reset)

    async def _reset_all(self) -> None:
        key, generation = self._key, self._generation
        theme = self._view.preferences.get("theme")

        notice = None
        try:
            await self._gateway.reset_all_questions(key.tutorial_id, key.user_id)
        except Exception:
            logger.exception("Failed to reset questions for %s", key)
            notice = RESET_FAILED_NOTICE
        else:
            if not self._is_current(generation):
                logger.info("Skipping reload after reset for previous identity %s", key)
                return
            await self._load_quiz(key, generation)
            notice = self._view.notice

        if not self._is_current(generation):
            return
        self._view = ViewState(
            notice=notice,
            preferences={"theme": theme} if theme is not None else {},
        )

    def clear_session(self) -> bool:
        """Delete the stored session of the current identity."""
        if self._busy or self._key is None:
            return False
        self._store.clear(self._key)
        self._session = None
        self._view = ViewState()
        logger.info("Cleared stored quiz session for %s", self._key)
        return True

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    async def view_score(self) -> bool:
        if self._busy or not self.can_view_score():
            return False
        return await self._run_gated(self._finalize_score, self._pacing.score)

    async def _finalize_score(self) -> None:
        result = compute_score(self._session)
        self._session.isCompleted = True
        self._session.score = result.score
        self._session.correctCount = result.correct_count
        self._view.showResults = True
        self._view.isHintVisible = False
        self._persist()

    def exit_to_first_question(self) -> bool:
        if self._busy or not self._view.showResults:
            return False
        self._view.currentQuestionIndex = 0
        self._view.showResults = False
        self._view.isWelcomeScreen = False
        self._view.isHintVisible = False
        return True

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def _screen(self) -> Screen:
        if self._busy or self._total_questions() == 0:
            return Screen.LOADING
        if self._view.showResults:
            return Screen.RESULTS
        if self._view.isWelcomeScreen:
            return Screen.WELCOME
        return Screen.IN_PROGRESS

    def _progress(self) -> QuestionProgress | None:
        question = self._current_question()
        if question is None:
            return None
        session = self._session
        index = self._view.currentQuestionIndex
        selected = session.selected_options(question.id)
        status = session.checkedStatus.get(question.id)
        submitted = bool(status and status.submitted)
        is_correct = bool(status and status.isCorrect)

        return QuestionProgress(
            question=question.model_copy(deep=True),
            questionNumber=index + 1,
            totalQuestions=session.total_questions,
            selectedOptionIds=selected,
            options=review_options(question, selected, submitted),
            isSubmitted=submitted,
            isCorrect=is_correct,
            isAnswered=bool(selected),
            isFirstQuestion=self._is_first_question(),
            isLastQuestion=self._is_last_question(),
            isAllQuestionsChecked=session.is_all_questions_checked(),
            canViewScore=self.can_view_score(),
            preHint=question.pre_hint if self._view.isHintVisible else None,
            feedback=question.feedback if submitted else None,
            aiHint=session.aiHints.get(question.id) if submitted and not is_correct else None,
        )

    def _results(self) -> QuizResults | None:
        if not self._view.showResults or self._session is None:
            return None
        return QuizResults(
            correct=self._session.correctCount,
            total=self._session.total_questions,
            score=self._session.score,
        )

    def snapshot(self) -> QuizSnapshot:
        """Immutable copy of the current session and view state."""
        return QuizSnapshot(
            userId=self._key.user_id if self._key else None,
            tutorialId=self._key.tutorial_id if self._key else None,
            screen=self._screen(),
            isBusy=self._busy,
            viewState=self._view.model_copy(deep=True),
            session=self._session.model_copy(deep=True) if self._session else None,
            progress=self._progress(),
            results=self._results(),
        )
