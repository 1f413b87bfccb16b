"""Answer checking and scoring rules. Pure functions, no I/O."""
import math
from collections.abc import Iterable
from dataclasses import dataclass

from learncheck.models.quiz import Question, QuizSession
from learncheck.models.view import OptionReview, OptionView


@dataclass(frozen=True)
class ScoreResult:
    score: int
    correct_count: int


def is_question_correct(question: Question, selected_option_ids: Iterable[str]) -> bool:
    """
    Check a submitted answer set.

    The answer is correct iff the selected ids are exactly the ids of
    the options marked correct. A question with no correct option is
    answered correctly only by an empty selection.
    """
    return set(selected_option_ids) == question.correct_option_ids()


def compute_score(session: QuizSession) -> ScoreResult:
    """
    Aggregate the verdicts stored at check time into a 0-100 score.
    Current answers are not re-evaluated.
    """
    total = session.total_questions
    correct_count = 0
    for question in session.questions:
        status = session.checkedStatus.get(question.id)
        if status is not None and status.isCorrect:
            correct_count += 1

    # Halves round up: 1 of 8 is 13
    score = math.floor(correct_count / total * 100 + 0.5) if total > 0 else 0
    return ScoreResult(score=score, correct_count=correct_count)


def review_options(
    question: Question,
    selected_option_ids: Iterable[str],
    submitted: bool,
) -> list[OptionView]:
    """Display state of each option, before and after submission."""
    selected = set(selected_option_ids)
    views = []
    for option in question.options:
        is_selected = option.id in selected
        if not submitted:
            state = OptionReview.SELECTED if is_selected else OptionReview.UNSELECTED
        elif option.is_correct:
            state = OptionReview.CORRECT
        elif is_selected:
            state = OptionReview.INCORRECT
        else:
            state = OptionReview.NEUTRAL
        views.append(OptionView(id=option.id, text=option.text, state=state))
    return views
