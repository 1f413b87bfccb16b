"""Pydantic models."""
from learncheck.models.quiz import (
    CheckedStatus,
    HintRequest,
    Option,
    Question,
    QuizData,
    QuizMetadata,
    QuizSession,
    RegeneratedQuestions,
)
from learncheck.models.view import (
    ActionResponse,
    AnswerSelection,
    OptionReview,
    OptionView,
    QuestionProgress,
    QuizResults,
    QuizSnapshot,
    Screen,
    ViewState,
)

__all__ = [
    "ActionResponse",
    "AnswerSelection",
    "CheckedStatus",
    "HintRequest",
    "Option",
    "OptionReview",
    "OptionView",
    "Question",
    "QuestionProgress",
    "QuizData",
    "QuizMetadata",
    "QuizResults",
    "QuizSession",
    "QuizSnapshot",
    "RegeneratedQuestions",
    "Screen",
    "ViewState",
]
