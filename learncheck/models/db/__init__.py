"""Database models."""
from learncheck.models.db.quiz_session import QuizSessionRecord

__all__ = [
    "QuizSessionRecord",
]
