"""FastAPI dependencies."""
from learncheck.dependencies.quiz import get_quiz_controller, get_registry

__all__ = ["get_quiz_controller", "get_registry"]
