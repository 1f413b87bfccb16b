"""Quiz controller dependencies for FastAPI."""
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query

from learncheck.services.controller_registry import ControllerRegistry
from learncheck.services.gateway import HttpQuizGateway
from learncheck.services.quiz_controller import QuizController
from learncheck.services.session_store import SessionStore
from learncheck.utils.validation import validate_id


@lru_cache
def get_registry() -> ControllerRegistry:
    """Process-wide controller registry backed by the HTTP gateway."""
    return ControllerRegistry(HttpQuizGateway(), SessionStore())


async def get_quiz_controller(
    userId: Annotated[str, Query()],
    tutorialId: Annotated[str, Query()],
    registry: Annotated[ControllerRegistry, Depends(get_registry)],
) -> QuizController:
    """Get the student's controller bound to the requested tutorial.

    A tutorial different from the one the controller was bound to is an
    identity change: the view state starts over.
    """
    user_id = validate_id("userId", userId)
    tutorial_id = validate_id("tutorialId", tutorialId)

    controller = registry.get(user_id)
    await controller.bind(user_id, tutorial_id)
    return controller
