"""Quiz session endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from learncheck.dependencies.quiz import get_quiz_controller
from learncheck.models import ActionResponse, AnswerSelection, QuizSnapshot
from learncheck.services.quiz_controller import QuizController

router = APIRouter(prefix="/api/quiz", tags=["quiz"])

Controller = Annotated[QuizController, Depends(get_quiz_controller)]


def _respond(controller: QuizController, applied: bool) -> ActionResponse:
    return ActionResponse(applied=applied, snapshot=controller.snapshot())


@router.get("", response_model=QuizSnapshot)
async def get_quiz(controller: Controller) -> QuizSnapshot:
    """Get the current quiz snapshot, loading the quiz if needed."""
    return controller.snapshot()


@router.post("/load", response_model=ActionResponse)
async def load_quiz(controller: Controller) -> ActionResponse:
    """Fetch the quiz again, replacing the current session."""
    return _respond(controller, await controller.load())


@router.post("/start", response_model=ActionResponse)
async def start_quiz(controller: Controller) -> ActionResponse:
    """Leave the welcome screen and show the first question."""
    return _respond(controller, await controller.start_quiz())


@router.post("/answers", response_model=ActionResponse)
async def select_answer(
    payload: AnswerSelection,
    controller: Controller,
) -> ActionResponse:
    """Toggle an option of a question."""
    session = controller.snapshot().session
    if session is None:
        raise HTTPException(status_code=409, detail="Quiz is not loaded")

    found = session.find_question(payload.questionId)
    if found is None:
        raise HTTPException(status_code=400, detail="Unknown questionId")
    question, _ = found
    if payload.optionId not in question.option_ids():
        raise HTTPException(status_code=400, detail="Unknown optionId")

    return _respond(
        controller, controller.select_answer(payload.questionId, payload.optionId)
    )


@router.post("/next", response_model=ActionResponse)
async def next_question(controller: Controller) -> ActionResponse:
    """Move to the next question."""
    return _respond(controller, await controller.next())


@router.post("/prev", response_model=ActionResponse)
async def previous_question(controller: Controller) -> ActionResponse:
    """Move to the previous question."""
    return _respond(controller, await controller.prev())


@router.post("/hint", response_model=ActionResponse)
async def toggle_hint(controller: Controller) -> ActionResponse:
    """Show or hide the pre-answer hint."""
    return _respond(controller, controller.toggle_hint())


@router.post("/check", response_model=ActionResponse)
async def check_answer(controller: Controller) -> ActionResponse:
    """Submit and lock the current question."""
    return _respond(controller, await controller.check_answer())


@router.post("/questions/current/reset", response_model=ActionResponse)
async def reset_current_question(controller: Controller) -> ActionResponse:
    """Regenerate the current question."""
    return _respond(controller, await controller.reset_current_question())


@router.post("/reset", response_model=ActionResponse)
async def reset_all(controller: Controller) -> ActionResponse:
    """Regenerate all questions and start over."""
    return _respond(controller, await controller.reset_all())


@router.post("/score", response_model=ActionResponse)
async def view_score(controller: Controller) -> ActionResponse:
    """Compute the final score and show the results."""
    return _respond(controller, await controller.view_score())


@router.post("/exit", response_model=ActionResponse)
async def exit_to_first_question(controller: Controller) -> ActionResponse:
    """Leave the results screen and go back to the first question."""
    return _respond(controller, controller.exit_to_first_question())


@router.delete("/session", response_model=ActionResponse)
async def clear_session(controller: Controller) -> ActionResponse:
    """Delete the stored session of this student and tutorial."""
    return _respond(controller, controller.clear_session())
