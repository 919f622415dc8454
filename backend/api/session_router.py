"""API routes for quiz sessions (topic quizzes and level runs alike)."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.api.dependencies import get_controller
from backend.api.schemas import (
    AnswerRequest,
    AnswerResponse,
    QuestionResponse,
    SessionEndResponse,
    SessionStartRequest,
    SessionStartResponse,
    SessionStatsResponse,
)
from backend.srs.scheduling import is_due
from backend.srs.session import SessionController, SessionState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/session", tags=["session"])


def _require_active(controller: SessionController) -> None:
    if controller.state is SessionState.IDLE:
        raise HTTPException(status_code=404, detail="No active session")
    if controller.state is SessionState.COMPLETE:
        raise HTTPException(status_code=410, detail="Session is complete")


@router.post("/start", response_model=SessionStartResponse)
async def session_start(
    request: SessionStartRequest,
    controller: SessionController = Depends(get_controller),
) -> SessionStartResponse:
    """Start a new quiz session, replacing any session in progress."""
    queue = controller.start_session(request.topic, request.size)
    if queue is None:
        raise HTTPException(status_code=503, detail="Vocabulary is still loading, try again")
    if queue.total == 0:
        raise HTTPException(status_code=404, detail="No items available for this topic")

    due = sum(1 for q in queue.questions if q.stats is not None and is_due(q.stats))
    return SessionStartResponse(
        topic=request.topic,
        total_questions=queue.total,
        due_questions=due,
    )


@router.get("/current", response_model=QuestionResponse)
async def session_current(
    controller: SessionController = Depends(get_controller),
) -> QuestionResponse:
    """Get the question awaiting an answer."""
    _require_active(controller)
    question = controller.current_item()
    progress = controller.session_progress()
    return QuestionResponse(
        id=question.id,
        kind=question.kind.value,
        topic=question.topic,
        level=question.level.value,
        prompt_native=question.prompt_native,
        prompt_target=question.prompt_target,
        options=question.options,
        tts_prompt=question.tts_prompt,
        index=progress.current,
        total=progress.total,
        remaining=progress.total - progress.current,
    )


@router.post("/answer", response_model=AnswerResponse)
async def session_answer(
    request: AnswerRequest,
    controller: SessionController = Depends(get_controller),
) -> AnswerResponse:
    """Submit an answer for the current question."""
    _require_active(controller)
    question = controller.answer(request.item_id, request.is_correct, request.latency_ms)
    if question is None:
        raise HTTPException(status_code=409, detail="Answer does not match the current question")

    stats = controller.stats_table.get(question.item_id) if question.item_id else None
    progress = controller.session_progress()
    return AnswerResponse(
        correct_answer=question.answer,
        tts_on_correct=question.tts_on_correct,
        next_due=stats.due_at if stats else None,
        interval_days=stats.interval_days if stats else None,
        xp=controller.progress.xp,
        player_level=controller.progress.level,
        streak=controller.progress.streak,
        remaining=progress.total - progress.current,
        session_complete=controller.state is SessionState.COMPLETE,
    )


@router.get("/stats", response_model=SessionStatsResponse)
async def session_stats(
    controller: SessionController = Depends(get_controller),
) -> SessionStatsResponse:
    """Get stats for the current session."""
    if controller.active is None:
        raise HTTPException(status_code=404, detail="No active session")

    s = controller.active.stats
    progress = controller.session_progress()
    return SessionStatsResponse(
        answered=s.answered,
        correct=s.correct,
        incorrect=s.incorrect,
        accuracy=controller.session_accuracy(),
        average_latency_ms=controller.session_average_latency(),
        current=progress.current,
        total=progress.total,
        percentage=progress.percentage,
        is_active=controller.is_session_active(),
    )


@router.post("/end", response_model=SessionEndResponse)
async def session_end(
    controller: SessionController = Depends(get_controller),
) -> SessionEndResponse:
    """End the current session. Ending when idle is not an error."""
    answered = controller.active.stats.answered if controller.active else 0
    correct = controller.active.stats.correct if controller.active else 0
    accuracy = controller.session_accuracy()
    controller.end_session()
    return SessionEndResponse(status="ended", answered=answered, correct=correct, accuracy=accuracy)
