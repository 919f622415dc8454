"""API routes for named exercise levels."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.api.dependencies import get_controller
from backend.api.schemas import LevelResponse, SessionStartResponse
from backend.levels.types import LevelProgress
from backend.srs.session import SessionController
from backend.vocab.types import Topic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/levels", tags=["levels"])


@router.get("/topic/{topic}", response_model=list[LevelResponse])
async def list_levels(
    topic: Topic,
    controller: SessionController = Depends(get_controller),
) -> list[LevelResponse]:
    """List a topic's levels in unlock order."""
    responses = []
    for level in controller.get_levels_for_topic(topic):
        record = controller.level_progress.get(level.id) or LevelProgress()
        responses.append(
            LevelResponse(
                id=level.id,
                topic=level.topic,
                kind=level.kind.value,
                title=level.title,
                description=level.description,
                size=level.size,
                unlocked=controller.is_level_unlocked(level.id),
                completed=record.completed,
                accuracy=record.accuracy,
                attempts=record.attempts,
            )
        )
    return responses


@router.post("/{level_id}/start", response_model=SessionStartResponse)
async def start_level(
    level_id: str,
    controller: SessionController = Depends(get_controller),
) -> SessionStartResponse:
    """Start a level session; answer it through /api/session."""
    if level_id in controller.levels and not controller.is_level_unlocked(level_id):
        raise HTTPException(status_code=403, detail="Level is locked")

    queue = controller.start_level(level_id)
    if queue is None:
        status = 404 if level_id not in controller.levels else 409
        raise HTTPException(status_code=status, detail=controller.level_error)

    return SessionStartResponse(
        topic=controller.levels[level_id].topic,
        level_id=level_id,
        total_questions=queue.total,
    )
