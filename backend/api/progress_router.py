"""API routes for player progress."""

import logging

from fastapi import APIRouter, Depends

from backend.api.dependencies import get_controller
from backend.api.schemas import ProgressResponse
from backend.srs.session import SessionController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/progress", tags=["progress"])


def _progress_response(controller: SessionController) -> ProgressResponse:
    p = controller.progress
    return ProgressResponse(
        xp=p.xp,
        player_level=p.level,
        next_level_xp=controller.get_next_level_xp(),
        streak=p.streak,
        topic_mastery=p.topic_mastery,
    )


@router.get("", response_model=ProgressResponse)
async def get_progress(
    controller: SessionController = Depends(get_controller),
) -> ProgressResponse:
    """Get XP, level, streak and per-topic mastery."""
    return _progress_response(controller)


@router.post("/reset", response_model=ProgressResponse)
async def reset_progress(
    controller: SessionController = Depends(get_controller),
) -> ProgressResponse:
    """Wipe all learning progress."""
    await controller.reset_progress()
    logger.info("Progress reset via API")
    return _progress_response(controller)
