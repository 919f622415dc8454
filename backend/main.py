"""FastAPI application entry point and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from backend.api.levels_router import router as levels_router
from backend.api.progress_router import router as progress_router
from backend.api.session_router import router as session_router
from backend.database import async_session, engine
from backend.models import Base
from backend.srs.session import SessionController
from backend.storage import SnapshotStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables, restore saved progress and load vocabulary; flush on shutdown."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    controller = SessionController(store=SnapshotStore(async_session))
    await controller.hydrate()
    controller.load_items()
    app.state.controller = controller
    logger.info("Quiz engine ready with %d vocab items", len(controller.items))
    yield
    await controller.flush()
    await engine.dispose()


app = FastAPI(
    title="Hebrew Quiz",
    description="Adaptive vocabulary quiz with spaced repetition",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://localhost:8081"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(session_router)
app.include_router(levels_router)
app.include_router(progress_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Check database connectivity and return status."""
    async with async_session() as session:
        await session.execute(text("SELECT 1"))
    return {"status": "ok"}
