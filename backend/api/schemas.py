"""Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from backend.config import settings
from backend.vocab.types import Topic

# --- Session ---


class SessionStartRequest(BaseModel):
    """Request to start a topic quiz; no topic means all topics."""

    topic: Topic | None = None
    size: int = Field(default=settings.default_session_size, ge=1, le=100)


class SessionStartResponse(BaseModel):
    """Response when starting a new quiz session."""

    topic: Topic | None
    level_id: str | None = None
    total_questions: int
    due_questions: int | None = None  # None for level sessions, which ignore due dates


class QuestionResponse(BaseModel):
    """The question currently awaiting an answer."""

    id: str
    kind: str  # flashcard, reverse, fill_blank, arithmetic
    topic: Topic
    level: str
    prompt_native: str
    prompt_target: str
    options: list[str]
    tts_prompt: str
    index: int
    total: int
    remaining: int


class AnswerRequest(BaseModel):
    """Request to submit an answer for the current question."""

    item_id: str
    is_correct: bool
    latency_ms: int = Field(ge=0)


class AnswerResponse(BaseModel):
    """Response after submitting an answer with feedback and scheduling info."""

    correct_answer: str
    tts_on_correct: str
    next_due: datetime | None = None  # None for questions without a vocab item
    interval_days: int | None = None
    xp: int
    player_level: int
    streak: int
    remaining: int
    session_complete: bool


class SessionStatsResponse(BaseModel):
    """Statistics for the current quiz session."""

    answered: int
    correct: int
    incorrect: int
    accuracy: int
    average_latency_ms: int
    current: int
    total: int
    percentage: int
    is_active: bool


class SessionEndResponse(BaseModel):
    status: str
    answered: int
    correct: int
    accuracy: int


# --- Levels ---


class LevelResponse(BaseModel):
    """A level definition with the learner's record for it."""

    id: str
    topic: Topic
    kind: str
    title: str
    description: str
    size: int
    unlocked: bool
    completed: bool
    accuracy: int
    attempts: int


# --- Progress ---


class ProgressResponse(BaseModel):
    """Overall gamification state for the learner."""

    xp: int
    player_level: int
    next_level_xp: int
    streak: int
    topic_mastery: dict[Topic, int]
