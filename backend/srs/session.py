"""Quiz session controller.

Owns the per-item statistics table, player progress, level progress and the
active session queue, and coordinates the scheduling engine, queue builder,
level builder and gamification reducer around them.

A controller is in one of three states:

- IDLE: no session.
- ACTIVE: a topic or level session with questions left.
- COMPLETE: every question of the session has been answered.

Only one session is active at a time; starting another replaces it.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from backend.config import settings
from backend.levels.builder import LevelBuildError, build_level_session
from backend.levels.progress import is_level_unlocked, levels_for_topic, record_level_result
from backend.levels.registry import DEFAULT_LEVELS
from backend.levels.types import LevelDef, LevelProgress
from backend.srs.gamification import (
    PlayerProgress,
    award_experience,
    migrate_progress,
    xp_for_next_level,
)
from backend.srs.queue import SessionQueue, build_queue
from backend.srs.questions import Question
from backend.srs.scheduling import ItemStatistics, initial_stats_for, next_schedule
from backend.storage import SnapshotStore, SnapshotWriter
from backend.vocab.repo import VocabLoadError, filter_by_topic, load_vocab
from backend.vocab.types import Topic, VocabItem

logger = logging.getLogger(__name__)

STATS_KEY = "session-stats"
PROGRESS_KEY = "session-progress"
LEVEL_PROGRESS_KEY = "level-progress"
LEVEL_QUEUE_KEY = "level-queue"
ALL_KEYS = (STATS_KEY, PROGRESS_KEY, LEVEL_PROGRESS_KEY, LEVEL_QUEUE_KEY)


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETE = "complete"


@dataclass
class SessionStats:
    """Running statistics for the current session."""

    answered: int = 0
    correct: int = 0
    incorrect: int = 0
    total_latency_ms: int = 0
    average_latency_ms: float = 0.0

    def record(self, is_correct: bool, latency_ms: int) -> None:
        self.answered += 1
        if is_correct:
            self.correct += 1
        else:
            self.incorrect += 1
        self.total_latency_ms += latency_ms
        self.average_latency_ms = self.total_latency_ms / self.answered


@dataclass
class ActiveSession:
    """The queue being played plus its running stats.

    ``level_id`` is set for level sessions and None for topic quizzes.
    """

    queue: SessionQueue
    stats: SessionStats = field(default_factory=SessionStats)
    level_id: str | None = None


@dataclass
class SessionProgress:
    current: int
    total: int
    percentage: int


_stats_adapter = TypeAdapter(dict[str, ItemStatistics])
_progress_adapter = TypeAdapter(PlayerProgress)
_level_progress_adapter = TypeAdapter(dict[str, LevelProgress])
_level_session_adapter = TypeAdapter(ActiveSession | None)


class SessionController:
    """Stateful orchestrator behind the quiz screens, the API and the CLI."""

    def __init__(
        self,
        store: SnapshotStore | None = None,
        items: Sequence[VocabItem] | None = None,
        levels: Iterable[LevelDef] | None = None,
        vocab_path: Path | None = None,
        debounce_seconds: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.items: list[VocabItem] = list(items or [])
        self.stats_table: dict[str, ItemStatistics] = {}
        self.progress = PlayerProgress()
        self.levels: dict[str, LevelDef] = {}
        self.level_progress: dict[str, LevelProgress] = {}
        self.active: ActiveSession | None = None
        self.level_error: str | None = None

        self._store = store
        self._writer = SnapshotWriter(store, debounce_seconds) if store else None
        self._vocab_path = vocab_path
        self._rng = rng

        self.register_levels(DEFAULT_LEVELS if levels is None else levels)

    # --- Loading and persistence ---

    def load_items(self) -> None:
        """Load the vocabulary pool; on failure the pool stays empty."""
        try:
            self.items = load_vocab(self._vocab_path)
        except VocabLoadError:
            logger.exception("Failed to load vocab items")
            self.items = []

    async def hydrate(self) -> None:
        """Restore state from stored snapshots, keeping defaults for anything missing."""
        if self._store is None:
            return

        stats = await self._load(STATS_KEY, _stats_adapter)
        if stats is not None:
            self.stats_table = stats

        progress = await self._load(PROGRESS_KEY, _progress_adapter)
        if progress is not None:
            self.progress = migrate_progress(progress)

        level_progress = await self._load(LEVEL_PROGRESS_KEY, _level_progress_adapter)
        if level_progress is not None:
            self.level_progress = level_progress

        level_session = await self._load(LEVEL_QUEUE_KEY, _level_session_adapter)
        if level_session is not None and level_session.level_id in self.levels:
            self.active = level_session

        logger.info(
            "Hydrated: %d item stats, player level %d, %d level records",
            len(self.stats_table),
            self.progress.level,
            len(self.level_progress),
        )

    async def _load(self, key: str, adapter: TypeAdapter) -> Any | None:
        raw = await self._store.get(key)  # type: ignore[union-attr]
        if raw is None:
            return None
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            logger.warning("Discarding %s snapshot: %d validation error(s)", key, e.error_count())
            return None

    async def flush(self) -> None:
        """Write any pending snapshots immediately."""
        if self._writer is not None:
            await self._writer.flush()

    async def reset_progress(self) -> None:
        """Wipe statistics, progress and level records, in memory and in storage."""
        self.end_session()
        self.stats_table = {}
        self.progress = PlayerProgress()
        self.level_progress = {}
        if self._writer is not None:
            await self._writer.discard()
        if self._store is not None:
            await self._store.remove(*ALL_KEYS)
        logger.info("Progress reset")

    def _save_stats(self) -> None:
        if self._writer is not None:
            self._writer.schedule(
                STATS_KEY, lambda: _stats_adapter.dump_python(self.stats_table, mode="json")
            )

    def _save_progress(self) -> None:
        if self._writer is not None:
            self._writer.schedule(
                PROGRESS_KEY, lambda: _progress_adapter.dump_python(self.progress, mode="json")
            )

    def _save_level_progress(self) -> None:
        if self._writer is not None:
            self._writer.schedule(
                LEVEL_PROGRESS_KEY,
                lambda: _level_progress_adapter.dump_python(self.level_progress, mode="json"),
            )

    def _save_level_session(self) -> None:
        if self._writer is not None:
            self._writer.schedule(
                LEVEL_QUEUE_KEY,
                lambda: _level_session_adapter.dump_python(
                    self.active if self.active and self.active.level_id else None, mode="json"
                ),
            )

    # --- Sessions ---

    @property
    def state(self) -> SessionState:
        if self.active is None:
            return SessionState.IDLE
        return SessionState.COMPLETE if self.active.queue.is_complete else SessionState.ACTIVE

    @property
    def session_queue(self) -> SessionQueue | None:
        """The topic-quiz queue, if a topic session is running."""
        if self.active is None or self.active.level_id is not None:
            return None
        return self.active.queue

    @property
    def level_queue(self) -> SessionQueue | None:
        """The level queue, if a level session is running."""
        if self.active is None or self.active.level_id is None:
            return None
        return self.active.queue

    def start_session(self, topic: Topic | str | None = None, size: int | None = None) -> SessionQueue | None:
        """Start a topic quiz (or a quiz over every topic).

        With no vocabulary loaded this triggers a load and returns None;
        the caller should treat that as "still loading".
        """
        size = settings.default_session_size if size is None else size
        if not self.items:
            logger.warning("No items loaded, loading now...")
            self.load_items()
            return None

        replaced_level = self.level_queue is not None
        pool = filter_by_topic(self.items, topic)
        queue = build_queue(pool, self.stats_table, size, answer_pool=self.items, rng=self._rng)
        self.active = ActiveSession(queue=queue)
        self.level_error = None
        if replaced_level:
            self._save_level_session()

        logger.info(
            "Started session (topic=%s): %d questions queued",
            topic.value if isinstance(topic, Topic) else topic or "all",
            queue.total,
        )
        return queue

    def start_level(self, level_id: str) -> SessionQueue | None:
        """Start a level session; failures are reported through ``level_error``."""
        level = self.levels.get(level_id)
        if level is None:
            logger.warning("Cannot start unknown level %r", level_id)
            self._drop_active()
            self.level_error = "Level not found"
            return None

        if not self.items:
            self.load_items()

        try:
            queue = build_level_session(level, self.items, rng=self._rng)
        except LevelBuildError as e:
            logger.warning("Failed to build level %s: %s", level_id, e)
            self._drop_active()
            self.level_error = str(e)
            return None

        self.active = ActiveSession(queue=queue, level_id=level_id)
        self.level_error = None
        self._save_level_session()
        return queue

    def current_item(self) -> Question | None:
        """The question awaiting an answer, or None when idle or complete."""
        return self.active.queue.current() if self.active else None

    def answer(self, item_id: str, is_correct: bool, latency_ms: int) -> Question | None:
        """Record an answer to the current question and advance by one.

        Answers that don't match the current question (no session, session
        complete, or a re-submission after advancing) are logged and ignored.

        Returns:
            The answered question, or None if the answer was ignored.
        """
        question = self.current_item()
        if question is None or question.id != item_id:
            logger.warning(
                "Ignoring answer for %r: current question is %r",
                item_id,
                question.id if question else None,
            )
            return None

        if question.item is not None:
            prev = self.stats_table.get(question.item.id) or initial_stats_for(question.item.id)
            self.stats_table[question.item.id] = next_schedule(prev, is_correct, latency_ms)
            self._save_stats()

        self.active.stats.record(is_correct, latency_ms)  # type: ignore[union-attr]
        self.active.queue.advance()  # type: ignore[union-attr]
        self.award_xp(is_correct, latency_ms, question.topic, question.item_id)

        if self.active.level_id is not None:  # type: ignore[union-attr]
            self._save_level_session()
        return question

    def advance_level(self) -> None:
        """Skip the current level question without answering it."""
        queue = self.level_queue
        if queue is not None and not queue.is_complete:
            queue.advance()
            self._save_level_session()

    def award_xp(
        self,
        is_correct: bool,
        latency_ms: int,
        topic: Topic,
        item_id: str | None = None,
    ) -> PlayerProgress:
        """Apply XP, streak and topic mastery for one answer."""
        stats = self.stats_table.get(item_id) if item_id else None
        previous_level = self.progress.level
        self.progress = award_experience(
            self.progress,
            is_correct,
            latency_ms,
            topic,
            mastery=stats.rolling_accuracy if stats else None,
        )
        if self.progress.level > previous_level:
            logger.info("Level up: %d -> %d", previous_level, self.progress.level)
        self._save_progress()
        return self.progress

    def end_session(self) -> None:
        """Discard the active session. Safe to call when idle.

        A finished level session reports its accuracy before it is dropped.
        """
        active = self.active
        if active is not None and active.level_id is not None:
            if active.queue.is_complete and active.stats.answered > 0:
                self.mark_level_result(active.level_id, self.session_accuracy())
        self._drop_active()
        self.level_error = None

    def _drop_active(self) -> None:
        was_level = self.level_queue is not None
        self.active = None
        if was_level:
            self._save_level_session()

    # --- Levels ---

    def register_levels(self, levels: Iterable[LevelDef]) -> None:
        for level in levels:
            self.levels[level.id] = level

    def mark_level_result(self, level_id: str, accuracy: float) -> LevelProgress:
        result = record_level_result(self.level_progress.get(level_id), accuracy)
        self.level_progress[level_id] = result
        logger.info(
            "Level %s attempt %d: %.0f%% (completed=%s)",
            level_id,
            result.attempts,
            accuracy,
            result.completed,
        )
        self._save_level_progress()
        return result

    def get_levels_for_topic(self, topic: Topic | str) -> list[LevelDef]:
        return levels_for_topic(self.levels, topic)

    def is_level_unlocked(self, level_id: str) -> bool:
        return is_level_unlocked(level_id, self.levels, self.level_progress)

    # --- Read-only accessors ---

    def session_progress(self) -> SessionProgress:
        if self.active is None:
            return SessionProgress(current=0, total=0, percentage=0)
        queue = self.active.queue
        percentage = int(queue.current_index / queue.total * 100 + 0.5) if queue.total else 0
        return SessionProgress(current=queue.current_index, total=queue.total, percentage=percentage)

    def session_accuracy(self) -> int:
        """Percentage of this session's answers that were correct (0 before any)."""
        if self.active is None or self.active.stats.answered == 0:
            return 0
        return int(self.active.stats.correct / self.active.stats.answered * 100 + 0.5)

    def session_average_latency(self) -> int:
        if self.active is None or self.active.stats.answered == 0:
            return 0
        return int(self.active.stats.average_latency_ms + 0.5)

    def is_session_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def get_next_level_xp(self) -> int:
        return xp_for_next_level(self.progress.level)
