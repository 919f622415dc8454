"""Queue building for quiz sessions.

Handles due-first prioritization, topic balancing and the session size limit,
then turns the selected items into multiple-choice questions.
"""

import logging
import math
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from backend.config import utcnow
from backend.srs.questions import Question, build_flashcard_question
from backend.srs.scheduling import ItemStatistics, initial_stats_for, is_due
from backend.vocab.types import Topic, VocabItem

logger = logging.getLogger(__name__)


@dataclass
class SessionItem:
    """A pool item paired with its statistics at queue-build time."""

    item: VocabItem
    stats: ItemStatistics


@dataclass
class SessionQueue:
    """A fixed-order run of questions with a forward-only cursor."""

    questions: list[Question] = field(default_factory=list)
    current_index: int = 0
    size: int = 0

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.current_index)

    @property
    def is_complete(self) -> bool:
        return self.current_index >= self.total

    def current(self) -> Question | None:
        """Return the question at the cursor, or None once complete."""
        if self.current_index < self.total:
            return self.questions[self.current_index]
        return None

    def advance(self) -> None:
        """Move the cursor forward by one; it never passes the end."""
        self.current_index = min(self.current_index + 1, self.total)


def attach_stats(
    pool: Sequence[VocabItem],
    stats_table: Mapping[str, ItemStatistics],
    now: datetime,
) -> list[SessionItem]:
    """Pair each distinct pool item with its stored or fresh statistics."""
    unique = {item.id: item for item in pool}
    return [
        SessionItem(item=item, stats=stats_table.get(item_id) or initial_stats_for(item_id, now))
        for item_id, item in unique.items()
    ]


def select_balanced(
    session_items: list[SessionItem],
    target_size: int,
    now: datetime,
) -> list[SessionItem]:
    """Pick up to ceil(target_size / topics) items per topic, due items first.

    Slots a topic can't fill are not handed to other topics, so the result
    may be shorter than ``target_size`` when topics are uneven.
    """
    topic_groups: dict[Topic, list[SessionItem]] = {}
    for si in session_items:
        topic_groups.setdefault(si.item.topic, []).append(si)

    if not topic_groups:
        return []

    target_per_topic = math.ceil(target_size / len(topic_groups))
    selected: list[SessionItem] = []
    for topic_items in topic_groups.values():
        due = [si for si in topic_items if is_due(si.stats, now)]
        not_due = [si for si in topic_items if not is_due(si.stats, now)]
        selected.extend(due[:target_per_topic])
        remaining_slots = target_per_topic - len(due)
        if remaining_slots > 0:
            selected.extend(not_due[:remaining_slots])
    return selected


def build_queue(
    pool: Sequence[VocabItem],
    stats_table: Mapping[str, ItemStatistics],
    target_size: int,
    now: datetime | None = None,
    answer_pool: Sequence[VocabItem] | None = None,
    rng: random.Random | None = None,
) -> SessionQueue:
    """Build a quiz queue from a vocabulary pool.

    Args:
        pool: Items eligible for this session.
        stats_table: Stored statistics keyed by item id.
        target_size: Maximum number of questions.
        now: Current time (defaults to utcnow).
        answer_pool: Items to draw distractors from (defaults to ``pool``).
        rng: Random source for shuffling.

    Returns:
        A SessionQueue with at most ``target_size`` questions, each item at
        most once. Empty when the pool is empty.
    """
    now = now or utcnow()
    if not pool or target_size <= 0:
        logger.info("Built empty queue (pool=%d, target=%d)", len(pool), target_size)
        return SessionQueue(size=max(0, target_size))

    session_items = attach_stats(pool, stats_table, now)
    selected = select_balanced(session_items, target_size, now)

    shuffle = rng.shuffle if rng else random.shuffle
    shuffle(selected)
    selected = selected[:target_size]

    answer_pool = answer_pool if answer_pool is not None else pool
    questions = [
        build_flashcard_question(si.item, answer_pool, stats=si.stats, rng=rng) for si in selected
    ]

    due_count = sum(1 for si in selected if is_due(si.stats, now))
    logger.info(
        "Built queue: %d questions (%d due) from %d items, target %d",
        len(questions),
        due_count,
        len(session_items),
        target_size,
    )
    return SessionQueue(questions=questions, size=target_size)
