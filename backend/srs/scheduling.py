"""SM-2 style scheduling for vocabulary items.

A lightweight SM-2 variant: the answer's correctness and latency are mapped to
a difficulty band, the band to an SM-2 grade, and the grade drives the ease
factor and the next review interval.

Key concepts:
- Grade: 0-5 answer quality. Wrong answers get 2, never 0, so a single miss
  doesn't crater the ease factor.
- Ease factor: multiplier for interval growth, kept within [1.3, 3.0].
- Interval: days until the item is due again, capped at MAX_INTERVAL_DAYS.
- Rolling accuracy: approximate percentage correct over the last 20 answers.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from backend.config import utcnow

EASY_LATENCY_MS = 2500
MEDIUM_LATENCY_MS = 6000

INITIAL_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 3.0

PASSING_GRADE = 3
ROLLING_WINDOW = 20
MAX_INTERVAL_DAYS = 36500  # keeps due_at within datetime range


class Difficulty(Enum):
    """How hard an answer felt, judged from correctness and latency."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class ItemStatistics:
    """Scheduling state and answer counters for one vocabulary item."""

    item_id: str
    repetitions: int = 0  # consecutive passing reviews
    interval_days: int = 0
    ease_factor: float = INITIAL_EASE
    last_reviewed_at: datetime | None = None
    due_at: datetime | None = None
    total_attempts: int = 0
    total_correct: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    average_latency_ms: int = 0
    last_latency_ms: int = 0
    rolling_accuracy: int = 0  # 0-100
    answers_count: int = 0


def initial_stats_for(item_id: str, now: datetime | None = None) -> ItemStatistics:
    """Create the zero state for an item that has never been answered."""
    return ItemStatistics(item_id=item_id, due_at=now or utcnow())


def classify_difficulty(is_correct: bool, latency_ms: int) -> Difficulty:
    if not is_correct:
        return Difficulty.HARD
    if latency_ms <= EASY_LATENCY_MS:
        return Difficulty.EASY
    if latency_ms <= MEDIUM_LATENCY_MS:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def to_grade(is_correct: bool, difficulty: Difficulty) -> int:
    """Map an answer to an SM-2 grade (0-5)."""
    if not is_correct:
        return 2
    if difficulty is Difficulty.EASY:
        return 5
    if difficulty is Difficulty.MEDIUM:
        return 4
    return 3


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round(value: float) -> int:
    """Round halves up (7.5 -> 8, 2.5 -> 3) rather than to even."""
    return math.floor(value + 0.5)


def next_ease(ease_factor: float, grade: int) -> float:
    """SM-2 ease update: EF' = EF + (0.1 - (5-q) * (0.08 + (5-q) * 0.02))."""
    miss = 5 - grade
    return _clamp(ease_factor + (0.1 - miss * (0.08 + miss * 0.02)), MIN_EASE, MAX_EASE)


def next_schedule(
    prev: ItemStatistics,
    is_correct: bool,
    latency_ms: int,
    now: datetime | None = None,
) -> ItemStatistics:
    """Apply one answer to an item's statistics.

    Args:
        prev: Current statistics (use ``initial_stats_for`` for a new item).
        is_correct: Whether the answer was right.
        latency_ms: How long the learner took to answer.
        now: Review time (defaults to utcnow).

    Returns:
        A new ItemStatistics; ``prev`` is left untouched.
    """
    now = now or utcnow()
    difficulty = classify_difficulty(is_correct, latency_ms)
    grade = to_grade(is_correct, difficulty)
    ease = next_ease(prev.ease_factor, grade)

    if grade < PASSING_GRADE:
        repetitions = 0
        interval = 1
    else:
        repetitions = prev.repetitions + 1
        if repetitions == 1:
            interval = 1
        elif repetitions == 2:
            interval = 3
        else:
            interval = min(_round(prev.interval_days * ease) or 1, MAX_INTERVAL_DAYS)

    total_attempts = prev.total_attempts + 1
    total_correct = prev.total_correct + (1 if is_correct else 0)
    current_streak = prev.current_streak + 1 if is_correct else 0
    longest_streak = max(prev.longest_streak, current_streak)

    if prev.total_attempts == 0:
        average_latency = float(latency_ms)
    else:
        average_latency = (prev.average_latency_ms * prev.total_attempts + latency_ms) / total_attempts

    # Past the window this holds min(total_correct, 20) / 20 instead of a true
    # sliding window over the last 20 answers.
    answers_count = prev.answers_count + 1
    if answers_count <= ROLLING_WINDOW:
        rolling_accuracy = _round(total_correct / answers_count * 100)
    else:
        correct_in_window = min(prev.total_correct, ROLLING_WINDOW)
        rolling_accuracy = _round(correct_in_window / ROLLING_WINDOW * 100)

    return replace(
        prev,
        repetitions=repetitions,
        interval_days=interval,
        ease_factor=ease,
        last_reviewed_at=now,
        due_at=now + timedelta(days=interval),
        total_attempts=total_attempts,
        total_correct=total_correct,
        current_streak=current_streak,
        longest_streak=longest_streak,
        average_latency_ms=_round(average_latency),
        last_latency_ms=latency_ms,
        rolling_accuracy=rolling_accuracy,
        answers_count=answers_count,
    )


def is_due(stats: ItemStatistics, now: datetime | None = None) -> bool:
    """An item is due once ``now`` is strictly past its due date."""
    if stats.due_at is None:
        return True
    return (now or utcnow()) > stats.due_at


def get_due_items(stats: list[ItemStatistics], now: datetime | None = None) -> list[ItemStatistics]:
    now = now or utcnow()
    return [s for s in stats if is_due(s, now)]
