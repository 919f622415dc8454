"""Experience points, player levels, streaks and topic mastery.

``award_experience`` is a pure reducer: it takes the current progress and one
answer and returns the next progress without touching the input.
"""

from dataclasses import dataclass, field

from backend.vocab.topics import ALL_TOPICS
from backend.vocab.types import Topic

FAST_ANSWER_MS = 2500
FAST_CORRECT_XP = 10
SLOW_CORRECT_XP = 7
INCORRECT_XP = 2
STREAK_BONUS_EVERY = 5
STREAK_BONUS_XP = 2


def _empty_mastery() -> dict[Topic, int]:
    return {topic: 0 for topic in ALL_TOPICS}


@dataclass
class PlayerProgress:
    """Aggregate gamification state for the learner."""

    xp: int = 0
    level: int = 1
    streak: int = 0  # consecutive correct answers across sessions
    topic_mastery: dict[Topic, int] = field(default_factory=_empty_mastery)


def xp_for_next_level(level: int) -> int:
    return 100 + level * 50


def base_xp(is_correct: bool, latency_ms: int) -> int:
    if not is_correct:
        return INCORRECT_XP
    return FAST_CORRECT_XP if latency_ms < FAST_ANSWER_MS else SLOW_CORRECT_XP


def streak_bonus(streak: int) -> int:
    return STREAK_BONUS_XP * (streak // STREAK_BONUS_EVERY)


def award_experience(
    progress: PlayerProgress,
    is_correct: bool,
    latency_ms: int,
    topic: Topic,
    mastery: int | None = None,
) -> PlayerProgress:
    """Apply one answer to the player's progress.

    Args:
        progress: Current progress.
        is_correct: Whether the answer was right.
        latency_ms: Answer latency.
        topic: Topic of the answered question.
        mastery: The answered item's rolling accuracy; when given it becomes
            the topic's mastery as is.

    Returns:
        The new PlayerProgress. A single award may cross several level
        thresholds; each one is consumed in turn.
    """
    streak = progress.streak + 1 if is_correct else 0
    xp = progress.xp + base_xp(is_correct, latency_ms) + streak_bonus(streak)
    level = progress.level

    while xp >= xp_for_next_level(level):
        xp -= xp_for_next_level(level)
        level += 1

    topic_mastery = dict(progress.topic_mastery)
    if mastery is not None:
        topic_mastery[topic] = mastery

    return PlayerProgress(xp=xp, level=level, streak=streak, topic_mastery=topic_mastery)


def migrate_progress(progress: PlayerProgress) -> PlayerProgress:
    """Fill in topics added since the progress snapshot was written."""
    topic_mastery = _empty_mastery()
    topic_mastery.update(progress.topic_mastery)
    return PlayerProgress(
        xp=progress.xp,
        level=max(1, progress.level),
        streak=progress.streak,
        topic_mastery=topic_mastery,
    )
