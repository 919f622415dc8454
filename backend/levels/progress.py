"""Level completion records and unlocking rules."""

from collections.abc import Mapping

from backend.config import settings
from backend.levels.types import LevelDef, LevelProgress


def record_level_result(
    current: LevelProgress | None,
    accuracy: float,
    pass_accuracy: int | None = None,
) -> LevelProgress:
    """Fold one finished attempt into a level's progress.

    The accuracy is a rounded running mean over attempts. A level counts as
    completed once any single attempt reaches ``pass_accuracy`` and stays
    completed afterwards.
    """
    current = current or LevelProgress()
    pass_accuracy = settings.level_pass_accuracy if pass_accuracy is None else pass_accuracy
    attempts = current.attempts + 1
    mean = (current.accuracy * current.attempts + accuracy) / attempts
    return LevelProgress(
        completed=current.completed or accuracy >= pass_accuracy,
        accuracy=int(mean + 0.5),
        attempts=attempts,
    )


def levels_for_topic(levels: Mapping[str, LevelDef], topic: str) -> list[LevelDef]:
    """Return a topic's levels in unlock order (by identifier)."""
    return sorted((lvl for lvl in levels.values() if lvl.topic == topic), key=lambda lvl: lvl.id)


def is_level_unlocked(
    level_id: str,
    levels: Mapping[str, LevelDef],
    progress: Mapping[str, LevelProgress],
) -> bool:
    """The first level of a topic is always open; later ones need the previous one completed."""
    level = levels.get(level_id)
    if level is None:
        return False

    ordered = levels_for_topic(levels, level.topic)
    index = next(i for i, lvl in enumerate(ordered) if lvl.id == level_id)
    if index == 0:
        return True

    previous = progress.get(ordered[index - 1].id)
    return previous is not None and previous.completed
