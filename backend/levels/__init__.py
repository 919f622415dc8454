"""Named exercise sets ("levels") within each topic."""

from backend.levels.builder import LevelBuildError, build_level_session
from backend.levels.progress import is_level_unlocked, record_level_result
from backend.levels.registry import DEFAULT_LEVELS
from backend.levels.types import LevelDef, LevelKind, LevelProgress

__all__ = [
    "DEFAULT_LEVELS",
    "LevelBuildError",
    "LevelDef",
    "LevelKind",
    "LevelProgress",
    "build_level_session",
    "is_level_unlocked",
    "record_level_result",
]
