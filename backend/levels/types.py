from dataclasses import dataclass
from enum import Enum

from backend.vocab.types import Topic


class LevelKind(Enum):
    FLASHCARDS = "flashcards"
    REVERSE = "reverse"
    FILL_BLANK = "fill-blank"
    MATH = "math"


@dataclass(frozen=True)
class LevelDef:
    """A named exercise set, e.g. ``numbers-1-flashcards``."""

    id: str
    topic: Topic
    kind: LevelKind
    title: str
    description: str = ""
    size: int = 12


@dataclass
class LevelProgress:
    completed: bool = False
    accuracy: int = 0  # running mean over attempts, 0-100
    attempts: int = 0
