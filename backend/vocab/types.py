from dataclasses import dataclass
from enum import Enum


class Topic(str, Enum):
    NUMBERS = "numbers"
    COLORS = "colors"
    WEEKDAYS = "weekdays"
    SEASONS = "seasons"
    VERBS = "verbs"
    PHRASES = "phrases"


class Level(str, Enum):
    A1 = "A1"
    A2 = "A2"


@dataclass(frozen=True)
class VocabItem:
    """A single vocabulary entry: Hebrew prompt, English answer."""

    id: str
    topic: Topic
    level: Level
    hebrew: str  # native-language prompt
    english: str  # target-language answer
    example: str  # English example sentence
    transliteration: str | None = None
