"""Built-in level definitions for every topic.

Levels unlock in identifier order within a topic, so the number in each id
sets its place in the sequence.
"""

from backend.levels.types import LevelDef, LevelKind
from backend.vocab.types import Topic

_SUBJECTS = {
    Topic.NUMBERS: "מספרים",
    Topic.COLORS: "צבעים",
    Topic.WEEKDAYS: "ימי השבוע",
    Topic.SEASONS: "עונות השנה",
    Topic.VERBS: "פעלים",
    Topic.PHRASES: "ביטויים",
}


def _topic_levels(topic: Topic, kinds: list[LevelKind]) -> list[LevelDef]:
    subject = _SUBJECTS[topic]
    titles = {
        LevelKind.FLASHCARDS: ("זיהוי בסיסי", f"זיהוי {subject} באנגלית"),
        LevelKind.MATH: ("חישוב פשוט", "חישובים בסיסיים עם מספרים"),
        LevelKind.REVERSE: ("תרגום הפוך", f"{subject} מאנגלית לעברית"),
        LevelKind.FILL_BLANK: ("השלמת משפט", f"{subject} בתוך משפט"),
    }
    return [
        LevelDef(
            id=f"{topic.value}-{n}-{kind.value}",
            topic=topic,
            kind=kind,
            title=titles[kind][0],
            description=titles[kind][1],
        )
        for n, kind in enumerate(kinds, start=1)
    ]


_VOCAB_KINDS = [LevelKind.FLASHCARDS, LevelKind.REVERSE, LevelKind.FILL_BLANK]

DEFAULT_LEVELS: list[LevelDef] = [
    *_topic_levels(Topic.NUMBERS, [LevelKind.FLASHCARDS, LevelKind.MATH, LevelKind.REVERSE]),
    *_topic_levels(Topic.COLORS, _VOCAB_KINDS),
    *_topic_levels(Topic.WEEKDAYS, _VOCAB_KINDS),
    *_topic_levels(Topic.SEASONS, _VOCAB_KINDS),
    *_topic_levels(Topic.VERBS, _VOCAB_KINDS),
    *_topic_levels(Topic.PHRASES, _VOCAB_KINDS),
]
