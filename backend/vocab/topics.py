from backend.vocab.types import Level, Topic

BASIC_TOPICS: list[Topic] = [Topic.NUMBERS, Topic.COLORS, Topic.WEEKDAYS, Topic.SEASONS]
ADVANCED_TOPICS: list[Topic] = [Topic.VERBS, Topic.PHRASES]
ALL_TOPICS: list[Topic] = BASIC_TOPICS + ADVANCED_TOPICS


def topic_level(topic: Topic) -> Level:
    """Basic topics are A1 material, everything else A2."""
    return Level.A1 if topic in BASIC_TOPICS else Level.A2
