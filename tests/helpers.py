"""Builders for vocabulary fixtures shared by the tests."""

from backend.vocab.types import Level, Topic, VocabItem


def make_item(
    item_id: str,
    topic: Topic = Topic.COLORS,
    english: str | None = None,
    hebrew: str | None = None,
    example: str | None = None,
) -> VocabItem:
    english = english or f"word-{item_id}"
    return VocabItem(
        id=item_id,
        topic=topic,
        level=Level.A1,
        hebrew=hebrew or f"מילה-{item_id}",
        english=english,
        example=example or f"This sentence uses {english}.",
    )


def make_items(count: int, topic: Topic = Topic.COLORS, prefix: str | None = None) -> list[VocabItem]:
    prefix = prefix or topic.value
    return [make_item(f"{prefix}-{i}", topic=topic) for i in range(count)]
