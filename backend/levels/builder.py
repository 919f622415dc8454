"""Building question queues for level sessions."""

import logging
import random
from collections.abc import Sequence

from backend.levels.types import LevelDef, LevelKind
from backend.srs.queue import SessionQueue
from backend.srs.questions import (
    Question,
    build_arithmetic_questions,
    build_fill_blank_question,
    build_flashcard_question,
    build_reverse_question,
)
from backend.vocab.repo import filter_by_topic
from backend.vocab.types import VocabItem

logger = logging.getLogger(__name__)


class LevelBuildError(Exception):
    """Raised when a level has no questions to offer."""


def _vocab_questions(
    level: LevelDef,
    items: Sequence[VocabItem],
    rng: random.Random | None,
) -> list[Question]:
    topic_items = filter_by_topic(items, level.topic)
    if level.kind is LevelKind.FLASHCARDS:
        return [build_flashcard_question(item, topic_items, rng=rng) for item in topic_items]
    if level.kind is LevelKind.REVERSE:
        return [build_reverse_question(item, topic_items, rng=rng) for item in topic_items]

    questions = []
    for item in topic_items:
        question = build_fill_blank_question(item, topic_items, rng=rng)
        if question is None:
            logger.debug("No blank for %s: %r not in example", item.id, item.english)
            continue
        questions.append(question)
    return questions


def build_level_session(
    level: LevelDef,
    items: Sequence[VocabItem],
    rng: random.Random | None = None,
) -> SessionQueue:
    """Build a shuffled queue of up to ``level.size`` questions for a level.

    Raises:
        LevelBuildError: If the level yields no questions.
    """
    if level.kind is LevelKind.MATH:
        questions = build_arithmetic_questions(level.size, rng=rng)
    else:
        questions = _vocab_questions(level, items, rng)

    if not questions:
        raise LevelBuildError(f"No {level.kind.value} questions available for level '{level.id}'")

    shuffle = rng.shuffle if rng else random.shuffle
    shuffle(questions)
    questions = questions[: level.size]

    logger.info("Built level session %s: %d questions", level.id, len(questions))
    return SessionQueue(questions=questions, size=level.size)
