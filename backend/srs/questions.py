"""Quiz questions.

All question variants share one ``Question`` type tagged with a
``QuestionKind``. Variant-specific fields are resolved here, at construction,
so callers never have to guess which prompt or TTS text applies.
"""

from __future__ import annotations

import logging
import random
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from backend.config import settings
from backend.srs.choices import build_options, ensure_valid_options
from backend.srs.scheduling import ItemStatistics
from backend.vocab.types import Level, Topic, VocabItem

logger = logging.getLogger(__name__)

NUM_WORDS = ["zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten"]
BLANK = "____"


class QuestionKind(Enum):
    FLASHCARD = "flashcard"  # Hebrew prompt -> pick the English word
    REVERSE = "reverse"  # English prompt -> pick the Hebrew word
    FILL_BLANK = "fill_blank"  # English sentence with the word blanked out
    ARITHMETIC = "arithmetic"  # "seven - one =" -> pick the number word


@dataclass
class Question:
    """A single multiple-choice question in a session queue."""

    id: str
    kind: QuestionKind
    answer: str
    options: list[str]
    topic: Topic
    level: Level
    prompt_native: str = ""
    prompt_target: str = ""
    tts_prompt: str = ""  # what to pronounce when the question is shown
    tts_on_correct: str = ""  # what to pronounce once answered correctly
    item: VocabItem | None = None
    stats: ItemStatistics | None = None  # snapshot taken when the queue was built

    @property
    def item_id(self) -> str | None:
        return self.item.id if self.item else None


def _options_for(
    question_id: str,
    answer: str,
    pool: Sequence[str],
    rng: random.Random | None,
) -> list[str]:
    count = settings.option_count
    options = build_options(answer, pool, count=count, rng=rng)
    return ensure_valid_options(answer, options, pool, count=count, question_id=question_id, rng=rng)


def _same_topic(item: VocabItem, answer_pool: Sequence[VocabItem]) -> list[VocabItem]:
    return [other for other in answer_pool if other.topic == item.topic]


def build_flashcard_question(
    item: VocabItem,
    answer_pool: Sequence[VocabItem],
    stats: ItemStatistics | None = None,
    rng: random.Random | None = None,
) -> Question:
    """Hebrew prompt, English options drawn from the item's topic."""
    pool = [other.english for other in _same_topic(item, answer_pool)]
    return Question(
        id=item.id,
        kind=QuestionKind.FLASHCARD,
        answer=item.english,
        options=_options_for(item.id, item.english, pool, rng),
        topic=item.topic,
        level=item.level,
        prompt_native=item.hebrew,
        prompt_target=item.example or item.english,
        tts_prompt=item.example or item.english,
        tts_on_correct=item.english,
        item=item,
        stats=stats,
    )


def build_reverse_question(
    item: VocabItem,
    answer_pool: Sequence[VocabItem],
    rng: random.Random | None = None,
) -> Question:
    """English prompt, Hebrew options drawn from the item's topic."""
    pool = [other.hebrew for other in _same_topic(item, answer_pool)]
    return Question(
        id=item.id,
        kind=QuestionKind.REVERSE,
        answer=item.hebrew,
        options=_options_for(item.id, item.hebrew, pool, rng),
        topic=item.topic,
        level=item.level,
        prompt_target=item.english,
        tts_prompt=item.english,
        tts_on_correct=item.english,
        item=item,
    )


def build_fill_blank_question(
    item: VocabItem,
    answer_pool: Sequence[VocabItem],
    rng: random.Random | None = None,
) -> Question | None:
    """Blank the English word out of its example sentence.

    Returns None when the example doesn't contain the word.
    """
    pattern = re.compile(rf"\b{re.escape(item.english)}\b", re.IGNORECASE)
    if not pattern.search(item.example):
        return None
    pool = [other.english for other in _same_topic(item, answer_pool)]
    return Question(
        id=item.id,
        kind=QuestionKind.FILL_BLANK,
        answer=item.english,
        options=_options_for(item.id, item.english, pool, rng),
        topic=item.topic,
        level=item.level,
        prompt_native=item.hebrew,
        prompt_target=pattern.sub(BLANK, item.example, count=1),
        tts_prompt=item.hebrew,
        tts_on_correct=item.example,
        item=item,
    )


def build_arithmetic_questions(count: int = 12, rng: random.Random | None = None) -> list[Question]:
    """Generate number-word addition/subtraction problems with results 0-10."""
    rng = rng or random.Random()
    questions: list[Question] = []
    for i in range(count):
        if rng.random() < 0.5:
            a = rng.randint(1, 10)
            b = rng.randint(0, a)
            op, result = "-", a - b
        else:
            a = rng.randint(0, 10)
            b = rng.randint(0, 10 - a)
            op, result = "+", a + b

        question_id = f"math-{i}-{a}{op}{b}"
        prompt = f"{NUM_WORDS[a]} {op} {NUM_WORDS[b]} ="
        answer = NUM_WORDS[result]
        questions.append(
            Question(
                id=question_id,
                kind=QuestionKind.ARITHMETIC,
                answer=answer,
                options=_options_for(question_id, answer, NUM_WORDS, rng),
                topic=Topic.NUMBERS,
                level=Level.A1,
                prompt_target=prompt,
                tts_prompt=prompt,
                tts_on_correct=answer,
            )
        )
    return questions
