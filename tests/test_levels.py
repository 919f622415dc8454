"""Tests for level definitions, unlocking and level session building."""

import random

import pytest
from helpers import make_item, make_items

from backend.levels.builder import LevelBuildError, build_level_session
from backend.levels.progress import is_level_unlocked, levels_for_topic, record_level_result
from backend.levels.registry import DEFAULT_LEVELS
from backend.levels.types import LevelDef, LevelKind, LevelProgress
from backend.srs.questions import BLANK, NUM_WORDS, QuestionKind
from backend.vocab.repo import load_vocab
from backend.vocab.topics import ALL_TOPICS
from backend.vocab.types import Topic


def _registry() -> dict[str, LevelDef]:
    return {level.id: level for level in DEFAULT_LEVELS}


class TestRegistry:
    def test_every_topic_has_levels(self) -> None:
        levels = _registry()
        for topic in ALL_TOPICS:
            assert levels_for_topic(levels, topic)

    def test_ids_unique(self) -> None:
        assert len(_registry()) == len(DEFAULT_LEVELS)

    def test_numbers_sequence(self) -> None:
        ids = [level.id for level in levels_for_topic(_registry(), Topic.NUMBERS)]
        assert ids == ["numbers-1-flashcards", "numbers-2-math", "numbers-3-reverse"]


class TestRecordLevelResult:
    def test_first_passing_attempt(self) -> None:
        result = record_level_result(None, 90, pass_accuracy=80)
        assert result == LevelProgress(completed=True, accuracy=90, attempts=1)

    def test_failing_attempt(self) -> None:
        result = record_level_result(None, 70, pass_accuracy=80)
        assert not result.completed
        assert result.attempts == 1

    def test_threshold_is_inclusive(self) -> None:
        assert record_level_result(None, 80, pass_accuracy=80).completed

    def test_completion_is_sticky(self) -> None:
        passed = record_level_result(None, 90, pass_accuracy=80)
        later = record_level_result(passed, 50, pass_accuracy=80)
        assert later.completed
        assert later.accuracy == 70
        assert later.attempts == 2

    def test_running_mean_rounds_half_up(self) -> None:
        result = record_level_result(None, 50, pass_accuracy=80)
        result = record_level_result(result, 75, pass_accuracy=80)
        # mean 62.5
        assert result.accuracy == 63


class TestUnlocking:
    def setup_method(self) -> None:
        self.levels = _registry()

    def test_first_level_open(self) -> None:
        assert is_level_unlocked("numbers-1-flashcards", self.levels, {})
        assert is_level_unlocked("colors-1-flashcards", self.levels, {})

    def test_later_levels_locked(self) -> None:
        assert not is_level_unlocked("numbers-2-math", self.levels, {})
        assert not is_level_unlocked("numbers-3-reverse", self.levels, {})

    def test_completed_previous_unlocks(self) -> None:
        progress = {"numbers-1-flashcards": LevelProgress(completed=True, accuracy=90, attempts=1)}
        assert is_level_unlocked("numbers-2-math", self.levels, progress)
        assert not is_level_unlocked("numbers-3-reverse", self.levels, progress)

    def test_attempted_but_not_completed_stays_locked(self) -> None:
        progress = {"numbers-1-flashcards": LevelProgress(completed=False, accuracy=40, attempts=3)}
        assert not is_level_unlocked("numbers-2-math", self.levels, progress)

    def test_unknown_level(self) -> None:
        assert not is_level_unlocked("nope-1-flashcards", self.levels, {})


class TestBuildLevelSession:
    def setup_method(self) -> None:
        self.rng = random.Random(5)
        self.items = load_vocab()

    def test_math_level(self) -> None:
        level = _registry()["numbers-2-math"]
        queue = build_level_session(level, self.items, rng=self.rng)
        assert queue.total == level.size
        for question in queue.questions:
            assert question.kind is QuestionKind.ARITHMETIC
            assert question.item is None
            a, op, b, eq = question.prompt_target.split()
            assert eq == "="
            x, y = NUM_WORDS.index(a), NUM_WORDS.index(b)
            expected = x + y if op == "+" else x - y
            assert 0 <= expected <= 10
            assert question.answer == NUM_WORDS[expected]
            assert question.options.count(question.answer) == 1
            assert len(set(question.options)) == len(question.options) == 4

    def test_flashcard_level(self) -> None:
        queue = build_level_session(_registry()["colors-1-flashcards"], self.items, rng=self.rng)
        colors = [item for item in self.items if item.topic == Topic.COLORS]
        assert queue.total == len(colors)
        assert all(q.kind is QuestionKind.FLASHCARD and q.topic == Topic.COLORS for q in queue.questions)

    def test_reverse_level_answers_in_hebrew(self) -> None:
        queue = build_level_session(_registry()["numbers-3-reverse"], self.items, rng=self.rng)
        for question in queue.questions:
            assert question.kind is QuestionKind.REVERSE
            assert question.answer == question.item.hebrew
            assert question.prompt_target == question.item.english

    def test_fill_blank_level(self) -> None:
        queue = build_level_session(_registry()["verbs-3-fill-blank"], self.items, rng=self.rng)
        assert queue.total > 0
        for question in queue.questions:
            assert BLANK in question.prompt_target
            assert question.answer.lower() not in question.prompt_target.lower()

    def test_size_limits_questions(self) -> None:
        level = LevelDef(id="colors-9-small", topic=Topic.COLORS, kind=LevelKind.FLASHCARDS, title="t", size=3)
        queue = build_level_session(level, make_items(10, Topic.COLORS), rng=self.rng)
        assert queue.total == 3

    def test_fill_blank_skips_items_without_word(self) -> None:
        items = [
            make_item("a", english="red", example="The apple is red."),
            make_item("b", english="blue", example="The sky is clear."),
        ]
        level = LevelDef(id="colors-9-blank", topic=Topic.COLORS, kind=LevelKind.FILL_BLANK, title="t")
        queue = build_level_session(level, items, rng=self.rng)
        assert [q.id for q in queue.questions] == ["a"]
        assert queue.questions[0].prompt_target == f"The apple is {BLANK}."

    def test_no_questions_raises(self) -> None:
        level = LevelDef(id="seasons-1-flashcards", topic=Topic.SEASONS, kind=LevelKind.FLASHCARDS, title="t")
        with pytest.raises(LevelBuildError):
            build_level_session(level, make_items(4, Topic.COLORS), rng=self.rng)
