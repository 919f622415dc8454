"""Tests for the SM-2 scheduling engine."""

from datetime import timedelta

from backend.config import utcnow
from backend.srs.scheduling import (
    MAX_EASE,
    MAX_INTERVAL_DAYS,
    MIN_EASE,
    Difficulty,
    ItemStatistics,
    classify_difficulty,
    get_due_items,
    initial_stats_for,
    is_due,
    next_schedule,
    to_grade,
)

# --- Difficulty and grade ---


class TestClassify:
    def test_incorrect_is_hard(self) -> None:
        assert classify_difficulty(False, 500) is Difficulty.HARD

    def test_latency_bands(self) -> None:
        assert classify_difficulty(True, 2500) is Difficulty.EASY
        assert classify_difficulty(True, 2501) is Difficulty.MEDIUM
        assert classify_difficulty(True, 6000) is Difficulty.MEDIUM
        assert classify_difficulty(True, 6001) is Difficulty.HARD

    def test_grades(self) -> None:
        assert to_grade(False, Difficulty.HARD) == 2
        assert to_grade(False, Difficulty.EASY) == 2  # never 0
        assert to_grade(True, Difficulty.EASY) == 5
        assert to_grade(True, Difficulty.MEDIUM) == 4
        assert to_grade(True, Difficulty.HARD) == 3


# --- next_schedule ---


class TestNextSchedule:
    def setup_method(self) -> None:
        self.now = utcnow()
        self.initial = initial_stats_for("x", self.now)

    def test_initial_state(self) -> None:
        assert self.initial.repetitions == 0
        assert self.initial.ease_factor == 2.5
        assert self.initial.last_reviewed_at is None
        assert self.initial.due_at == self.now

    def test_two_correct_answers(self) -> None:
        first = next_schedule(self.initial, True, 1200, now=self.now)
        assert first.repetitions == 1
        assert first.interval_days == 1

        second = next_schedule(first, True, 2200, now=self.now)
        assert second.repetitions == 2
        assert second.interval_days == 3

    def test_third_correct_uses_ease(self) -> None:
        stats = self.initial
        for _ in range(3):
            stats = next_schedule(stats, True, 1000, now=self.now)
        # ease 2.5 -> 2.6 -> 2.7 -> 2.8; round(3 * 2.8) == 8
        assert stats.repetitions == 3
        assert stats.interval_days == 8

    def test_incorrect_resets(self) -> None:
        stats = self.initial
        for _ in range(4):
            stats = next_schedule(stats, True, 1000, now=self.now)
        assert stats.interval_days > 3

        failed = next_schedule(stats, False, 1000, now=self.now)
        assert failed.repetitions == 0
        assert failed.interval_days == 1
        assert failed.current_streak == 0
        assert failed.longest_streak == 4

    def test_ease_adjustments(self) -> None:
        easy = next_schedule(self.initial, True, 1000, now=self.now)
        medium = next_schedule(self.initial, True, 4000, now=self.now)
        hard = next_schedule(self.initial, True, 9000, now=self.now)
        wrong = next_schedule(self.initial, False, 1000, now=self.now)
        assert abs(easy.ease_factor - 2.6) < 1e-9
        assert abs(medium.ease_factor - 2.5) < 1e-9
        assert abs(hard.ease_factor - 2.36) < 1e-9
        assert abs(wrong.ease_factor - 2.18) < 1e-9

    def test_hard_correct_still_passes(self) -> None:
        stats = next_schedule(self.initial, True, 9000, now=self.now)
        assert stats.repetitions == 1

    def test_ease_stays_bounded(self) -> None:
        stats = self.initial
        for _ in range(30):
            stats = next_schedule(stats, False, 1000, now=self.now)
            assert MIN_EASE <= stats.ease_factor <= MAX_EASE
        assert stats.ease_factor == MIN_EASE

        stats = ItemStatistics(item_id="y", ease_factor=2.95)
        for _ in range(30):
            stats = next_schedule(stats, True, 1000, now=self.now)
            assert MIN_EASE <= stats.ease_factor <= MAX_EASE
        assert stats.ease_factor == MAX_EASE

    def test_long_run_of_easy_answers_caps_interval(self) -> None:
        stats = self.initial
        for _ in range(40):
            stats = next_schedule(stats, True, 1000, now=self.now)
            assert 1 <= stats.interval_days <= MAX_INTERVAL_DAYS
        assert stats.interval_days == MAX_INTERVAL_DAYS
        assert stats.due_at == self.now + timedelta(days=MAX_INTERVAL_DAYS)
        assert stats.repetitions == 40

    def test_due_and_review_times(self) -> None:
        stats = next_schedule(self.initial, True, 1000, now=self.now)
        stats = next_schedule(stats, True, 1000, now=self.now)
        assert stats.last_reviewed_at == self.now
        assert stats.due_at == self.now + timedelta(days=3)

    def test_counters_and_latency(self) -> None:
        stats = next_schedule(self.initial, True, 1000, now=self.now)
        assert stats.average_latency_ms == 1000
        stats = next_schedule(stats, False, 3000, now=self.now)
        assert stats.total_attempts == 2
        assert stats.total_correct == 1
        assert stats.average_latency_ms == 2000
        assert stats.last_latency_ms == 3000
        assert stats.rolling_accuracy == 50
        assert stats.answers_count == 2

    def test_streaks(self) -> None:
        stats = self.initial
        for correct in [True, True, True, False, True]:
            stats = next_schedule(stats, correct, 1000, now=self.now)
            assert stats.current_streak <= stats.longest_streak
        assert stats.current_streak == 1
        assert stats.longest_streak == 3

    def test_rolling_accuracy_within_window(self) -> None:
        stats = self.initial
        for correct in [True, False, True, True]:
            stats = next_schedule(stats, correct, 1000, now=self.now)
        assert stats.rolling_accuracy == 75

    def test_rolling_accuracy_past_window_is_approximate(self) -> None:
        """Past 20 answers the value is min(total_correct, 20) / 20."""
        stats = self.initial
        for _ in range(20):
            stats = next_schedule(stats, True, 1000, now=self.now)
        for _ in range(5):
            stats = next_schedule(stats, False, 1000, now=self.now)
        # A true sliding window would give 75; the approximation holds 100.
        assert stats.answers_count == 25
        assert stats.rolling_accuracy == 100

    def test_previous_state_untouched(self) -> None:
        next_schedule(self.initial, True, 1000, now=self.now)
        assert self.initial.repetitions == 0
        assert self.initial.total_attempts == 0


# --- Due-ness ---


class TestIsDue:
    def test_boundary_is_not_due(self) -> None:
        now = utcnow()
        stats = initial_stats_for("x", now)
        assert not is_due(stats, now)
        assert is_due(stats, now + timedelta(microseconds=1))

    def test_future_item_not_due(self) -> None:
        now = utcnow()
        stats = next_schedule(initial_stats_for("x", now), True, 1000, now=now)
        assert not is_due(stats, now + timedelta(hours=23))
        assert is_due(stats, now + timedelta(days=1, seconds=1))

    def test_get_due_items(self) -> None:
        now = utcnow()
        overdue = initial_stats_for("a", now - timedelta(days=2))
        fresh = initial_stats_for("b", now)
        assert get_due_items([overdue, fresh], now) == [overdue]
