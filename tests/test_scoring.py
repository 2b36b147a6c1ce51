"""Tests for puzzle attempt scoring."""

import pytest

from puzzlesleuth.engine.scoring import (
    PuzzleAttemptResult,
    score_puzzle_attempt,
    should_decrease_difficulty,
    should_increase_difficulty,
)


def _attempt(**overrides):
    values = dict(
        solved=True, time_taken=30.0, max_time=60.0, optimal_moves=4,
        actual_moves=8, attempts_used=4, hints_used=0,
    )
    values.update(overrides)
    return PuzzleAttemptResult(**values)


class TestScore:
    def test_fast_perfect_solve_is_capped_at_100(self):
        attempt = PuzzleAttemptResult(
            solved=True, time_taken=5, max_time=60, optimal_moves=1,
            actual_moves=1, attempts_used=0, hints_used=0,
        )
        assert score_puzzle_attempt(attempt) == 100

    def test_unsolved_scores_zero(self):
        attempt = _attempt(solved=False, time_taken=45, hints_used=0, attempts_used=0,
                           actual_moves=4)
        assert score_puzzle_attempt(attempt) == 0

    def test_unsolved_ignores_everything_else(self):
        attempt = _attempt(solved=False, time_taken=0.1, actual_moves=1, optimal_moves=10)
        assert score_puzzle_attempt(attempt) == 0

    def test_hints_drive_score_to_zero(self):
        # 100 + 50 + 25 + 0 - 200 clamps to 0
        assert score_puzzle_attempt(_attempt(hints_used=20)) == 0

    def test_slow_solve_gets_no_negative_speed_bonus(self):
        # 100 + 0 + 25 + 0 - 120 = 5
        attempt = _attempt(time_taken=600, hints_used=12)
        assert score_puzzle_attempt(attempt) == pytest.approx(5.0)

    def test_zero_actual_moves_is_guarded(self):
        attempt = _attempt(actual_moves=0, hints_used=30)
        # 100 + 50 + 200 + 0 - 300 = 50
        assert score_puzzle_attempt(attempt) == pytest.approx(50.0)

    def test_components_add_before_clamp(self):
        # 100 + 50 + 25 + 0 - 100 = 75
        assert score_puzzle_attempt(_attempt(hints_used=10)) == pytest.approx(75.0)

    def test_attempts_bonus_never_negative(self):
        a = score_puzzle_attempt(_attempt(attempts_used=4, hints_used=10))
        b = score_puzzle_attempt(_attempt(attempts_used=40, hints_used=10))
        assert a == b


class TestMonotonicity:
    def test_more_hints_never_raise_score(self):
        scores = [score_puzzle_attempt(_attempt(hints_used=h)) for h in range(0, 25)]
        assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))

    def test_faster_never_lowers_score(self):
        scores = [score_puzzle_attempt(_attempt(time_taken=t, hints_used=12)) for t in range(60, -1, -5)]
        assert all(later >= earlier for earlier, later in zip(scores, scores[1:]))

    def test_fewer_moves_never_lowers_score(self):
        scores = [score_puzzle_attempt(_attempt(actual_moves=m, hints_used=12)) for m in range(20, 3, -1)]
        assert all(later >= earlier for earlier, later in zip(scores, scores[1:]))

    def test_bounds(self):
        for solved in (True, False):
            for hints in (0, 3, 30):
                for moves in (1, 5, 50):
                    s = score_puzzle_attempt(_attempt(solved=solved, hints_used=hints, actual_moves=moves))
                    assert 0 <= s <= 100


class TestDifficultyNudges:
    def test_quick_unaided_solve_suggests_increase(self):
        assert should_increase_difficulty(_attempt(time_taken=8, hints_used=0))

    def test_hint_blocks_increase(self):
        assert not should_increase_difficulty(_attempt(time_taken=8, hints_used=1))

    def test_unsolved_suggests_decrease(self):
        assert should_decrease_difficulty(_attempt(solved=False))
        assert not should_increase_difficulty(_attempt(solved=False, time_taken=1))

    def test_slow_with_hints_suggests_decrease(self):
        assert should_decrease_difficulty(_attempt(time_taken=31, hints_used=2))
        assert not should_decrease_difficulty(_attempt(time_taken=31, hints_used=1))
