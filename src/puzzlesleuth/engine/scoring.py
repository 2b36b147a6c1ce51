"""Scoring of a single completed puzzle attempt."""

from __future__ import annotations

from dataclasses import dataclass

from puzzlesleuth.engine.skills import clamp

DEFAULT_MAX_TIME_SECONDS = 60.0

BASE_SCORE = 100.0
EFFICIENCY_WEIGHT = 50.0
ATTEMPTS_BONUS = 20.0
ATTEMPT_COST = 5.0
HINT_COST = 10.0


@dataclass(frozen=True)
class PuzzleAttemptResult:
    """Raw metrics reported by a puzzle UI once the player finishes.

    Callers guarantee ``max_time > 0`` and positive move counts; nothing
    here is validated.
    """
    solved: bool
    time_taken: float
    max_time: float = DEFAULT_MAX_TIME_SECONDS
    optimal_moves: int = 1
    actual_moves: int = 1
    attempts_used: int = 0
    hints_used: int = 0


def score_puzzle_attempt(attempt: PuzzleAttemptResult) -> float:
    """Collapse an attempt into a score in [0, 100]. Unsolved puzzles score 0."""
    if not attempt.solved:
        return 0.0

    speed_bonus = max(0.0, 100.0 - (attempt.time_taken / attempt.max_time) * 100.0)
    efficiency_bonus = (attempt.optimal_moves / max(attempt.actual_moves, 1)) * EFFICIENCY_WEIGHT
    attempts_bonus = max(0.0, ATTEMPTS_BONUS - attempt.attempts_used * ATTEMPT_COST)
    hint_penalty = attempt.hints_used * -HINT_COST

    total = BASE_SCORE + speed_bonus + efficiency_bonus + attempts_bonus + hint_penalty
    return clamp(total, 0.0, 100.0)


def should_increase_difficulty(attempt: PuzzleAttemptResult) -> bool:
    # Fast, unaided solve.
    return attempt.solved and attempt.time_taken < 10 and attempt.hints_used == 0


def should_decrease_difficulty(attempt: PuzzleAttemptResult) -> bool:
    return not attempt.solved or (attempt.time_taken > 30 and attempt.hints_used >= 2)
