"""Selection of the next batch of puzzles for a player.

Puzzle types are steered toward the weakest skill while difficulty follows a
blend of the profile average, the tier baseline, and session progression.
All stochastic choices draw from one injectable random source so a fixed
seed (and a fixed clock) reproduces a whole batch.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from puzzlesleuth.engine.skills import (
    OPTIMAL_MOVES,
    SKILL_MAPPING,
    TIER_BASE_DIFFICULTY,
    CognitiveProfile,
    Difficulty,
    PuzzleType,
    Skill,
    Tier,
    clamp,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
RANDOM_TYPE_PROBABILITY = 0.1
DIFFICULTY_JITTER = 5.0
PROGRESSION_STEP_SESSIONS = 3
PROGRESSION_STEP_BONUS = 5
EASY_BELOW = 40.0
MEDIUM_BELOW = 70.0
BALANCED_RANGE = (30.0, 70.0)  # exclusive bounds


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1), e.g. ``random.Random``."""

    def random(self) -> float:
        ...


@dataclass(frozen=True)
class PuzzleConfig:
    type: PuzzleType
    difficulty: Difficulty
    difficulty_rating: float
    optimal_moves: int
    seed: str


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


def difficulty_for_rating(rating: float) -> Difficulty:
    if rating < EASY_BELOW:
        return Difficulty.EASY
    if rating < MEDIUM_BELOW:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def optimal_moves_for(puzzle_type: PuzzleType, difficulty: Difficulty) -> int:
    return OPTIMAL_MOVES[puzzle_type][difficulty]


def type_for_skill(skill: Skill) -> PuzzleType:
    """First puzzle type whose primary skill is ``skill``.

    No type trains ``lateral`` as its primary skill; that lookup falls back
    to the first puzzle type.
    """
    for puzzle_type, mapping in SKILL_MAPPING.items():
        if mapping.primary is skill:
            return puzzle_type
    fallback = next(iter(PuzzleType))
    logger.debug("no puzzle type has primary skill %s, using %s", skill.value, fallback.value)
    return fallback


def selection_schedule(profile: CognitiveProfile, count: int) -> list[Optional[Skill]]:
    """Target skill per batch slot; ``None`` marks a wildcard slot."""
    ranked = profile.ranked()
    weakest = ranked[0][0]
    strongest = ranked[-1][0]
    low, high = BALANCED_RANGE
    balanced = [skill for skill, value in ranked if low < value < high]

    schedule: list[Optional[Skill]] = [
        weakest,
        weakest,
        balanced[0] if balanced else weakest,
        strongest,
        None,
    ]
    if count <= len(schedule):
        return schedule[:max(count, 0)]
    return schedule + [None] * (count - len(schedule))


def select_next_puzzles(
    profile: CognitiveProfile,
    tier: Tier,
    session_progression: int,
    count: int = DEFAULT_BATCH_SIZE,
    *,
    rng: Optional[RandomSource] = None,
    clock_ms: Optional[Callable[[], int]] = None,
) -> list[PuzzleConfig]:
    """Build an ordered batch of ``count`` puzzle configs.

    Per slot the draws happen in a fixed order: the 10% randomization roll
    (skipped for wildcard slots), the type index when randomizing, the
    difficulty jitter, and the seed suffix.
    """
    rng = rng if rng is not None else random.Random()
    clock_ms = clock_ms or _wall_clock_ms
    puzzle_types = list(PuzzleType)

    base = TIER_BASE_DIFFICULTY[Tier(tier)]
    progression_bonus = math.floor(session_progression / PROGRESSION_STEP_SESSIONS) * PROGRESSION_STEP_BONUS
    centre = (profile.average + base) / 2 + progression_bonus

    puzzles: list[PuzzleConfig] = []
    for slot, target in enumerate(selection_schedule(profile, count)):
        if target is None or rng.random() < RANDOM_TYPE_PROBABILITY:
            puzzle_type = puzzle_types[int(rng.random() * len(puzzle_types))]
        else:
            puzzle_type = type_for_skill(target)

        jitter = rng.random() * (2 * DIFFICULTY_JITTER) - DIFFICULTY_JITTER
        rating = clamp(centre + jitter, 0.0, 100.0)
        difficulty = difficulty_for_rating(rating)

        puzzles.append(PuzzleConfig(
            type=puzzle_type,
            difficulty=difficulty,
            difficulty_rating=rating,
            optimal_moves=optimal_moves_for(puzzle_type, difficulty),
            seed=f"{puzzle_type.value}-{slot}-{clock_ms()}-{rng.random()!r}",
        ))

    logger.debug(
        "selected %d puzzles tier=%s progression=%d: %s",
        len(puzzles), Tier(tier).value, session_progression,
        [(p.type.value, p.difficulty.value) for p in puzzles],
    )
    return puzzles
