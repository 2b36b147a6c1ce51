"""Adaptive state: the batch for a session plus the skill summary shown beside it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from puzzlesleuth.engine.selector import (
    DEFAULT_BATCH_SIZE,
    PuzzleConfig,
    RandomSource,
    select_next_puzzles,
)
from puzzlesleuth.engine.skills import CognitiveProfile, Skill, Tier


@dataclass(frozen=True)
class AdaptiveState:
    profile: CognitiveProfile
    next_puzzles: tuple[PuzzleConfig, ...]
    weakest_skill: Skill
    strongest_skill: Skill
    session_progression: int


def build_adaptive_state(
    profile: CognitiveProfile,
    tier: Tier,
    session_progression: int,
    *,
    count: int = DEFAULT_BATCH_SIZE,
    rng: Optional[RandomSource] = None,
    clock_ms: Optional[Callable[[], int]] = None,
) -> AdaptiveState:
    puzzles = select_next_puzzles(
        profile, tier, session_progression, count, rng=rng, clock_ms=clock_ms,
    )
    return AdaptiveState(
        profile=profile,
        next_puzzles=tuple(puzzles),
        weakest_skill=profile.weakest,
        strongest_skill=profile.strongest,
        session_progression=session_progression,
    )
