"""Plain-language reasoning for why a puzzle in the batch was chosen."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from puzzlesleuth.engine.adaptive import AdaptiveState
from puzzlesleuth.engine.selector import EASY_BELOW, MEDIUM_BELOW
from puzzlesleuth.engine.skills import Skill, round_half_up

SKILL_NAMES: dict[Skill, str] = {
    Skill.PATTERNS: "Pattern Recognition",
    Skill.SPATIAL: "Spatial Reasoning",
    Skill.LOGIC: "Logic & Deduction",
    Skill.LATERAL: "Lateral Thinking",
    Skill.SEQUENCING: "Sequential Planning",
}

TREND_MARGIN = 5.0
PROGRESSION_NOTE_AFTER = 5


class Trend(str, Enum):
    NEUTRAL = "neutral"
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass
class PuzzleInsight:
    index: int
    profile_average: int
    weakest_value: int
    strongest_value: int
    balance_score: int
    trend: Trend
    reasons: list[str] = field(default_factory=list)


def _trend(state: AdaptiveState, index: int) -> Trend:
    if index == 0:
        return Trend.NEUTRAL
    current = state.next_puzzles[index].difficulty_rating
    previous = state.next_puzzles[index - 1].difficulty_rating
    if current > previous + TREND_MARGIN:
        return Trend.INCREASING
    if current < previous - TREND_MARGIN:
        return Trend.DECREASING
    return Trend.STABLE


def explain_puzzle(state: AdaptiveState, index: int) -> Optional[PuzzleInsight]:
    """Explain slot ``index`` of the batch, or None if there is no such slot."""
    if not 0 <= index < len(state.next_puzzles):
        return None

    puzzle = state.next_puzzles[index]
    profile = state.profile
    weakest_value = profile.get(state.weakest_skill)
    strongest_value = profile.get(state.strongest_skill)

    reasons: list[str] = []
    if index < 2:
        reasons.append(
            f"Targeting {SKILL_NAMES[state.weakest_skill]} "
            f"({round_half_up(weakest_value)}/100) - your area for growth"
        )
    elif index < 4:
        reasons.append("Building balanced skills across multiple areas")
    else:
        reasons.append(
            f"Reinforcing {SKILL_NAMES[state.strongest_skill]} - maintaining your strengths"
        )

    if puzzle.difficulty_rating < EASY_BELOW:
        reasons.append("Difficulty set to Easy to build confidence")
    elif puzzle.difficulty_rating < MEDIUM_BELOW:
        reasons.append("Difficulty set to Medium to challenge your current skills")
    else:
        reasons.append("Difficulty set to Hard - pushing your limits!")

    if state.session_progression > PROGRESSION_NOTE_AFTER:
        reasons.append(
            f"Session {state.session_progression + 1} - difficulty increasing with your progress"
        )

    return PuzzleInsight(
        index=index,
        profile_average=round_half_up(profile.average),
        weakest_value=round_half_up(weakest_value),
        strongest_value=round_half_up(strongest_value),
        balance_score=round_half_up(100 - (strongest_value - weakest_value)),
        trend=_trend(state, index),
        reasons=reasons,
    )
