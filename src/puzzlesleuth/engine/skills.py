"""Cognitive skills, puzzle types, and the static tables that link them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Mapping


class Skill(str, Enum):
    PATTERNS = "patterns"
    SPATIAL = "spatial"
    LOGIC = "logic"
    LATERAL = "lateral"
    SEQUENCING = "sequencing"


class PuzzleType(str, Enum):
    SEQUENCE = "sequence"
    MIRROR = "mirror"
    GEAR = "gear"
    LOGIC = "logic"
    SPATIAL = "spatial"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Tier(str, Enum):
    JR_DETECTIVE = "jr-detective"
    DETECTIVE = "detective"
    MASTER_DETECTIVE = "master-detective"


@dataclass(frozen=True)
class SkillMapping:
    """Which skills a puzzle type trains. The primary weight is implicitly 1.0."""
    primary: Skill
    secondary: Mapping[Skill, float] = field(default_factory=dict)

    @property
    def trained(self) -> frozenset[Skill]:
        return frozenset({self.primary, *self.secondary})


SKILL_MAPPING: dict[PuzzleType, SkillMapping] = {
    PuzzleType.SEQUENCE: SkillMapping(Skill.PATTERNS, {Skill.SEQUENCING: 0.3}),
    PuzzleType.MIRROR: SkillMapping(Skill.SPATIAL, {Skill.LOGIC: 0.3, Skill.LATERAL: 0.2}),
    PuzzleType.GEAR: SkillMapping(Skill.SEQUENCING, {Skill.LOGIC: 0.4, Skill.SPATIAL: 0.2}),
    PuzzleType.LOGIC: SkillMapping(Skill.LOGIC, {Skill.LATERAL: 0.4, Skill.SEQUENCING: 0.2}),
    PuzzleType.SPATIAL: SkillMapping(Skill.SPATIAL, {Skill.PATTERNS: 0.2}),
}

# Designer's expected minimum interaction count per (type, difficulty).
OPTIMAL_MOVES: dict[PuzzleType, dict[Difficulty, int]] = {
    PuzzleType.SEQUENCE: {Difficulty.EASY: 1, Difficulty.MEDIUM: 1, Difficulty.HARD: 1},
    PuzzleType.MIRROR: {Difficulty.EASY: 2, Difficulty.MEDIUM: 4, Difficulty.HARD: 7},
    PuzzleType.GEAR: {Difficulty.EASY: 3, Difficulty.MEDIUM: 5, Difficulty.HARD: 8},
    PuzzleType.LOGIC: {Difficulty.EASY: 1, Difficulty.MEDIUM: 3, Difficulty.HARD: 5},
    PuzzleType.SPATIAL: {Difficulty.EASY: 2, Difficulty.MEDIUM: 4, Difficulty.HARD: 6},
}

TIER_BASE_DIFFICULTY: dict[Tier, int] = {
    Tier.JR_DETECTIVE: 25,
    Tier.DETECTIVE: 50,
    Tier.MASTER_DETECTIVE: 75,
}

SKILL_MIN = 0.0
SKILL_MAX = 100.0
NEUTRAL_SKILL = 50.0


def _check_tables() -> None:
    """Fail at import if a puzzle type or tier is missing from any table."""
    for puzzle_type in PuzzleType:
        mapping = SKILL_MAPPING.get(puzzle_type)
        if mapping is None:
            raise RuntimeError(f"No skill mapping for puzzle type {puzzle_type.value!r}")
        if mapping.primary in mapping.secondary:
            raise RuntimeError(f"{puzzle_type.value!r} lists its primary skill as secondary")
        for skill, weight in mapping.secondary.items():
            if not 0.0 < weight <= 1.0:
                raise RuntimeError(f"Secondary weight for {skill.value!r} out of (0, 1]")
        moves = OPTIMAL_MOVES.get(puzzle_type, {})
        missing = [d.value for d in Difficulty if d not in moves]
        if missing:
            raise RuntimeError(
                f"No optimal moves for {puzzle_type.value!r} at {', '.join(missing)}"
            )
    for tier in Tier:
        if tier not in TIER_BASE_DIFFICULTY:
            raise RuntimeError(f"No base difficulty for tier {tier.value!r}")


_check_tables()


def clamp(value: float, lo: float = SKILL_MIN, hi: float = SKILL_MAX) -> float:
    return max(lo, min(hi, value))


def round_half_up(x: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(x + 0.5))


@dataclass(frozen=True)
class CognitiveProfile:
    """Five skill estimates, each in [0, 100].

    Values outside the range are clamped on construction. Treated as an
    immutable value: updates return a new profile.
    """
    patterns: float = NEUTRAL_SKILL
    spatial: float = NEUTRAL_SKILL
    logic: float = NEUTRAL_SKILL
    lateral: float = NEUTRAL_SKILL
    sequencing: float = NEUTRAL_SKILL

    def __post_init__(self) -> None:
        for f in fields(self):
            object.__setattr__(self, f.name, clamp(float(getattr(self, f.name))))

    @classmethod
    def neutral(cls) -> CognitiveProfile:
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, float]) -> CognitiveProfile:
        """Build a profile from ``{skill_name: value}``; unknown keys are rejected."""
        unknown = set(data) - {s.value for s in Skill}
        if unknown:
            raise ValueError(f"Unknown skill(s): {', '.join(sorted(unknown))}")
        return cls(**{
            skill.value: float(data.get(skill.value, NEUTRAL_SKILL))
            for skill in Skill
        })

    def get(self, skill: Skill) -> float:
        return getattr(self, Skill(skill).value)

    def with_values(self, values: Mapping[Skill, float]) -> CognitiveProfile:
        current = self.as_dict()
        for skill, value in values.items():
            current[Skill(skill).value] = value
        return CognitiveProfile(**current)

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def average(self) -> float:
        return sum(self.get(skill) for skill in Skill) / len(Skill)

    def ranked(self) -> list[tuple[Skill, float]]:
        """Skills ascending by value; ties keep the canonical skill order."""
        return sorted(((skill, self.get(skill)) for skill in Skill), key=lambda p: p[1])

    @property
    def weakest(self) -> Skill:
        return self.ranked()[0][0]

    @property
    def strongest(self) -> Skill:
        return self.ranked()[-1][0]
