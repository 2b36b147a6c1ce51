"""Momentum/decay update of the cognitive skill profile.

Applied once per completed puzzle. The model is attempt-indexed: skills the
puzzle did not train decay by a fixed factor per completion, not per unit
of elapsed time.
"""

from __future__ import annotations

import logging

from puzzlesleuth.engine.skills import SKILL_MAPPING, CognitiveProfile, PuzzleType, Skill, clamp

logger = logging.getLogger(__name__)

SKILL_DECAY_RATE = 0.98
PRIMARY_SKILL_LEARNING_RATE = 0.1
SECONDARY_SKILL_LEARNING_RATE = 0.05
BASE_SKILL_MOMENTUM = 0.9
SECONDARY_SKILL_MOMENTUM = BASE_SKILL_MOMENTUM + 0.05


def update_skill_profile(
    profile: CognitiveProfile,
    puzzle_type: PuzzleType,
    score: float,
) -> CognitiveProfile:
    """Return a new profile reflecting ``score`` on a puzzle of ``puzzle_type``.

    Every term reads the pre-update value of its own dimension, so the order
    in which skills are processed does not matter.
    """
    mapping = SKILL_MAPPING[PuzzleType(puzzle_type)]
    updated: dict[Skill, float] = {}

    for skill in Skill:
        old = profile.get(skill)
        if skill is mapping.primary:
            new = BASE_SKILL_MOMENTUM * old + PRIMARY_SKILL_LEARNING_RATE * score
        elif skill in mapping.secondary:
            weight = mapping.secondary[skill]
            new = SECONDARY_SKILL_MOMENTUM * old + SECONDARY_SKILL_LEARNING_RATE * (score * weight)
        else:
            new = SKILL_DECAY_RATE * old
        updated[skill] = clamp(new)

    result = profile.with_values(updated)
    logger.debug(
        "profile update type=%s score=%.2f -> %s",
        PuzzleType(puzzle_type).value, score, result.as_dict(),
    )
    return result
