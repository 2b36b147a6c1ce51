"""Session lifecycle: build batch → present → score → update profile → advance."""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from puzzlesleuth.config.settings import Settings
from puzzlesleuth.engine.adaptive import AdaptiveState, build_adaptive_state
from puzzlesleuth.engine.profile import update_skill_profile
from puzzlesleuth.engine.scoring import (
    PuzzleAttemptResult,
    score_puzzle_attempt,
    should_decrease_difficulty,
    should_increase_difficulty,
)
from puzzlesleuth.engine.selector import PuzzleConfig, RandomSource
from puzzlesleuth.engine.skills import CognitiveProfile, Tier, round_half_up
from puzzlesleuth.state.progress import AttemptRow, ProfileStore

logger = logging.getLogger(__name__)


class SessionError(RuntimeError):
    """Raised when the session lifecycle is driven out of order."""


class SessionStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"  # Puzzles remain in the batch
    BATCH_COMPLETE = "batch_complete"  # All puzzles answered, awaiting completion
    COMPLETE = "complete"


@dataclass
class AttemptOutcome:
    puzzle: PuzzleConfig
    result: PuzzleAttemptResult
    score: float
    xp_gained: int
    profile_before: CognitiveProfile
    profile_after: CognitiveProfile
    increase_difficulty: bool
    decrease_difficulty: bool


@dataclass
class SessionRecord:
    session_id: str
    player_id: str
    zone_id: int
    tier: Tier
    started_at: str
    adaptive_state: AdaptiveState
    attempts: list[AttemptOutcome] = field(default_factory=list)
    completed_at: Optional[str] = None

    @property
    def puzzles_completed(self) -> int:
        return len(self.attempts)

    @property
    def total_score(self) -> float:
        return sum(a.score for a in self.attempts)

    @property
    def total_xp(self) -> int:
        return sum(a.xp_gained for a in self.attempts)

    @property
    def is_finished(self) -> bool:
        return self.puzzles_completed >= len(self.adaptive_state.next_puzzles)

    @property
    def progress_fraction(self) -> float:
        total = len(self.adaptive_state.next_puzzles)
        if total == 0:
            return 1.0
        return self.puzzles_completed / total


class SessionOrchestrator:
    """Owns the current profile for one player and threads it through the engine.

    The batch is generated once at session start; profile updates made while
    playing only influence the next session's batch.
    """

    def __init__(
        self,
        player_id: str,
        store: Optional[ProfileStore] = None,
        settings: Optional[Settings] = None,
        rng: Optional[RandomSource] = None,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        self.player_id = player_id
        self.settings = settings or Settings()
        self.store = store
        self._rng = rng
        self._clock_ms = clock_ms

        self.profile = CognitiveProfile.neutral()
        self.tier = self.settings.default_tier
        self.session_progression = 0
        if store is not None:
            player = store.ensure_player(player_id, self.tier)
            self.profile = player.profile
            self.tier = player.tier
            self.session_progression = player.session_progression

        self.session: Optional[SessionRecord] = None
        self.status = SessionStatus.IDLE

    def _new_rng(self) -> RandomSource:
        if self._rng is not None:
            return self._rng
        return random.Random(self.settings.rng_seed)

    @property
    def current_puzzle(self) -> Optional[PuzzleConfig]:
        if self.session is None or self.status is not SessionStatus.IN_PROGRESS:
            return None
        return self.session.adaptive_state.next_puzzles[self.session.puzzles_completed]

    def start_session(self, zone_id: int = 1, tier: Optional[Tier] = None) -> SessionRecord:
        if self.status in (SessionStatus.IN_PROGRESS, SessionStatus.BATCH_COMPLETE):
            raise SessionError("A session is already in progress")

        if tier is not None and Tier(tier) is not self.tier:
            self.tier = Tier(tier)
            if self.store is not None:
                self.store.set_tier(self.player_id, self.tier)

        state = build_adaptive_state(
            self.profile,
            self.tier,
            self.session_progression,
            count=self.settings.batch_size,
            rng=self._new_rng(),
            clock_ms=self._clock_ms,
        )
        self.session = SessionRecord(
            session_id=uuid.uuid4().hex,
            player_id=self.player_id,
            zone_id=zone_id,
            tier=self.tier,
            started_at=datetime.now().isoformat(),
            adaptive_state=state,
        )
        self.status = SessionStatus.IN_PROGRESS if state.next_puzzles else SessionStatus.BATCH_COMPLETE
        if self.store is not None:
            self.store.start_session(
                self.session.session_id, self.player_id, zone_id, self.session.started_at,
            )
        logger.info(
            "session %s started for %s (tier=%s, progression=%d, weakest=%s)",
            self.session.session_id, self.player_id, self.tier.value,
            self.session_progression, state.weakest_skill.value,
        )
        return self.session

    def complete_puzzle(
        self,
        solved: bool,
        time_taken: float,
        actual_moves: int,
        attempts_used: int = 0,
        hints_used: int = 0,
        max_time: Optional[float] = None,
    ) -> AttemptOutcome:
        puzzle = self.current_puzzle
        if puzzle is None or self.session is None:
            raise SessionError("No puzzle is awaiting an answer")

        result = PuzzleAttemptResult(
            solved=solved,
            time_taken=time_taken,
            max_time=max_time if max_time is not None else self.settings.max_time_seconds,
            optimal_moves=puzzle.optimal_moves,
            actual_moves=actual_moves,
            attempts_used=attempts_used,
            hints_used=hints_used,
        )
        score = score_puzzle_attempt(result)
        before = self.profile
        self.profile = update_skill_profile(before, puzzle.type, score)

        outcome = AttemptOutcome(
            puzzle=puzzle,
            result=result,
            score=score,
            xp_gained=round_half_up(score / 2),
            profile_before=before,
            profile_after=self.profile,
            increase_difficulty=should_increase_difficulty(result),
            decrease_difficulty=should_decrease_difficulty(result),
        )
        self.session.attempts.append(outcome)

        if self.store is not None:
            self.store.save_profile(self.player_id, self.profile)
            self.store.record_attempt(AttemptRow(
                session_id=self.session.session_id,
                player_id=self.player_id,
                puzzle_type=puzzle.type.value,
                difficulty=puzzle.difficulty.value,
                difficulty_rating=puzzle.difficulty_rating,
                solved=solved,
                score=score,
                time_taken=time_taken,
                attempts_used=attempts_used,
                hints_used=hints_used,
                optimal_moves=puzzle.optimal_moves,
                actual_moves=actual_moves,
            ))

        if self.session.is_finished:
            self.status = SessionStatus.BATCH_COMPLETE
        return outcome

    def complete_session(self) -> SessionRecord:
        if self.session is None or self.status not in (
            SessionStatus.IN_PROGRESS, SessionStatus.BATCH_COMPLETE,
        ):
            raise SessionError("No session to complete")

        session = self.session
        session.completed_at = datetime.now().isoformat()
        if self.store is not None:
            self.store.finish_session(
                session.session_id, session.completed_at,
                session.puzzles_completed, session.total_score,
            )
            self.session_progression = self.store.increment_progression(self.player_id)
        else:
            self.session_progression += 1

        self.status = SessionStatus.COMPLETE
        logger.info(
            "session %s completed: %d puzzles, score %.1f",
            session.session_id, session.puzzles_completed, session.total_score,
        )
        return session
