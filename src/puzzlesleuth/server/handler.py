"""Server handler: dispatches JSON-lines requests to engine components."""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from puzzlesleuth.config.settings import Settings
from puzzlesleuth.engine.adaptive import AdaptiveState, build_adaptive_state
from puzzlesleuth.engine.insights import PuzzleInsight, explain_puzzle
from puzzlesleuth.engine.profile import update_skill_profile
from puzzlesleuth.engine.scoring import (
    DEFAULT_MAX_TIME_SECONDS,
    PuzzleAttemptResult,
    score_puzzle_attempt,
)
from puzzlesleuth.engine.selector import PuzzleConfig, select_next_puzzles
from puzzlesleuth.engine.session import AttemptOutcome, SessionOrchestrator, SessionRecord
from puzzlesleuth.engine.skills import CognitiveProfile, PuzzleType, Tier
from puzzlesleuth.state.progress import ProfileStore

from .protocol import Notification

logger = logging.getLogger(__name__)


def _puzzle_to_dict(puzzle: PuzzleConfig) -> dict:
    return {
        "type": puzzle.type.value,
        "difficulty": puzzle.difficulty.value,
        "difficultyRating": puzzle.difficulty_rating,
        "optimalMoves": puzzle.optimal_moves,
        "seed": puzzle.seed,
    }


def _state_to_dict(state: AdaptiveState) -> dict:
    return {
        "profile": state.profile.as_dict(),
        "nextPuzzles": [_puzzle_to_dict(p) for p in state.next_puzzles],
        "weakestSkill": state.weakest_skill.value,
        "strongestSkill": state.strongest_skill.value,
        "sessionProgression": state.session_progression,
    }


def _insight_to_dict(insight: PuzzleInsight) -> dict:
    return {
        "index": insight.index,
        "profileAverage": insight.profile_average,
        "weakestValue": insight.weakest_value,
        "strongestValue": insight.strongest_value,
        "balanceScore": insight.balance_score,
        "trend": insight.trend.value,
        "reasons": list(insight.reasons),
    }


def _outcome_to_dict(outcome: AttemptOutcome) -> dict:
    return {
        "puzzle": _puzzle_to_dict(outcome.puzzle),
        "score": outcome.score,
        "xpGained": outcome.xp_gained,
        "profile": outcome.profile_after.as_dict(),
        "increaseDifficulty": outcome.increase_difficulty,
        "decreaseDifficulty": outcome.decrease_difficulty,
    }


def _session_to_dict(session: SessionRecord) -> dict:
    return {
        "sessionId": session.session_id,
        "playerId": session.player_id,
        "zoneId": session.zone_id,
        "tier": session.tier.value,
        "startedAt": session.started_at,
        "completedAt": session.completed_at,
        "puzzlesCompleted": session.puzzles_completed,
        "totalScore": session.total_score,
        "totalXp": session.total_xp,
        "adaptiveState": _state_to_dict(session.adaptive_state),
    }


def _attempt_from_params(params: dict) -> PuzzleAttemptResult:
    return PuzzleAttemptResult(
        solved=bool(params["solved"]),
        time_taken=float(params["timeTaken"]),
        max_time=float(params.get("maxTime", DEFAULT_MAX_TIME_SECONDS)),
        optimal_moves=int(params.get("optimalMoves", 1)),
        actual_moves=int(params.get("actualMoves", 1)),
        attempts_used=int(params.get("attemptsUsed", 0)),
        hints_used=int(params.get("hintsUsed", 0)),
    )


def _profile_from_params(params: dict) -> CognitiveProfile:
    return CognitiveProfile.from_dict(params.get("profile") or {})


class ServerHandler:
    """Routes incoming requests to engine functions and returns result dicts."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        write_notification: Optional[Callable[[Notification], None]] = None,
        store: Optional[ProfileStore] = None,
    ):
        self.settings = settings or Settings.load()
        self._write_notification = write_notification or (lambda n: None)
        self.store = store or ProfileStore(db_path=self.settings.db_path)
        self._sessions: dict[str, SessionOrchestrator] = {}

    async def dispatch(self, msg: dict) -> dict:
        """Route a request message to the appropriate handler method."""
        method = msg.get("method", "")
        params = msg.get("params", {})

        handler_map = {
            "scorePuzzleAttempt": self._score_puzzle_attempt,
            "updateSkillProfile": self._update_skill_profile,
            "selectNextPuzzles": self._select_next_puzzles,
            "buildAdaptiveState": self._build_adaptive_state,
            "explainPuzzle": self._explain_puzzle,
            "getPlayer": self._get_player,
            "startSession": self._start_session,
            "completePuzzle": self._complete_puzzle,
            "completeSession": self._complete_session,
            "resetPlayer": self._reset_player,
        }

        handler = handler_map.get(method)
        if handler is None:
            raise ValueError(f"Unknown method: {method}")

        logger.debug("dispatch %s", method)
        return await handler(params)

    def _rng(self, params: dict) -> random.Random:
        seed = params.get("rngSeed", self.settings.rng_seed)
        return random.Random(seed)

    def _orchestrator(self, player_id: str) -> SessionOrchestrator:
        orchestrator = self._sessions.get(player_id)
        if orchestrator is None:
            orchestrator = SessionOrchestrator(
                player_id, store=self.store, settings=self.settings,
            )
            self._sessions[player_id] = orchestrator
        return orchestrator

    async def _score_puzzle_attempt(self, params: dict) -> dict:
        return {"score": score_puzzle_attempt(_attempt_from_params(params))}

    async def _update_skill_profile(self, params: dict) -> dict:
        profile = _profile_from_params(params)
        updated = update_skill_profile(
            profile, PuzzleType(params["puzzleType"]), float(params["score"]),
        )
        return {"profile": updated.as_dict()}

    async def _select_next_puzzles(self, params: dict) -> dict:
        puzzles = select_next_puzzles(
            _profile_from_params(params),
            Tier(params.get("tier", self.settings.default_tier)),
            int(params.get("sessionProgression", 0)),
            int(params.get("count", self.settings.batch_size)),
            rng=self._rng(params),
        )
        return {"puzzles": [_puzzle_to_dict(p) for p in puzzles]}

    async def _build_adaptive_state(self, params: dict) -> dict:
        state = build_adaptive_state(
            _profile_from_params(params),
            Tier(params.get("tier", self.settings.default_tier)),
            int(params.get("sessionProgression", 0)),
            count=int(params.get("count", self.settings.batch_size)),
            rng=self._rng(params),
        )
        return _state_to_dict(state)

    async def _explain_puzzle(self, params: dict) -> dict:
        orchestrator = self._sessions.get(params["playerId"])
        if orchestrator is None or orchestrator.session is None:
            raise ValueError("No session started for this player")
        index = int(params.get("index", orchestrator.session.puzzles_completed))
        insight = explain_puzzle(orchestrator.session.adaptive_state, index)
        if insight is None:
            raise ValueError(f"Puzzle index {index} out of range")
        return _insight_to_dict(insight)

    async def _get_player(self, params: dict) -> dict:
        player = self.store.get_player(params["playerId"])
        if player is None:
            return {"exists": False}
        return {
            "exists": True,
            "playerId": player.player_id,
            "tier": player.tier.value,
            "profile": player.profile.as_dict(),
            "sessionProgression": player.session_progression,
            "sessionsCompleted": player.sessions_completed,
            "weakestSkill": player.profile.weakest.value,
            "strongestSkill": player.profile.strongest.value,
        }

    async def _start_session(self, params: dict) -> dict:
        orchestrator = self._orchestrator(params["playerId"])
        tier = Tier(params["tier"]) if "tier" in params else None
        session = orchestrator.start_session(zone_id=int(params.get("zoneId", 1)), tier=tier)
        return _session_to_dict(session)

    async def _complete_puzzle(self, params: dict) -> dict:
        orchestrator = self._orchestrator(params["playerId"])
        outcome = orchestrator.complete_puzzle(
            solved=bool(params["solved"]),
            time_taken=float(params["timeTaken"]),
            actual_moves=int(params.get("actualMoves", 1)),
            attempts_used=int(params.get("attemptsUsed", 0)),
            hints_used=int(params.get("hintsUsed", 0)),
            max_time=params.get("maxTime"),
        )
        result = _outcome_to_dict(outcome)
        next_puzzle = orchestrator.current_puzzle
        result["nextPuzzle"] = _puzzle_to_dict(next_puzzle) if next_puzzle else None
        result["status"] = orchestrator.status.value
        return result

    async def _complete_session(self, params: dict) -> dict:
        player_id = params["playerId"]
        orchestrator = self._orchestrator(player_id)
        session = orchestrator.complete_session()
        result = _session_to_dict(session)
        result["sessionProgression"] = orchestrator.session_progression
        self._write_notification(Notification("sessionCompleted", {
            "playerId": player_id,
            "sessionId": session.session_id,
            "totalScore": session.total_score,
        }))
        return result

    async def _reset_player(self, params: dict) -> dict:
        player_id = params["playerId"]
        self.store.reset_player(player_id)
        self._sessions.pop(player_id, None)
        return {"ok": True}
