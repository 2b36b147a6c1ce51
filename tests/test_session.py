"""Tests for the session orchestrator."""

import random

import pytest

from puzzlesleuth.config.settings import Settings
from puzzlesleuth.engine.profile import update_skill_profile
from puzzlesleuth.engine.session import SessionError, SessionOrchestrator, SessionStatus
from puzzlesleuth.engine.skills import CognitiveProfile, Tier, round_half_up


@pytest.fixture
def orchestrator(store, settings, fixed_clock):
    return SessionOrchestrator("kid-1", store=store, settings=settings, clock_ms=fixed_clock)


def _play_all(orchestrator, **kwargs):
    outcomes = []
    while orchestrator.current_puzzle is not None:
        outcomes.append(orchestrator.complete_puzzle(
            solved=True, time_taken=kwargs.get("time_taken", 12), actual_moves=kwargs.get("moves", 3),
        ))
    return outcomes


class TestLifecycle:
    def test_new_player_starts_neutral(self, orchestrator, store):
        assert orchestrator.profile == CognitiveProfile.neutral()
        assert store.get_player("kid-1").tier is Tier.DETECTIVE
        assert orchestrator.status is SessionStatus.IDLE
        assert orchestrator.current_puzzle is None

    def test_start_builds_batch(self, orchestrator, settings):
        session = orchestrator.start_session(zone_id=2)
        assert len(session.adaptive_state.next_puzzles) == settings.batch_size
        assert orchestrator.status is SessionStatus.IN_PROGRESS
        assert orchestrator.current_puzzle == session.adaptive_state.next_puzzles[0]

    def test_cannot_start_twice(self, orchestrator):
        orchestrator.start_session()
        with pytest.raises(SessionError):
            orchestrator.start_session()

    def test_complete_without_session(self, orchestrator):
        with pytest.raises(SessionError):
            orchestrator.complete_puzzle(solved=True, time_taken=5, actual_moves=1)
        with pytest.raises(SessionError):
            orchestrator.complete_session()

    def test_full_session(self, orchestrator, store):
        session = orchestrator.start_session()
        outcomes = _play_all(orchestrator)
        assert len(outcomes) == 5
        assert orchestrator.status is SessionStatus.BATCH_COMPLETE
        with pytest.raises(SessionError):
            orchestrator.complete_puzzle(solved=True, time_taken=5, actual_moves=1)

        finished = orchestrator.complete_session()
        assert finished.completed_at is not None
        assert orchestrator.status is SessionStatus.COMPLETE
        assert orchestrator.session_progression == 1

        player = store.get_player("kid-1")
        assert player.session_progression == 1
        assert player.profile == orchestrator.profile
        assert len(store.get_attempts("kid-1", session.session_id)) == 5
        row = store.get_session(session.session_id)
        assert row["puzzles_completed"] == 5
        assert row["total_score"] == pytest.approx(finished.total_score)

    def test_next_session_after_complete(self, orchestrator):
        orchestrator.start_session()
        orchestrator.complete_session()
        second = orchestrator.start_session()
        assert second.adaptive_state.session_progression == 1

    def test_tier_change_persisted(self, orchestrator, store):
        session = orchestrator.start_session(tier=Tier.MASTER_DETECTIVE)
        assert session.tier is Tier.MASTER_DETECTIVE
        assert store.get_player("kid-1").tier is Tier.MASTER_DETECTIVE


class TestScoringFlow:
    def test_attempt_uses_puzzle_optimal_moves(self, orchestrator):
        orchestrator.start_session()
        puzzle = orchestrator.current_puzzle
        outcome = orchestrator.complete_puzzle(solved=True, time_taken=30, actual_moves=50)
        assert outcome.result.optimal_moves == puzzle.optimal_moves
        assert outcome.result.max_time == 60.0
        assert outcome.xp_gained == round_half_up(outcome.score / 2)

    def test_half_point_xp_rounds_up(self, orchestrator):
        orchestrator.start_session()
        puzzle = orchestrator.current_puzzle
        outcome = orchestrator.complete_puzzle(
            solved=True, time_taken=30, actual_moves=puzzle.optimal_moves,
            attempts_used=1, hints_used=13,
        )
        assert outcome.score == 85.0
        assert outcome.xp_gained == 43

    def test_profile_threaded_through_updates(self, orchestrator):
        orchestrator.start_session()
        puzzle = orchestrator.current_puzzle
        before = orchestrator.profile
        outcome = orchestrator.complete_puzzle(solved=False, time_taken=45, actual_moves=2)
        assert outcome.score == 0
        assert outcome.decrease_difficulty
        assert orchestrator.profile == update_skill_profile(before, puzzle.type, 0)

    def test_batch_not_reselected_mid_session(self, orchestrator):
        session = orchestrator.start_session()
        batch = session.adaptive_state.next_puzzles
        _play_all(orchestrator)
        assert session.adaptive_state.next_puzzles == batch

    def test_seeded_settings_reproduce_batch(self, tmp_path, fixed_clock):
        settings = Settings(data_dir=tmp_path, rng_seed=3)
        a = SessionOrchestrator("a", settings=settings, clock_ms=fixed_clock).start_session()
        b = SessionOrchestrator("b", settings=settings, clock_ms=fixed_clock).start_session()
        assert a.adaptive_state == b.adaptive_state


class TestInMemory:
    def test_works_without_store(self, fixed_clock):
        orchestrator = SessionOrchestrator("solo", rng=random.Random(5), clock_ms=fixed_clock)
        orchestrator.start_session()
        _play_all(orchestrator, time_taken=3, moves=1)
        session = orchestrator.complete_session()
        assert session.puzzles_completed == 5
        assert session.progress_fraction == 1.0
        assert orchestrator.session_progression == 1

    def test_single_puzzle_batch(self, tmp_path):
        settings = Settings(data_dir=tmp_path, batch_size=1)
        orchestrator = SessionOrchestrator("x", settings=settings)
        orchestrator.start_session()
        orchestrator.complete_puzzle(solved=True, time_taken=1, actual_moves=1)
        assert orchestrator.status is SessionStatus.BATCH_COMPLETE
