"""Tests for the SQLite profile store."""

import pytest

from puzzlesleuth.engine.skills import CognitiveProfile, Tier
from puzzlesleuth.state.progress import AttemptRow, ProfileStore


def _attempt(session_id="s1", score=80.0):
    return AttemptRow(
        session_id=session_id, player_id="p1", puzzle_type="gear", difficulty="medium",
        difficulty_rating=51.234, solved=True, score=score, time_taken=20.5,
        attempts_used=1, hints_used=0, optimal_moves=5, actual_moves=6,
    )


class TestPlayers:
    def test_unknown_player(self, store):
        assert store.get_player("nobody") is None

    def test_ensure_player_creates_once(self, store):
        created = store.ensure_player("p1", Tier.JR_DETECTIVE)
        assert created.profile == CognitiveProfile.neutral()
        assert created.tier is Tier.JR_DETECTIVE
        again = store.ensure_player("p1", Tier.MASTER_DETECTIVE)
        assert again.tier is Tier.JR_DETECTIVE

    def test_profile_precision_preserved(self, store):
        store.ensure_player("p1")
        profile = CognitiveProfile(patterns=49.123456, spatial=12.5, logic=0.01,
                                   lateral=99.999, sequencing=33.3333)
        store.save_profile("p1", profile)
        assert store.get_player("p1").profile == profile

    def test_progression_increments(self, store):
        store.ensure_player("p1")
        assert store.increment_progression("p1") == 1
        assert store.increment_progression("p1") == 2
        player = store.get_player("p1")
        assert player.session_progression == 2
        assert player.sessions_completed == 2

    def test_set_tier(self, store):
        store.ensure_player("p1")
        store.set_tier("p1", Tier.MASTER_DETECTIVE)
        assert store.get_player("p1").tier is Tier.MASTER_DETECTIVE

    def test_persists_across_instances(self, tmp_path):
        db = tmp_path / "p.db"
        ProfileStore(db_path=db).ensure_player("p1")
        assert ProfileStore(db_path=db).get_player("p1") is not None


class TestHistory:
    def test_attempts_filtered_by_session(self, store):
        store.ensure_player("p1")
        store.record_attempt(_attempt("s1", 80))
        store.record_attempt(_attempt("s2", 40))
        assert [a.score for a in store.get_attempts("p1")] == [80, 40]
        only = store.get_attempts("p1", "s2")
        assert len(only) == 1
        assert only[0].difficulty_rating == pytest.approx(51.234)
        assert only[0].solved is True

    def test_sessions(self, store):
        store.start_session("s1", "p1", 3, "2026-01-01T10:00:00")
        assert store.get_session("s1")["completed_at"] is None
        store.finish_session("s1", "2026-01-01T10:10:00", 5, 412.5)
        row = store.get_session("s1")
        assert row["zone_id"] == 3
        assert row["puzzles_completed"] == 5
        assert row["total_score"] == 412.5
        assert store.get_session("missing") is None

    def test_reset_player(self, store):
        store.ensure_player("p1")
        store.start_session("s1", "p1", 1, "2026-01-01T10:00:00")
        store.record_attempt(_attempt())
        store.reset_player("p1")
        assert store.get_player("p1") is None
        assert store.get_attempts("p1") == []
        assert store.get_session("s1") is None
