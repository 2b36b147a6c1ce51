"""Shared fixtures for PuzzleSleuth tests."""

from __future__ import annotations

import pytest

from puzzlesleuth.config.settings import Settings
from puzzlesleuth.engine.skills import CognitiveProfile
from puzzlesleuth.state.progress import ProfileStore


@pytest.fixture
def neutral_profile():
    return CognitiveProfile.neutral()


@pytest.fixture
def weak_sequencing_profile():
    """All skills neutral except a sharply lower sequencing score."""
    return CognitiveProfile(patterns=50, spatial=50, logic=50, lateral=50, sequencing=20)


@pytest.fixture
def fixed_clock():
    return lambda: 1_700_000_000_000


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data", rng_seed=7)


@pytest.fixture
def store(tmp_path):
    return ProfileStore(db_path=tmp_path / "data" / "test_profiles.db")
