"""SQLite-backed player profiles, sessions and puzzle attempts for PuzzleSleuth."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from puzzlesleuth.engine.skills import CognitiveProfile, Skill, Tier

_SKILL_COLUMNS = [s.value for s in Skill]


@dataclass
class PlayerRecord:
    player_id: str
    tier: Tier
    profile: CognitiveProfile
    session_progression: int
    sessions_completed: int
    updated_at: str


@dataclass
class AttemptRow:
    session_id: str
    player_id: str
    puzzle_type: str
    difficulty: str
    difficulty_rating: float
    solved: bool
    score: float
    time_taken: float
    attempts_used: int
    hints_used: int
    optimal_moves: int
    actual_moves: int
    created_at: str = ""


class ProfileStore:
    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or (Path.home() / ".puzzlesleuth" / "profiles.db")
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._conn() as conn:
            # Skill columns are REAL so repeated updates do not drift from rounding.
            conn.execute("""
                CREATE TABLE IF NOT EXISTS players (
                    player_id TEXT PRIMARY KEY,
                    tier TEXT NOT NULL,
                    patterns REAL NOT NULL DEFAULT 50,
                    spatial REAL NOT NULL DEFAULT 50,
                    logic REAL NOT NULL DEFAULT 50,
                    lateral REAL NOT NULL DEFAULT 50,
                    sequencing REAL NOT NULL DEFAULT 50,
                    session_progression INTEGER NOT NULL DEFAULT 0,
                    sessions_completed INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    session_id TEXT PRIMARY KEY,
                    player_id TEXT NOT NULL,
                    zone_id INTEGER NOT NULL,
                    started_at TEXT NOT NULL,
                    completed_at TEXT,
                    puzzles_completed INTEGER NOT NULL DEFAULT 0,
                    total_score REAL NOT NULL DEFAULT 0
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS puzzle_attempts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    puzzle_type TEXT NOT NULL,
                    difficulty TEXT NOT NULL,
                    difficulty_rating REAL NOT NULL,
                    solved INTEGER NOT NULL,
                    score REAL NOT NULL,
                    time_taken REAL NOT NULL,
                    attempts_used INTEGER NOT NULL,
                    hints_used INTEGER NOT NULL,
                    optimal_moves INTEGER NOT NULL,
                    actual_moves INTEGER NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def get_player(self, player_id: str) -> Optional[PlayerRecord]:
        with self._conn() as conn:
            row = conn.execute(
                f"""SELECT player_id, tier, {', '.join(_SKILL_COLUMNS)},
                           session_progression, sessions_completed, updated_at
                    FROM players WHERE player_id = ?""",
                (player_id,),
            ).fetchone()
        if not row:
            return None
        skills = dict(zip(_SKILL_COLUMNS, row[2:7]))
        return PlayerRecord(
            player_id=row[0],
            tier=Tier(row[1]),
            profile=CognitiveProfile.from_dict(skills),
            session_progression=row[7],
            sessions_completed=row[8],
            updated_at=row[9],
        )

    def ensure_player(self, player_id: str, tier: Tier = Tier.DETECTIVE) -> PlayerRecord:
        """Return the player, creating them with a neutral profile if new."""
        existing = self.get_player(player_id)
        if existing is not None:
            return existing
        profile = CognitiveProfile.neutral()
        now = datetime.now().isoformat()
        with self._conn() as conn:
            conn.execute(
                f"""INSERT INTO players (player_id, tier, {', '.join(_SKILL_COLUMNS)}, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (player_id, Tier(tier).value, *[profile.get(s) for s in Skill], now),
            )
        return self.get_player(player_id)

    def save_profile(self, player_id: str, profile: CognitiveProfile) -> None:
        assignments = ", ".join(f"{col} = ?" for col in _SKILL_COLUMNS)
        now = datetime.now().isoformat()
        with self._conn() as conn:
            conn.execute(
                f"UPDATE players SET {assignments}, updated_at = ? WHERE player_id = ?",
                (*[profile.get(s) for s in Skill], now, player_id),
            )

    def set_tier(self, player_id: str, tier: Tier) -> None:
        with self._conn() as conn:
            conn.execute(
                "UPDATE players SET tier = ?, updated_at = ? WHERE player_id = ?",
                (Tier(tier).value, datetime.now().isoformat(), player_id),
            )

    def increment_progression(self, player_id: str) -> int:
        with self._conn() as conn:
            conn.execute(
                """UPDATE players
                   SET session_progression = session_progression + 1,
                       sessions_completed = sessions_completed + 1,
                       updated_at = ?
                   WHERE player_id = ?""",
                (datetime.now().isoformat(), player_id),
            )
            row = conn.execute(
                "SELECT session_progression FROM players WHERE player_id = ?",
                (player_id,),
            ).fetchone()
        return row[0] if row else 0

    def start_session(self, session_id: str, player_id: str, zone_id: int, started_at: str) -> None:
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO sessions (session_id, player_id, zone_id, started_at)
                   VALUES (?, ?, ?, ?)""",
                (session_id, player_id, zone_id, started_at),
            )

    def finish_session(
        self,
        session_id: str,
        completed_at: str,
        puzzles_completed: int,
        total_score: float,
    ) -> None:
        with self._conn() as conn:
            conn.execute(
                """UPDATE sessions
                   SET completed_at = ?, puzzles_completed = ?, total_score = ?
                   WHERE session_id = ?""",
                (completed_at, puzzles_completed, total_score, session_id),
            )

    def get_session(self, session_id: str) -> Optional[dict]:
        with self._conn() as conn:
            row = conn.execute(
                """SELECT session_id, player_id, zone_id, started_at, completed_at,
                          puzzles_completed, total_score
                   FROM sessions WHERE session_id = ?""",
                (session_id,),
            ).fetchone()
        if not row:
            return None
        keys = ["session_id", "player_id", "zone_id", "started_at", "completed_at",
                "puzzles_completed", "total_score"]
        return dict(zip(keys, row))

    def record_attempt(self, attempt: AttemptRow) -> None:
        created_at = attempt.created_at or datetime.now().isoformat()
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO puzzle_attempts
                   (session_id, player_id, puzzle_type, difficulty, difficulty_rating, solved,
                    score, time_taken, attempts_used, hints_used, optimal_moves, actual_moves,
                    created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    attempt.session_id, attempt.player_id, attempt.puzzle_type,
                    attempt.difficulty, attempt.difficulty_rating, int(attempt.solved),
                    attempt.score, attempt.time_taken, attempt.attempts_used,
                    attempt.hints_used, attempt.optimal_moves, attempt.actual_moves,
                    created_at,
                ),
            )

    def get_attempts(self, player_id: str, session_id: Optional[str] = None) -> list[AttemptRow]:
        query = """SELECT session_id, player_id, puzzle_type, difficulty, difficulty_rating,
                          solved, score, time_taken, attempts_used, hints_used,
                          optimal_moves, actual_moves, created_at
                   FROM puzzle_attempts WHERE player_id = ?"""
        params: tuple = (player_id,)
        if session_id is not None:
            query += " AND session_id = ?"
            params += (session_id,)
        query += " ORDER BY id"
        with self._conn() as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            AttemptRow(
                session_id=r[0], player_id=r[1], puzzle_type=r[2], difficulty=r[3],
                difficulty_rating=r[4], solved=bool(r[5]), score=r[6], time_taken=r[7],
                attempts_used=r[8], hints_used=r[9], optimal_moves=r[10],
                actual_moves=r[11], created_at=r[12],
            )
            for r in rows
        ]

    def reset_player(self, player_id: str) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM puzzle_attempts WHERE player_id = ?", (player_id,))
            conn.execute("DELETE FROM sessions WHERE player_id = ?", (player_id,))
            conn.execute("DELETE FROM players WHERE player_id = ?", (player_id,))
