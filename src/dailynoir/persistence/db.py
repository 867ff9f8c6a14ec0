"""SQLite persistence for player progress, aggregate counters and profiles."""

from __future__ import annotations

from contextlib import contextmanager
import copy
from dataclasses import replace
from pathlib import Path
import json
import logging
import sqlite3
import threading
from typing import Callable, Iterable, Iterator, TypeVar

from dailynoir import config
from dailynoir.domain.enums import GameMode
from dailynoir.domain.errors import StorageUnavailable
from dailynoir.investigation.progress import PlayerProgress, WeeklyProgress
from dailynoir.profiling.profile import DetectiveProfile

logger = logging.getLogger("dailynoir.store")

R = TypeVar("R")
T = TypeVar("T")


class GameStore:
    """Durable keyed records with version-checked writes.

    Progress rows are keyed by ``(session_id, player_id, mode)`` and profiles
    by ``player_id``. Every row carries a ``version`` that grows by one on each
    write; ``update_*`` only commits when the version it read is still the one
    on disk, retrying a bounded number of times otherwise.
    """

    def __init__(
        self,
        path: Path | str = config.DB_PATH,
        timeout: float = config.STORE_TIMEOUT_SECONDS,
        max_retries: int = config.STORE_MAX_RETRIES,
    ) -> None:
        self.path = str(path)
        self.max_retries = max_retries
        self._lock = threading.RLock()
        try:
            self.conn = sqlite3.connect(self.path, timeout=timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StorageUnavailable(f"Cannot open store at {self.path}: {exc}") from exc
        self.conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    @contextmanager
    def _guard(self, action: str) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            try:
                yield self.conn.cursor()
            except sqlite3.Error as exc:
                try:
                    self.conn.rollback()
                except sqlite3.Error:
                    logger.debug("Rollback after failed %s also failed", action)
                raise StorageUnavailable(f"Store failed during {action}: {exc}") from exc

    # Progress

    def get_progress(
        self,
        session_id: str,
        player_id: str,
        case_id: str,
        day_number: int = 1,
    ) -> PlayerProgress:
        return self._get_or_create_progress(
            session_id,
            player_id,
            GameMode.DAILY,
            lambda: PlayerProgress(case_id=case_id, day_number=day_number),
            PlayerProgress.from_dict,
        )

    def save_progress(self, session_id: str, player_id: str, progress: PlayerProgress) -> PlayerProgress:
        return self._save_progress(session_id, player_id, GameMode.DAILY, progress)

    def update_progress(
        self,
        session_id: str,
        player_id: str,
        default_factory: Callable[[], PlayerProgress],
        transform: Callable[[PlayerProgress], tuple[PlayerProgress, R]],
    ) -> tuple[PlayerProgress, R]:
        return self._update_progress(
            session_id,
            player_id,
            GameMode.DAILY,
            default_factory,
            transform,
            PlayerProgress.from_dict,
        )

    def get_weekly_progress(self, session_id: str, player_id: str, case_id: str) -> WeeklyProgress:
        return self._get_or_create_progress(
            session_id,
            player_id,
            GameMode.WEEKLY,
            lambda: WeeklyProgress(case_id=case_id),
            WeeklyProgress.from_dict,
        )

    def save_weekly_progress(self, session_id: str, player_id: str, progress: WeeklyProgress) -> WeeklyProgress:
        return self._save_progress(session_id, player_id, GameMode.WEEKLY, progress)

    def update_weekly_progress(
        self,
        session_id: str,
        player_id: str,
        default_factory: Callable[[], WeeklyProgress],
        transform: Callable[[WeeklyProgress], tuple[WeeklyProgress, R]],
    ) -> tuple[WeeklyProgress, R]:
        return self._update_progress(
            session_id,
            player_id,
            GameMode.WEEKLY,
            default_factory,
            transform,
            WeeklyProgress.from_dict,
        )

    def reset_progress(self, session_id: str, player_id: str) -> int:
        """Drop every progress row the player holds for the session."""
        with self._guard("reset_progress") as cur:
            cur.execute(
                "DELETE FROM progress WHERE session_id = ? AND player_id = ?",
                (session_id, player_id),
            )
            removed = cur.rowcount
            self.conn.commit()
        logger.info("Reset %d progress record(s) for %s in %s", removed, player_id, session_id)
        return removed

    def _read_progress(self, session_id: str, player_id: str, mode: GameMode) -> sqlite3.Row | None:
        with self._guard("read progress") as cur:
            cur.execute(
                "SELECT payload, version FROM progress WHERE session_id = ? AND player_id = ? AND mode = ?",
                (session_id, player_id, mode.value),
            )
            return cur.fetchone()

    def _save_progress(self, session_id, player_id, mode, progress):
        with self._guard("save progress") as cur:
            cur.execute(
                """
                INSERT INTO progress (session_id, player_id, mode, payload, version)
                VALUES (?, ?, ?, ?, 1)
                ON CONFLICT(session_id, player_id, mode) DO UPDATE SET
                    payload = excluded.payload,
                    version = progress.version + 1
                """,
                (session_id, player_id, mode.value, json.dumps(progress.to_dict())),
            )
            cur.execute(
                "SELECT version FROM progress WHERE session_id = ? AND player_id = ? AND mode = ?",
                (session_id, player_id, mode.value),
            )
            version = int(cur.fetchone()["version"])
            self.conn.commit()
        return replace(progress, version=version)

    def _get_or_create_progress(self, session_id, player_id, mode, default_factory, decode):
        progress, _ = self._update_progress(
            session_id, player_id, mode, default_factory, lambda current: (current, None), decode
        )
        return progress

    def _update_progress(self, session_id, player_id, mode, default_factory, transform, decode):
        def load():
            row = self._read_progress(session_id, player_id, mode)
            if row is None:
                return default_factory(), False
            stored = decode(json.loads(row["payload"]), int(row["version"]))
            fresh = default_factory()
            if stored.case_id != fresh.case_id:
                # A record left over from an earlier case reads as a fresh start;
                # the next write replaces it under the stored version.
                logger.info(
                    "Discarding %s progress for %s in %s: case %s is no longer active (now %s)",
                    mode.value,
                    player_id,
                    session_id,
                    stored.case_id,
                    fresh.case_id,
                )
                return replace(fresh, version=stored.version), True
            return stored, True

        def write(cur, current, updated, exists) -> bool:
            payload = json.dumps(updated.to_dict())
            if exists:
                cur.execute(
                    "UPDATE progress SET payload = ?, version = version + 1 "
                    "WHERE session_id = ? AND player_id = ? AND mode = ? AND version = ?",
                    (payload, session_id, player_id, mode.value, current.version),
                )
            else:
                cur.execute(
                    "INSERT OR IGNORE INTO progress (session_id, player_id, mode, payload, version) "
                    "VALUES (?, ?, ?, ?, 1)",
                    (session_id, player_id, mode.value, payload),
                )
            return cur.rowcount == 1

        return self._compare_and_swap(f"{mode.value} progress {session_id}/{player_id}", load, write, transform)

    # Version-checked write loop shared by progress and profiles.

    def _compare_and_swap(
        self,
        label: str,
        load: Callable[[], tuple[T, bool]],
        write: Callable[[sqlite3.Cursor, T, T, bool], bool],
        transform: Callable[[T], tuple[T, R]],
    ) -> tuple[T, R]:
        for attempt in range(1, self.max_retries + 1):
            with self._lock:
                current, exists = load()
                updated, outcome = transform(copy.deepcopy(current))
                if exists and updated == current:
                    return current, outcome
                with self._guard(f"update {label}") as cur:
                    if write(cur, current, updated, exists):
                        self.conn.commit()
                        version = current.version + 1 if exists else 1
                        return replace(updated, version=version), outcome
                    self.conn.rollback()
            logger.warning("Concurrent write on %s, retrying (attempt %d)", label, attempt)
        raise StorageUnavailable(f"Gave up updating {label} after {self.max_retries} attempts")

    # Counters

    def increment(self, key: str, amount: int = 1) -> int:
        with self._guard("increment") as cur:
            cur.execute(
                """
                INSERT INTO counters (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = value + excluded.value
                """,
                (key, amount),
            )
            cur.execute("SELECT value FROM counters WHERE key = ?", (key,))
            value = int(cur.fetchone()["value"])
            self.conn.commit()
        return value

    def get_counter(self, key: str) -> int:
        with self._guard("get_counter") as cur:
            cur.execute("SELECT value FROM counters WHERE key = ?", (key,))
            row = cur.fetchone()
        return int(row["value"]) if row is not None else 0

    def get_counters(self, keys: Iterable[str]) -> dict[str, int]:
        keys = list(keys)
        counters = {key: 0 for key in keys}
        if not keys:
            return counters
        placeholders = ", ".join("?" for _ in keys)
        with self._guard("get_counters") as cur:
            cur.execute(f"SELECT key, value FROM counters WHERE key IN ({placeholders})", keys)
            for row in cur.fetchall():
                counters[row["key"]] = int(row["value"])
        return counters

    # Profiles

    def _read_profile(self, player_id: str) -> sqlite3.Row | None:
        with self._guard("read profile") as cur:
            cur.execute("SELECT payload, version FROM profiles WHERE player_id = ?", (player_id,))
            return cur.fetchone()

    def get_profile(self, player_id: str) -> DetectiveProfile | None:
        row = self._read_profile(player_id)
        if row is None:
            return None
        return DetectiveProfile.from_dict(json.loads(row["payload"]), int(row["version"]))

    def save_profile(self, profile: DetectiveProfile) -> DetectiveProfile:
        with self._guard("save profile") as cur:
            cur.execute(
                """
                INSERT INTO profiles (player_id, payload, version, points)
                VALUES (?, ?, 1, ?)
                ON CONFLICT(player_id) DO UPDATE SET
                    payload = excluded.payload,
                    points = excluded.points,
                    version = profiles.version + 1
                """,
                (profile.player_id, json.dumps(profile.to_dict()), profile.points),
            )
            cur.execute("SELECT version FROM profiles WHERE player_id = ?", (profile.player_id,))
            version = int(cur.fetchone()["version"])
            self.conn.commit()
        return replace(profile, version=version)

    def update_profile(
        self,
        player_id: str,
        default_factory: Callable[[], DetectiveProfile],
        transform: Callable[[DetectiveProfile], tuple[DetectiveProfile, R]],
    ) -> tuple[DetectiveProfile, R]:
        def load():
            row = self._read_profile(player_id)
            if row is None:
                return default_factory(), False
            return DetectiveProfile.from_dict(json.loads(row["payload"]), int(row["version"])), True

        def write(cur, current, updated, exists) -> bool:
            payload = json.dumps(updated.to_dict())
            if exists:
                cur.execute(
                    "UPDATE profiles SET payload = ?, points = ?, version = version + 1 "
                    "WHERE player_id = ? AND version = ?",
                    (payload, updated.points, player_id, current.version),
                )
            else:
                cur.execute(
                    "INSERT OR IGNORE INTO profiles (player_id, payload, version, points) VALUES (?, ?, 1, ?)",
                    (player_id, payload, updated.points),
                )
            return cur.rowcount == 1

        return self._compare_and_swap(f"profile {player_id}", load, write, transform)

    def top_profiles(self, limit: int = config.DETECTIVE_LEADERBOARD_SIZE) -> list[DetectiveProfile]:
        with self._guard("top_profiles") as cur:
            cur.execute(
                "SELECT payload, version FROM profiles ORDER BY points DESC, player_id ASC LIMIT ?",
                (limit,),
            )
            rows = cur.fetchall()
        return [DetectiveProfile.from_dict(json.loads(row["payload"]), int(row["version"])) for row in rows]

    def profile_rank(self, player_id: str) -> int | None:
        """1-based position by points; ties share the better rank."""
        with self._guard("profile_rank") as cur:
            cur.execute("SELECT points FROM profiles WHERE player_id = ?", (player_id,))
            row = cur.fetchone()
            if row is None:
                return None
            cur.execute("SELECT COUNT(*) AS ahead FROM profiles WHERE points > ?", (row["points"],))
            return int(cur.fetchone()["ahead"]) + 1

    def _ensure_schema(self) -> None:
        with self._guard("schema setup") as cur:
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS progress (
                    session_id TEXT NOT NULL,
                    player_id TEXT NOT NULL,
                    mode TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    version INTEGER NOT NULL,
                    PRIMARY KEY (session_id, player_id, mode)
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS counters (
                    key TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS profiles (
                    player_id TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    version INTEGER NOT NULL,
                    points INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS profiles_points ON profiles (points DESC)")
            self.conn.commit()
