"""Aggregate accusation statistics per session."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterable, Mapping

from dailynoir.domain.models import Suspect


@dataclass(frozen=True)
class SuspectStats:
    suspect_id: str
    suspect_name: str
    count: int
    percentage: int


@dataclass(frozen=True)
class LeaderboardStats:
    total_players: int
    solved_count: int
    solve_rate: int
    suspect_stats: list[SuspectStats] = field(default_factory=list)


def total_key(session_id: str) -> str:
    return f"stats:{session_id}:total"


def solved_key(session_id: str) -> str:
    return f"stats:{session_id}:solved"


def accuse_key(session_id: str, suspect_id: str) -> str:
    return f"accuse:{session_id}:{suspect_id}"


def weekly_total_key(session_id: str) -> str:
    return f"weekly-stats:{session_id}:total-accusations"


def weekly_solved_key(session_id: str) -> str:
    return f"weekly-stats:{session_id}:correct-accusations"


def weekly_accuse_key(session_id: str, suspect_id: str) -> str:
    return f"weekly-stats:{session_id}:accusations:{suspect_id}"


def weekly_chapter_key(session_id: str, day_number: int) -> str:
    return f"weekly-stats:{session_id}:chapter:{day_number}:completed"


def _percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return math.floor(part / whole * 100 + 0.5)


def build_leaderboard_stats(
    suspects: Iterable[Suspect],
    total_players: int,
    solved_count: int,
    accusations: Mapping[str, int],
) -> LeaderboardStats:
    """Derive the read-only leaderboard view from raw counters."""
    suspect_stats = [
        SuspectStats(
            suspect_id=suspect.id,
            suspect_name=suspect.name,
            count=int(accusations.get(suspect.id, 0)),
            percentage=_percent(int(accusations.get(suspect.id, 0)), total_players),
        )
        for suspect in suspects
    ]
    suspect_stats.sort(key=lambda stat: stat.count, reverse=True)
    return LeaderboardStats(
        total_players=total_players,
        solved_count=solved_count,
        solve_rate=_percent(solved_count, total_players),
        suspect_stats=suspect_stats,
    )