"""Cross-case detective profile: points, streaks and rank."""

from __future__ import annotations

from dataclasses import dataclass, field

from dailynoir.domain.enums import AchievementId, DetectiveRank

_RANK_THRESHOLDS = [
    (50, DetectiveRank.LEGEND),
    (25, DetectiveRank.MASTER),
    (15, DetectiveRank.ACE),
    (10, DetectiveRank.VETERAN),
    (5, DetectiveRank.SENIOR),
    (2, DetectiveRank.JUNIOR),
]


def detective_rank(solved_count: int) -> DetectiveRank:
    for threshold, rank in _RANK_THRESHOLDS:
        if solved_count >= threshold:
            return rank
    return DetectiveRank.ROOKIE


@dataclass
class DetectiveProfile:
    player_id: str
    username: str = "Anonymous"
    points: int = 0
    solved_cases: list[str] = field(default_factory=list)
    achievements: list[AchievementId] = field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0
    last_solve_date: str | None = None
    total_accusations: int = 0
    correct_accusations: int = 0
    consecutive_correct: int = 0
    game_start_times: dict[str, float] = field(default_factory=dict)
    version: int = 0

    @property
    def rank(self) -> DetectiveRank:
        return detective_rank(len(self.solved_cases))

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "username": self.username,
            "points": self.points,
            "solved_cases": list(self.solved_cases),
            "achievements": [achievement.value for achievement in self.achievements],
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_solve_date": self.last_solve_date,
            "total_accusations": self.total_accusations,
            "correct_accusations": self.correct_accusations,
            "consecutive_correct": self.consecutive_correct,
            "game_start_times": dict(self.game_start_times),
        }

    @classmethod
    def from_dict(cls, payload: dict, version: int = 0) -> "DetectiveProfile":
        achievements = []
        for raw in payload.get("achievements", []) or []:
            try:
                achievements.append(AchievementId(raw))
            except ValueError:
                continue
        return cls(
            player_id=str(payload.get("player_id", "")),
            username=str(payload.get("username") or "Anonymous"),
            points=int(payload.get("points", 0)),
            solved_cases=list(dict.fromkeys(payload.get("solved_cases", []) or [])),
            achievements=achievements,
            current_streak=int(payload.get("current_streak", 0)),
            longest_streak=int(payload.get("longest_streak", 0)),
            last_solve_date=payload.get("last_solve_date"),
            total_accusations=int(payload.get("total_accusations", 0)),
            correct_accusations=int(payload.get("correct_accusations", 0)),
            consecutive_correct=int(payload.get("consecutive_correct", 0)),
            game_start_times={
                str(key): float(value)
                for key, value in (payload.get("game_start_times", {}) or {}).items()
            },
            version=version,
        )


@dataclass(frozen=True)
class DetectiveLeaderboardEntry:
    player_id: str
    username: str
    points: int
    solved_count: int
    rank: DetectiveRank


@dataclass(frozen=True)
class DetectiveLeaderboard:
    top_detectives: list[DetectiveLeaderboardEntry]
    user_rank: int | None = None
    user_profile: DetectiveProfile | None = None


def leaderboard_entry(profile: DetectiveProfile) -> DetectiveLeaderboardEntry:
    return DetectiveLeaderboardEntry(
        player_id=profile.player_id,
        username=profile.username,
        points=profile.points,
        solved_count=len(profile.solved_cases),
        rank=profile.rank,
    )
