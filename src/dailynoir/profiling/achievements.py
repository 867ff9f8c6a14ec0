"""Achievement catalogue and solve bookkeeping for detective profiles."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date

from dailynoir import config
from dailynoir.domain.enums import AchievementId, Rarity
from dailynoir.profiling.profile import DetectiveProfile
from dailynoir.util.time import is_next_day, parse_date


@dataclass(frozen=True)
class Achievement:
    id: AchievementId
    name: str
    description: str
    icon: str
    rarity: Rarity


ACHIEVEMENTS: dict[AchievementId, Achievement] = {
    item.id: item
    for item in (
        Achievement(AchievementId.FIRST_BLOOD, "First Blood", "Solve a case on the first day it's available", "🩸", Rarity.RARE),
        Achievement(AchievementId.SPEED_DEMON, "Speed Demon", "Solve a case in under 5 minutes", "⚡", Rarity.EPIC),
        Achievement(AchievementId.THOROUGH, "Thorough Detective", "Find all clues before making an accusation", "🔍", Rarity.COMMON),
        Achievement(AchievementId.LONE_WOLF, "Lone Wolf", "Solve a case when less than 10% of players got it right", "🐺", Rarity.LEGENDARY),
        Achievement(AchievementId.STREAK_3, "On a Roll", "Maintain a 3-day solve streak", "🔥", Rarity.COMMON),
        Achievement(AchievementId.STREAK_7, "Week Warrior", "Maintain a 7-day solve streak", "💪", Rarity.RARE),
        Achievement(AchievementId.STREAK_30, "Unstoppable", "Maintain a 30-day solve streak", "👑", Rarity.LEGENDARY),
        Achievement(AchievementId.PERFECT_RECORD, "Perfect Record", "5 correct accusations in a row", "✨", Rarity.EPIC),
        Achievement(AchievementId.VETERAN, "Veteran Detective", "Solve 10 cases total", "🎖️", Rarity.COMMON),
        Achievement(AchievementId.MASTER, "Master Detective", "Solve 25 cases total", "🏆", Rarity.RARE),
        Achievement(AchievementId.LEGEND, "Living Legend", "Solve 50 cases total", "⭐", Rarity.LEGENDARY),
    )
}

_STREAKS = [(3, AchievementId.STREAK_3), (7, AchievementId.STREAK_7), (30, AchievementId.STREAK_30)]
_MILESTONES = [(10, AchievementId.VETERAN), (25, AchievementId.MASTER), (50, AchievementId.LEGEND)]


@dataclass(frozen=True)
class SolveContext:
    session_id: str
    case_id: str
    correct: bool
    today: date
    now: float
    clues_found: int
    total_clues: int
    solved_count: int
    total_players: int
    points: int = config.POINTS_PER_SOLVE


@dataclass(frozen=True)
class ProfileUpdate:
    profile: DetectiveProfile
    points_earned: int = 0
    already_solved: bool = False
    new_achievements: list[AchievementId] = field(default_factory=list)


def _next_streak(profile: DetectiveProfile, today: date) -> int:
    last = parse_date(profile.last_solve_date)
    if last is None:
        return 1
    if last == today:
        return max(1, profile.current_streak)
    if is_next_day(last, today):
        return profile.current_streak + 1
    return 1


def record_start(profile: DetectiveProfile, session_id: str, now: float) -> DetectiveProfile:
    if session_id in profile.game_start_times:
        return profile
    return replace(profile, game_start_times={**profile.game_start_times, session_id: now})


def record_accusation(profile: DetectiveProfile, solve: SolveContext) -> ProfileUpdate:
    """Apply one first-time accusation to the profile.

    Points are granted once per case id; a case already in ``solved_cases``
    earns nothing and awards no achievements.
    """
    if solve.case_id in profile.solved_cases:
        return ProfileUpdate(profile=profile, already_solved=True)

    achievements = list(profile.achievements)
    new: list[AchievementId] = []

    def award(achievement: AchievementId) -> None:
        if achievement not in achievements:
            achievements.append(achievement)
            new.append(achievement)

    total_accusations = profile.total_accusations + 1
    if not solve.correct:
        updated = replace(
            profile,
            total_accusations=total_accusations,
            consecutive_correct=0,
        )
        return ProfileUpdate(profile=updated)

    streak = _next_streak(profile, solve.today)
    consecutive = profile.consecutive_correct + 1
    solved_cases = [*profile.solved_cases, solve.case_id]

    if solve.solved_count <= config.FIRST_BLOOD_LIMIT:
        award(AchievementId.FIRST_BLOOD)
    started = profile.game_start_times.get(solve.session_id)
    if started is not None and solve.now - started < config.SPEED_DEMON_SECONDS:
        award(AchievementId.SPEED_DEMON)
    if solve.total_clues and solve.clues_found >= solve.total_clues:
        award(AchievementId.THOROUGH)
    for threshold, achievement in _STREAKS:
        if streak >= threshold:
            award(achievement)
    if consecutive >= config.PERFECT_RECORD_RUN:
        award(AchievementId.PERFECT_RECORD)
    for threshold, achievement in _MILESTONES:
        if len(solved_cases) >= threshold:
            award(achievement)
    if (
        solve.total_players >= config.LONE_WOLF_MIN_PLAYERS
        and solve.solved_count * 100 < config.LONE_WOLF_RATE * solve.total_players
    ):
        award(AchievementId.LONE_WOLF)

    updated = replace(
        profile,
        points=profile.points + solve.points,
        solved_cases=solved_cases,
        achievements=achievements,
        current_streak=streak,
        longest_streak=max(profile.longest_streak, streak),
        last_solve_date=solve.today.isoformat(),
        total_accusations=total_accusations,
        correct_accusations=profile.correct_accusations + 1,
        consecutive_correct=consecutive,
    )
    return ProfileUpdate(profile=updated, points_earned=solve.points, new_achievements=new)


def add_points(profile: DetectiveProfile, points: int) -> DetectiveProfile:
    return replace(profile, points=profile.points + points)
