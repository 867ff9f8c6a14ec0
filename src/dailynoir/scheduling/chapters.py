"""Calendar gating for the seven-chapter weekly case.

Everything here is a pure function of the case start date, the player's
weekly progress and the calendar day passed in, so any request on any
device recomputes the same schedule.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timedelta
import logging
import math

from dailynoir import config
from dailynoir.domain.models import WeeklyCase
from dailynoir.domain.rules import find_chapter
from dailynoir.investigation.progress import WeeklyProgress
from dailynoir.util.time import days_between, is_next_day, parse_date

logger = logging.getLogger("dailynoir.schedule")


@dataclass(frozen=True)
class ChapterStatus:
    day_number: int
    title: str
    is_unlocked: bool
    is_available: bool
    is_current: bool
    is_completed: bool


@dataclass(frozen=True)
class ChapterSchedule:
    statuses: list[ChapterStatus]
    current_day_number: int
    is_accusation_unlocked: bool

    def status(self, day_number: int) -> ChapterStatus | None:
        return next((s for s in self.statuses if s.day_number == day_number), None)


@dataclass(frozen=True)
class ChapterCompletion:
    progress: WeeklyProgress
    completed: bool
    points_earned: int = 0
    streak_bonus: int = 0
    on_time_bonus: int = 0
    next_chapter_unlocked: bool = False


def unlocked_day_count(start_date: date, today: date) -> int:
    """Day 1 unlocks on the start date, one more per calendar day, capped at 7."""
    elapsed = days_between(start_date, today) + 1
    return max(0, min(config.CHAPTER_COUNT, elapsed))


def is_day_unlocked(start_date: date, today: date, day_number: int) -> bool:
    return 1 <= day_number <= unlocked_day_count(start_date, today)


def unlock_date(start_date: date, day_number: int) -> date:
    return start_date + timedelta(days=day_number - 1)


def compute_chapter_statuses(
    weekly_case: WeeklyCase,
    progress: WeeklyProgress,
    today: date,
) -> ChapterSchedule:
    unlocked = unlocked_day_count(weekly_case.start_date, today)
    completed = set(progress.chapters_completed)
    current: int | None = None
    for day in range(1, config.ACCUSATION_DAY):
        if day <= unlocked and day not in completed:
            current = day
            break

    statuses = []
    for chapter in sorted(weekly_case.chapters, key=lambda c: c.day_number):
        day = chapter.day_number
        is_unlocked = day <= unlocked
        is_completed = day in completed
        statuses.append(
            ChapterStatus(
                day_number=day,
                title=chapter.title,
                is_unlocked=is_unlocked,
                is_available=is_unlocked and not is_completed,
                is_current=day == current,
                is_completed=is_completed,
            )
        )
    investigation_days = range(1, config.ACCUSATION_DAY)
    accusation_open = (
        all(day in completed for day in investigation_days)
        and unlocked >= config.ACCUSATION_DAY
    )
    return ChapterSchedule(
        statuses=statuses,
        current_day_number=unlocked,
        is_accusation_unlocked=accusation_open,
    )


def chapter_points(consecutive_days: int, on_time: bool) -> tuple[int, int, int]:
    """Return (base, streak bonus, on-time bonus) for one chapter."""
    points = config.WEEKLY_POINTS
    base = points["CHAPTER_COMPLETE"]
    multiplier = min(
        max(0, consecutive_days - 1) * points["STREAK_MULTIPLIER_PER_DAY"],
        points["STREAK_MULTIPLIER_CAP"],
    )
    streak_bonus = math.floor(base * multiplier)
    on_time_bonus = points["ON_TIME_BONUS"] if on_time else 0
    return base, streak_bonus, on_time_bonus


def _streak_after(progress: WeeklyProgress, day_number: int, today: date) -> int:
    previous = parse_date(progress.chapter_completed_on.get(day_number - 1))
    if previous is not None and is_next_day(previous, today):
        return progress.consecutive_days_played + 1
    return 1


def complete_chapter(
    weekly_case: WeeklyCase,
    progress: WeeklyProgress,
    day_number: int,
    today: date,
) -> ChapterCompletion:
    chapter = find_chapter(weekly_case, day_number)
    if day_number in progress.chapters_completed:
        logger.debug("Chapter %d already completed for %s", day_number, weekly_case.id)
        return ChapterCompletion(progress=progress, completed=False)
    if not is_day_unlocked(weekly_case.start_date, today, day_number):
        logger.debug("Chapter %d of %s still locked on %s", day_number, weekly_case.id, today)
        return ChapterCompletion(progress=progress, completed=False)

    streak = _streak_after(progress, day_number, today)
    on_time = today <= unlock_date(weekly_case.start_date, day_number)
    base, streak_bonus, on_time_bonus = chapter_points(streak, on_time)

    revealed = list(progress.suspects_revealed)
    for suspect_id in chapter.suspects_revealed:
        if suspect_id not in revealed:
            revealed.append(suspect_id)
    updated = replace(
        progress,
        chapters_completed=sorted({*progress.chapters_completed, day_number}),
        current_chapter=min(day_number + 1, config.CHAPTER_COUNT),
        suspects_revealed=revealed,
        daily_bonus_earned={**progress.daily_bonus_earned, day_number: on_time},
        chapter_completed_on={**progress.chapter_completed_on, day_number: today.isoformat()},
        consecutive_days_played=streak,
        last_played_date=today.isoformat(),
    )
    next_day = day_number + 1
    return ChapterCompletion(
        progress=updated,
        completed=True,
        points_earned=base + streak_bonus + on_time_bonus,
        streak_bonus=streak_bonus,
        on_time_bonus=on_time_bonus,
        next_chapter_unlocked=next_day <= config.CHAPTER_COUNT
        and is_day_unlocked(weekly_case.start_date, today, next_day),
    )
