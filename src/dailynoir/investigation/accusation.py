"""One-shot accusation resolution for daily and weekly cases."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Iterable

from dailynoir import config
from dailynoir.domain.enums import AchievementId
from dailynoir.domain.models import Suspect, WeeklyCase
from dailynoir.domain.rules import find_suspect_in
from dailynoir.investigation.progress import PlayerProgress, WeeklyProgress

logger = logging.getLogger("dailynoir.accusation")


@dataclass(frozen=True)
class AccusationResult:
    correct: bool
    suspect: Suspect
    progress: PlayerProgress
    already_accused: bool = False


@dataclass(frozen=True)
class WeeklyAccusationResult:
    correct: bool
    suspect: Suspect
    progress: WeeklyProgress
    already_accused: bool = False
    points_earned: int = 0
    weekly_bonus: int = 0
    chapters_played_bonus: int = 0
    new_achievements: list[AchievementId] = field(default_factory=list)

    @property
    def total_points(self) -> int:
        return self.points_earned + self.weekly_bonus + self.chapters_played_bonus


def accuse(progress: PlayerProgress, suspect_id: str, suspects: Iterable[Suspect]) -> AccusationResult:
    """Name the culprit. Only the first call per player counts.

    A repeat call reports the stored outcome with ``already_accused`` set and
    never re-evaluates correctness.
    """
    suspects = list(suspects)
    if progress.solved:
        accused = find_suspect_in(suspects, progress.accused_suspect or "")
        logger.debug("Repeat accusation ignored for case %s", progress.case_id)
        return AccusationResult(
            correct=progress.correct,
            suspect=accused,
            progress=progress,
            already_accused=True,
        )
    suspect = find_suspect_in(suspects, suspect_id)
    updated = replace(
        progress,
        accused_suspect=suspect.id,
        solved=True,
        correct=suspect.is_guilty,
    )
    return AccusationResult(correct=suspect.is_guilty, suspect=suspect, progress=updated)


def weekly_points(progress: WeeklyProgress, weekly_case: WeeklyCase) -> tuple[int, int, int]:
    """Return (accusation points, full-week bonus, chapters-played bonus)."""
    if not progress.correct:
        return 0, 0, 0
    points = config.WEEKLY_POINTS
    earned = points["CORRECT_ACCUSATION"]
    if len(progress.all_clues_found) >= len(weekly_case.all_clues):
        earned += points["ALL_CLUES_BONUS"]
    full_week = points["FULL_WEEK_BONUS"] if len(progress.chapters_completed) == config.CHAPTER_COUNT else 0
    played = len(progress.chapters_completed) * points["PER_CHAPTER_PLAYED"]
    return earned, full_week, played


def weekly_accuse(
    progress: WeeklyProgress,
    suspect_id: str,
    weekly_case: WeeklyCase,
) -> WeeklyAccusationResult:
    if progress.solved:
        accused = find_suspect_in(weekly_case.suspects, progress.accused_suspect or "")
        return WeeklyAccusationResult(
            correct=progress.correct,
            suspect=accused,
            progress=progress,
            already_accused=True,
        )
    suspect = find_suspect_in(weekly_case.suspects, suspect_id)
    correct = suspect.id == weekly_case.guilty_suspect_id
    updated = replace(progress, accused_suspect=suspect.id, solved=True, correct=correct)
    earned, full_week, played = weekly_points(updated, weekly_case)
    return WeeklyAccusationResult(
        correct=correct,
        suspect=suspect,
        progress=updated,
        points_earned=earned,
        weekly_bonus=full_week,
        chapters_played_bonus=played,
    )
