"""Clue discovery: the single path by which clues enter progress."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Iterable

from dailynoir.domain.models import Case, Chapter, Clue, CrimeSceneObject
from dailynoir.domain.rules import find_clue_in, find_scene_object_in
from dailynoir.investigation.progress import PlayerProgress, WeeklyProgress

logger = logging.getLogger("dailynoir.clues")


@dataclass(frozen=True)
class ClueDiscovery:
    clue: Clue
    progress: PlayerProgress
    newly_found: bool


@dataclass(frozen=True)
class WeeklyClueDiscovery:
    clue: Clue
    progress: WeeklyProgress
    chapter_day: int
    newly_found: bool


def find_clue(progress: PlayerProgress, clue_id: str, case_clues: Iterable[Clue]) -> ClueDiscovery:
    """Mark ``clue_id`` as found; a repeat returns the progress unchanged."""
    clue = find_clue_in(case_clues, clue_id)
    if clue.id in progress.clues_found:
        logger.debug("Clue %s already found for case %s", clue.id, progress.case_id)
        return ClueDiscovery(clue=clue, progress=progress, newly_found=False)
    updated = replace(progress, clues_found=[*progress.clues_found, clue.id])
    return ClueDiscovery(clue=clue, progress=updated, newly_found=True)


def find_weekly_clue(
    progress: WeeklyProgress,
    clue_id: str,
    chapter_day: int,
    all_clues: Iterable[Clue],
) -> WeeklyClueDiscovery:
    clue = find_clue_in(all_clues, clue_id)
    if clue.id in progress.all_clues_found:
        logger.debug("Weekly clue %s already found for case %s", clue.id, progress.case_id)
        return WeeklyClueDiscovery(
            clue=clue, progress=progress, chapter_day=chapter_day, newly_found=False
        )
    by_chapter = {day: list(clues) for day, clues in progress.clues_found_by_chapter.items()}
    by_chapter.setdefault(chapter_day, []).append(clue.id)
    updated = replace(progress, clues_found_by_chapter=by_chapter)
    return WeeklyClueDiscovery(clue=clue, progress=updated, chapter_day=chapter_day, newly_found=True)


def clue_for_object(scene: Case | Chapter, object_id: str) -> tuple[CrimeSceneObject, str | None]:
    """Resolve an examined crime scene object to the clue it reveals, if any."""
    obj = find_scene_object_in(scene.crime_scene_objects, object_id)
    return obj, obj.clue_id
