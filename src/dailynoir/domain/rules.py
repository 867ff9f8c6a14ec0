"""Lookup helpers that enforce content references at call time."""

from __future__ import annotations

from typing import Iterable, TypeVar

from dailynoir.domain.errors import (
    ChapterNotFound,
    ClueNotFound,
    SceneObjectNotFound,
    SuspectNotFound,
)
from dailynoir.domain.models import Chapter, Clue, CrimeSceneObject, Suspect, WeeklyCase

T = TypeVar("T")


def _by_id(items: Iterable[T], item_id: str) -> T | None:
    return next((item for item in items if item.id == item_id), None)


def find_clue_in(clues: Iterable[Clue], clue_id: str) -> Clue:
    clue = _by_id(clues, clue_id)
    if clue is None:
        raise ClueNotFound(clue_id)
    return clue


def find_suspect_in(suspects: Iterable[Suspect], suspect_id: str) -> Suspect:
    suspect = _by_id(suspects, suspect_id)
    if suspect is None:
        raise SuspectNotFound(suspect_id)
    return suspect


def find_scene_object_in(objects: Iterable[CrimeSceneObject], object_id: str) -> CrimeSceneObject:
    obj = _by_id(objects, object_id)
    if obj is None:
        raise SceneObjectNotFound(object_id)
    return obj


def find_chapter(weekly_case: WeeklyCase, day_number: int) -> Chapter:
    chapter = weekly_case.chapter(day_number)
    if chapter is None:
        raise ChapterNotFound(day_number, detail=weekly_case.id)
    return chapter
