"""Load-time invariant checks for authored cases."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from dailynoir import config
from dailynoir.domain.errors import ContentValidationFailed
from dailynoir.domain.models import Case, Clue, CrimeSceneObject, Speaker, Suspect, WeeklyCase
from dailynoir.investigation.dialog_graph import DialogGraph


def _duplicates(ids: Iterable[str]) -> list[str]:
    return sorted(item for item, count in Counter(ids).items() if count > 1)


def _check_guilty(suspects: list[Suspect], label: str) -> list[str]:
    if not suspects:
        return [f"{label} has no suspects"]
    guilty = [s.id for s in suspects if s.is_guilty]
    if len(guilty) != 1:
        return [f"{label} must have exactly one guilty suspect, found {len(guilty)}: {guilty}"]
    return []


def _check_speaker(speaker: Speaker, clue_ids: set[str]) -> list[str]:
    problems: list[str] = []
    if not speaker.dialogue_options:
        return problems
    try:
        graph = DialogGraph.for_speaker(speaker)
    except ContentValidationFailed as exc:
        return [f"{speaker.id}: {problem}" for problem in exc.problems]
    if not graph.root_ids():
        problems.append(f"{speaker.id}: no root dialogue option")
    for option in speaker.dialogue_options:
        if option.unlocks_clue and option.unlocks_clue not in clue_ids:
            problems.append(
                f"{speaker.id}: option {option.id} unlocks unknown clue {option.unlocks_clue}"
            )
    return problems


def _check_objects(objects: list[CrimeSceneObject], clue_ids: set[str], label: str) -> list[str]:
    problems: list[str] = []
    for dup in _duplicates(obj.id for obj in objects):
        problems.append(f"{label}: duplicate crime scene object {dup}")
    for obj in objects:
        if obj.clue_id and obj.clue_id not in clue_ids:
            problems.append(f"{label}: object {obj.id} reveals unknown clue {obj.clue_id}")
    return problems


def _check_clue_links(clues: list[Clue], suspect_ids: set[str], label: str) -> list[str]:
    problems: list[str] = []
    for dup in _duplicates(clue.id for clue in clues):
        problems.append(f"{label}: duplicate clue {dup}")
    for clue in clues:
        if clue.linked_to and clue.linked_to not in suspect_ids:
            problems.append(f"{label}: clue {clue.id} linked to unknown suspect {clue.linked_to}")
    return problems


def validate_case(case: Case) -> list[str]:
    label = f"case {case.id}"
    clue_ids = {clue.id for clue in case.clues}
    suspect_ids = {suspect.id for suspect in case.suspects}
    problems = _check_guilty(case.suspects, label)
    for dup in _duplicates(s.id for s in case.suspects):
        problems.append(f"{label}: duplicate suspect {dup}")
    problems.extend(_check_clue_links(case.clues, suspect_ids, label))
    problems.extend(_check_objects(case.crime_scene_objects, clue_ids, label))
    for suspect in case.suspects:
        problems.extend(_check_speaker(suspect, clue_ids))
    return problems


def validate_weekly_case(weekly: WeeklyCase) -> list[str]:
    label = f"weekly case {weekly.id}"
    clue_ids = {clue.id for clue in weekly.all_clues}
    suspect_ids = {suspect.id for suspect in weekly.suspects}
    problems = _check_guilty(weekly.suspects, label)
    for dup in _duplicates(s.id for s in weekly.suspects):
        problems.append(f"{label}: duplicate suspect {dup}")
    guilty = next((s for s in weekly.suspects if s.is_guilty), None)
    if weekly.guilty_suspect_id not in suspect_ids:
        problems.append(f"{label}: guilty_suspect_id {weekly.guilty_suspect_id} is not a suspect")
    elif guilty is not None and guilty.id != weekly.guilty_suspect_id:
        problems.append(
            f"{label}: guilty_suspect_id {weekly.guilty_suspect_id} disagrees with "
            f"is_guilty suspect {guilty.id}"
        )
    problems.extend(_check_clue_links(weekly.all_clues, suspect_ids, label))
    for suspect in weekly.suspects:
        problems.extend(_check_speaker(suspect, clue_ids))

    days = [chapter.day_number for chapter in weekly.chapters]
    expected = list(range(1, config.CHAPTER_COUNT + 1))
    if sorted(days) != expected:
        problems.append(f"{label}: chapters must be days {expected}, found {sorted(days)}")
    speaker_ids = set(suspect_ids)
    for chapter in weekly.chapters:
        chapter_label = f"{label} day {chapter.day_number}"
        should_accuse = chapter.day_number == config.ACCUSATION_DAY
        if chapter.is_accusation_day != should_accuse:
            problems.append(
                f"{chapter_label}: is_accusation_day must be {should_accuse}"
            )
        for clue in chapter.new_clues:
            if clue.id not in clue_ids:
                problems.append(f"{chapter_label}: new clue {clue.id} missing from all_clues")
        for suspect_id in chapter.suspects_revealed:
            if suspect_id not in suspect_ids:
                problems.append(f"{chapter_label}: reveals unknown suspect {suspect_id}")
        problems.extend(_check_objects(chapter.crime_scene_objects, clue_ids, chapter_label))
        for witness in chapter.witnesses:
            if witness.id in speaker_ids:
                problems.append(f"{chapter_label}: duplicate speaker {witness.id}")
            speaker_ids.add(witness.id)
            if witness.available_on_day != chapter.day_number:
                problems.append(
                    f"{chapter_label}: witness {witness.id} available_on_day "
                    f"{witness.available_on_day} does not match its chapter"
                )
            problems.extend(_check_speaker(witness, clue_ids))
    return problems


def ensure_valid_case(case: Case) -> Case:
    problems = validate_case(case)
    if problems:
        raise ContentValidationFailed(f"case {case.id}", problems)
    return case


def ensure_valid_weekly_case(weekly: WeeklyCase) -> WeeklyCase:
    problems = validate_weekly_case(weekly)
    if problems:
        raise ContentValidationFailed(f"weekly case {weekly.id}", problems)
    return weekly
