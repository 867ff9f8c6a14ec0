"""Domain models for authored case content."""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ContentModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str


class Clue(ContentModel):
    description: str
    linked_to: Optional[str] = None


class DialogueOption(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    text: str
    response: str
    is_suspicious: bool = False
    unlocks_clue: Optional[str] = None
    next_options: Tuple[str, ...] = ()
    is_root_option: bool = False


class Speaker(ContentModel):
    description: str
    dialogue_options: Tuple[DialogueOption, ...] = ()


class Suspect(Speaker):
    alibi: str
    is_guilty: bool = False
    portrait: Optional[str] = None
    notes: Optional[str] = None


class Witness(Speaker):
    available_on_day: int


class CrimeSceneObject(ContentModel):
    description: str
    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0
    clue_id: Optional[str] = None
    sprite: Optional[str] = None


class Case(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    title: str
    day_number: int
    intro: str
    victim_name: str
    victim_description: str
    location: str
    crime_scene_objects: List[CrimeSceneObject] = Field(default_factory=list)
    suspects: List[Suspect]
    clues: List[Clue]
    case_notes: Optional[str] = None

    @property
    def guilty_suspect(self) -> Suspect | None:
        return next((s for s in self.suspects if s.is_guilty), None)


class Chapter(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    day_number: int
    title: str
    intro: str
    story_text: str = ""
    crime_scene_objects: List[CrimeSceneObject] = Field(default_factory=list)
    new_clues: List[Clue] = Field(default_factory=list)
    witnesses: List[Witness] = Field(default_factory=list)
    suspects_revealed: List[str] = Field(default_factory=list)
    is_accusation_day: bool = False


class WeeklyCase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    week_number: int
    start_date: date
    title: str
    overall_intro: str
    victim_name: str
    victim_description: str
    location: str
    chapters: List[Chapter]
    suspects: List[Suspect]
    all_clues: List[Clue]
    guilty_suspect_id: str

    def chapter(self, day_number: int) -> Chapter | None:
        return next((c for c in self.chapters if c.day_number == day_number), None)
