"""Per-player progress records for daily and weekly play."""

from __future__ import annotations

from dataclasses import dataclass, field


def _unique(items) -> list[str]:
    return list(dict.fromkeys(str(item) for item in items or []))


@dataclass
class PlayerProgress:
    case_id: str
    day_number: int = 1
    clues_found: list[str] = field(default_factory=list)
    suspects_interrogated: list[str] = field(default_factory=list)
    accused_suspect: str | None = None
    solved: bool = False
    correct: bool = False
    version: int = 0

    def to_dict(self) -> dict:
        return {
            "case_id": self.case_id,
            "day_number": self.day_number,
            "clues_found": list(self.clues_found),
            "suspects_interrogated": list(self.suspects_interrogated),
            "accused_suspect": self.accused_suspect,
            "solved": self.solved,
            "correct": self.correct,
        }

    @classmethod
    def from_dict(cls, payload: dict, version: int = 0) -> "PlayerProgress":
        return cls(
            case_id=str(payload.get("case_id", "")),
            day_number=int(payload.get("day_number", 1)),
            clues_found=_unique(payload.get("clues_found")),
            suspects_interrogated=_unique(payload.get("suspects_interrogated")),
            accused_suspect=payload.get("accused_suspect"),
            solved=bool(payload.get("solved", False)),
            correct=bool(payload.get("correct", False)),
            version=version,
        )


@dataclass
class WeeklyProgress:
    case_id: str
    chapters_completed: list[int] = field(default_factory=list)
    current_chapter: int = 1
    clues_found_by_chapter: dict[int, list[str]] = field(default_factory=dict)
    witnesses_interrogated: list[str] = field(default_factory=list)
    suspects_interrogated: list[str] = field(default_factory=list)
    suspects_revealed: list[str] = field(default_factory=list)
    accused_suspect: str | None = None
    solved: bool = False
    correct: bool = False
    daily_bonus_earned: dict[int, bool] = field(default_factory=dict)
    chapter_completed_on: dict[int, str] = field(default_factory=dict)
    consecutive_days_played: int = 0
    last_played_date: str | None = None
    version: int = 0

    @property
    def all_clues_found(self) -> list[str]:
        found: list[str] = []
        for day in sorted(self.clues_found_by_chapter):
            found.extend(self.clues_found_by_chapter[day])
        return _unique(found)

    def to_dict(self) -> dict:
        return {
            "case_id": self.case_id,
            "chapters_completed": list(self.chapters_completed),
            "current_chapter": self.current_chapter,
            "clues_found_by_chapter": {
                str(day): list(clues) for day, clues in self.clues_found_by_chapter.items()
            },
            "witnesses_interrogated": list(self.witnesses_interrogated),
            "suspects_interrogated": list(self.suspects_interrogated),
            "suspects_revealed": list(self.suspects_revealed),
            "accused_suspect": self.accused_suspect,
            "solved": self.solved,
            "correct": self.correct,
            "daily_bonus_earned": {str(day): flag for day, flag in self.daily_bonus_earned.items()},
            "chapter_completed_on": {
                str(day): when for day, when in self.chapter_completed_on.items()
            },
            "consecutive_days_played": self.consecutive_days_played,
            "last_played_date": self.last_played_date,
        }

    @classmethod
    def from_dict(cls, payload: dict, version: int = 0) -> "WeeklyProgress":
        clues_by_chapter = payload.get("clues_found_by_chapter", {}) or {}
        bonus = payload.get("daily_bonus_earned", {}) or {}
        completed_on = payload.get("chapter_completed_on", {}) or {}
        return cls(
            case_id=str(payload.get("case_id", "")),
            chapters_completed=sorted({int(day) for day in payload.get("chapters_completed", []) or []}),
            current_chapter=int(payload.get("current_chapter", 1)),
            clues_found_by_chapter={
                int(day): _unique(clues) for day, clues in clues_by_chapter.items()
            },
            witnesses_interrogated=_unique(payload.get("witnesses_interrogated")),
            suspects_interrogated=_unique(payload.get("suspects_interrogated")),
            suspects_revealed=_unique(payload.get("suspects_revealed")),
            accused_suspect=payload.get("accused_suspect"),
            solved=bool(payload.get("solved", False)),
            correct=bool(payload.get("correct", False)),
            daily_bonus_earned={int(day): bool(flag) for day, flag in bonus.items()},
            chapter_completed_on={int(day): str(when) for day, when in completed_on.items()},
            consecutive_days_played=int(payload.get("consecutive_days_played", 0)),
            last_played_date=payload.get("last_played_date"),
            version=version,
        )
