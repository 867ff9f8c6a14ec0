"""Typed failures raised by the engine.

Lookup failures are caller errors and map to a 4xx-style response in the
hosting layer. ``StorageUnavailable`` is transient. ``ContentValidationFailed``
is raised only while loading content and must stop the process from serving.
"""

from __future__ import annotations

from typing import Iterable


class DailyNoirError(Exception):
    """Base class for every engine failure."""


class ContentNotFound(DailyNoirError):
    kind = "content"

    def __init__(self, item_id: object, detail: str | None = None) -> None:
        self.item_id = item_id
        message = f"Unknown {self.kind} id: {item_id}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class CaseNotFound(ContentNotFound):
    kind = "case"


class ClueNotFound(ContentNotFound):
    kind = "clue"


class SuspectNotFound(ContentNotFound):
    kind = "suspect"


class OptionNotFound(ContentNotFound):
    kind = "dialogue option"


class ChapterNotFound(ContentNotFound):
    kind = "chapter"


class SceneObjectNotFound(ContentNotFound):
    kind = "crime scene object"


class AccusationLocked(DailyNoirError):
    """Weekly accusation attempted before the accusation phase opened."""


class ChapterLocked(DailyNoirError):
    """Weekly chapter content requested before its calendar day."""


class NotAuthorized(DailyNoirError):
    """Admin-only operation requested by a regular player."""


class StorageUnavailable(DailyNoirError):
    """The backing store could not be reached or refused the operation."""


class ContentValidationFailed(DailyNoirError):
    def __init__(self, source: str, problems: Iterable[str]) -> None:
        self.source = source
        self.problems = list(problems)
        lines = "\n".join(f"- {problem}" for problem in self.problems)
        super().__init__(f"Invalid content in {source}:\n{lines}")
