"""Read-only registry of daily and weekly cases."""

from __future__ import annotations

from datetime import date, timedelta
from functools import lru_cache
import logging
from pathlib import Path
from typing import Callable, Sequence

from dailynoir import config
from dailynoir.content.loader import load_cases, load_weekly_cases
from dailynoir.content.validation import ensure_valid_case, ensure_valid_weekly_case
from dailynoir.domain.errors import CaseNotFound, ContentValidationFailed
from dailynoir.domain.models import Case, Speaker, WeeklyCase
from dailynoir.util.time import days_between, week_info

logger = logging.getLogger("dailynoir.content")

CaseSelector = Callable[[Sequence[Case], date], Case]


def first_case_selector(cases: Sequence[Case], today: date) -> Case:
    return cases[0]


def rotating_case_selector(cases: Sequence[Case], today: date) -> Case:
    """Cycle through the pool by day-of-year."""
    return cases[today.timetuple().tm_yday % len(cases)]


class ContentRepository:
    """Validated, process-wide case content.

    Every case is checked in the constructor so authoring mistakes stop
    startup instead of surfacing mid-game.
    """

    def __init__(
        self,
        cases: Sequence[Case],
        weekly_cases: Sequence[WeeklyCase] = (),
        case_selector: CaseSelector = first_case_selector,
    ) -> None:
        if not cases:
            raise ContentValidationFailed("repository", ["at least one daily case is required"])
        self._cases = [ensure_valid_case(case) for case in cases]
        self._weekly_cases = [ensure_valid_weekly_case(weekly) for weekly in weekly_cases]
        self._case_selector = case_selector
        ids = [case.id for case in self._cases] + [weekly.id for weekly in self._weekly_cases]
        if len(ids) != len(set(ids)):
            raise ContentValidationFailed("repository", [f"duplicate case ids in {ids}"])
        logger.info(
            "Content loaded: %d daily case(s), %d weekly case(s)",
            len(self._cases),
            len(self._weekly_cases),
        )

    @classmethod
    def from_directory(
        cls,
        root: Path,
        case_selector: CaseSelector = first_case_selector,
    ) -> "ContentRepository":
        cases = load_cases(root / "cases")
        weekly_dir = root / "weekly"
        weekly_cases = load_weekly_cases(weekly_dir) if weekly_dir.exists() else []
        return cls(cases, weekly_cases, case_selector=case_selector)

    @property
    def cases(self) -> list[Case]:
        return list(self._cases)

    @property
    def weekly_cases(self) -> list[WeeklyCase]:
        return list(self._weekly_cases)

    def get_case(self, selector: str | int) -> Case:
        for case in self._cases:
            if isinstance(selector, int) and case.day_number == selector:
                return case
            if case.id == selector:
                return case
        raise CaseNotFound(selector)

    def get_weekly_case(self, selector: str | int) -> WeeklyCase | None:
        if not self._weekly_cases:
            return None
        for weekly in self._weekly_cases:
            if isinstance(selector, int) and weekly.week_number == selector:
                return weekly
            if weekly.id == selector:
                return weekly
        raise CaseNotFound(selector)

    def current_case(self, today: date) -> Case:
        return self._case_selector(self._cases, today)

    def current_weekly_case(self, today: date) -> WeeklyCase | None:
        """Pick this week's saga by ISO week number modulo the pool size.

        The pool repeats once exhausted. A case whose authored week is over
        is re-anchored by whole weeks so that today falls inside its run and
        chapters unlock day by day again.
        """
        if not self._weekly_cases:
            return None
        weekly = self._weekly_cases[week_info(today).week_number % len(self._weekly_cases)]
        elapsed = days_between(weekly.start_date, today)
        if elapsed >= config.CHAPTER_COUNT:
            weeks = elapsed // config.CHAPTER_COUNT
            weekly = weekly.model_copy(update={"start_date": weekly.start_date + timedelta(days=weeks * config.CHAPTER_COUNT)})
        return weekly

    def speaker(self, weekly: WeeklyCase, day_number: int, speaker_id: str) -> Speaker | None:
        """A suspect, or a witness from chapters up to ``day_number``."""
        for suspect in weekly.suspects:
            if suspect.id == speaker_id:
                return suspect
        for chapter in weekly.chapters:
            if chapter.day_number > day_number:
                continue
            for witness in chapter.witnesses:
                if witness.id == speaker_id:
                    return witness
        return None


@lru_cache(maxsize=1)
def load_default_repository() -> ContentRepository:
    return ContentRepository.from_directory(config.CONTENT_DIR)
