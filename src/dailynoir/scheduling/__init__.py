"""Weekly chapter gating."""

from dailynoir.scheduling.chapters import (
    ChapterCompletion,
    ChapterSchedule,
    ChapterStatus,
    chapter_points,
    complete_chapter,
    compute_chapter_statuses,
    unlocked_day_count,
)

__all__ = [
    "ChapterCompletion",
    "ChapterSchedule",
    "ChapterStatus",
    "chapter_points",
    "complete_chapter",
    "compute_chapter_statuses",
    "unlocked_day_count",
]
