"""Case content loading, validation and lookup."""

from dailynoir.content.loader import load_case, load_cases, load_weekly_case, load_weekly_cases
from dailynoir.content.repository import (
    ContentRepository,
    first_case_selector,
    load_default_repository,
    rotating_case_selector,
)
from dailynoir.content.validation import (
    ensure_valid_case,
    ensure_valid_weekly_case,
    validate_case,
    validate_weekly_case,
)

__all__ = [
    "ContentRepository",
    "ensure_valid_case",
    "ensure_valid_weekly_case",
    "first_case_selector",
    "load_case",
    "load_cases",
    "load_default_repository",
    "load_weekly_case",
    "load_weekly_cases",
    "rotating_case_selector",
    "validate_case",
    "validate_weekly_case",
]
