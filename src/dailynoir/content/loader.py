"""Load authored cases from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dailynoir.domain.errors import ContentValidationFailed
from dailynoir.domain.models import Case, WeeklyCase

logger = logging.getLogger("dailynoir.content")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ContentValidationFailed(str(path), [str(exc)]) from exc
    if not isinstance(data, dict):
        raise ContentValidationFailed(str(path), ["top-level YAML node must be a mapping"])
    return data


def _validation_lines(exc: ValidationError) -> list[str]:
    lines = []
    for error in exc.errors():
        where = ".".join(str(part) for part in error.get("loc", ()))
        lines.append(f"{where}: {error.get('msg', 'invalid value')}")
    return lines


def load_case(path: Path) -> Case:
    data = _read_yaml(path)
    try:
        case = Case.model_validate(data)
    except ValidationError as exc:
        raise ContentValidationFailed(str(path), _validation_lines(exc)) from exc
    logger.debug("Loaded case %s from %s", case.id, path)
    return case


def load_weekly_case(path: Path) -> WeeklyCase:
    data = _read_yaml(path)
    try:
        weekly = WeeklyCase.model_validate(data)
    except ValidationError as exc:
        raise ContentValidationFailed(str(path), _validation_lines(exc)) from exc
    logger.debug("Loaded weekly case %s from %s", weekly.id, path)
    return weekly


def load_cases(directory: Path) -> list[Case]:
    return [load_case(path) for path in sorted(directory.glob("*.yml"))]


def load_weekly_cases(directory: Path) -> list[WeeklyCase]:
    return [load_weekly_case(path) for path in sorted(directory.glob("*.yml"))]
