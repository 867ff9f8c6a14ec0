from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from dailynoir import config
from dailynoir.content.loader import load_case, load_weekly_case
from dailynoir.content.validation import validate_case, validate_weekly_case
from dailynoir.domain.errors import ContentValidationFailed
from dailynoir.investigation.dialog_graph import unreachable_option_ids


def _speakers(item):
    yield from item.suspects
    for chapter in getattr(item, "chapters", []):
        yield from chapter.witnesses


def _check(path: Path, weekly: bool) -> bool:
    try:
        item = load_weekly_case(path) if weekly else load_case(path)
    except ContentValidationFailed as exc:
        print(f"[FAIL] {path.name}")
        for problem in exc.problems:
            print(f"  - {problem}")
        return False
    problems = validate_weekly_case(item) if weekly else validate_case(item)
    if problems:
        print(f"[FAIL] {path.name}")
        for problem in problems:
            print(f"  - {problem}")
        return False
    print(f"[OK]   {path.name} ({item.id})")
    for speaker in _speakers(item):
        orphans = unreachable_option_ids(speaker)
        if orphans:
            print(f"  ! {speaker.id}: unreachable options {', '.join(orphans)}")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate daily and weekly case content.")
    parser.add_argument("--content-dir", type=str, default=str(config.CONTENT_DIR))
    args = parser.parse_args()
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    root = Path(args.content_dir)
    results = [_check(path, weekly=False) for path in sorted((root / "cases").glob("*.yml"))]
    results += [_check(path, weekly=True) for path in sorted((root / "weekly").glob("*.yml"))]
    if not results:
        print(f"No content found under {root}")
        sys.exit(1)
    if not all(results):
        sys.exit(1)


if __name__ == "__main__":
    main()
