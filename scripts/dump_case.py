from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from dailynoir import config
from dailynoir.content.repository import load_default_repository
from dailynoir.investigation.dialog_graph import DialogGraph


def _dump_speaker(speaker, indent: str = "  ") -> None:
    graph = DialogGraph.for_speaker(speaker)
    print(f"{indent}{speaker.name} [{speaker.id}]")

    def walk(option_id: str, depth: int, seen: set[str]) -> None:
        option = graph.option(option_id)
        marks = []
        if option.is_suspicious:
            marks.append("suspicious")
        if option.unlocks_clue:
            marks.append(f"clue={option.unlocks_clue}")
        suffix = f" ({', '.join(marks)})" if marks else ""
        print(f"{indent}{'  ' * depth}- {option.id}: {option.text}{suffix}")
        if option_id in seen:
            return
        for next_id in option.next_options:
            walk(next_id, depth + 1, seen | {option_id})

    for root_id in graph.root_ids():
        walk(root_id, 1, set())


def main() -> None:
    parser = argparse.ArgumentParser(description="Print a case with its solution and dialogue trees.")
    parser.add_argument("--case-id", type=str, default=None)
    parser.add_argument("--weekly", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    repository = load_default_repository()
    if args.weekly:
        weekly = repository.get_weekly_case(args.case_id) if args.case_id else repository.weekly_cases[0]
        if weekly is None:
            print("No weekly cases loaded.")
            sys.exit(1)
        print(f"Weekly case: {weekly.title} [{weekly.id}] starts {weekly.start_date}")
        print(f"Culprit: {weekly.guilty_suspect_id}")
        for suspect in weekly.suspects:
            _dump_speaker(suspect)
        for chapter in weekly.chapters:
            flag = " (accusation)" if chapter.is_accusation_day else ""
            print(f"Day {chapter.day_number}: {chapter.title}{flag}")
            print(f"  clues: {', '.join(clue.id for clue in chapter.new_clues) or '-'}")
            for witness in chapter.witnesses:
                _dump_speaker(witness, indent="    ")
        return

    case = repository.get_case(args.case_id) if args.case_id else repository.cases[0]
    guilty = case.guilty_suspect
    print(f"Case: {case.title} [{case.id}] day {case.day_number}")
    print(f"Culprit: {guilty.name if guilty else '?'}")
    print("Clues:")
    for clue in case.clues:
        print(f"  - {clue.id}: {clue.name}")
    print("Suspects:")
    for suspect in case.suspects:
        _dump_speaker(suspect)


if __name__ == "__main__":
    main()
