from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from dailynoir import config
from dailynoir.engine import CaseEngine, PlayerContext
from dailynoir.persistence.db import GameStore
from dailynoir.util.time import parse_date, today_utc


def main() -> None:
    parser = argparse.ArgumentParser(description="Show weekly chapter gating for a player.")
    parser.add_argument("--session", type=str, default="local")
    parser.add_argument("--player", type=str, default="local-player")
    parser.add_argument("--date", type=str, default=None, help="ISO date to evaluate (default: today, UTC)")
    parser.add_argument("--db", type=str, default=str(config.DB_PATH))
    parser.add_argument("--complete", type=int, default=None, help="complete this chapter first")
    args = parser.parse_args()
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    day = parse_date(args.date) or today_utc()
    store = GameStore(args.db)
    engine = CaseEngine(store=store, today=lambda: day)
    ctx = PlayerContext(session_id=args.session, player_id=args.player)
    try:
        if args.complete is not None:
            completion = engine.complete_chapter(ctx, args.complete)
            if completion.completed:
                print(
                    f"Completed chapter {args.complete}: +{completion.points_earned} "
                    f"(streak {completion.streak_bonus}, on time {completion.on_time_bonus})"
                )
            else:
                print(f"Chapter {args.complete} not completed (locked or already done)")
        state = engine.init_weekly(ctx)
    finally:
        store.close()

    print(f"{state.weekly_case.title} [{state.weekly_case.id}] on {day}")
    print(f"Unlocked days: {state.current_day_number}")
    for status in state.chapter_statuses:
        if status.is_completed:
            label = "done"
        elif status.is_available:
            label = "open"
        else:
            label = "locked"
        marker = " <- current" if status.is_current else ""
        print(f"  Day {status.day_number}: {status.title} [{label}]{marker}")
    print(f"Accusation unlocked: {'yes' if state.is_accusation_unlocked else 'no'}")


if __name__ == "__main__":
    main()
