"""Runtime configuration for the case progression engine."""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parent
CONTENT_DIR = PACKAGE_ROOT / "content" / "data"

DB_PATH = Path(os.environ.get("DAILYNOIR_DB_PATH", "dailynoir.sqlite3"))
STORE_TIMEOUT_SECONDS = 5.0
STORE_MAX_RETRIES = 8

LOG_LEVEL = os.environ.get("DAILYNOIR_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

CHAPTER_COUNT = 7
ACCUSATION_DAY = 7

POINTS_PER_SOLVE = 100

WEEKLY_POINTS = {
    "CHAPTER_COMPLETE": 50,
    "STREAK_MULTIPLIER_PER_DAY": 0.1,
    "STREAK_MULTIPLIER_CAP": 0.5,
    "ON_TIME_BONUS": 25,
    "CORRECT_ACCUSATION": 500,
    "FULL_WEEK_BONUS": 200,
    "ALL_CLUES_BONUS": 100,
    "PER_CHAPTER_PLAYED": 5,
}

FIRST_BLOOD_LIMIT = 10
SPEED_DEMON_SECONDS = 5 * 60
LONE_WOLF_MIN_PLAYERS = 10
LONE_WOLF_RATE = 10
PERFECT_RECORD_RUN = 5

DETECTIVE_LEADERBOARD_SIZE = 10

ADMIN_USERNAMES = frozenset(
    name.strip().lower()
    for name in os.environ.get("DAILYNOIR_ADMINS", "ashscars").split(",")
    if name.strip()
)
