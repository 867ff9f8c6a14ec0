"""Calendar helpers for daily and weekly play."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
import time


@dataclass(frozen=True)
class WeekInfo:
    week_number: int
    start_date: date
    day_of_week: int


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def now_epoch() -> float:
    return time.time()


def parse_date(value: str | date | None) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def days_between(start: date, end: date) -> int:
    return (end - start).days


def is_next_day(earlier: date, later: date) -> bool:
    return days_between(earlier, later) == 1


def week_info(today: date) -> WeekInfo:
    """ISO week of ``today`` with Monday as day 1 and Sunday as day 7."""
    iso = today.isocalendar()
    monday = today - timedelta(days=iso.weekday - 1)
    return WeekInfo(week_number=iso.week, start_date=monday, day_of_week=iso.weekday)
