from __future__ import annotations

from datetime import date, timedelta

import pytest

from dailynoir import config
from dailynoir.content.repository import ContentRepository
from dailynoir.domain.models import Case
from dailynoir.engine import CaseEngine, PlayerContext
from dailynoir.persistence.db import GameStore

WEEK_START = date(2026, 1, 27)


class FixedClock:
    def __init__(self, day: date, epoch: float = 1_769_500_000.0) -> None:
        self.day = day
        self.epoch = epoch

    def today(self) -> date:
        return self.day

    def now(self) -> float:
        return self.epoch

    def advance(self, days: int = 0, seconds: float = 0) -> None:
        self.day += timedelta(days=days)
        self.epoch += days * 86400 + seconds


def scenario_case(**overrides) -> Case:
    payload = {
        "id": "case_test",
        "title": "Scenario",
        "day_number": 1,
        "intro": "intro",
        "victim_name": "victim",
        "victim_description": "victim",
        "location": "office",
        "crime_scene_objects": [
            {"id": "obj_a", "name": "Desk", "description": "desk", "clue_id": "A"},
            {"id": "obj_plain", "name": "Lamp", "description": "lamp"},
        ],
        "suspects": [
            {
                "id": "S1",
                "name": "First",
                "description": "first",
                "alibi": "home",
                "is_guilty": False,
                "dialogue_options": [
                    {"id": "s1_q1", "text": "Where?", "response": "Home.", "is_root_option": True, "next_options": ["s1_q2"]},
                    {"id": "s1_q2", "text": "Sure?", "response": "Yes.", "unlocks_clue": "B"},
                ],
            },
            {
                "id": "S2",
                "name": "Second",
                "description": "second",
                "alibi": "out",
                "is_guilty": True,
                "dialogue_options": [
                    {"id": "s2_q1", "text": "Where?", "response": "Out.", "is_root_option": True, "is_suspicious": True},
                ],
            },
        ],
        "clues": [
            {"id": "A", "name": "Clue A", "description": "a", "linked_to": "S2"},
            {"id": "B", "name": "Clue B", "description": "b"},
        ],
    }
    payload.update(overrides)
    return Case.model_validate(payload)


@pytest.fixture(scope="session")
def repository() -> ContentRepository:
    return ContentRepository.from_directory(config.CONTENT_DIR)


@pytest.fixture()
def store():
    game_store = GameStore(":memory:")
    yield game_store
    game_store.close()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(WEEK_START)


@pytest.fixture()
def engine(repository, store, clock) -> CaseEngine:
    return CaseEngine(repository=repository, store=store, today=clock.today, now=clock.now)


@pytest.fixture()
def scenario_engine(store, clock) -> CaseEngine:
    return CaseEngine(
        repository=ContentRepository([scenario_case()]),
        store=store,
        today=clock.today,
        now=clock.now,
    )


@pytest.fixture()
def ctx() -> PlayerContext:
    return PlayerContext(session_id="post_1", player_id="t2_alice", username="alice")


@pytest.fixture()
def weekly_case(repository):
    return repository.get_weekly_case("weekly_001")
