import pytest

from conftest import scenario_case
from dailynoir.domain.errors import SuspectNotFound
from dailynoir.investigation.accusation import accuse, weekly_accuse
from dailynoir.investigation.clues import find_clue
from dailynoir.investigation.progress import PlayerProgress, WeeklyProgress


@pytest.fixture()
def case():
    return scenario_case()


def test_wrong_accusation_is_final(case):
    progress = find_clue(PlayerProgress(case_id=case.id), "A", case.clues).progress
    assert progress.clues_found == ["A"]

    first = accuse(progress, "S1", case.suspects)
    assert first.correct is False
    assert first.progress.solved is True
    assert first.progress.accused_suspect == "S1"

    second = accuse(first.progress, "S2", case.suspects)
    assert second.already_accused is True
    assert second.correct is False
    assert second.suspect.id == "S1"
    assert second.progress == first.progress


@pytest.mark.parametrize("suspect_id", ["S1", "S2"])
def test_correct_iff_guilty(case, suspect_id):
    result = accuse(PlayerProgress(case_id=case.id), suspect_id, case.suspects)
    guilty = next(s for s in case.suspects if s.id == suspect_id).is_guilty
    assert result.correct is guilty
    assert result.progress.correct is guilty


def test_unknown_suspect_writes_nothing(case):
    progress = PlayerProgress(case_id=case.id)
    with pytest.raises(SuspectNotFound):
        accuse(progress, "S9", case.suspects)
    assert progress.solved is False


def test_weekly_points_for_correct_accusation(weekly_case):
    progress = WeeklyProgress(case_id=weekly_case.id, chapters_completed=[1, 2, 3, 4, 5, 6, 7])
    result = weekly_accuse(progress, "suspect_insider", weekly_case)
    assert result.correct
    assert result.points_earned == 500
    assert result.weekly_bonus == 200
    assert result.chapters_played_bonus == 35
    assert result.total_points == 735


def test_weekly_all_clues_bonus(weekly_case):
    all_ids = [clue.id for clue in weekly_case.all_clues]
    progress = WeeklyProgress(case_id=weekly_case.id, chapters_completed=[1], clues_found_by_chapter={1: all_ids})
    result = weekly_accuse(progress, "suspect_insider", weekly_case)
    assert result.points_earned == 600
    assert result.weekly_bonus == 0
    assert result.chapters_played_bonus == 5


def test_weekly_wrong_accusation_earns_nothing(weekly_case):
    result = weekly_accuse(WeeklyProgress(case_id=weekly_case.id), "suspect_rival", weekly_case)
    assert not result.correct
    assert result.total_points == 0
    repeat = weekly_accuse(result.progress, "suspect_insider", weekly_case)
    assert repeat.already_accused
    assert repeat.suspect.id == "suspect_rival"
