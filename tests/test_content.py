from datetime import date

import pytest

from conftest import scenario_case
from dailynoir.content.loader import load_case
from dailynoir.content.repository import ContentRepository, rotating_case_selector
from dailynoir.content.validation import validate_case, validate_weekly_case
from dailynoir.domain.errors import CaseNotFound, ContentValidationFailed
from dailynoir.investigation.dialog_graph import DialogGraph, unreachable_option_ids


def _all_speakers(repository):
    for case in repository.cases:
        yield from case.suspects
    for weekly in repository.weekly_cases:
        yield from weekly.suspects
        for chapter in weekly.chapters:
            yield from chapter.witnesses


def test_shipped_content_is_valid(repository):
    assert [case.id for case in repository.cases] == ["case_001"]
    assert [weekly.id for weekly in repository.weekly_cases] == ["weekly_001"]
    for case in repository.cases:
        assert validate_case(case) == []
    for weekly in repository.weekly_cases:
        assert validate_weekly_case(weekly) == []


def test_shipped_dialogue_graphs_are_closed(repository):
    for speaker in _all_speakers(repository):
        graph = DialogGraph.for_speaker(speaker)
        assert graph.root_ids(), speaker.id
        for option in speaker.dialogue_options:
            for next_id in option.next_options:
                assert graph.has_option(next_id)
        assert unreachable_option_ids(speaker) == []


def test_weekly_aliases_resolve_to_full_clues(weekly_case):
    day_one = weekly_case.chapter(1)
    assert [clue.id for clue in day_one.new_clues] == ["clue_poison_d1", "clue_message_d1"]
    assert day_one.new_clues[0].linked_to == "suspect_insider"
    assert weekly_case.guilty_suspect_id == "suspect_insider"


def test_two_guilty_suspects_rejected():
    case = scenario_case()
    suspects = [s.model_copy(update={"is_guilty": True}) for s in case.suspects]
    with pytest.raises(ContentValidationFailed) as excinfo:
        ContentRepository([case.model_copy(update={"suspects": suspects})])
    assert any("exactly one guilty suspect" in problem for problem in excinfo.value.problems)


def test_no_guilty_suspect_reported():
    case = scenario_case()
    suspects = [s.model_copy(update={"is_guilty": False}) for s in case.suspects]
    problems = validate_case(case.model_copy(update={"suspects": suspects}))
    assert any("found 0" in problem for problem in problems)


def test_dangling_follow_up_reported():
    case = scenario_case()
    first = case.suspects[0]
    options = [first.dialogue_options[0].model_copy(update={"next_options": ("missing",)})]
    broken = first.model_copy(update={"dialogue_options": options})
    problems = validate_case(case.model_copy(update={"suspects": [broken, case.suspects[1]]}))
    assert any("missing" in problem for problem in problems)


def test_unknown_clue_references_reported():
    case = scenario_case()
    objects = [case.crime_scene_objects[0].model_copy(update={"clue_id": "nope"})]
    problems = validate_case(case.model_copy(update={"crime_scene_objects": objects}))
    assert any("unknown clue nope" in problem for problem in problems)


def test_missing_root_option_reported():
    case = scenario_case()
    second = case.suspects[1]
    options = [second.dialogue_options[0].model_copy(update={"is_root_option": False})]
    rootless = second.model_copy(update={"dialogue_options": options})
    problems = validate_case(case.model_copy(update={"suspects": [case.suspects[0], rootless]}))
    assert problems == ["S2: no root dialogue option"]


def test_weekly_guilty_id_must_match(weekly_case):
    problems = validate_weekly_case(weekly_case.model_copy(update={"guilty_suspect_id": "suspect_rival"}))
    assert any("disagrees" in problem for problem in problems)


def test_weekly_needs_seven_chapters(weekly_case):
    problems = validate_weekly_case(weekly_case.model_copy(update={"chapters": weekly_case.chapters[:6]}))
    assert any("chapters must be days" in problem for problem in problems)


def test_malformed_yaml_fails_load(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("id: case_x\ntitle: [unclosed\n", encoding="utf-8")
    with pytest.raises(ContentValidationFailed):
        load_case(path)


def test_missing_fields_fail_load(tmp_path):
    path = tmp_path / "thin.yml"
    path.write_text("id: case_x\ntitle: Thin\n", encoding="utf-8")
    with pytest.raises(ContentValidationFailed) as excinfo:
        load_case(path)
    assert excinfo.value.problems


def test_get_case_by_id_and_day(repository):
    assert repository.get_case("case_001").day_number == 1
    assert repository.get_case(1).id == "case_001"
    with pytest.raises(CaseNotFound):
        repository.get_case("case_999")


def test_get_weekly_case_empty_pool_is_none():
    repository = ContentRepository([scenario_case()])
    assert repository.get_weekly_case("weekly_001") is None
    assert repository.current_weekly_case(date(2026, 1, 27)) is None


def test_get_weekly_case_unknown_raises(repository):
    assert repository.get_weekly_case(1).id == "weekly_001"
    with pytest.raises(CaseNotFound):
        repository.get_weekly_case("weekly_999")


def test_current_weekly_case_keeps_authored_run(repository):
    assert repository.current_weekly_case(date(2026, 1, 27)).start_date == date(2026, 1, 27)
    assert repository.current_weekly_case(date(2026, 2, 2)).start_date == date(2026, 1, 27)


def test_current_weekly_case_reanchors_repeat(repository):
    weekly = repository.current_weekly_case(date(2026, 2, 5))
    assert weekly.start_date == date(2026, 2, 3)
    assert repository.weekly_cases[0].start_date == date(2026, 1, 27)


def test_rotating_selector_cycles_pool():
    first = scenario_case()
    second = scenario_case(id="case_two", day_number=2)
    repository = ContentRepository([first, second], case_selector=rotating_case_selector)
    picks = {repository.current_case(date(2026, 1, day)).id for day in (1, 2)}
    assert picks == {"case_test", "case_two"}


def test_speaker_lookup_respects_chapter_day(repository, weekly_case):
    assert repository.speaker(weekly_case, 1, "suspect_insider").id == "suspect_insider"
    assert repository.speaker(weekly_case, 1, "witness_automod").id == "witness_automod"
    assert repository.speaker(weekly_case, 1, "witness_cleaner") is None
    assert repository.speaker(weekly_case, 2, "witness_cleaner").id == "witness_cleaner"
