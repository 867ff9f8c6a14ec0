from datetime import date
import threading

import pytest

from conftest import scenario_case
from dailynoir.domain.enums import AchievementId
from dailynoir.domain.errors import (
    AccusationLocked,
    ChapterLocked,
    ChapterNotFound,
    ClueNotFound,
    NotAuthorized,
    OptionNotFound,
    StorageUnavailable,
    SuspectNotFound,
)
from dailynoir.content.repository import ContentRepository, rotating_case_selector
from dailynoir.engine import CaseEngine, PlayerContext
from dailynoir.persistence.db import GameStore


def test_init_creates_progress(engine, ctx):
    started = engine.init(ctx)
    assert started.case.id == "case_001"
    assert started.progress.case_id == "case_001"
    assert started.progress.clues_found == []


def test_find_clue_is_idempotent(engine, ctx):
    first = engine.find_clue(ctx, "clue_poison")
    second = engine.find_clue(ctx, "clue_poison")
    assert first.newly_found and not second.newly_found
    assert second.progress.clues_found == ["clue_poison"]
    assert engine.get_progress(ctx).clues_found == ["clue_poison"]


def test_unknown_clue_writes_nothing(engine, ctx):
    with pytest.raises(ClueNotFound):
        engine.find_clue(ctx, "clue_missing")
    assert engine.get_progress(ctx).clues_found == []


def test_examine_object(scenario_engine, ctx):
    examined = scenario_engine.examine_object(ctx, "obj_a")
    assert examined.clue.id == "A"
    assert examined.progress.clues_found == ["A"]
    plain = scenario_engine.examine_object(ctx, "obj_plain")
    assert plain.clue is None
    assert plain.progress.clues_found == ["A"]


def test_dialogue_unlocks_clue_and_records_suspect(engine, ctx):
    opened = engine.select_dialogue_option(ctx, "suspect_comod", "comod_1")
    assert opened.next_option_ids == ("comod_2", "comod_3")
    assert opened.unlocked_clue is None
    assert opened.progress.suspects_interrogated == ["suspect_comod"]

    garden = engine.select_dialogue_option(ctx, "suspect_comod", "comod_3")
    assert garden.unlocked_clue.name == "Garden Connection"
    assert garden.is_exhausted
    assert garden.progress.clues_found == ["clue_garden"]

    repeat = engine.select_dialogue_option(ctx, "suspect_comod", "comod_3")
    assert repeat.unlocked_clue.id == "clue_garden"
    assert repeat.progress.clues_found == ["clue_garden"]


def test_dialogue_errors(engine, ctx):
    with pytest.raises(SuspectNotFound):
        engine.select_dialogue_option(ctx, "suspect_nobody", "comod_1")
    with pytest.raises(OptionNotFound):
        engine.select_dialogue_option(ctx, "suspect_comod", "banned_1")


def test_preview_and_root_options_are_stateless(engine, ctx):
    assert [o.id for o in engine.root_dialogue_options("suspect_ex")] == ["ex_1"]
    assert engine.preview_dialogue_option("suspect_ex", "ex_2").unlocked_clue_id == "clue_meeting"
    assert engine.get_progress(ctx).clues_found == []


def test_scenario_wrong_accusation_sticks(scenario_engine, ctx):
    scenario_engine.find_clue(ctx, "A")
    first = scenario_engine.accuse(ctx, "S1")
    assert first.correct is False
    assert first.progress.solved and first.progress.accused_suspect == "S1"

    second = scenario_engine.accuse(ctx, "S2")
    assert second.already_accused
    assert second.correct is False
    assert second.suspect.id == "S1"
    assert scenario_engine.get_progress(ctx).accused_suspect == "S1"


def test_rotated_case_starts_with_fresh_progress(store, clock, ctx):
    repository = ContentRepository(
        [scenario_case(), scenario_case(id="case_two", day_number=2)],
        case_selector=rotating_case_selector,
    )
    engine = CaseEngine(repository=repository, store=store, today=clock.today, now=clock.now)

    assert engine.init(ctx).case.id == "case_two"
    engine.find_clue(ctx, "A")
    assert engine.accuse(ctx, "S1").correct is False

    clock.advance(days=1)
    started = engine.init(ctx)
    assert started.case.id == "case_test"
    assert started.progress.case_id == "case_test"
    assert started.progress.clues_found == []
    assert not started.progress.solved

    result = engine.accuse(ctx, "S2")
    assert result.correct
    assert not result.already_accused
    assert result.progress.case_id == "case_test"
    assert engine.get_profile(ctx).solved_cases == ["case_test"]


def test_concurrent_duplicate_accusations_count_once(repository, clock, ctx, tmp_path):
    store = GameStore(tmp_path / "accuse.sqlite3")
    engine = CaseEngine(repository=repository, store=store, today=clock.today, now=clock.now)
    results = []

    def accuse():
        results.append(engine.accuse(ctx, "suspect_comod"))

    threads = [threading.Thread(target=accuse) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 8
    assert len([result for result in results if not result.already_accused]) == 1
    assert all(result.correct for result in results)
    board = engine.get_leaderboard(ctx.session_id)
    assert board.total_players == 1
    assert board.solved_count == 1
    assert engine.get_profile(ctx).points == 100
    store.close()


def test_accuse_updates_stats_once(engine, ctx):
    engine.accuse(ctx, "suspect_comod")
    engine.accuse(ctx, "suspect_ex")
    other = PlayerContext(session_id=ctx.session_id, player_id="t2_bob")
    engine.accuse(other, "suspect_banned")

    board = engine.get_leaderboard(ctx.session_id)
    assert board.total_players == 2
    assert board.solved_count == 1
    assert board.solve_rate == 50
    counts = {stat.suspect_id: stat.count for stat in board.suspect_stats}
    assert counts == {"suspect_comod": 1, "suspect_banned": 1, "suspect_ex": 0}
    assert board.suspect_stats[-1].suspect_id == "suspect_ex"


def test_empty_leaderboard(engine):
    board = engine.get_leaderboard("quiet_post")
    assert board.total_players == 0
    assert board.solve_rate == 0
    assert all(stat.percentage == 0 for stat in board.suspect_stats)


def test_correct_accusation_awards_points_and_achievements(engine, ctx, clock):
    engine.start_game(ctx)
    clock.advance(seconds=120)
    result = engine.accuse(ctx, "suspect_comod")
    assert result.correct
    assert result.points_earned == 100
    assert result.total_points == 100
    assert AchievementId.FIRST_BLOOD in result.new_achievements
    assert AchievementId.SPEED_DEMON in result.new_achievements

    repeat = engine.accuse(ctx, "suspect_comod")
    assert repeat.already_accused
    assert repeat.points_earned == 0
    assert repeat.total_points == 100

    profile = engine.get_profile(ctx)
    assert profile.username == "alice"
    assert profile.solved_cases == ["case_001"]


def test_profile_failure_does_not_fail_accusation(engine, ctx, monkeypatch):
    def unavailable(*args, **kwargs):
        raise StorageUnavailable("profiles offline")

    monkeypatch.setattr(engine.store, "update_profile", unavailable)
    result = engine.accuse(ctx, "suspect_comod")
    assert result.correct
    assert result.points_earned == 0
    assert engine.get_progress(ctx).solved


def test_detective_leaderboard(engine, ctx):
    engine.accuse(ctx, "suspect_comod")
    bob = PlayerContext(session_id=ctx.session_id, player_id="t2_bob", username="bob")
    engine.accuse(bob, "suspect_ex")
    board = engine.get_detective_leaderboard(bob)
    assert [entry.player_id for entry in board.top_detectives] == ["t2_alice", "t2_bob"]
    assert board.top_detectives[0].points == 100
    assert board.user_rank == 2
    assert board.user_profile.total_accusations == 1


def test_reset_requires_admin(engine, ctx):
    engine.find_clue(ctx, "clue_poison")
    with pytest.raises(NotAuthorized):
        engine.reset_progress(ctx)
    admin = PlayerContext(session_id=ctx.session_id, player_id=ctx.player_id, username="AshScars")
    assert engine.reset_progress(admin) == 1
    assert engine.get_progress(ctx).clues_found == []


def test_weekly_init_on_start_date(engine, ctx):
    started = engine.init_weekly(ctx)
    assert started.weekly_case.id == "weekly_001"
    assert started.current_day_number == 1
    assert [s.day_number for s in started.chapter_statuses if s.is_unlocked] == [1]
    assert not started.is_accusation_unlocked


def test_weekly_chapter_gating(engine, ctx):
    with pytest.raises(ChapterLocked):
        engine.find_weekly_clue(ctx, "clue_access_log", 2)
    with pytest.raises(ChapterLocked):
        engine.select_weekly_dialogue_option(ctx, 2, "witness_cleaner", "cleaner_q2")
    with pytest.raises(ChapterNotFound):
        engine.find_weekly_clue(ctx, "clue_access_log", 9)
    locked = engine.complete_chapter(ctx, 3)
    assert not locked.completed and locked.points_earned == 0


def test_weekly_witness_dialogue(engine, ctx, clock):
    clock.advance(days=1)
    outcome = engine.select_weekly_dialogue_option(ctx, 2, "witness_cleaner", "cleaner_q2")
    assert outcome.unlocked_clue.id == "clue_access_log"
    assert outcome.progress.witnesses_interrogated == ["witness_cleaner"]
    assert outcome.progress.clues_found_by_chapter == {2: ["clue_access_log"]}
    with pytest.raises(SuspectNotFound):
        engine.select_weekly_dialogue_option(ctx, 2, "witness_friend", "friend_q1")


def test_weekly_accusation_locked_until_day_seven(engine, ctx):
    with pytest.raises(AccusationLocked):
        engine.weekly_accuse(ctx, "suspect_insider")
    assert not engine.get_weekly_progress(ctx).progress.solved


def test_full_week(engine, ctx, clock):
    total = 0
    for day in range(1, 7):
        completion = engine.complete_chapter(ctx, day)
        assert completion.completed
        total += completion.points_earned
        clock.advance(days=1)
    assert clock.today() == date(2026, 2, 2)

    state = engine.get_weekly_progress(ctx)
    assert state.is_accusation_unlocked
    assert state.progress.chapters_completed == [1, 2, 3, 4, 5, 6]

    result = engine.weekly_accuse(ctx, "suspect_insider")
    assert result.correct
    assert result.chapters_played_bonus == 30
    assert result.weekly_bonus == 0
    assert AchievementId.FIRST_BLOOD in result.new_achievements
    repeat = engine.weekly_accuse(ctx, "suspect_rival")
    assert repeat.already_accused and repeat.suspect.id == "suspect_insider"

    board = engine.get_weekly_leaderboard(ctx.session_id)
    assert board.total_players == 1 and board.solve_rate == 100
    assert engine.get_profile(ctx).points == total + result.total_points


def test_weekly_solve_counts_toward_profile(engine, ctx, clock):
    for day in range(1, 7):
        engine.complete_chapter(ctx, day)
        clock.advance(days=1)
    result = engine.weekly_accuse(ctx, "suspect_insider")
    assert result.correct

    profile = engine.get_profile(ctx)
    assert profile.solved_cases == ["weekly_001"]
    assert profile.correct_accusations == 1
    assert profile.total_accusations == 1
    assert profile.achievements == result.new_achievements

    daily = engine.accuse(ctx, "suspect_comod")
    assert daily.points_earned == 100
    assert engine.get_profile(ctx).solved_cases == ["weekly_001", "case_001"]


def test_wrong_weekly_accusation_resets_run(engine, ctx, clock):
    for day in range(1, 7):
        engine.complete_chapter(ctx, day)
        clock.advance(days=1)
    result = engine.weekly_accuse(ctx, "suspect_rival")
    assert not result.correct
    assert result.total_points == 0
    assert result.new_achievements == []

    profile = engine.get_profile(ctx)
    assert profile.solved_cases == []
    assert profile.total_accusations == 1
    assert profile.correct_accusations == 0
