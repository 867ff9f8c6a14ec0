"""Request-level facade over content, progress, statistics and profiles.

Every call takes an explicit ``PlayerContext``; nothing about the caller is
cached between calls. Mutations go through the store's version-checked
updates so concurrent requests for the same player never lose a write.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
import logging
from typing import Callable

from dailynoir import config
from dailynoir.content.repository import ContentRepository, load_default_repository
from dailynoir.domain.enums import AchievementId
from dailynoir.domain.errors import (
    AccusationLocked,
    CaseNotFound,
    ChapterLocked,
    NotAuthorized,
    StorageUnavailable,
    SuspectNotFound,
)
from dailynoir.domain.models import Case, Clue, CrimeSceneObject, DialogueOption, Suspect, WeeklyCase, Witness
from dailynoir.domain.rules import find_chapter, find_clue_in, find_suspect_in
from dailynoir.investigation import accusation, clues
from dailynoir.investigation.dialog_graph import DialogueResult, root_options, select_option
from dailynoir.investigation.progress import PlayerProgress, WeeklyProgress
from dailynoir.persistence.db import GameStore
from dailynoir.profiling.achievements import SolveContext, add_points, record_accusation, record_start
from dailynoir.profiling.profile import DetectiveLeaderboard, DetectiveProfile, leaderboard_entry
from dailynoir.scheduling.chapters import (
    ChapterCompletion,
    ChapterStatus,
    complete_chapter,
    compute_chapter_statuses,
    is_day_unlocked,
)
from dailynoir.stats import leaderboard as stats
from dailynoir.util.time import now_epoch, today_utc

logger = logging.getLogger("dailynoir.engine")


@dataclass(frozen=True)
class PlayerContext:
    session_id: str
    player_id: str
    username: str | None = None

    @property
    def is_admin(self) -> bool:
        return bool(self.username) and self.username.lower() in config.ADMIN_USERNAMES


@dataclass(frozen=True)
class InitGameResult:
    case: Case
    progress: PlayerProgress


@dataclass(frozen=True)
class FindClueResult:
    clue: Clue
    progress: PlayerProgress | WeeklyProgress
    newly_found: bool
    chapter_day: int | None = None


@dataclass(frozen=True)
class ExamineResult:
    object: CrimeSceneObject
    clue: Clue | None
    progress: PlayerProgress | WeeklyProgress
    newly_found: bool = False


@dataclass(frozen=True)
class DialogueOutcome:
    response: str
    is_suspicious: bool
    unlocked_clue: Clue | None
    next_option_ids: tuple[str, ...]
    progress: PlayerProgress | WeeklyProgress

    @property
    def is_exhausted(self) -> bool:
        return not self.next_option_ids


@dataclass(frozen=True)
class AccuseResult:
    correct: bool
    suspect: Suspect
    progress: PlayerProgress
    already_accused: bool = False
    points_earned: int = 0
    total_points: int = 0
    new_achievements: list[AchievementId] = field(default_factory=list)


@dataclass(frozen=True)
class InitWeeklyResult:
    weekly_case: WeeklyCase
    progress: WeeklyProgress
    chapter_statuses: list[ChapterStatus]
    current_day_number: int
    is_accusation_unlocked: bool


@dataclass(frozen=True)
class WeeklyProgressResult:
    progress: WeeklyProgress
    chapter_statuses: list[ChapterStatus]
    current_day_number: int
    is_accusation_unlocked: bool


class CaseEngine:
    def __init__(
        self,
        repository: ContentRepository | None = None,
        store: GameStore | None = None,
        today: Callable[[], date] = today_utc,
        now: Callable[[], float] = now_epoch,
    ) -> None:
        self.repository = repository or load_default_repository()
        self.store = store or GameStore()
        self.today = today
        self.now = now

    def _fire_and_forget(self, action: str, func: Callable, *args):
        try:
            return func(*args)
        except StorageUnavailable as exc:
            logger.warning("%s skipped: %s", action, exc)
            return None

    # Daily case

    def _case(self) -> Case:
        return self.repository.current_case(self.today())

    def _default_progress(self, case: Case) -> Callable[[], PlayerProgress]:
        return lambda: PlayerProgress(case_id=case.id, day_number=case.day_number)

    def init(self, ctx: PlayerContext) -> InitGameResult:
        case = self._case()
        progress = self.store.get_progress(ctx.session_id, ctx.player_id, case.id, case.day_number)
        return InitGameResult(case=case, progress=progress)

    def get_progress(self, ctx: PlayerContext) -> PlayerProgress:
        case = self._case()
        return self.store.get_progress(ctx.session_id, ctx.player_id, case.id, case.day_number)

    def find_clue(self, ctx: PlayerContext, clue_id: str) -> FindClueResult:
        case = self._case()

        def transform(progress: PlayerProgress):
            discovery = clues.find_clue(progress, clue_id, case.clues)
            return discovery.progress, discovery

        progress, discovery = self.store.update_progress(
            ctx.session_id, ctx.player_id, self._default_progress(case), transform
        )
        return FindClueResult(clue=discovery.clue, progress=progress, newly_found=discovery.newly_found)

    def examine_object(self, ctx: PlayerContext, object_id: str) -> ExamineResult:
        case = self._case()
        obj, clue_id = clues.clue_for_object(case, object_id)
        if clue_id is None:
            return ExamineResult(object=obj, clue=None, progress=self.get_progress(ctx))
        found = self.find_clue(ctx, clue_id)
        return ExamineResult(object=obj, clue=found.clue, progress=found.progress, newly_found=found.newly_found)

    def preview_dialogue_option(self, suspect_id: str, option_id: str) -> DialogueResult:
        suspect = find_suspect_in(self._case().suspects, suspect_id)
        return select_option(suspect, option_id)

    def root_dialogue_options(self, suspect_id: str) -> list[DialogueOption]:
        return root_options(find_suspect_in(self._case().suspects, suspect_id))

    def select_dialogue_option(self, ctx: PlayerContext, suspect_id: str, option_id: str) -> DialogueOutcome:
        case = self._case()
        suspect = find_suspect_in(case.suspects, suspect_id)
        result = select_option(suspect, option_id)
        unlocked = find_clue_in(case.clues, result.unlocked_clue_id) if result.unlocked_clue_id else None

        def transform(progress: PlayerProgress):
            if suspect.id not in progress.suspects_interrogated:
                progress = replace(progress, suspects_interrogated=[*progress.suspects_interrogated, suspect.id])
            if unlocked is not None:
                progress = clues.find_clue(progress, unlocked.id, case.clues).progress
            return progress, None

        progress, _ = self.store.update_progress(
            ctx.session_id, ctx.player_id, self._default_progress(case), transform
        )
        return DialogueOutcome(
            response=result.response,
            is_suspicious=result.is_suspicious,
            unlocked_clue=unlocked,
            next_option_ids=result.next_option_ids,
            progress=progress,
        )

    def accuse(self, ctx: PlayerContext, suspect_id: str) -> AccuseResult:
        case = self._case()

        def transform(progress: PlayerProgress):
            result = accusation.accuse(progress, suspect_id, case.suspects)
            return result.progress, result

        progress, result = self.store.update_progress(
            ctx.session_id, ctx.player_id, self._default_progress(case), transform
        )
        if result.already_accused:
            profile = self._fire_and_forget("Profile lookup", self.store.get_profile, ctx.player_id)
            return AccuseResult(
                correct=result.correct,
                suspect=result.suspect,
                progress=progress,
                already_accused=True,
                total_points=profile.points if profile else 0,
            )

        logger.info(
            "Player %s accused %s in %s (%s)",
            ctx.player_id,
            result.suspect.id,
            ctx.session_id,
            "correct" if result.correct else "wrong",
        )
        self._fire_and_forget("Accusation stats", self._record_accusation_stats, ctx.session_id, result)
        update = self._fire_and_forget(
            "Profile update",
            self._record_solve,
            ctx,
            case.id,
            result.correct,
            len(progress.clues_found),
            len(case.clues),
            (stats.total_key(ctx.session_id), stats.solved_key(ctx.session_id)),
        )
        if update is None:
            return AccuseResult(correct=result.correct, suspect=result.suspect, progress=progress)
        return AccuseResult(
            correct=result.correct,
            suspect=result.suspect,
            progress=progress,
            points_earned=update.points_earned,
            total_points=update.profile.points,
            new_achievements=list(update.new_achievements),
        )

    def _record_accusation_stats(self, session_id: str, result: accusation.AccusationResult) -> None:
        self.store.increment(stats.total_key(session_id))
        self.store.increment(stats.accuse_key(session_id, result.suspect.id))
        if result.correct:
            self.store.increment(stats.solved_key(session_id))

    def _default_profile(self, ctx: PlayerContext) -> Callable[[], DetectiveProfile]:
        return lambda: DetectiveProfile(player_id=ctx.player_id, username=ctx.username or "Anonymous")

    def _with_username(self, profile: DetectiveProfile, ctx: PlayerContext) -> DetectiveProfile:
        if ctx.username and profile.username != ctx.username:
            return replace(profile, username=ctx.username)
        return profile

    def _record_solve(
        self,
        ctx: PlayerContext,
        case_id: str,
        correct: bool,
        clues_found: int,
        total_clues: int,
        counter_keys: tuple[str, str],
        points: int = config.POINTS_PER_SOLVE,
    ):
        """Fold a first-time accusation into the player's profile.

        ``counter_keys`` names the (total, solved) counters of the mode being
        played, read after this accusation was counted.
        """
        total_key, solved_key = counter_keys
        counters = self.store.get_counters([total_key, solved_key])
        solve = SolveContext(
            session_id=ctx.session_id,
            case_id=case_id,
            correct=correct,
            today=self.today(),
            now=self.now(),
            clues_found=clues_found,
            total_clues=total_clues,
            solved_count=counters[solved_key],
            total_players=counters[total_key],
            points=points,
        )

        def transform(profile: DetectiveProfile):
            update = record_accusation(self._with_username(profile, ctx), solve)
            return update.profile, update

        profile, update = self.store.update_profile(ctx.player_id, self._default_profile(ctx), transform)
        if update.new_achievements:
            logger.info("Player %s unlocked %s", ctx.player_id, ", ".join(update.new_achievements))
        return replace(update, profile=profile)

    def get_leaderboard(self, session_id: str) -> stats.LeaderboardStats:
        suspects = self._case().suspects
        total, solved = stats.total_key(session_id), stats.solved_key(session_id)
        accuse_keys = {suspect.id: stats.accuse_key(session_id, suspect.id) for suspect in suspects}
        counters = self.store.get_counters([total, solved, *accuse_keys.values()])
        return stats.build_leaderboard_stats(
            suspects,
            counters[total],
            counters[solved],
            {suspect_id: counters[key] for suspect_id, key in accuse_keys.items()},
        )

    def start_game(self, ctx: PlayerContext) -> DetectiveProfile:
        now = self.now()

        def transform(profile: DetectiveProfile):
            return record_start(self._with_username(profile, ctx), ctx.session_id, now), None

        profile, _ = self.store.update_profile(ctx.player_id, self._default_profile(ctx), transform)
        return profile

    def reset_progress(self, ctx: PlayerContext) -> int:
        if not ctx.is_admin:
            raise NotAuthorized(f"{ctx.username or ctx.player_id} may not reset progress")
        logger.info("Admin %s reset progress in %s", ctx.username, ctx.session_id)
        return self.store.reset_progress(ctx.session_id, ctx.player_id)

    # Detective profile

    def get_profile(self, ctx: PlayerContext) -> DetectiveProfile:
        profile = self.store.get_profile(ctx.player_id)
        return profile or self._default_profile(ctx)()

    def get_detective_leaderboard(
        self, ctx: PlayerContext, limit: int = config.DETECTIVE_LEADERBOARD_SIZE
    ) -> DetectiveLeaderboard:
        top = [leaderboard_entry(profile) for profile in self.store.top_profiles(limit)]
        return DetectiveLeaderboard(
            top_detectives=top,
            user_rank=self.store.profile_rank(ctx.player_id),
            user_profile=self.store.get_profile(ctx.player_id),
        )

    # Weekly case

    def _weekly_case(self) -> WeeklyCase:
        weekly = self.repository.current_weekly_case(self.today())
        if weekly is None:
            raise CaseNotFound("weekly", detail="no weekly case is scheduled")
        return weekly

    def _default_weekly(self, weekly: WeeklyCase) -> Callable[[], WeeklyProgress]:
        return lambda: WeeklyProgress(case_id=weekly.id)

    def _require_unlocked(self, weekly: WeeklyCase, chapter_day: int) -> None:
        find_chapter(weekly, chapter_day)
        if not is_day_unlocked(weekly.start_date, self.today(), chapter_day):
            raise ChapterLocked(f"Chapter {chapter_day} of {weekly.id} is not unlocked yet")

    def init_weekly(self, ctx: PlayerContext) -> InitWeeklyResult:
        weekly = self._weekly_case()
        progress = self.store.get_weekly_progress(ctx.session_id, ctx.player_id, weekly.id)
        schedule = compute_chapter_statuses(weekly, progress, self.today())
        return InitWeeklyResult(
            weekly_case=weekly,
            progress=progress,
            chapter_statuses=schedule.statuses,
            current_day_number=schedule.current_day_number,
            is_accusation_unlocked=schedule.is_accusation_unlocked,
        )

    def get_weekly_progress(self, ctx: PlayerContext) -> WeeklyProgressResult:
        started = self.init_weekly(ctx)
        return WeeklyProgressResult(
            progress=started.progress,
            chapter_statuses=started.chapter_statuses,
            current_day_number=started.current_day_number,
            is_accusation_unlocked=started.is_accusation_unlocked,
        )

    def complete_chapter(self, ctx: PlayerContext, day_number: int) -> ChapterCompletion:
        weekly = self._weekly_case()
        today = self.today()

        def transform(progress: WeeklyProgress):
            completion = complete_chapter(weekly, progress, day_number, today)
            return completion.progress, completion

        progress, completion = self.store.update_weekly_progress(
            ctx.session_id, ctx.player_id, self._default_weekly(weekly), transform
        )
        if completion.completed:
            logger.info("Player %s completed chapter %d of %s", ctx.player_id, day_number, weekly.id)
            self._fire_and_forget(
                "Chapter stats", self.store.increment, stats.weekly_chapter_key(ctx.session_id, day_number)
            )
            self._fire_and_forget("Profile points", self._award_points, ctx, completion.points_earned)
        return replace(completion, progress=progress)

    def _award_points(self, ctx: PlayerContext, points: int) -> DetectiveProfile:
        def transform(profile: DetectiveProfile):
            return add_points(self._with_username(profile, ctx), points), None

        profile, _ = self.store.update_profile(ctx.player_id, self._default_profile(ctx), transform)
        return profile

    def find_weekly_clue(self, ctx: PlayerContext, clue_id: str, chapter_day: int) -> FindClueResult:
        weekly = self._weekly_case()
        self._require_unlocked(weekly, chapter_day)

        def transform(progress: WeeklyProgress):
            discovery = clues.find_weekly_clue(progress, clue_id, chapter_day, weekly.all_clues)
            return discovery.progress, discovery

        progress, discovery = self.store.update_weekly_progress(
            ctx.session_id, ctx.player_id, self._default_weekly(weekly), transform
        )
        return FindClueResult(
            clue=discovery.clue,
            progress=progress,
            newly_found=discovery.newly_found,
            chapter_day=chapter_day,
        )

    def select_weekly_dialogue_option(
        self,
        ctx: PlayerContext,
        chapter_day: int,
        speaker_id: str,
        option_id: str,
    ) -> DialogueOutcome:
        weekly = self._weekly_case()
        self._require_unlocked(weekly, chapter_day)
        speaker = self.repository.speaker(weekly, chapter_day, speaker_id)
        if speaker is None:
            raise SuspectNotFound(speaker_id, detail=f"not available on day {chapter_day}")
        result = select_option(speaker, option_id)
        unlocked = find_clue_in(weekly.all_clues, result.unlocked_clue_id) if result.unlocked_clue_id else None
        field_name = "witnesses_interrogated" if isinstance(speaker, Witness) else "suspects_interrogated"

        def transform(progress: WeeklyProgress):
            seen = getattr(progress, field_name)
            if speaker.id not in seen:
                progress = replace(progress, **{field_name: [*seen, speaker.id]})
            if unlocked is not None:
                progress = clues.find_weekly_clue(progress, unlocked.id, chapter_day, weekly.all_clues).progress
            return progress, None

        progress, _ = self.store.update_weekly_progress(
            ctx.session_id, ctx.player_id, self._default_weekly(weekly), transform
        )
        return DialogueOutcome(
            response=result.response,
            is_suspicious=result.is_suspicious,
            unlocked_clue=unlocked,
            next_option_ids=result.next_option_ids,
            progress=progress,
        )

    def weekly_accuse(self, ctx: PlayerContext, suspect_id: str) -> accusation.WeeklyAccusationResult:
        weekly = self._weekly_case()
        today = self.today()

        def transform(progress: WeeklyProgress):
            if not progress.solved:
                schedule = compute_chapter_statuses(weekly, progress, today)
                if not schedule.is_accusation_unlocked:
                    raise AccusationLocked(f"Accusation for {weekly.id} opens after chapters 1-6 on day 7")
            result = accusation.weekly_accuse(progress, suspect_id, weekly)
            return result.progress, result

        progress, result = self.store.update_weekly_progress(
            ctx.session_id, ctx.player_id, self._default_weekly(weekly), transform
        )
        if not result.already_accused:
            logger.info(
                "Player %s made weekly accusation %s in %s (%s)",
                ctx.player_id,
                result.suspect.id,
                ctx.session_id,
                "correct" if result.correct else "wrong",
            )
            self._fire_and_forget("Weekly accusation stats", self._record_weekly_stats, ctx.session_id, result)
            update = self._fire_and_forget(
                "Profile update",
                self._record_solve,
                ctx,
                weekly.id,
                result.correct,
                len(progress.all_clues_found),
                len(weekly.all_clues),
                (stats.weekly_total_key(ctx.session_id), stats.weekly_solved_key(ctx.session_id)),
                result.total_points,
            )
            if update is not None:
                return replace(result, progress=progress, new_achievements=list(update.new_achievements))
        return replace(result, progress=progress)

    def _record_weekly_stats(self, session_id: str, result: accusation.WeeklyAccusationResult) -> None:
        self.store.increment(stats.weekly_total_key(session_id))
        self.store.increment(stats.weekly_accuse_key(session_id, result.suspect.id))
        if result.correct:
            self.store.increment(stats.weekly_solved_key(session_id))

    def get_weekly_leaderboard(self, session_id: str) -> stats.LeaderboardStats:
        suspects = self._weekly_case().suspects
        total, solved = stats.weekly_total_key(session_id), stats.weekly_solved_key(session_id)
        accuse_keys = {suspect.id: stats.weekly_accuse_key(session_id, suspect.id) for suspect in suspects}
        counters = self.store.get_counters([total, solved, *accuse_keys.values()])
        return stats.build_leaderboard_stats(
            suspects,
            counters[total],
            counters[solved],
            {suspect_id: counters[key] for suspect_id, key in accuse_keys.items()},
        )
