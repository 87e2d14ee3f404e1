"""Progression Manager - Stateful orchestration of the progression engines.

This manager is the only component that mutates stored progression state:
- Workout recording: history, progress vector, streak rewards, achievements
- Generic progress events (personal records, social actions, goals)
- Streak screen summaries
- Challenge progress, milestones and leaderboards with rank movement

ARCHITECTURE:
- ProgressionManager = STATEFUL orchestration (reads/writes ProgressionStore)
- StreakEngine / AchievementEngine / ProgressEngine / ChallengeEngine /
  LeaderboardEngine = pure logic (STATELESS)

Read-modify-write cycles are serialized with a re-entrant lock so the
manager can be shared between threads.
"""

from __future__ import annotations

from datetime import datetime
import threading
from typing import TYPE_CHECKING, Any

from .. import const
from ..catalog import get_default_achievement_catalog
from ..engines.achievement_engine import AchievementEngine
from ..engines.challenge_engine import ChallengeEngine
from ..engines.leaderboard_engine import LeaderboardEngine
from ..engines.progress_engine import ProgressEngine
from ..engines.streak_engine import StreakEngine
from ..utils import dt_utils

if TYPE_CHECKING:
    from ..store import ProgressionStore
    from ..type_defs import (
        AchievementTemplate,
        ChallengeData,
        ChallengeLeaderboard,
        ChallengeProgressResult,
        LeaderboardEntry,
        LeaderboardInsights,
        RandomSource,
        StreakSummary,
        WorkoutRecordResult,
        WorkoutSession,
    )


class ProgressionManager:
    """Manager for per-user progression and challenge leaderboards.

    Responsibilities:
    - Own the user and challenge buckets of the store
    - Feed engines with stored state and persist their results
    - Award achievement points and streak reward points

    NOT responsible for:
    - Any calculation (handled by the engines)
    - File handling (handled by ProgressionStore)
    """

    def __init__(
        self,
        store: ProgressionStore,
        achievement_catalog: list[AchievementTemplate] | None = None,
        *,
        rng: RandomSource | None = None,
    ) -> None:
        """Initialize the ProgressionManager.

        Args:
            store: Loaded ProgressionStore
            achievement_catalog: Validated templates (defaults to the built-in catalog)
            rng: Random source for encouragement messages
        """
        self._store = store
        self._catalog = (
            achievement_catalog
            if achievement_catalog is not None
            else get_default_achievement_catalog()
        )
        self._rng = rng
        self._lock = threading.RLock()

    @property
    def achievement_catalog(self) -> list[AchievementTemplate]:
        """Templates used for unlock decisions."""
        return self._catalog

    # =========================================================================
    # STATE ACCESS
    # =========================================================================

    def _users(self) -> dict[str, Any]:
        return self._store.data.setdefault(const.DATA_USERS, {})

    def _challenges(self) -> dict[str, Any]:
        return self._store.data.setdefault(const.DATA_CHALLENGES, {})

    def _snapshots(self) -> dict[str, Any]:
        return self._store.data.setdefault(const.DATA_LEADERBOARD_SNAPSHOTS, {})

    def _ensure_user(self, user_id: str) -> dict[str, Any]:
        """Return the user record, creating it on first use."""
        users = self._users()
        if user_id not in users:
            const.LOGGER.debug("Creating progression record for user %s", user_id)
            users[user_id] = {
                const.DATA_USER_HISTORY: [],
                const.DATA_USER_PROGRESS: {},
                const.DATA_USER_UNLOCKED_ACHIEVEMENTS: [],
                const.DATA_USER_UNLOCKED_AT: {},
                const.DATA_USER_TOTAL_POINTS: 0,
                const.DATA_USER_STREAK_MILESTONES: StreakEngine.get_streak_milestones(),
                const.DATA_USER_STREAK_REWARDS: [],
            }
        return users[user_id]

    def _get_challenge_record(self, challenge_id: str) -> dict[str, Any]:
        record = self._challenges().get(challenge_id)
        if record is None:
            const.LOGGER.error("Challenge ID '%s' not found", challenge_id)
            raise ValueError(f"Challenge not found: {challenge_id}")
        return record

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        """Return the stored record for a user, or None."""
        return self._users().get(user_id)

    @staticmethod
    def _serialize_session(session: WorkoutSession) -> dict[str, Any]:
        """Return a JSON-safe copy with timestamps as ISO strings."""
        serialized: dict[str, Any] = {}
        for key, value in session.items():
            if isinstance(value, datetime):
                serialized[key] = dt_utils.dt_format_iso(value)
            else:
                serialized[key] = value
        return serialized

    def _unlock_achievements(self, user: dict[str, Any], now: datetime) -> list[str]:
        """Unlock newly reached achievements and award their points."""
        unlocked: list[str] = user[const.DATA_USER_UNLOCKED_ACHIEVEMENTS]
        newly_unlocked = AchievementEngine.check_achievements(
            user[const.DATA_USER_PROGRESS], unlocked, self._catalog
        )
        if not newly_unlocked:
            return []

        stamp = dt_utils.dt_format_iso(now)
        unlocked.extend(newly_unlocked)
        for achievement_id in newly_unlocked:
            user[const.DATA_USER_UNLOCKED_AT][achievement_id] = stamp
        user[const.DATA_USER_TOTAL_POINTS] += AchievementEngine.calculate_points(
            newly_unlocked, self._catalog
        )
        return newly_unlocked

    # =========================================================================
    # WORKOUTS & EVENTS
    # =========================================================================

    def record_workout(
        self,
        user_id: str,
        session: WorkoutSession,
        *,
        now: datetime | None = None,
    ) -> WorkoutRecordResult:
        """Record a completed workout and apply everything that follows.

        Appends the session to history, updates the progress vector and the
        streak, grants each streak reward the first time its day count is
        reached, updates streak milestones and unlocks achievements. Saves
        the store. Nothing is stored if any step fails.

        Raises:
            ValueError: If the session has no parseable ``completed_at``, or
                a session field has the wrong type.
        """
        now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
        completed_at = dt_utils.dt_parse(session.get("completed_at"))
        if completed_at is None:
            raise ValueError("Workout session requires a valid completed_at timestamp")

        with self._lock:
            existing = self._users().get(user_id) or {}
            history: list[dict[str, Any]] = existing.get(const.DATA_USER_HISTORY, [])
            today = dt_utils.as_local(now).date()

            previous_streak = StreakEngine.calculate_streaks(history, today=today)
            known_days = {
                dt_utils.dt_to_local_date(item.get("completed_at")) for item in history
            }
            new_active_day = dt_utils.as_local(completed_at).date() not in known_days

            session_record = self._serialize_session(session)
            updated_history = [*history, session_record]

            payload = {**session, "new_active_day": new_active_day}
            progress = ProgressEngine.apply_event(
                existing.get(const.DATA_USER_PROGRESS, {}),
                const.EVENT_WORKOUT_COMPLETED,
                payload,
            )
            streak = StreakEngine.calculate_streaks(updated_history, today=today)
            progress = ProgressEngine.apply_event(
                progress,
                const.EVENT_STREAK_UPDATED,
                {
                    "current_streak": streak["current_streak"],
                    "longest_streak": streak["longest_streak"],
                },
            )

            user = self._ensure_user(user_id)
            user[const.DATA_USER_HISTORY] = updated_history
            user[const.DATA_USER_PROGRESS] = progress

            points_before = user[const.DATA_USER_TOTAL_POINTS]
            granted: list[int] = user.setdefault(const.DATA_USER_STREAK_REWARDS, [])

            reward = None
            if streak["current_streak"] != previous_streak["current_streak"]:
                reward = StreakEngine.get_reward_milestone(streak["current_streak"])
                if reward and reward["days"] in granted:
                    const.LOGGER.debug(
                        "User %s already received the %s day streak reward",
                        user_id,
                        reward["days"],
                    )
                    reward = None
                if reward:
                    granted.append(reward["days"])
                    if reward["reward_type"] == const.REWARD_TYPE_POINTS:
                        user[const.DATA_USER_TOTAL_POINTS] += int(reward["reward_value"])
                    const.LOGGER.info(
                        "User %s reached streak reward '%s' (%s days)",
                        user_id,
                        reward["title"],
                        reward["days"],
                    )

            milestones_before = {
                milestone["id"]
                for milestone in user[const.DATA_USER_STREAK_MILESTONES]
                if milestone.get("achieved")
            }
            user[const.DATA_USER_STREAK_MILESTONES] = StreakEngine.update_milestones(
                user[const.DATA_USER_STREAK_MILESTONES],
                streak["longest_streak"],
                now=now,
            )
            newly_achieved = [
                milestone["id"]
                for milestone in user[const.DATA_USER_STREAK_MILESTONES]
                if milestone.get("achieved") and milestone["id"] not in milestones_before
            ]

            unlocked = self._unlock_achievements(user, now)
            if unlocked:
                const.LOGGER.info("User %s unlocked achievements: %s", user_id, unlocked)

            self._store.save()

            return {
                "streak": streak,
                "unlocked_achievements": unlocked,
                "points_awarded": user[const.DATA_USER_TOTAL_POINTS] - points_before,
                "reward_milestone": reward,
                "newly_achieved_milestones": newly_achieved,
            }

    def record_event(
        self,
        user_id: str,
        event_type: str,
        payload: dict[str, Any] | None = None,
        *,
        now: datetime | None = None,
    ) -> list[str]:
        """Apply a progress event and return newly unlocked achievement ids.

        Raises:
            UnknownProgressEventError: If event_type is not supported.
        """
        now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
        with self._lock:
            user = self._ensure_user(user_id)
            user[const.DATA_USER_PROGRESS] = ProgressEngine.apply_event(
                user[const.DATA_USER_PROGRESS], event_type, payload
            )
            unlocked = self._unlock_achievements(user, now)
            const.LOGGER.debug(
                "Applied %s for user %s, unlocked: %s", event_type, user_id, unlocked
            )
            self._store.save()
            return unlocked

    def get_streak_summary(
        self, user_id: str, *, now: datetime | None = None
    ) -> StreakSummary:
        """Return streak, recovery, message and rewards for a user."""
        now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
        with self._lock:
            user = self._users().get(user_id) or {}
            history = list(user.get(const.DATA_USER_HISTORY, []))
            milestones = list(
                user.get(const.DATA_USER_STREAK_MILESTONES)
                or StreakEngine.get_streak_milestones()
            )

        streak = StreakEngine.calculate_streaks(
            history, today=dt_utils.as_local(now).date()
        )
        recovery = StreakEngine.calculate_streak_recovery(history, now=now)
        return {
            "streak": streak,
            "recovery": recovery,
            "message": StreakEngine.get_motivational_message(
                streak, recovery, now=now, rng=self._rng
            ),
            "milestones": milestones,
            "multiplier": StreakEngine.calculate_streak_multiplier(
                streak["current_streak"]
            ),
            "next_reward": StreakEngine.get_next_reward_milestone(
                streak["current_streak"]
            ),
        }

    # =========================================================================
    # CHALLENGES
    # =========================================================================

    def register_challenge(self, challenge: ChallengeData) -> None:
        """Add or replace a challenge definition, keeping its participants."""
        with self._lock:
            challenges = self._challenges()
            record = challenges.setdefault(
                challenge["id"],
                {
                    "challenge": {},
                    const.DATA_CHALLENGE_PARTICIPANTS: {},
                    const.DATA_CHALLENGE_MILESTONES: {},
                },
            )
            record["challenge"] = dict(challenge)
            self._store.save()

    def update_challenge_progress(
        self,
        challenge_id: str,
        participant_id: str,
        raw_progress: float,
        *,
        display_name: str | None = None,
        now: datetime | None = None,
    ) -> ChallengeProgressResult:
        """Record a participant's progress and any milestone crossings.

        The participant joins on first update. ``completed_at`` is stamped
        the first time the target is reached.

        Raises:
            ValueError: If the challenge is not registered.
        """
        now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
        stamp = dt_utils.dt_format_iso(now)
        with self._lock:
            record = self._get_challenge_record(challenge_id)
            challenge: ChallengeData = record["challenge"]
            participants = record[const.DATA_CHALLENGE_PARTICIPANTS]

            participant = participants.setdefault(
                participant_id,
                {"participant_id": participant_id, "joined_at": stamp},
            )
            participant["raw_progress"] = raw_progress
            if display_name:
                participant["display_name"] = display_name

            target = challenge.get("target_value", 0)
            if not participant.get("completed_at") and target > 0 and raw_progress >= target:
                participant["completed_at"] = stamp
                const.LOGGER.info(
                    "Participant %s completed challenge %s", participant_id, challenge_id
                )

            existing = record[const.DATA_CHALLENGE_MILESTONES].get(participant_id, [])
            milestones = ChallengeEngine.calculate_milestones(
                existing, raw_progress, target, now=now
            )
            existing_values = {milestone["value"] for milestone in existing}
            record[const.DATA_CHALLENGE_MILESTONES][participant_id] = milestones

            self._store.save()

            return {
                "entry": ChallengeEngine.build_leaderboard_entry(
                    participant, challenge, now=now
                ),
                "milestones": milestones,
                "new_milestones": [
                    milestone
                    for milestone in milestones
                    if milestone["value"] not in existing_values
                ],
            }

    def _build_entries(
        self,
        record: dict[str, Any],
        current_participant_id: str | None,
        now: datetime,
    ) -> list[LeaderboardEntry]:
        entries: list[LeaderboardEntry] = []
        for participant in record[const.DATA_CHALLENGE_PARTICIPANTS].values():
            entry = ChallengeEngine.build_leaderboard_entry(
                participant, record["challenge"], now=now
            )
            if current_participant_id is not None:
                entry["is_current_user"] = (
                    participant["participant_id"] == current_participant_id
                )
            entries.append(entry)
        return entries

    def get_challenge_leaderboard(
        self,
        challenge_id: str,
        *,
        discipline: str = const.RANKING_STANDARD,
        current_participant_id: str | None = None,
        now: datetime | None = None,
    ) -> ChallengeLeaderboard:
        """Rank a challenge's participants and compare with the last snapshot.

        The new ranking is stored as the snapshot for the next call (one
        snapshot per challenge and discipline).

        Raises:
            ValueError: If the challenge is not registered.
            UnknownRankingDisciplineError: If discipline is unknown.
        """
        now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
        with self._lock:
            record = self._get_challenge_record(challenge_id)
            entries = LeaderboardEngine.apply_ranking(
                self._build_entries(record, current_participant_id, now), discipline
            )

            challenge_snapshots = self._snapshots().setdefault(challenge_id, {})
            previous = challenge_snapshots.get(discipline, {}).get("entries", [])

            rank_changes = LeaderboardEngine.calculate_rank_changes(
                previous, entries, discipline
            )
            movements = LeaderboardEngine.classify_rank_movements(
                previous, entries, discipline
            )

            challenge_snapshots[discipline] = {
                "taken_at": dt_utils.dt_format_iso(now),
                "entries": [
                    {
                        "participant_id": entry["participant_id"],
                        "score": entry["score"],
                        "rank": entry["rank"],
                    }
                    for entry in entries
                ],
            }
            self._store.save()

        return {
            "challenge_id": challenge_id,
            "discipline": discipline,
            "entries": entries,
            "rank_changes": rank_changes,
            "movements": movements,
        }

    def get_leaderboard_insights(
        self, challenge_id: str, *, now: datetime | None = None
    ) -> LeaderboardInsights:
        """Return cohort insights for a challenge (standard ranking).

        Raises:
            ValueError: If the challenge is not registered.
        """
        now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
        with self._lock:
            record = self._get_challenge_record(challenge_id)
            entries = LeaderboardEngine.apply_ranking(self._build_entries(record, None, now))
        return LeaderboardEngine.generate_leaderboard_insights(entries)
