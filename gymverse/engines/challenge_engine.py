"""Challenge Engine - Pure logic for challenge scoring and milestones.

This engine provides stateless functions for:
- Weighted challenge scores (difficulty, completion bonus, time bonus)
- Milestone crossings at 25/50/75/100% of the target
- Leaderboard entry construction for one participant
- Challenge validation and suggestions
- Per-user challenge statistics and completion streaks

Duration fields on a challenge are resolved in this order:
- days remaining: explicit ``days_remaining``, else
  ``total_duration_days - elapsed_days``, else days until ``end_date``
- total duration: explicit ``total_duration_days``, else the span from
  ``start_date`` to ``end_date``

All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import datetime
import math
from typing import TYPE_CHECKING

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import calculate_percentage, round_half_up, round_points

if TYPE_CHECKING:
    from ..type_defs import (
        ChallengeData,
        ChallengeParticipantProgress,
        ChallengeParticipation,
        ChallengeUserStats,
        LeaderboardEntry,
        Milestone,
    )


class ChallengeEngine:
    """Pure logic engine for challenge calculations.

    All methods are static - no instance state. ``now`` can be injected for
    deterministic results and defaults to the current UTC time.
    """

    # =========================================================================
    # DURATION RESOLUTION
    # =========================================================================

    @staticmethod
    def get_total_duration_days(challenge: ChallengeData) -> int:
        """Resolve the total challenge length in days (0 if unknown)."""
        if challenge.get("total_duration_days") is not None:
            return int(challenge["total_duration_days"])
        start = dt_utils.dt_parse(challenge.get("start_date"))
        end = dt_utils.dt_parse(challenge.get("end_date"))
        if start is None or end is None:
            return 0
        return dt_utils.dt_span_days(start, end)

    @classmethod
    def get_days_remaining(
        cls, challenge: ChallengeData, *, now: datetime | None = None
    ) -> int:
        """Resolve the number of days left in the challenge (never negative)."""
        if challenge.get("days_remaining") is not None:
            return max(0, int(challenge["days_remaining"]))
        if (
            challenge.get("total_duration_days") is not None
            and challenge.get("elapsed_days") is not None
        ):
            return max(
                0, int(challenge["total_duration_days"]) - int(challenge["elapsed_days"])
            )
        end = dt_utils.dt_parse(challenge.get("end_date"))
        if end is None:
            return 0
        return dt_utils.dt_days_until(end, now)

    @staticmethod
    def calculate_days_left(
        end_date: str | datetime | None, *, now: datetime | None = None
    ) -> int:
        """Return whole days (rounded up) until ``end_date``, never negative."""
        end = dt_utils.dt_parse(end_date)
        if end is None:
            return 0
        return dt_utils.dt_days_until(end, now)

    # =========================================================================
    # SCORING
    # =========================================================================

    @staticmethod
    def get_difficulty_multiplier(difficulty: str | None) -> float:
        """Return the score multiplier for a difficulty tier (1.0 if unknown)."""
        return const.DIFFICULTY_MULTIPLIERS.get(
            difficulty or "", const.DEFAULT_DIFFICULTY_MULTIPLIER
        )

    @staticmethod
    def calculate_progress_percentage(raw_progress: float, target_value: float) -> float:
        """Return progress toward target as a percentage capped at 100."""
        return calculate_percentage(raw_progress, target_value, cap=100)

    @classmethod
    def calculate_score(
        cls,
        raw_progress: float,
        challenge: ChallengeData,
        *,
        now: datetime | None = None,
    ) -> int:
        """Calculate a participant's weighted challenge score.

        score = raw x difficulty multiplier, x1.2 once the target is reached,
        x(1 + 0.1 x days_remaining / total_duration) while time remains,
        rounded half up.

        Args:
            raw_progress: Participant's progress in the challenge unit
            challenge: Challenge definition
            now: Reference instant for date-derived durations

        Returns:
            Integer score

        Examples:
            Advanced, raw 50, target 50, 15 of 30 days left → 126
            Beginner, raw 10, target 20, no time left → 10
        """
        score = raw_progress * cls.get_difficulty_multiplier(challenge.get("difficulty"))

        target = challenge.get("target_value", 0)
        if target > 0 and raw_progress / target >= 1.0:
            score *= const.CHALLENGE_COMPLETION_BONUS

        days_remaining = cls.get_days_remaining(challenge, now=now)
        total_days = cls.get_total_duration_days(challenge)
        if days_remaining > 0 and total_days > 0:
            score *= 1 + const.CHALLENGE_MAX_TIME_BONUS * days_remaining / total_days

        return round_half_up(score)

    # =========================================================================
    # MILESTONES
    # =========================================================================

    @staticmethod
    def calculate_milestones(
        existing: list[Milestone],
        current_progress: float,
        target_value: float,
        *,
        now: datetime | None = None,
    ) -> list[Milestone]:
        """Record milestone crossings at 25/50/75/100% of the target.

        Existing milestones are kept as-is; a threshold is only appended the
        first time it is crossed. Returns a new list sorted by value.
        """
        achieved_at = dt_utils.dt_format_iso(now or dt_utils.dt_now_utc()) or ""
        milestones = list(existing)
        recorded_values = {milestone["value"] for milestone in existing}

        for percentage in const.CHALLENGE_MILESTONE_PERCENTAGES:
            value = target_value * percentage / 100
            if value not in recorded_values and current_progress >= value:
                milestones.append({"value": value, "achieved_at": achieved_at})
                recorded_values.add(value)

        return sorted(milestones, key=lambda milestone: milestone["value"])

    # =========================================================================
    # LEADERBOARD ENTRIES
    # =========================================================================

    @classmethod
    def build_leaderboard_entry(
        cls,
        progress: ChallengeParticipantProgress,
        challenge: ChallengeData,
        *,
        now: datetime | None = None,
    ) -> LeaderboardEntry:
        """Build an unranked leaderboard entry for one participant.

        ``completed_at`` is carried over from the progress record, or stamped
        with ``now`` when the target is reached without one.
        """
        raw = progress["raw_progress"]
        percentage = cls.calculate_progress_percentage(raw, challenge.get("target_value", 0))

        entry: LeaderboardEntry = {
            "participant_id": progress["participant_id"],
            "score": cls.calculate_score(raw, challenge, now=now),
            "progress_percentage": percentage,
            "joined_at": progress.get("joined_at"),
        }
        if progress.get("display_name"):
            entry["display_name"] = progress["display_name"]

        completed_at = progress.get("completed_at")
        if completed_at:
            entry["completed_at"] = completed_at
        elif percentage >= 100:
            entry["completed_at"] = dt_utils.dt_format_iso(now or dt_utils.dt_now_utc())
        return entry

    # =========================================================================
    # VALIDATION & SUGGESTIONS
    # =========================================================================

    @staticmethod
    def validate_challenge(
        challenge: ChallengeData, *, now: datetime | None = None
    ) -> list[str]:
        """Return validation errors for a user-created challenge (empty if valid)."""
        errors: list[str] = []

        if len((challenge.get("title") or "").strip()) < const.CHALLENGE_TITLE_MIN_LENGTH:
            errors.append("Title must be at least 3 characters long")

        description = (challenge.get("description") or "").strip()
        if len(description) < const.CHALLENGE_DESCRIPTION_MIN_LENGTH:
            errors.append("Description must be at least 10 characters long")

        if not challenge.get("target_value") or challenge["target_value"] <= 0:
            errors.append("Target value must be greater than 0")

        if not challenge.get("end_date"):
            errors.append("End date is required")
        else:
            end = dt_utils.dt_parse(challenge["end_date"])
            if end is None or dt_utils.as_utc(end) <= dt_utils.as_utc(
                now or dt_utils.dt_now_utc()
            ):
                errors.append("End date must be in the future")

        if not challenge.get("reward_points") or challenge["reward_points"] <= 0:
            errors.append("Reward points must be greater than 0")

        return errors

    @staticmethod
    def calculate_user_level(completed: Iterable[ChallengeData]) -> int:
        """Return the user level earned from completed challenges' reward points."""
        total_points = sum(challenge.get("reward_points", 0) for challenge in completed)
        return total_points // const.CHALLENGE_POINTS_PER_LEVEL + 1

    @classmethod
    def get_suggested_challenges(
        cls,
        all_challenges: list[ChallengeData],
        participations: list[ChallengeParticipation],
        limit: int = const.DEFAULT_SUGGESTED_CHALLENGES_LIMIT,
        *,
        now: datetime | None = None,
    ) -> list[ChallengeData]:
        """Suggest challenges the user has not joined yet.

        Preference points:
        - +10 category the user has completed before
        - +5 difficulty matching the user level (<5 beginner, <15
          intermediate, otherwise advanced)
        - +3 featured, +2 more than 500 participants, +2 ending within 7 days

        Ties keep the order of ``all_challenges``.
        """
        joined_ids = {participation.get("challenge_id") for participation in participations}
        completed_ids = {
            participation.get("challenge_id")
            for participation in participations
            if participation.get("is_completed")
        }
        completed = [c for c in all_challenges if c.get("id") in completed_ids]
        favourite_categories = {c.get("category") for c in completed}
        user_level = cls.calculate_user_level(completed)

        if user_level < 5:
            preferred_difficulty = const.DIFFICULTY_BEGINNER
        elif user_level < 15:
            preferred_difficulty = const.DIFFICULTY_INTERMEDIATE
        else:
            preferred_difficulty = const.DIFFICULTY_ADVANCED

        def preference(challenge: ChallengeData) -> int:
            points = 0
            if challenge.get("category") in favourite_categories:
                points += 10
            if challenge.get("difficulty") == preferred_difficulty:
                points += 5
            if challenge.get("is_featured"):
                points += 3
            if challenge.get("participant_count", 0) > 500:
                points += 2
            if cls.get_days_remaining(challenge, now=now) <= 7:
                points += 2
            return points

        available = [c for c in all_challenges if c.get("id") not in joined_ids]
        return sorted(available, key=preference, reverse=True)[:limit]

    # =========================================================================
    # USER STATISTICS
    # =========================================================================

    @staticmethod
    def _completion_runs(completion_times: list[datetime]) -> list[int]:
        """Split ascending completion times into runs of close completions."""
        runs: list[int] = []
        previous: datetime | None = None
        for completed_at in completion_times:
            if (
                previous is not None
                and math.floor(dt_utils.dt_hours_between(previous, completed_at) / 24)
                <= const.CHALLENGE_STREAK_MAX_GAP_DAYS
            ):
                runs[-1] += 1
            else:
                runs.append(1)
            previous = completed_at
        return runs

    @classmethod
    def calculate_user_stats(
        cls,
        all_challenges: list[ChallengeData],
        participations: list[ChallengeParticipation],
        *,
        now: datetime | None = None,
    ) -> ChallengeUserStats:
        """Summarize a user's challenge history.

        Completion comes from the participation records. A challenge is
        active while it is joined, not completed and has days left. The
        completion streak counts completions at most
        CHALLENGE_STREAK_MAX_GAP_DAYS apart; the current streak is the run
        ending at the latest completion.

        Args:
            all_challenges: Every known challenge
            participations: The user's participation records
            now: Reference instant for days remaining

        Returns:
            ChallengeUserStats. Rates and averages are percentages rounded
            to two decimals.
        """
        by_id = {
            participation.get("challenge_id"): participation
            for participation in participations
        }
        joined = [c for c in all_challenges if c.get("id") in by_id]
        completed = [c for c in joined if by_id[c.get("id")].get("is_completed")]
        active = [
            c
            for c in joined
            if not by_id[c.get("id")].get("is_completed")
            and cls.get_days_remaining(c, now=now) > 0
        ]

        categories = Counter(c["category"] for c in completed if c.get("category"))
        favourite = (
            categories.most_common(1)[0][0]
            if categories
            else const.DEFAULT_FAVORITE_CATEGORY
        )

        average_completion = 0.0
        if participations:
            average_completion = round_points(
                sum(p.get("progress_percentage", 0) or 0 for p in participations)
                / len(participations)
            )

        completion_times: list[datetime] = []
        for participation in participations:
            if not participation.get("is_completed"):
                continue
            completed_at = dt_utils.dt_parse(participation.get("completed_at"))
            if completed_at is not None:
                completion_times.append(completed_at)
        completion_times.sort(key=dt_utils.as_utc)
        runs = cls._completion_runs(completion_times)

        return {
            "total_challenges": len(joined),
            "active_challenges": len(active),
            "completed_challenges": len(completed),
            "total_points": sum(c.get("reward_points", 0) for c in completed),
            "current_streak": runs[-1] if runs else 0,
            "longest_streak": max(runs, default=0),
            "favorite_category": favourite,
            "success_rate": calculate_percentage(len(completed), len(joined)),
            "average_completion": average_completion,
        }
