"""Streak Engine - Pure logic for consecutive-day workout streaks.

This engine provides stateless functions for:
- Current and longest streak calculation from workout history
- Streak recovery windows after a missed day
- Motivational messaging for the streak screen
- Weekly / monthly streak summaries
- Streak badge milestones, reward ladder and point multipliers

Sessions are grouped by calendar date in the reference timezone configured
through ``dt_utils.set_default_timezone()``. Several sessions on the same
date count as one workout day. Sessions without ``completed_at`` are ignored.

All functions are static methods that operate on passed-in data. State
management belongs in ProgressionManager.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
import math
import random
from typing import TYPE_CHECKING

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import round_half_up

if TYPE_CHECKING:
    from ..type_defs import (
        MonthlyStats,
        MotivationalMessage,
        RandomSource,
        RecoveryWindow,
        RewardMilestone,
        StreakMilestone,
        StreakState,
        WeeklyStreak,
        WorkoutSession,
    )

# Used when callers do not inject their own RandomSource
_DEFAULT_RANDOM = random.Random()


class StreakEngine:
    """Pure logic engine for workout streaks.

    All methods are static - no instance state. ``today`` / ``now`` can be
    injected for deterministic results; they default to the current date in
    the reference timezone and the current UTC time.
    """

    # =========================================================================
    # HISTORY PROJECTION
    # =========================================================================

    @staticmethod
    def _completion_times(history: Iterable[WorkoutSession]) -> list[datetime]:
        """Return parsed completion timestamps, skipping unfinished sessions."""
        completed: list[datetime] = []
        for session in history:
            raw = session.get("completed_at")
            if not raw:
                continue
            parsed = dt_utils.dt_parse(raw)
            if parsed is None:
                const.LOGGER.warning(
                    "Skipping workout with unparseable completed_at: %s", raw
                )
                continue
            completed.append(parsed)
        return completed

    @classmethod
    def _workout_dates(cls, history: Iterable[WorkoutSession]) -> set[date]:
        """Project completed sessions onto unique reference-timezone dates."""
        return {
            dt_utils.as_local(completed_at).date()
            for completed_at in cls._completion_times(history)
        }

    @staticmethod
    def _longest_run(days: Iterable[date]) -> int:
        """Return the longest run of consecutive dates."""
        longest = 0
        run = 0
        previous: date | None = None
        for day in sorted(set(days)):
            if previous is not None and (day - previous).days == 1:
                run += 1
            else:
                run = 1
            longest = max(longest, run)
            previous = day
        return longest

    # =========================================================================
    # STREAK CALCULATION
    # =========================================================================

    @classmethod
    def calculate_streaks(
        cls,
        history: Iterable[WorkoutSession],
        *,
        today: date | None = None,
    ) -> StreakState:
        """Calculate current and longest streaks from workout history.

        The current streak is only alive when the most recent workout day is
        today or yesterday; it then counts back day by day while unbroken.

        Args:
            history: Workout sessions (any order)
            today: Reference date (defaults to today in the reference timezone)

        Returns:
            StreakState with current/longest streak and boundary dates. An
            empty history yields the zero state.

        Examples:
            Workouts on today, today-1, today-2 → current 3, longest 3
            Two workouts today only → current 1, longest 1
        """
        workout_dates = cls._workout_dates(history)
        if not workout_dates:
            return {
                "current_streak": 0,
                "longest_streak": 0,
                "last_activity_date": None,
                "streak_start_date": None,
            }

        today = today or dt_utils.dt_today_local()
        yesterday = today - timedelta(days=1)
        last_activity = max(workout_dates)

        current_streak = 0
        streak_start: date | None = None
        if last_activity in (today, yesterday):
            cursor = last_activity
            while cursor in workout_dates:
                current_streak += 1
                streak_start = cursor
                cursor -= timedelta(days=1)

        longest_streak = max(cls._longest_run(workout_dates), current_streak)

        return {
            "current_streak": current_streak,
            "longest_streak": longest_streak,
            "last_activity_date": last_activity,
            "streak_start_date": streak_start,
        }

    @classmethod
    def calculate_streak_recovery(
        cls,
        history: Iterable[WorkoutSession],
        *,
        now: datetime | None = None,
    ) -> RecoveryWindow:
        """Determine whether a broken streak can still be recovered.

        Elapsed time is measured from the latest completion timestamp. A
        recovery is possible while no more than STREAK_RECOVERY_WINDOW_HOURS
        have passed and at most STREAK_RECOVERY_MAX_MISSED_DAYS whole days
        were missed. STREAK_RECOVERY_MAX_USES_PER_MONTH is not enforced.

        Args:
            history: Workout sessions (any order)
            now: Reference instant (defaults to current UTC time)

        Returns:
            RecoveryWindow. ``deadline`` is only set when eligible.
        """
        history = list(history)
        now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
        not_eligible: RecoveryWindow = {
            "eligible": False,
            "deadline": None,
            "missed_days": 0,
            "recovery_units_needed": 0,
        }

        streak = cls.calculate_streaks(history, today=dt_utils.as_local(now).date())
        if streak["current_streak"] > 0:
            return not_eligible

        completion_times = cls._completion_times(history)
        if not completion_times:
            return not_eligible

        last_activity = max(completion_times, key=dt_utils.as_utc)
        hours_since = dt_utils.dt_hours_between(last_activity, now)
        missed_days = max(0, math.floor(hours_since / 24))

        eligible = (
            hours_since <= const.STREAK_RECOVERY_WINDOW_HOURS
            and missed_days <= const.STREAK_RECOVERY_MAX_MISSED_DAYS
        )
        if not eligible:
            return {
                "eligible": False,
                "deadline": None,
                "missed_days": missed_days,
                "recovery_units_needed": 0,
            }

        return {
            "eligible": True,
            "deadline": dt_utils.as_utc(last_activity)
            + timedelta(hours=const.STREAK_RECOVERY_WINDOW_HOURS),
            "missed_days": missed_days,
            "recovery_units_needed": missed_days,
        }

    # =========================================================================
    # MESSAGING
    # =========================================================================

    @staticmethod
    def get_motivational_message(
        streak_state: StreakState,
        recovery: RecoveryWindow,
        *,
        now: datetime | None = None,
        rng: RandomSource | None = None,
    ) -> MotivationalMessage:
        """Pick the message shown for the current streak situation.

        Priority: recovery > celebration > new personal best > encouragement
        (no streak) > keep going.
        """
        current = streak_state["current_streak"]
        longest = streak_state["longest_streak"]

        deadline = recovery.get("deadline")
        if recovery.get("eligible") and deadline is not None:
            now = dt_utils.dt_parse(now) or dt_utils.dt_now_utc()
            hours_left = math.floor(dt_utils.dt_hours_between(now, deadline))
            return {
                "message": const.STREAK_RECOVERY_MESSAGE.format(hours=hours_left),
                "category": const.MESSAGE_CATEGORY_RECOVERY,
                "icon": const.STREAK_RECOVERY_ICON,
            }

        for minimum, template, icon in const.STREAK_CELEBRATION_THRESHOLDS:
            if current >= minimum:
                return {
                    "message": template.format(days=current),
                    "category": const.MESSAGE_CATEGORY_CELEBRATION,
                    "icon": icon,
                }

        if current > 0 and current == longest:
            return {
                "message": const.STREAK_PERSONAL_BEST_MESSAGE.format(days=current),
                "category": const.MESSAGE_CATEGORY_MILESTONE,
                "icon": const.STREAK_PERSONAL_BEST_ICON,
            }

        if current == 0:
            source = rng or _DEFAULT_RANDOM
            return {
                "message": source.choice(const.STREAK_ENCOURAGEMENTS),
                "category": const.MESSAGE_CATEGORY_ENCOURAGEMENT,
                "icon": const.STREAK_ENCOURAGEMENT_ICON,
            }

        return {
            "message": const.STREAK_KEEP_GOING_MESSAGE.format(days=current),
            "category": const.MESSAGE_CATEGORY_ENCOURAGEMENT,
            "icon": const.STREAK_KEEP_GOING_ICON,
        }

    # =========================================================================
    # PERIOD SUMMARIES
    # =========================================================================

    @classmethod
    def get_weekly_streaks(
        cls,
        history: Iterable[WorkoutSession],
        *,
        today: date | None = None,
        weeks: int = const.STREAK_WEEKLY_HISTORY_WEEKS,
    ) -> list[WeeklyStreak]:
        """Summarize the last ``weeks`` Sunday-started weeks, oldest first.

        ``streak`` is the longest run of consecutive workout days inside the
        week; runs crossing the week boundary are cut at the boundary.
        """
        workout_dates = cls._workout_dates(history)
        today = today or dt_utils.dt_today_local()
        current_week_start = dt_utils.dt_start_of_week(today)

        summaries: list[WeeklyStreak] = []
        for offset in range(weeks):
            week_start = current_week_start - timedelta(weeks=offset)
            week_days = [week_start + timedelta(days=day) for day in range(7)]
            worked = [day for day in week_days if day in workout_dates]
            summaries.insert(
                0,
                {
                    "week_start": week_start,
                    "label": f"{week_start.month}/{week_start.day}",
                    "streak": cls._longest_run(worked),
                    "workout_days": worked,
                },
            )
        return summaries

    @classmethod
    def get_monthly_stats(
        cls,
        history: Iterable[WorkoutSession],
        *,
        today: date | None = None,
        months: int = const.STREAK_MONTHLY_HISTORY_MONTHS,
    ) -> list[MonthlyStats]:
        """Summarize the last ``months`` calendar months, oldest first.

        ``total_workouts`` counts sessions; ``consistency`` is the share of
        the month's days that had at least one workout, rounded half up.
        """
        session_dates = [
            dt_utils.as_local(completed_at).date()
            for completed_at in cls._completion_times(history)
        ]
        today = today or dt_utils.dt_today_local()
        first_of_month = today.replace(day=1)

        summaries: list[MonthlyStats] = []
        for offset in range(months):
            month_start = dt_utils.dt_add_months(first_of_month, -offset)
            days_in_month = dt_utils.dt_days_in_month(month_start)
            in_month = [
                day
                for day in session_dates
                if (day.year, day.month) == (month_start.year, month_start.month)
            ]
            unique_days = set(in_month)
            summaries.insert(
                0,
                {
                    "month_start": month_start,
                    "label": month_start.strftime("%b %Y"),
                    "total_workouts": len(in_month),
                    "longest_streak": cls._longest_run(unique_days),
                    "consistency": round_half_up(
                        len(unique_days) / days_in_month * 100
                    ),
                },
            )
        return summaries

    # =========================================================================
    # MILESTONES & REWARDS
    # =========================================================================

    @staticmethod
    def get_streak_milestones() -> list[StreakMilestone]:
        """Return the streak badge ladder, nothing achieved yet."""
        return [
            {
                "id": milestone_id,
                "name": name,
                "description": description,
                "target": target,
                "icon": icon,
                "color": color,
                "achieved": False,
            }
            for milestone_id, name, description, target, icon, color in (
                const.STREAK_BADGE_MILESTONES
            )
        ]

    @staticmethod
    def update_milestones(
        milestones: list[StreakMilestone],
        longest_streak: int,
        *,
        now: datetime | None = None,
    ) -> list[StreakMilestone]:
        """Mark milestones reached by ``longest_streak`` as achieved.

        Returns a new list. Already achieved milestones keep their original
        ``achieved_at`` and are never reset, so repeated calls are no-ops.
        """
        achieved_at = dt_utils.dt_format_iso(now or dt_utils.dt_now_utc())
        updated: list[StreakMilestone] = []
        for milestone in milestones:
            if not milestone.get("achieved") and longest_streak >= milestone["target"]:
                updated.append({**milestone, "achieved": True, "achieved_at": achieved_at})
            else:
                updated.append(milestone)
        return updated

    @staticmethod
    def get_reward_milestone(days: int) -> RewardMilestone | None:
        """Return the reward granted on reaching exactly ``days``, if any."""
        for milestone in const.STREAK_REWARD_MILESTONES:
            if milestone["days"] == days:
                return dict(milestone)  # type: ignore[return-value]
        return None

    @staticmethod
    def get_next_reward_milestone(days: int) -> RewardMilestone | None:
        """Return the next reward above ``days``; None past the last one."""
        for milestone in const.STREAK_REWARD_MILESTONES:
            if milestone["days"] > days:
                return dict(milestone)  # type: ignore[return-value]
        return None

    @staticmethod
    def calculate_streak_multiplier(days: int) -> float:
        """Return the point multiplier earned by a streak of ``days``.

        Examples:
            calculate_streak_multiplier(6) → 1.0
            calculate_streak_multiplier(30) → 2.0
            calculate_streak_multiplier(365) → 3.0
        """
        for minimum, multiplier in const.STREAK_MULTIPLIERS:
            if days >= minimum:
                return multiplier
        return 1.0
