"""Unit tests for ProgressEngine - progress vector updates from events."""

from __future__ import annotations

from datetime import UTC, datetime
import logging

import pytest

from gymverse import const
from gymverse.engines.progress_engine import ProgressEngine, UnknownProgressEventError

# =============================================================================
# Test: UnknownProgressEventError
# =============================================================================


class TestUnknownProgressEventError:
    """Tests for the UnknownProgressEventError exception."""

    def test_error_attributes(self) -> None:
        """The error carries the event type and the known events."""
        with pytest.raises(UnknownProgressEventError) as exc_info:
            ProgressEngine.apply_event({}, "teleported")

        assert exc_info.value.event_type == "teleported"
        assert const.EVENT_WORKOUT_COMPLETED in exc_info.value.known_events
        assert "teleported" in str(exc_info.value)

    def test_error_is_value_error(self) -> None:
        """Callers catching ValueError also catch unknown events."""
        with pytest.raises(ValueError):
            ProgressEngine.apply_event({}, "")

    def test_supported_events(self) -> None:
        """All five domain events are registered."""
        assert set(ProgressEngine.get_supported_events()) == {
            const.EVENT_WORKOUT_COMPLETED,
            const.EVENT_PERSONAL_RECORD_SET,
            const.EVENT_SOCIAL_ACTION,
            const.EVENT_STREAK_UPDATED,
            const.EVENT_GOAL_COMPLETED,
        }


# =============================================================================
# Test: apply_metric_update
# =============================================================================


class TestApplyMetricUpdate:
    """Tests for counter / max / gauge semantics."""

    def test_counter_adds(self) -> None:
        """Counters accumulate."""
        vector = {"volume": 10.0}
        ProgressEngine.apply_metric_update(vector, "volume", const.METRIC_UPDATE_COUNTER, 5)
        assert vector["volume"] == 15.0

    def test_counter_ignores_negative_delta(self, caplog: pytest.LogCaptureFixture) -> None:
        """Counters never decrease."""
        vector = {"volume": 10.0}

        with caplog.at_level(logging.WARNING):
            ProgressEngine.apply_metric_update(
                vector, "volume", const.METRIC_UPDATE_COUNTER, -3
            )

        assert vector["volume"] == 10.0
        assert "negative" in caplog.text

    def test_max_keeps_best(self) -> None:
        """Max metrics keep the running maximum."""
        vector = {"best": 100.0}
        ProgressEngine.apply_metric_update(vector, "best", const.METRIC_UPDATE_MAX, 80)
        assert vector["best"] == 100.0
        ProgressEngine.apply_metric_update(vector, "best", const.METRIC_UPDATE_MAX, 120)
        assert vector["best"] == 120.0

    def test_gauge_replaces(self) -> None:
        """Gauges follow the latest value, even downwards."""
        vector = {"streak": 9.0}
        ProgressEngine.apply_metric_update(vector, "streak", const.METRIC_UPDATE_GAUGE, 0)
        assert vector["streak"] == 0

    def test_unknown_kind_raises(self) -> None:
        """Update kinds are a closed set."""
        with pytest.raises(ValueError, match="Unknown metric update kind"):
            ProgressEngine.apply_metric_update({}, "x", "median", 1)


# =============================================================================
# Test: apply_event
# =============================================================================


class TestApplyEvent:
    """Tests for domain event translation."""

    def test_input_vector_is_not_mutated(self) -> None:
        """A new vector is returned."""
        vector = {const.METRIC_WORKOUTS_COMPLETED: 2.0}

        updated = ProgressEngine.apply_event(vector, const.EVENT_WORKOUT_COMPLETED)

        assert vector == {const.METRIC_WORKOUTS_COMPLETED: 2.0}
        assert updated[const.METRIC_WORKOUTS_COMPLETED] == 3.0

    def test_workout_completed_payload(self) -> None:
        """Optional workout details update their metrics."""
        vector = {
            const.METRIC_WORKOUT_DURATION_MINUTES: 90.0,
            const.METRIC_CARDIO_MINUTES: 20.0,
        }

        updated = ProgressEngine.apply_event(
            vector,
            const.EVENT_WORKOUT_COMPLETED,
            {
                "duration_minutes": 45,
                "volume_kg": 1200,
                "cardio_minutes": 15,
                "distance_km": 5.2,
                "unique_exercises": 12,
                "new_active_day": True,
            },
        )

        assert updated[const.METRIC_WORKOUTS_COMPLETED] == 1
        assert updated[const.METRIC_WORKOUT_DURATION_MINUTES] == 90.0
        assert updated[const.METRIC_TOTAL_VOLUME_KG] == 1200.0
        assert updated[const.METRIC_CARDIO_MINUTES] == 35.0
        assert updated[const.METRIC_DISTANCE_KM] == 5.2
        assert updated[const.METRIC_UNIQUE_EXERCISES] == 12.0
        assert updated[const.METRIC_ACTIVE_DAYS] == 1

    def test_early_morning_workout(self) -> None:
        """Workouts started before 7:00 local time are early morning."""
        early = ProgressEngine.apply_event(
            {},
            const.EVENT_WORKOUT_COMPLETED,
            {"started_at": datetime(2026, 3, 18, 6, 59, tzinfo=UTC)},
        )
        late = ProgressEngine.apply_event(
            {},
            const.EVENT_WORKOUT_COMPLETED,
            {"started_at": "2026-03-18T07:00:00+00:00"},
        )

        assert early[const.METRIC_EARLY_MORNING_WORKOUTS] == 1
        assert const.METRIC_EARLY_MORNING_WORKOUTS not in late

    def test_personal_record(self) -> None:
        """Records count up and track the heaviest lift."""
        vector = {const.METRIC_MAX_WEIGHT_KG: 150.0}

        updated = ProgressEngine.apply_event(
            vector,
            const.EVENT_PERSONAL_RECORD_SET,
            {"weight_kg": 140, "powerlifting_total_kg": 480},
        )

        assert updated[const.METRIC_PERSONAL_RECORDS] == 1
        assert updated[const.METRIC_MAX_WEIGHT_KG] == 150.0
        assert updated[const.METRIC_POWERLIFTING_TOTAL_KG] == 480.0

    @pytest.mark.parametrize(
        ("action", "metric"),
        [
            (const.SOCIAL_ACTION_LIKE, const.METRIC_LIKES_GIVEN),
            (const.SOCIAL_ACTION_COMMENT, const.METRIC_COMMENTS_MADE),
            (const.SOCIAL_ACTION_LIKE_RECEIVED, const.METRIC_LIKES_RECEIVED),
            (const.SOCIAL_ACTION_SHARE, const.METRIC_WORKOUTS_SHARED),
        ],
    )
    def test_social_actions(self, action: str, metric: str) -> None:
        """Each social action feeds its own counter."""
        updated = ProgressEngine.apply_event(
            {metric: 4.0}, const.EVENT_SOCIAL_ACTION, {"action": action, "count": 2}
        )

        assert updated[metric] == 6.0

    def test_unknown_social_action_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        """Unknown actions leave the vector untouched."""
        with caplog.at_level(logging.WARNING):
            updated = ProgressEngine.apply_event(
                {"likes_given": 1.0}, const.EVENT_SOCIAL_ACTION, {"action": "poke"}
            )

        assert updated == {"likes_given": 1.0}
        assert "poke" in caplog.text

    def test_streak_updated(self) -> None:
        """Current streak is a gauge, longest streak a maximum."""
        vector = {const.METRIC_WORKOUT_DAYS: 12.0, const.METRIC_LONGEST_STREAK: 12.0}

        updated = ProgressEngine.apply_event(
            vector,
            const.EVENT_STREAK_UPDATED,
            {"current_streak": 0, "longest_streak": 12, "progress_logged_days": 4},
        )

        assert updated[const.METRIC_WORKOUT_DAYS] == 0
        assert updated[const.METRIC_LONGEST_STREAK] == 12.0
        assert updated[const.METRIC_PROGRESS_LOGGED_DAYS] == 4.0

    def test_goal_completed_defaults_to_one(self) -> None:
        """Goals count one at a time unless told otherwise."""
        updated = ProgressEngine.apply_event({}, const.EVENT_GOAL_COMPLETED)

        assert updated[const.METRIC_GOALS_COMPLETED] == 1.0
