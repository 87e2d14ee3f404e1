"""Progress Engine - Pure logic for updating the achievement progress vector.

Domain events (workout completed, personal record set, social action, streak
updated, goal completed) are translated into metric updates. Each update has
one of three kinds:

- counter: value is added; counters never decrease (negative deltas are
  ignored with a warning)
- max: running maximum (best single session, heaviest lift)
- gauge: value is replaced (current streak, distinct exercise count)

The input vector is never mutated; a new vector is returned.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils

if TYPE_CHECKING:
    from ..type_defs import ProgressVector

# (metric, update kind, value)
MetricUpdate = tuple[str, str, float]
EventHandler = Callable[[Mapping[str, Any]], list[MetricUpdate]]


class UnknownProgressEventError(ValueError):
    """Raised when an event type has no registered metric mapping.

    Attributes:
        event_type: The unrecognized event type
        known_events: Event types that are supported
    """

    def __init__(self, event_type: str, known_events: list[str]) -> None:
        self.event_type = event_type
        self.known_events = known_events
        super().__init__(
            f"Unknown progress event '{event_type}'. "
            f"Known events: {', '.join(known_events)}"
        )


class ProgressEngine:
    """Pure logic engine for progress vector updates.

    Event handlers are kept in a registry keyed by event type, the same way
    criterion handlers are registered for achievement evaluation.
    """

    _EVENT_HANDLERS: dict[str, EventHandler] = {}

    @classmethod
    def _register_handlers(cls) -> None:
        """Populate _EVENT_HANDLERS once."""
        if cls._EVENT_HANDLERS:
            return

        cls._EVENT_HANDLERS = {
            const.EVENT_WORKOUT_COMPLETED: cls._workout_completed,
            const.EVENT_PERSONAL_RECORD_SET: cls._personal_record_set,
            const.EVENT_SOCIAL_ACTION: cls._social_action,
            const.EVENT_STREAK_UPDATED: cls._streak_updated,
            const.EVENT_GOAL_COMPLETED: cls._goal_completed,
        }

    @classmethod
    def get_supported_events(cls) -> list[str]:
        """Return the event types apply_event() understands."""
        cls._register_handlers()
        return list(cls._EVENT_HANDLERS)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @classmethod
    def apply_event(
        cls,
        vector: ProgressVector,
        event_type: str,
        payload: Mapping[str, Any] | None = None,
    ) -> ProgressVector:
        """Return a new progress vector with the event's updates applied.

        Args:
            vector: Current progress vector (not mutated)
            event_type: One of the EVENT_* constants
            payload: Event details; keys depend on the event type

        Returns:
            Updated copy of the vector.

        Raises:
            UnknownProgressEventError: If event_type is not supported.
        """
        cls._register_handlers()
        handler = cls._EVENT_HANDLERS.get(event_type)
        if handler is None:
            raise UnknownProgressEventError(event_type, list(cls._EVENT_HANDLERS))

        updated: ProgressVector = dict(vector)
        for metric, kind, value in handler(payload or {}):
            cls.apply_metric_update(updated, metric, kind, value)
        return updated

    @staticmethod
    def apply_metric_update(
        vector: ProgressVector, metric: str, kind: str, value: float
    ) -> None:
        """Apply a single metric update in place.

        Used by apply_event() on its private copy.
        """
        current = vector.get(metric, 0)
        if kind == const.METRIC_UPDATE_COUNTER:
            if value < 0:
                const.LOGGER.warning(
                    "Ignoring negative delta %s for counter metric %s", value, metric
                )
                return
            vector[metric] = current + value
        elif kind == const.METRIC_UPDATE_MAX:
            vector[metric] = max(current, value)
        elif kind == const.METRIC_UPDATE_GAUGE:
            vector[metric] = value
        else:
            raise ValueError(f"Unknown metric update kind: {kind}")

    # =========================================================================
    # EVENT HANDLERS
    # =========================================================================

    @staticmethod
    def _workout_completed(payload: Mapping[str, Any]) -> list[MetricUpdate]:
        updates: list[MetricUpdate] = [
            (const.METRIC_WORKOUTS_COMPLETED, const.METRIC_UPDATE_COUNTER, 1),
        ]

        optional_updates = (
            ("duration_minutes", const.METRIC_WORKOUT_DURATION_MINUTES, const.METRIC_UPDATE_MAX),
            ("volume_kg", const.METRIC_TOTAL_VOLUME_KG, const.METRIC_UPDATE_COUNTER),
            ("cardio_minutes", const.METRIC_CARDIO_MINUTES, const.METRIC_UPDATE_COUNTER),
            ("distance_km", const.METRIC_DISTANCE_KM, const.METRIC_UPDATE_MAX),
            ("unique_exercises", const.METRIC_UNIQUE_EXERCISES, const.METRIC_UPDATE_GAUGE),
            ("workout_types", const.METRIC_WORKOUT_TYPES, const.METRIC_UPDATE_GAUGE),
            (
                "workout_categories_completed",
                const.METRIC_WORKOUT_CATEGORIES_COMPLETED,
                const.METRIC_UPDATE_GAUGE,
            ),
        )
        for key, metric, kind in optional_updates:
            if payload.get(key) is not None:
                updates.append((metric, kind, float(payload[key])))

        started_at = dt_utils.dt_parse(payload.get("started_at"))
        if (
            started_at is not None
            and dt_utils.as_local(started_at).hour < const.EARLY_MORNING_CUTOFF_HOUR
        ):
            updates.append(
                (const.METRIC_EARLY_MORNING_WORKOUTS, const.METRIC_UPDATE_COUNTER, 1)
            )

        if payload.get("new_active_day"):
            updates.append((const.METRIC_ACTIVE_DAYS, const.METRIC_UPDATE_COUNTER, 1))

        return updates

    @staticmethod
    def _personal_record_set(payload: Mapping[str, Any]) -> list[MetricUpdate]:
        updates: list[MetricUpdate] = [
            (const.METRIC_PERSONAL_RECORDS, const.METRIC_UPDATE_COUNTER, 1),
        ]
        if payload.get("weight_kg") is not None:
            updates.append(
                (const.METRIC_MAX_WEIGHT_KG, const.METRIC_UPDATE_MAX, float(payload["weight_kg"]))
            )
        if payload.get("powerlifting_total_kg") is not None:
            updates.append(
                (
                    const.METRIC_POWERLIFTING_TOTAL_KG,
                    const.METRIC_UPDATE_MAX,
                    float(payload["powerlifting_total_kg"]),
                )
            )
        return updates

    @staticmethod
    def _social_action(payload: Mapping[str, Any]) -> list[MetricUpdate]:
        action = payload.get("action")
        metric = const.SOCIAL_ACTION_METRICS.get(action or "")
        if metric is None:
            const.LOGGER.warning("Ignoring unknown social action: %s", action)
            return []
        return [(metric, const.METRIC_UPDATE_COUNTER, float(payload.get("count", 1)))]

    @staticmethod
    def _streak_updated(payload: Mapping[str, Any]) -> list[MetricUpdate]:
        updates: list[MetricUpdate] = []
        if payload.get("current_streak") is not None:
            updates.append(
                (
                    const.METRIC_WORKOUT_DAYS,
                    const.METRIC_UPDATE_GAUGE,
                    float(payload["current_streak"]),
                )
            )
        if payload.get("longest_streak") is not None:
            updates.append(
                (
                    const.METRIC_LONGEST_STREAK,
                    const.METRIC_UPDATE_MAX,
                    float(payload["longest_streak"]),
                )
            )
        if payload.get("progress_logged_days") is not None:
            updates.append(
                (
                    const.METRIC_PROGRESS_LOGGED_DAYS,
                    const.METRIC_UPDATE_GAUGE,
                    float(payload["progress_logged_days"]),
                )
            )
        return updates

    @staticmethod
    def _goal_completed(payload: Mapping[str, Any]) -> list[MetricUpdate]:
        return [
            (
                const.METRIC_GOALS_COMPLETED,
                const.METRIC_UPDATE_COUNTER,
                float(payload.get("count", 1)),
            )
        ]
