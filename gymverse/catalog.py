# File: catalog.py
"""Achievement and challenge catalogs for GymVerse.

Catalog data is validated with voluptuous when it is loaded at startup, so
the engines can rely on well-formed templates. The built-in catalogs below
seed new installs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any

import voluptuous as vol

from . import const
from .type_defs import AchievementTemplate, ChallengeData
from .utils import dt_utils


class CatalogError(Exception):
    """Raised when catalog data fails validation.

    Attributes:
        entry_id: Id of the offending entry (None if it has no usable id)
        index: Position of the entry in the raw catalog
        path: Key path inside the entry where validation failed
    """

    def __init__(
        self,
        message: str,
        entry_id: str | None = None,
        index: int | None = None,
        path: list[Any] | None = None,
    ) -> None:
        self.entry_id = entry_id
        self.index = index
        self.path = path or []
        super().__init__(message)


# ----------------------------------------------------------------------------------
# VALIDATORS
# ----------------------------------------------------------------------------------


def validate_timestamp(value: Any) -> Any:
    """Accept ISO strings, dates and datetimes; reject anything unparseable."""
    if dt_utils.dt_parse(value) is None:
        raise vol.Invalid(f"Invalid timestamp: {value!r}")
    return value


NON_EMPTY_STRING = vol.All(str, vol.Length(min=1))

REQUIREMENT_SCHEMA = vol.Schema(
    {
        vol.Required("metric"): NON_EMPTY_STRING,
        vol.Required("target"): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Required("kind"): vol.In(const.REQUIREMENT_KINDS),
    }
)

ACHIEVEMENT_TEMPLATE_SCHEMA = vol.Schema(
    {
        vol.Required("id"): NON_EMPTY_STRING,
        vol.Required("name"): NON_EMPTY_STRING,
        vol.Required("requirement"): REQUIREMENT_SCHEMA,
        vol.Required("points"): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional("description"): str,
        vol.Optional("category"): vol.In(const.ACHIEVEMENT_CATEGORIES),
        vol.Optional("tier"): vol.In(const.ACHIEVEMENT_TIERS),
        vol.Optional("rarity"): vol.In(const.ACHIEVEMENT_RARITIES),
        vol.Optional("icon"): str,
        vol.Optional("prerequisites"): [NON_EMPTY_STRING],
    }
)

CHALLENGE_SCHEMA = vol.Schema(
    {
        vol.Required("id"): NON_EMPTY_STRING,
        vol.Required("target_value"): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional("difficulty", default=const.DIFFICULTY_BEGINNER): vol.In(
            tuple(const.DIFFICULTY_MULTIPLIERS)
        ),
        vol.Optional("title"): str,
        vol.Optional("description"): str,
        vol.Optional("category"): str,
        vol.Optional("unit"): str,
        vol.Optional("reward_points"): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional("total_duration_days"): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional("elapsed_days"): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional("days_remaining"): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional("start_date"): validate_timestamp,
        vol.Optional("end_date"): validate_timestamp,
        vol.Optional("is_featured"): vol.Boolean(),
        vol.Optional("participant_count"): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)


# ----------------------------------------------------------------------------------
# LOADERS
# ----------------------------------------------------------------------------------


def _load_catalog(
    raw: Iterable[Mapping[str, Any]], schema: vol.Schema, label: str
) -> list[dict[str, Any]]:
    validated: list[dict[str, Any]] = []
    seen_ids: set[str] = set()
    for index, entry in enumerate(raw):
        entry_id = entry.get("id") if isinstance(entry, Mapping) else None
        try:
            item = schema(dict(entry) if isinstance(entry, Mapping) else entry)
        except vol.Invalid as err:
            raise CatalogError(
                f"Invalid {label} at index {index} ({entry_id}): {err}",
                entry_id=entry_id,
                index=index,
                path=list(err.path),
            ) from err

        if item["id"] in seen_ids:
            raise CatalogError(
                f"Duplicate {label} id '{item['id']}' at index {index}",
                entry_id=item["id"],
                index=index,
                path=["id"],
            )
        seen_ids.add(item["id"])
        validated.append(item)

    const.LOGGER.debug("Loaded %d %s catalog entries", len(validated), label)
    return validated


def load_achievement_catalog(
    raw: Iterable[Mapping[str, Any]],
) -> list[AchievementTemplate]:
    """Validate raw achievement templates and return normalized copies.

    Prerequisites must name other templates of the same catalog.

    Raises:
        CatalogError: If an entry is invalid, an id is duplicated or a
            prerequisite is unknown.
    """
    templates = _load_catalog(raw, ACHIEVEMENT_TEMPLATE_SCHEMA, "achievement")
    known_ids = {template["id"] for template in templates}
    for index, template in enumerate(templates):
        for position, prerequisite in enumerate(template.get("prerequisites", [])):
            if prerequisite == template["id"] or prerequisite not in known_ids:
                raise CatalogError(
                    f"Achievement '{template['id']}' has invalid prerequisite "
                    f"'{prerequisite}'",
                    entry_id=template["id"],
                    index=index,
                    path=["prerequisites", position],
                )
    return templates  # type: ignore[return-value]


def load_challenge_catalog(raw: Iterable[Mapping[str, Any]]) -> list[ChallengeData]:
    """Validate raw challenges and return normalized copies.

    Raises:
        CatalogError: If an entry is invalid or an id is duplicated.
    """
    return _load_catalog(raw, CHALLENGE_SCHEMA, "challenge")  # type: ignore[return-value]


# ----------------------------------------------------------------------------------
# BUILT-IN CATALOGS
# ----------------------------------------------------------------------------------


def _template(
    template_id: str,
    name: str,
    description: str,
    category: str,
    tier: str,
    icon: str,
    points: int,
    kind: str,
    target: float,
    metric: str,
    rarity: str,
) -> dict[str, Any]:
    return {
        "id": template_id,
        "name": name,
        "description": description,
        "category": category,
        "tier": tier,
        "icon": icon,
        "points": points,
        "requirement": {"kind": kind, "target": target, "metric": metric},
        "rarity": rarity,
    }


DEFAULT_ACHIEVEMENT_TEMPLATES: list[dict[str, Any]] = [
    # Workout
    _template("first_workout", "First Steps", "Complete your first workout",
              "workout", "bronze", "🎯", 50, "count", 1, "workouts_completed", "common"),
    _template("workout_warrior_bronze", "Workout Warrior", "Complete 10 workouts",
              "workout", "bronze", "⚔️", 100, "count", 10, "workouts_completed", "common"),
    _template("workout_warrior_silver", "Workout Champion", "Complete 50 workouts",
              "workout", "silver", "⚔️", 300, "count", 50, "workouts_completed", "uncommon"),
    _template("workout_warrior_gold", "Workout Legend", "Complete 100 workouts",
              "workout", "gold", "⚔️", 750, "count", 100, "workouts_completed", "rare"),
    _template("marathon_session", "Marathon Session", "Complete a workout lasting over 2 hours",
              "workout", "gold", "⏰", 500, "single", 120, "workout_duration_minutes", "rare"),
    # Strength
    _template("first_pr", "Personal Best", "Set your first personal record",
              "strength", "bronze", "📈", 100, "count", 1, "personal_records", "common"),
    _template("strength_master", "Strength Master", "Set 10 personal records",
              "strength", "silver", "💎", 400, "count", 10, "personal_records", "uncommon"),
    _template("heavy_lifter", "Heavy Lifter", "Lift over 200kg in a single exercise",
              "strength", "gold", "🏋️", 600, "single", 200, "max_weight_kg", "rare"),
    _template("powerlifter", "Powerlifter", "Achieve 500kg total in squat, bench, and deadlift",
              "strength", "platinum", "👑", 1000, "total", 500, "powerlifting_total_kg", "epic"),
    # Consistency
    _template("streak_starter", "Streak Starter", "Maintain a 3-day workout streak",
              "consistency", "bronze", "🔥", 75, "streak", 3, "workout_days", "common"),
    _template("week_warrior", "Week Warrior", "Maintain a 7-day workout streak",
              "consistency", "silver", "🔥", 200, "streak", 7, "workout_days", "uncommon"),
    _template("month_master", "Month Master", "Maintain a 30-day workout streak",
              "consistency", "gold", "🔥", 800, "streak", 30, "workout_days", "rare"),
    _template("unstoppable", "Unstoppable", "Maintain a 100-day workout streak",
              "consistency", "diamond", "🔥", 2000, "streak", 100, "workout_days", "legendary"),
    _template("early_bird", "Early Bird", "Complete 10 workouts before 7 AM",
              "consistency", "silver", "🌅", 250, "count", 10, "early_morning_workouts", "uncommon"),
    # Endurance
    _template("cardio_starter", "Cardio Starter", "Complete 30 minutes of cardio",
              "endurance", "bronze", "❤️", 50, "single", 30, "cardio_minutes", "common"),
    _template("endurance_athlete", "Endurance Athlete", "Complete 10 hours of cardio total",
              "endurance", "silver", "🏃", 300, "total", 600, "cardio_minutes", "uncommon"),
    _template("marathon_runner", "Marathon Runner", "Run 42.2km in a single session",
              "endurance", "platinum", "🏃", 1200, "single", 42.2, "distance_km", "epic"),
    # Social
    _template("social_butterfly", "Social Butterfly", "Like 50 posts from other users",
              "social", "bronze", "👍", 75, "count", 50, "likes_given", "common"),
    _template("motivator", "Motivator", "Comment on 25 posts",
              "social", "silver", "💬", 150, "count", 25, "comments_made", "uncommon"),
    _template("influencer", "Fitness Influencer", "Get 100 likes on your posts",
              "social", "gold", "⭐", 400, "count", 100, "likes_received", "rare"),
    _template("community_leader", "Community Leader", "Help 10 users by sharing workouts",
              "social", "platinum", "👑", 800, "count", 10, "workouts_shared", "epic"),
    # Milestone
    _template("goal_crusher", "Goal Crusher", "Complete your first fitness goal",
              "milestone", "bronze", "🎯", 200, "count", 1, "goals_completed", "common"),
    _template("transformation", "Transformation", "Log progress for 30 consecutive days",
              "milestone", "gold", "📊", 600, "streak", 30, "progress_logged_days", "rare"),
    _template("year_veteran", "Year Veteran", "Stay active for 365 days",
              "milestone", "diamond", "🏆", 3000, "count", 365, "active_days", "legendary"),
    # Exploration
    _template("exercise_explorer", "Exercise Explorer", "Try 10 different exercises",
              "exploration", "bronze", "🗺️", 100, "count", 10, "unique_exercises", "common"),
    _template("workout_variety", "Workout Variety", "Complete 5 different workout types",
              "exploration", "silver", "🎨", 200, "count", 5, "workout_types", "uncommon"),
    _template("fitness_scholar", "Fitness Scholar", "Try 50 different exercises",
              "exploration", "gold", "📚", 500, "count", 50, "unique_exercises", "rare"),
    _template("master_of_all", "Master of All", "Complete workouts in all available categories",
              "exploration", "platinum", "🌟", 1000, "percentage", 100,
              "workout_categories_completed", "epic"),
]

# Durations are relative; see build_default_challenges() for dated copies
DEFAULT_CHALLENGES: list[dict[str, Any]] = [
    {
        "id": "welcome_challenge",
        "title": "Welcome to GymVerse",
        "description": "Complete your first 3 workouts to get started on your fitness journey!",
        "category": "consistency",
        "difficulty": const.DIFFICULTY_BEGINNER,
        "target_value": 3,
        "unit": "workouts",
        "reward_points": 100,
        "total_duration_days": 7,
        "is_featured": True,
        "participant_count": 1247,
    },
    {
        "id": "strength_builder",
        "title": "Strength Builder Challenge",
        "description": "Complete 10 strength training workouts this month and build your foundation!",
        "category": "strength",
        "difficulty": const.DIFFICULTY_INTERMEDIATE,
        "target_value": 10,
        "unit": "workouts",
        "reward_points": 500,
        "total_duration_days": 30,
        "is_featured": True,
        "participant_count": 892,
    },
    {
        "id": "cardio_crusher",
        "title": "Cardio Crusher",
        "description": "Burn 2000 calories through cardio workouts this month!",
        "category": "cardio",
        "difficulty": const.DIFFICULTY_INTERMEDIATE,
        "target_value": 2000,
        "unit": "calories",
        "reward_points": 750,
        "total_duration_days": 30,
        "is_featured": False,
        "participant_count": 634,
    },
    {
        "id": "consistency_champion",
        "title": "Consistency Champion",
        "description": "Work out for 7 consecutive days and build the habit!",
        "category": "consistency",
        "difficulty": const.DIFFICULTY_BEGINNER,
        "target_value": 7,
        "unit": "days",
        "reward_points": 300,
        "total_duration_days": 14,
        "is_featured": True,
        "participant_count": 1523,
    },
    {
        "id": "distance_destroyer",
        "title": "Distance Destroyer",
        "description": "Run or walk 50 miles this month and conquer the distance!",
        "category": "distance",
        "difficulty": const.DIFFICULTY_ADVANCED,
        "target_value": 50,
        "unit": "miles",
        "reward_points": 1000,
        "total_duration_days": 30,
        "is_featured": False,
        "participant_count": 445,
    },
    {
        "id": "social_butterfly",
        "title": "Social Butterfly",
        "description": "Share 5 workout posts and engage with the community!",
        "category": "social",
        "difficulty": const.DIFFICULTY_BEGINNER,
        "target_value": 5,
        "unit": "posts",
        "reward_points": 200,
        "total_duration_days": 14,
        "is_featured": False,
        "participant_count": 789,
    },
]


def get_default_achievement_catalog() -> list[AchievementTemplate]:
    """Return the validated built-in achievement catalog."""
    return load_achievement_catalog(DEFAULT_ACHIEVEMENT_TEMPLATES)


def build_default_challenges(now: datetime | None = None) -> list[ChallengeData]:
    """Return the built-in challenges dated to start at ``now``."""
    start = now or dt_utils.dt_now_utc()
    dated = [
        {
            **challenge,
            "start_date": dt_utils.dt_format_iso(start),
            "end_date": dt_utils.dt_format_iso(
                start + timedelta(days=challenge["total_duration_days"])
            ),
        }
        for challenge in DEFAULT_CHALLENGES
    ]
    return load_challenge_catalog(dated)
