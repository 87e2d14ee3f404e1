# File: const.py
"""Constants for the GymVerse progression engine.

This file centralizes data keys, thresholds, tier tables, message pools and
default values used by the engines, the catalog loader and the manager.
"""

import logging
import math
from typing import Final

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
GYMVERSE_TITLE = "GymVerse"

# Logger
LOGGER = logging.getLogger(__package__)

# Storage and Versioning
STORAGE_KEY = "gymverse_progression"
STORAGE_VERSION = 1

# Float precision for percentage rounding
DATA_FLOAT_PRECISION = 2

# ------------------------------------------------------------------------------------------------
# Storage Buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_SAVED = "last_saved"
DATA_USERS = "users"
DATA_CHALLENGES = "challenges"
DATA_LEADERBOARD_SNAPSHOTS = "leaderboard_snapshots"

# Per-user fields
DATA_USER_HISTORY = "history"
DATA_USER_PROGRESS = "progress"
DATA_USER_UNLOCKED_ACHIEVEMENTS = "unlocked_achievements"
DATA_USER_UNLOCKED_AT = "unlocked_at"
DATA_USER_TOTAL_POINTS = "total_points"
DATA_USER_STREAK_MILESTONES = "streak_milestones"
DATA_USER_STREAK_REWARDS = "streak_rewards_granted"

# Per-challenge fields
DATA_CHALLENGE_PARTICIPANTS = "participants"
DATA_CHALLENGE_MILESTONES = "milestones"

SCHEMA_VERSION_CURRENT = 1

# ------------------------------------------------------------------------------------------------
# Streaks
# ------------------------------------------------------------------------------------------------
STREAK_RECOVERY_WINDOW_HOURS: Final = 48
STREAK_RECOVERY_MAX_MISSED_DAYS: Final = 2
# Documented limit; recovery eligibility does not consult it.
STREAK_RECOVERY_MAX_USES_PER_MONTH: Final = 2

STREAK_WEEKLY_HISTORY_WEEKS: Final = 12
STREAK_MONTHLY_HISTORY_MONTHS: Final = 6

MESSAGE_CATEGORY_RECOVERY = "recovery"
MESSAGE_CATEGORY_CELEBRATION = "celebration"
MESSAGE_CATEGORY_MILESTONE = "milestone"
MESSAGE_CATEGORY_ENCOURAGEMENT = "encouragement"

# (minimum streak, message template, icon), checked in order
STREAK_CELEBRATION_THRESHOLDS: Final = (
    (30, "Incredible! {days} days strong! You're unstoppable! 🔥", "🏆"),
    (14, "Two weeks of consistency! You're building an amazing habit! 💪", "⭐"),
    (7, "One week streak! You're on fire! Keep the momentum going! 🔥", "🎯"),
    (3, "{days} days in a row! You're building momentum! 💪", "⚡"),
)

STREAK_RECOVERY_MESSAGE = (
    "Don't break the chain! You have {hours} hours to recover your streak."
)
STREAK_RECOVERY_ICON = "⚡"
STREAK_PERSONAL_BEST_MESSAGE = (
    "New personal record! {days} days is your longest streak yet! 🎉"
)
STREAK_PERSONAL_BEST_ICON = "🏅"
STREAK_KEEP_GOING_MESSAGE = "Day {days}! Keep pushing forward! 💪"
STREAK_KEEP_GOING_ICON = "🎯"
STREAK_ENCOURAGEMENT_ICON = "💪"

STREAK_ENCOURAGEMENTS: Final = (
    "Every expert was once a beginner. Start your streak today! 💪",
    "The best time to start was yesterday. The second best time is now! 🚀",
    "Your future self will thank you for starting today! ✨",
    "One workout at a time. You've got this! 💪",
    "Champions are made in the gym. Let's begin! 🏆",
)

# Badge ladder shown on the streak screen
STREAK_BADGE_MILESTONES: Final = (
    ("streak_3", "Getting Started", "Complete 3 workouts in a row", 3, "🎯", "#10B981"),
    ("streak_7", "Week Warrior", "Maintain a 7-day streak", 7, "⚡", "#3B82F6"),
    ("streak_14", "Two Week Champion", "Keep going for 14 days straight", 14, "🏅", "#8B5CF6"),
    ("streak_30", "Monthly Master", "Achieve a 30-day streak", 30, "👑", "#F59E0B"),
    ("streak_60", "Consistency King", "Reach 60 days of dedication", 60, "🌟", "#EF4444"),
    ("streak_100", "Legendary Streak", "The ultimate 100-day achievement", 100, "🏆", "#DC2626"),
)

REWARD_TYPE_POINTS = "points"
REWARD_TYPE_BADGE = "badge"
REWARD_TYPE_UNLOCK = "unlock"

# Reward ladder awarded when a streak reaches an exact day count
STREAK_REWARD_MILESTONES: Final = (
    {"days": 3, "title": "Getting Started", "reward_type": REWARD_TYPE_POINTS, "reward_value": 50, "rarity": "common"},
    {"days": 7, "title": "One Week Strong", "reward_type": REWARD_TYPE_POINTS, "reward_value": 150, "rarity": "common"},
    {"days": 14, "title": "Two Week Warrior", "reward_type": REWARD_TYPE_POINTS, "reward_value": 300, "rarity": "rare"},
    {"days": 30, "title": "Monthly Master", "reward_type": REWARD_TYPE_BADGE, "reward_value": "monthly_master", "rarity": "epic"},
    {"days": 50, "title": "Unstoppable Force", "reward_type": REWARD_TYPE_POINTS, "reward_value": 1000, "rarity": "epic"},
    {"days": 100, "title": "Century Club", "reward_type": REWARD_TYPE_BADGE, "reward_value": "century_club", "rarity": "legendary"},
    {"days": 365, "title": "Year Champion", "reward_type": REWARD_TYPE_UNLOCK, "reward_value": "exclusive_workouts", "rarity": "legendary"},
)

# (minimum days, multiplier), checked in order
STREAK_MULTIPLIERS: Final = (
    (100, 3.0),
    (50, 2.5),
    (30, 2.0),
    (14, 1.5),
    (7, 1.2),
)

# ------------------------------------------------------------------------------------------------
# Achievements
# ------------------------------------------------------------------------------------------------
REQUIREMENT_KIND_COUNT = "count"
REQUIREMENT_KIND_STREAK = "streak"
REQUIREMENT_KIND_TOTAL = "total"
REQUIREMENT_KIND_SINGLE = "single"
REQUIREMENT_KIND_PERCENTAGE = "percentage"

REQUIREMENT_KINDS: Final = (
    REQUIREMENT_KIND_COUNT,
    REQUIREMENT_KIND_STREAK,
    REQUIREMENT_KIND_TOTAL,
    REQUIREMENT_KIND_SINGLE,
    REQUIREMENT_KIND_PERCENTAGE,
)

ACHIEVEMENT_CATEGORIES: Final = (
    "workout",
    "strength",
    "consistency",
    "endurance",
    "social",
    "milestone",
    "exploration",
)
ACHIEVEMENT_TIERS: Final = ("bronze", "silver", "gold", "platinum", "diamond")
ACHIEVEMENT_RARITIES: Final = ("common", "uncommon", "rare", "epic", "legendary")

DEFAULT_NEXT_ACHIEVEMENTS_LIMIT = 3

# ------------------------------------------------------------------------------------------------
# Progress Vector
# ------------------------------------------------------------------------------------------------
METRIC_WORKOUTS_COMPLETED = "workouts_completed"
METRIC_WORKOUT_DAYS = "workout_days"
METRIC_LONGEST_STREAK = "longest_streak_days"
METRIC_WORKOUT_DURATION_MINUTES = "workout_duration_minutes"
METRIC_TOTAL_VOLUME_KG = "total_volume_kg"
METRIC_EARLY_MORNING_WORKOUTS = "early_morning_workouts"
METRIC_CARDIO_MINUTES = "cardio_minutes"
METRIC_PERSONAL_RECORDS = "personal_records"
METRIC_MAX_WEIGHT_KG = "max_weight_kg"
METRIC_LIKES_GIVEN = "likes_given"
METRIC_COMMENTS_MADE = "comments_made"
METRIC_LIKES_RECEIVED = "likes_received"
METRIC_WORKOUTS_SHARED = "workouts_shared"
METRIC_GOALS_COMPLETED = "goals_completed"
METRIC_DISTANCE_KM = "distance_km"
METRIC_POWERLIFTING_TOTAL_KG = "powerlifting_total_kg"
METRIC_PROGRESS_LOGGED_DAYS = "progress_logged_days"
METRIC_ACTIVE_DAYS = "active_days"
METRIC_UNIQUE_EXERCISES = "unique_exercises"
METRIC_WORKOUT_TYPES = "workout_types"
METRIC_WORKOUT_CATEGORIES_COMPLETED = "workout_categories_completed"

METRIC_UPDATE_COUNTER = "counter"
METRIC_UPDATE_MAX = "max"
METRIC_UPDATE_GAUGE = "gauge"

EVENT_WORKOUT_COMPLETED = "workout_completed"
EVENT_PERSONAL_RECORD_SET = "personal_record_set"
EVENT_SOCIAL_ACTION = "social_action"
EVENT_STREAK_UPDATED = "streak_updated"
EVENT_GOAL_COMPLETED = "goal_completed"

SOCIAL_ACTION_LIKE = "like"
SOCIAL_ACTION_COMMENT = "comment"
SOCIAL_ACTION_LIKE_RECEIVED = "like_received"
SOCIAL_ACTION_SHARE = "share"

SOCIAL_ACTION_METRICS: Final = {
    SOCIAL_ACTION_LIKE: METRIC_LIKES_GIVEN,
    SOCIAL_ACTION_COMMENT: METRIC_COMMENTS_MADE,
    SOCIAL_ACTION_LIKE_RECEIVED: METRIC_LIKES_RECEIVED,
    SOCIAL_ACTION_SHARE: METRIC_WORKOUTS_SHARED,
}

# Workouts started before this local hour count as early morning
EARLY_MORNING_CUTOFF_HOUR = 7

# ------------------------------------------------------------------------------------------------
# Challenges
# ------------------------------------------------------------------------------------------------
DIFFICULTY_BEGINNER = "beginner"
DIFFICULTY_INTERMEDIATE = "intermediate"
DIFFICULTY_ADVANCED = "advanced"

DIFFICULTY_MULTIPLIERS: Final = {
    DIFFICULTY_BEGINNER: 1.0,
    DIFFICULTY_INTERMEDIATE: 1.5,
    DIFFICULTY_ADVANCED: 2.0,
}
DEFAULT_DIFFICULTY_MULTIPLIER = 1.0

CHALLENGE_COMPLETION_BONUS = 1.2
CHALLENGE_MAX_TIME_BONUS = 0.1
CHALLENGE_MILESTONE_PERCENTAGES: Final = (25, 50, 75, 100)

CHALLENGE_TITLE_MIN_LENGTH = 3
CHALLENGE_DESCRIPTION_MIN_LENGTH = 10
DEFAULT_SUGGESTED_CHALLENGES_LIMIT = 10
# Points per user level when suggesting challenges
CHALLENGE_POINTS_PER_LEVEL = 100
# Completions at most this many days apart extend a challenge streak
CHALLENGE_STREAK_MAX_GAP_DAYS = 7
# Reported when the user has not completed any challenge yet
DEFAULT_FAVORITE_CATEGORY = "strength"

# ------------------------------------------------------------------------------------------------
# Leaderboards
# ------------------------------------------------------------------------------------------------
RANKING_STANDARD = "standard"
RANKING_MODIFIED = "modified"
RANKING_DENSE = "dense"
RANKING_PERCENTILE = "percentile"

# Disciplines whose rank value grows as the participant does better
RANKING_HIGHER_IS_BETTER: Final = frozenset({RANKING_PERCENTILE})

RANKING_DISCIPLINES: Final = {
    RANKING_STANDARD: {
        "name": "Standard Ranking",
        "description": "Rank by total score with ties sharing the same rank",
    },
    RANKING_MODIFIED: {
        "name": "Modified Ranking",
        "description": "Rank by score with no gaps in ranking sequence",
    },
    RANKING_DENSE: {
        "name": "Dense Ranking",
        "description": "Rank by score with consecutive ranks for ties",
    },
    RANKING_PERCENTILE: {
        "name": "Percentile Ranking",
        "description": "Rank based on percentile performance",
    },
}

LEADERBOARD_TIERS: Final = (
    {
        "name": "Legend",
        "min_rank": 1,
        "max_rank": 1,
        "color": "#FFD700",
        "icon": "👑",
        "benefits": ["Exclusive Legend badge", "Priority support", "Beta feature access"],
    },
    {
        "name": "Champion",
        "min_rank": 2,
        "max_rank": 5,
        "color": "#C0C0C0",
        "icon": "🏆",
        "benefits": ["Champion badge", "Monthly rewards", "Community recognition"],
    },
    {
        "name": "Elite",
        "min_rank": 6,
        "max_rank": 20,
        "color": "#CD7F32",
        "icon": "⭐",
        "benefits": ["Elite badge", "Bonus XP", "Special challenges"],
    },
    {
        "name": "Advanced",
        "min_rank": 21,
        "max_rank": 100,
        "color": "#9E7FFF",
        "icon": "💪",
        "benefits": ["Advanced badge", "Progress insights"],
    },
    {
        "name": "Intermediate",
        "min_rank": 101,
        "max_rank": 500,
        "color": "#4A90E2",
        "icon": "🎯",
        "benefits": ["Intermediate badge", "Goal tracking"],
    },
    {
        "name": "Beginner",
        "min_rank": 501,
        "max_rank": math.inf,
        "color": "#27AE60",
        "icon": "🌱",
        "benefits": ["Beginner badge", "Learning resources"],
    },
)

COMPETITION_LEVEL_LOW = "low"
COMPETITION_LEVEL_MEDIUM = "medium"
COMPETITION_LEVEL_HIGH = "high"

INSIGHT_TOP_PERFORMERS = 5
INSIGHT_RISERS = 3
INSIGHT_CONSISTENT = 3
INSIGHT_RISER_MIN_PROGRESS = 50
INSIGHT_CONSISTENT_MIN_PROGRESS = 25
INSIGHT_CONSISTENT_MAX_PROGRESS = 90
INSIGHT_HIGH_COMPETITION_PROGRESS = 70
INSIGHT_LOW_COMPETITION_PROGRESS = 30
INSIGHT_LARGE_FIELD = 100

INSIGHT_HIGH_COMPLETION = "High completion rate indicates strong participant engagement"
INSIGHT_LOW_COMPLETION = "Low completion rate suggests the challenge may be too difficult"
INSIGHT_EXCEPTIONAL_PROGRESS = "Participants are performing exceptionally well"
INSIGHT_STRUGGLING = "Most participants are struggling with this challenge"
INSIGHT_COMPETITIVE_FIELD = "High participation makes this a competitive challenge"

RANK_MOVEMENT_NEW = "new"
RANK_MOVEMENT_IMPROVED = "improved"
RANK_MOVEMENT_DECLINED = "declined"
RANK_MOVEMENT_UNCHANGED = "unchanged"

DEFAULT_NEARBY_SPREAD = 5
