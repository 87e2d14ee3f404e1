"""Type definitions for GymVerse progression data structures.

TypedDict is used for records whose keys are fixed at design time (sessions,
streak state, templates, leaderboard entries). Records keyed at runtime, like
the progress vector (metric name -> value), use plain ``dict`` aliases.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Engines still use ``.get()`` with
defaults for optional keys; nothing here validates data at runtime. Catalog
data is validated by the voluptuous schemas in ``catalog.py``.

IMPORTANT: This file must only import from typing and the standard library
to avoid circular imports.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal, NotRequired, Protocol, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

UserId = str
ParticipantId = str
AchievementId = str
ChallengeId = str
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string "2026-01-18"

# Metric name -> value. Keys are determined at runtime.
ProgressVector = dict[str, float]

TimestampInput = ISODatetime | datetime | date | None

RequirementKind = Literal["count", "streak", "total", "single", "percentage"]
DifficultyTier = Literal["beginner", "intermediate", "advanced"]
RankingDiscipline = Literal["standard", "modified", "dense", "percentile"]
CompetitionLevel = Literal["low", "medium", "high"]
RankMovement = Literal["new", "improved", "declined", "unchanged"]


class RandomSource(Protocol):
    """Minimal random interface (satisfied by ``random.Random``)."""

    def choice(self, seq: Any) -> Any: ...

    def random(self) -> float: ...


# =============================================================================
# Streaks
# =============================================================================


class WorkoutSession(TypedDict):
    """One logged workout. Only sessions with ``completed_at`` count."""

    completed_at: TimestampInput
    started_at: NotRequired[TimestampInput]
    duration_minutes: NotRequired[float]
    volume_kg: NotRequired[float]
    workout_type: NotRequired[str]


class StreakState(TypedDict):
    """Current and longest consecutive-day streaks."""

    current_streak: int
    longest_streak: int
    last_activity_date: date | None
    streak_start_date: date | None


class RecoveryWindow(TypedDict):
    """Grace period for a recently broken streak."""

    eligible: bool
    deadline: datetime | None
    missed_days: int
    recovery_units_needed: int


class MotivationalMessage(TypedDict):
    """Message shown on the streak screen."""

    message: str
    category: str  # recovery | celebration | milestone | encouragement
    icon: str


class WeeklyStreak(TypedDict):
    """Streak summary for one Sunday-started week."""

    week_start: date
    label: str  # "M/D"
    streak: int  # Longest run of consecutive workout days in the week
    workout_days: list[date]


class MonthlyStats(TypedDict):
    """Workout summary for one calendar month."""

    month_start: date
    label: str  # "Jan 2026"
    total_workouts: int
    longest_streak: int
    consistency: int  # Percentage of the month's days with a workout


class StreakMilestone(TypedDict):
    """A streak badge on the 3/7/14/30/60/100-day ladder."""

    id: str
    name: str
    description: str
    target: int
    icon: str
    color: str
    achieved: bool
    achieved_at: NotRequired[ISODatetime | None]


class RewardMilestone(TypedDict):
    """A reward granted when a streak reaches an exact day count."""

    days: int
    title: str
    reward_type: str  # points | badge | unlock
    reward_value: int | str
    rarity: str


# =============================================================================
# Achievements
# =============================================================================


class AchievementRequirement(TypedDict):
    """Threshold an achievement is matched against."""

    metric: str
    target: float
    kind: RequirementKind


class AchievementTemplate(TypedDict):
    """Catalog entry for an unlockable achievement."""

    id: AchievementId
    name: str
    requirement: AchievementRequirement
    points: int
    description: NotRequired[str]
    category: NotRequired[str]
    tier: NotRequired[str]
    rarity: NotRequired[str]
    icon: NotRequired[str]
    prerequisites: NotRequired[list[AchievementId]]


class CriterionResult(TypedDict):
    """The result of a single criterion check."""

    criterion_type: str  # Requirement kind (e.g. "count", "streak")
    met: bool  # True if criterion threshold is satisfied
    progress: float  # 0.0 to 1.0 (capped at 1.0)
    threshold: float  # Target value to meet criterion
    current_value: float  # Current achieved value
    reason: str  # Human-readable explanation


class EvaluationResult(TypedDict):
    """The verdict on one achievement for one progress vector.

    Returned by AchievementEngine.evaluate_achievement(). This is the RAW
    evaluation result; the manager decides whether to unlock and persist.
    """

    entity_id: str
    entity_type: str  # "achievement"
    entity_name: str
    criteria_met: bool
    overall_progress: float  # 0.0 to 1.0
    criterion_results: list[CriterionResult]
    reason: str


# =============================================================================
# Challenges
# =============================================================================


class Milestone(TypedDict):
    """A challenge threshold crossing."""

    value: float
    achieved_at: ISODatetime


class ChallengeData(TypedDict, total=False):
    """A time-boxed challenge.

    Duration fields are alternatives: explicit ``days_remaining`` /
    ``total_duration_days`` win over values derived from the dates.
    """

    id: ChallengeId
    title: str
    description: str
    category: str
    difficulty: str
    target_value: float
    unit: str
    reward_points: int
    total_duration_days: int
    elapsed_days: int
    days_remaining: int
    start_date: TimestampInput
    end_date: TimestampInput
    is_featured: bool
    participant_count: int


class ChallengeParticipantProgress(TypedDict):
    """One participant's standing in a challenge."""

    participant_id: ParticipantId
    raw_progress: float
    joined_at: TimestampInput
    completed_at: NotRequired[TimestampInput]
    display_name: NotRequired[str]


class ChallengeParticipation(TypedDict, total=False):
    """A user's participation record, used for suggestions and stats."""

    challenge_id: ChallengeId
    is_completed: bool
    progress_percentage: float
    completed_at: TimestampInput


class ChallengeUserStats(TypedDict):
    """Summary of a user's challenge history."""

    total_challenges: int
    active_challenges: int
    completed_challenges: int
    total_points: int
    current_streak: int
    longest_streak: int
    favorite_category: str
    success_rate: float
    average_completion: float


# =============================================================================
# Leaderboards
# =============================================================================


class LeaderboardEntry(TypedDict):
    """One ranked row. The ranker only writes ``rank`` on a copy."""

    participant_id: ParticipantId
    score: float
    rank: NotRequired[int]
    progress_percentage: NotRequired[float]
    joined_at: NotRequired[TimestampInput]
    completed_at: NotRequired[TimestampInput]
    display_name: NotRequired[str]
    is_current_user: NotRequired[bool]


class LeaderboardTier(TypedDict):
    """Rank band with display styling."""

    name: str
    min_rank: int
    max_rank: float  # math.inf for the open-ended last tier
    color: str
    icon: str
    benefits: list[str]


class RankChange(TypedDict):
    """Rank delta between two snapshots. Positive delta means moved up."""

    previous_rank: int
    current_rank: int
    delta: int


class RankMovementEntry(TypedDict):
    """Rank movement including participants with no previous rank."""

    status: RankMovement
    previous_rank: int | None
    current_rank: int
    delta: int


class LeaderboardInsights(TypedDict):
    """Cohort-level summary of a leaderboard."""

    top_performers: list[LeaderboardEntry]
    fastest_risers: list[LeaderboardEntry]
    consistent_performers: list[LeaderboardEntry]
    average_progress: float
    completion_rate: float
    competition_level: CompetitionLevel
    insights: list[str]


class RankingPrediction(TypedDict):
    """Projected end-of-challenge standing for one participant."""

    participant_id: ParticipantId
    current_rank: int
    predicted_rank: int
    predicted_progress: float
    confidence: int


class LeaderboardStats(TypedDict):
    """Headline numbers for a leaderboard."""

    total_participants: int
    average_score: float
    top_score: float
    user_rank: int | None
    user_percentile: float | None
    completion_rate: float
    average_completion_days: float


class RankingDisciplineInfo(TypedDict):
    """Display metadata for a ranking discipline."""

    id: str
    name: str
    description: str


# =============================================================================
# Manager Results
# =============================================================================


class WorkoutRecordResult(TypedDict):
    """What changed after ProgressionManager.record_workout()."""

    streak: StreakState
    unlocked_achievements: list[AchievementId]
    points_awarded: int
    reward_milestone: RewardMilestone | None
    newly_achieved_milestones: list[str]


class StreakSummary(TypedDict):
    """Everything the streak screen needs for one user."""

    streak: StreakState
    recovery: RecoveryWindow
    message: MotivationalMessage
    milestones: list[StreakMilestone]
    multiplier: float
    next_reward: RewardMilestone | None


class ChallengeProgressResult(TypedDict):
    """Outcome of ProgressionManager.update_challenge_progress()."""

    entry: LeaderboardEntry
    milestones: list[Milestone]
    new_milestones: list[Milestone]


class ChallengeLeaderboard(TypedDict):
    """Ranked leaderboard with movement since the previous snapshot."""

    challenge_id: ChallengeId
    discipline: str
    entries: list[LeaderboardEntry]
    rank_changes: dict[ParticipantId, RankChange]
    movements: dict[ParticipantId, RankMovementEntry]


__all__ = [
    "AchievementId",
    "AchievementRequirement",
    "AchievementTemplate",
    "ChallengeData",
    "ChallengeId",
    "ChallengeLeaderboard",
    "ChallengeParticipantProgress",
    "ChallengeParticipation",
    "ChallengeProgressResult",
    "ChallengeUserStats",
    "CompetitionLevel",
    "CriterionResult",
    "DifficultyTier",
    "EvaluationResult",
    "ISODate",
    "ISODatetime",
    "LeaderboardEntry",
    "LeaderboardInsights",
    "LeaderboardStats",
    "LeaderboardTier",
    "Milestone",
    "MonthlyStats",
    "MotivationalMessage",
    "ParticipantId",
    "ProgressVector",
    "RandomSource",
    "RankChange",
    "RankMovement",
    "RankMovementEntry",
    "RankingDiscipline",
    "RankingDisciplineInfo",
    "RankingPrediction",
    "RecoveryWindow",
    "RequirementKind",
    "RewardMilestone",
    "StreakMilestone",
    "StreakState",
    "StreakSummary",
    "TimestampInput",
    "UserId",
    "WeeklyStreak",
    "WorkoutRecordResult",
    "WorkoutSession",
]
