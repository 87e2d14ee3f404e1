"""Builders for GymVerse test data.

Sessions, challenges and leaderboard entries are plain dicts; these helpers
fill in sensible defaults so each test only states what it cares about.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import random
from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from gymverse.type_defs import (
        ChallengeData,
        LeaderboardEntry,
        RandomSource,
        WorkoutSession,
    )

# Midday keeps date projection stable under small timezone offsets
FIXED_NOW = datetime(2026, 3, 18, 12, 0, tzinfo=UTC)

DEMO_DISPLAY_NAMES = (
    "FitnessKing",
    "GymWarrior",
    "IronLifter",
    "StrengthMaster",
    "CardioQueen",
    "FlexibilityPro",
    "WorkoutBeast",
    "FitnessFanatic",
)


def make_session(
    completed_at: datetime | date | str | None,
    **extra: Any,
) -> WorkoutSession:
    """Build a workout session; dates complete at 12:00 UTC."""
    if isinstance(completed_at, date) and not isinstance(completed_at, datetime):
        completed_at = datetime.combine(completed_at, time(12, 0), tzinfo=UTC)
    return cast("WorkoutSession", {"completed_at": completed_at, **extra})


def make_history(today: date, *offsets: int) -> list[WorkoutSession]:
    """Build one session per day offset before ``today`` (0 = today)."""
    return [make_session(today - timedelta(days=offset)) for offset in offsets]


def make_challenge(
    *,
    challenge_id: str = "challenge-1",
    difficulty: str = "beginner",
    target_value: float = 100,
    **extra: Any,
) -> ChallengeData:
    """Build a minimal challenge definition."""
    return cast(
        "ChallengeData",
        {
            "id": challenge_id,
            "title": "Test Challenge",
            "description": "A challenge used in tests",
            "difficulty": difficulty,
            "target_value": target_value,
            "reward_points": 100,
            **extra,
        },
    )


def make_entry(participant_id: str, score: float, **extra: Any) -> LeaderboardEntry:
    """Build an unranked leaderboard entry."""
    return cast(
        "LeaderboardEntry",
        {"participant_id": participant_id, "score": score, **extra},
    )


def generate_demo_leaderboard(
    rng: RandomSource | None = None,
    size: int = len(DEMO_DISPLAY_NAMES),
) -> list[LeaderboardEntry]:
    """Generate a random, unranked leaderboard for demos and property tests.

    Pass a seeded ``random.Random`` for reproducible data.
    """
    source = rng or random.Random()
    entries: list[LeaderboardEntry] = []
    for index in range(size):
        score = int(source.random() * 1000) + 500
        progress = round(source.random() * 100, 2)
        entries.append(
            make_entry(
                f"demo-{index}",
                score,
                display_name=DEMO_DISPLAY_NAMES[index % len(DEMO_DISPLAY_NAMES)],
                progress_percentage=progress,
            )
        )
    return entries
