"""Engine modules for GymVerse progression.

Contains pure computation engines:
- streak_engine: Consecutive-day streaks, recovery windows, streak rewards
- achievement_engine: Progress vector vs. achievement catalog matching
- progress_engine: Progress vector updates from domain events
- challenge_engine: Challenge scoring, milestones, validation, suggestions
- leaderboard_engine: Ranking disciplines, tiers, rank deltas, insights
"""

# Use relative imports within package to avoid mypy module resolution issues
from .achievement_engine import AchievementEngine
from .challenge_engine import ChallengeEngine
from .leaderboard_engine import LeaderboardEngine, UnknownRankingDisciplineError
from .progress_engine import ProgressEngine, UnknownProgressEventError
from .streak_engine import StreakEngine

__all__ = [
    "AchievementEngine",
    "ChallengeEngine",
    "LeaderboardEngine",
    "ProgressEngine",
    "StreakEngine",
    "UnknownProgressEventError",
    "UnknownRankingDisciplineError",
]
