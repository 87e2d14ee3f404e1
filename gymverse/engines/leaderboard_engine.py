"""Leaderboard Engine - Pure logic for ranking challenge participants.

This engine provides stateless functions for:
- Ranking entries under a named discipline (standard, modified, dense,
  percentile)
- Rank tiers, rank deltas between snapshots and movement classification
- Cohort insights, statistics, nearby competitors and final-rank predictions

Scores are supplied by the caller (see ChallengeEngine.calculate_score); the
ranker only writes ``rank`` on copies of the entries.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
import math
from typing import TYPE_CHECKING

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import clamp, round_half_up, round_points
from .challenge_engine import ChallengeEngine

if TYPE_CHECKING:
    from ..type_defs import (
        ChallengeData,
        LeaderboardEntry,
        LeaderboardInsights,
        LeaderboardStats,
        LeaderboardTier,
        RankChange,
        RankingDisciplineInfo,
        RankingPrediction,
        RankMovementEntry,
    )

# Receives entries already sorted by score (descending), returns ranked copies
Ranker = Callable[[list["LeaderboardEntry"]], list["LeaderboardEntry"]]


class UnknownRankingDisciplineError(ValueError):
    """Raised when a ranking discipline name is not recognized.

    Attributes:
        discipline: The requested discipline (may be None)
        known_disciplines: Names that are supported
    """

    def __init__(self, discipline: str | None, known_disciplines: list[str]) -> None:
        self.discipline = discipline
        self.known_disciplines = known_disciplines
        super().__init__(
            f"Unknown ranking discipline: {discipline!r}. "
            f"Known disciplines: {', '.join(known_disciplines)}"
        )


class LeaderboardEngine:
    """Pure logic engine for leaderboard ranking and analysis.

    All methods are static - no instance state. Input entries are never
    mutated.
    """

    # =========================================================================
    # RANKER REGISTRY
    # =========================================================================

    _RANKERS: dict[str, Ranker] = {}

    @classmethod
    def _register_rankers(cls) -> None:
        """Populate _RANKERS once."""
        if cls._RANKERS:
            return

        cls._RANKERS = {
            const.RANKING_STANDARD: cls._standard_ranking,
            const.RANKING_MODIFIED: cls._modified_ranking,
            const.RANKING_DENSE: cls._dense_ranking,
            const.RANKING_PERCENTILE: cls._percentile_ranking,
        }

    @staticmethod
    def _standard_ranking(ordered: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
        """Ties share a rank, then skip: 1, 2, 2, 4."""
        ranked: list[LeaderboardEntry] = []
        rank = 1
        for index, entry in enumerate(ordered):
            if index > 0 and ordered[index - 1]["score"] != entry["score"]:
                rank = index + 1
            ranked.append({**entry, "rank": rank})
        return ranked

    @staticmethod
    def _modified_ranking(ordered: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
        """Ties share a rank, no gaps: 1, 2, 2, 3."""
        ranked: list[LeaderboardEntry] = []
        rank = 1
        for index, entry in enumerate(ordered):
            if index > 0 and ordered[index - 1]["score"] != entry["score"]:
                rank += 1
            ranked.append({**entry, "rank": rank})
        return ranked

    @staticmethod
    def _dense_ranking(ordered: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
        """Rank is the position among unique scores: 1, 2, 2, 3."""
        unique_scores = sorted({entry["score"] for entry in ordered}, reverse=True)
        positions = {score: index + 1 for index, score in enumerate(unique_scores)}
        return [{**entry, "rank": positions[entry["score"]]} for entry in ordered]

    @staticmethod
    def _percentile_ranking(ordered: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
        """Rank is the percentage of the field at or below the entry."""
        total = len(ordered)
        return [
            {**entry, "rank": round_half_up((total - index) / total * 100)}
            for index, entry in enumerate(ordered)
        ]

    # =========================================================================
    # RANKING
    # =========================================================================

    @classmethod
    def apply_ranking(
        cls,
        entries: Sequence[LeaderboardEntry],
        discipline: str | None = const.RANKING_STANDARD,
    ) -> list[LeaderboardEntry]:
        """Sort entries by score (descending, stable) and assign ranks.

        Args:
            entries: Leaderboard entries with scores
            discipline: One of standard, modified, dense, percentile

        Returns:
            Ranked copies of the entries, best first.

        Raises:
            UnknownRankingDisciplineError: If discipline is None or unknown.

        Examples:
            scores [100, 100, 80, 50], standard → ranks [1, 1, 3, 4]
            scores [100, 100, 80, 50], dense → ranks [1, 1, 2, 3]
        """
        cls._register_rankers()
        ranker = cls._RANKERS.get(discipline) if discipline is not None else None
        if ranker is None:
            raise UnknownRankingDisciplineError(discipline, list(cls._RANKERS))

        ordered = sorted(entries, key=lambda entry: entry["score"], reverse=True)
        return ranker(ordered)

    @staticmethod
    def get_available_disciplines() -> list[RankingDisciplineInfo]:
        """Return display metadata for each ranking discipline."""
        return [
            {"id": discipline_id, "name": info["name"], "description": info["description"]}
            for discipline_id, info in const.RANKING_DISCIPLINES.items()
        ]

    # =========================================================================
    # TIERS
    # =========================================================================

    @staticmethod
    def get_leaderboard_tiers() -> list[LeaderboardTier]:
        """Return all rank tiers, best first."""
        return [
            {**tier, "benefits": list(tier["benefits"])}  # type: ignore[typeddict-item]
            for tier in const.LEADERBOARD_TIERS
        ]

    @classmethod
    def get_user_tier(cls, rank: int) -> LeaderboardTier:
        """Return the tier containing ``rank``; falls back to the last tier."""
        tiers = cls.get_leaderboard_tiers()
        for tier in tiers:
            if tier["min_rank"] <= rank <= tier["max_rank"]:
                return tier
        return tiers[-1]

    # =========================================================================
    # RANK MOVEMENT
    # =========================================================================

    @staticmethod
    def _rank_lookup(entries: Sequence[LeaderboardEntry]) -> dict[str, int]:
        return {
            entry["participant_id"]: entry["rank"]
            for entry in entries
            if entry.get("rank") is not None
        }

    @staticmethod
    def _rank_delta(previous_rank: int, current_rank: int, discipline: str) -> int:
        """Return a delta that is positive when the participant moved up."""
        if discipline in const.RANKING_HIGHER_IS_BETTER:
            return current_rank - previous_rank
        return previous_rank - current_rank

    @classmethod
    def calculate_rank_changes(
        cls,
        previous: Sequence[LeaderboardEntry],
        current: Sequence[LeaderboardEntry],
        discipline: str = const.RANKING_STANDARD,
    ) -> dict[str, RankChange]:
        """Return rank deltas for participants present in both snapshots.

        A positive delta means the participant moved up. Positional
        disciplines use ``previous_rank - current_rank``; percentile ranks
        grow with performance, so the sign flips there. Participants
        missing from ``previous`` are omitted (see classify_rank_movements
        for an explicit status).
        """
        previous_ranks = cls._rank_lookup(previous)
        changes: dict[str, RankChange] = {}
        for entry in current:
            previous_rank = previous_ranks.get(entry["participant_id"])
            if previous_rank is None:
                continue
            changes[entry["participant_id"]] = {
                "previous_rank": previous_rank,
                "current_rank": entry["rank"],
                "delta": cls._rank_delta(previous_rank, entry["rank"], discipline),
            }
        return changes

    @classmethod
    def classify_rank_movements(
        cls,
        previous: Sequence[LeaderboardEntry],
        current: Sequence[LeaderboardEntry],
        discipline: str = const.RANKING_STANDARD,
    ) -> dict[str, RankMovementEntry]:
        """Classify every current participant as new, improved, declined or unchanged."""
        previous_ranks = cls._rank_lookup(previous)
        movements: dict[str, RankMovementEntry] = {}
        for entry in current:
            participant_id = entry["participant_id"]
            current_rank = entry["rank"]
            previous_rank = previous_ranks.get(participant_id)
            if previous_rank is None:
                movements[participant_id] = {
                    "status": const.RANK_MOVEMENT_NEW,
                    "previous_rank": None,
                    "current_rank": current_rank,
                    "delta": 0,
                }
                continue

            delta = cls._rank_delta(previous_rank, current_rank, discipline)
            if delta > 0:
                status = const.RANK_MOVEMENT_IMPROVED
            elif delta < 0:
                status = const.RANK_MOVEMENT_DECLINED
            else:
                status = const.RANK_MOVEMENT_UNCHANGED
            movements[participant_id] = {
                "status": status,  # type: ignore[typeddict-item]
                "previous_rank": previous_rank,
                "current_rank": current_rank,
                "delta": delta,
            }
        return movements

    # =========================================================================
    # INSIGHTS & STATS
    # =========================================================================

    @staticmethod
    def generate_leaderboard_insights(
        entries: Sequence[LeaderboardEntry],
    ) -> LeaderboardInsights:
        """Summarize a ranked leaderboard (entries best first).

        Fastest risers and consistent performers are approximated from
        current progress only; no history is consulted.
        """
        if not entries:
            return {
                "top_performers": [],
                "fastest_risers": [],
                "consistent_performers": [],
                "average_progress": 0.0,
                "completion_rate": 0.0,
                "competition_level": const.COMPETITION_LEVEL_LOW,
                "insights": [],
            }

        def progress_of(entry: LeaderboardEntry) -> float:
            return entry.get("progress_percentage", 0) or 0

        total = len(entries)
        average_progress = sum(progress_of(entry) for entry in entries) / total
        completion_rate = (
            sum(1 for entry in entries if entry.get("completed_at")) / total * 100
        )

        if average_progress > const.INSIGHT_HIGH_COMPETITION_PROGRESS:
            competition_level = const.COMPETITION_LEVEL_HIGH
        elif average_progress < const.INSIGHT_LOW_COMPETITION_PROGRESS:
            competition_level = const.COMPETITION_LEVEL_LOW
        else:
            competition_level = const.COMPETITION_LEVEL_MEDIUM

        insights: list[str] = []
        if completion_rate > 80:
            insights.append(const.INSIGHT_HIGH_COMPLETION)
        elif completion_rate < 30:
            insights.append(const.INSIGHT_LOW_COMPLETION)

        if average_progress > 80:
            insights.append(const.INSIGHT_EXCEPTIONAL_PROGRESS)
        elif average_progress < 20:
            insights.append(const.INSIGHT_STRUGGLING)

        if total > const.INSIGHT_LARGE_FIELD:
            insights.append(const.INSIGHT_COMPETITIVE_FIELD)

        return {
            "top_performers": list(entries[: const.INSIGHT_TOP_PERFORMERS]),
            "fastest_risers": [
                entry
                for entry in entries
                if progress_of(entry) > const.INSIGHT_RISER_MIN_PROGRESS
            ][: const.INSIGHT_RISERS],
            "consistent_performers": [
                entry
                for entry in entries
                if const.INSIGHT_CONSISTENT_MIN_PROGRESS
                < progress_of(entry)
                < const.INSIGHT_CONSISTENT_MAX_PROGRESS
            ][: const.INSIGHT_CONSISTENT],
            "average_progress": round_points(average_progress),
            "completion_rate": round_points(completion_rate),
            "competition_level": competition_level,  # type: ignore[typeddict-item]
            "insights": insights,
        }

    @classmethod
    def get_leaderboard_stats(
        cls,
        entries: Sequence[LeaderboardEntry],
        current_participant_id: str | None = None,
    ) -> LeaderboardStats:
        """Return headline statistics for a leaderboard.

        Unranked input is ranked with the standard discipline first. The
        current user is ``current_participant_id`` or the entry flagged
        ``is_current_user``.
        """
        if not entries:
            return {
                "total_participants": 0,
                "average_score": 0.0,
                "top_score": 0.0,
                "user_rank": None,
                "user_percentile": None,
                "completion_rate": 0.0,
                "average_completion_days": 0.0,
            }

        ranked = (
            list(entries)
            if all(entry.get("rank") is not None for entry in entries)
            else cls.apply_ranking(entries)
        )
        total = len(ranked)
        scores = [entry["score"] for entry in ranked]

        user_entry = next(
            (
                entry
                for entry in ranked
                if (
                    entry["participant_id"] == current_participant_id
                    if current_participant_id is not None
                    else entry.get("is_current_user")
                )
            ),
            None,
        )
        user_rank = user_entry["rank"] if user_entry else None
        user_percentile = (
            round_points((total - user_rank + 1) / total * 100)
            if user_rank is not None
            else None
        )

        completed = [entry for entry in ranked if entry.get("completed_at")]
        completion_days: list[int] = []
        for entry in completed:
            joined = dt_utils.dt_parse(entry.get("joined_at"))
            finished = dt_utils.dt_parse(entry.get("completed_at"))
            if joined is None or finished is None:
                continue
            completion_days.append(
                math.floor(dt_utils.dt_hours_between(joined, finished) / 24)
            )

        return {
            "total_participants": total,
            "average_score": round_points(sum(scores) / total),
            "top_score": max(scores),
            "user_rank": user_rank,
            "user_percentile": user_percentile,
            "completion_rate": round_points(len(completed) / total * 100),
            "average_completion_days": (
                round_points(sum(completion_days) / len(completion_days))
                if completion_days
                else 0.0
            ),
        }

    @staticmethod
    def get_nearby_competitors(
        entries: Sequence[LeaderboardEntry],
        participant_id: str,
        spread: int = const.DEFAULT_NEARBY_SPREAD,
    ) -> list[LeaderboardEntry]:
        """Return up to ``spread`` entries on each side of a participant.

        ``entries`` must be ranked (best first). Unknown participants get an
        empty list.
        """
        for position, entry in enumerate(entries):
            if entry["participant_id"] == participant_id:
                return list(entries[max(0, position - spread) : position + spread + 1])
        return []

    # =========================================================================
    # PREDICTION
    # =========================================================================

    @classmethod
    def predict_final_rankings(
        cls,
        entries: Sequence[LeaderboardEntry],
        challenge: ChallengeData,
        *,
        now: datetime | None = None,
    ) -> list[RankingPrediction]:
        """Project each participant's final progress from their current pace.

        Projected progress is ``progress / elapsed_ratio`` capped at 100,
        where ``elapsed_ratio`` is the share of the challenge already run.
        With no elapsed time the current progress is used unchanged.
        Predicted ranks use the standard discipline over projected progress.
        """
        if not entries:
            return []

        total_days = ChallengeEngine.get_total_duration_days(challenge)
        days_remaining = ChallengeEngine.get_days_remaining(challenge, now=now)
        elapsed_ratio = (total_days - days_remaining) / total_days if total_days > 0 else 0

        current_ranks = cls._rank_lookup(entries)
        if len(current_ranks) != len(entries):
            current_ranks = cls._rank_lookup(cls.apply_ranking(entries))

        projected: dict[str, float] = {}
        for entry in entries:
            percentage = entry.get("progress_percentage", 0) or 0
            if elapsed_ratio > 0:
                projected[entry["participant_id"]] = min(percentage / elapsed_ratio, 100.0)
            else:
                projected[entry["participant_id"]] = percentage

        predicted_ranks = cls._rank_lookup(
            cls.apply_ranking(
                [
                    {"participant_id": participant_id, "score": value}
                    for participant_id, value in projected.items()
                ]
            )
        )

        predictions: list[RankingPrediction] = []
        for entry in entries:
            participant_id = entry["participant_id"]
            percentage = entry.get("progress_percentage", 0) or 0
            confidence = clamp(percentage / 100 * 0.8 + 0.2, 0.0, 1.0)
            predictions.append(
                {
                    "participant_id": participant_id,
                    "current_rank": current_ranks[participant_id],
                    "predicted_rank": predicted_ranks[participant_id],
                    "predicted_progress": round_points(projected[participant_id]),
                    "confidence": round_half_up(confidence * 100),
                }
            )
        return predictions
