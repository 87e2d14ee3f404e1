"""Unit tests for AchievementEngine - pure Python logic tests.

Test Categories:
- Unlock decisions (check_achievements)
- Single achievement evaluation (evaluate_achievement)
- Progress percentages, points and next achievements
- Catalog filtering
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

import pytest

from gymverse.catalog import get_default_achievement_catalog
from gymverse.engines.achievement_engine import AchievementEngine

if TYPE_CHECKING:
    from gymverse.type_defs import AchievementTemplate

# =============================================================================
# TEST FIXTURES - Minimal template builders
# =============================================================================


def make_template(
    template_id: str,
    *,
    metric: str = "workouts_completed",
    target: float = 10,
    kind: str = "count",
    points: int = 100,
    **extra: Any,
) -> AchievementTemplate:
    """Build a minimal achievement template."""
    return cast(
        "AchievementTemplate",
        {
            "id": template_id,
            "name": template_id.replace("_", " ").title(),
            "requirement": {"metric": metric, "target": target, "kind": kind},
            "points": points,
            **extra,
        },
    )


CATALOG = [
    make_template("first_workout", target=1, points=50),
    make_template("ten_workouts", target=10, points=100),
    make_template("streak_3", metric="workout_days", target=3, kind="streak", points=75),
    make_template("heavy", metric="max_weight_kg", target=200, kind="single", points=600),
]


# =============================================================================
# Test: check_achievements
# =============================================================================


class TestCheckAchievements:
    """Tests for unlock decisions."""

    def test_unlocks_reached_thresholds_in_catalog_order(self) -> None:
        """Every template at or above its target unlocks."""
        progress = {"workouts_completed": 10, "workout_days": 3}

        result = AchievementEngine.check_achievements(progress, [], CATALOG)

        assert result == ["first_workout", "ten_workouts", "streak_3"]

    def test_never_returns_already_unlocked(self) -> None:
        """Previously unlocked achievements are excluded."""
        progress = {"workouts_completed": 10, "workout_days": 3}

        result = AchievementEngine.check_achievements(
            progress, ["first_workout", "streak_3"], CATALOG
        )

        assert result == ["ten_workouts"]

    def test_missing_metric_counts_as_zero(self) -> None:
        """An empty progress vector unlocks nothing."""
        assert AchievementEngine.check_achievements({}, [], CATALOG) == []

    def test_below_threshold_stays_locked(self) -> None:
        """One short of the target is not enough."""
        progress = {"max_weight_kg": 199.5}

        assert AchievementEngine.check_achievements(progress, [], CATALOG) == []

    def test_zero_target_unlocks_immediately(self) -> None:
        """A zero target is met by a missing metric."""
        catalog = [make_template("free", target=0)]

        assert AchievementEngine.check_achievements({}, [], catalog) == ["free"]

    def test_repeated_checks_are_stable(self) -> None:
        """Feeding the result back in yields nothing new."""
        progress = {"workouts_completed": 10, "workout_days": 3, "max_weight_kg": 250}
        unlocked = AchievementEngine.check_achievements(progress, [], CATALOG)

        assert AchievementEngine.check_achievements(progress, unlocked, CATALOG) == []

    def test_locked_prerequisite_blocks_unlock(self) -> None:
        """A template waits for its prerequisites even when its threshold is met."""
        catalog = [
            make_template("heavy", metric="max_weight_kg", target=200),
            make_template("ten_workouts", target=10, prerequisites=["heavy"]),
        ]

        result = AchievementEngine.check_achievements(
            {"workouts_completed": 10}, [], catalog
        )

        assert result == []

    def test_previously_unlocked_prerequisite(self) -> None:
        """Prerequisites unlocked earlier open the gate."""
        catalog = [
            make_template("heavy", metric="max_weight_kg", target=200),
            make_template("ten_workouts", target=10, prerequisites=["heavy"]),
        ]

        result = AchievementEngine.check_achievements(
            {"workouts_completed": 10}, ["heavy"], catalog
        )

        assert result == ["ten_workouts"]

    def test_prerequisite_chain_unlocks_in_one_call(self) -> None:
        """A chain listed out of order still unlocks together, in catalog order."""
        catalog = [
            make_template("gold", target=30, prerequisites=["silver"]),
            make_template("silver", target=20, prerequisites=["bronze"]),
            make_template("bronze", target=10),
        ]

        result = AchievementEngine.check_achievements(
            {"workouts_completed": 30}, [], catalog
        )

        assert result == ["gold", "silver", "bronze"]


# =============================================================================
# Test: evaluate_achievement / calculate_progress
# =============================================================================


class TestEvaluateAchievement:
    """Tests for single-template evaluation."""

    def test_met_criterion(self) -> None:
        """A reached target is reported with full progress."""
        result = AchievementEngine.evaluate_achievement(
            {"workout_days": 5}, CATALOG[2]
        )

        assert result["entity_id"] == "streak_3"
        assert result["entity_type"] == "achievement"
        assert result["criteria_met"] is True
        assert result["overall_progress"] == 1.0
        assert result["reason"] == "Streak: 5/3 workout_days"

    def test_partial_progress(self) -> None:
        """Progress is the capped ratio of value to target."""
        result = AchievementEngine.evaluate_achievement(
            {"workouts_completed": 4}, CATALOG[1]
        )

        assert result["criteria_met"] is False
        assert result["overall_progress"] == pytest.approx(0.4)
        criterion = result["criterion_results"][0]
        assert criterion["criterion_type"] == "count"
        assert criterion["threshold"] == 10
        assert criterion["current_value"] == 4

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0, 0.0), (1, 10.0), (5, 50.0), (10, 100.0), (25, 100.0)],
    )
    def test_calculate_progress(self, value: float, expected: float) -> None:
        """Percentages are capped at 100."""
        progress = {"workouts_completed": value}

        assert AchievementEngine.calculate_progress(progress, CATALOG[1]) == expected

    def test_calculate_progress_zero_target(self) -> None:
        """A zero target is always complete."""
        template = make_template("free", target=0)

        assert AchievementEngine.calculate_progress({}, template) == 100.0


# =============================================================================
# Test: points, next achievements, filtering
# =============================================================================


class TestCatalogHelpers:
    """Tests for points, suggestions and filters."""

    def test_calculate_points(self) -> None:
        """Only unlocked templates in the catalog count."""
        points = AchievementEngine.calculate_points(
            ["first_workout", "heavy", "unknown"], CATALOG
        )

        assert points == 650

    def test_next_achievements_by_progress(self) -> None:
        """Locked templates closest to completion come first."""
        progress = {"workouts_completed": 8, "workout_days": 1, "max_weight_kg": 20}

        result = AchievementEngine.get_next_achievements(
            progress, ["first_workout"], CATALOG, limit=2
        )

        assert [template["id"] for template in result] == ["ten_workouts", "streak_3"]

    def test_next_achievements_ties_keep_catalog_order(self) -> None:
        """Equal progress keeps the catalog order."""
        result = AchievementEngine.get_next_achievements({}, [], CATALOG)

        assert [template["id"] for template in result] == [
            "first_workout",
            "ten_workouts",
            "streak_3",
        ]

    def test_filter_catalog(self) -> None:
        """Filters combine; None matches anything."""
        catalog = get_default_achievement_catalog()

        consistency = AchievementEngine.filter_catalog(catalog, category="consistency")
        gold_consistency = AchievementEngine.filter_catalog(
            catalog, category="consistency", tier="gold"
        )

        assert len(consistency) == 5
        assert [template["id"] for template in gold_consistency] == ["month_master"]
        assert len(AchievementEngine.filter_catalog(catalog)) == len(catalog)


class TestDefaultCatalogMatching:
    """Tests running the built-in catalog against realistic progress."""

    def test_first_workout_unlocks_first_steps(self) -> None:
        """One workout unlocks exactly the first-workout badge."""
        catalog = get_default_achievement_catalog()

        result = AchievementEngine.check_achievements(
            {"workouts_completed": 1, "workout_days": 1}, [], catalog
        )

        assert result == ["first_workout"]

    def test_streak_badges_follow_current_streak(self) -> None:
        """Seven straight days unlocks both consistency streak badges."""
        catalog = get_default_achievement_catalog()

        result = AchievementEngine.check_achievements({"workout_days": 7}, [], catalog)

        assert result == ["streak_starter", "week_warrior"]
