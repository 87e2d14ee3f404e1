"""Achievement Engine - Pure logic for achievement unlock decisions.

Matches a user's progress vector (metric name -> value) against the
achievement catalog. Every requirement kind (count, streak, total, single,
percentage) unlocks on the same rule: ``progress[metric] >= target``, with
missing metrics treated as 0. What a metric means is decided upstream by
ProgressEngine, which keeps counters, maxima and gauges up to date.

All functions are static methods that operate on passed-in data.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import TYPE_CHECKING

from .. import const
from ..utils.math_utils import calculate_percentage, clamp

if TYPE_CHECKING:
    from ..type_defs import (
        AchievementTemplate,
        CriterionResult,
        EvaluationResult,
        ProgressVector,
    )


class AchievementEngine:
    """Pure logic engine for achievement matching.

    All methods are static - no instance state. Catalog order is preserved
    in every returned list.
    """

    @staticmethod
    def _current_value(progress: ProgressVector, template: AchievementTemplate) -> float:
        return progress.get(template["requirement"]["metric"], 0)

    @classmethod
    def is_unlocked(cls, progress: ProgressVector, template: AchievementTemplate) -> bool:
        """Return True when the template's threshold is reached."""
        return cls._current_value(progress, template) >= template["requirement"]["target"]

    @staticmethod
    def prerequisites_met(
        template: AchievementTemplate, unlocked_ids: Collection[str]
    ) -> bool:
        """Return True when every prerequisite of the template is unlocked."""
        return all(
            prerequisite in unlocked_ids
            for prerequisite in template.get("prerequisites", [])
        )

    @classmethod
    def check_achievements(
        cls,
        progress: ProgressVector,
        unlocked_ids: Collection[str],
        catalog: Iterable[AchievementTemplate],
    ) -> list[str]:
        """Return ids of achievements newly unlocked by ``progress``.

        A template with prerequisites is only considered once all of them
        are unlocked, either before this call or by it, so a chain whose
        thresholds are all met unlocks in a single call.

        Args:
            progress: Current progress vector
            unlocked_ids: Achievements already unlocked (never returned again)
            catalog: Achievement templates

        Returns:
            Newly unlocked ids in catalog order.
        """
        templates = list(catalog)
        unlocked = set(unlocked_ids)
        newly_unlocked: set[str] = set()

        changed = True
        while changed:
            changed = False
            for template in templates:
                template_id = template["id"]
                if template_id in unlocked:
                    continue
                if not cls.prerequisites_met(template, unlocked):
                    continue
                if cls.is_unlocked(progress, template):
                    const.LOGGER.debug(
                        "Achievement %s threshold reached (%s >= %s)",
                        template_id,
                        cls._current_value(progress, template),
                        template["requirement"]["target"],
                    )
                    unlocked.add(template_id)
                    newly_unlocked.add(template_id)
                    changed = True

        return [template["id"] for template in templates if template["id"] in newly_unlocked]

    @classmethod
    def evaluate_achievement(
        cls,
        progress: ProgressVector,
        template: AchievementTemplate,
    ) -> EvaluationResult:
        """Evaluate one achievement against a progress vector.

        This is the RAW evaluation result. The manager decides whether to
        unlock, award points and persist.

        Args:
            progress: Current progress vector
            template: Achievement definition

        Returns:
            EvaluationResult with a single criterion
        """
        requirement = template["requirement"]
        kind = requirement["kind"]
        threshold = requirement["target"]
        current_value = cls._current_value(progress, template)

        criteria_met = current_value >= threshold
        ratio = clamp(current_value / threshold, 0.0, 1.0) if threshold > 0 else 1.0
        reason = f"{kind.capitalize()}: {current_value}/{threshold} {requirement['metric']}"

        criterion: CriterionResult = {
            "criterion_type": kind,
            "met": criteria_met,
            "progress": ratio,
            "threshold": threshold,
            "current_value": current_value,
            "reason": reason,
        }
        return {
            "entity_id": template["id"],
            "entity_type": "achievement",
            "entity_name": template["name"],
            "criteria_met": criteria_met,
            "overall_progress": ratio,
            "criterion_results": [criterion],
            "reason": reason,
        }

    @classmethod
    def calculate_progress(
        cls, progress: ProgressVector, template: AchievementTemplate
    ) -> float:
        """Return completion percentage (0-100) for one achievement."""
        target = template["requirement"]["target"]
        if target <= 0:
            return 100.0
        return calculate_percentage(cls._current_value(progress, template), target, cap=100)

    @staticmethod
    def calculate_points(
        unlocked_ids: Collection[str], catalog: Iterable[AchievementTemplate]
    ) -> int:
        """Sum the points of all unlocked achievements in the catalog."""
        unlocked = set(unlocked_ids)
        return sum(template["points"] for template in catalog if template["id"] in unlocked)

    @classmethod
    def get_next_achievements(
        cls,
        progress: ProgressVector,
        unlocked_ids: Collection[str],
        catalog: Iterable[AchievementTemplate],
        limit: int = const.DEFAULT_NEXT_ACHIEVEMENTS_LIMIT,
    ) -> list[AchievementTemplate]:
        """Return locked achievements closest to completion.

        Ties keep catalog order.
        """
        unlocked = set(unlocked_ids)
        locked = [template for template in catalog if template["id"] not in unlocked]
        locked.sort(key=lambda template: cls.calculate_progress(progress, template), reverse=True)
        return locked[:limit]

    @staticmethod
    def filter_catalog(
        catalog: Iterable[AchievementTemplate],
        *,
        category: str | None = None,
        tier: str | None = None,
        rarity: str | None = None,
    ) -> list[AchievementTemplate]:
        """Filter templates by category, tier and/or rarity (None = any)."""
        return [
            template
            for template in catalog
            if (category is None or template.get("category") == category)
            and (tier is None or template.get("tier") == tier)
            and (rarity is None or template.get("rarity") == rarity)
        ]
