"""Rule-based badge classifier.

Every catalog entry is evaluated against the player's most-weighted role.
``primary_role_diff`` badges read the player-vs-opponent diff tree;
``absolute_value`` badges read the player's own role stats. A badge is
awarded only when its status is ``pass``; statuses merge as
fail > unknown > pass, so missing data never awards a badge.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from riftcoach.contracts.badges import (
    AwardedBadge,
    BadgeBranch,
    BadgeCatalog,
    BadgeCondition,
    BadgeDefinition,
    BadgeEvaluation,
    BadgeReport,
    Comparison,
    ConditionEvaluation,
    ConditionStatus,
    RoleFocus,
)
from riftcoach.contracts.common import Role
from riftcoach.contracts.rollup import PlayerRollup, RoleComparison
from riftcoach.core.aggregation.comparison import compare_roles
from riftcoach.core.metrics import mark_badge_awarded
from riftcoach.core.observability import trace_scoring

logger = logging.getLogger(__name__)

DEFAULT_MAX_BADGES = 5

PASS = ConditionStatus.PASS.value
FAIL = ConditionStatus.FAIL.value
UNKNOWN = ConditionStatus.UNKNOWN.value


# ============================================================================
# Metric lookup and formatting
# ============================================================================


def lookup_metric(stats: Mapping[str, Any] | None, path: str) -> float | None:
    """Resolve a dotted path; None unless the leaf is a finite number."""
    current: Any = stats
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    if isinstance(current, bool) or not isinstance(current, int | float):
        return None
    return float(current) if math.isfinite(current) else None


def format_diff(value: float | None) -> str:
    if value is None:
        return "N/A"
    magnitude = abs(value)
    decimals = 0 if magnitude >= 100 else 1 if magnitude >= 10 else 2
    rounded = round(value, decimals) + 0.0
    text = f"{rounded:+.{decimals}f}" if rounded else f"{0:.{decimals}f}"
    if magnitude <= 1:
        text += f" ({value * 100:+.1f}%)"
    return text


def merge_status(current: str, incoming: str) -> str:
    if FAIL in (current, incoming):
        return FAIL
    if UNKNOWN in (current, incoming):
        return UNKNOWN
    return PASS


# ============================================================================
# Conditions
# ============================================================================


def _threshold(condition: BadgeCondition, role: str | None) -> float | None:
    if role and role in condition.threshold_by_role:
        return condition.threshold_by_role[role]
    return condition.value


def _strength(value: float, threshold: float) -> float:
    if threshold == 0:
        return 1.0 + abs(value)
    return abs(value) / abs(threshold)


def evaluate_condition(
    condition: BadgeCondition,
    stats: Mapping[str, Any] | None,
    role: str | None,
) -> ConditionEvaluation:
    value = lookup_metric(stats, condition.metric)
    comparison = condition.comparison
    threshold = _threshold(condition, role)

    if comparison == Comparison.BETWEEN.value:
        threshold_text = f"[{format_diff(condition.min)}, {format_diff(condition.max)}]"
    elif comparison == Comparison.ABS_LTE.value:
        threshold_text = f"|diff| <= {format_diff(threshold)}"
    else:
        threshold_text = f"{comparison} {format_diff(threshold)}"

    if value is None:
        return ConditionEvaluation(
            metric=condition.metric,
            comparison=comparison,
            threshold=threshold_text,
            status=UNKNOWN,
            detail="Metric unavailable.",
        )

    strength = 1.0
    if comparison == Comparison.GTE.value:
        passed = value >= threshold
        strength = _strength(value, threshold)
    elif comparison == Comparison.LTE.value:
        passed = value <= threshold
        strength = _strength(value, threshold)
    elif comparison == Comparison.GT.value:
        passed = value > threshold
        strength = _strength(value, threshold)
    elif comparison == Comparison.BETWEEN.value:
        passed = condition.min <= value <= condition.max
    else:
        passed = abs(value) <= threshold

    status = PASS if passed else FAIL
    verdict = "meets" if passed else "fails"
    return ConditionEvaluation(
        metric=condition.metric,
        value=value,
        comparison=comparison,
        threshold=threshold_text,
        status=status,
        strength=strength if passed else None,
        detail=f"{format_diff(value)} {verdict} {threshold_text}",
    )


def evaluate_branch(
    branch: BadgeBranch,
    stats: Mapping[str, Any] | None,
    role: str | None,
) -> tuple[str, list[ConditionEvaluation]]:
    status = PASS
    results = []
    for condition in branch.must_meet:
        result = evaluate_condition(condition, stats, role)
        results.append(result)
        status = merge_status(status, result.status)
    return status, results


# ============================================================================
# Badges
# ============================================================================


def _dominant_strength(conditions: list[ConditionEvaluation]) -> float:
    strengths = [c.strength for c in conditions if c.status == PASS and c.strength is not None]
    return max(strengths, default=0.0)


def evaluate_badge(
    badge: BadgeDefinition,
    rollup: PlayerRollup,
    comparison: RoleComparison | None,
) -> BadgeEvaluation:
    """Evaluate one catalog entry for the player's primary role."""
    role = rollup.primary_role
    notes: list[str] = []

    if badge.role_focus == RoleFocus.ABSOLUTE_VALUE.value:
        player_stats = rollup.stats_for_role(role) if role else None
        stats = player_stats.model_dump() if player_stats else None
    else:
        stats = comparison.diff if comparison and comparison.opponents else None

    if role is None or stats is None:
        return BadgeEvaluation(
            name=badge.name,
            polarity=badge.polarity,
            status=UNKNOWN,
            summary="Primary role data unavailable.",
        )

    status = PASS
    if role in badge.exclude_roles:
        status = FAIL
        notes.append(f"Primary role {role} is excluded for this badge.")

    if badge.min_games and status != FAIL:
        player_stats = rollup.stats_for_role(role)
        games = player_stats.rows_count if player_stats else 0
        if games < badge.min_games:
            status = FAIL
            notes.append(f"Only {games} games for primary role; require >= {badge.min_games}.")

    evaluated: list[ConditionEvaluation] = []
    counted: list[ConditionEvaluation] = []
    for condition in badge.must_meet:
        result = evaluate_condition(condition, stats, role)
        evaluated.append(result)
        counted.append(result)
        status = merge_status(status, result.status)

    if badge.any_of:
        branch_statuses = []
        for branch in badge.any_of:
            branch_status, results = evaluate_branch(branch, stats, role)
            branch_statuses.append(branch_status)
            evaluated.extend(results)
            if branch_status == PASS:
                counted.extend(results)
        if PASS in branch_statuses:
            combined = PASS
            notes.append("At least one optional branch met its thresholds.")
        elif UNKNOWN in branch_statuses:
            combined = UNKNOWN
            notes.append("Optional branches were inconclusive due to missing metrics.")
        else:
            combined = FAIL
            notes.append("All optional branches failed their thresholds.")
        status = merge_status(status, combined)

    if badge.prefer_non_utility and role == Role.UTILITY.value and status == PASS:
        notes.append("Prefers non-UTILITY roles; confirm narrative fit.")

    if not notes:
        notes.append(
            {
                PASS: "All mandatory thresholds satisfied.",
                FAIL: "Failed required thresholds.",
                UNKNOWN: "Insufficient data to evaluate thresholds.",
            }[status]
        )

    return BadgeEvaluation(
        name=badge.name,
        polarity=badge.polarity,
        status=status,
        strength=_dominant_strength(counted) if status == PASS else 0.0,
        summary=" ".join(notes),
        conditions=evaluated,
    )


def _reason(evaluation: BadgeEvaluation) -> str:
    passing = [c.detail for c in evaluation.conditions if c.status == PASS]
    return "; ".join(passing) or evaluation.summary


@trace_scoring(layer="core")
def classify_badges(
    rollup: PlayerRollup,
    catalog: BadgeCatalog,
    *,
    max_badges: int = DEFAULT_MAX_BADGES,
    comparisons: dict[str, RoleComparison] | None = None,
) -> BadgeReport:
    """Evaluate the whole catalog and keep the strongest passing badges.

    Ties in strength are broken by badge name. Returns an empty ``awarded``
    list when nothing passes.
    """
    if comparisons is None:
        comparisons = compare_roles(rollup)
    primary = rollup.primary_role
    comparison = comparisons.get(primary) if primary else None

    evaluations = [evaluate_badge(badge, rollup, comparison) for badge in catalog.badges]
    passing = sorted(
        (e for e in evaluations if e.status == PASS),
        key=lambda e: (-e.strength, e.name),
    )

    awarded = []
    for evaluation in passing[:max_badges]:
        badge = catalog.get(evaluation.name)
        awarded.append(
            AwardedBadge(
                name=evaluation.name,
                polarity=evaluation.polarity,
                description=badge.description if badge else "",
                reason=_reason(evaluation),
                strength=evaluation.strength,
            )
        )
        mark_badge_awarded(evaluation.name, evaluation.polarity)

    logger.info(
        f"Classified {len(evaluations)} badges for {rollup.puuid}: "
        f"{len(passing)} passing, {len(awarded)} awarded (primary role {primary})"
    )
    return BadgeReport(
        puuid=rollup.puuid,
        primary_role=primary,
        catalog_version=catalog.version,
        awarded=awarded,
        evaluations=evaluations,
    )
