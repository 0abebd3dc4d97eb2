"""Cohort-relative scorer - pure domain functions with zero I/O.

Baseline-and-contributions model:
1. Start at 50.
2. Positive metrics score +10/+5/+2/-2 against the p90/p75/p50 buckets.
3. Negative metrics score +3 (<= p50), -10 (>= p90), -6 (>= p75), else -1.
4. Role weights scale groups of contributions.
5. Match volume adds +4/+2/+1 or subtracts 6 for tiny samples.
6. Clamp to [0, 100] and round; a non-finite total falls back to 50.

Deterministic: identical rollup and cohort inputs give an identical score.
"""

import logging
import math

from riftcoach.contracts.cohort import CohortPercentiles, MetricPercentiles
from riftcoach.contracts.rollup import ChampionRoleRollup
from riftcoach.core.scoring.models import CohortScore, MetricContribution
from riftcoach.core.scoring.weights import REFERENCE_EDGES, RoleWeights, weights_for

logger = logging.getLogger(__name__)

BASELINE_SCORE = 50.0
EARLY_GANK_FLOOR = 0.35
EARLY_GANK_PENALTY_SLOPE = -4.0

# (minimum matches, adjustment), checked in order
_VOLUME_STEPS: tuple[tuple[int, float], ...] = ((20, 4.0), (10, 2.0), (5, 1.0))
_LOW_VOLUME_ADJUSTMENT = -6.0


def _edges(p: MetricPercentiles) -> tuple[float, float, float]:
    """(p50, p75, p90) with missing levels cascading down; a missing p50 becomes 0."""
    p50 = p.p50 if p.p50 is not None else 0.0
    p75 = p.p75 if p.p75 is not None else p50
    p90 = p.p90 if p.p90 is not None else p75
    return p50, p75, p90


def positive_bucket(value: float | None, percentiles: MetricPercentiles) -> float:
    """+10 at/above p90, +5 at/above p75, +2 at/above p50, else -2.

    None (metric not available for the player) contributes nothing; NaN
    propagates so the final score falls back to baseline.
    """
    if value is None:
        return 0.0
    if not math.isfinite(value):
        return math.nan
    p50, p75, p90 = _edges(percentiles)
    if value >= p90:
        return 10.0
    if value >= p75:
        return 5.0
    if value >= p50:
        return 2.0
    return -2.0


def negative_bucket(value: float | None, percentiles: MetricPercentiles) -> float:
    """+3 at/below p50, -10 at/above p90, -6 at/above p75, else -1."""
    if value is None:
        return 0.0
    if not math.isfinite(value):
        return math.nan
    p50, p75, p90 = _edges(percentiles)
    if value <= p50:
        return 3.0
    if value >= p90:
        return -10.0
    if value >= p75:
        return -6.0
    return -1.0


def volume_adjustment(total_matches: int) -> float:
    for minimum, adjustment in _VOLUME_STEPS:
        if total_matches >= minimum:
            return adjustment
    return _LOW_VOLUME_ADJUSTMENT


def early_gank_penalty(rate: float | None) -> float:
    if rate is None:
        return 0.0
    return max(0.0, rate - EARLY_GANK_FLOOR) * EARLY_GANK_PENALTY_SLOPE


def _positive_plan(
    rollup: ChampionRoleRollup, weights: RoleWeights
) -> list[tuple[str, float | None, str, float]]:
    """(metric, player value, percentile source, weight) for every positive metric."""
    return [
        ("win_rate", rollup.win_rate, "reference", 1.0),
        ("kda", rollup.kda, "reference", 1.0),
        ("dpm", rollup.metric("dpm"), "cohort", weights.damage),
        ("kpm", rollup.metric("kpm"), "cohort", 1.0),
        ("apm", rollup.metric("apm"), "cohort", weights.assists),
        ("gold_at_10", rollup.metric("gold_at_10"), "cohort", weights.farming),
        ("cs_at_10", rollup.metric("cs_at_10"), "cohort", weights.farming),
        ("gold_at_15", rollup.metric("gold_at_15"), "cohort", weights.farming),
        ("cs_at_15", rollup.metric("cs_at_15"), "cohort", weights.farming),
        ("damage_share", rollup.damage_share, "reference", weights.damage * 0.5),
        (
            "objective_participation",
            rollup.objective_participation,
            "reference",
            weights.objectives,
        ),
    ]


def _percentiles(
    metric: str, source: str, cohort: CohortPercentiles | None
) -> MetricPercentiles:
    if source == "reference":
        return REFERENCE_EDGES[metric]
    if cohort is None:
        return MetricPercentiles()
    return cohort.get(metric)


def score_breakdown(
    rollup: ChampionRoleRollup, cohort: CohortPercentiles | None
) -> CohortScore:
    """Score a rollup against its cohort, keeping every contribution for explanation."""
    weights = weights_for(rollup.role)
    contributions: list[MetricContribution] = []

    positive_sum = 0.0
    for metric, value, source, weight in _positive_plan(rollup, weights):
        bucket = positive_bucket(value, _percentiles(metric, source, cohort))
        weighted = bucket * weight
        positive_sum += weighted
        contributions.append(
            MetricContribution(
                metric=metric, value=value, bucket=bucket, weight=weight, weighted=weighted
            )
        )
    positive_total = weights.positive_scale * positive_sum

    deaths_value = rollup.metric("deaths_per_min")
    deaths_bucket = negative_bucket(deaths_value, _percentiles("deaths_per_min", "cohort", cohort))
    dtpm_value = rollup.metric("dtpm")
    dtpm_bucket = negative_bucket(dtpm_value, _percentiles("dtpm", "cohort", cohort))
    negative_parts = (
        ("deaths_per_min", deaths_value, deaths_bucket, weights.deaths),
        # Damage taken is a soft penalty: half weight before role scaling.
        ("dtpm", dtpm_value, dtpm_bucket / 2, weights.damage_taken),
    )
    negative_sum = 0.0
    for metric, value, bucket, weight in negative_parts:
        weighted = bucket * weight
        negative_sum += weighted
        contributions.append(
            MetricContribution(
                metric=metric, value=value, bucket=bucket, weight=weight, weighted=weighted
            )
        )

    gank_penalty = early_gank_penalty(rollup.early_gank_death_rate)
    negative_total = weights.negative_scale * negative_sum + gank_penalty
    volume = volume_adjustment(rollup.total_matches)

    raw = BASELINE_SCORE + positive_total + negative_total + volume
    if not math.isfinite(raw):
        logger.warning(
            f"Non-finite score for {rollup.champion_name}/{rollup.role}; using baseline"
        )
        raw = BASELINE_SCORE
    score = math.floor(max(0.0, min(100.0, raw)) + 0.5)

    return CohortScore(
        champion_name=rollup.champion_name,
        role=rollup.role,
        score=score,
        baseline=BASELINE_SCORE,
        positive_total=positive_total,
        negative_total=negative_total,
        early_gank_penalty=gank_penalty,
        volume_adjustment=volume,
        total_matches=rollup.total_matches,
        cohort_sample_size=cohort.sample_size if cohort else 0,
        low_confidence=cohort is None or cohort.low_confidence,
        contributions=contributions,
    )


def compute_cohort_score(rollup: ChampionRoleRollup, cohort: CohortPercentiles | None) -> int:
    """Bounded 0-100 integer score for one champion+role rollup."""
    return score_breakdown(rollup, cohort).score
