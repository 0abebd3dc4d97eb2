"""Cohort-relative scoring.

A player's champion+role rollup is positioned against the cohort percentile
distribution with a baseline-and-contributions model and role-aware weights,
yielding an integer score in [0, 100].
"""

from riftcoach.core.scoring.models import CohortScore, MetricContribution
from riftcoach.core.scoring.scorer import (
    compute_cohort_score,
    negative_bucket,
    positive_bucket,
    score_breakdown,
    volume_adjustment,
)
from riftcoach.core.scoring.weights import REFERENCE_EDGES, ROLE_WEIGHTS, RoleWeights, weights_for

__all__ = [
    "CohortScore",
    "MetricContribution",
    "REFERENCE_EDGES",
    "ROLE_WEIGHTS",
    "RoleWeights",
    "compute_cohort_score",
    "negative_bucket",
    "positive_bucket",
    "score_breakdown",
    "volume_adjustment",
    "weights_for",
]
