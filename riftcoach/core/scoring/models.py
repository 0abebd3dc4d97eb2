"""Scoring output models."""

from pydantic import Field

from riftcoach.contracts.common import BaseContract


class MetricContribution(BaseContract):
    """One metric's bucketed contribution before and after role weighting."""

    metric: str
    value: float | None = None
    bucket: float = Field(0.0, description="Raw bucket points (+10/+5/+2/-2 or +3/-1/-6/-10)")
    weight: float = Field(1.0, ge=0)
    weighted: float = 0.0


class CohortScore(BaseContract):
    """Bounded cohort-relative score for one champion+role rollup."""

    champion_name: str
    role: str
    score: int = Field(..., ge=0, le=100)
    baseline: float = 50.0
    positive_total: float = 0.0
    negative_total: float = 0.0
    early_gank_penalty: float = 0.0
    volume_adjustment: float = 0.0
    total_matches: int = Field(0, ge=0)
    cohort_sample_size: int = Field(0, ge=0)
    low_confidence: bool = False
    contributions: list[MetricContribution] = Field(default_factory=list)
