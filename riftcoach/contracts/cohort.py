"""
Cohort contracts: the query that selects a champion+role population and the
percentile distribution built over it.
"""

from datetime import datetime

from pydantic import Field, model_validator

from .common import ALLOWED_QUEUE_IDS, BaseContract, Role

# Percentile levels reported for every metric.
PERCENTILE_LEVELS: tuple[float, ...] = (0.5, 0.75, 0.9, 0.95)


class CohortQuery(BaseContract):
    """Parameters identifying one cohort sample."""

    champion_name: str = Field(..., min_length=1)
    role: Role
    start: datetime
    end: datetime
    wins_only: bool = False
    sample_size: int = Field(1000, ge=1)
    sort_descending: bool = Field(True, description="Most recent matches first")
    queue_ids: tuple[int, ...] = ALLOWED_QUEUE_IDS

    @model_validator(mode="after")
    def check_window(self) -> "CohortQuery":
        if self.start >= self.end:
            raise ValueError("time window start must be before end")
        if self.role == Role.UNKNOWN.value:
            raise ValueError("cohort role must be a playable role")
        return self

    @property
    def start_ms(self) -> int:
        return int(self.start.timestamp() * 1000)

    @property
    def end_ms(self) -> int:
        return int(self.end.timestamp() * 1000)


class MetricPercentiles(BaseContract):
    """Percentile summary of a single metric. Any level may be None when unknown."""

    p50: float | None = None
    p75: float | None = None
    p90: float | None = None
    p95: float | None = None


class CohortPercentiles(BaseContract):
    """Percentile distribution per metric over a cohort sample."""

    champion_name: str
    role: Role
    start: datetime
    end: datetime
    wins_only: bool = False
    sample_size: int = Field(..., ge=0, description="Metric rows actually sampled")
    low_confidence: bool = Field(
        False, description="True when the sample is too small for stable percentiles"
    )
    metrics: dict[str, MetricPercentiles] = Field(default_factory=dict)

    def get(self, metric: str) -> MetricPercentiles:
        """Percentiles for ``metric``; an all-None summary when absent."""
        return self.metrics.get(metric) or MetricPercentiles()
