"""Percentile and averaging primitives.

Percentiles use linear interpolation between order statistics (numpy's
default method), so p50 <= p75 <= p90 <= p95 holds for any sample. Missing
values are skipped, never treated as zero.
"""

import math
from collections.abc import Iterable

import numpy as np

from riftcoach.contracts.cohort import PERCENTILE_LEVELS, MetricPercentiles


def present(values: Iterable[float | None]) -> list[float]:
    """Drop None and NaN."""
    return [float(v) for v in values if v is not None and not math.isnan(v)]


def mean_or_none(values: Iterable[float | None]) -> float | None:
    """Mean of the present values, or None when there are none."""
    kept = present(values)
    if not kept:
        return None
    return float(np.mean(kept))


def summarize(values: Iterable[float | None]) -> MetricPercentiles:
    """{p50, p75, p90, p95} of the present values; all None for an empty sample."""
    kept = present(values)
    if not kept:
        return MetricPercentiles()
    levels = np.percentile(np.asarray(kept, dtype=float), [q * 100 for q in PERCENTILE_LEVELS])
    # Guard against float noise breaking the ordering on near-constant samples.
    ordered = np.maximum.accumulate(levels)
    p50, p75, p90, p95 = (float(v) for v in ordered)
    return MetricPercentiles(p50=p50, p75=p75, p90=p90, p95=p95)
