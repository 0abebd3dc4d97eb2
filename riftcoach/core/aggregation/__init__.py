"""Aggregation: typed stages, percentiles, cohort builder, player rollups."""

from riftcoach.core.aggregation.cohort import (
    COHORT_METRICS,
    build_cohort_percentiles,
    build_cohort_query,
    cohort_rows,
)
from riftcoach.core.aggregation.comparison import compare_role, compare_roles, diff_tree
from riftcoach.core.aggregation.percentiles import mean_or_none, summarize
from riftcoach.core.aggregation.rollup import (
    ROLLUP_METRICS,
    build_player_rollup,
    build_role_stats,
    build_rollup_query,
    collect_player_rows,
    most_weighted_role,
    opponent_row,
    role_weights,
    rollup_champion_role,
    rollup_groups,
)

__all__ = [
    "COHORT_METRICS",
    "ROLLUP_METRICS",
    "build_cohort_percentiles",
    "build_cohort_query",
    "build_player_rollup",
    "build_role_stats",
    "build_rollup_query",
    "cohort_rows",
    "collect_player_rows",
    "compare_role",
    "compare_roles",
    "diff_tree",
    "mean_or_none",
    "most_weighted_role",
    "opponent_row",
    "role_weights",
    "rollup_champion_role",
    "rollup_groups",
    "summarize",
]
