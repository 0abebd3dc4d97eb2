"""Metric extraction: Match + Timeline -> per-participant Metric Rows."""

from riftcoach.core.extraction.extractor import (
    EARLY_WINDOW_MS,
    LANING_WINDOW_MS,
    early_death_zones,
    early_game_counters,
    early_gank_death,
    extract_match_rows,
    extract_metric_row,
    minute_snapshot,
    objective_participation,
    per_minute,
    team_shares,
)

__all__ = [
    "EARLY_WINDOW_MS",
    "LANING_WINDOW_MS",
    "early_death_zones",
    "early_game_counters",
    "early_gank_death",
    "extract_match_rows",
    "extract_metric_row",
    "minute_snapshot",
    "objective_participation",
    "per_minute",
    "team_shares",
]
