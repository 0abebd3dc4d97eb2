"""Typed transformation stages over Metric Rows: filter -> map -> group -> percentile.

Each stage is a plain function over in-memory rows so it can be unit tested
on its own and composed with ``run_stages``. Storage adapters may push the
same filters down to their query language; the stages are the reference
semantics.
"""

from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import TypeVar

from riftcoach.contracts.cohort import MetricPercentiles
from riftcoach.contracts.common import Role
from riftcoach.contracts.metrics import MetricRow
from riftcoach.core.aggregation.percentiles import summarize

K = TypeVar("K", bound=Hashable)

RowPredicate = Callable[[MetricRow], bool]
Stage = Callable[[list[MetricRow]], list[MetricRow]]


# ============================================================================
# Filter
# ============================================================================


def by_champion(champion_name: str) -> RowPredicate:
    wanted = champion_name.casefold()
    return lambda row: row.champion_name.casefold() == wanted


def by_role(role: Role | str) -> RowPredicate:
    wanted = Role(role).value
    return lambda row: row.role == wanted


def known_role() -> RowPredicate:
    return lambda row: row.role != Role.UNKNOWN.value


def by_queue(queue_ids: Iterable[int]) -> RowPredicate:
    allowed = frozenset(queue_ids)
    return lambda row: row.queue_id in allowed


def in_window(start_ms: int | None, end_ms: int | None) -> RowPredicate:
    """Creation time in [start_ms, end_ms); an open bound matches everything."""

    def predicate(row: MetricRow) -> bool:
        if start_ms is not None and row.game_creation < start_ms:
            return False
        if end_ms is not None and row.game_creation >= end_ms:
            return False
        return True

    return predicate


def wins_only() -> RowPredicate:
    return lambda row: row.win


def filter_rows(rows: Iterable[MetricRow], *predicates: RowPredicate) -> list[MetricRow]:
    return [row for row in rows if all(predicate(row) for predicate in predicates)]


def filter_stage(*predicates: RowPredicate) -> Stage:
    return lambda rows: filter_rows(rows, *predicates)


# ============================================================================
# Sort / limit
# ============================================================================


def sort_by_recency(rows: Iterable[MetricRow], *, descending: bool = True) -> list[MetricRow]:
    """Order by creation time; match id breaks ties so output is deterministic."""
    return sorted(rows, key=lambda row: (row.game_creation, row.match_id), reverse=descending)


def sort_stage(*, descending: bool = True) -> Stage:
    return lambda rows: sort_by_recency(rows, descending=descending)


def take_stage(limit: int) -> Stage:
    return lambda rows: rows[:limit]


def run_stages(rows: Iterable[MetricRow], *stages: Stage) -> list[MetricRow]:
    result = list(rows)
    for stage in stages:
        result = stage(result)
    return result


# ============================================================================
# Map / group / percentile
# ============================================================================


def map_metric(rows: Iterable[MetricRow], metric: str) -> list[float | None]:
    """Values of one named metric (see ``MetricRow.metric_values``), None where missing."""
    return [row.metric_values().get(metric) for row in rows]


def map_metrics(rows: Sequence[MetricRow], metrics: Iterable[str]) -> dict[str, list[float | None]]:
    values = [row.metric_values() for row in rows]
    return {metric: [v.get(metric) for v in values] for metric in metrics}


def group_rows(rows: Iterable[MetricRow], key: Callable[[MetricRow], K]) -> dict[K, list[MetricRow]]:
    """Group preserving first-seen order of keys and input order within groups."""
    groups: dict[K, list[MetricRow]] = defaultdict(list)
    for row in rows:
        groups[key(row)].append(row)
    return dict(groups)


def percentile_stage(
    rows: Sequence[MetricRow], metrics: Iterable[str]
) -> dict[str, MetricPercentiles]:
    return {metric: summarize(values) for metric, values in map_metrics(rows, metrics).items()}
