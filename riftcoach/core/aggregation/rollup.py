"""Player rollup aggregator.

Folds a player's Metric Rows into per-(champion, role) rollups, per-role
stats, and a role distribution. Averages skip missing values, so games that
never reached minute 30 do not drag minute-30 averages toward zero.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime

from pydantic import ValidationError

from riftcoach.contracts.cohort import MetricPercentiles
from riftcoach.contracts.common import ALLOWED_QUEUE_IDS, PLAYABLE_ROLES, Role
from riftcoach.contracts.match import MatchRecord
from riftcoach.contracts.metrics import OBJECTIVE_CATEGORIES, MetricRow
from riftcoach.contracts.rollup import (
    ChampionRoleRollup,
    ObjectiveParticipationSummary,
    ObjectiveSummary,
    PerMinuteStats,
    PlayerRollup,
    RoleStats,
    RollupQuery,
    SnapshotAverages,
)
from riftcoach.core.aggregation.percentiles import mean_or_none
from riftcoach.core.aggregation.stages import (
    by_champion,
    by_queue,
    by_role,
    filter_stage,
    group_rows,
    in_window,
    known_role,
    percentile_stage,
    run_stages,
    sort_stage,
    take_stage,
)
from riftcoach.core.errors import DataUnavailableError, InvalidParameterError
from riftcoach.core.extraction import extract_metric_row
from riftcoach.core.roles import parse_role, participant_role
from riftcoach.core.zoning import ZoneClassifier

logger = logging.getLogger(__name__)

ROLLUP_METRICS: tuple[str, ...] = (
    "kills",
    "deaths",
    "assists",
    "cs",
    "gold_earned",
    "gold_at_10",
    "cs_at_10",
    "gold_at_15",
    "cs_at_15",
    "gold_at_20",
    "cs_at_20",
    "gold_at_30",
    "cs_at_30",
    "dpm",
    "dtpm",
    "kpm",
    "apm",
    "deaths_per_min",
    "cs_per_min",
    "gold_per_min",
    "vision_per_min",
)

# Per-game counters and per-minute rates whose spread describes consistency.
SELF_PERCENTILE_METRICS: tuple[str, ...] = (
    "kills",
    "deaths",
    "assists",
    "cs",
    "kpm",
    "deaths_per_min",
    "apm",
    "cs_per_min",
    "dpm",
    "gold_per_min",
    "vision_per_min",
    "dtpm",
)

_SPREAD_METRICS: tuple[str, ...] = ("kills", "deaths", "assists", "cs")


# ============================================================================
# Champion + role rollups
# ============================================================================


def rollup_champion_role(rows: Sequence[MetricRow]) -> ChampionRoleRollup:
    """Fold rows of a single (champion, role) group."""
    if not rows:
        raise ValueError("cannot roll up an empty group")
    first = rows[0]
    total = len(rows)
    wins = sum(1 for row in rows if row.win)

    averages = {
        metric: mean_or_none(row.metric_values().get(metric) for row in rows)
        for metric in ROLLUP_METRICS
    }
    avg_kills = averages["kills"] or 0.0
    avg_deaths = averages["deaths"] or 0.0
    avg_assists = averages["assists"] or 0.0

    gank_flags = [
        float(row.early_gank_death) if row.early_gank_death is not None else None for row in rows
    ]

    return ChampionRoleRollup(
        champion_name=first.champion_name,
        role=first.role,
        total_matches=total,
        wins=wins,
        losses=total - wins,
        win_rate=wins / total,
        kda=(avg_kills + avg_assists) / max(1.0, avg_deaths),
        averages=averages,
        damage_share=mean_or_none(row.damage_share for row in rows),
        damage_taken_share=mean_or_none(row.damage_taken_share for row in rows),
        objective_participation=mean_or_none(
            row.objectives.epic_monster_rate if row.objectives else None for row in rows
        ),
        early_gank_death_rate=mean_or_none(gank_flags),
        self_percentiles=percentile_stage(rows, SELF_PERCENTILE_METRICS),
    )


def rollup_groups(rows: Iterable[MetricRow]) -> list[ChampionRoleRollup]:
    """One rollup per (champion, role) actually played; UNKNOWN roles are excluded.

    Sorted by match count desc, then champion, then role.
    """
    groups = group_rows(
        (row for row in rows if known_role()(row)), key=lambda row: (row.champion_name, row.role)
    )
    rollups = [rollup_champion_role(group) for group in groups.values()]
    return sorted(rollups, key=lambda r: (-r.total_matches, r.champion_name, r.role))


# ============================================================================
# Role distribution
# ============================================================================


def role_games(rows: Iterable[MetricRow]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for row in rows:
        if row.role == Role.UNKNOWN.value:
            continue
        counts[row.role] = counts.get(row.role, 0) + 1
    return counts


def role_weights(rows: Iterable[MetricRow]) -> dict[str, float]:
    """Canonical role -> fraction of games with a known role."""
    counts = role_games(rows)
    total = sum(counts.values())
    if total == 0:
        return {}
    return {role: count / total for role, count in sorted(counts.items())}


def most_weighted_role(games: dict[str, int]) -> Role | None:
    """Role with the most games; ties go to the alphabetically first role."""
    if not games:
        return None
    role, _ = min(games.items(), key=lambda item: (-item[1], item[0]))
    return Role(role)


# ============================================================================
# Per-role stats
# ============================================================================


def _snapshot_averages(rows: Sequence[MetricRow], minute: int) -> SnapshotAverages:
    snapshots = [row.snapshot(minute) for row in rows]
    return SnapshotAverages(
        cs=mean_or_none(s.cs if s else None for s in snapshots),
        gold=mean_or_none(s.gold if s else None for s in snapshots),
        xp=mean_or_none(s.xp if s else None for s in snapshots),
        level=mean_or_none(s.level if s else None for s in snapshots),
    )


def _objective_summary(rows: Sequence[MetricRow]) -> ObjectiveParticipationSummary:
    summaries: dict[str, ObjectiveSummary] = {}
    for category in OBJECTIVE_CATEGORIES:
        tallies = [row.objectives.tally(category) for row in rows if row.objectives]
        takes = sum(t.takes for t in tallies)
        participated = sum(t.participated for t in tallies)
        summaries[category] = ObjectiveSummary(
            takes=takes,
            participated=participated,
            rate=participated / takes if takes else None,
        )
    return ObjectiveParticipationSummary(**summaries)


def _spreads(percentiles: dict[str, MetricPercentiles]) -> dict[str, float | None]:
    spreads: dict[str, float | None] = {}
    for metric in _SPREAD_METRICS:
        summary = percentiles.get(metric)
        if summary is None or summary.p50 is None or summary.p90 is None:
            spreads[metric] = None
        else:
            spreads[metric] = summary.p90 - summary.p50
    return spreads


def _death_zone_counts(rows: Sequence[MetricRow]) -> dict[str, int]:
    counts = Counter(zone for row in rows for zone in row.early_death_zones or ())
    return dict(sorted(counts.items()))


def build_role_stats(rows: Sequence[MetricRow], role: Role | str) -> RoleStats:
    """Aggregate every row (all champions) played in ``role``."""
    count = len(rows)
    wins = sum(1 for row in rows if row.win)
    percentiles = percentile_stage(rows, SELF_PERCENTILE_METRICS)
    return RoleStats(
        role=Role(role),
        rows_count=count,
        wins=wins,
        win_rate=wins / count if count else None,
        per_min=PerMinuteStats(
            kills=mean_or_none(row.kills_per_min for row in rows),
            deaths=mean_or_none(row.deaths_per_min for row in rows),
            assists=mean_or_none(row.assists_per_min for row in rows),
            cs=mean_or_none(row.cs_per_min for row in rows),
            damage_dealt=mean_or_none(row.damage_per_min for row in rows),
            gold=mean_or_none(row.gold_per_min for row in rows),
            vision_score=mean_or_none(row.vision_per_min for row in rows),
            damage_taken=mean_or_none(row.damage_taken_per_min for row in rows),
        ),
        percentiles=percentiles,
        spread=_spreads(percentiles),
        at_10=_snapshot_averages(rows, 10),
        at_15=_snapshot_averages(rows, 15),
        at_20=_snapshot_averages(rows, 20),
        at_30=_snapshot_averages(rows, 30),
        objective_participation=_objective_summary(rows),
        early_death_zones=_death_zone_counts(rows),
    )


def role_stats_by_role(rows: Iterable[MetricRow]) -> list[RoleStats]:
    """RoleStats for each playable role present in ``rows``, in canonical role order."""
    grouped = group_rows(rows, key=lambda row: row.role)
    return [
        build_role_stats(grouped[role.value], role)
        for role in PLAYABLE_ROLES
        if role.value in grouped
    ]


# ============================================================================
# Direct opponents
# ============================================================================


def opponent_row(
    record: MatchRecord, player_row: MetricRow, *, classifier: ZoneClassifier | None = None
) -> MetricRow | None:
    """The lane opponent's row: same canonical role on the opposing team."""
    if player_row.role == Role.UNKNOWN.value:
        return None
    for participant in record.match.info.participants:
        if participant.team_id == player_row.team_id:
            continue
        if participant_role(participant) != player_row.role:
            continue
        try:
            return extract_metric_row(
                record.match,
                record.timeline,
                participant_id=participant.participant_id,
                classifier=classifier,
            )
        except DataUnavailableError as e:
            logger.warning(f"No opponent row for match {record.match_id}: {e}")
            return None
    return None


# ============================================================================
# Player rollup
# ============================================================================


def build_player_rollup(
    puuid: str,
    rows: Sequence[MetricRow],
    opponent_rows: Sequence[MetricRow] = (),
) -> PlayerRollup:
    """Assemble groups, role distribution and per-role player/opponent stats."""
    games = role_games(rows)
    return PlayerRollup(
        puuid=puuid,
        total_matches=len(rows),
        groups=rollup_groups(rows),
        role_weights=role_weights(rows),
        primary_role=most_weighted_role(games),
        role_stats=role_stats_by_role(rows),
        opponent_role_stats=role_stats_by_role(opponent_rows),
    )


def build_rollup_query(
    puuid: str,
    *,
    champion_name: str | None = None,
    role: str | Role | None = None,
    queue_ids: Iterable[int] = ALLOWED_QUEUE_IDS,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int | None = None,
) -> RollupQuery:
    """Validate caller input into a ``RollupQuery``.

    Raises:
        InvalidParameterError: blank puuid, unknown role, or start >= end.
    """
    if not puuid or not puuid.strip():
        raise InvalidParameterError("puuid is required")
    canonical = parse_role(role) if role is not None else None
    try:
        return RollupQuery(
            puuid=puuid.strip(),
            champion_name=champion_name.strip() if champion_name else None,
            role=canonical,
            queue_ids=tuple(queue_ids),
            start=start,
            end=end,
            limit=limit,
        )
    except ValidationError as e:
        raise InvalidParameterError(str(e)) from e


def collect_player_rows(
    records: Iterable[MatchRecord],
    query: RollupQuery,
    *,
    classifier: ZoneClassifier | None = None,
) -> tuple[list[MetricRow], list[MetricRow]]:
    """The player's rows matching ``query`` and the lane-opponent rows of the same matches."""
    by_match: dict[str, MatchRecord] = {}
    rows: list[MetricRow] = []
    for record in records:
        try:
            row = extract_metric_row(
                record.match, record.timeline, puuid=query.puuid, classifier=classifier
            )
        except DataUnavailableError as e:
            logger.warning(f"Skipping match {record.match_id}: {e}")
            continue
        by_match[record.match_id] = record
        rows.append(row)

    predicates = [by_queue(query.queue_ids), in_window(query.start_ms, query.end_ms)]
    if query.champion_name:
        predicates.append(by_champion(query.champion_name))
    if query.role:
        predicates.append(by_role(query.role))
    stages = [filter_stage(*predicates), sort_stage(descending=True)]
    if query.limit:
        stages.append(take_stage(query.limit))
    kept = run_stages(rows, *stages)

    opponents = [
        opponent
        for row in kept
        if (opponent := opponent_row(by_match[row.match_id], row, classifier=classifier))
        is not None
    ]
    return kept, opponents
