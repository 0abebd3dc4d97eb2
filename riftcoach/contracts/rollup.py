"""
Player rollup contracts: a player's matches folded per (champion, role) and
per role, plus the role-vs-opponent comparison used by the badge classifier.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from .cohort import MetricPercentiles
from .common import ALLOWED_QUEUE_IDS, BaseContract, Role


class RollupQuery(BaseContract):
    """Filter for folding a player's matches."""

    puuid: str = Field(..., min_length=1)
    champion_name: str | None = None
    role: Role | None = None
    queue_ids: tuple[int, ...] = ALLOWED_QUEUE_IDS
    start: datetime | None = None
    end: datetime | None = None
    limit: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def check_window(self) -> "RollupQuery":
        if self.start is not None and self.end is not None and self.start >= self.end:
            raise ValueError("time window start must be before end")
        return self

    @property
    def start_ms(self) -> int | None:
        return int(self.start.timestamp() * 1000) if self.start else None

    @property
    def end_ms(self) -> int | None:
        return int(self.end.timestamp() * 1000) if self.end else None

    @property
    def scope(self) -> str:
        """Stable string describing the filter, used in cache keys."""
        parts = [
            self.champion_name or "all",
            str(self.role or "all"),
            "-".join(str(q) for q in sorted(self.queue_ids)),
            str(int(self.start.timestamp())) if self.start else "any",
            str(int(self.end.timestamp())) if self.end else "any",
            str(self.limit or "all"),
        ]
        return ":".join(parts)


class ChampionRoleRollup(BaseContract):
    """A player's matches on one champion in one role."""

    champion_name: str
    role: Role
    total_matches: int = Field(..., ge=0)
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    win_rate: float = Field(0.0, ge=0, le=1)
    kda: float = Field(0.0, ge=0)
    averages: dict[str, float | None] = Field(
        default_factory=dict, description="Per-metric means, skipping missing values"
    )
    damage_share: float | None = Field(None, ge=0, le=1)
    damage_taken_share: float | None = Field(None, ge=0, le=1)
    objective_participation: float | None = Field(None, ge=0, le=1)
    early_gank_death_rate: float | None = Field(None, ge=0, le=1)
    self_percentiles: dict[str, MetricPercentiles] = Field(default_factory=dict)

    def metric(self, name: str) -> float | None:
        return self.averages.get(name)


class PerMinuteStats(BaseContract):
    kills: float | None = None
    deaths: float | None = None
    assists: float | None = None
    cs: float | None = None
    damage_dealt: float | None = None
    gold: float | None = None
    vision_score: float | None = None
    damage_taken: float | None = None


class SnapshotAverages(BaseContract):
    cs: float | None = None
    gold: float | None = None
    xp: float | None = None
    level: float | None = None


class ObjectiveSummary(BaseContract):
    """Summed takes/involvement across matches; rate in 0-1 or None."""

    takes: int = Field(0, ge=0)
    participated: int = Field(0, ge=0)
    rate: float | None = Field(None, ge=0, le=1)


class ObjectiveParticipationSummary(BaseContract):
    drakes: ObjectiveSummary = Field(default_factory=ObjectiveSummary)
    grubs: ObjectiveSummary = Field(default_factory=ObjectiveSummary)
    herald: ObjectiveSummary = Field(default_factory=ObjectiveSummary)
    baron: ObjectiveSummary = Field(default_factory=ObjectiveSummary)
    atakhan: ObjectiveSummary = Field(default_factory=ObjectiveSummary)
    towers: ObjectiveSummary = Field(default_factory=ObjectiveSummary)
    turret_plates: ObjectiveSummary = Field(default_factory=ObjectiveSummary)


class RoleStats(BaseContract):
    """Aggregated stats for every match a player (or their opponents) played in one role."""

    role: Role
    rows_count: int = Field(..., ge=0)
    wins: int = Field(0, ge=0)
    win_rate: float | None = Field(None, ge=0, le=1)
    per_min: PerMinuteStats = Field(default_factory=PerMinuteStats)
    percentiles: dict[str, MetricPercentiles] = Field(default_factory=dict)
    spread: dict[str, float | None] = Field(
        default_factory=dict, description="p90 - p50 of per-game counters"
    )
    at_10: SnapshotAverages = Field(default_factory=SnapshotAverages)
    at_15: SnapshotAverages = Field(default_factory=SnapshotAverages)
    at_20: SnapshotAverages = Field(default_factory=SnapshotAverages)
    at_30: SnapshotAverages = Field(default_factory=SnapshotAverages)
    objective_participation: ObjectiveParticipationSummary = Field(
        default_factory=ObjectiveParticipationSummary
    )
    early_death_zones: dict[str, int] = Field(
        default_factory=dict, description="Deaths before 15:00 counted by map region"
    )


class RoleComparison(BaseContract):
    """Player vs. direct lane opponents for one role."""

    role: Role
    player_weight: float = Field(0.0, ge=0, le=1)
    opponent_weight: float = Field(0.0, ge=0, le=1)
    games: int = Field(0, ge=0)
    player: RoleStats
    opponents: RoleStats | None = None
    diff: dict[str, Any] = Field(
        default_factory=dict, description="Nested player - opponent diffs, 2 decimals"
    )


class PlayerRollup(BaseContract):
    """Everything folded from one player's matches for a query."""

    puuid: str
    total_matches: int = Field(0, ge=0)
    groups: list[ChampionRoleRollup] = Field(default_factory=list)
    role_weights: dict[str, float] = Field(
        default_factory=dict, description="Canonical role -> fraction of games"
    )
    primary_role: Role | None = None
    role_stats: list[RoleStats] = Field(default_factory=list)
    opponent_role_stats: list[RoleStats] = Field(default_factory=list)

    def group(self, champion_name: str, role: Role | str) -> ChampionRoleRollup | None:
        role_value = role.value if isinstance(role, Role) else role
        for group in self.groups:
            if group.champion_name == champion_name and group.role == role_value:
                return group
        return None

    def stats_for_role(self, role: Role | str) -> RoleStats | None:
        role_value = role.value if isinstance(role, Role) else role
        for stats in self.role_stats:
            if stats.role == role_value:
                return stats
        return None
