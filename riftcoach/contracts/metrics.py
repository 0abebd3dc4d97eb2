"""
Metric Row contracts: the derived, flattened unit fed into cohort sampling
and player rollups. Rows are recomputed from Match + Timeline on every query.

All rates and shares are 0-1 proportions. Timeline-derived fields are None
(never 0) when the timeline is missing or the game never reached the minute.
"""

from pydantic import Field, model_validator

from .common import BaseContract, Role

SNAPSHOT_MINUTES: tuple[int, ...] = (10, 15, 20, 30)

OBJECTIVE_CATEGORIES: tuple[str, ...] = (
    "drakes",
    "grubs",
    "herald",
    "baron",
    "atakhan",
    "towers",
    "turret_plates",
)

EPIC_MONSTER_CATEGORIES: tuple[str, ...] = ("drakes", "grubs", "herald", "baron", "atakhan")


class MinuteSnapshot(BaseContract):
    """Participant state at a given minute frame."""

    gold: int = Field(..., ge=0)
    cs: int = Field(..., ge=0)
    xp: int = Field(..., ge=0)
    level: int = Field(..., ge=1)


class ObjectiveTally(BaseContract):
    """Team takes vs. the participant's own involvement for one objective category."""

    takes: int = Field(0, ge=0)
    participated: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_involvement(self) -> "ObjectiveTally":
        if self.participated > self.takes:
            raise ValueError("participated cannot exceed team takes")
        return self

    @property
    def rate(self) -> float | None:
        """Involvement / team takes; None when the team took none."""
        if self.takes == 0:
            return None
        return self.participated / self.takes


class ObjectiveParticipation(BaseContract):
    """Per-category objective tallies for one participant in one match."""

    drakes: ObjectiveTally = Field(default_factory=ObjectiveTally)
    grubs: ObjectiveTally = Field(default_factory=ObjectiveTally)
    herald: ObjectiveTally = Field(default_factory=ObjectiveTally)
    baron: ObjectiveTally = Field(default_factory=ObjectiveTally)
    atakhan: ObjectiveTally = Field(default_factory=ObjectiveTally)
    towers: ObjectiveTally = Field(default_factory=ObjectiveTally)
    turret_plates: ObjectiveTally = Field(default_factory=ObjectiveTally)

    def tally(self, category: str) -> ObjectiveTally:
        return getattr(self, category)

    @property
    def epic_monster_rate(self) -> float | None:
        """Participation over all elite monsters combined."""
        takes = sum(self.tally(c).takes for c in EPIC_MONSTER_CATEGORIES)
        if takes == 0:
            return None
        return sum(self.tally(c).participated for c in EPIC_MONSTER_CATEGORIES) / takes


class EarlyGameCounters(BaseContract):
    """Event counters up to ``window_ms`` (inclusive) by event timestamp."""

    window_ms: int = Field(..., gt=0)
    deaths: int = Field(0, ge=0)
    kills: int = Field(0, ge=0)
    solo_kills: int = Field(0, ge=0)
    ward_kills: int = Field(0, ge=0)


class MetricRow(BaseContract):
    """One participant in one match, flattened into scalar metrics."""

    # Identity
    match_id: str
    puuid: str
    participant_id: int = Field(..., ge=1, le=10)
    team_id: int
    champion_name: str
    role: Role
    queue_id: int
    game_creation: int = Field(..., description="Epoch milliseconds")
    duration_seconds: int = Field(..., ge=0)
    win: bool

    # Raw counters
    kills: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    cs: int = Field(0, ge=0)
    gold_earned: int = Field(0, ge=0)
    damage_dealt: int = Field(0, ge=0)
    damage_taken: int = Field(0, ge=0)
    vision_score: int = Field(0, ge=0)
    double_kills: int = Field(0, ge=0)
    triple_kills: int = Field(0, ge=0)
    quadra_kills: int = Field(0, ge=0)
    penta_kills: int = Field(0, ge=0)

    # Per-minute rates
    kills_per_min: float = Field(0.0, ge=0)
    deaths_per_min: float = Field(0.0, ge=0)
    assists_per_min: float = Field(0.0, ge=0)
    cs_per_min: float = Field(0.0, ge=0)
    gold_per_min: float = Field(0.0, ge=0)
    damage_per_min: float = Field(0.0, ge=0)
    damage_taken_per_min: float = Field(0.0, ge=0)
    vision_per_min: float = Field(0.0, ge=0)

    # Team-relative shares
    damage_share: float | None = Field(None, ge=0, le=1)
    damage_taken_share: float | None = Field(None, ge=0, le=1)

    # Timeline-derived
    has_timeline: bool = False
    at_10: MinuteSnapshot | None = None
    at_15: MinuteSnapshot | None = None
    at_20: MinuteSnapshot | None = None
    at_30: MinuteSnapshot | None = None
    laning_phase: EarlyGameCounters | None = Field(None, description="Counters up to 10:00")
    early_game: EarlyGameCounters | None = Field(None, description="Counters up to 15:00")
    solo_kills: int | None = Field(None, ge=0)
    objectives: ObjectiveParticipation | None = None
    early_gank_death: bool | None = None
    early_death_zones: list[str] | None = Field(
        None, description="Map region of each death before 15:00, for narration"
    )

    @property
    def kda(self) -> float:
        return (self.kills + self.assists) / max(1, self.deaths)

    def snapshot(self, minute: int) -> MinuteSnapshot | None:
        return getattr(self, f"at_{minute}")

    def metric_values(self) -> dict[str, float | None]:
        """Scalar metrics keyed by the names used in cohort distributions and rollups."""
        at_10 = self.at_10
        at_15 = self.at_15
        at_20 = self.at_20
        at_30 = self.at_30
        return {
            "kills": float(self.kills),
            "deaths": float(self.deaths),
            "assists": float(self.assists),
            "cs": float(self.cs),
            "gold_earned": float(self.gold_earned),
            "gold_at_10": float(at_10.gold) if at_10 else None,
            "cs_at_10": float(at_10.cs) if at_10 else None,
            "gold_at_15": float(at_15.gold) if at_15 else None,
            "cs_at_15": float(at_15.cs) if at_15 else None,
            "dpm": self.damage_per_min,
            "dtpm": self.damage_taken_per_min,
            "kpm": self.kills_per_min,
            "apm": self.assists_per_min,
            "deaths_per_min": self.deaths_per_min,
            "cs_per_min": self.cs_per_min,
            "gold_per_min": self.gold_per_min,
            "vision_per_min": self.vision_per_min,
            "gold_at_20": float(at_20.gold) if at_20 else None,
            "cs_at_20": float(at_20.cs) if at_20 else None,
            "gold_at_30": float(at_30.gold) if at_30 else None,
            "cs_at_30": float(at_30.cs) if at_30 else None,
        }
