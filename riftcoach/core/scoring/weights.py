"""Role-dependent weights for the cohort scorer (strategy map: role -> weights).

Unlisted roles fall back to ``DEFAULT_WEIGHTS`` (every multiplier 1.0).
"""

from pydantic import BaseModel, ConfigDict, Field

from riftcoach.contracts.cohort import MetricPercentiles
from riftcoach.contracts.common import Role


class RoleWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    positive_scale: float = Field(1.0, ge=0)
    negative_scale: float = Field(1.0, ge=0)
    damage: float = Field(1.0, ge=0, description="dpm; damage share uses half of it")
    farming: float = Field(1.0, ge=0, description="gold/CS at 10 and 15")
    assists: float = Field(1.0, ge=0)
    deaths: float = Field(1.0, ge=0, description="deaths/min penalty")
    damage_taken: float = Field(1.0, ge=0, description="damage taken/min penalty")
    objectives: float = Field(1.0, ge=0)


DEFAULT_WEIGHTS = RoleWeights()

ROLE_WEIGHTS: dict[Role, RoleWeights] = {
    Role.BOTTOM: RoleWeights(
        positive_scale=1.1,
        negative_scale=0.8,
        damage=1.2,
        farming=1.15,
        assists=1.0,
        deaths=0.7,
        damage_taken=0.5,
        objectives=0.8,
    ),
    Role.UTILITY: RoleWeights(
        positive_scale=1.0,
        negative_scale=0.9,
        damage=0.8,
        farming=0.9,
        assists=1.2,
        deaths=1.0,
        damage_taken=1.0,
        objectives=1.1,
    ),
    Role.MIDDLE: RoleWeights(
        positive_scale=1.05,
        negative_scale=0.9,
        damage=1.1,
        farming=1.05,
        assists=1.0,
        deaths=0.85,
        damage_taken=0.7,
        objectives=1.0,
    ),
}


def weights_for(role: Role | str | None) -> RoleWeights:
    if role is None:
        return DEFAULT_WEIGHTS
    try:
        return ROLE_WEIGHTS.get(Role(role), DEFAULT_WEIGHTS)
    except ValueError:
        return DEFAULT_WEIGHTS


# Fixed bucket edges for metrics the cohort distribution does not carry.
REFERENCE_EDGES: dict[str, MetricPercentiles] = {
    "win_rate": MetricPercentiles(p50=0.5, p75=0.55, p90=0.6),
    "kda": MetricPercentiles(p50=2.0, p75=3.0, p90=4.0),
    "damage_share": MetricPercentiles(p50=0.22, p75=0.26, p90=0.30),
    "objective_participation": MetricPercentiles(p50=0.3, p75=0.4, p90=0.5),
}
