"""
Common data types and base models for riftcoach.
All models use Pydantic V2 with strict type checking.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    """Canonical five-role taxonomy plus UNKNOWN for unmatched labels."""

    TOP = "TOP"
    JUNGLE = "JUNGLE"
    MIDDLE = "MIDDLE"
    BOTTOM = "BOTTOM"
    UTILITY = "UTILITY"
    UNKNOWN = "UNKNOWN"


# Roles that participate in role-bucketed aggregation.
PLAYABLE_ROLES: tuple[Role, ...] = (
    Role.TOP,
    Role.JUNGLE,
    Role.MIDDLE,
    Role.BOTTOM,
    Role.UTILITY,
)


class Queue(int, Enum):
    """Game queue types."""

    RANKED_SOLO_5x5 = 420
    RANKED_FLEX_SR = 440
    NORMAL_DRAFT_PICK = 400
    NORMAL_BLIND_PICK = 430
    ARAM = 450
    CLASH = 700


# Summoner's Rift queues eligible for cohort and rollup statistics.
ALLOWED_QUEUE_IDS: tuple[int, ...] = (
    Queue.RANKED_FLEX_SR.value,
    Queue.RANKED_SOLO_5x5.value,
    Queue.NORMAL_DRAFT_PICK.value,
)


class Position(BaseModel):
    """2D position on the map."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    x: int = Field(..., description="X coordinate on the map")
    y: int = Field(..., description="Y coordinate on the map")


class BaseContract(BaseModel):
    """Base model for all data contracts with common configuration."""

    model_config = ConfigDict(
        # Validate data on assignment
        validate_assignment=True,
        # Use enum values in JSON
        use_enum_values=True,
        # Forbid extra fields to ensure data integrity
        extra="forbid",
    )


class RiotContract(BaseContract):
    """Base model for raw Riot Match-V5 documents.

    Riot payloads are camelCase and carry far more fields than scoring needs,
    so unknown keys are ignored and snake_case names are accepted as well.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
