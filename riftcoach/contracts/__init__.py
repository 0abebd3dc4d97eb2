"""Data contracts shared by the scoring core and its adapters."""

from riftcoach.contracts.badges import (
    AwardedBadge,
    BadgeCatalog,
    BadgeDefinition,
    BadgeNarration,
    BadgeReport,
    NarratedBadge,
)
from riftcoach.contracts.cohort import CohortPercentiles, CohortQuery, MetricPercentiles
from riftcoach.contracts.common import ALLOWED_QUEUE_IDS, BaseContract, Position, Queue, Role
from riftcoach.contracts.match import Match, MatchInfo, Participant
from riftcoach.contracts.metrics import MetricRow, MinuteSnapshot, ObjectiveParticipation
from riftcoach.contracts.rollup import (
    ChampionRoleRollup,
    PlayerRollup,
    RoleComparison,
    RoleStats,
    RollupQuery,
)
from riftcoach.contracts.timeline import Frame, MatchTimeline, ParticipantFrame

__all__ = [
    "ALLOWED_QUEUE_IDS",
    "AwardedBadge",
    "BadgeCatalog",
    "BadgeDefinition",
    "BadgeNarration",
    "BadgeReport",
    "BaseContract",
    "ChampionRoleRollup",
    "CohortPercentiles",
    "CohortQuery",
    "Frame",
    "Match",
    "MatchInfo",
    "MatchTimeline",
    "MetricPercentiles",
    "MetricRow",
    "MinuteSnapshot",
    "NarratedBadge",
    "ObjectiveParticipation",
    "Participant",
    "ParticipantFrame",
    "PlayerRollup",
    "Position",
    "Queue",
    "Role",
    "RoleComparison",
    "RoleStats",
    "RollupQuery",
]
