"""Service layer: async orchestration of ports around the pure scoring core.

Services connect ports (interfaces) with adapters (implementations),
providing cache memoization, batching and data-source timeouts.
"""

from riftcoach.core.services.badge_service import BadgeService
from riftcoach.core.services.cohort_service import CohortService
from riftcoach.core.services.rollup_service import RollupService
from riftcoach.core.services.scoring_service import ScoringService

__all__ = [
    "BadgeService",
    "CohortService",
    "RollupService",
    "ScoringService",
]
