"""Champion mastery scoring: player rollup positioned against its cohort."""

from __future__ import annotations

import logging
from datetime import datetime

from riftcoach.contracts.common import Role
from riftcoach.contracts.rollup import ChampionRoleRollup, PlayerRollup
from riftcoach.core.errors import DataUnavailableError
from riftcoach.core.metrics import observe_score
from riftcoach.core.observability import trace_service
from riftcoach.core.roles import parse_role
from riftcoach.core.scoring import CohortScore, score_breakdown
from riftcoach.core.services.cohort_service import CohortService
from riftcoach.core.services.rollup_service import RollupService

logger = logging.getLogger(__name__)


def find_group(rollup: PlayerRollup, champion_name: str, role: Role) -> ChampionRoleRollup | None:
    wanted = champion_name.casefold()
    for group in rollup.groups:
        if group.champion_name.casefold() == wanted and group.role == role.value:
            return group
    return None


class ScoringService:
    """Computes cohort-relative scores for a player's champions."""

    def __init__(self, rollups: RollupService, cohorts: CohortService) -> None:
        self.rollups = rollups
        self.cohorts = cohorts

    @trace_service
    async def score_champion(
        self,
        puuid: str,
        champion_name: str,
        role: str | Role,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> CohortScore:
        """Score ``puuid`` on one champion+role.

        The cohort window defaults to the configured one; the player's own
        matches are filtered by the same window only when one is given.

        Raises:
            InvalidParameterError: bad champion, role or window.
            DataUnavailableError: no matches for this player/champion/role, or
                the data source failed.
        """
        canonical = parse_role(role)
        cohort_query = self.cohorts.build_query(champion_name, canonical, start, end)
        rollup = await self.rollups.get_player_rollup(
            puuid, champion_name=champion_name, role=canonical, start=start, end=end
        )
        group = find_group(rollup, champion_name, canonical)
        if group is None:
            raise DataUnavailableError(
                f"No matches for {puuid} on {champion_name} as {canonical.value}"
            )

        cohort = await self.cohorts.get_cohort_percentiles(
            cohort_query.champion_name, canonical, cohort_query.start, cohort_query.end
        )
        result = score_breakdown(group, cohort)
        observe_score(canonical.value, result.score)
        logger.info(
            f"Scored {puuid} on {group.champion_name}/{canonical.value}: {result.score} "
            f"({group.total_matches} games, cohort n={cohort.sample_size})"
        )
        return result

    @trace_service
    async def score_all(self, puuid: str, *, min_games: int = 1) -> list[CohortScore]:
        """Score every champion+role group the player has, using bulk cohort lookups.

        Groups whose cohort cannot be resolved are scored against an empty
        cohort (low confidence) rather than dropped.
        """
        rollup = await self.rollups.get_player_rollup(puuid)
        groups = [g for g in rollup.groups if g.total_matches >= min_games]
        cohorts = await self.cohorts.get_bulk_cohort_percentiles(
            [(g.champion_name, g.role) for g in groups]
        )
        scores = []
        for group in groups:
            result = score_breakdown(group, cohorts.get((group.champion_name, group.role)))
            observe_score(group.role, result.score)
            scores.append(result)
        return scores
