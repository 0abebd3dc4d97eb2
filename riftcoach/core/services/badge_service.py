"""Badge service: rule-based classification plus optional LLM narration.

The rule-based report never depends on the narrator. Narration failures
(``UpstreamScoringError``) are caught here and replaced by the
deterministic fallback; only successful LLM narrations are cached.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from riftcoach.config import Settings, get_settings
from riftcoach.contracts.badges import BadgeCatalog, BadgeNarration, BadgeReport
from riftcoach.contracts.rollup import PlayerRollup
from riftcoach.core.aggregation.comparison import compare_roles
from riftcoach.core.badges import classify_badges, get_catalog
from riftcoach.core.cache_keys import badge_result_key
from riftcoach.core.errors import DataUnavailableError, UpstreamScoringError
from riftcoach.core.fallbacks.badge_fallback import generate_fallback_narration
from riftcoach.core.metrics import mark_narrator
from riftcoach.core.observability import trace_service
from riftcoach.core.ports import BadgeNarratorPort, CachePort
from riftcoach.core.services.data_access import decode_model, encode_model
from riftcoach.core.services.rollup_service import RollupService

logger = logging.getLogger(__name__)


def normalize_polarity(narration: BadgeNarration, catalog: BadgeCatalog) -> BadgeNarration:
    """Force the catalog polarity onto narrated badges whose title names a catalog badge."""
    by_name = {badge.name.casefold(): badge.polarity for badge in catalog.badges}
    badges = []
    for badge in narration.badges:
        polarity = by_name.get(badge.title.strip().casefold(), badge.polarity)
        if polarity != badge.polarity:
            logger.info(f"Narrated badge {badge.title!r} polarity {badge.polarity} -> {polarity}")
        badges.append(badge.model_copy(update={"polarity": polarity}))
    return BadgeNarration(badges=badges, source=narration.source)


def build_narration_payload(
    report: BadgeReport, rollup: PlayerRollup, catalog: BadgeCatalog
) -> dict[str, Any]:
    """Primary-role diffs and awarded badges, labeled for the narrator."""
    comparison = compare_roles(rollup).get(report.primary_role) if report.primary_role else None
    player_stats = rollup.stats_for_role(report.primary_role) if report.primary_role else None
    return {
        "puuid": report.puuid,
        "primary_role": report.primary_role,
        "games": comparison.games if comparison else 0,
        "diffs": comparison.diff if comparison else {},
        "early_death_zones": player_stats.early_death_zones if player_stats else {},
        "awarded": [badge.model_dump(mode="json") for badge in report.awarded],
        "allowed_badges": [
            {"name": badge.name, "polarity": badge.polarity, "description": badge.description}
            for badge in catalog.badges
        ],
    }


class BadgeService:
    """Evaluates the badge catalog for a player and narrates the result."""

    def __init__(
        self,
        rollups: RollupService,
        narrator: BadgeNarratorPort | None = None,
        cache: CachePort | None = None,
        *,
        catalog: BadgeCatalog | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.rollups = rollups
        self.narrator = narrator
        self.cache = cache
        self.catalog = catalog or get_catalog()
        self.settings = settings or get_settings()

    async def _rollup(
        self, puuid: str, start: datetime | None, end: datetime | None
    ) -> PlayerRollup:
        rollup = await self.rollups.get_player_rollup(puuid, start=start, end=end)
        if rollup.total_matches == 0:
            raise DataUnavailableError(f"No matches found for {puuid}")
        return rollup

    @trace_service
    async def evaluate_badges(
        self, puuid: str, *, start: datetime | None = None, end: datetime | None = None
    ) -> BadgeReport:
        """Rule-based badge report for the player's most-weighted role.

        Raises:
            DataUnavailableError: the player has no matches in scope.
        """
        rollup = await self._rollup(puuid, start, end)
        return classify_badges(rollup, self.catalog, max_badges=self.settings.max_badges)

    @trace_service
    async def narrate_badges(
        self,
        puuid: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        use_cache: bool = True,
    ) -> BadgeNarration:
        """Narrated badges; falls back to rule-based text when the narrator fails."""
        scope = self.rollups.build_query(puuid, start=start, end=end).scope
        key = badge_result_key(puuid, scope)
        if use_cache and self.cache is not None:
            cached = decode_model(BadgeNarration, await self.cache.get(key), compressed=True)
            if cached is not None:
                return cached

        rollup = await self._rollup(puuid, start, end)
        report = classify_badges(rollup, self.catalog, max_badges=self.settings.max_badges)
        if not report.awarded:
            return generate_fallback_narration(report)
        if self.narrator is None:
            mark_narrator("fallback")
            return generate_fallback_narration(report)

        payload = build_narration_payload(report, rollup, self.catalog)
        try:
            narration = await self.narrator.narrate(payload)
        except UpstreamScoringError as e:
            logger.warning(f"Badge narration failed for {puuid}, using fallback: {e}")
            mark_narrator("fallback")
            return generate_fallback_narration(report)

        mark_narrator("ok")
        narration = normalize_polarity(narration, self.catalog)
        if self.cache is not None:
            await self.cache.set(
                key,
                encode_model(narration, compress=True),
                self.settings.badge_result_cache_ttl_seconds,
            )
        return narration

