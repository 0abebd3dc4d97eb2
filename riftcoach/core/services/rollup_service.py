"""Player rollup service: fetch a player's matches, fold them, memoize."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from riftcoach.config import Settings, get_settings
from riftcoach.contracts.common import Role
from riftcoach.contracts.match import MatchRecord
from riftcoach.contracts.metrics import MetricRow
from riftcoach.contracts.rollup import PlayerRollup, RollupQuery
from riftcoach.core.aggregation.rollup import (
    build_player_rollup,
    build_rollup_query,
    collect_player_rows,
)
from riftcoach.core.cache_keys import player_stats_key
from riftcoach.core.errors import DataUnavailableError
from riftcoach.core.extraction import extract_match_rows
from riftcoach.core.observability import trace_service
from riftcoach.core.ports import CachePort, MatchDataSourcePort
from riftcoach.core.services.data_access import bounded_query, decode_model, encode_model
from riftcoach.core.zoning import ZoneClassifier

logger = logging.getLogger(__name__)


class RollupService:
    """Builds ``PlayerRollup`` objects from the data source."""

    def __init__(
        self,
        source: MatchDataSourcePort,
        cache: CachePort | None = None,
        *,
        settings: Settings | None = None,
        classifier: ZoneClassifier | None = None,
    ) -> None:
        self.source = source
        self.cache = cache
        self.settings = settings or get_settings()
        self.classifier = classifier

    def build_query(
        self,
        puuid: str,
        *,
        champion_name: str | None = None,
        role: str | Role | None = None,
        queue_ids: Iterable[int] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
    ) -> RollupQuery:
        return build_rollup_query(
            puuid,
            champion_name=champion_name,
            role=role,
            queue_ids=queue_ids if queue_ids is not None else self.settings.allowed_queue_ids,
            start=start,
            end=end,
            limit=limit,
        )

    async def compute(self, query: RollupQuery) -> PlayerRollup:
        """Query the data source and fold the player's matches, bypassing the cache."""
        records = await bounded_query(
            "player_matches",
            self.source.find_player_matches(
                query.puuid,
                queue_ids=query.queue_ids,
                start_ms=query.start_ms,
                end_ms=query.end_ms,
                limit=query.limit,
            ),
            self.settings.data_source_timeout_seconds,
        )
        rows, opponents = collect_player_rows(records, query, classifier=self.classifier)
        logger.info(
            f"Folded {len(rows)} matches ({len(opponents)} with a lane opponent) "
            f"for {query.puuid} scope={query.scope}"
        )
        return build_player_rollup(query.puuid, rows, opponents)

    @trace_service
    async def get_player_rollup(
        self,
        puuid: str,
        *,
        champion_name: str | None = None,
        role: str | Role | None = None,
        queue_ids: Iterable[int] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        use_cache: bool = True,
    ) -> PlayerRollup:
        """Rollup for a player, optionally narrowed to a champion/role/window.

        Raises:
            InvalidParameterError: bad puuid/role/window, before any query.
            DataUnavailableError: the data source failed or timed out.
        """
        query = self.build_query(
            puuid,
            champion_name=champion_name,
            role=role,
            queue_ids=queue_ids,
            start=start,
            end=end,
            limit=limit,
        )
        key = player_stats_key(query.puuid, query.scope)

        if use_cache and self.cache is not None:
            cached = decode_model(PlayerRollup, await self.cache.get(key), compressed=True)
            if cached is not None:
                return cached

        rollup = await self.compute(query)
        if self.cache is not None:
            stored = await self.cache.set(
                key,
                encode_model(rollup, compress=True),
                self.settings.player_stats_cache_ttl_seconds,
            )
            if not stored:
                logger.warning(f"Player rollup not cached for {key}")
        return rollup

    @trace_service
    async def get_match_rows(self, match_id: str) -> list[MetricRow]:
        """Metric Rows for every participant of one stored match.

        Raises:
            DataUnavailableError: the Match record does not exist.
        """
        timeout = self.settings.data_source_timeout_seconds
        match = await bounded_query("match", self.source.get_match(match_id), timeout)
        if match is None:
            raise DataUnavailableError(f"Match {match_id} not found")
        timeline = await bounded_query("timeline", self.source.get_timeline(match_id), timeout)
        if timeline is None:
            logger.info(f"No timeline for {match_id}; timeline metrics will be null")
        return extract_match_rows(
            MatchRecord(match=match, timeline=timeline), classifier=self.classifier
        )
