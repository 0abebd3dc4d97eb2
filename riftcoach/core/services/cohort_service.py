"""Cohort percentile service.

Wraps the pure cohort builder with the data-source query, cache
memoization and bulk lookup. Single lookups cache with the long TTL; bulk
lookups sample fewer rows and cache with the short TTL.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime

from riftcoach.config import Settings, get_settings
from riftcoach.contracts.cohort import CohortPercentiles, CohortQuery
from riftcoach.contracts.common import Role
from riftcoach.core.aggregation.cohort import (
    build_cohort_percentiles,
    build_cohort_query,
    cohort_rows,
)
from riftcoach.core.cache_keys import cohort_percentiles_key
from riftcoach.core.errors import RiftcoachError
from riftcoach.core.metrics import observe_cohort_sample
from riftcoach.core.observability import trace_service
from riftcoach.core.ports import CachePort, MatchDataSourcePort
from riftcoach.core.roles import role_aliases
from riftcoach.core.services.data_access import bounded_query, decode_model, encode_model
from riftcoach.core.zoning import ZoneClassifier

logger = logging.getLogger(__name__)

CohortPair = tuple[str, str]


def cohort_cache_key(query: CohortQuery) -> str:
    return cohort_percentiles_key(
        query.champion_name,
        query.role,
        query.start,
        query.end,
        query.wins_only,
        query.sample_size,
    )


class CohortService:
    """Champion+role percentile distributions, memoized in the cache."""

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
        champion_name: str,
        role: str | Role,
        start: datetime | None = None,
        end: datetime | None = None,
        *,
        wins_only: bool = False,
        sample_size: int | None = None,
        sort_descending: bool = True,
    ) -> CohortQuery:
        """Fill defaults from settings; raises ``InvalidParameterError`` before any I/O."""
        return build_cohort_query(
            champion_name,
            role,
            start or self.settings.cohort_default_window_start,
            end or self.settings.cohort_default_window_end,
            wins_only=wins_only,
            sample_size=sample_size if sample_size is not None else self.settings.cohort_sample_limit,
            sort_descending=sort_descending,
            queue_ids=self.settings.allowed_queue_ids,
        )

    async def compute(self, query: CohortQuery) -> CohortPercentiles:
        """Query the data source and build percentiles, bypassing the cache."""
        records = await bounded_query(
            "cohort_matches",
            self.source.find_cohort_matches(
                query.champion_name,
                role_aliases(query.role),
                queue_ids=query.queue_ids,
                start_ms=query.start_ms,
                end_ms=query.end_ms,
                wins_only=query.wins_only,
                limit=query.sample_size,
                descending=query.sort_descending,
            ),
            self.settings.data_source_timeout_seconds,
        )
        rows = cohort_rows(records, query, classifier=self.classifier)
        observe_cohort_sample(len(rows))
        return build_cohort_percentiles(
            rows, query, min_reliable_sample=self.settings.min_reliable_sample
        )

    async def _store(self, key: str, cohort: CohortPercentiles, ttl: int) -> None:
        if self.cache is None:
            return
        if not await self.cache.set(key, encode_model(cohort), ttl):
            logger.warning(f"Cohort result not cached for {key}")

    @trace_service
    async def get_cohort_percentiles(
        self,
        champion_name: str,
        role: str | Role,
        start: datetime | None = None,
        end: datetime | None = None,
        *,
        wins_only: bool = False,
        sample_size: int | None = None,
        sort_descending: bool = True,
        use_cache: bool = True,
    ) -> CohortPercentiles:
        """Percentiles for one champion+role cohort.

        Raises:
            InvalidParameterError: bad champion/role/window, before any query.
            DataUnavailableError: the data source failed or timed out.
        """
        query = self.build_query(
            champion_name,
            role,
            start,
            end,
            wins_only=wins_only,
            sample_size=sample_size,
            sort_descending=sort_descending,
        )
        key = cohort_cache_key(query)

        if use_cache and self.cache is not None:
            cached = decode_model(CohortPercentiles, await self.cache.get(key))
            if cached is not None:
                logger.debug(f"Cohort cache hit for {key}")
                return cached

        cohort = await self.compute(query)
        await self._store(key, cohort, self.settings.cohort_cache_ttl_seconds)
        return cohort

    @trace_service
    async def get_bulk_cohort_percentiles(
        self,
        pairs: Iterable[CohortPair],
        start: datetime | None = None,
        end: datetime | None = None,
        *,
        sample_size: int | None = None,
        concurrency: int | None = None,
    ) -> dict[CohortPair, CohortPercentiles | None]:
        """Percentiles for many (champion, role) pairs at once.

        Pairs are deduplicated after role normalization, cached entries are
        read in one batch, and misses are computed with bounded concurrency.
        A pair that cannot be resolved maps to None; the rest still return.
        """
        limit = sample_size if sample_size is not None else self.settings.cohort_bulk_sample_limit
        queries: dict[str, CohortQuery] = {}
        key_for_pair: dict[CohortPair, str | None] = {}
        for pair in pairs:
            if pair in key_for_pair:
                continue
            champion_name, role = pair
            try:
                query = self.build_query(champion_name, role, start, end, sample_size=limit)
            except RiftcoachError as e:
                logger.warning(f"Skipping cohort pair {pair}: {e}")
                key_for_pair[pair] = None
                continue
            key = cohort_cache_key(query)
            queries.setdefault(key, query)
            key_for_pair[pair] = key

        results: dict[str, CohortPercentiles | None] = {}
        if self.cache is not None and queries:
            cached = await self.cache.get_many(list(queries))
            for key, raw in cached.items():
                decoded = decode_model(CohortPercentiles, raw)
                if decoded is not None:
                    results[key] = decoded

        misses = [key for key in queries if key not in results]
        logger.info(
            f"Bulk cohort lookup: {len(key_for_pair)} pairs, {len(queries)} unique, "
            f"{len(queries) - len(misses)} cached, {len(misses)} to compute"
        )

        semaphore = asyncio.Semaphore(concurrency or self.settings.cohort_bulk_concurrency)

        async def resolve(key: str) -> None:
            async with semaphore:
                try:
                    cohort = await self.compute(queries[key])
                except RiftcoachError as e:
                    logger.warning(f"Cohort lookup failed for {key}: {e}")
                    results[key] = None
                    return
                results[key] = cohort
                await self._store(key, cohort, self.settings.cohort_bulk_cache_ttl_seconds)

        await asyncio.gather(*(resolve(key) for key in misses))
        return {
            pair: results.get(key) if key is not None else None
            for pair, key in key_for_pair.items()
        }
