"""Unit tests for RollupService."""

import gzip
from unittest.mock import AsyncMock

import pytest

from riftcoach.adapters.memory_source import InMemoryMatchSource
from riftcoach.contracts.rollup import PlayerRollup
from riftcoach.core.cache_keys import player_stats_key
from riftcoach.core.errors import DataUnavailableError, InvalidParameterError
from riftcoach.core.services.rollup_service import RollupService

START_MS = 1_739_971_200_000
HOUR_MS = 3_600_000


@pytest.fixture
def source(make_record):
    """'me' plays mid: Ahri x3 and Zed x2 in ranked, one ARAM, and one game without timeline."""
    records = [
        make_record(
            f"NA1_{i}",
            game_creation=START_MS + i * HOUR_MS,
            overrides={3: {"puuid": "me", "championName": "Ahri" if i < 3 else "Zed"}},
        )
        for i in range(5)
    ]
    records.append(
        make_record("NA1_ARAM", game_creation=START_MS, queue_id=450, overrides={3: {"puuid": "me"}})
    )
    records.append(make_record("NA1_BARE", game_creation=START_MS - HOUR_MS, with_timeline=False))
    return InMemoryMatchSource(records)


@pytest.fixture
def service(source, cache, settings):
    return RollupService(source, cache, settings=settings)


class TestGetPlayerRollup:
    @pytest.mark.asyncio
    async def test_folds_ranked_matches(self, service):
        rollup = await service.get_player_rollup("me")

        assert rollup.total_matches == 5
        assert rollup.primary_role == "MIDDLE"
        assert {(g.champion_name, g.total_matches) for g in rollup.groups} == {("Ahri", 3), ("Zed", 2)}
        assert len(rollup.opponent_role_stats) == 1

    @pytest.mark.asyncio
    async def test_caches_gzipped_rollup(self, service, cache, settings):
        rollup = await service.get_player_rollup("me")

        key = player_stats_key("me", service.build_query("me").scope)
        assert cache.ttls[key] == settings.player_stats_cache_ttl_seconds
        assert PlayerRollup.model_validate_json(gzip.decompress(cache.store[key])) == rollup

    @pytest.mark.asyncio
    async def test_cache_hit_skips_data_source(self, service):
        first = await service.get_player_rollup("me")
        service.source = AsyncMock()

        assert await service.get_player_rollup("me") == first
        service.source.find_player_matches.assert_not_called()

    @pytest.mark.asyncio
    async def test_filters_use_their_own_cache_entry(self, service, cache):
        await service.get_player_rollup("me")
        scoped = await service.get_player_rollup("me", champion_name="Zed", role="mid")

        assert scoped.total_matches == 2
        assert len(cache.store) == 2

    @pytest.mark.asyncio
    async def test_unknown_player_gives_empty_rollup(self, service):
        rollup = await service.get_player_rollup("nobody")
        assert rollup.total_matches == 0
        assert rollup.primary_role is None

    @pytest.mark.asyncio
    async def test_invalid_role_rejected_before_query(self, settings):
        source = AsyncMock()
        service = RollupService(source, settings=settings)

        with pytest.raises(InvalidParameterError):
            await service.get_player_rollup("me", role="feeder")

        source.find_player_matches.assert_not_called()

    @pytest.mark.asyncio
    async def test_data_source_failure_propagates(self, settings):
        source = AsyncMock()
        source.find_player_matches.side_effect = DataUnavailableError("query failed")
        service = RollupService(source, settings=settings)

        with pytest.raises(DataUnavailableError):
            await service.get_player_rollup("me")


class TestGetMatchRows:
    @pytest.mark.asyncio
    async def test_every_participant(self, service):
        rows = await service.get_match_rows("NA1_0")
        assert len(rows) == 10
        assert all(row.has_timeline for row in rows)

    @pytest.mark.asyncio
    async def test_missing_timeline_nulls_timeline_metrics(self, service):
        rows = await service.get_match_rows("NA1_BARE")
        assert len(rows) == 10
        assert all(row.at_10 is None and row.objectives is None for row in rows)
        assert rows[0].kills == 2

    @pytest.mark.asyncio
    async def test_missing_match(self, service):
        with pytest.raises(DataUnavailableError, match="NA1_404"):
            await service.get_match_rows("NA1_404")
