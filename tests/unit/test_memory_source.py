"""Unit tests for the in-memory Match/Timeline data source."""

import pytest

from riftcoach.adapters.memory_source import InMemoryMatchSource
from riftcoach.contracts.match import MatchRecord

START_MS = 1_739_971_200_000
HOUR_MS = 3_600_000
RANKED = (420, 440)


@pytest.fixture
def source(make_record):
    return InMemoryMatchSource(
        [
            make_record("NA1_1", game_creation=START_MS, overrides={3: {"championName": "Ahri"}}),
            make_record(
                "NA1_2",
                game_creation=START_MS + HOUR_MS,
                overrides={8: {"championName": "Ahri", "teamPosition": "", "individualPosition": "MIDDLE"}},
            ),
            make_record(
                "NA1_3",
                game_creation=START_MS + 2 * HOUR_MS,
                queue_id=450,
                overrides={3: {"championName": "Ahri"}},
            ),
            make_record("NA1_4", game_creation=START_MS + 3 * HOUR_MS),
        ]
    )


class TestInMemoryMatchSource:
    @pytest.mark.asyncio
    async def test_get_match_and_timeline(self, source):
        assert (await source.get_match("NA1_1")).match_id == "NA1_1"
        assert (await source.get_timeline("NA1_1")).match_id == "NA1_1"
        assert await source.get_match("NA1_404") is None
        assert await source.get_timeline("NA1_404") is None

    def test_mismatched_timeline_is_dropped(self, make_match, make_timeline):
        record = MatchRecord(match=make_match("NA1_1"), timeline=make_timeline("NA1_2"))
        source = InMemoryMatchSource([record])
        assert len(source) == 1
        assert source._records["NA1_1"].timeline is None

    @pytest.mark.asyncio
    async def test_player_matches_newest_first(self, source):
        records = await source.find_player_matches("puuid-1", queue_ids=RANKED)
        assert [r.match_id for r in records] == ["NA1_4", "NA1_2", "NA1_1"]

    @pytest.mark.asyncio
    async def test_player_matches_window_and_limit(self, source):
        records = await source.find_player_matches(
            "puuid-1", queue_ids=RANKED, start_ms=START_MS + 1, end_ms=START_MS + 3 * HOUR_MS
        )
        assert [r.match_id for r in records] == ["NA1_2"]
        assert len(await source.find_player_matches("puuid-1", queue_ids=RANKED, limit=1)) == 1
        assert await source.find_player_matches("stranger", queue_ids=RANKED) == []

    @pytest.mark.asyncio
    async def test_cohort_matches_use_role_fallback(self, source):
        records = await source.find_cohort_matches(
            "ahri", ("MIDDLE",), queue_ids=RANKED, start_ms=START_MS, end_ms=START_MS + 4 * HOUR_MS
        )
        assert [r.match_id for r in records] == ["NA1_2", "NA1_1"]

    @pytest.mark.asyncio
    async def test_cohort_matches_order_limit_and_wins(self, source):
        window = {"queue_ids": RANKED, "start_ms": START_MS, "end_ms": START_MS + 4 * HOUR_MS}
        oldest = await source.find_cohort_matches("Ahri", ("MIDDLE",), descending=False, limit=1, **window)
        assert [r.match_id for r in oldest] == ["NA1_1"]

        # participant 8 is on the losing team
        winners = await source.find_cohort_matches("Ahri", ("MIDDLE",), wins_only=True, **window)
        assert [r.match_id for r in winners] == ["NA1_1"]
