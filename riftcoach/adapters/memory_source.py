"""In-process Match/Timeline data source.

Holds already-loaded records in memory, for batch jobs that read documents
from files and for tests. Applies the same filter/sort/limit semantics as
the SQL adapter.
"""

import logging
from collections.abc import Iterable

from riftcoach.contracts.match import Match, MatchRecord
from riftcoach.contracts.timeline import MatchTimeline
from riftcoach.core.ports import MatchDataSourcePort
from riftcoach.core.roles import normalize_role, participant_role

logger = logging.getLogger(__name__)


def _recency(record: MatchRecord) -> tuple[int, str]:
    return record.match.info.game_creation, record.match_id


class InMemoryMatchSource(MatchDataSourcePort):
    """Dictionary-backed data source keyed by match id."""

    def __init__(self, records: Iterable[MatchRecord] = ()) -> None:
        self._records: dict[str, MatchRecord] = {}
        for record in records:
            self.add(record)

    def add(self, record: MatchRecord) -> None:
        if record.timeline is not None and record.timeline.match_id != record.match_id:
            logger.warning(
                f"Dropping timeline {record.timeline.match_id} stored with match {record.match_id}"
            )
            record = MatchRecord(match=record.match, timeline=None)
        self._records[record.match_id] = record

    def __len__(self) -> int:
        return len(self._records)

    def _in_window(
        self, record: MatchRecord, queue_ids: tuple[int, ...], start_ms: int | None, end_ms: int | None
    ) -> bool:
        info = record.match.info
        if info.queue_id not in queue_ids:
            return False
        if start_ms is not None and info.game_creation < start_ms:
            return False
        return end_ms is None or info.game_creation < end_ms

    async def get_match(self, match_id: str) -> Match | None:
        record = self._records.get(match_id)
        return record.match if record else None

    async def get_timeline(self, match_id: str) -> MatchTimeline | None:
        record = self._records.get(match_id)
        return record.timeline if record else None

    async def find_player_matches(
        self,
        puuid: str,
        *,
        queue_ids: tuple[int, ...],
        start_ms: int | None = None,
        end_ms: int | None = None,
        limit: int | None = None,
    ) -> list[MatchRecord]:
        found = [
            record
            for record in self._records.values()
            if record.match.info.get_participant_by_puuid(puuid) is not None
            and self._in_window(record, queue_ids, start_ms, end_ms)
        ]
        found.sort(key=_recency, reverse=True)
        return found[:limit] if limit is not None else found

    async def find_cohort_matches(
        self,
        champion_name: str,
        positions: tuple[str, ...],
        *,
        queue_ids: tuple[int, ...],
        start_ms: int,
        end_ms: int,
        wins_only: bool = False,
        limit: int = 1000,
        descending: bool = True,
    ) -> list[MatchRecord]:
        wanted_champion = champion_name.casefold()
        wanted_roles = {normalize_role(position) for position in positions}

        def played(record: MatchRecord) -> bool:
            return any(
                p.champion_name.casefold() == wanted_champion
                and participant_role(p) in wanted_roles
                and (p.win or not wins_only)
                for p in record.match.info.participants
            )

        found = [
            record
            for record in self._records.values()
            if self._in_window(record, queue_ids, start_ms, end_ms) and played(record)
        ]
        found.sort(key=_recency, reverse=descending)
        return found[:limit]
