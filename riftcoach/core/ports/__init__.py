"""Port interfaces for hexagonal architecture.

These ports define the contracts between the scoring core and external
adapters. All external dependencies must implement these interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from riftcoach.contracts.badges import BadgeNarration
from riftcoach.contracts.match import Match, MatchRecord
from riftcoach.contracts.timeline import MatchTimeline

__all__ = [
    "BadgeNarratorPort",
    "CachePort",
    "MatchDataSourcePort",
]


class MatchDataSourcePort(ABC):
    """Port for the Match/Timeline document store.

    Implementations push filter/sort/limit down to storage; the core re-applies
    its own filters, so an adapter may over-return but must never under-return.
    """

    @abstractmethod
    async def get_match(self, match_id: str) -> Match | None:
        """Get a match document by id."""
        pass

    @abstractmethod
    async def get_timeline(self, match_id: str) -> MatchTimeline | None:
        """Get the timeline for a match, or None if it was never ingested."""
        pass

    @abstractmethod
    async def find_player_matches(
        self,
        puuid: str,
        *,
        queue_ids: tuple[int, ...],
        start_ms: int | None = None,
        end_ms: int | None = None,
        limit: int | None = None,
    ) -> list[MatchRecord]:
        """Matches containing ``puuid``, newest first."""
        pass

    @abstractmethod
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
        """Matches where ``champion_name`` was played in one of ``positions``,
        sorted by creation time and capped at ``limit``."""
        pass


class CachePort(ABC):
    """Port for cache operations. Failures must surface as a miss, never raise."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Get a value from cache."""
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int | None = None) -> bool:
        """Set a value in cache with optional TTL in seconds."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a value from cache."""
        pass

    async def get_many(self, keys: list[str]) -> dict[str, bytes | None]:
        """Batch read; adapters override when the backend supports it."""
        return {key: await self.get(key) for key in keys}


class BadgeNarratorPort(ABC):
    """Port for turning rule-based badges and numeric diffs into prose."""

    @abstractmethod
    async def narrate(self, payload: dict[str, Any]) -> BadgeNarration:
        """Narrate a badge payload.

        Raises:
            UpstreamScoringError: the narrator is unreachable or its reply is malformed.
        """
        pass
