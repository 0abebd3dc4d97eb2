"""Pytest configuration and fixtures for riftcoach tests.

Raw Riot documents are built as camelCase dicts (the shape the data source
stores) and validated into contracts, so every test exercises the same
parsing path as production reads.
"""

from collections.abc import Iterable
from typing import Any

import pytest

from riftcoach.config import Settings
from riftcoach.contracts.match import Match, MatchRecord
from riftcoach.contracts.timeline import MatchTimeline
from riftcoach.core.ports import CachePort

# 2025-02-19T13:20:00Z, inside the default cohort window
GAME_START_MS = 1_739_971_200_000
HOUR_MS = 3_600_000

LINEUP = ("TOP", "JUNGLE", "MIDDLE", "BOTTOM", "UTILITY")
JUNGLERS = (2, 7)


# ============================================================================
# Raw document builders
# ============================================================================


def build_participant(
    participant_id: int,
    *,
    puuid: str | None = None,
    champion_name: str | None = None,
    team_position: str | None = None,
    win: bool | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """Participant dict; players 1-5 are blue (100), 6-10 red (200); blue wins by default."""
    team_id = 100 if participant_id <= 5 else 200
    raw: dict[str, Any] = {
        "puuid": puuid or f"puuid-{participant_id}",
        "participantId": participant_id,
        "teamId": team_id,
        "championName": champion_name or f"Champ{participant_id}",
        "teamPosition": LINEUP[(participant_id - 1) % 5] if team_position is None else team_position,
        "kills": 2,
        "deaths": 3,
        "assists": 5,
        "totalDamageDealtToChampions": 15000,
        "totalDamageTaken": 18000,
        "goldEarned": 10000,
        "totalMinionsKilled": 150,
        "neutralMinionsKilled": 10,
        "visionScore": 20,
        "win": team_id == 100 if win is None else win,
    }
    raw.update(fields)
    return raw


def build_match(
    match_id: str = "NA1_1000",
    *,
    game_creation: int = GAME_START_MS,
    duration: int = 1800,
    queue_id: int = 420,
    overrides: dict[int, dict[str, Any]] | None = None,
) -> Match:
    """Ten-player match; ``overrides`` maps participant id -> build_participant kwargs."""
    overrides = overrides or {}
    raw = {
        "metadata": {"matchId": match_id},
        "info": {
            "gameCreation": game_creation,
            "gameDuration": duration,
            "queueId": queue_id,
            "participants": [
                build_participant(pid, **overrides.get(pid, {})) for pid in range(1, 11)
            ],
        },
    }
    return Match.model_validate(raw)


def build_timeline(
    match_id: str = "NA1_1000",
    *,
    minutes: int = 30,
    events: Iterable[dict[str, Any]] = (),
) -> MatchTimeline:
    """Frames 0..minutes with linear growth; each event lands in the frame of its timestamp.

    Laners gain 7 lane minions/min, junglers 5 camps/min; everyone gains
    400 gold and 450 xp per minute on top of 500 starting gold.
    """
    frames: list[dict[str, Any]] = [
        {
            "timestamp": minute * 60_000,
            "participantFrames": {
                str(pid): {
                    "participantId": pid,
                    "totalGold": 500 + 400 * minute,
                    "currentGold": 500,
                    "xp": 450 * minute,
                    "level": min(18, 1 + minute // 2),
                    "minionsKilled": 0 if pid in JUNGLERS else 7 * minute,
                    "jungleMinionsKilled": 5 * minute if pid in JUNGLERS else 0,
                }
                for pid in range(1, 11)
            },
            "events": [],
        }
        for minute in range(minutes + 1)
    ]
    for event in events:
        index = min(event["timestamp"] // 60_000, minutes)
        frames[index]["events"].append(event)
    raw = {
        "metadata": {"matchId": match_id},
        "info": {"frameInterval": 60_000, "frames": frames},
    }
    return MatchTimeline.model_validate(raw)


def build_record(
    match_id: str = "NA1_1000",
    *,
    with_timeline: bool = True,
    minutes: int | None = None,
    events: Iterable[dict[str, Any]] = (),
    **match_kwargs: Any,
) -> MatchRecord:
    match = build_match(match_id, **match_kwargs)
    timeline = None
    if with_timeline:
        reached = minutes if minutes is not None else match.info.game_duration // 60
        timeline = build_timeline(match_id, minutes=reached, events=events)
    return MatchRecord(match=match, timeline=timeline)


# ============================================================================
# Timeline event builders
# ============================================================================


def kill_event(
    timestamp: int,
    killer: int,
    victim: int,
    *,
    assists: Iterable[int] = (),
    position: tuple[int, int] | None = (7500, 7500),
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "type": "CHAMPION_KILL",
        "timestamp": timestamp,
        "killerId": killer,
        "victimId": victim,
        "assistingParticipantIds": list(assists),
    }
    if position is not None:
        event["position"] = {"x": position[0], "y": position[1]}
    return event


def monster_event(
    timestamp: int, monster: str, killer: int, team_id: int, *, assists: Iterable[int] = ()
) -> dict[str, Any]:
    return {
        "type": "ELITE_MONSTER_KILL",
        "timestamp": timestamp,
        "monsterType": monster,
        "killerId": killer,
        "killerTeamId": team_id,
        "assistingParticipantIds": list(assists),
    }


def tower_event(
    timestamp: int, killer: int, defending_team: int, *, assists: Iterable[int] = ()
) -> dict[str, Any]:
    return {
        "type": "BUILDING_KILL",
        "timestamp": timestamp,
        "buildingType": "TOWER_BUILDING",
        "teamId": defending_team,
        "killerId": killer,
        "assistingParticipantIds": list(assists),
    }


# ============================================================================
# Fakes
# ============================================================================


class FakeCache(CachePort):
    """Dict-backed cache recording the TTL of every write."""

    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}
        self.ttls: dict[str, int | None] = {}

    async def get(self, key: str) -> bytes | None:
        return self.store.get(key)

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> bool:
        return self.store.pop(key, None) is not None


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def make_participant():
    return build_participant


@pytest.fixture
def make_match():
    return build_match


@pytest.fixture
def make_timeline():
    return build_timeline


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def events():
    """Timeline event builders: ``events.kill``, ``events.monster``, ``events.tower``."""

    class Events:
        kill = staticmethod(kill_event)
        monster = staticmethod(monster_event)
        tower = staticmethod(tower_event)

    return Events


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any local .env file."""
    return Settings(_env_file=None)
