"""
Match information data contracts for Riot API Match-V5.

Only the fields consumed by metric extraction are declared; everything else
in the raw document is ignored on validation.
"""

from datetime import UTC, datetime

from pydantic import Field

from .common import RiotContract
from .timeline import MatchTimeline


class Participant(RiotContract):
    """Participant (player) record embedded in a match."""

    # Identity
    puuid: str = Field(..., description="Player's PUUID")
    participant_id: int = Field(..., ge=1, le=10)
    team_id: int = Field(..., description="100 (blue) or 200 (red)")

    # Champion and role (raw, pre-normalization)
    champion_id: int | None = Field(None, description="Champion ID")
    champion_name: str = Field(..., description="Champion name")
    team_position: str | None = Field(None, description="Assigned position")
    individual_position: str | None = Field(None, description="Detected position")
    role: str | None = Field(None, description="Legacy role (DUO_CARRY, SOLO, ...)")
    lane: str | None = Field(None, description="Legacy lane (TOP, BOTTOM_LANE, ...)")

    # Core stats
    kills: int = Field(0, ge=0)
    deaths: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    double_kills: int = Field(0, ge=0)
    triple_kills: int = Field(0, ge=0)
    quadra_kills: int = Field(0, ge=0)
    penta_kills: int = Field(0, ge=0)

    # Damage
    total_damage_dealt_to_champions: int = Field(0, ge=0)
    physical_damage_dealt_to_champions: int = Field(0, ge=0)
    magic_damage_dealt_to_champions: int = Field(0, ge=0)
    true_damage_dealt_to_champions: int = Field(0, ge=0)
    total_damage_taken: int = Field(0, ge=0)
    physical_damage_taken: int = Field(0, ge=0)
    magic_damage_taken: int = Field(0, ge=0)
    true_damage_taken: int = Field(0, ge=0)

    # Economy and farming
    gold_earned: int = Field(0, ge=0)
    total_minions_killed: int = Field(0, ge=0)
    neutral_minions_killed: int = Field(0, ge=0)

    # Vision
    vision_score: int = Field(0, ge=0)
    wards_placed: int | None = Field(None, ge=0)
    wards_killed: int | None = Field(None, ge=0)

    win: bool = Field(False)

    @property
    def cs(self) -> int:
        """Total creep score (lane minions + neutral monsters)."""
        return self.total_minions_killed + self.neutral_minions_killed


class MatchInfo(RiotContract):
    """Match-level information."""

    game_creation: int = Field(..., description="Game creation timestamp (epoch milliseconds)")
    game_duration: int = Field(..., ge=0, description="Game duration in seconds")
    game_version: str | None = Field(None, description="Game version/patch")
    queue_id: int = Field(..., description="Queue ID")
    participants: list[Participant] = Field(..., min_length=1, max_length=10)

    @property
    def game_creation_date(self) -> datetime:
        """Convert game creation to an aware UTC datetime."""
        return datetime.fromtimestamp(self.game_creation / 1000, tz=UTC)

    def get_participant_by_puuid(self, puuid: str) -> Participant | None:
        """Get participant by PUUID."""
        for participant in self.participants:
            if participant.puuid == puuid:
                return participant
        return None

    def get_participant(self, participant_id: int) -> Participant | None:
        """Get participant by in-game participant id (1..10)."""
        for participant in self.participants:
            if participant.participant_id == participant_id:
                return participant
        return None

    def get_team_participants(self, team_id: int) -> list[Participant]:
        """Get all participants for a team."""
        return [p for p in self.participants if p.team_id == team_id]


class MatchMetadata(RiotContract):
    """Match metadata."""

    match_id: str = Field(..., description="Match ID")


class Match(RiotContract):
    """Complete match document. Immutable once ingested."""

    metadata: MatchMetadata
    info: MatchInfo

    @property
    def match_id(self) -> str:
        return self.metadata.match_id


class MatchRecord(RiotContract):
    """A match as returned by a data source, with its timeline when available."""

    match: Match
    timeline: MatchTimeline | None = None

    @property
    def match_id(self) -> str:
        return self.match.match_id

