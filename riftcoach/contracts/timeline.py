"""
Match Timeline data contracts for Riot API Match-V5.

Frames are minute-indexed (frame[i] is roughly game-minute i) but event
timestamps are authoritative for any time-windowed filter.
"""

from typing import Any

from pydantic import Field, field_validator

from .common import Position, RiotContract


class ParticipantFrame(RiotContract):
    """Participant snapshot at a specific frame."""

    participant_id: int = Field(..., ge=1, le=10)
    current_gold: int = Field(0)
    total_gold: int = Field(0)
    xp: int = Field(0)
    level: int = Field(1, ge=1, le=30)
    minions_killed: int = Field(0)
    jungle_minions_killed: int = Field(0)
    position: Position | None = Field(None)

    @property
    def cs(self) -> int:
        return self.minions_killed + self.jungle_minions_killed


class Frame(RiotContract):
    """A single frame in the match timeline."""

    timestamp: int = Field(..., description="Frame timestamp in milliseconds")
    participant_frames: dict[str, ParticipantFrame] = Field(
        default_factory=dict, description="Participant states indexed by participant ID string"
    )
    events: list[dict[str, Any]] = Field(
        default_factory=list, description="Events that occurred during this frame"
    )

    @field_validator("participant_frames", mode="before")
    @classmethod
    def convert_participant_frames(cls, v: Any) -> Any:
        """Key frames by participant id string and backfill a missing participantId."""
        if isinstance(v, dict):
            result = {}
            for key, value in v.items():
                if isinstance(value, dict) and "participantId" not in value and (
                    "participant_id" not in value
                ):
                    value = {**value, "participantId": int(key)}
                result[str(key)] = value
            return result
        return v


class TimelineParticipant(RiotContract):
    """Participant mapping in timeline."""

    participant_id: int = Field(..., ge=1, le=10)
    puuid: str = Field(..., description="Player's PUUID")


class TimelineInfo(RiotContract):
    """Timeline information containing frames."""

    frame_interval: int = Field(60000, description="Milliseconds between frames (usually 60000)")
    frames: list[Frame] = Field(default_factory=list)
    participants: list[TimelineParticipant] = Field(default_factory=list)


class TimelineMetadata(RiotContract):
    """Timeline metadata."""

    match_id: str = Field(..., description="Match ID")


class MatchTimeline(RiotContract):
    """Complete match timeline from Riot API Match-V5."""

    metadata: TimelineMetadata
    info: TimelineInfo

    @property
    def match_id(self) -> str:
        return self.metadata.match_id

    def iter_events(self) -> list[dict[str, Any]]:
        """All events in frame order."""
        return [event for frame in self.info.frames for event in frame.events]

    def get_events_by_type(self, *event_types: str) -> list[dict[str, Any]]:
        """Get all events whose type is one of ``event_types``."""
        wanted = set(event_types)
        return [event for event in self.iter_events() if event.get("type") in wanted]

    def get_participant_frame_at_minute(
        self, participant_id: int, minute: int
    ) -> ParticipantFrame | None:
        """Snapshot at frame[minute], or None if the game never reached it."""
        if minute < 0 or len(self.info.frames) < minute + 1:
            return None
        return self.info.frames[minute].participant_frames.get(str(participant_id))
