"""Map zoning for event positions on Summoner's Rift.

The lane/river boundaries are heuristic constants that have never been
validated against ground truth; they live in ``ZoneThresholds`` so they can
be tuned, and classifiers sit behind ``ZoneClassifier`` so the extractor
never depends on a specific geometry.
"""

from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from riftcoach.contracts.common import Position

# Playable map extent in game units (both axes).
MAP_MAX_COORDINATE = 15000


class MapZone(str, Enum):
    RIVER = "RIVER"
    LANE_TOP = "LANE_TOP"
    LANE_MID = "LANE_MID"
    LANE_BOTTOM = "LANE_BOTTOM"
    JUNGLE = "JUNGLE"


LANE_ZONES = frozenset({MapZone.LANE_TOP, MapZone.LANE_MID, MapZone.LANE_BOTTOM})


class ZoneThresholds(BaseModel):
    """Tunable geometry for ``GeometricZoneClassifier`` (game units)."""

    model_config = ConfigDict(frozen=True)

    # The river runs along x + y == river_axis_sum.
    river_axis_sum: int = Field(MAP_MAX_COORDINATE, gt=0)
    river_half_width: int = Field(1200, ge=0)
    # Mid lane runs along x == y.
    mid_lane_half_width: int = Field(1200, ge=0)
    # Side lanes sit beyond this offset from the mid diagonal.
    side_lane_offset: int = Field(2500, ge=0)


class ZoneClassifier(ABC):
    """Maps a map position to a coarse zone."""

    @abstractmethod
    def classify(self, position: Position) -> MapZone:
        pass

    def is_lane(self, position: Position) -> bool:
        return self.classify(position) in LANE_ZONES


class GeometricZoneClassifier(ZoneClassifier):
    """Diagonal-distance zoning. Checks run in order: river, mid, top, bottom."""

    def __init__(self, thresholds: ZoneThresholds | None = None) -> None:
        self.thresholds = thresholds or ZoneThresholds()

    def classify(self, position: Position) -> MapZone:
        t = self.thresholds
        x, y = position.x, position.y
        if abs(x + y - t.river_axis_sum) <= t.river_half_width:
            return MapZone.RIVER
        if abs(x - y) <= t.mid_lane_half_width:
            return MapZone.LANE_MID
        if y - x > t.side_lane_offset:
            return MapZone.LANE_TOP
        if x - y > t.side_lane_offset:
            return MapZone.LANE_BOTTOM
        return MapZone.JUNGLE


def _normalized(value: int) -> float:
    return max(0, min(MAP_MAX_COORDINATE, value)) / MAP_MAX_COORDINATE


def zone_label(position: Position | None) -> str:
    """Human-readable region name (e.g. ``TOP_RIVER``, ``BOTTOM_LANE``) for narration."""
    if position is None:
        return "unknown"
    x = _normalized(position.x)
    y = _normalized(position.y)
    near_river = abs(x - (1 - y)) < 0.06
    lane = "TOP" if y > 0.66 else "BOTTOM" if y < 0.33 else "MIDDLE"
    if near_river:
        return f"{lane}_RIVER"
    near_lane = (lane == "TOP" and x < 0.6) or (lane == "BOTTOM" and x > 0.4) or lane == "MIDDLE"
    return f"{lane}_LANE" if near_lane else f"{lane}_JUNGLE"
