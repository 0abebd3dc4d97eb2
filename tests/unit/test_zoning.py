"""Unit tests for map zoning."""

import pytest

from riftcoach.contracts.common import Position
from riftcoach.core.zoning import (
    GeometricZoneClassifier,
    MapZone,
    ZoneClassifier,
    ZoneThresholds,
    zone_label,
)


class TestGeometricZoneClassifier:
    @pytest.fixture
    def classifier(self):
        return GeometricZoneClassifier()

    @pytest.mark.parametrize(
        ("x", "y", "zone"),
        [
            (7500, 7500, MapZone.RIVER),
            (4000, 4000, MapZone.LANE_MID),
            (1500, 12000, MapZone.LANE_TOP),
            (12000, 1500, MapZone.LANE_BOTTOM),
            (3000, 5000, MapZone.JUNGLE),
        ],
    )
    def test_classify(self, classifier, x, y, zone):
        assert classifier.classify(Position(x=x, y=y)) == zone

    def test_is_lane(self, classifier):
        assert classifier.is_lane(Position(x=4000, y=4000))
        assert not classifier.is_lane(Position(x=3000, y=5000))
        assert not classifier.is_lane(Position(x=7500, y=7500))

    def test_thresholds_are_tunable(self):
        narrow_river = GeometricZoneClassifier(ZoneThresholds(river_half_width=0))
        assert narrow_river.classify(Position(x=7400, y=7500)) == MapZone.LANE_MID

    def test_custom_classifier_plugs_in(self):
        class EverythingIsRiver(ZoneClassifier):
            def classify(self, position):
                return MapZone.RIVER

        assert not EverythingIsRiver().is_lane(Position(x=1500, y=12000))


class TestZoneLabel:
    @pytest.mark.parametrize(
        ("x", "y", "label"),
        [
            (1000, 12000, "TOP_LANE"),
            (10000, 12000, "TOP_JUNGLE"),
            (7500, 7500, "MIDDLE_RIVER"),
            (7000, 6000, "MIDDLE_LANE"),
            (3000, 3000, "BOTTOM_JUNGLE"),
            (12000, 1500, "BOTTOM_LANE"),
            (-500, 12000, "TOP_LANE"),
        ],
    )
    def test_regions(self, x, y, label):
        assert zone_label(Position(x=x, y=y)) == label

    def test_missing_position(self):
        assert zone_label(None) == "unknown"
