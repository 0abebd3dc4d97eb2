"""Unit tests for player vs. lane-opponent comparison."""

import math

import pytest

from riftcoach.contracts.rollup import PerMinuteStats, PlayerRollup, RoleStats
from riftcoach.core.aggregation.comparison import compare_role, compare_roles, diff_tree


class TestDiffTree:
    def test_numeric_leaves_rounded(self):
        assert diff_tree({"a": 1.006, "b": {"c": 2.5}}, {"a": 0.5, "b": {"c": 1}}) == {
            "a": 0.51,
            "b": {"c": 1.5},
        }

    def test_halves_round_up(self):
        assert diff_tree({"a": 1.125}, {"a": 1.0}) == {"a": 0.13}
        assert diff_tree({"a": 1.0}, {"a": 1.125}) == {"a": -0.12}

    def test_leaves_missing_on_either_side_are_dropped(self):
        assert diff_tree({"a": 1, "b": None}, {"b": 2, "c": 3}) is None

    def test_booleans_and_nan_are_not_numbers(self):
        assert diff_tree({"x": True, "y": math.nan}, {"x": False, "y": 1.0}) is None

    def test_role_and_death_zones_are_excluded(self):
        player = {"role": 1, "early_death_zones": {"TOP_LANE": 3}, "wins": 4}
        opponent = {"role": 2, "early_death_zones": {"TOP_LANE": 1}, "wins": 1}
        assert diff_tree(player, opponent) == {"wins": 3.0}


@pytest.fixture
def rollup():
    player = RoleStats(
        role="MIDDLE",
        rows_count=12,
        wins=7,
        win_rate=7 / 12,
        per_min=PerMinuteStats(kills=0.4, deaths=0.1, vision_score=0.5),
        early_death_zones={"MIDDLE_LANE": 2},
    )
    opponent = RoleStats(
        role="MIDDLE",
        rows_count=12,
        wins=5,
        win_rate=5 / 12,
        per_min=PerMinuteStats(kills=0.2, deaths=0.2, vision_score=0.9),
    )
    support = RoleStats(role="UTILITY", rows_count=4)
    return PlayerRollup(
        puuid="me",
        total_matches=16,
        primary_role="MIDDLE",
        role_stats=[player, support],
        opponent_role_stats=[opponent],
    )


class TestCompareRoles:
    def test_diff_is_player_minus_opponent(self, rollup):
        comparison = compare_roles(rollup)["MIDDLE"]
        assert comparison.diff["per_min"] == {"deaths": -0.1, "kills": 0.2, "vision_score": -0.4}
        assert comparison.diff["wins"] == 2.0
        assert "early_death_zones" not in comparison.diff

    def test_weights(self, rollup):
        comparisons = compare_roles(rollup)
        assert comparisons["MIDDLE"].player_weight == pytest.approx(0.75)
        assert comparisons["MIDDLE"].opponent_weight == pytest.approx(1.0)
        assert comparisons["MIDDLE"].games == 12

    def test_role_without_opponents_has_empty_diff(self, rollup):
        comparison = compare_roles(rollup)["UTILITY"]
        assert comparison.opponents is None
        assert comparison.diff == {}

    def test_compare_role_directly(self, rollup):
        comparison = compare_role("MIDDLE", rollup.role_stats[0], None)
        assert comparison.role == "MIDDLE"
        assert comparison.diff == {}
