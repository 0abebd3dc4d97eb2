"""Unit tests for the badge catalog and rule-based classifier."""

import json

import pytest
from pydantic import ValidationError

from riftcoach.contracts.badges import BadgeCatalog, BadgeCondition
from riftcoach.contracts.rollup import PerMinuteStats, PlayerRollup, RoleStats
from riftcoach.core.aggregation.comparison import compare_roles
from riftcoach.core.badges import (
    BUNDLED_CATALOG_PATH,
    classify_badges,
    evaluate_badge,
    evaluate_condition,
    get_catalog,
    load_catalog,
    lookup_metric,
)
from riftcoach.core.badges.classifier import format_diff, merge_status
from riftcoach.core.errors import InvalidParameterError

# ============================================================================
# Test Fixtures
# ============================================================================


def _catalog(*badges: dict) -> BadgeCatalog:
    return BadgeCatalog.model_validate({"version": "test", "badges": list(badges)})


def _kills_badge(name: str, threshold: float, **extra) -> dict:
    return {
        "name": name,
        "polarity": "good",
        "description": f"{name} description",
        "must_meet": [{"metric": "per_min.kills", "comparison": ">=", "value": threshold}],
        **extra,
    }


@pytest.fixture
def rollup() -> PlayerRollup:
    """Mid laner: +0.2 kills/min, -0.1 deaths/min, -0.4 vision/min against lane opponents."""
    player = RoleStats(
        role="MIDDLE",
        rows_count=12,
        wins=9,
        win_rate=0.75,
        per_min=PerMinuteStats(kills=0.4, deaths=0.1, vision_score=0.5),
        spread={"kills": 2.0, "deaths": 1.5, "assists": 2.5},
    )
    opponent = RoleStats(
        role="MIDDLE",
        rows_count=12,
        wins=5,
        win_rate=5 / 12,
        per_min=PerMinuteStats(kills=0.2, deaths=0.2, vision_score=0.9),
    )
    return PlayerRollup(
        puuid="me",
        total_matches=12,
        primary_role="MIDDLE",
        role_stats=[player],
        opponent_role_stats=[opponent],
    )


@pytest.fixture
def comparison(rollup):
    return compare_roles(rollup)["MIDDLE"]


# ============================================================================
# Catalog
# ============================================================================


class TestCatalog:
    def test_bundled_catalog(self):
        catalog = load_catalog()
        assert catalog.version == "2025.3"
        assert len(catalog.badges) == 33
        assert {badge.polarity for badge in catalog.badges} == {"good", "bad", "neutral"}

    def test_get_catalog_is_cached(self):
        assert get_catalog() is get_catalog()

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidParameterError, match="Invalid badge catalog"):
            load_catalog(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidParameterError):
            load_catalog(path)

    def test_badge_without_conditions(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(
            json.dumps({"version": "x", "badges": [{"name": "Empty", "polarity": "good"}]}),
            encoding="utf-8",
        )
        with pytest.raises(InvalidParameterError):
            load_catalog(path)

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValidationError):
            _catalog(_kills_badge("Twice", 0.1), _kills_badge("Twice", 0.2))

    def test_copy_of_bundled_file_loads(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(BUNDLED_CATALOG_PATH.read_text(encoding="utf-8"), encoding="utf-8")
        assert load_catalog(path).version == "2025.3"


# ============================================================================
# Conditions
# ============================================================================


class TestHelpers:
    def test_lookup_metric(self):
        stats = {"per_min": {"kills": 0.2, "flag": True, "bad": float("nan")}}
        assert lookup_metric(stats, "per_min.kills") == 0.2
        assert lookup_metric(stats, "per_min.flag") is None
        assert lookup_metric(stats, "per_min.bad") is None
        assert lookup_metric(stats, "per_min.missing") is None
        assert lookup_metric(None, "per_min.kills") is None

    @pytest.mark.parametrize(
        ("value", "text"),
        [(None, "N/A"), (150.4, "+150"), (-12.34, "-12.3"), (0.123, "+0.12 (+12.3%)")],
    )
    def test_format_diff(self, value, text):
        assert format_diff(value) == text

    def test_merge_status(self):
        assert merge_status("pass", "pass") == "pass"
        assert merge_status("pass", "unknown") == "unknown"
        assert merge_status("unknown", "fail") == "fail"


class TestEvaluateCondition:
    STATS = {"per_min": {"vision_score": 0.2, "deaths": -0.05}}

    def test_role_specific_threshold(self):
        condition = BadgeCondition(
            metric="per_min.vision_score",
            comparison=">=",
            value=0.1,
            threshold_by_role={"UTILITY": 0.35},
        )
        top = evaluate_condition(condition, self.STATS, "TOP")
        support = evaluate_condition(condition, self.STATS, "UTILITY")
        assert top.status == "pass"
        assert top.strength == pytest.approx(2.0)
        assert support.status == "fail"
        assert support.strength is None

    def test_missing_metric_is_unknown(self):
        condition = BadgeCondition(metric="per_min.gold", comparison=">=", value=1)
        assert evaluate_condition(condition, self.STATS, "TOP").status == "unknown"

    def test_between(self):
        condition = BadgeCondition(metric="per_min.vision_score", comparison="between", min=0, max=1)
        result = evaluate_condition(condition, self.STATS, "TOP")
        assert (result.status, result.strength) == ("pass", 1.0)

    def test_abs_lte(self):
        condition = BadgeCondition(metric="per_min.deaths", comparison="abs<=", value=0.1)
        assert evaluate_condition(condition, self.STATS, "TOP").status == "pass"

    def test_zero_threshold_strength(self):
        condition = BadgeCondition(metric="per_min.vision_score", comparison=">", value=0)
        assert evaluate_condition(condition, self.STATS, "TOP").strength == pytest.approx(1.2)

    def test_lte_negative_threshold(self):
        condition = BadgeCondition(metric="per_min.deaths", comparison="<=", value=-0.02)
        result = evaluate_condition(condition, self.STATS, "TOP")
        assert result.status == "pass"
        assert result.strength == pytest.approx(2.5)

    def test_malformed_conditions(self):
        with pytest.raises(ValidationError):
            BadgeCondition(metric="x", comparison="between", min=1)
        with pytest.raises(ValidationError):
            BadgeCondition(metric="x", comparison=">=")


# ============================================================================
# Badges
# ============================================================================


class TestEvaluateBadge:
    def test_excluded_role_fails(self, rollup, comparison):
        badge = _catalog(_kills_badge("Edge", 0.1, exclude_roles=["MIDDLE"])).badges[0]
        result = evaluate_badge(badge, rollup, comparison)
        assert result.status == "fail"
        assert "excluded" in result.summary

    def test_min_games(self, rollup, comparison):
        badge = _catalog(_kills_badge("Edge", 0.1, min_games=20)).badges[0]
        result = evaluate_badge(badge, rollup, comparison)
        assert result.status == "fail"
        assert "Only 12 games" in result.summary

    def test_no_opponents_is_unknown(self, rollup):
        rollup.opponent_role_stats = []
        badge = _catalog(_kills_badge("Edge", 0.1)).badges[0]
        result = evaluate_badge(badge, rollup, compare_roles(rollup)["MIDDLE"])
        assert result.status == "unknown"
        assert result.summary == "Primary role data unavailable."

    def test_absolute_value_reads_player_stats(self, rollup):
        badge = _catalog(
            {
                "name": "Winner",
                "polarity": "good",
                "role_focus": "absolute_value",
                "min_games": 10,
                "must_meet": [{"metric": "win_rate", "comparison": ">=", "value": 0.7}],
            }
        ).badges[0]
        rollup.opponent_role_stats = []
        result = evaluate_badge(badge, rollup, None)
        assert result.status == "pass"
        assert result.strength == pytest.approx(0.75 / 0.7)

    def test_any_of_uses_passing_branch_strength(self, rollup, comparison):
        badge = _catalog(
            {
                "name": "Roamer",
                "polarity": "good",
                "must_meet": [{"metric": "per_min.kills", "comparison": ">=", "value": 0.1}],
                "any_of": [
                    {"must_meet": [{"metric": "per_min.deaths", "comparison": ">=", "value": 0.5}]},
                    {
                        "must_meet": [
                            {"metric": "per_min.vision_score", "comparison": "<=", "value": -0.1}
                        ]
                    },
                ],
            }
        ).badges[0]
        result = evaluate_badge(badge, rollup, comparison)
        assert result.status == "pass"
        assert result.strength == pytest.approx(4.0)
        assert len(result.conditions) == 3

    def test_any_of_all_failing(self, rollup, comparison):
        badge = _catalog(
            {
                "name": "Nope",
                "polarity": "bad",
                "any_of": [
                    {"must_meet": [{"metric": "per_min.deaths", "comparison": ">=", "value": 0.5}]}
                ],
            }
        ).badges[0]
        assert evaluate_badge(badge, rollup, comparison).status == "fail"

    def test_any_of_missing_metrics_is_unknown(self, rollup, comparison):
        badge = _catalog(
            {
                "name": "Maybe",
                "polarity": "good",
                "any_of": [
                    {"must_meet": [{"metric": "per_min.gold", "comparison": ">=", "value": 1}]}
                ],
            }
        ).badges[0]
        assert evaluate_badge(badge, rollup, comparison).status == "unknown"

    def test_prefer_non_utility_note(self):
        support = RoleStats(role="UTILITY", rows_count=6, wins=4, win_rate=4 / 6)
        rollup = PlayerRollup(
            puuid="me", total_matches=6, primary_role="UTILITY", role_stats=[support]
        )
        badge = _catalog(
            {
                "name": "Carry",
                "polarity": "good",
                "role_focus": "absolute_value",
                "prefer_non_utility": True,
                "must_meet": [{"metric": "win_rate", "comparison": ">=", "value": 0.5}],
            }
        ).badges[0]
        result = evaluate_badge(badge, rollup, None)
        assert result.status == "pass"
        assert "non-UTILITY" in result.summary

    def test_bundled_kill_specialist(self, rollup, comparison):
        badge = load_catalog().get("Kill Specialist")
        assert evaluate_badge(badge, rollup, comparison).status == "pass"


class TestClassifyBadges:
    def test_nothing_passes(self, rollup):
        report = classify_badges(rollup, _catalog(_kills_badge("Edge", 1.0)))
        assert report.awarded == []
        assert report.evaluations[0].status == "fail"
        assert report.catalog_version == "test"

    def test_keeps_five_strongest(self, rollup):
        catalog = _catalog(*(_kills_badge(f"K{i}", 0.01 * i) for i in range(1, 8)))
        report = classify_badges(rollup, catalog)
        assert [badge.name for badge in report.awarded] == ["K1", "K2", "K3", "K4", "K5"]
        strengths = [badge.strength for badge in report.awarded]
        assert strengths == sorted(strengths, reverse=True)

    def test_ties_break_by_name(self, rollup):
        catalog = _catalog(_kills_badge("Beta", 0.1), _kills_badge("Alpha", 0.1))
        report = classify_badges(rollup, catalog)
        assert [badge.name for badge in report.awarded] == ["Alpha", "Beta"]

    def test_custom_cap(self, rollup):
        catalog = _catalog(_kills_badge("A", 0.1), _kills_badge("B", 0.05))
        assert [b.name for b in classify_badges(rollup, catalog, max_badges=1).awarded] == ["B"]

    def test_awarded_badge_carries_reason(self, rollup):
        report = classify_badges(rollup, _catalog(_kills_badge("Edge", 0.1)))
        awarded = report.awarded[0]
        assert awarded.description == "Edge description"
        assert "+0.20" in awarded.reason
        assert awarded.polarity == "good"

    def test_no_primary_role(self):
        report = classify_badges(PlayerRollup(puuid="me"), _catalog(_kills_badge("Edge", 0.1)))
        assert report.primary_role is None
        assert report.awarded == []
        assert report.evaluations[0].status == "unknown"

    def test_bundled_catalog(self, rollup):
        catalog = load_catalog()
        report = classify_badges(rollup, catalog)
        assert len(report.evaluations) == len(catalog.badges)
        assert len(report.awarded) <= 5
        assert all(catalog.get(badge.name) is not None for badge in report.awarded)
        assert {e.status for e in report.evaluations} <= {"pass", "fail", "unknown"}
