"""Unit tests for metric extraction.

CRITICAL: Tests validate PURE domain logic only. Documents are built in
memory; no data source is involved.
"""

import pytest

from riftcoach.contracts.common import Role
from riftcoach.core.errors import DataUnavailableError
from riftcoach.core.extraction import (
    LANING_WINDOW_MS,
    early_game_counters,
    extract_match_rows,
    extract_metric_row,
    per_minute,
)

MINUTE = 60_000


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def game_events(events):
    """A scripted game seen from participant 1 (blue TOP)."""
    return [
        {"type": "WARD_KILL", "timestamp": 3 * MINUTE, "killerId": 1},
        events.kill(5 * MINUTE, killer=1, victim=6),
        # Enemy jungler catches top laner in lane
        events.kill(8 * MINUTE, killer=7, victim=1, position=(1500, 12000)),
        events.kill(12 * MINUTE, killer=6, victim=1, assists=[7], position=None),
        events.kill(15 * MINUTE, killer=1, victim=8, assists=[2]),
        events.kill(16 * MINUTE, killer=1, victim=9),
        events.monster(10 * MINUTE, "DRAGON", killer=2, team_id=100, assists=[1]),
        events.monster(20 * MINUTE, "DRAGON", killer=2, team_id=100),
        events.monster(21 * MINUTE, "DRAGON", killer=7, team_id=200),
        events.monster(25 * MINUTE, "BARON_NASHOR", killer=7, team_id=200),
        events.tower(int(16.5 * MINUTE), killer=1, defending_team=200),
        events.tower(18 * MINUTE, killer=6, defending_team=100),
        {"type": "TURRET_PLATE_DESTROYED", "timestamp": 7 * MINUTE, "teamId": 200, "killerId": 3},
    ]


@pytest.fixture
def record(make_record, game_events):
    return make_record(
        events=game_events,
        overrides={1: {"kills": 6, "deaths": 3, "assists": 9, "totalDamageDealtToChampions": 30000}},
    )


@pytest.fixture
def top_row(record):
    return extract_metric_row(record.match, record.timeline, participant_id=1)


# ============================================================================
# Match-level counters
# ============================================================================


class TestPerMinute:
    def test_regular_game(self):
        assert per_minute(30, 1800) == pytest.approx(1.0)

    def test_ten_second_game_uses_one_minute_floor(self):
        assert per_minute(6, 10) == pytest.approx(6.0)

    def test_seventy_second_game_uses_real_duration(self):
        assert per_minute(7, 70) == pytest.approx(6.0)

    def test_zero_duration(self):
        assert per_minute(3, 0) == pytest.approx(3.0)


class TestMatchCounters:
    def test_identity_and_role(self, top_row):
        assert top_row.match_id == "NA1_1000"
        assert top_row.puuid == "puuid-1"
        assert top_row.role == Role.TOP
        assert top_row.queue_id == 420
        assert top_row.win is True

    def test_rates(self, top_row):
        assert top_row.kills_per_min == pytest.approx(0.2)
        assert top_row.assists_per_min == pytest.approx(0.3)
        assert top_row.cs == 160
        assert top_row.cs_per_min == pytest.approx(160 / 30)
        assert top_row.damage_per_min == pytest.approx(1000.0)

    def test_team_shares(self, top_row):
        assert top_row.damage_share == pytest.approx(1 / 3)
        assert top_row.damage_taken_share == pytest.approx(0.2)

    def test_zero_team_damage_share_is_null(self, make_record):
        no_damage = {pid: {"totalDamageDealtToChampions": 0} for pid in range(1, 6)}
        record = make_record(overrides=no_damage)
        row = extract_metric_row(record.match, record.timeline, participant_id=1)
        assert row.damage_share is None

    def test_short_game_rates_use_floor(self, make_record):
        record = make_record(duration=10, overrides={1: {"kills": 6}})
        row = extract_metric_row(record.match, record.timeline, participant_id=1)
        assert row.kills_per_min == pytest.approx(6.0)
        assert row.at_10 is None

    def test_select_by_puuid(self, record):
        row = extract_metric_row(record.match, record.timeline, puuid="puuid-3")
        assert row.participant_id == 3
        assert row.role == Role.MIDDLE

    def test_unknown_participant(self, record):
        with pytest.raises(DataUnavailableError, match="not found"):
            extract_metric_row(record.match, record.timeline, puuid="nobody")

    def test_requires_a_selector(self, record):
        with pytest.raises(ValueError):
            extract_metric_row(record.match, record.timeline)

    def test_all_rows(self, record):
        rows = extract_match_rows(record)
        assert [row.participant_id for row in rows] == list(range(1, 11))
        assert [row.role for row in rows[:5]] == ["TOP", "JUNGLE", "MIDDLE", "BOTTOM", "UTILITY"]


# ============================================================================
# Timeline-derived metrics
# ============================================================================


class TestSnapshots:
    def test_minute_ten(self, top_row):
        assert top_row.has_timeline is True
        assert top_row.at_10.gold == 4500
        assert top_row.at_10.cs == 70
        assert top_row.at_10.xp == 4500
        assert top_row.at_10.level == 6

    def test_jungle_camps_count_as_cs(self, record):
        row = extract_metric_row(record.match, record.timeline, participant_id=2)
        assert row.at_10.cs == 50

    def test_game_that_ended_before_minute_thirty(self, make_record):
        record = make_record(duration=1500)
        row = extract_metric_row(record.match, record.timeline, participant_id=1)
        assert row.at_20 is not None
        assert row.at_30 is None
        assert row.metric_values()["gold_at_30"] is None


class TestEarlyCounters:
    def test_laning_phase_window(self, top_row):
        laning = top_row.laning_phase
        assert laning.window_ms == LANING_WINDOW_MS
        assert (laning.kills, laning.solo_kills, laning.deaths, laning.ward_kills) == (1, 1, 1, 1)

    def test_early_window_is_inclusive(self, top_row):
        early = top_row.early_game
        assert (early.kills, early.solo_kills, early.deaths, early.ward_kills) == (2, 1, 2, 1)

    def test_custom_window(self, record):
        counters = early_game_counters(record.timeline, 1, window_ms=5 * MINUTE)
        assert counters.kills == 1
        assert counters.deaths == 0

    def test_whole_game_solo_kills(self, top_row):
        assert top_row.solo_kills == 2


class TestEarlyGankDeath:
    def test_jungler_kill_in_lane(self, top_row):
        assert top_row.early_gank_death is True

    def test_lane_opponent_kill_in_river_is_not_a_gank(self, record):
        row = extract_metric_row(record.match, record.timeline, participant_id=6)
        assert row.early_gank_death is False

    def test_junglers_are_not_scored(self, record):
        row = extract_metric_row(record.match, record.timeline, participant_id=2)
        assert row.early_gank_death is None

    def test_follows_the_early_window(self, record):
        row = extract_metric_row(
            record.match, record.timeline, participant_id=1, early_window_ms=5 * MINUTE
        )
        assert row.early_gank_death is False
        assert row.early_death_zones == []
        assert row.early_game.deaths == 0

    def test_early_death_zones(self, top_row):
        assert top_row.early_death_zones == ["TOP_LANE", "unknown"]


class TestObjectiveParticipation:
    def test_own_team_monsters_only(self, top_row):
        objectives = top_row.objectives
        assert objectives.drakes.takes == 2
        assert objectives.drakes.participated == 1
        assert objectives.drakes.rate == pytest.approx(0.5)

    def test_no_team_takes_is_null(self, top_row):
        assert top_row.objectives.baron.takes == 0
        assert top_row.objectives.baron.rate is None

    def test_structures_count_against_the_defending_team(self, top_row):
        assert top_row.objectives.towers.takes == 1
        assert top_row.objectives.towers.rate == pytest.approx(1.0)
        assert top_row.objectives.turret_plates.takes == 1
        assert top_row.objectives.turret_plates.rate == pytest.approx(0.0)

    def test_red_side_view(self, record):
        row = extract_metric_row(record.match, record.timeline, participant_id=6)
        assert row.objectives.drakes.takes == 1
        assert row.objectives.baron.takes == 1
        assert row.objectives.towers.participated == 1

    def test_rates_stay_in_bounds(self, record):
        for row in extract_match_rows(record):
            for category in ("drakes", "baron", "towers", "turret_plates"):
                rate = row.objectives.tally(category).rate
                assert rate is None or 0.0 <= rate <= 1.0

    def test_epic_monster_rate(self, top_row):
        assert top_row.objectives.epic_monster_rate == pytest.approx(0.5)


# ============================================================================
# Missing or mismatched timelines
# ============================================================================


class TestMissingTimeline:
    def test_match_counters_still_compute(self, make_record):
        record = make_record(with_timeline=False, overrides={1: {"kills": 6}})
        row = extract_metric_row(record.match, record.timeline, participant_id=1)
        assert row.kills_per_min == pytest.approx(0.2)
        assert row.has_timeline is False

    def test_timeline_fields_are_null_not_zero(self, make_record):
        record = make_record(with_timeline=False)
        row = extract_metric_row(record.match, record.timeline, participant_id=1)
        assert row.at_10 is None
        assert row.objectives is None
        assert row.early_gank_death is None
        assert row.early_death_zones is None
        assert row.metric_values()["cs_at_10"] is None

    def test_timeline_of_another_match_is_ignored(self, make_match, make_timeline):
        match = make_match("NA1_1")
        row = extract_metric_row(match, make_timeline("NA1_2"), participant_id=1)
        assert row.has_timeline is False
        assert row.at_10 is None

    def test_empty_timeline_is_ignored(self, make_match, make_timeline):
        timeline = make_timeline("NA1_1000")
        timeline.info.frames = []
        row = extract_metric_row(make_match(), timeline, participant_id=1)
        assert row.has_timeline is False
