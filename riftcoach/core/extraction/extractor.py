"""Metric extraction - pure functions from Match + Timeline to Metric Rows.

CRITICAL: This module MUST NOT perform any I/O. Data arrives through the
data-source port and leaves as ``MetricRow`` contracts.

Failure policy: a missing timeline nulls every timeline-derived field while
match-level counters still compute from the Participant record alone.
"""

import logging
from typing import Any

from riftcoach.contracts.common import Position, Role
from riftcoach.contracts.match import Match, MatchInfo, MatchRecord, Participant
from riftcoach.contracts.metrics import (
    SNAPSHOT_MINUTES,
    EarlyGameCounters,
    MetricRow,
    MinuteSnapshot,
    ObjectiveParticipation,
    ObjectiveTally,
)
from riftcoach.contracts.timeline import MatchTimeline
from riftcoach.core.errors import DataUnavailableError
from riftcoach.core.roles import participant_role
from riftcoach.core.zoning import (
    LANE_ZONES,
    GeometricZoneClassifier,
    ZoneClassifier,
    zone_label,
)

logger = logging.getLogger(__name__)

EARLY_WINDOW_MS = 15 * 60_000
LANING_WINDOW_MS = 10 * 60_000

# ELITE_MONSTER_KILL monsterType -> objective category
_MONSTER_CATEGORY: dict[str, str] = {
    "DRAGON": "drakes",
    "RIFTHERALD": "herald",
    "RIFT_HERALD": "herald",
    "BARON_NASHOR": "baron",
    "NASHOR": "baron",
    "VOIDGRUB": "grubs",
    "VOIDGRUBS": "grubs",
    "HORDE": "grubs",
    "ATAKHAN": "atakhan",
}

_DEFAULT_CLASSIFIER = GeometricZoneClassifier()


def per_minute(counter: float, duration_seconds: float) -> float:
    """Rate per game minute with a one-minute floor on duration."""
    return counter / max(1.0, duration_seconds / 60)


def _involved(event: dict[str, Any], participant_id: int) -> bool:
    return event.get("killerId") == participant_id or participant_id in (
        event.get("assistingParticipantIds") or []
    )


def minute_snapshot(
    timeline: MatchTimeline | None, participant_id: int, minute: int
) -> MinuteSnapshot | None:
    """Snapshot at frame[minute]; None when the game (or timeline) never got there."""
    if timeline is None:
        return None
    frame = timeline.get_participant_frame_at_minute(participant_id, minute)
    if frame is None:
        return None
    return MinuteSnapshot(
        gold=max(0, frame.total_gold), cs=max(0, frame.cs), xp=max(0, frame.xp), level=frame.level
    )


def early_game_counters(
    timeline: MatchTimeline, participant_id: int, window_ms: int = EARLY_WINDOW_MS
) -> EarlyGameCounters:
    """Deaths, kills, solo kills and ward kills with event timestamp <= ``window_ms``."""
    deaths = kills = solo_kills = ward_kills = 0
    for event in timeline.get_events_by_type("CHAMPION_KILL", "WARD_KILL"):
        if event.get("timestamp", 0) > window_ms:
            continue
        if event.get("type") == "WARD_KILL":
            if event.get("killerId") == participant_id:
                ward_kills += 1
            continue
        if event.get("victimId") == participant_id:
            deaths += 1
        if event.get("killerId") == participant_id:
            kills += 1
            if not event.get("assistingParticipantIds"):
                solo_kills += 1
    return EarlyGameCounters(
        window_ms=window_ms,
        deaths=deaths,
        kills=kills,
        solo_kills=solo_kills,
        ward_kills=ward_kills,
    )


def count_solo_kills(timeline: MatchTimeline, participant_id: int) -> int:
    return sum(
        1
        for event in timeline.get_events_by_type("CHAMPION_KILL")
        if event.get("killerId") == participant_id and not event.get("assistingParticipantIds")
    )


def early_death_zones(
    timeline: MatchTimeline, participant_id: int, window_ms: int = EARLY_WINDOW_MS
) -> list[str]:
    """Region label of each death at or before ``window_ms``, in event order."""
    zones = []
    for event in timeline.get_events_by_type("CHAMPION_KILL"):
        if event.get("victimId") != participant_id or event.get("timestamp", 0) > window_ms:
            continue
        position = event.get("position")
        if isinstance(position, dict) and "x" in position and "y" in position:
            zones.append(zone_label(Position(x=int(position["x"]), y=int(position["y"]))))
        else:
            zones.append(zone_label(None))
    return zones


def _killer_team(event: dict[str, Any], info: MatchInfo) -> int | None:
    team = event.get("killerTeamId")
    if team is not None:
        return int(team)
    killer = info.get_participant(event.get("killerId") or 0)
    return killer.team_id if killer else None


def objective_participation(
    timeline: MatchTimeline, info: MatchInfo, participant: Participant
) -> ObjectiveParticipation:
    """Team takes vs. participant involvement per epic monster / structure category.

    Monsters count when the killer's team is the participant's team. Towers and
    turret plates carry the *defending* team id, so they count when that team
    is the opponent. Involvement is only tallied on counted takes, so it can
    never exceed them.
    """
    pid = participant.participant_id
    takes: dict[str, int] = {}
    involved: dict[str, int] = {}

    def tally(category: str, event: dict[str, Any]) -> None:
        takes[category] = takes.get(category, 0) + 1
        if _involved(event, pid):
            involved[category] = involved.get(category, 0) + 1

    for event in timeline.iter_events():
        event_type = event.get("type")
        if event_type == "ELITE_MONSTER_KILL":
            category = _MONSTER_CATEGORY.get(str(event.get("monsterType", "")).upper())
            if category and _killer_team(event, info) == participant.team_id:
                tally(category, event)
        elif event_type == "BUILDING_KILL":
            if event.get("buildingType") == "TOWER_BUILDING" and _is_enemy_structure(
                event, participant
            ):
                tally("towers", event)
        elif event_type == "TURRET_PLATE_DESTROYED":
            if _is_enemy_structure(event, participant):
                tally("turret_plates", event)

    return ObjectiveParticipation(
        **{
            category: ObjectiveTally(takes=count, participated=involved.get(category, 0))
            for category, count in takes.items()
        }
    )


def _is_enemy_structure(event: dict[str, Any], participant: Participant) -> bool:
    owner = event.get("teamId")
    return owner is not None and int(owner) != participant.team_id


def team_shares(info: MatchInfo, participant: Participant) -> tuple[float | None, float | None]:
    """(damage share, damage-taken share) within the participant's team; None on zero totals."""
    team = info.get_team_participants(participant.team_id)
    dealt_total = sum(p.total_damage_dealt_to_champions for p in team)
    taken_total = sum(p.total_damage_taken for p in team)
    dealt = participant.total_damage_dealt_to_champions / dealt_total if dealt_total > 0 else None
    taken = participant.total_damage_taken / taken_total if taken_total > 0 else None
    return dealt, taken


def early_gank_death(
    timeline: MatchTimeline,
    info: MatchInfo,
    participant: Participant,
    role: Role,
    *,
    classifier: ZoneClassifier = _DEFAULT_CLASSIFIER,
    window_ms: int = EARLY_WINDOW_MS,
) -> bool | None:
    """Whether the participant died to a gank in a lane zone before ``window_ms``.

    A death is gank-assisted when it happens inside a lane zone and the killer
    is a jungler or plays a different role than the victim. Junglers are not
    scored on this metric (None).
    """
    if role == Role.JUNGLE:
        return None
    for event in timeline.get_events_by_type("CHAMPION_KILL"):
        if event.get("victimId") != participant.participant_id:
            continue
        if event.get("timestamp", 0) > window_ms or (event.get("killerId") or 0) <= 0:
            continue
        position = event.get("position")
        if not isinstance(position, dict) or "x" not in position or "y" not in position:
            continue
        killer = info.get_participant(event["killerId"])
        if killer is None:
            continue
        zone = classifier.classify(Position(x=int(position["x"]), y=int(position["y"])))
        if zone not in LANE_ZONES:
            continue
        killer_role = participant_role(killer)
        if killer_role == Role.JUNGLE or killer_role != role:
            return True
    return False


def _usable_timeline(match: Match, timeline: MatchTimeline | None) -> MatchTimeline | None:
    if timeline is None:
        return None
    if timeline.match_id != match.match_id:
        logger.warning(
            f"Ignoring timeline {timeline.match_id} supplied for match {match.match_id}"
        )
        return None
    if not timeline.info.frames:
        return None
    return timeline


def extract_metric_row(
    match: Match,
    timeline: MatchTimeline | None,
    *,
    participant_id: int | None = None,
    puuid: str | None = None,
    classifier: ZoneClassifier | None = None,
    early_window_ms: int = EARLY_WINDOW_MS,
) -> MetricRow:
    """Derive the Metric Row for one participant, selected by id or PUUID.

    Raises:
        DataUnavailableError: the participant is not part of this match.
    """
    info = match.info
    if participant_id is not None:
        participant = info.get_participant(participant_id)
    elif puuid is not None:
        participant = info.get_participant_by_puuid(puuid)
    else:
        raise ValueError("participant_id or puuid is required")
    if participant is None:
        raise DataUnavailableError(
            f"Participant {participant_id or puuid} not found in match {match.match_id}"
        )

    duration = info.game_duration
    role = participant_role(participant)
    damage_share, damage_taken_share = team_shares(info, participant)

    fields: dict[str, Any] = {
        "match_id": match.match_id,
        "puuid": participant.puuid,
        "participant_id": participant.participant_id,
        "team_id": participant.team_id,
        "champion_name": participant.champion_name,
        "role": role,
        "queue_id": info.queue_id,
        "game_creation": info.game_creation,
        "duration_seconds": duration,
        "win": participant.win,
        "kills": participant.kills,
        "deaths": participant.deaths,
        "assists": participant.assists,
        "cs": participant.cs,
        "gold_earned": participant.gold_earned,
        "damage_dealt": participant.total_damage_dealt_to_champions,
        "damage_taken": participant.total_damage_taken,
        "vision_score": participant.vision_score,
        "double_kills": participant.double_kills,
        "triple_kills": participant.triple_kills,
        "quadra_kills": participant.quadra_kills,
        "penta_kills": participant.penta_kills,
        "kills_per_min": per_minute(participant.kills, duration),
        "deaths_per_min": per_minute(participant.deaths, duration),
        "assists_per_min": per_minute(participant.assists, duration),
        "cs_per_min": per_minute(participant.cs, duration),
        "gold_per_min": per_minute(participant.gold_earned, duration),
        "damage_per_min": per_minute(participant.total_damage_dealt_to_champions, duration),
        "damage_taken_per_min": per_minute(participant.total_damage_taken, duration),
        "vision_per_min": per_minute(participant.vision_score, duration),
        "damage_share": damage_share,
        "damage_taken_share": damage_taken_share,
    }

    usable = _usable_timeline(match, timeline)
    if usable is not None:
        pid = participant.participant_id
        fields["has_timeline"] = True
        for minute in SNAPSHOT_MINUTES:
            fields[f"at_{minute}"] = minute_snapshot(usable, pid, minute)
        fields["laning_phase"] = early_game_counters(usable, pid, LANING_WINDOW_MS)
        fields["early_game"] = early_game_counters(usable, pid, early_window_ms)
        fields["solo_kills"] = count_solo_kills(usable, pid)
        fields["early_death_zones"] = early_death_zones(usable, pid, early_window_ms)
        fields["objectives"] = objective_participation(usable, info, participant)
        fields["early_gank_death"] = early_gank_death(
            usable,
            info,
            participant,
            role,
            classifier=classifier or _DEFAULT_CLASSIFIER,
            window_ms=early_window_ms,
        )

    return MetricRow(**fields)


def extract_match_rows(
    record: MatchRecord, *, classifier: ZoneClassifier | None = None
) -> list[MetricRow]:
    """Metric Rows for every participant of a match."""
    return [
        extract_metric_row(
            record.match,
            record.timeline,
            participant_id=participant.participant_id,
            classifier=classifier,
        )
        for participant in record.match.info.participants
    ]
