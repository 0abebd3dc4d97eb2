"""Role normalization: raw Riot role/lane labels -> canonical Role.

Pure functions. ``normalize_role`` is idempotent: a canonical role name maps
to itself, and UNKNOWN maps to UNKNOWN.
"""

from riftcoach.contracts.common import PLAYABLE_ROLES, Role
from riftcoach.contracts.match import Participant
from riftcoach.core.errors import InvalidParameterError

_ROLE_ALIASES: dict[Role, tuple[str, ...]] = {
    Role.TOP: ("TOP",),
    Role.JUNGLE: ("JUNGLE",),
    Role.MIDDLE: ("MIDDLE", "MID"),
    Role.BOTTOM: ("BOTTOM", "BOT", "ADC"),
    Role.UTILITY: ("UTILITY", "SUPPORT", "SUP"),
}

_LABEL_TO_ROLE: dict[str, Role] = {
    alias: role for role, aliases in _ROLE_ALIASES.items() for alias in aliases
}

_CARRY_ROLES = frozenset({"DUO_CARRY", "CARRY"})
_SUPPORT_ROLES = frozenset({"DUO_SUPPORT", "SUPPORT"})


def _clean(label: str | None) -> str:
    return (label or "").strip().upper()


def _lane_name(lane: str | None) -> str:
    value = _clean(lane)
    return value[: -len("_LANE")] if value.endswith("_LANE") else value


def normalize_role(
    label: str | None,
    *,
    lane: str | None = None,
    legacy_role: str | None = None,
) -> Role:
    """Map a raw role label (case-insensitive) to a canonical role.

    When ``label`` is blank the legacy ``lane`` + ``legacy_role`` pair is used:
    bottom lane splits into BOTTOM (carry) or UTILITY (support), and a jungle
    lane or role wins over everything else. Anything unmatched is UNKNOWN.
    """
    value = _clean(label)
    if value:
        return _LABEL_TO_ROLE.get(value, Role.UNKNOWN)

    lane_value = _lane_name(lane)
    role_value = _clean(legacy_role)

    if role_value == "JUNGLE" or lane_value == "JUNGLE":
        return Role.JUNGLE
    if lane_value in ("BOTTOM", "BOT"):
        if role_value in _CARRY_ROLES:
            return Role.BOTTOM
        if role_value in _SUPPORT_ROLES:
            return Role.UTILITY
        return Role.UNKNOWN
    if lane_value == "TOP":
        return Role.TOP
    if lane_value in ("MIDDLE", "MID"):
        return Role.MIDDLE
    return Role.UNKNOWN


def participant_role(participant: Participant) -> Role:
    """Canonical role for a match participant.

    teamPosition is authoritative; individualPosition backs it up, and the
    legacy lane/role pair is the last resort.
    """
    for label in (participant.team_position, participant.individual_position):
        role = normalize_role(label)
        if role != Role.UNKNOWN:
            return role
    return normalize_role(None, lane=participant.lane, legacy_role=participant.role)


def role_aliases(role: Role | str) -> tuple[str, ...]:
    """Raw position labels that normalize to ``role``, for pushing filters to storage."""
    return _ROLE_ALIASES.get(Role(role), ())


def parse_role(label: str | Role) -> Role:
    """Normalize a caller-supplied role, rejecting anything that is not playable.

    Raises:
        InvalidParameterError: the label does not name one of the five roles.
    """
    role = normalize_role(label.value if isinstance(label, Role) else label)
    if role not in PLAYABLE_ROLES:
        raise InvalidParameterError(f"Unrecognized role: {label!r}")
    return role
