"""Player vs. direct-opponent comparison per role.

Diffs mirror the nested shape of ``RoleStats``: every numeric leaf becomes
``player - opponent`` rounded half-up to 2 decimals; leaves missing on either
side are dropped.
"""

import math
from typing import Any

from riftcoach.contracts.common import Role
from riftcoach.contracts.rollup import PlayerRollup, RoleComparison, RoleStats

_DIFF_SCALE = 100
_EXCLUDED_KEYS = frozenset({"role", "early_death_zones"})


def round_half_up(value: float) -> float:
    """Two-decimal rounding with halves going up, as the scorer does."""
    return math.floor(value * _DIFF_SCALE + 0.5) / _DIFF_SCALE


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool) and value == value


def diff_tree(player: Any, opponent: Any) -> Any:
    """Recursive numeric diff; returns None when no numeric leaf survives."""
    if _is_number(player) and _is_number(opponent):
        return round_half_up(float(player) - float(opponent))
    if isinstance(player, dict):
        other = opponent if isinstance(opponent, dict) else {}
        out: dict[str, Any] = {}
        for key in sorted(player.keys() | other.keys()):
            if key in _EXCLUDED_KEYS:
                continue
            child = diff_tree(player.get(key), other.get(key))
            if child is not None:
                out[key] = child
        return out or None
    return None


def compare_role(
    role: Role | str,
    player: RoleStats,
    opponents: RoleStats | None,
    *,
    player_weight: float = 0.0,
    opponent_weight: float = 0.0,
) -> RoleComparison:
    diff: dict[str, Any] = {}
    if opponents is not None:
        diff = diff_tree(player.model_dump(), opponents.model_dump()) or {}
    return RoleComparison(
        role=Role(role),
        player_weight=player_weight,
        opponent_weight=opponent_weight,
        games=player.rows_count,
        player=player,
        opponents=opponents,
        diff=diff,
    )


def _weights(stats: list[RoleStats]) -> dict[str, float]:
    total = sum(s.rows_count for s in stats)
    if total == 0:
        return {}
    return {s.role: s.rows_count / total for s in stats}


def compare_roles(rollup: PlayerRollup) -> dict[str, RoleComparison]:
    """Comparison for every role the player has rows in, keyed by role name."""
    player_weights = _weights(rollup.role_stats)
    opponent_weights = _weights(rollup.opponent_role_stats)
    opponents_by_role = {s.role: s for s in rollup.opponent_role_stats}
    return {
        stats.role: compare_role(
            stats.role,
            stats,
            opponents_by_role.get(stats.role),
            player_weight=player_weights.get(stats.role, 0.0),
            opponent_weight=opponent_weights.get(stats.role, 0.0),
        )
        for stats in rollup.role_stats
    }
