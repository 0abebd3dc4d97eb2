"""Cache key builders.

Keys carry the full parameter tuple of the cached computation, so two
logically different queries never share a key.
"""

from datetime import datetime

COHORT_KEY_VERSION = "v3"


def _iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def cohort_percentiles_key(
    champion_name: str,
    role: str,
    start: datetime,
    end: datetime,
    wins_only: bool,
    sample_size: int,
) -> str:
    return (
        f"cache:cohort:percentiles:{COHORT_KEY_VERSION}:{champion_name}:{role}:"
        f"{_iso(start)}:{_iso(end)}:{'wins' if wins_only else 'all'}:limit{sample_size}"
    )


def player_stats_key(puuid: str, scope: str) -> str:
    return f"cache/player-stats/puuid={puuid}/scope={scope}/data.json.gz"


def badge_result_key(puuid: str, scope: str) -> str:
    return f"cache/ai-results/puuid={puuid}/scope={scope}/data.json.gz"
