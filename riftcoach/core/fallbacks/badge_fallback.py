"""Fallback badge narration used when the LLM narrator is unavailable.

KISS: Deterministic, template-based text built from the rule-based badge
report only. No external calls, no randomness.
"""

from __future__ import annotations

from riftcoach.contracts.badges import BadgeNarration, BadgeReport, NarratedBadge

_ROLE_NAMES = {
    "TOP": "top lane",
    "JUNGLE": "jungle",
    "MIDDLE": "mid lane",
    "BOTTOM": "bot lane",
    "UTILITY": "support",
}


def generate_fallback_narration(report: BadgeReport) -> BadgeNarration:
    """One narrated badge per awarded badge, in award order.

    Returns an empty narration when nothing was awarded.
    """
    role = _ROLE_NAMES.get(report.primary_role or "", "their main role")
    badges = [
        NarratedBadge(
            title=badge.name,
            description=badge.description or f"Stands out in {role}.",
            reason=f"Compared with direct {role} opponents: {badge.reason}."
            if badge.reason
            else f"Rule-based evaluation for {role}.",
            polarity=badge.polarity,
        )
        for badge in report.awarded
    ]
    return BadgeNarration(badges=badges, source="fallback")
