"""Deterministic fallbacks for unavailable upstream collaborators."""

from riftcoach.core.fallbacks.badge_fallback import generate_fallback_narration

__all__ = ["generate_fallback_narration"]
