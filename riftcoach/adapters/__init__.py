"""Adapter implementations for external services."""

from .database import DatabaseAdapter
from .gemini_narrator import GeminiBadgeNarrator
from .memory_source import InMemoryMatchSource
from .redis_adapter import RedisAdapter

__all__ = ["DatabaseAdapter", "GeminiBadgeNarrator", "InMemoryMatchSource", "RedisAdapter"]
