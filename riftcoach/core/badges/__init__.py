"""Badge catalog and rule-based classifier."""

from riftcoach.core.badges.catalog import BUNDLED_CATALOG_PATH, get_catalog, load_catalog
from riftcoach.core.badges.classifier import (
    DEFAULT_MAX_BADGES,
    classify_badges,
    evaluate_badge,
    evaluate_condition,
    lookup_metric,
)

__all__ = [
    "BUNDLED_CATALOG_PATH",
    "DEFAULT_MAX_BADGES",
    "classify_badges",
    "evaluate_badge",
    "evaluate_condition",
    "get_catalog",
    "load_catalog",
    "lookup_metric",
]
