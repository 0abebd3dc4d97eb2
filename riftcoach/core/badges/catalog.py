"""Badge catalog loading.

The catalog is static configuration: a versioned JSON document bundled with
the package, overridable with ``BADGE_CATALOG_PATH``.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from riftcoach.config import get_settings
from riftcoach.contracts.badges import BadgeCatalog
from riftcoach.core.errors import InvalidParameterError

logger = logging.getLogger(__name__)

BUNDLED_CATALOG_PATH = Path(__file__).with_name("catalog.json")


def load_catalog(path: str | Path | None = None) -> BadgeCatalog:
    """Read and validate a catalog file.

    Raises:
        InvalidParameterError: the file is unreadable or does not validate.
    """
    source = Path(path) if path else BUNDLED_CATALOG_PATH
    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
        catalog = BadgeCatalog.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise InvalidParameterError(f"Invalid badge catalog at {source}: {e}") from e

    logger.info(f"Loaded badge catalog {catalog.version} ({len(catalog.badges)} badges) from {source}")
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> BadgeCatalog:
    """Process-wide catalog; honours ``BADGE_CATALOG_PATH``."""
    return load_catalog(get_settings().badge_catalog_path)
