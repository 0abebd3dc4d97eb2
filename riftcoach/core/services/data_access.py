"""Data-source boundary: timeouts, latency metrics and cache codecs."""

import asyncio
import gzip
import logging
import time
import zlib
from collections.abc import Awaitable
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from riftcoach.core.errors import DataSourceTimeoutError, DataUnavailableError
from riftcoach.core.metrics import mark_data_source_failure, observe_data_source

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


async def bounded_query(query: str, awaitable: Awaitable[T], timeout: float) -> T:
    """Await a data-source call with a timeout.

    Raises:
        DataSourceTimeoutError: no answer within ``timeout`` seconds.
        DataUnavailableError: the adapter reported a failed query.
    """
    started = time.perf_counter()
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError as e:
        mark_data_source_failure(query, "timeout")
        logger.warning(f"Data source query {query} timed out after {timeout}s")
        raise DataSourceTimeoutError(f"{query} timed out after {timeout}s") from e
    except DataUnavailableError:
        mark_data_source_failure(query, "error")
        raise
    finally:
        observe_data_source(query, time.perf_counter() - started)


def encode_model(model: BaseModel, *, compress: bool = False) -> bytes:
    payload = model.model_dump_json().encode("utf-8")
    return gzip.compress(payload) if compress else payload


def decode_model(model_type: type[M], raw: bytes | None, *, compressed: bool = False) -> M | None:
    """Decode a cached payload; anything unreadable behaves like a miss."""
    if raw is None:
        return None
    try:
        payload = gzip.decompress(raw) if compressed else raw
        return model_type.model_validate_json(payload)
    except (OSError, EOFError, zlib.error, ValidationError) as e:
        logger.warning(f"Discarding unreadable cached {model_type.__name__}: {e}")
        return None
