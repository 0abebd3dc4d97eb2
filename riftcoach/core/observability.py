"""Observability for the scoring core.

Configures structlog and provides the ``trace_scoring`` decorator, which
logs entry, exit, duration and failures of sync and async functions with a
correlation ``execution_id`` bound to the structlog context.
"""

import asyncio
import functools
import json
import logging
import re
import sys
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

import structlog
from pydantic import BaseModel
from structlog.contextvars import bind_contextvars, unbind_contextvars

from riftcoach.config import get_settings

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.dict_tracebacks,
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),  # type: ignore[list-item]
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger("riftcoach")

F = TypeVar("F", bound=Callable[..., Any])

_SENSITIVE_KEY_RE = re.compile(r"(token|key|secret|password|authorization)", re.IGNORECASE)


def configure_logging(level: str | None = None) -> None:
    """Attach a stderr handler to the root logger for host applications.

    Importing the library never touches the root logger; entry points call
    this once. ``level`` defaults to ``Settings.log_level``.
    """
    level_name = (level or get_settings().log_level).upper()
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )


def _serialize_value(value: Any, max_length: int = 500) -> Any:
    """Safely serialize a value for logging, truncating long payloads."""
    try:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        json_str = json.dumps(value, default=str)
        if len(json_str) > max_length:
            return json_str[:max_length] + "..."
        return json.loads(json_str)
    except (TypeError, ValueError):
        str_repr = str(value)
        if len(str_repr) > max_length:
            return str_repr[:max_length] + "..."
        return str_repr


def _serialize_kwargs(kwargs: dict[str, Any], max_length: int) -> dict[str, Any]:
    return {
        k: "***" if _SENSITIVE_KEY_RE.search(k) else _serialize_value(v, max_length)
        for k, v in kwargs.items()
    }


def trace_scoring(
    *,
    capture_args: bool = False,
    capture_result: bool = False,
    max_arg_length: int = 500,
    log_level: str = "DEBUG",
    layer: str = "core",
) -> Callable[[F], F]:
    """Decorator tracing a sync or async function.

    Args:
        capture_args: Log serialized positional/keyword arguments.
        capture_result: Log the serialized return value.
        max_arg_length: Truncation limit for serialized values.
        log_level: Level for entry/success records; failures always log at ERROR.
        layer: Tag identifying the architecture layer (core, service, adapter).

    Example:
        >>> @trace_scoring(capture_result=True)
        ... def score(rollup, cohort) -> int:
        ...     return 50
    """
    level = log_level.lower()

    def decorator(func: F) -> F:
        name = f"{func.__module__}.{func.__qualname__}"

        def _start(args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
            bind_contextvars(execution_id=f"{name}_{time.time_ns()}")
            logger.log(
                getattr(logging, level.upper(), logging.DEBUG),
                "trace.enter",
                function=name,
                layer=layer,
                args=[_serialize_value(a, max_arg_length) for a in args] if capture_args else None,
                kwargs=_serialize_kwargs(kwargs, max_arg_length) if capture_args else None,
            )

        def _success(started: float, result: Any) -> None:
            logger.log(
                getattr(logging, level.upper(), logging.DEBUG),
                "trace.exit",
                function=name,
                layer=layer,
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                result=_serialize_value(result, max_arg_length) if capture_result else None,
            )

        def _failure(started: float, exc: Exception) -> None:
            logger.error(
                "trace.error",
                function=name,
                layer=layer,
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                error_type=type(exc).__name__,
                error_message=str(exc),
            )

        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                _start(args, kwargs)
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _failure(started, e)
                    raise
                else:
                    _success(started, result)
                    return result
                finally:
                    unbind_contextvars("execution_id")

            return cast(F, async_wrapper)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            _start(args, kwargs)
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _failure(started, e)
                raise
            else:
                _success(started, result)
                return result
            finally:
                unbind_contextvars("execution_id")

        return cast(F, sync_wrapper)

    return decorator


# Convenience decorators with common configurations
def trace_service(func: F) -> F:
    """Service-layer entry points."""
    return trace_scoring(capture_args=True, log_level="INFO", layer="service")(func)


def trace_adapter(func: F) -> F:
    """Adapter-layer calls crossing an I/O boundary."""
    return trace_scoring(capture_args=True, log_level="DEBUG", layer="adapter")(func)
