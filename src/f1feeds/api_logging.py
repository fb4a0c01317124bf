"""Logging setup and upstream call logging for the f1feeds jobs."""

from __future__ import annotations

import functools
import logging
import os
import sys
import time
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

api_logger = logging.getLogger("f1feeds.api")


def configure_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """Attach a stderr handler (and optionally a file handler) to the package logger.

    Safe to call more than once; handlers installed by an earlier call are
    replaced rather than duplicated.
    """
    root = logging.getLogger("f1feeds")
    root.setLevel(level)
    for handler in root.handlers[:]:
        if getattr(handler, "_f1feeds", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._f1feeds = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root


def _describe_call(args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    # Skip 'self'
    arg_parts = [repr(a) for a in args[1:]]
    arg_parts += [f"{k}={v!r}" for k, v in kwargs.items()]
    return ", ".join(arg_parts)


def log_api_call(fn: F) -> F:
    """Decorator that logs client endpoint calls with result size and timing."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        arg_str = _describe_call(args, kwargs)
        source = getattr(args[0], "base_url", "") if args else ""
        api_logger.debug("CALL: %s(%s) @ %s", fn.__qualname__, arg_str, source)

        start = time.monotonic()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            elapsed = time.monotonic() - start
            api_logger.info(
                "FAIL: %s(%s) @ %s -> %s: %s (%.3fs)",
                fn.__qualname__, arg_str, source, type(exc).__name__, exc, elapsed,
            )
            raise
        elapsed = time.monotonic() - start
        count = len(result) if isinstance(result, list) else 1
        api_logger.info(
            "OK: %s(%s) @ %s -> %d items (%.3fs)",
            fn.__qualname__, arg_str, source, count, elapsed,
        )
        return result

    return wrapper  # type: ignore[return-value]
