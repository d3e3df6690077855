"""
Logging setup and timing helpers for the chat pipeline.

``setup_logging`` is called once by the entry point. ``log_timing`` and
``timed`` report how long model sub-calls and request setup take, and
whether they failed.
"""

import logging
import os
import sys
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Awaitable, Callable, Iterator, Optional, TypeVar

LOG_LEVEL_ENV = "LOG_LEVEL"
LOG_FORMAT_ENV = "LOG_FORMAT"

FORMATS = {
    "simple": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
}
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Provider SDKs and HTTP clients log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "google_genai", "uvicorn.access")

T = TypeVar("T")


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> int:
    """
    Configure the root logger.

    Args:
        level: Level name; defaults to $LOG_LEVEL, then INFO
        fmt: "simple" or "detailed"; defaults to $LOG_FORMAT, then detailed
            at DEBUG and simple otherwise

    Returns:
        The effective numeric level
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    fmt_name = fmt or os.environ.get(LOG_FORMAT_ENV)
    if fmt_name not in FORMATS:
        fmt_name = "detailed" if log_level <= logging.DEBUG else "simple"

    logging.basicConfig(
        level=log_level,
        format=FORMATS[fmt_name],
        datefmt=DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
    return log_level


@contextmanager
def log_timing(logger: logging.Logger, operation: str, level: int = logging.DEBUG) -> Iterator[None]:
    """Log the duration of the enclosed block, and whether it raised.

    Example:
        with log_timing(logger, "Model resolution"):
            session.prepare()
    """
    start = time.perf_counter()
    outcome = "completed"
    try:
        yield
    except BaseException:
        outcome = "failed"
        raise
    finally:
        logger.log(level, "%s %s in %.1fms", operation, outcome, (time.perf_counter() - start) * 1000)


def timed(
    operation: Optional[str] = None, level: int = logging.DEBUG
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator form of ``log_timing`` for coroutines, logged on the function's module logger."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        logger = logging.getLogger(func.__module__)
        name = operation or func.__name__

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            with log_timing(logger, name, level):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
