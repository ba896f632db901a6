"""Diagnostics logging for SimpleLog Lite.

This is the package's own side-channel (maintenance failures, lifecycle
events), not the log files it manages. Uses loguru with a single colourised
stderr handler.

Environment variables for log level control:
- SIMPLELOG_LITE_LOG_LEVEL: Global log level (default: INFO)
- SIMPLELOG_LITE_LOG_SINK: Level for the file_logger component only
"""

import os
import sys
from contextlib import contextmanager
from time import perf_counter

from loguru import logger

_global_log_level = os.getenv("SIMPLELOG_LITE_LOG_LEVEL", "INFO").upper()
_sink_log_level = os.getenv("SIMPLELOG_LITE_LOG_SINK", "").upper()


def _level_passes(record, level: str) -> bool:
    try:
        return record["level"].no >= logger.level(level).no
    except ValueError:
        return True  # Unknown level name, let the message through


def _log_filter(record) -> bool:
    """file_logger records use SIMPLELOG_LITE_LOG_SINK when set, others the global level."""
    if _sink_log_level and record["extra"].get("name") == "file_logger":
        return _level_passes(record, _sink_log_level)
    return _level_passes(record, _global_log_level)


# Remove default handler
logger.remove()

logger.add(
    sys.stderr,
    level=0,  # Accept all, let filter decide
    filter=_log_filter,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    colorize=True,
)


def get_logger(name: str):
    """Get a logger with the given name bound to context."""
    return logger.bind(name=name)


@contextmanager
def log_timing(operation: str, log_instance=None, level: str = "debug"):
    """Log how long the wrapped block took, even when it raises.

    Yields:
        dict whose 'elapsed_ms' key is filled in on exit
    """
    log_fn = log_instance or get_logger("timing")
    timing = {"elapsed_ms": 0.0}
    start = perf_counter()
    try:
        yield timing
    finally:
        timing["elapsed_ms"] = (perf_counter() - start) * 1000
        getattr(log_fn, level)(f"{operation}: {timing['elapsed_ms']:.1f}ms")


__all__ = ["logger", "get_logger", "log_timing"]
