"""Configuration for SimpleLog Lite.

Simple dataclass-based configuration with sensible defaults.
Override via environment variables with SIMPLELOG_LITE_ prefix.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Mapping

from dotenv import load_dotenv

from simplelog_lite.log_config import get_logger

log = get_logger("config")

# Look for .env in package directory and parent
_pkg_dir = Path(__file__).parent.parent
_env_loaded = load_dotenv(_pkg_dir / ".env") or load_dotenv(_pkg_dir.parent / ".env")
log.debug(f"Loaded .env file: {_env_loaded}")

# Period of the TTL maintenance cycle (seconds). Not user-configurable.
MAINTENANCE_INTERVAL = 60.0

TIMESTAMP_MODES = ("epoch", "iso")

TimestampMode = Literal["epoch", "iso"]


def _get_env(key: str, default: str) -> str:
    """Get environment variable with SIMPLELOG_LITE_ prefix."""
    return os.getenv(f"SIMPLELOG_LITE_{key}", default)


def _get_env_bool(key: str, default: bool) -> bool:
    """Get boolean environment variable."""
    val = os.getenv(f"SIMPLELOG_LITE_{key}")
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _get_env_float(key: str) -> float | None:
    """Get optional numeric environment variable (unset or empty -> None)."""
    val = os.getenv(f"SIMPLELOG_LITE_{key}")
    if not val:
        return None
    return float(val)


def _decode_escapes(value: str) -> str:
    """Expand backslash escapes (\\n, \\t) while keeping non-ASCII text intact."""
    return value.encode("latin-1", "backslashreplace").decode("unicode_escape")


def _get_env_str(key: str) -> str | None:
    val = os.getenv(f"SIMPLELOG_LITE_{key}")
    return val or None


def check_duration(name: str, value: float | None) -> None:
    """Reject negative durations."""
    if value is not None and value < 0:
        raise ValueError(f"{name} must be >= 0 seconds, got {value}")


def _check_timestamp_mode(value: str | None) -> None:
    if value is not None and value not in TIMESTAMP_MODES:
        raise ValueError(f"add_ts must be one of {TIMESTAMP_MODES}, got {value!r}")


@dataclass
class StringifyOptions:
    """Options for the log formatter.

    Attributes:
        for_each_line: Apply prefix/timestamp to every line instead of once per log
        add_prefix: Static prefix applied innermost
        add_ts: Timestamp mode ("epoch" seconds or "iso" UTC), None for no timestamp
    """

    for_each_line: bool = False
    add_prefix: str | None = None
    add_ts: TimestampMode | None = None

    def __post_init__(self):
        _check_timestamp_mode(self.add_ts)


@dataclass
class SinkOptions:
    """Options for the rotating file sink.

    Attributes:
        ttl: Seconds log content is kept before the next maintenance cycle drops it
        max_file_age: Delete a pre-existing file older than this at construction
        separator: Appended after every line
    """

    ttl: float | None = None
    max_file_age: float | None = None
    separator: str = "\n"

    def __post_init__(self):
        check_duration("ttl", self.ttl)
        check_duration("max_file_age", self.max_file_age)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SinkOptions":
        """Build options from a plain mapping, ignoring unknown keys."""
        return cls(
            ttl=data.get("ttl"),
            max_file_age=data.get("max_file_age"),
            separator=data.get("separator", "\n"),
        )


@dataclass
class Config:
    """SimpleLog Lite configuration.

    Attributes:
        ttl: Default TTL for file loggers in seconds (default: unset, no rotation)
        max_file_age: Default max file age in seconds (default: unset)
        separator: Line separator for file loggers (default: newline)
        for_each_line: Formatter applies prefix/timestamp per line (default: False)
        add_prefix: Formatter static prefix (default: unset)
        add_ts: Formatter timestamp mode, "epoch" or "iso" (default: unset)
    """

    ttl: float | None = field(default_factory=lambda: _get_env_float("TTL"))
    max_file_age: float | None = field(
        default_factory=lambda: _get_env_float("MAX_FILE_AGE")
    )
    separator: str = field(
        default_factory=lambda: _decode_escapes(_get_env("SEPARATOR", "\n"))
    )
    for_each_line: bool = field(
        default_factory=lambda: _get_env_bool("FOR_EACH_LINE", False)
    )
    add_prefix: str | None = field(default_factory=lambda: _get_env_str("ADD_PREFIX"))
    add_ts: str | None = field(default_factory=lambda: _get_env_str("ADD_TS"))

    def __post_init__(self):
        """Validate durations and timestamp mode."""
        log.trace("Initializing Config")

        check_duration("ttl", self.ttl)
        check_duration("max_file_age", self.max_file_age)
        if self.add_ts is not None:
            self.add_ts = self.add_ts.lower()
        _check_timestamp_mode(self.add_ts)

        log.debug(f"ttl={self.ttl}, max_file_age={self.max_file_age}, separator={self.separator!r}")
        log.debug(
            f"for_each_line={self.for_each_line}, add_prefix={self.add_prefix!r}, add_ts={self.add_ts}"
        )

    def sink_options(self) -> SinkOptions:
        """Options for create_file_logger."""
        return SinkOptions(
            ttl=self.ttl,
            max_file_age=self.max_file_age,
            separator=self.separator,
        )

    def stringify_options(self) -> StringifyOptions:
        """Options for create_stringify_logger."""
        return StringifyOptions(
            for_each_line=self.for_each_line,
            add_prefix=self.add_prefix,
            add_ts=self.add_ts,
        )
