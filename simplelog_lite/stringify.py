"""Turn console-style argument lists into a single log string.

    >>> stringify(None, ["array", [0, 1, 2]], add_ts="iso")
    '2024-11-23T11:21:18.845Z array [0, 1, 2]'

Rendering rules for ``format_args``:
- A leading str containing % directives is a template (%s %d %i %f %j %o %O %%)
- str values are used as-is, exceptions render with their traceback
- Containers and dataclasses go through rich's pretty_repr, other values through repr
- %d keeps fractions, %i truncates, non-finite numbers render as Infinity / NaN
- Values are joined with a single space
"""

from __future__ import annotations

import dataclasses
import json
import math
import re
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Sequence

from rich.pretty import pretty_repr

from simplelog_lite.config import TIMESTAMP_MODES, StringifyOptions

_DIRECTIVE = re.compile(r"%[sdifjoO%]")

_CONTAINERS = (list, tuple, dict, set, frozenset)


def _pretty(value: Any) -> str:
    if isinstance(value, _CONTAINERS) or dataclasses.is_dataclass(value):
        return pretty_repr(value)
    return repr(value)


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, BaseException):
        if value.__traceback__ is None:
            return f"{type(value).__name__}: {value}"
        return "".join(traceback.format_exception(type(value), value, value.__traceback__)).rstrip("\n")
    return _pretty(value)


def _to_number(value: Any) -> int | float:
    """Numeric coercion for %d/%i/%f; anything unparseable becomes NaN."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def _format_number(num: int | float) -> str:
    if isinstance(num, int):
        return str(num)
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"
    if num.is_integer():
        return str(int(num))
    return repr(num)


def _apply_directive(directive: str, value: Any) -> str:
    if directive == "%s":
        return _render_value(value)
    if directive == "%d":
        return _format_number(_to_number(value))
    if directive == "%i":
        num = _to_number(value)
        # Integer parsing of a non-finite value yields NaN
        if isinstance(num, float) and not math.isfinite(num):
            return "NaN"
        return str(int(num))
    if directive == "%f":
        return _format_number(float(_to_number(value)))
    if directive == "%j":
        try:
            return json.dumps(value, default=str)
        except ValueError:
            # Circular structure
            return "[Circular]"
    return _pretty(value)


def format_args(args: Sequence[Any]) -> str:
    """Render an argument list the way a console.log line would read."""
    if not args:
        return ""

    rest = list(args)
    parts: list[str] = []
    first = rest[0]
    if isinstance(first, str) and "%" in first:
        rest.pop(0)

        def _substitute(match: re.Match) -> str:
            directive = match.group(0)
            if directive == "%%":
                return "%"
            if not rest:
                return directive
            return _apply_directive(directive, rest.pop(0))

        parts.append(_DIRECTIVE.sub(_substitute, first))

    parts.extend(_render_value(value) for value in rest)
    return " ".join(parts)


def _timestamp(mode: str) -> str:
    if mode == "epoch":
        return str(int(time.time()))
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def stringify(
    prefix: str | None,
    args: Sequence[Any],
    *,
    for_each_line: bool = False,
    add_prefix: str | None = None,
    add_ts: str | None = None,
) -> str:
    """Format ``args`` into one string, then decorate it.

    Decoration order, innermost first: ``add_prefix``, ``prefix``, timestamp.
    With ``for_each_line`` each line of the rendered text is decorated on its
    own; otherwise the decorations are applied once to the whole text. The
    timestamp is taken once per call.

    Raises:
        ValueError: ``add_ts`` is not "epoch" or "iso"
    """
    if add_ts is not None and add_ts not in TIMESTAMP_MODES:
        raise ValueError(f"add_ts must be one of {TIMESTAMP_MODES}, got {add_ts!r}")

    logs = [format_args(args)]
    if for_each_line:
        logs = logs[0].split("\n")
    if add_prefix:
        logs = [f"{add_prefix} {line}" for line in logs]
    if prefix:
        logs = [f"{prefix} {line}" for line in logs]
    if add_ts:
        ts = _timestamp(add_ts)
        logs = [f"{ts} {line}" for line in logs]
    return "\n".join(logs)


class StringifyLogger:
    """Reusable formatter bound to a set of options.

        >>> fmt = StringifyLogger(StringifyOptions(add_prefix="[worker]"))
        >>> fmt("job-1", ["started"])
        'job-1 [worker] started'
    """

    def __init__(self, options: StringifyOptions | None = None):
        self.options = options or StringifyOptions()

    def __call__(self, prefix: str | None, args: Sequence[Any]) -> str:
        return stringify(
            prefix,
            args,
            for_each_line=self.options.for_each_line,
            add_prefix=self.options.add_prefix,
            add_ts=self.options.add_ts,
        )


def create_stringify_logger(
    for_each_line: bool = False,
    *,
    add_prefix: str | None = None,
    add_ts: str | None = None,
) -> StringifyLogger:
    """Build a formatter callable ``(prefix, args) -> str``.

    Args:
        for_each_line: Apply prefix/timestamp to each line rather than each log
        add_prefix: Static prefix for every log
        add_ts: "epoch" or "iso" timestamp, None to omit

    Raises:
        ValueError: Unknown timestamp mode
    """
    return StringifyLogger(
        StringifyOptions(for_each_line=for_each_line, add_prefix=add_prefix, add_ts=add_ts)
    )


__all__ = ["StringifyLogger", "create_stringify_logger", "format_args", "stringify"]
