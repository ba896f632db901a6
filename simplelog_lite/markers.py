"""Age markers embedded in TTL-rotated log files.

A marker is a line carrying the millisecond timestamp at which it was written:

     ---------- TIMESTAMP: 1732360878845 ----------

Markers are only ever appended, so file order is chronological order. The
oldest marker still inside the TTL window marks where the retained part of
the file begins.
"""

import re
import time
from dataclasses import dataclass
from typing import Iterator

MARKER_TEMPLATE = " ---------- TIMESTAMP: {timestamp} ---------- "

MARKER_PATTERN = re.compile(r"---------- TIMESTAMP: (\d+) ----------")


@dataclass(frozen=True)
class AgeMarker:
    """A marker found in file content.

    Attributes:
        timestamp: Milliseconds since the epoch
        start: Offset of the first character of the matched pattern
        end: Offset just past the matched pattern
    """

    timestamp: int
    start: int
    end: int


def now_ms() -> int:
    """Current time in integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def render_marker(timestamp: int) -> str:
    """Marker line (without separator) for ``timestamp`` milliseconds."""
    return MARKER_TEMPLATE.format(timestamp=int(timestamp))


def iter_markers(content: str) -> Iterator[AgeMarker]:
    """Yield every marker in ``content`` in file order."""
    for match in MARKER_PATTERN.finditer(content):
        yield AgeMarker(timestamp=int(match.group(1)), start=match.start(), end=match.end())


def find_cut_point(content: str, expiry_timestamp: int) -> int:
    """Offset where the retained region of ``content`` starts.

    The first marker with a timestamp strictly greater than
    ``expiry_timestamp`` is kept along with everything after it. Expired
    markers are dropped together with everything before them, so when no
    marker qualifies the cut lands just past the last expired marker. Content
    without any marker is kept whole.
    """
    cut = 0
    for marker in iter_markers(content):
        if marker.timestamp > expiry_timestamp:
            return marker.start
        cut = marker.end
    return cut


def retained_region(content: str, ttl: float, now: int | None = None) -> str:
    """Suffix of ``content`` that survives a maintenance cycle at ``now``."""
    current = now_ms() if now is None else now
    expiry_timestamp = current - int(ttl * 1000)
    return content[find_cut_point(content, expiry_timestamp):]


__all__ = [
    "AgeMarker",
    "MARKER_PATTERN",
    "find_cut_point",
    "iter_markers",
    "now_ms",
    "render_marker",
    "retained_region",
]
