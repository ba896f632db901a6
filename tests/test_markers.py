"""Tests for age marker rendering and cut-point selection.

Tests:
- Wire format round trip
- Scanning in file order
- Cut point: strictly-greater tie-break, all expired, no markers
"""

import pytest

from simplelog_lite.markers import (
    find_cut_point,
    iter_markers,
    now_ms,
    render_marker,
    retained_region,
)


def _line(ts: int) -> str:
    return render_marker(ts) + "\n"


class TestMarkerFormat:
    """Tests for the marker wire format."""

    def test_render_exact_format(self):
        """Marker line keeps the surrounding spaces."""
        assert render_marker(1732360878845) == " ---------- TIMESTAMP: 1732360878845 ---------- "

    def test_round_trip_preserves_timestamp(self):
        """Rendered timestamp parses back to the same integer."""
        ts = 9_999_999_999_999
        markers = list(iter_markers(render_marker(ts)))
        assert len(markers) == 1
        assert markers[0].timestamp == ts

    def test_marker_offsets(self):
        """Start offset points at the dashes, not the leading space."""
        content = "hello\n" + _line(5)
        marker = next(iter_markers(content))
        assert content[marker.start:].startswith("---------- TIMESTAMP: 5")
        assert content[marker.end - 10:marker.end] == "----------"

    def test_iter_in_file_order(self):
        content = _line(1) + "a\n" + _line(2) + "b\n" + _line(3)
        assert [m.timestamp for m in iter_markers(content)] == [1, 2, 3]

    def test_malformed_marker_ignored(self):
        """Lines that only look like markers are plain content."""
        content = " ---------- TIMESTAMP: abc ---------- \n" + _line(7)
        assert [m.timestamp for m in iter_markers(content)] == [7]

    def test_now_ms_is_milliseconds(self):
        assert now_ms() > 1_600_000_000_000


class TestFindCutPoint:
    """Tests for cut-point selection."""

    def test_no_markers_keeps_everything(self):
        assert find_cut_point("a\nb\n", expiry_timestamp=100) == 0

    def test_first_fresh_marker_is_cut(self):
        """Everything before the first marker newer than expiry is dropped."""
        content = "old\n" + _line(50) + "mid\n" + _line(150) + "new\n" + _line(200)
        cut = find_cut_point(content, expiry_timestamp=100)
        assert content[cut:].startswith("---------- TIMESTAMP: 150")
        assert "old" not in content[cut:]
        assert "mid" not in content[cut:]
        assert "new" in content[cut:]

    def test_marker_equal_to_expiry_is_expired(self):
        """Tie-break is strictly greater than the expiry timestamp."""
        content = _line(100) + "x\n" + _line(101) + "y\n"
        cut = find_cut_point(content, expiry_timestamp=100)
        assert content[cut:] == "---------- TIMESTAMP: 101 ---------- \ny\n"

    def test_all_expired_keeps_tail_after_last_marker(self):
        content = "a\n" + _line(10) + "b\n" + _line(20) + "c\n"
        cut = find_cut_point(content, expiry_timestamp=1000)
        assert content[cut:] == " \nc\n"

    @pytest.mark.parametrize("expiry", [0, 9])
    def test_oldest_marker_fresh_keeps_from_it(self, expiry):
        content = "pre\n" + _line(10) + "post\n"
        cut = find_cut_point(content, expiry_timestamp=expiry)
        assert content[cut:].startswith("---------- TIMESTAMP: 10 ")


class TestRetainedRegion:
    """Tests for TTL-based retention."""

    def test_retention_invariant(self):
        """Remaining markers are within the TTL and no fresh marker is lost."""
        now = 100_000
        stamps = [50_000, 85_000, 90_000, 90_001, 95_000, 100_000]
        content = "".join(_line(ts) + f"line-{ts}\n" for ts in stamps)

        kept = retained_region(content, ttl=10, now=now)

        remaining = [m.timestamp for m in iter_markers(kept)]
        assert remaining == [90_001, 95_000, 100_000]
        assert all(ts >= now - 10_000 for ts in remaining)
        assert "line-90000" not in kept

    def test_zero_ttl_expires_marker_written_now(self):
        content = "a\n" + _line(500)
        assert retained_region(content, ttl=0, now=500) == " \n"
