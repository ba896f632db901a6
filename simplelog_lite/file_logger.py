"""Append-only text log file with TTL-based pruning.

    logger = create_file_logger("debug.log", SinkOptions(ttl=60 * 60))
    logger("log1")
    logger("log2")
    logger.dispose()

When a TTL is configured, a background worker runs a maintenance cycle every
MAINTENANCE_INTERVAL seconds (and once at construction):
1. Append an age marker carrying the current time in milliseconds
2. Read the whole file
3. Drop everything before the oldest marker that is still inside the TTL
4. Write the remainder back (temp file + os.replace)

Rotation state lives entirely in the file's markers, so restarting the process
picks up where the previous one left off. The sink assumes it is the only
writer of its path.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import threading
import time
from pathlib import Path
from typing import IO, Any, Callable, Mapping

from simplelog_lite.config import MAINTENANCE_INTERVAL, SinkOptions, check_duration
from simplelog_lite.log_config import get_logger, log_timing
from simplelog_lite.markers import now_ms, render_marker, retained_region

log = get_logger("file_logger")

# surrogateescape keeps undecodable bytes intact across a rewrite
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def file_created_at(path: Path) -> float:
    """Creation time of ``path`` (epoch seconds), falling back to mtime."""
    stats = path.stat()
    birthtime = getattr(stats, "st_birthtime", None)
    if birthtime:
        return birthtime
    return stats.st_mtime


def file_age_seconds(path: Path) -> float:
    """Seconds since ``path`` was created."""
    return time.time() - file_created_at(path)


class MaintenanceWorker(threading.Thread):
    """Background thread that runs a maintenance cycle on a fixed period."""

    def __init__(self, cycle: Callable[[], Any], interval: float, name: str = "maintenance"):
        """Initialize the worker.

        Args:
            cycle: Callable run once per period
            interval: Seconds between cycles
            name: Thread name (shows up in diagnostics)
        """
        super().__init__(daemon=True, name=name)
        self.cycle = cycle
        self.interval = interval
        self._stop_event = threading.Event()
        self._stats = {
            "cycles": 0,
            "errors": 0,
            "last_error": None,
            "last_run": None,
        }
        self._stats_lock = threading.Lock()

    def stop(self) -> None:
        """Signal the worker to stop. A cycle already running finishes first."""
        self._stop_event.set()

    def get_stats(self) -> dict[str, Any]:
        """Get worker statistics."""
        with self._stats_lock:
            return dict(self._stats)

    def run(self) -> None:
        """Main worker loop."""
        log.debug(f"{self.name} started (every {self.interval}s)")

        while not self._stop_event.wait(self.interval):
            try:
                self.cycle()
                with self._stats_lock:
                    self._stats["cycles"] += 1
                    self._stats["last_run"] = time.time()
            except Exception as e:
                log.exception(f"{self.name} cycle failed: {e}")
                with self._stats_lock:
                    self._stats["errors"] += 1
                    self._stats["last_error"] = str(e)

        log.debug(f"{self.name} stopped")


class FileLogger:
    """File-backed log sink with optional TTL rotation and max-age deletion.

    Lifecycle is construct -> active -> disposed. ``append`` and the
    maintenance cycle are serialized by an internal lock; other processes
    writing the same path are not coordinated with.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        *,
        ttl: float | None = None,
        max_file_age: float | None = None,
        separator: str = "\n",
    ):
        """Open (creating if needed) the log file and start maintenance.

        Args:
            path: Target log file
            ttl: Keep content for this many seconds; None or 0 disables rotation
            max_file_age: Delete the existing file first if it is older than this
            separator: Written after every appended line

        Raises:
            ValueError: ttl or max_file_age is negative
            OSError: The file could not be inspected, deleted, created or opened
        """
        check_duration("ttl", ttl)
        check_duration("max_file_age", max_file_age)

        self.path = Path(path)
        self.ttl = ttl
        self.max_file_age = max_file_age
        self.separator = separator
        self._lock = threading.Lock()
        self._closed = False
        self._worker: MaintenanceWorker | None = None

        if self.max_file_age and self.path.exists():
            age = file_age_seconds(self.path)
            if age > self.max_file_age:
                log.info(f"Deleting {self.path}: age {age:.0f}s exceeds {self.max_file_age}s")
                self.path.unlink()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh: IO[str] = self._open()

        if self.ttl:
            self.run_maintenance()
            self._worker = MaintenanceWorker(
                self._timed_rotate,
                interval=MAINTENANCE_INTERVAL,
                name=f"maintenance:{self.path.name}",
            )
            self._worker.start()

        log.debug(f"FileLogger opened {self.path} (ttl={self.ttl}, max_file_age={self.max_file_age})")

    def _open(self) -> IO[str]:
        return open(self.path, "a", encoding=_ENCODING, errors=_ERRORS, newline="")

    @property
    def closed(self) -> bool:
        return self._closed

    def _write(self, line: str) -> None:
        self._fh.write(line + self.separator)
        self._fh.flush()

    def append(self, line: str) -> None:
        """Write ``line`` followed by the separator.

        Raises:
            ValueError: The logger has been disposed
            OSError: The write failed (not retried)
        """
        with self._lock:
            if self._closed:
                raise ValueError(f"FileLogger for {self.path} is disposed")
            self._write(line)

    __call__ = append

    def run_maintenance(self) -> None:
        """Insert an age marker and drop content older than the TTL.

        Never raises: failures are logged and the next cycle tries again.
        """
        try:
            self._timed_rotate()
        except Exception as e:
            log.exception(f"Maintenance of {self.path} failed: {e}")

    def _timed_rotate(self) -> None:
        """One maintenance cycle; errors propagate to the caller."""
        with log_timing(f"maintenance {self.path.name}", log):
            self._rotate()

    def _rotate(self) -> None:
        with self._lock:
            if self._closed:
                return
            if not self.path.exists():
                log.debug(f"{self.path} no longer exists, skipping maintenance")
                return

            self._write(render_marker(now_ms()))

            with open(self.path, encoding=_ENCODING, errors=_ERRORS, newline="") as handle:
                content = handle.read()

            kept = retained_region(content, self.ttl or 0, now=now_ms())
            if len(kept) == len(content):
                return

            self._replace_contents(kept)
            log.debug(f"Pruned {len(content) - len(kept)} chars from {self.path}")

    def _replace_contents(self, content: str) -> None:
        """Swap the file for one holding ``content`` and reopen the append handle."""
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=".tmp_log_",
            suffix=self.path.suffix or ".log",
        )
        try:
            with os.fdopen(fd, "w", encoding=_ENCODING, errors=_ERRORS, newline="") as handle:
                handle.write(content)
            shutil.copymode(self.path, tmp_path)
            self._fh.close()
            try:
                os.replace(tmp_path, self.path)
            finally:
                self._fh = self._open()
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    def get_stats(self) -> dict[str, Any]:
        """Maintenance worker statistics (empty when no TTL is configured)."""
        worker = self._worker
        if worker is None:
            return {}
        return worker.get_stats()

    def dispose(self) -> None:
        """Stop maintenance and close the file. Safe to call more than once.

        Raises:
            OSError: Closing the file failed
        """
        with self._lock:
            worker, self._worker = self._worker, None
        if worker is not None:
            worker.stop()
            worker.join()

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._fh.close()
        log.debug(f"FileLogger closed {self.path}")

    close = dispose

    def __enter__(self) -> "FileLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._closed else "active"
        return f"FileLogger({str(self.path)!r}, ttl={self.ttl}, max_file_age={self.max_file_age}, {state})"


def create_file_logger(
    filepath: str | os.PathLike,
    options: SinkOptions | Mapping[str, Any] | None = None,
    separator: str | None = None,
) -> FileLogger:
    """Create a FileLogger from an options object or mapping.

    Args:
        filepath: Target file to stream logs to
        options: SinkOptions, or a mapping with ``ttl`` / ``max_file_age`` / ``separator``
        separator: Overrides ``options.separator`` when given

    Returns:
        Callable logger; call ``dispose()`` when done.
    """
    if options is None:
        options = SinkOptions()
    elif not isinstance(options, SinkOptions):
        options = SinkOptions.from_mapping(options)

    return FileLogger(
        filepath,
        ttl=options.ttl,
        max_file_age=options.max_file_age,
        separator=options.separator if separator is None else separator,
    )


__all__ = [
    "FileLogger",
    "MaintenanceWorker",
    "create_file_logger",
    "file_age_seconds",
    "file_created_at",
]
