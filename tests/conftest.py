"""Shared pytest fixtures for SimpleLog-Lite tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    """Path for a log file that does not exist yet."""
    return tmp_path / "logs" / "debug.log"


@pytest.fixture
def fake_clock(monkeypatch) -> FakeClock:
    """Replace the file logger's millisecond clock with a FakeClock."""
    clock = FakeClock()
    monkeypatch.setattr("simplelog_lite.file_logger.now_ms", clock)
    return clock


@pytest.fixture
def captured_logs():
    """Collect diagnostics messages emitted through loguru."""
    messages: list[str] = []
    handler_id = logger.add(lambda msg: messages.append(str(msg)), level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def make_file_logger():
    """Factory for FileLoggers that are disposed after the test."""
    from simplelog_lite.file_logger import FileLogger

    created: list[FileLogger] = []

    def _make(path, **kwargs) -> FileLogger:
        file_logger = FileLogger(path, **kwargs)
        created.append(file_logger)
        return file_logger

    yield _make

    for file_logger in created:
        file_logger.dispose()
