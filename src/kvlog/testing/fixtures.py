"""
Pytest fixtures for testing kvlog pipelines.

Register with ``pytest_plugins = ("kvlog.testing.fixtures",)``.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any, Callable

import pytest

from ..core.writer import LineBufferedWriter
from .mocks import MockSink, RecordingLogger


@pytest.fixture
def mock_sink() -> MockSink:
    return MockSink()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def line_writer_factory() -> Generator[Callable[..., LineBufferedWriter], None, None]:
    """Create LineBufferedWriters that are closed when the test ends."""
    created: list[LineBufferedWriter] = []

    def _factory(sink: Any, capacity: int = 8, **kwargs: Any) -> LineBufferedWriter:
        writer = LineBufferedWriter(sink, capacity, **kwargs)
        created.append(writer)
        return writer

    yield _factory

    for writer in created:
        try:
            writer.close()
        except Exception:
            # Tests that break the sink on purpose also break the final flush
            pass
