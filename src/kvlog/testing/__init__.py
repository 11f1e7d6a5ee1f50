"""
Testing utilities for kvlog.

This module provides mocks and validators for testing sinks, loggers and
buffered pipelines. Pytest fixtures live in ``kvlog.testing.fixtures``.

Example:
    from kvlog.testing import MockSink, validate_sink

    def test_my_sink():
        sink = MockSink()
        result = validate_sink(sink)
        assert result.valid
"""

from .mocks import MockSink, RecordingLogger, TestingLogger
from .validators import (
    ProtocolViolationError,
    ValidationResult,
    validate_logger,
    validate_sink,
)

__all__ = [
    # Mocks
    "MockSink",
    "RecordingLogger",
    "TestingLogger",
    # Validators
    "validate_sink",
    "validate_logger",
    "ValidationResult",
    "ProtocolViolationError",
]
