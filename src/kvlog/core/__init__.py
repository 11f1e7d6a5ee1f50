"""
Core building blocks of kvlog: the Logger capability, levels, encoders,
the line-buffered writer, settings and the error hierarchy.
"""

from .errors import (
    ConfigurationError,
    EncodingError,
    ErrorCategory,
    ErrorSeverity,
    InvalidLevelError,
    KvlogError,
    SinkWriteError,
    WriterClosedError,
)

__all__ = [
    "ConfigurationError",
    "EncodingError",
    "ErrorCategory",
    "ErrorSeverity",
    "InvalidLevelError",
    "KvlogError",
    "SinkWriteError",
    "WriterClosedError",
]
