"""
Error hierarchy for kvlog.

Every error carries an `ErrorContext` (category, severity, identifier and
timestamp) so failures can be reported in structured form without going back
through the logging pipeline that raised them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    SINK = "sink"
    LIFECYCLE = "lifecycle"
    ENCODING = "encoding"
    LEVEL = "level"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Structured context captured when an error is created."""

    category: ErrorCategory = ErrorCategory.SYSTEM
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    error_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "component_name": self.component_name,
            "metadata": dict(self.metadata),
        }


def create_error_context(
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    *,
    component_name: str | None = None,
    **metadata: Any,
) -> ErrorContext:
    return ErrorContext(
        category=category,
        severity=severity,
        component_name=component_name,
        metadata=metadata,
    )


class KvlogError(Exception):
    """Base class for all kvlog errors."""

    default_category = ErrorCategory.SYSTEM
    default_severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        error_context: ErrorContext | None = None,
        cause: BaseException | None = None,
        component_name: str | None = None,
        **metadata: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_context is None:
            error_context = create_error_context(
                category or self.default_category,
                severity or self.default_severity,
                component_name=component_name,
                **metadata,
            )
        self.context = error_context
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context.to_dict(),
        }
        if self.__cause__ is not None:
            data["cause"] = {
                "error_type": type(self.__cause__).__name__,
                "message": str(self.__cause__),
            }
        return data


class ConfigurationError(KvlogError, ValueError):
    """Invalid construction-time configuration."""

    default_category = ErrorCategory.CONFIGURATION
    default_severity = ErrorSeverity.HIGH


class SinkWriteError(KvlogError):
    """The underlying sink rejected a flush; the flushed entries were dropped."""

    default_category = ErrorCategory.SINK
    default_severity = ErrorSeverity.HIGH

    def __init__(self, message: str, *, entries: int = 0, **kwargs: Any) -> None:
        super().__init__(message, entries=entries, **kwargs)
        self.entries = entries


class WriterClosedError(KvlogError, ValueError):
    """Write or flush attempted after shutdown."""

    default_category = ErrorCategory.LIFECYCLE
    default_severity = ErrorSeverity.LOW


class EncodingError(KvlogError, ValueError):
    """A key-value sequence could not be serialized."""

    default_category = ErrorCategory.ENCODING


class InvalidLevelError(KvlogError, ValueError):
    """A level string did not name a known level."""

    default_category = ErrorCategory.LEVEL
    default_severity = ErrorSeverity.LOW


__all__ = [
    "ErrorCategory",
    "ErrorSeverity",
    "ErrorContext",
    "create_error_context",
    "KvlogError",
    "ConfigurationError",
    "SinkWriteError",
    "WriterClosedError",
    "EncodingError",
    "InvalidLevelError",
]
