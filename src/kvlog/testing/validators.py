"""
Protocol validators for testing kvlog sinks and loggers.

Provides utilities to validate that plugins correctly implement their protocols.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any

from ..plugins.utils import get_plugin_name


@dataclass
class ValidationResult:
    """Result of protocol validation."""

    valid: bool
    plugin_type: str
    plugin_name: str = ""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise ProtocolViolationError(
                f"{self.plugin_name or 'Plugin'} violates {self.plugin_type} protocol: "
                + "; ".join(self.errors)
            )


class ProtocolViolationError(Exception):
    """Raised when a plugin violates its protocol."""

    pass


def _accepts_positional(method: Any, count: int) -> bool:
    try:
        sig = inspect.signature(method)
    except (TypeError, ValueError):
        return True
    try:
        sig.bind(*([None] * count))
    except TypeError:
        return False
    return True


def validate_sink(sink: Any) -> ValidationResult:
    """Validate that a sink can sit behind an encoder or LineBufferedWriter.

    Checks:
    - A synchronous ``write`` method exists and accepts one payload
    - ``name`` is a string when present
    """
    errors: list[str] = []
    warnings: list[str] = []

    write = getattr(sink, "write", None)
    if write is None or not callable(write):
        errors.append("Missing required method: write")
    else:
        if inspect.iscoroutinefunction(write):
            errors.append("write must be synchronous")
        if not _accepts_positional(write, 1):
            errors.append("write must accept a single bytes payload")

    if hasattr(sink, "name") and not isinstance(sink.name, str):
        errors.append("'name' attribute must be a string")
    elif not hasattr(sink, "name"):
        warnings.append("No 'name' attribute; the class name is used")

    if hasattr(sink, "close") and not callable(sink.close):
        errors.append("close must be callable")

    return ValidationResult(
        valid=len(errors) == 0,
        plugin_type="Sink",
        plugin_name=get_plugin_name(sink),
        errors=errors,
        warnings=warnings,
    )


def validate_logger(logger: Any) -> ValidationResult:
    """Validate that a logger implements ``log(*keyvals)``.

    Checks:
    - A synchronous ``log`` method exists
    - ``log`` accepts any number of positional key-values
    """
    errors: list[str] = []
    warnings: list[str] = []

    log = getattr(logger, "log", None)
    if log is None or not callable(log):
        errors.append("Missing required method: log")
    else:
        if inspect.iscoroutinefunction(log):
            errors.append("log must be synchronous")
        if not _accepts_positional(log, 0) or not _accepts_positional(log, 4):
            errors.append("log must accept variadic key-values (*keyvals)")

    return ValidationResult(
        valid=len(errors) == 0,
        plugin_type="Logger",
        plugin_name=get_plugin_name(logger),
        errors=errors,
        warnings=warnings,
    )
