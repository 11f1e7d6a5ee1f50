"""Log level values, helpers and the level registry.

Levels are attached to records as the value of `KEY` and recognised by type
(`LevelValue`), not by key, so a record keeps its level wherever the pair
sits in the key-value sequence.

Example:
    from kvlog.core import levels

    levels.info(logger).log("msg", "started")      # level=info msg=started
    levels.error(logger).log("err", exc)

Custom levels can be registered and are then understood by `parse()`:

    audit = levels.register_level("audit", priority=35)
    levels.with_level(logger, audit).log("msg", "user login")
"""

from __future__ import annotations

from typing import Final

from ..context import with_prefix
from .errors import InvalidLevelError
from .logger import Logger

KEY: Final[str] = "level"


class LevelValue:
    """A level attached to a record. Renders as its lowercase name."""

    __slots__ = ("name", "priority")

    def __init__(self, name: str, priority: int) -> None:
        self.name = name
        self.priority = priority

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"LevelValue({self.name!r}, {self.priority})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LevelValue):
            return NotImplemented
        return self.name == other.name and self.priority == other.priority

    def __hash__(self) -> int:
        return hash((self.name, self.priority))


DEBUG: Final = LevelValue("debug", 10)
INFO: Final = LevelValue("info", 20)
WARN: Final = LevelValue("warn", 30)
ERROR: Final = LevelValue("error", 40)

_DEFAULT_LEVELS: Final[dict[str, LevelValue]] = {
    "debug": DEBUG,
    "info": INFO,
    "warn": WARN,
    "warning": WARN,  # alias
    "error": ERROR,
}

_custom_levels: dict[str, LevelValue] = {}


def register_level(name: str, priority: int) -> LevelValue:
    """Register a custom log level.

    Args:
        name: Level name (e.g., "trace", "audit"). Will be lowercased.
        priority: Numeric priority (0-99). Lower = more verbose.
                  Standard levels: debug=10, info=20, warn=30, error=40

    Raises:
        ValueError: If name already exists or priority is invalid
    """
    name_lower = name.strip().lower()
    if not name_lower:
        raise ValueError("Level name must not be empty")
    if name_lower in _DEFAULT_LEVELS or name_lower in _custom_levels:
        raise ValueError(f"Level '{name_lower}' already exists")
    if not 0 <= priority <= 99:
        raise ValueError(f"Priority must be 0-99, got {priority}")
    value = LevelValue(name_lower, priority)
    _custom_levels[name_lower] = value
    return value


def get_all_levels() -> dict[str, LevelValue]:
    """Get all registered levels (default + custom), keyed by name."""
    return {**_DEFAULT_LEVELS, **_custom_levels}


def _reset_registry() -> None:
    """Reset the registry to initial state (for testing only)."""
    _custom_levels.clear()


def parse(level: str) -> LevelValue:
    """Parse a level name, case-insensitively and ignoring surrounding spaces.

    Raises:
        InvalidLevelError: If the name is not a known level
    """
    key = level.strip().lower()
    value = _custom_levels.get(key) or _DEFAULT_LEVELS.get(key)
    if value is None:
        raise InvalidLevelError(f"invalid level string: {level!r}")
    return value


def parse_default(level: str, default: LevelValue) -> LevelValue:
    """Like `parse`, returning ``default`` for unknown names."""
    try:
        return parse(level)
    except InvalidLevelError:
        return default


def with_level(logger: Logger, value: LevelValue) -> Logger:
    return with_prefix(logger, KEY, value)


def debug(logger: Logger) -> Logger:
    """Return a logger that sets the debug level on every record."""
    return with_prefix(logger, KEY, DEBUG)


def info(logger: Logger) -> Logger:
    """Return a logger that sets the info level on every record."""
    return with_prefix(logger, KEY, INFO)


def warn(logger: Logger) -> Logger:
    """Return a logger that sets the warn level on every record."""
    return with_prefix(logger, KEY, WARN)


def error(logger: Logger) -> Logger:
    """Return a logger that sets the error level on every record."""
    return with_prefix(logger, KEY, ERROR)


def find_level(keyvals: tuple | list) -> LevelValue | None:
    """Return the first LevelValue found in a value position, if any."""
    for i in range(1, len(keyvals), 2):
        v = keyvals[i]
        if isinstance(v, LevelValue):
            return v
    return None
