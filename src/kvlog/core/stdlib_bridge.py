"""
Bridges between kvlog loggers and the standard library ``logging`` module.

Two directions are supported:

- `StdlibAdapter` is a text stream. Install it as the stream of a
  ``logging.StreamHandler`` (or any code that writes formatted lines) and each
  line is parsed back into ``ts``, ``caller`` and ``msg`` key-values and sent
  to a kvlog logger.
- `StdlibHandler` is a ``logging.Handler`` that turns ``LogRecord`` objects
  into key-values directly, without a text round-trip.

The reverse direction (kvlog output into ``logging``) lives in
``kvlog.plugins.sinks.stdlib.StdlibWriter``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Pattern

from pydantic import BaseModel, ConfigDict, Field

from ..plugins.utils import parse_plugin_config
from . import levels
from .logger import Logger

_DATE = r"(?P<date>[0-9]{4}[/-][0-9]{2}[/-][0-9]{2})?[ ]?"
_TIME = r"(?P<time>[0-9]{2}:[0-9]{2}:[0-9]{2}([.,][0-9]+)?)?[ ]?"
_FILE = r"(?P<file>.+?:[0-9]+)?"
_MSG = r"(: )?(?P<msg>(?s:.*))"


@dataclass(frozen=True)
class StdlibPattern:
    """Compiled line pattern with optional ``date``, ``time``, ``file`` and ``msg`` groups."""

    regex: Pattern[str]

    def parse(self, line: str) -> dict[str, str]:
        match = self.regex.match(line)
        if match is None:
            return {}
        return {
            name: value.rstrip("\n")
            for name, value in match.groupdict(default="").items()
        }


# Date, time, caller (``file:line``) and message
PATTERN_FULL = StdlibPattern(re.compile(_DATE + _TIME + _FILE + _MSG))
# Date, time and message; a leading ``file:line`` stays in the message
PATTERN_DEFAULT = StdlibPattern(re.compile(_DATE + _TIME + _MSG))


class StdlibAdapterConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp_key: str = Field(default="ts")
    file_key: str = Field(default="caller")
    message_key: str = Field(default="msg")
    prefix: str = Field(
        default="",
        description="Prefix the producing formatter puts before every line",
    )
    join_prefix_to_msg: bool = Field(
        default=False,
        description="Keep the prefix at the start of the message value",
    )


class StdlibAdapter:
    """Text stream that parses standard log lines into kvlog records.

    Example:
        >>> handler = logging.StreamHandler(StdlibAdapter(kv_logger))
        >>> handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
        >>> logging.getLogger().addHandler(handler)
    """

    def __init__(
        self,
        logger: Logger,
        *,
        pattern: StdlibPattern | None = None,
        config: StdlibAdapterConfig | dict | None = None,
        **kwargs: Any,
    ) -> None:
        self._logger = logger
        self._pattern = pattern or PATTERN_FULL
        self._config = parse_plugin_config(StdlibAdapterConfig, config, **kwargs)

    @property
    def config(self) -> StdlibAdapterConfig:
        return self._config

    def write(self, line: str | bytes) -> int:
        text = line.decode("utf-8", errors="replace") if isinstance(line, (bytes, bytearray)) else line
        cfg = self._config
        if cfg.prefix and text.startswith(cfg.prefix):
            text = text[len(cfg.prefix) :]

        parts = self._pattern.parse(text)
        keyvals: list[Any] = []
        stamp = " ".join(p for p in (parts.get("date", ""), parts.get("time", "")) if p)
        if stamp:
            keyvals.extend((cfg.timestamp_key, stamp))
        if parts.get("file"):
            keyvals.extend((cfg.file_key, parts["file"]))
        if "msg" in parts:
            keyvals.extend((cfg.message_key, self._message(parts["msg"])))
        self._logger.log(*keyvals)
        return len(line)

    def _message(self, msg: str) -> str:
        prefix = self._config.prefix
        if not prefix:
            return msg
        if msg.startswith(prefix):
            msg = msg[len(prefix) :]
        if self._config.join_prefix_to_msg:
            msg = prefix + msg
        return msg

    def flush(self) -> None:
        return None

    def writable(self) -> bool:
        return True


# Attributes every LogRecord carries; anything else arrived through ``extra=``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def _level_for(levelno: int) -> levels.LevelValue:
    if levelno >= logging.ERROR:
        return levels.ERROR
    if levelno >= logging.WARNING:
        return levels.WARN
    if levelno >= logging.INFO:
        return levels.INFO
    return levels.DEBUG


class StdlibHandler(logging.Handler):
    """``logging.Handler`` that forwards records to a kvlog logger.

    Each record becomes ``ts``, ``level``, ``logger``, ``caller`` and ``msg``
    pairs followed by any ``extra`` fields and, when an exception is attached,
    ``error.type`` and ``error.message``. Records from kvlog's own loggers are
    ignored so a bridged ``StdlibWriter`` cannot loop.
    """

    def __init__(self, logger: Logger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == "kvlog" or record.name.startswith("kvlog."):
            return
        try:
            keyvals: list[Any] = [
                "ts",
                datetime.fromtimestamp(record.created, tz=timezone.utc),
                levels.KEY,
                _level_for(record.levelno),
                "logger",
                record.name,
                "caller",
                f"{record.filename}:{record.lineno}",
                "msg",
                record.getMessage(),
            ]
            for key, value in record.__dict__.items():
                if key not in _RECORD_ATTRS and not key.startswith("_"):
                    keyvals.extend((key, value))
            if record.exc_info and record.exc_info[1] is not None:
                exc = record.exc_info[1]
                keyvals.extend(
                    ("error.type", type(exc).__name__, "error.message", str(exc))
                )
            self._logger.log(*keyvals)
        except Exception:
            self.handleError(record)


def enable_stdlib_bridge(
    logger: Logger,
    *,
    level: int = logging.INFO,
    remove_existing_handlers: bool = False,
    logger_name: str | None = None,
) -> StdlibHandler:
    """Attach a `StdlibHandler` to a standard logger (the root by default).

    Returns the installed handler so callers can remove it again.
    """
    target = logging.getLogger(logger_name)
    if remove_existing_handlers:
        for existing in list(target.handlers):
            target.removeHandler(existing)
    handler = StdlibHandler(logger, level=level)
    target.addHandler(handler)
    if target.level == logging.NOTSET or target.level > level:
        target.setLevel(level)
    return handler


__all__ = [
    "StdlibPattern",
    "PATTERN_FULL",
    "PATTERN_DEFAULT",
    "StdlibAdapterConfig",
    "StdlibAdapter",
    "StdlibHandler",
    "enable_stdlib_bridge",
]
