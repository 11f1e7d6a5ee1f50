from __future__ import annotations

from typing import Callable

from ...core.errors import ConfigurationError
from ...core.logger import Logger
from ...core.writer import Sink
from .jsonl import JSONLogger
from .logfmt import LogfmtLogger

_ENCODERS: dict[str, Callable[[Sink], Logger]] = {
    "logfmt": LogfmtLogger,
    "json": JSONLogger,
}


def get_encoder(name: str) -> Callable[[Sink], Logger]:
    """Return the format logger factory registered under ``name``."""
    try:
        return _ENCODERS[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"unknown log format {name!r}; expected one of {sorted(_ENCODERS)}",
            component_name="encoders",
        ) from None


__all__ = [
    "JSONLogger",
    "LogfmtLogger",
    "get_encoder",
]
