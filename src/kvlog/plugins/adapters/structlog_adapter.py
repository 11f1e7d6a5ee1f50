"""Logger that sends records to a structlog bound logger.

Records whose first pair is the level key are dispatched to the matching
structlog method; everything else goes to the adapter's default level:

    import structlog
    from kvlog.plugins.adapters import StructlogLogger

    logger = StructlogLogger(structlog.get_logger(), default_level="info")
    levels.warn(logger).log("msg", "disk almost full", "free_mb", 120)
    # -> structlog: warning("disk almost full", free_mb=120)
"""

from __future__ import annotations

from typing import Any, Callable

from ...core import levels
from ...core.logger import pad_keyvals

_LEVEL_METHODS = {
    levels.DEBUG: "debug",
    levels.INFO: "info",
    levels.WARN: "warning",
    levels.ERROR: "error",
}

_DEFAULT_METHODS = {
    "debug": "debug",
    "info": "info",
    "warn": "warning",
    "warning": "warning",
    "error": "error",
    "critical": "critical",
    "fatal": "critical",
}


class StructlogLogger:
    """Adapter from the key-value Logger contract to a structlog logger.

    ``message_key`` names the pair used as the structlog event. A pair keyed
    ``event`` becomes the event when no message is present; otherwise it is
    passed on as ``_event`` since structlog reserves that name.
    """

    name = "structlog"

    def __init__(
        self,
        logger: Any,
        default_level: str = "info",
        *,
        message_key: str = "msg",
    ) -> None:
        self._logger = logger
        self._message_key = message_key
        self._default_method = _DEFAULT_METHODS.get(
            default_level.strip().lower(), "info"
        )

    def log(self, *keyvals: Any) -> None:
        if len(keyvals) <= 1:
            event = str(keyvals[0]) if keyvals else ""
            self._logger.info(event)
            return None
        method = self._default_method
        pairs: tuple[Any, ...] = keyvals
        if keyvals[0] == levels.KEY and isinstance(keyvals[1], levels.LevelValue):
            known = _LEVEL_METHODS.get(keyvals[1])
            if known is not None:
                method = known
                pairs = keyvals[2:]
        self._emit(method, pairs)

    def _emit(self, method: str, pairs: tuple[Any, ...]) -> None:
        kvs = pad_keyvals(pairs)
        fields = {str(kvs[i]): kvs[i + 1] for i in range(0, len(kvs), 2)}
        event = fields.pop(self._message_key, None)
        if "event" in fields:
            if event is None:
                event = fields.pop("event")
            else:
                fields["_event"] = fields.pop("event")
        emit: Callable[..., Any] = getattr(self._logger, method)
        emit("" if event is None else str(event), **fields)
