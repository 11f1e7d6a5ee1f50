from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from ...core import levels
from ...core.logger import Logger
from ..utils import parse_plugin_config


class LevelFilterConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    # Minimum level let through; None lets nothing through
    allow: str | None = "debug"
    squelch_no_level: bool = False

    @field_validator("allow", mode="before")
    @classmethod
    def _parse_allow(cls, value: object) -> object:
        if isinstance(value, levels.LevelValue):
            return value.name
        if isinstance(value, str):
            return levels.parse(value).name
        return value


class LevelFilter:
    """Drop records below a minimum level.

    The level is the first `LevelValue` found in a value position. Records
    without one pass unless ``squelch_no_level`` is set. Dropped records are
    silent by default; pass ``err_not_allowed`` / ``err_no_level`` to have
    those exceptions raised instead.
    """

    name = "level"

    def __init__(
        self,
        next_logger: Logger,
        *,
        config: LevelFilterConfig | dict | None = None,
        err_not_allowed: BaseException | None = None,
        err_no_level: BaseException | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(LevelFilterConfig, config, **kwargs)
        self._next = next_logger
        self._min_priority: int | None = (
            None if cfg.allow is None else levels.parse(cfg.allow).priority
        )
        self._squelch_no_level = cfg.squelch_no_level
        self._err_not_allowed = err_not_allowed
        self._err_no_level = err_no_level

    def allows(self, value: levels.LevelValue) -> bool:
        return self._min_priority is not None and value.priority >= self._min_priority

    def log(self, *keyvals: Any) -> None:
        value = levels.find_level(keyvals)
        if value is None:
            if self._squelch_no_level:
                if self._err_no_level is not None:
                    raise self._err_no_level
                return None
        elif not self.allows(value):
            if self._err_not_allowed is not None:
                raise self._err_not_allowed
            return None
        self._next.log(*keyvals)


class LevelInjector:
    """Prepend a default level to records that do not carry one."""

    name = "level-injector"

    def __init__(self, next_logger: Logger, level: levels.LevelValue) -> None:
        self._next = next_logger
        self._level = level

    def log(self, *keyvals: Any) -> None:
        if levels.find_level(keyvals) is not None:
            self._next.log(*keyvals)
            return None
        self._next.log(levels.KEY, self._level, *keyvals)
