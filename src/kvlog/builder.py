"""Pipeline assembly and the fluent builder API for configuring loggers.

A built pipeline, from the outside in:

    bound context (ts, caller, logger name)
      -> LevelFilter (core.log_level)
      -> format logger (logfmt | json)
      -> LineBufferedWriter (optional)
      -> sink (stdout by default)
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

from .context import (
    DEFAULT_CALLER,
    DEFAULT_TIMESTAMP,
    DEFAULT_TIMESTAMP_UTC,
    with_,
)
from .core import shutdown
from .core.logger import Logger
from .core.settings import Settings
from .core.writer import LineBufferedWriter, Sink
from .metrics.metrics import MetricsCollector
from .plugins.encoders import get_encoder
from .plugins.filters.level import LevelFilter
from .plugins.sinks.stdout import StdoutSink


@dataclass
class BuiltLogger:
    """A built pipeline: the logger to log through and the writer behind it.

    ``writer`` is None when buffering is disabled. Closing flushes what the
    writer still holds; the sink itself is left open.
    """

    logger: Logger
    writer: LineBufferedWriter | None = None
    metrics: MetricsCollector | None = None

    def flush(self) -> None:
        if self.writer is not None:
            self.writer.flush()

    def close(self) -> None:
        if self.writer is not None:
            shutdown.unregister_writer(self.writer)
            self.writer.close()

    def __enter__(self) -> BuiltLogger:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()


def build_logger(
    settings: Settings | None = None,
    *,
    sink: Sink | None = None,
    name: str | None = None,
    metrics: MetricsCollector | None = None,
) -> BuiltLogger:
    """Assemble a logger pipeline from settings.

    Args:
        settings: Configuration; read from the environment when omitted
        sink: Byte destination; standard output when omitted
        name: Bound as ``logger=<name>`` on every record when given
        metrics: Collector for writer metrics; created from
            ``core.enable_metrics`` when omitted

    Raises:
        ConfigurationError: For invalid buffer or format settings
    """
    cfg = settings or Settings()
    core = cfg.core
    if metrics is None and core.enable_metrics:
        metrics = MetricsCollector(enabled=True)

    target: Sink = sink if sink is not None else StdoutSink()
    writer: LineBufferedWriter | None = None
    if cfg.buffer.enabled:
        writer = LineBufferedWriter(
            target,
            config=cfg.buffer.to_config(),
            metrics=metrics,
        )
        shutdown.register_writer(writer)
        target = writer

    logger: Logger = get_encoder(core.format)(target)
    logger = LevelFilter(logger, allow=core.log_level.lower())

    bound: list[Any] = [
        "ts",
        DEFAULT_TIMESTAMP_UTC if core.timestamp_utc else DEFAULT_TIMESTAMP,
    ]
    if core.include_caller:
        bound.extend(("caller", DEFAULT_CALLER))
    if name:
        bound.extend(("logger", name))
    logger = with_(logger, *bound)
    return BuiltLogger(logger=logger, writer=writer, metrics=metrics)


class LoggerBuilder:
    """Fluent builder for configuring loggers.

    Builder accumulates Settings-compatible configuration and creates
    a pipeline via build_logger() on build().
    """

    def __init__(self) -> None:
        self._config: dict[str, Any] = {}
        self._name: str | None = None
        self._sink: Sink | None = None
        self._metrics: MetricsCollector | None = None

    def with_name(self, name: str) -> LoggerBuilder:
        """Set logger name."""
        self._name = name
        return self

    def with_level(self, level: str) -> LoggerBuilder:
        """Set minimum level (DEBUG, INFO, WARN, ERROR)."""
        self._config.setdefault("core", {})["log_level"] = level.upper()
        return self

    def with_format(self, format: str) -> LoggerBuilder:
        """Set line format ("logfmt" or "json")."""
        self._config.setdefault("core", {})["format"] = format
        return self

    def with_caller(self, enabled: bool = True) -> LoggerBuilder:
        self._config.setdefault("core", {})["include_caller"] = enabled
        return self

    def with_buffer(
        self,
        capacity: int,
        *,
        flush_period_seconds: float | None = None,
    ) -> LoggerBuilder:
        """Buffer lines, flushing every ``capacity`` entries.

        Args:
            capacity: Buffered entries that trigger a flush (>= 1)
            flush_period_seconds: Timer flush period; 0 disables the timer
        """
        buffer = self._config.setdefault("buffer", {})
        buffer["enabled"] = True
        buffer["capacity"] = capacity
        if flush_period_seconds is not None:
            buffer["flush_period_seconds"] = flush_period_seconds
        return self

    def without_buffer(self) -> LoggerBuilder:
        """Write every record straight to the sink."""
        self._config.setdefault("buffer", {})["enabled"] = False
        return self

    def with_sink(self, sink: Sink) -> LoggerBuilder:
        self._sink = sink
        return self

    def with_metrics(
        self, collector: MetricsCollector | None = None
    ) -> LoggerBuilder:
        """Record writer metrics, in ``collector`` when given."""
        self._config.setdefault("core", {})["enable_metrics"] = True
        self._metrics = collector
        return self

    def build(self) -> BuiltLogger:
        """Build the pipeline.

        Raises:
            pydantic.ValidationError: For invalid accumulated settings
        """
        settings = Settings(**copy.deepcopy(self._config))
        return build_logger(
            settings,
            sink=self._sink,
            name=self._name,
            metrics=self._metrics,
        )


__all__ = ["BuiltLogger", "LoggerBuilder", "build_logger"]
