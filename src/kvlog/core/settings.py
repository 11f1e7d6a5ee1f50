"""
Configuration models for kvlog using Pydantic v2 Settings.

Settings are read from the environment with the ``KVLOG_`` prefix and ``__``
as the nested delimiter, e.g. ``KVLOG_CORE__LOG_LEVEL=DEBUG`` or
``KVLOG_BUFFER__CAPACITY=512``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

from .writer import LineBufferConfig

# Keep explicit version to allow schema gating and forward migrations later
LATEST_CONFIG_SCHEMA_VERSION = "1.0"


class CoreSettings(BaseModel):
    """Core logging settings.

    Keep this minimal and stable; buffering lives in `BufferSettings`.
    """

    app_name: str = Field(default="kvlog", description="Logical application name")
    log_level: Literal[
        "DEBUG",
        "INFO",
        "WARN",
        "ERROR",
    ] = Field(
        default="INFO",
        description="Minimum level passed by the default level filter",
    )
    format: Literal["logfmt", "json"] = Field(
        default="logfmt",
        description="Line encoding used by the default logger",
    )
    timestamp_utc: bool = Field(
        default=True,
        description="Bind timestamps in UTC instead of local time",
    )
    include_caller: bool = Field(
        default=True,
        description="Bind a caller=file:line field to every record",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible writer metrics",
    )
    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit diagnostics for internal errors to stderr",
    )
    atexit_drain_enabled: bool = Field(
        default=True,
        description="Flush and close registered writers at interpreter exit",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().upper()
            if value == "WARNING":
                return "WARN"
        return value

    @field_validator("app_name")
    @classmethod
    def _ensure_app_name_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("app_name must not be empty")
        return value


class BufferSettings(BaseModel):
    """Line buffering applied between the encoder and the sink."""

    enabled: bool = Field(
        default=True,
        description="Wrap the sink in a LineBufferedWriter",
    )
    capacity: int = Field(
        default=256,
        ge=1,
        description="Buffered entries that trigger an immediate flush",
    )
    flush_period_seconds: float = Field(
        default=0.25,
        ge=0.0,
        description="Maximum time an entry stays buffered; 0 disables the timer",
    )
    preallocated_bytes: int = Field(
        default=64 * 1024,
        ge=0,
        description="Initial size of the reusable line buffer",
    )

    def to_config(self) -> LineBufferConfig:
        return LineBufferConfig(
            capacity=self.capacity,
            flush_period_seconds=self.flush_period_seconds,
            preallocated_bytes=self.preallocated_bytes,
        )


class Settings(BaseSettings):
    """Top-level configuration model with versioning and namespaced groups."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    core: CoreSettings = Field(default_factory=CoreSettings)
    buffer: BufferSettings = Field(default_factory=BufferSettings)

    model_config = SettingsConfigDict(
        env_prefix="KVLOG_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_json(self) -> str:
        import json

        return json.dumps(self.model_dump(by_alias=True, exclude_none=True))

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )
