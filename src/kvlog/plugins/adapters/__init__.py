from __future__ import annotations

from .structlog_adapter import StructlogLogger

__all__ = ["StructlogLogger"]
