from __future__ import annotations

from .level import LevelFilter, LevelFilterConfig, LevelInjector

__all__ = [
    "LevelFilter",
    "LevelFilterConfig",
    "LevelInjector",
]
