"""
Plugin utilities for configuration parsing and name resolution.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import ConfigurationError

M = TypeVar("M", bound=BaseModel)


def parse_plugin_config(
    model: type[M],
    config: M | dict[str, Any] | None = None,
    **kwargs: Any,
) -> M:
    """Build a config model from a model instance, a dict and keyword overrides.

    Keyword overrides win over values in `config`. Validation failures are
    raised as `ConfigurationError` with the pydantic error chained.

    Args:
        model: Pydantic model class to instantiate
        config: Existing model instance, mapping, or None
        **kwargs: Field overrides

    Returns:
        Validated model instance
    """
    if isinstance(config, model) and not kwargs:
        return config
    data: dict[str, Any] = {}
    if isinstance(config, BaseModel):
        data.update(config.model_dump())
    elif isinstance(config, dict):
        data.update(config)
    elif config is not None:
        raise ConfigurationError(
            f"{model.__name__} config must be a {model.__name__} or dict, "
            f"got {type(config).__name__}",
            component_name=model.__name__,
        )
    data.update(kwargs)
    try:
        return model(**data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"invalid {model.__name__}: {exc.errors(include_url=False)}",
            cause=exc,
            component_name=model.__name__,
        ) from exc


def get_plugin_name(plugin: Any) -> str:
    """Get the canonical name of a plugin.

    Resolution order:
    1. plugin.name attribute (if non-empty string)
    2. Class name (fallback)
    """
    name = getattr(plugin, "name", None)
    if name and isinstance(name, str) and name.strip():
        result: str = name.strip()
        return result
    cls = plugin if isinstance(plugin, type) else plugin.__class__
    class_name: str = cls.__name__
    return class_name
