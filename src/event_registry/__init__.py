"""Top-level package for event-registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import load_config
    from .exceptions import (
        ConfigValidationError,
        EventRegistryError,
        InvalidListenerError,
    )
    from .logging_utils import configure_logging
    from .registry import EventRegistry, Subscription

__all__ = [
    "ConfigValidationError",
    "EventRegistry",
    "EventRegistryError",
    "InvalidListenerError",
    "Subscription",
    "configure_logging",
    "load_config",
]


def __getattr__(name: str) -> Any:
    """Lazily import symbols so importing the registry does not pull in pydantic."""
    if name in {"EventRegistry", "Subscription"}:
        from .registry import EventRegistry, Subscription

        return {"EventRegistry": EventRegistry, "Subscription": Subscription}[name]
    if name in {"ConfigValidationError", "EventRegistryError", "InvalidListenerError"}:
        from .exceptions import (
            ConfigValidationError,
            EventRegistryError,
            InvalidListenerError,
        )

        return {
            "ConfigValidationError": ConfigValidationError,
            "EventRegistryError": EventRegistryError,
            "InvalidListenerError": InvalidListenerError,
        }[name]
    if name == "load_config":
        from .config import load_config

        return load_config
    if name == "configure_logging":
        from .logging_utils import configure_logging

        return configure_logging
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
