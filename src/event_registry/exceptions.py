"""Domain exception hierarchy for the event registry."""

from __future__ import annotations


class EventRegistryError(RuntimeError):
    """Base class for all event registry errors."""


class InvalidListenerError(EventRegistryError, TypeError):
    """Raised when a non-callable value is registered as a listener."""


class ConfigValidationError(EventRegistryError):
    """Raised when configuration cannot be validated safely."""
