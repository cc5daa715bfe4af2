"""Event registry for synchronous in-process publish/subscribe.

Usage:
    registry = EventRegistry()

    # Subscribe to events
    def on_file_saved(path):
        print(f"File saved: {path}")

    off = registry.on("file.saved", on_file_saved)
    registry.once("app.ready", lambda: print("ready"))

    # Emit events; listeners run before emit returns
    registry.emit("file.saved", "/path/to/file")

    # Detach a single registration
    off()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import inspect
import logging
import threading
from types import MethodType
from typing import Any

from .exceptions import InvalidListenerError

LOGGER = logging.getLogger(__name__)

Listener = Callable[..., Any]
Detach = Callable[[], None]


def _bind(listener: Listener, context: Any) -> Listener:
    """Return ``listener`` with ``context`` as its receiver, or unchanged."""
    if context is None or not callable(listener):
        return listener
    if inspect.ismethod(listener):
        # Rebind the underlying function instead of stacking receivers.
        listener = listener.__func__
    return MethodType(listener, context)


def _describe(listener: Any) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)


@dataclass(eq=False)
class Subscription:
    """One listener registration within a single event's sequence."""

    listener: Listener
    once: bool = False
    fired: bool = False
    source: Any = field(default=None, repr=False)
    context: Any = field(default=None, repr=False)
    detached: bool = field(default=False, repr=False)

    @property
    def retired(self) -> bool:
        """True for a one-shot that fired or was detached."""
        return self.once and self.fired

    def detach(self) -> None:
        """Retire this registration; the next emit on its event prunes it."""
        self.detached = True
        self.fired = True
        self.once = True


class EventRegistry:
    """Per-instance registry of named-event listeners.

    Listeners are delivered to synchronously, in registration order. Each
    registry owns its own mapping; there is no process-wide instance.
    """

    def __init__(
        self,
        *,
        validate_listeners: bool = True,
        isolate_listener_errors: bool = False,
        dedupe_listeners: bool = False,
    ) -> None:
        self._subscriptions: dict[str, list[Subscription]] = {}
        self._lock = threading.Lock()
        self._validate_listeners = validate_listeners
        self._isolate_listener_errors = isolate_listener_errors
        self._dedupe_listeners = dedupe_listeners

    @classmethod
    def from_config(cls, registry_config: dict[str, Any] | None = None) -> EventRegistry:
        """Build a registry from the ``registry`` section of a loaded config."""
        section = registry_config or {}
        return cls(
            validate_listeners=bool(section.get("validate_listeners", True)),
            isolate_listener_errors=bool(section.get("isolate_listener_errors", False)),
            dedupe_listeners=bool(section.get("dedupe_listeners", False)),
        )

    def on(self, event: str, listener: Listener, context: Any = None) -> Detach:
        """Subscribe a continuous listener.

        Args:
            event: Event name to listen for (e.g., "file.saved")
            listener: Callable receiving the positional args passed to emit
            context: Optional receiver bound as the listener's first argument

        Returns:
            A zero-argument callable that detaches this registration.
        """
        return self.subscribe(event, listener, False, context)

    def once(self, event: str, listener: Listener, context: Any = None) -> None:
        """Subscribe a listener that is invoked on the next emit only.

        No detach handle is returned; ``clear`` is the only way to remove
        a one-shot registration before it fires.
        """
        self.subscribe(event, listener, True, context)

    def subscribe(
        self,
        event: str,
        listener: Listener,
        once: bool = False,
        context: Any = None,
    ) -> Detach:
        """Append a subscription for ``event`` and return its detach handle.

        Args:
            event: Event name; any string, including "", is a valid key
            listener: Callable to invoke on emit
            once: Retire the subscription after its first invocation
            context: Optional receiver bound as the listener's first argument

        Raises:
            InvalidListenerError: ``listener`` is not callable and listener
                validation is enabled.
        """
        if self._validate_listeners and not callable(listener):
            raise InvalidListenerError(
                f"Listener for event {event!r} must be callable, "
                f"got {type(listener).__name__}."
            )
        once = bool(once)

        with self._lock:
            group = self._subscriptions.setdefault(event, [])
            if self._dedupe_listeners:
                for existing in group:
                    if (
                        existing.source is listener
                        and existing.context is context
                        and existing.once == once
                        and not existing.retired
                    ):
                        return existing.detach

            subscription = Subscription(
                listener=_bind(listener, context),
                once=once,
                source=listener,
                context=context,
            )
            group.append(subscription)

        LOGGER.debug(
            "registry.subscribe",
            extra={
                "event": "registry.subscribe",
                "event_name": event,
                "listener": _describe(listener),
                "once": once,
            },
        )
        return subscription.detach

    def emit(self, event: str, *args: Any) -> None:
        """Invoke every eligible listener for ``event`` with ``args``.

        The pass visits a snapshot of the sequence taken on entry, so
        subscriptions added by listeners only take part in later emits.
        A listener exception propagates and aborts the rest of the pass
        unless listener error isolation is enabled; a one-shot whose
        listener raised that way stays active for the next emit.
        """
        with self._lock:
            current = self._subscriptions.get(event)
            if current is None:
                return
            snapshot = list(current)

        try:
            for subscription in snapshot:
                if not self._claim(subscription):
                    continue
                claimed_once = subscription.once
                try:
                    subscription.listener(*args)
                except Exception:
                    if not self._isolate_listener_errors:
                        if claimed_once:
                            self._release(subscription)
                        raise
                    LOGGER.exception(
                        "registry.listener.failed",
                        extra={
                            "event": "registry.listener.failed",
                            "event_name": event,
                            "listener": _describe(subscription.source),
                        },
                    )
                subscription.fired = True
        finally:
            self._retain(event)

    def clear(self, event: str | None = None) -> None:
        """Remove subscriptions.

        Args:
            event: Event whose entry is deleted from the registry; None or
                "" empties every event's sequence while keeping its key
        """
        with self._lock:
            if event:
                group = self._subscriptions.pop(event, None) or []
                self._retire_all(group)
            else:
                for group in self._subscriptions.values():
                    self._retire_all(group)
                    group.clear()
        LOGGER.debug(
            "registry.clear",
            extra={"event": "registry.clear", "event_name": event},
        )

    def event_names(self) -> list[str]:
        """Return the event names that currently have an entry."""
        with self._lock:
            return list(self._subscriptions)

    def listener_count(self, event: str) -> int:
        """Return the number of records held for ``event``."""
        with self._lock:
            return len(self._subscriptions.get(event, ()))

    def __contains__(self, event: object) -> bool:
        with self._lock:
            return event in self._subscriptions

    def _claim(self, subscription: Subscription) -> bool:
        """Decide whether ``subscription`` runs now; one-shots fire at most once."""
        with self._lock:
            if subscription.once:
                if subscription.fired:
                    return False
                subscription.fired = True
            return True

    def _release(self, subscription: Subscription) -> None:
        """Undo a one-shot claim whose listener raised."""
        with self._lock:
            if not subscription.detached:
                subscription.fired = False

    def _retain(self, event: str) -> None:
        with self._lock:
            live = self._subscriptions.get(event)
            if live is None:
                return
            retained = [s for s in live if not s.retired]
            if retained:
                self._subscriptions[event] = retained
                return
            del self._subscriptions[event]
        LOGGER.debug(
            "registry.event.removed",
            extra={"event": "registry.event.removed", "event_name": event},
        )

    @staticmethod
    def _retire_all(group: list[Subscription]) -> None:
        # Cleared records may still sit in an in-flight emit snapshot.
        for subscription in group:
            subscription.detach()
