"""Exception hierarchy for the evented dispatch primitive."""

from __future__ import annotations

from typing import Any


class EventedError(RuntimeError):
    """Base class for all evented errors."""


class ListenerError(EventedError):
    """Raised when a listener fails under the ``raise`` error policy."""

    def __init__(self, event_type: str, listener: Any) -> None:
        name = getattr(listener, "__qualname__", None) or repr(listener)
        super().__init__(f"Listener {name} failed for event {event_type!r}")
        self.event_type = event_type
        self.listener = listener


class ConfigValidationError(EventedError):
    """Raised when configuration cannot be validated safely."""
