"""Synchronous in-process publish/subscribe with parent propagation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .events import ErrorEvent, Event, Evented, ListenerErrorPolicy
from .exceptions import ConfigValidationError, EventedError, ListenerError

if TYPE_CHECKING:
    from .config import load_config
    from .runtime import configure

__all__ = [
    "ConfigValidationError",
    "ErrorEvent",
    "Event",
    "Evented",
    "EventedError",
    "ListenerError",
    "ListenerErrorPolicy",
    "configure",
    "load_config",
]


def __getattr__(name: str) -> Any:
    """Lazily import config helpers so the core stays free of their dependencies."""
    if name == "load_config":
        from .config import load_config

        return load_config
    if name == "configure":
        from .runtime import configure

        return configure
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
