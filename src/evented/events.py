"""Synchronous in-process publish/subscribe primitive.

Usage:
    source = Evented()
    sink = Evented()
    source.set_evented_parent(sink, {"layer": "roads"})

    def on_data(event):
        print(event.type, event.target, event.layer, event["tiles"])

    sink.on("data", on_data)
    source.fire(Event("data", {"tiles": 4}))

Listeners run to completion, one after another, inside the ``fire`` call.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
import logging
from types import MappingProxyType
from typing import Any

from .exceptions import ListenerError

LOGGER = logging.getLogger(__name__)

Listener = Callable[["Event"], Any]
ParentData = Mapping[str, Any] | Callable[[], Any] | None

# Keys owned by the event itself; payload entries with these names stay
# reachable through ``Event.payload`` only.
_RESERVED_KEYS = ("type", "target")


class ListenerErrorPolicy(str, Enum):
    """What ``fire`` does when a listener raises."""

    LOG = "log"
    RAISE = "raise"


class Event:
    """Immutable notification carrying a type tag and a payload.

    Payload fields read as attributes or keys. ``type`` and ``target`` are
    keys as well, so a listener can treat the event as the merged payload.
    ``target`` is ``None`` until a node dispatches the event. The only public
    attributes are ``type``, ``target`` and ``payload``; a payload field named
    ``payload`` is read by key.
    """

    __slots__ = ("_type", "_payload", "_target")

    def __init__(self, type: str, payload: Mapping[str, Any] | None = None) -> None:
        if not isinstance(type, str):
            raise TypeError("Event type must be a string.")
        object.__setattr__(self, "_type", type)
        object.__setattr__(self, "_payload", MappingProxyType(dict(payload or {})))
        object.__setattr__(self, "_target", None)

    @property
    def type(self) -> str:
        return self._type

    @property
    def payload(self) -> Mapping[str, Any]:
        return self._payload

    @property
    def target(self) -> Evented | None:
        return self._target

    def _with_target(self, target: Evented) -> Event:
        return self._replace(self._payload, target)

    def _derive(self, extra: Mapping[str, Any]) -> Event:
        # type and target carry over unchanged
        payload = dict(self._payload)
        if extra:
            payload.update(extra)
        return self._replace(MappingProxyType(payload), self._target)

    def _replace(self, payload: Mapping[str, Any], target: Evented | None) -> Event:
        clone = object.__new__(type(self))
        object.__setattr__(clone, "_type", self._type)
        object.__setattr__(clone, "_payload", payload)
        object.__setattr__(clone, "_target", target)
        return clone

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._payload[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!s} {self._type!r} has no field {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __getitem__(self, key: str) -> Any:
        if key == "type":
            return self._type
        if key == "target":
            return self._target
        return self._payload[key]

    def __contains__(self, key: object) -> bool:
        return key in _RESERVED_KEYS or key in self._payload

    def __iter__(self) -> Iterator[str]:
        yield from _RESERVED_KEYS
        for key in self._payload:
            if key not in _RESERVED_KEYS:
                yield key

    def __len__(self) -> int:
        return len(_RESERVED_KEYS) + sum(
            1 for key in self._payload if key not in _RESERVED_KEYS
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self._type!r}, payload={dict(self._payload)!r})"


class ErrorEvent(Event):
    """Event of type ``"error"`` carrying an exception under ``error``."""

    __slots__ = ()

    def __init__(
        self, error: BaseException, payload: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("error", {**(payload or {}), "error": error})


@dataclass(eq=False)
class _ListenerEntry:
    listener: Listener
    once: bool
    removed: bool = False


class Evented:
    """Registry of listeners keyed by event type, with an optional parent.

    Events fired on a node reach its own listeners first and are then
    forwarded to the parent, merged with the parent data, keeping the
    original ``target``.
    """

    listener_errors: ListenerErrorPolicy = ListenerErrorPolicy.LOG
    log_unhandled_errors: bool = True

    def __init__(self) -> None:
        self._listeners: dict[str, list[_ListenerEntry]] = {}
        self._evented_parent: Evented | None = None
        self._evented_parent_data: ParentData = None

    @property
    def evented_parent(self) -> Evented | None:
        return self._evented_parent

    def on(self, type: str, listener: Listener) -> Evented:
        """Register ``listener`` for ``type``. Registering it again is a no-op."""
        self._add_listener(type, listener, once=False)
        return self

    def once(self, type: str, listener: Listener) -> Evented:
        """Register ``listener`` to run on the next ``type`` event only."""
        self._add_listener(type, listener, once=True)
        return self

    def off(self, type: str, listener: Listener) -> None:
        """Remove every registration of ``listener`` for ``type``."""
        entries = self._listeners.get(type)
        if not entries:
            return
        remaining: list[_ListenerEntry] = []
        for entry in entries:
            if entry.listener == listener:
                entry.removed = True
            else:
                remaining.append(entry)
        if len(remaining) == len(entries):
            return
        if remaining:
            entries[:] = remaining
        else:
            del self._listeners[type]
        LOGGER.debug(
            "events.listener.removed",
            extra={"event": "events.listener.removed", "event_type": type},
        )

    def listens(self, type: str) -> bool:
        """Return True if this node or any ancestor has a listener for ``type``."""
        if self._listeners.get(type):
            return True
        parent = self._evented_parent
        return parent is not None and parent.listens(type)

    def fire(
        self, event: Event | str, payload: Mapping[str, Any] | None = None
    ) -> Evented:
        """Dispatch ``event`` to local listeners, then up the parent chain.

        ``fire("type", {...})`` is shorthand for ``fire(Event("type", {...}))``.
        """
        if isinstance(event, str):
            event = Event(event, payload)
        elif payload is not None:
            raise TypeError("payload is only accepted together with a type string.")

        bound = event._with_target(self)
        if (
            isinstance(bound, ErrorEvent)
            and self.log_unhandled_errors
            and not self.listens("error")
        ):
            error = bound.payload.get("error")
            LOGGER.error(
                "events.error.unhandled",
                exc_info=error if isinstance(error, BaseException) else None,
                extra={"event": "events.error.unhandled", "error": repr(error)},
            )
        self._propagate(bound)
        return self

    def set_evented_parent(
        self, parent: Evented | None, data: ParentData = None
    ) -> Evented:
        """Attach, replace or (with ``None``) clear the parent and its data.

        ``data`` is merged into every event forwarded to the parent. It may be
        a mapping or a zero-argument callable evaluated on each fire.
        """
        if parent is not None:
            ancestor: Evented | None = parent
            while ancestor is not None:
                if ancestor is self:
                    raise ValueError("Evented parent chain must not contain a cycle.")
                ancestor = ancestor._evented_parent
        self._evented_parent = parent
        self._evented_parent_data = data if parent is not None else None
        LOGGER.debug(
            "events.parent.changed",
            extra={"event": "events.parent.changed", "attached": parent is not None},
        )
        return self

    def _add_listener(self, type: str, listener: Listener, *, once: bool) -> None:
        if not callable(listener):
            raise TypeError("listener must be callable")
        entries = self._listeners.setdefault(type, [])
        for entry in entries:
            if entry.once is once and entry.listener == listener:
                return
        entries.append(_ListenerEntry(listener, once))
        LOGGER.debug(
            "events.listener.added",
            extra={"event": "events.listener.added", "event_type": type, "once": once},
        )

    def _propagate(self, event: Event) -> None:
        self._dispatch(event)
        parent = self._evented_parent
        if parent is not None:
            parent._propagate(event._derive(self._resolve_parent_data()))

    def _dispatch(self, event: Event) -> None:
        snapshot = tuple(self._listeners.get(event.type, ()))
        for entry in snapshot:
            # Removed since the snapshot, by ``off`` or by a nested fire that
            # already consumed a one-shot entry.
            if entry.removed:
                continue
            if entry.once:
                self._remove_entry(event.type, entry)
            self._call_listener(entry.listener, event)

    def _remove_entry(self, type: str, entry: _ListenerEntry) -> None:
        entries = self._listeners[type]
        entries.remove(entry)
        entry.removed = True
        if not entries:
            del self._listeners[type]

    def _call_listener(self, listener: Listener, event: Event) -> None:
        try:
            listener(event)
        except Exception as exc:
            if self.listener_errors == ListenerErrorPolicy.RAISE:
                if isinstance(exc, ListenerError):
                    raise
                raise ListenerError(event.type, listener) from exc
            LOGGER.exception(
                "events.listener.failed",
                extra={
                    "event": "events.listener.failed",
                    "event_type": event.type,
                    "error_type": type(exc).__name__,
                },
            )

    def _resolve_parent_data(self) -> Mapping[str, Any]:
        data = self._evented_parent_data
        if callable(data):
            data = data()
        # Values that are not mappings contribute no fields.
        if not isinstance(data, Mapping):
            return {}
        return data
