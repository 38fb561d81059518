"""Subscription-based event bus for transport and session events.

Every `subscribe()` returns a handle; whoever subscribed is responsible
for passing that handle to `release()` when it is torn down.
"""

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable


class EventKind(str, Enum):
    """Events published on an EventBus."""
    TRACK_SUBSCRIBED = "track_subscribed"
    TRACK_UNSUBSCRIBED = "track_unsubscribed"
    ACTIVE_SPEAKERS_CHANGED = "active_speakers_changed"
    DISCONNECTED = "disconnected"
    STATE_CHANGED = "state_changed"


@dataclass(frozen=True)
class SubscriptionHandle:
    """Token identifying one registered handler."""
    kind: EventKind
    id: int


class EventBus:
    """Dispatches events to handlers registered per event kind."""

    def __init__(self):
        self._handlers: dict[EventKind, dict[int, Callable[..., Any]]] = {}
        self._ids = itertools.count(1)

    def subscribe(self, kind: EventKind, handler: Callable[..., Any]) -> SubscriptionHandle:
        """Register `handler` for `kind` and return the handle that releases it."""
        handle = SubscriptionHandle(kind=EventKind(kind), id=next(self._ids))
        self._handlers.setdefault(handle.kind, {})[handle.id] = handler
        return handle

    def subscribe_many(self, handlers: dict[EventKind, Callable[..., Any]]) -> list[SubscriptionHandle]:
        """Subscribe several handlers at once, returning their handles."""
        return [self.subscribe(kind, handler) for kind, handler in handlers.items()]

    def release(self, handle: SubscriptionHandle) -> bool:
        """Unregister a handler. Returns False if it was already released."""
        handlers = self._handlers.get(handle.kind, {})
        return handlers.pop(handle.id, None) is not None

    def release_all(self, handles: list[SubscriptionHandle]) -> None:
        for handle in handles:
            self.release(handle)
        handles.clear()

    def emit(self, kind: EventKind, *args: Any) -> int:
        """Call every handler for `kind` with `args`; returns how many ran."""
        handlers = list(self._handlers.get(EventKind(kind), {}).values())
        for handler in handlers:
            handler(*args)
        return len(handlers)

    def handler_count(self, kind: EventKind | None = None) -> int:
        if kind is None:
            return sum(len(h) for h in self._handlers.values())
        return len(self._handlers.get(EventKind(kind), {}))
