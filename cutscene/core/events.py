"""
Typed event bus for the dialog core.

Event types are Enum members so that publishers and subscribers agree on
names without magic strings. The presentation layer subscribes to
DialogEvent members and reacts to what the DialogManager publishes.

Usage:
    bus = EventBus()
    bus.subscribe(DialogEvent.ENTRY_SHOWN, on_entry_shown)
    bus.publish(DialogEvent.ENTRY_SHOWN, sequence=seq, entry=entry)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class DialogEvent(Enum):
    """Signals emitted by the dialog manager."""
    # Session
    DIALOG_STARTED = auto()      # sequence
    ENTRY_SHOWN = auto()         # sequence, entry
    DIALOG_ENDED = auto()        # sequence_id

    # Collaborators
    SEQUENCE_REQUESTED = auto()  # sequence_id (fetch from the remote peer)
    COMMAND_ISSUED = auto()      # command
    MESSAGE = auto()             # key, args, error

    # Registry
    REGISTRY_LOADED = auto()     # loaded, failed


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Keyword data passed to publish()
        consumed: Set by a handler to stop propagation
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub.

    Features:
    - Priority ordering (higher first, FIFO among equals)
    - Optional weak references so dead listeners drop out on their own
    - One-shot handlers
    - Consumption stops propagation
    - Events published from inside a handler are queued until the
      current dispatch finishes, so listeners always observe them in order
    """

    def __init__(self):
        self._handlers: dict[Enum, list[tuple[int, Any, bool]]] = {}
        self._queue: list[Event] = []
        self._dispatching = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first
            one_shot: Remove the handler after its first call
            weak: Hold the handler by weak reference
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            handler_ref = handler

        handlers = self._handlers.setdefault(event_type, [])
        insert_idx = len(handlers)
        for i, (p, _, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break
        handlers.insert(insert_idx, (priority, handler_ref, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        self._handlers[event_type] = [
            entry for entry in handlers
            if self._resolve(entry[1]) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        if self._dispatching:
            self._queue.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop handlers for one event type, or for all of them."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        self._dispatching = True
        try:
            self._deliver(event)
            while self._queue:
                self._deliver(self._queue.pop(0))
        finally:
            self._dispatching = False

    def _deliver(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if not handlers:
            return

        stale = []
        for entry in list(handlers):
            # Handlers unsubscribed earlier in this dispatch are skipped
            if not self._is_subscribed(event.type, entry):
                continue
            _, handler_ref, one_shot = entry
            handler = self._resolve(handler_ref)
            if handler is None:
                stale.append(entry)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.type}")

            if one_shot:
                stale.append(entry)
            if event.consumed:
                break

        # Filter the live list: handlers may have (un)subscribed during dispatch
        current = self._handlers.get(event.type)
        if stale and current is not None:
            self._handlers[event.type] = [
                e for e in current if not any(e is s for s in stale)
            ]

    def _is_subscribed(self, event_type: Enum, entry: tuple[int, Any, bool]) -> bool:
        return any(e is entry for e in self._handlers.get(event_type, ()))

    @staticmethod
    def _resolve(handler_ref: Any) -> EventHandler | None:
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
