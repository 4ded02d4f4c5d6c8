"""Pub/sub trigger bus for the luahint runtime."""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import Any

EventHandler = Callable[[Any], None]


class Registration:
    """Handle for one handler bound to one or more topics."""

    def __init__(self, bus: EventBus, topics: tuple[str, ...], handler: EventHandler) -> None:
        self._bus = bus
        self.topics = topics
        self._handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        for topic in self.topics:
            self._bus.unsubscribe(topic, self._handler)


class EventBus:
    """Minimal event bus; handlers run on the emitting thread."""

    def __init__(self) -> None:
        self._subscribers: defaultdict[str, list[EventHandler]] = defaultdict(list)
        self._lock = threading.RLock()

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        with self._lock:
            if handler not in self._subscribers[topic]:
                self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        with self._lock:
            if handler in self._subscribers[topic]:
                self._subscribers[topic].remove(handler)

    def register(
        self,
        topics: str | Iterable[str],
        handler: EventHandler,
        *,
        document_id: int | None = None,
    ) -> Registration:
        """Bind ``handler`` to every topic and return a cancellable handle.

        With ``document_id`` set, only payloads whose ``document`` carries that
        id reach the handler.
        """

        names = (topics,) if isinstance(topics, str) else tuple(dict.fromkeys(topics))

        if document_id is None:
            bound = handler
        else:

            def bound(payload: Any) -> None:
                document = getattr(payload, "document", None)
                if document is not None and document.id == document_id:
                    handler(payload)

        registration: Registration | None = None

        # One callable per registration. A cancelled handle stays silent even
        # inside an emit that already snapshotted it.
        def dispatch(payload: Any) -> None:
            if registration is not None and registration.active:
                bound(payload)

        registration = Registration(self, names, dispatch)
        for topic in names:
            self.subscribe(topic, dispatch)
        return registration

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, ()))

    def emit(self, topic: str, payload: Any) -> None:
        with self._lock:
            handlers = list(self._subscribers.get(topic, ()))
        for handler in handlers:
            handler(payload)
