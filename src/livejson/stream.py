"""Synchronous event streams — the registration points of a document.

Each stream delivers to its subscribers in registration order, on the
thread that emitted. debounce() derives a stream that only emits the last
value of a burst, which is how file-change signals are coalesced.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Disposer = Callable[[], None]


class EventStream(Generic[T]):
    """Push-based event stream.

    With ``replay=True``, values emitted while nobody is subscribed are
    kept and handed to the first subscriber. Documents use this for errors
    raised during construction, before any handler could be attached.
    """

    def __init__(self, *, replay: bool = False) -> None:
        self._subscribers: list[Callable[[T], None]] = []
        self._children: list[EventStream] = []
        self._disposed = False
        self._parent_disposer: Disposer | None = None
        self._on_dispose: Disposer | None = None
        self._replay = replay
        self._backlog: list[T] = []

    @property
    def has_subscribers(self) -> bool:
        return bool(self._subscribers)

    def emit(self, value: T) -> None:
        """Push a value to all subscribers."""
        if self._disposed:
            return
        if not self._subscribers and self._replay:
            self._backlog.append(value)
            return
        # Copy: a subscriber may unsubscribe itself while being called.
        for cb in list(self._subscribers):
            cb(value)

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        self._subscribers.append(callback)
        backlog, self._backlog = self._backlog, []
        for value in backlog:
            callback(value)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def debounce(self, seconds: float) -> EventStream[T]:
        """Coalesce rapid events: emit once the source has been quiet for ``seconds``.

        Uses threading.Timer (daemon=True). Each new event cancels the
        previous timer, so only the last event in a burst fires.
        """
        child: EventStream[T] = EventStream()
        child._parent_disposer = self._track_child(child)
        timer_lock = threading.Lock()
        timer_ref: list[threading.Timer | None] = [None]

        def _on_event(value: T) -> None:
            with timer_lock:
                if timer_ref[0] is not None:
                    timer_ref[0].cancel()
                t = threading.Timer(seconds, child.emit, args=[value])
                t.daemon = True
                timer_ref[0] = t
                t.start()

        unsubscribe = self.subscribe(_on_event)

        def _cancel() -> None:
            unsubscribe()
            with timer_lock:
                if timer_ref[0] is not None:
                    timer_ref[0].cancel()
                    timer_ref[0] = None

        child._on_dispose = _cancel
        return child

    def dispose(self) -> None:
        """Tear down this stream and all downstream children."""
        self._disposed = True
        self._subscribers.clear()
        self._backlog.clear()
        for child in list(self._children):
            child.dispose()
        self._children.clear()
        if self._on_dispose is not None:
            self._on_dispose()
            self._on_dispose = None
        if self._parent_disposer is not None:
            self._parent_disposer()
            self._parent_disposer = None

    def _track_child(self, child: EventStream) -> Disposer:
        """Register child for dispose propagation. Returns a disposer that removes it."""
        self._children.append(child)

        def _remove() -> None:
            try:
                self._children.remove(child)
            except ValueError:
                pass

        return _remove
