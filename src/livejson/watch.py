"""watch() and watch_file(): background polling in managed daemon threads.

watch_file() polls a file's mtime and reports each change once the file
has been quiet for ``debounce`` seconds, so an editor's burst of writes
turns into a single reload. The callback runs on a background thread;
documents marshal it themselves (see Options.scheduler).
"""

from __future__ import annotations

import logging
import os
import threading
from threading import Thread
from typing import Callable

from livejson.filestore import stat_mtime
from livejson.stream import EventStream

logger = logging.getLogger("livejson.watch")


class WatchHandle:
    """Disposable handle for a managed daemon thread."""

    __slots__ = ("_stopped", "_on_dispose")

    def __init__(self):
        self._stopped = threading.Event()
        self._on_dispose: list[Callable[[], None]] = []

    @property
    def disposed(self) -> bool:
        return self._stopped.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to timeout seconds. Returns True once disposed."""
        return self._stopped.wait(timeout)

    def dispose(self) -> None:
        """Signal the thread to stop. Check .disposed in your loop."""
        if self._stopped.is_set():
            return
        self._stopped.set()
        for fn in self._on_dispose:
            fn()
        self._on_dispose.clear()


def watch(fn: Callable[[WatchHandle], None]) -> WatchHandle:
    """Run fn(handle) in a daemon thread. Returns the handle.

    Use handle.disposed (or handle.wait()) to exit long-running loops.
    """
    handle = WatchHandle()
    Thread(target=fn, args=(handle,), daemon=True).start()
    return handle


def watch_file(
    path: str | os.PathLike,
    callback: Callable[[int], None],
    *,
    interval: float = 0.5,
    debounce: float = 0.1,
    log: logging.Logger | None = None,
) -> WatchHandle:
    """Call callback(mtime_ns) whenever path is modified (or created).

    Usage:
        handle = watch_file("config.json", lambda mtime: doc.reload())
        ...
        handle.dispose()
    """
    log = log or logger
    signals: EventStream[int] = EventStream()
    out = signals.debounce(debounce) if debounce > 0 else signals

    def _deliver(mtime: int) -> None:
        try:
            callback(mtime)
        except Exception:
            log.exception("File watch callback failed for %s", path)

    out.subscribe(_deliver)
    last = stat_mtime(path)

    def _poll(handle: WatchHandle) -> None:
        nonlocal last
        log.debug("Watching %s every %.2fs", path, interval)
        while not handle.wait(interval):
            mtime = stat_mtime(path)
            if mtime is not None and (last is None or mtime > last):
                log.debug("Watch event: %s modified", path)
                last = mtime
                signals.emit(mtime)

    handle = watch(_poll)
    handle._on_dispose.append(signals.dispose)
    return handle
