"""Textual integration for LiveJSON. Opt-in — requires textual.

File reloads are merged on the watcher thread, so document events may
arrive off the UI thread. bind() marshals them with call_from_thread,
drops them while the app is not running or paused, and ignores
NoMatches raised by widget queries made from the callback.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# Keyed by id(app) so several apps can be paused independently.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bound callbacks during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(app, stream, callback):
    """Subscribe callback to a document stream (on_change, on_propchange, ...).

    Returns the unsubscribe function.

    Usage:
        stx.bind(app, doc.on_propchange, lambda e: app.query_one(Status).update(e.fullname))
    """
    _main = threading.get_ident()

    def _guarded(event):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, event)
        else:
            _safe(event)

    def _safe(event):
        try:
            callback(event)
        except NoMatches:
            pass

    return stream.subscribe(_guarded)
