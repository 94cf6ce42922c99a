"""LiveJSON — an observable JSON document, optionally backed by a file.

The document owns one plain dict and hands out a live view of it. Writes
through the view and merges of external snapshots are reported through
the same two streams, with identical event fields; only ``external``
tells them apart.

With a file, every change is written back (autosave) and edits made to
the file by someone else are merged in (autoload) without discarding
unrelated in-memory state.
"""

from __future__ import annotations

import copy
import logging
import os
import threading
from typing import Callable

from livejson import filestore
from livejson._nodes import NodeKind, kind_of, same_value
from livejson.config import Options
from livejson.errors import InvalidDocumentError, LiveJSONError
from livejson.events import ChangeEvent, EventType, Notification, NotificationType
from livejson.merge import merge
from livejson.proxy import MappingView
from livejson.stream import Disposer, EventStream
from livejson.watch import WatchHandle, watch_file


class LiveJSON:
    """Observable JSON document.

    Usage:
        doc = LiveJSON({"user": "me", "tags": ["a"]}, "config.json")
        doc.on_propchange.subscribe(lambda e: print(e.fullname, e.value))
        doc.data.user = "you"        # prints: user you, saves the file
        doc.data.tags.append("b")    # prints: tags.1 b, saves once
        doc.close()
    """

    def __init__(
        self,
        data: dict | None = None,
        file: str | os.PathLike | None = None,
        options: Options | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._log = logger or logging.getLogger("livejson.document")
        options = options or Options()
        if options.verbosity is not None:
            self._log.setLevel(options.verbosity.level)
        if file is None:
            options = options.replace(autosave=False, autoload=False)
        self.options = options
        self.file = os.path.abspath(file) if file is not None else None
        self.lock = threading.RLock()

        self.on_change: EventStream[ChangeEvent] = EventStream()
        self.on_propchange: EventStream[ChangeEvent] = EventStream()
        self.on_error: EventStream[LiveJSONError] = EventStream(replay=True)

        data = {} if data is None else data
        if kind_of(data) is not NodeKind.MAPPING:
            raise InvalidDocumentError(f"a document must be a dict, not {type(data).__name__}")
        data = copy.deepcopy(data)

        self._last_mtime: int | None = None
        if self.file is not None and os.path.exists(self.file):
            try:
                filestore.check_access(self.file, writable=options.autosave)
                self._last_mtime = filestore.stat_mtime(self.file)
                # Contents of the file override the initial data
                data = filestore.read_document(self.file, options.encoding)
                self._log.info("Loaded %s", self.file)
            except LiveJSONError as err:
                self._error(err)

        self._data: dict = data
        self._root = MappingView(self._data, None, self._on_notification, self._log, self.lock)

        self._watch: WatchHandle | None = None
        if options.autoload:
            self._watch = watch_file(
                self.file,
                self._on_file_changed,
                interval=options.poll_interval,
                debounce=options.debounce,
                log=self._log,
            )

    # --- Access ---

    def get(self) -> MappingView:
        """The live view of the root object."""
        return self._root

    @property
    def data(self) -> MappingView:
        return self._root

    @property
    def raw(self) -> dict:
        """A deep copy of the current data."""
        with self.lock:
            return copy.deepcopy(self._data)

    def to_json(self, indent: int | None = None) -> str:
        with self.lock:
            return filestore.dumps(self._data, indent)

    def subscribe(self, callback: Callable[[ChangeEvent], None]) -> Disposer:
        """Shorthand for on_change.subscribe()."""
        return self.on_change.subscribe(callback)

    # --- Reconciliation ---

    def set(self, tree: dict, external: bool = False) -> bool:
        """Merge ``tree`` into the document in place. Returns True if anything changed.

        Emits one propchange per differing field while merging, then a
        single root change carrying the previous and the new tree.
        """
        if kind_of(tree) is not NodeKind.MAPPING:
            raise InvalidDocumentError(f"a document must be a dict, not {type(tree).__name__}")
        with self.lock:
            before = copy.deepcopy(self._data)
            changed = merge(
                self._data,
                tree,
                None,
                self.on_propchange.emit,
                external=external,
                log=self._log,
                snapshot=before,
            )
            self._log.debug("Merge done (external=%s): changed=%s", external, changed)
            if changed:
                self._changed(ChangeEvent(
                    type=EventType.CHANGE,
                    fullname=None,
                    name=None,
                    old_value=before,
                    value=tree,
                    external=external,
                ))
        return changed

    def _on_notification(self, n: Notification) -> None:
        """Turn a proxy notification into public events."""
        if n.old_value is n.value or same_value(n.old_value, n.value):
            return
        match n.type:
            case NotificationType.VALUE:
                self.on_propchange.emit(_event(EventType.PROPCHANGE, n))
                self._changed(_event(EventType.CHANGE, n))
            case NotificationType.ARRAYVALUE:
                self.on_propchange.emit(_event(EventType.PROPCHANGE, n))
            case NotificationType.ARRAY:
                # One change (and one save) for the whole sequence operation.
                self._changed(_event(EventType.CHANGE, n))

    def _changed(self, event: ChangeEvent) -> None:
        self.on_change.emit(event)
        if self.options.autosave and not event.external:
            try:
                self.save()
            except LiveJSONError as err:
                self._error(err)

    # --- File ---

    def save(self) -> None:
        """Write the document to its file now."""
        if self.file is None:
            raise LiveJSONError("document has no file")
        with self.lock:
            self._log.info("Writing changes to file %s", self.file)
            filestore.write_document(self.file, self._data, self.options.indent, self.options.encoding)
            self._last_mtime = filestore.stat_mtime(self.file)

    def reload(self) -> bool:
        """Read the file again and merge it in as an external change."""
        if self.file is None:
            raise LiveJSONError("document has no file")
        with self.lock:
            mtime = filestore.stat_mtime(self.file)
            tree = filestore.read_document(self.file, self.options.encoding)
            self._last_mtime = mtime
            changed = self.set(tree, external=True)
        self._log.info("Reloaded %s (changed=%s)", self.file, changed)
        return changed

    def _on_file_changed(self, mtime: int) -> None:
        def _apply() -> None:
            with self.lock:
                # Our own saves move _last_mtime forward; they are not edits.
                if self._last_mtime is not None and mtime <= self._last_mtime:
                    return
                self._log.info("File %s modified externally, reloading", self.file)
                try:
                    self.reload()
                except LiveJSONError as err:
                    self._error(err)

        if self.options.scheduler is not None:
            self.options.scheduler(_apply)
        else:
            _apply()

    def _error(self, err: LiveJSONError) -> None:
        """Log and publish; buffered until on_error has a subscriber."""
        self._log.error("%s", err)
        self.on_error.emit(err)

    # --- Lifecycle ---

    def close(self) -> None:
        if self._watch is not None:
            self._watch.dispose()
            self._watch = None
        self.on_change.dispose()
        self.on_propchange.dispose()
        self.on_error.dispose()

    def __enter__(self) -> LiveJSON:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __str__(self) -> str:
        return str(self._root)

    def __repr__(self) -> str:
        return f"LiveJSON({self._data!r}, file={self.file!r})"


def _event(type: EventType, n: Notification) -> ChangeEvent:
    return ChangeEvent(
        type=type,
        fullname=n.fullpath,
        name=n.name,
        old_value=n.old_value,
        value=n.value,
        external=False,
        index=n.index,
        added=n.added,
        removed=n.removed,
    )
