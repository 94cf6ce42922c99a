"""Live proxy tree — observable views over plain JSON data.

A view wraps a backing dict or list and reports every mutation made
through it to a notification callback. Views never copy: writing through
a view writes the backing node. Nested dicts and lists are wrapped lazily
on read, and every read builds a fresh view; nothing is cached, so the
identity of a view carries no meaning.

Mapping views only intercept reads and writes. Sequence views also
intercept the mutating list methods: the elements are snapshotted before
the real list operation runs, then compared index by index afterwards so
that every element that moved, appeared or disappeared is reported.
"""

from __future__ import annotations

import contextlib
import functools
import json
import logging
from typing import Any, Callable, ContextManager, Iterator

from livejson._nodes import (
    MISSING,
    TRACE,
    NodeKind,
    combine_path,
    kind_of,
    last_segment,
    slot_changed,
)
from livejson.events import Notification, NotificationType

logger = logging.getLogger("livejson.proxy")

Notify = Callable[[Notification], None]


def wrap(
    value: Any,
    path: str | None,
    notify: Notify,
    log: logging.Logger | None = None,
    lock: ContextManager | None = None,
) -> Any:
    """Return a view for composite values, the value itself for leaves."""
    match kind_of(value):
        case NodeKind.MAPPING:
            return MappingView(value, path, notify, log, lock)
        case NodeKind.SEQUENCE:
            return SequenceView(value, path, notify, log, lock)
        case _:
            return value


def unwrap(value: Any) -> Any:
    """Views are never stored in backing data; store what they wrap."""
    if isinstance(value, _View):
        return value._node
    return value


class _View:
    """Base view. Every write and its notifications run under ``lock``.

    The owning document passes its own lock, so writes through any view
    are serialized with merges running on another thread.
    """

    __slots__ = ("_node", "_path", "_notify", "_logger", "_lock")

    def __init__(
        self,
        node,
        path: str | None,
        notify: Notify,
        log: logging.Logger | None = None,
        lock: ContextManager | None = None,
    ) -> None:
        object.__setattr__(self, "_node", node)
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_notify", notify)
        object.__setattr__(self, "_logger", log or logger)
        object.__setattr__(self, "_lock", lock or contextlib.nullcontext())
        self._logger.log(TRACE, "Creating view for %r", path)

    @property
    def raw(self):
        """The backing node itself (not a copy)."""
        return self._node

    @property
    def path(self) -> str | None:
        return self._path

    def _child(self, name, value) -> Any:
        return wrap(value, combine_path(self._path, name), self._notify, self._logger, self._lock)

    def __len__(self) -> int:
        return len(self._node)

    def __bool__(self) -> bool:
        return bool(self._node)

    def __eq__(self, other) -> bool:
        return self._node == unwrap(other)

    __hash__ = None

    def __str__(self) -> str:
        return json.dumps(self._node, separators=(",", ":"), ensure_ascii=False)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._node!r}, path={self._path!r})"


class MappingView(_View):
    """Observable view of a dict. Supports item and attribute access."""

    __slots__ = ()

    # --- Read operations ---

    def __getitem__(self, key: str) -> Any:
        self._logger.log(TRACE, "Accessing %r in %r", key, self._path)
        return self._child(key, self._node[key])

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._node:
            return default
        return self[key]

    def __contains__(self, key: object) -> bool:
        return key in self._node

    def __iter__(self) -> Iterator[str]:
        return iter(self._node)

    def keys(self):
        return self._node.keys()

    def values(self):
        return [self._child(k, v) for k, v in self._node.items()]

    def items(self):
        return [(k, self._child(k, v)) for k, v in self._node.items()]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(
                f"{self._path or 'root'!s} has no field {name!r}"
            ) from None

    # --- Write operations (notify) ---

    def __setitem__(self, key: str, value: Any) -> None:
        value = unwrap(value)
        with self._lock:
            old = self._node.get(key, MISSING)
            self._node[key] = value
            self._notify(Notification(
                type=NotificationType.VALUE,
                target=self._node,
                name=key,
                fullpath=combine_path(self._path, key),
                old_value=old,
                value=value,
            ))

    def __delitem__(self, key: str) -> None:
        with self._lock:
            old = self._node.pop(key)
            self._notify(Notification(
                type=NotificationType.VALUE,
                target=self._node,
                name=key,
                fullpath=combine_path(self._path, key),
                old_value=old,
                value=MISSING,
            ))

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            raise AttributeError(f"cannot set private attribute {name!r} on a view")
        self[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self[name]
        except KeyError:
            raise AttributeError(name) from None


def _mutator(method):
    """Run a list operation between a snapshot and a diff of the elements."""

    @functools.wraps(method)
    def wrapper(self: SequenceView, *args, **kwargs):
        with self._lock:
            before = self._node[:]
            result = method(self, *args, **kwargs)
            self._report(before)
        return result

    return wrapper


class SequenceView(_View):
    """Observable view of a list.

    Element reads return views for nested containers. Every mutating
    list method is reported element by element (ARRAYVALUE) and then as
    one ARRAY notification carrying both full snapshots.
    """

    __slots__ = ()

    # --- Read operations ---

    def __getitem__(self, index):
        if isinstance(index, slice):
            # A list of live children, each addressed by its real index.
            return [self._child(i, self._node[i]) for i in range(*index.indices(len(self._node)))]
        value = self._node[index]
        if index < 0:
            index += len(self._node)
        return self._child(index, value)

    def __iter__(self) -> Iterator[Any]:
        for index, value in enumerate(self._node):
            yield self._child(index, value)

    def __contains__(self, item: object) -> bool:
        return unwrap(item) in self._node

    def index(self, item: Any, *args) -> int:
        return self._node.index(unwrap(item), *args)

    def count(self, item: Any) -> int:
        return self._node.count(unwrap(item))

    # --- Write operations (notify) ---

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            self._assign_slice(index, value)
            return
        value = unwrap(value)
        with self._lock:
            size = len(self._node)
            if index < 0:
                index += size
            if not 0 <= index <= size:
                raise IndexError("sequence assignment index out of range")
            if index == size:
                old = MISSING
                self._node.append(value)
            else:
                old = self._node[index]
                self._node[index] = value
            self._notify(Notification(
                type=NotificationType.VALUE,
                target=self._node,
                name=index,
                fullpath=combine_path(self._path, index),
                old_value=old,
                value=value,
                index=index,
                added=old is MISSING,
                removed=False,
            ))

    @_mutator
    def _assign_slice(self, index: slice, values) -> None:
        self._node[index] = [unwrap(v) for v in values]

    @_mutator
    def __delitem__(self, index) -> None:
        del self._node[index]

    @_mutator
    def append(self, item: Any) -> None:
        self._node.append(unwrap(item))

    @_mutator
    def extend(self, items) -> None:
        # Materialize first: items may iterate this very list.
        self._node.extend([unwrap(item) for item in items])

    @_mutator
    def insert(self, index: int, item: Any) -> None:
        self._node.insert(index, unwrap(item))

    @_mutator
    def pop(self, index: int = -1) -> Any:
        return self._node.pop(index)

    @_mutator
    def remove(self, item: Any) -> None:
        self._node.remove(unwrap(item))

    @_mutator
    def clear(self) -> None:
        self._node.clear()

    @_mutator
    def sort(self, *, key=None, reverse: bool = False) -> None:
        self._node.sort(key=key, reverse=reverse)

    @_mutator
    def reverse(self) -> None:
        self._node.reverse()

    @_mutator
    def __iadd__(self, items):
        self._node.extend([unwrap(item) for item in items])
        return self

    def _report(self, before: list) -> None:
        """Compare the snapshot with the live list and notify differences."""
        after = self._node
        name = last_segment(self._path)
        changed = False
        for index in range(max(len(before), len(after))):
            old = before[index] if index < len(before) else MISSING
            new = after[index] if index < len(after) else MISSING
            if not slot_changed(old, new):
                continue
            changed = True
            self._notify(Notification(
                type=NotificationType.ARRAYVALUE,
                target=after,
                name=index,
                fullpath=combine_path(self._path, index),
                old_value=old,
                value=new,
                index=index,
                added=old is MISSING,
                removed=new is MISSING,
            ))
        # One consolidated notification so the whole change is saved once.
        if changed:
            self._logger.debug("Sequence %r changed (%d -> %d items)", self._path, len(before), len(after))
            self._notify(Notification(
                type=NotificationType.ARRAY,
                target=after,
                name=name,
                fullpath=self._path,
                old_value=before,
                value=after[:],
            ))
