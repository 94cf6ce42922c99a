"""Diff-merge — reconcile a live tree with a freshly loaded one, in place.

merge() walks both trees together and mutates the live side until it
equals the incoming side, emitting one propchange event per slot that
differed. Untouched subtrees keep their identity, so views and other
holders of nested dicts and lists stay valid across a reload.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable

from livejson._nodes import (
    MISSING,
    TRACE,
    NodeKind,
    combine_path,
    is_composite,
    kind_of,
    same_type,
    same_value,
)
from livejson.events import ChangeEvent, EventType

logger = logging.getLogger("livejson.merge")

Emit = Callable[[ChangeEvent], None]


def merge(
    current: dict | list,
    incoming: dict | list,
    parent_path: str | None,
    emit: Emit,
    *,
    external: bool = False,
    log: logging.Logger | None = None,
    snapshot: dict | list | None = None,
) -> bool:
    """Make ``current`` equal to ``incoming``; return True if anything changed.

    Both sides must be the same kind of container. Slot events are emitted
    as soon as the slot has been updated, tagged with ``external``. A caller that already holds a deep copy of
    ``current`` passes it as ``snapshot``; old values of merged containers
    are then taken from it instead of being copied again.

    Usage:
        live = {"a": 1, "b": [1, 2]}
        merge(live, {"a": 1, "b": [1, 2, 3]}, None, events.append)
        # live == {"a": 1, "b": [1, 2, 3]}
        # events == [ChangeEvent(fullname="b.2", index=2, added=True, value=3, ...),
        #            ChangeEvent(fullname="b", ...)]
    """
    kind = kind_of(current)
    if kind is NodeKind.LEAF or kind is not kind_of(incoming):
        raise TypeError(
            f"cannot merge {type(incoming).__name__} into {type(current).__name__}"
        )
    return _Merger(emit, external, log or logger).merge(current, incoming, parent_path, snapshot)


class _Merger:
    __slots__ = ("_emit", "_external", "_log")

    def __init__(self, emit: Emit, external: bool, log: logging.Logger) -> None:
        self._emit = emit
        self._external = external
        self._log = log

    def merge(self, current, incoming, path: str | None, snapshot=None) -> bool:
        match kind_of(current):
            case NodeKind.SEQUENCE:
                return self._merge_sequence(current, incoming, path, snapshot)
            case _:
                return self._merge_mapping(current, incoming, path, snapshot)

    def _merge_mapping(self, current: dict, incoming: dict, path: str | None, snapshot) -> bool:
        changed = False
        keys = list(current)
        keys.extend(k for k in incoming if k not in current)
        for key in keys:
            new = incoming.get(key, MISSING)
            slot_changed, old = self._merge_slot(current, key, current.get(key, MISSING), new, path, snapshot)
            if slot_changed:
                self._event(path, key, old, new)
                changed = True
        return changed

    def _merge_sequence(self, current: list, incoming: list, path: str | None, snapshot) -> bool:
        changed = False
        shared = min(len(current), len(incoming))
        for index in range(shared):
            new = incoming[index]
            slot_changed, old = self._merge_slot(current, index, current[index], new, path, snapshot)
            if slot_changed:
                self._event(path, index, old, new, element=True)
                changed = True

        if len(current) > len(incoming):
            # Truncate before reporting so handlers never see a hole.
            removed = current[shared:]
            del current[shared:]
            for offset, old in enumerate(removed):
                self._log.debug("Removed %r", combine_path(path, shared + offset))
                self._event(path, shared + offset, old, MISSING, element=True)
            changed = True
        else:
            for index in range(shared, len(incoming)):
                new = incoming[index]
                current.append(copy.deepcopy(new))
                self._log.debug("Added %r", combine_path(path, index))
                self._event(path, index, MISSING, new, element=True)
                changed = True
        return changed

    def _merge_slot(self, container, key, old: Any, new: Any, path: str | None, snapshot) -> tuple[bool, Any]:
        """Update one slot of ``container``.

        Returns whether it changed, and the value to report as the old one
        (a snapshot when the slot was merged in place).
        """
        if new is MISSING:
            del container[key]
            self._log.debug("Deleted %r", combine_path(path, key))
            return True, old
        if not same_type(old, new):
            container[key] = copy.deepcopy(new)
            self._log.debug("Replaced %r (%s -> %s)", combine_path(path, key),
                            type(old).__name__, type(new).__name__)
            return True, old
        if is_composite(old):
            if same_value(old, new):
                return False, old
            # Copy once, at the outermost changed container; deeper levels
            # take their old values from that copy.
            before = _part_of(snapshot, key, old)
            return self.merge(old, new, combine_path(path, key), before), before
        if not same_value(old, new):
            self._log.debug("Changed %r: %r -> %r", combine_path(path, key), old, new)
            container[key] = new
            return True, old
        self._log.log(TRACE, "Equal %r: %r", combine_path(path, key), old)
        return False, old

    def _event(self, path: str | None, key, old: Any, new: Any, *, element: bool = False) -> None:
        self._emit(ChangeEvent(
            type=EventType.PROPCHANGE,
            fullname=combine_path(path, key),
            name=key,
            old_value=old,
            value=new,
            external=self._external,
            index=key if element else None,
            added=(old is MISSING) if element else None,
            removed=(new is MISSING) if element else None,
        ))


def _part_of(snapshot, key, old):
    """The copy of ``old`` held in the parent's snapshot, or a fresh one.

    A handler may have replaced the slot while the merge was running, in
    which case the snapshot no longer lines up with the live tree.
    """
    if snapshot is not None:
        try:
            part = snapshot[key]
        except (KeyError, IndexError):
            part = MISSING
        if kind_of(part) is kind_of(old):
            return part
    return copy.deepcopy(old)
