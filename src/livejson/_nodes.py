"""Node kinds and small helpers shared by the proxy tree and the merge engine.

JSON-shaped data decomposes into three kinds of node. The kind of a value
is decided once with kind_of() and dispatched with match, instead of
probing isinstance() at every access site.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

# Finer than DEBUG: one record per property access or equal comparison.
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class NodeKind(enum.Enum):
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    LEAF = "leaf"


class _Missing:
    """Marker for an absent slot (a key that does not exist, an index past the end)."""

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "<MISSING>"

    def __reduce__(self):
        return (_Missing, ())


MISSING: Any = _Missing()


def kind_of(value: object) -> NodeKind:
    if isinstance(value, dict):
        return NodeKind.MAPPING
    if isinstance(value, list):
        return NodeKind.SEQUENCE
    return NodeKind.LEAF


def is_composite(value: object) -> bool:
    return kind_of(value) is not NodeKind.LEAF


def combine_path(path: str | None, name: object) -> str:
    """Child path: "parent.name", or just "name" directly under the root."""
    if path is None:
        return str(name)
    return f"{path}.{name}"


def last_segment(path: str | None) -> str | None:
    if path is None:
        return None
    return path.rsplit(".", 1)[-1]


def _json_type(value: object) -> str:
    # bool before int: isinstance(True, int) is True
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    # 1 and 1.0 are written differently, so they are different values
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is MISSING:
        return "missing"
    return type(value).__name__


def same_type(a: object, b: object) -> bool:
    """True when a and b have the same JSON type (and the same array-ness)."""
    ka, kb = kind_of(a), kind_of(b)
    if ka is not kb:
        return False
    if ka is NodeKind.LEAF:
        return _json_type(a) == _json_type(b)
    return True


def same_value(a: object, b: object) -> bool:
    """Equality of the written JSON: True != 1, 1 != 1.0, None != MISSING, NaN == NaN."""
    if a is b:
        return True
    if not same_type(a, b):
        return False
    match kind_of(a):
        case NodeKind.MAPPING:
            return a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
        case NodeKind.SEQUENCE:
            return len(a) == len(b) and all(same_value(x, y) for x, y in zip(a, b))
        case _:
            # json.load accepts NaN, which never equals itself
            return a == b or (a != a and b != b)


def slot_changed(old: object, new: object) -> bool:
    """Did one slot of a sequence change across a mutation?

    Composite elements are compared by identity: reordering two equal dicts
    is still a move of two distinct backing nodes.
    """
    if is_composite(old) or is_composite(new):
        return old is not new
    return not same_value(old, new)
