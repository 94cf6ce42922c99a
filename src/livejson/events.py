"""Notification and event records.

A Notification is what the proxy tree reports for one observed mutation,
before the owning document classifies it. A ChangeEvent is what
subscribers of a document receive.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from livejson._nodes import MISSING


class NotificationType(enum.Enum):
    VALUE = "value"  # assignment of one slot
    ARRAY = "array"  # whole sequence changed by a mutating call
    ARRAYVALUE = "arrayvalue"  # one element within a sequence changed


class EventType(enum.Enum):
    CHANGE = "change"
    PROPCHANGE = "propchange"


@dataclass
class Notification:
    type: NotificationType
    target: Any
    name: Any
    fullpath: str | None
    old_value: Any = MISSING
    value: Any = MISSING
    index: int | None = None
    added: bool | None = None
    removed: bool | None = None


@dataclass(frozen=True)
class ChangeEvent:
    """A change observed on a document, local or external.

    fullname is the dotted path of the changed field (None for the root),
    name its last segment. For sequence elements index, added and removed
    are set; the absent side of an addition or removal is MISSING.
    """

    type: EventType
    fullname: str | None
    name: Any
    old_value: Any
    value: Any
    external: bool = False
    index: int | None = None
    added: bool | None = None
    removed: bool | None = None

    @property
    def is_element(self) -> bool:
        return self.index is not None
