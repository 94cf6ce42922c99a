"""LiveJSON: a live, observable in-memory mirror of a JSON document."""

from importlib.metadata import version as _version

__version__ = _version("livejson")

from livejson._nodes import MISSING, TRACE, NodeKind, kind_of
from livejson.config import Options, Verbosity
from livejson.document import LiveJSON
from livejson.errors import (
    DocumentAccessError,
    DocumentReadError,
    DocumentWriteError,
    InvalidDocumentError,
    LiveJSONError,
)
from livejson.events import ChangeEvent, EventType, Notification, NotificationType
from livejson.merge import merge
from livejson.proxy import MappingView, SequenceView, wrap
from livejson.stream import EventStream
from livejson.watch import watch, watch_file, WatchHandle
# textual is opt-in: import livejson.textual explicitly

__all__ = [
    "MISSING",
    "TRACE",
    "NodeKind",
    "kind_of",
    "Options",
    "Verbosity",
    "LiveJSON",
    "LiveJSONError",
    "InvalidDocumentError",
    "DocumentAccessError",
    "DocumentReadError",
    "DocumentWriteError",
    "ChangeEvent",
    "EventType",
    "Notification",
    "NotificationType",
    "merge",
    "MappingView",
    "SequenceView",
    "wrap",
    "EventStream",
    "watch",
    "watch_file",
    "WatchHandle",
]
