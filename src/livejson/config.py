"""Document options."""

from __future__ import annotations

import dataclasses
import enum
import logging
from dataclasses import dataclass
from typing import Callable

from livejson._nodes import TRACE


class Verbosity(enum.IntEnum):
    """How much a document logs. Applied to its logger at construction."""

    QUIET = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3

    @property
    def level(self) -> int:
        return _LEVELS[self]


_LEVELS = {
    Verbosity.QUIET: logging.WARNING,
    Verbosity.INFO: logging.INFO,
    Verbosity.DEBUG: logging.DEBUG,
    Verbosity.TRACE: TRACE,
}


@dataclass(frozen=True)
class Options:
    """Options of a file-backed document.

    autosave: write the file after every change.
    autoload: watch the file and merge external edits.
    indent: JSON indentation of saved files (None for compact output).
    encoding: text encoding used to read and write the file.
    poll_interval: seconds between two checks of the file's mtime.
    debounce: quiet period before a detected edit is reloaded.
    verbosity: if set, the level given to the document's logger.
    scheduler: callable used to run reloads detected by the watcher
        thread on the caller's thread (e.g. ``app.call_from_thread``).
    """

    autosave: bool = True
    autoload: bool = True
    indent: int | None = 2
    encoding: str = "utf-8"
    poll_interval: float = 0.5
    debounce: float = 0.1
    verbosity: Verbosity | None = None
    scheduler: Callable[[Callable[[], None]], object] | None = None

    def replace(self, **changes) -> Options:
        return dataclasses.replace(self, **changes)
