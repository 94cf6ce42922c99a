"""JSON file access for file-backed documents.

Thin functions over the filesystem: every failure is turned into a
LiveJSONError subclass carrying the underlying exception. Writes are
best effort (no temp file, no fsync).
"""

from __future__ import annotations

import json
import logging
import os

from livejson._nodes import NodeKind, kind_of
from livejson.errors import (
    DocumentAccessError,
    DocumentReadError,
    DocumentWriteError,
    InvalidDocumentError,
)

logger = logging.getLogger("livejson.filestore")


def stat_mtime(path: str | os.PathLike) -> int | None:
    """Modification time in nanoseconds, or None if the file is gone."""
    try:
        return os.stat(path).st_mtime_ns
    except OSError:
        return None


def check_access(path: str | os.PathLike, writable: bool) -> None:
    if writable:
        if not os.access(path, os.R_OK | os.W_OK):
            raise DocumentAccessError(f"File {path} is not readable/writeable")
    elif not os.access(path, os.R_OK):
        raise DocumentAccessError(f"File {path} is not readable")


def read_document(path: str | os.PathLike, encoding: str = "utf-8") -> dict:
    """Read and parse a JSON file whose top level must be an object."""
    try:
        with open(path, encoding=encoding) as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DocumentReadError(f"File {path} couldn't be read as JSON. Error: {e}", e) from e
    if kind_of(data) is not NodeKind.MAPPING:
        raise InvalidDocumentError(
            f"File {path} holds a JSON {type(data).__name__}, expected an object"
        )
    logger.debug("Read %s (%d keys)", path, len(data))
    return data


def dumps(data: dict, indent: int | None = 2) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False)


def write_document(
    path: str | os.PathLike,
    data: dict,
    indent: int | None = 2,
    encoding: str = "utf-8",
) -> None:
    text = dumps(data, indent)
    try:
        with open(path, "w", encoding=encoding) as f:
            f.write(text)
    except OSError as e:
        raise DocumentWriteError(f"Couldn't write to file {path}: {e}", e) from e
    logger.debug("Wrote %s (%d bytes)", path, len(text))
