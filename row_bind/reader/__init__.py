"""Reader layer - stream entities from cursors and present entities as rows."""

from __future__ import annotations

from row_bind.reader.entity import EntityReader, ReaderState
from row_bind.reader.rows import EntityRowAdapter

__all__ = [
    "EntityReader",
    "ReaderState",
    "EntityRowAdapter",
]
