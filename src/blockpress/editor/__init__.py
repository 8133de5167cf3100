"""Editing: pure Document operations, payload helpers and the edit session."""

from __future__ import annotations

from .operations import (
    delete,
    erase_empty,
    find_block,
    index_of,
    insert_after,
    move,
    submit_text,
    update_payload,
)
from .session import EditSession
from .trace import EditRecord
from .uploads import upload_into

__all__ = [
    "EditRecord",
    "EditSession",
    "delete",
    "erase_empty",
    "find_block",
    "index_of",
    "insert_after",
    "move",
    "submit_text",
    "update_payload",
    "upload_into",
]
