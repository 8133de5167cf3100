"""
Edit record definition.

An :class:`EditRecord` is the immutable log entry an ``EditSession`` appends
for every mutation that actually changed its Document. No-ops leave no record.

Design Notes
------------
- Records are frozen; the log is only ever appended to.
- ``timestamp`` is an ISO-8601 UTC string fixed at capture time so the log can
  be dumped as JSON without conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


def utc_timestamp() -> str:
    """Current UTC time as ``YYYY-mm-ddTHH:MM:SS.ffffffZ``."""
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@dataclass(frozen=True, slots=True)
class EditRecord:
    """
    One effective mutation of an edit session.

    Attributes
    ----------
    revision : int
        Session revision after the mutation (the first edit is revision 1).
    operation : str
        Operation name, e.g. ``"insert"``, ``"update"``, ``"move"``.
    block_id : str | None
        The block the operation targeted.
    note : str | None
        Optional detail such as the inserted kind or the move direction.
    timestamp : str
        UTC capture time.
    """

    revision: int
    operation: str
    block_id: str | None
    note: str | None = None
    timestamp: str = ""


__all__ = ["EditRecord", "utc_timestamp"]
