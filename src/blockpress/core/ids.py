"""Block id generators scoped to one document owner.

Ids are opaque strings that must stay unique within a Document for its
lifetime. Nothing here is global: each editing session (or codec call) owns
its own generator, and generators can be told about ids that already exist
(e.g. ids hydrated from stored content) so they never hand those out again.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Protocol, runtime_checkable


@runtime_checkable
class IdGenerator(Protocol):
    """Callable that produces fresh block ids."""

    def __call__(self) -> str: ...

    def reserve(self, ids: Iterable[str]) -> None:
        """Mark ``ids`` as taken so they are never generated."""
        ...


class SequentialIds:
    """Monotonic ``<prefix><n>`` ids: ``b1``, ``b2``, ...

    Deterministic output makes this the default for tests and the CLI.
    """

    __slots__ = ("_prefix", "_next", "_taken")

    def __init__(self, prefix: str = "b", *, start: int = 1) -> None:
        self._prefix = prefix
        self._next = start
        self._taken: set[str] = set()

    def reserve(self, ids: Iterable[str]) -> None:
        self._taken.update(ids)

    def __call__(self) -> str:
        while True:
            candidate = f"{self._prefix}{self._next}"
            self._next += 1
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate


class RandomIds:
    """Short random ids in the 9-character shape stored content already uses."""

    __slots__ = ("_length", "_taken")

    def __init__(self, length: int = 9) -> None:
        self._length = length
        self._taken: set[str] = set()

    def reserve(self, ids: Iterable[str]) -> None:
        self._taken.update(ids)

    def __call__(self) -> str:
        while True:
            candidate = uuid.uuid4().hex[: self._length]
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate


def make_ids(style: str = "sequential") -> IdGenerator:
    """Build a generator for the configured ``style`` ("sequential" or "random")."""
    if style == "random":
        return RandomIds()
    return SequentialIds()


__all__ = ["IdGenerator", "RandomIds", "SequentialIds", "make_ids"]
