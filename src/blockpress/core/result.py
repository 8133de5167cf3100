"""Typed Result container for explicit success/failure returns.

The upload path is the only place in Blockpress where something can fail in
a way the caller must see: a binary asset may be rejected, or writing it may
raise. Collaborators therefore return ``Result[UploadedAsset, UploadError]``
instead of raising, and the editor decides what to do with each variant.

- `Ok(value)` / `Err(error)` variants,
- helpers: `is_ok`, `is_err`, `unwrap`, `unwrap_err`.

Example
-------
>>> from blockpress.core.result import ok, err, Result
>>> def check_size(n: int) -> Result[int, str]:
...     return ok(n) if n > 0 else err("empty asset")
>>> check_size(12).unwrap()
12
>>> check_size(0).unwrap_err()
'empty asset'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, cast

T = TypeVar("T")
E = TypeVar("E")


class Result(Generic[T, E]):
    """Sum type representing either success (`Ok[T]`) or failure (`Err[E]`)."""

    def is_ok(self) -> bool:
        """Return ``True`` if this is an :class:`Ok` value."""
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` if this is an :class:`Err` value."""
        return isinstance(self, Err)

    def unwrap(self) -> T:
        """Return the inner value if ``Ok``; raise ``RuntimeError`` on ``Err``."""
        if isinstance(self, Ok):
            return cast(Ok[T, E], self).value
        raise RuntimeError(f"Attempted to unwrap Err: {self!r}")

    def unwrap_err(self) -> E:
        """Return the error value if ``Err``, else raise."""
        if isinstance(self, Err):
            return cast(Err[T, E], self).error
        raise RuntimeError(f"Attempted to unwrap_err on Ok: {self!r}")


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Successful result wrapping a value of type ``T``."""

    value: T


@dataclass(frozen=True)
class Err(Result[T, E]):
    """Failed result wrapping an error payload of type ``E``."""

    error: E


def ok(value: T) -> Result[T, E]:
    """Construct :class:`Ok` with better type inference at call sites."""
    return Ok(value)


def err(error: E) -> Result[T, E]:
    """Construct :class:`Err` with better type inference at call sites."""
    return Err(error)


__all__ = ["Err", "Ok", "Result", "err", "ok"]
