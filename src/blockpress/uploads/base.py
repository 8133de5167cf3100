"""
Upload contracts.

The editor never writes binary assets itself. It hands an
:class:`UploadAsset` to an :class:`Uploader` and gets back a
``Result[UploadedAsset, UploadError]``; failures are values, not exceptions.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from blockpress.core.result import Result


class UploadAsset(BaseModel):
    """A binary asset picked by the author."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1, description="Original file name, used for the extension")
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


class UploadedAsset(BaseModel):
    """Where a stored asset can be fetched from."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1)
    filename: str
    size: int = Field(..., ge=0)
    content_type: str = "application/octet-stream"


class UploadError(BaseModel):
    """Why an upload failed; ``filename`` names the rejected asset."""

    model_config = ConfigDict(frozen=True)

    message: str
    filename: str | None = None


@runtime_checkable
class Uploader(Protocol):
    """Stores one asset and reports its public URL."""

    async def upload(self, asset: UploadAsset) -> Result[UploadedAsset, UploadError]: ...


__all__ = ["UploadAsset", "UploadError", "UploadedAsset", "Uploader"]
