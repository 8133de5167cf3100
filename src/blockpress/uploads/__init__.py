"""Binary asset uploads: the ``Uploader`` contract and a local-disk store."""

from __future__ import annotations

from .base import UploadAsset, UploadedAsset, UploadError, Uploader
from .local import LocalUploadStore

__all__ = ["LocalUploadStore", "UploadAsset", "UploadError", "UploadedAsset", "Uploader"]
