"""
Local-disk upload store.

Assets are written into one directory as ``block-<epoch-ms><ext>`` and served
from ``<url_prefix>/<filename>``. Directory, prefix and size limit come from
:class:`blockpress.core.settings.Settings` unless given explicitly.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path, PurePath

from blockpress.core.result import Result, err, ok
from blockpress.core.settings import get_logger, load_settings

from .base import UploadAsset, UploadedAsset, UploadError

logger = get_logger(__name__)


class LocalUploadStore:
    """
    :class:`~blockpress.uploads.base.Uploader` backed by a local directory.

    Parameters
    ----------
    base_dir : Path | None
        Target directory (created on first write).
    url_prefix : str | None
        Public URL prefix for stored files.
    max_bytes : int | None
        Largest accepted asset.
    """

    def __init__(
        self,
        base_dir: Path | None = None,
        *,
        url_prefix: str | None = None,
        max_bytes: int | None = None,
    ) -> None:
        cfg = load_settings()
        self.base_dir: Path = base_dir if base_dir is not None else cfg.upload_dir
        self.url_prefix: str = (url_prefix if url_prefix is not None else cfg.upload_url_prefix).rstrip("/")
        self.max_bytes: int = max_bytes if max_bytes is not None else cfg.upload_max_bytes

    def _target_name(self, filename: str, attempt: int) -> str:
        ext = PurePath(filename).suffix.lower()
        stamp = int(time.time() * 1000)
        suffix = f"-{attempt}" if attempt else ""
        return f"block-{stamp}{suffix}{ext}"

    def _write(self, asset: UploadAsset) -> str:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        attempt = 0
        while True:
            name = self._target_name(asset.filename, attempt)
            path = self.base_dir / name
            try:
                f = path.open("xb")
            except FileExistsError:
                attempt += 1
                continue
            try:
                with f:
                    f.write(asset.data)
            except OSError:
                path.unlink(missing_ok=True)
                raise
            return name

    async def upload(self, asset: UploadAsset) -> Result[UploadedAsset, UploadError]:
        if not asset.data:
            return err(UploadError(message="No file uploaded", filename=asset.filename))
        if asset.size > self.max_bytes:
            return err(
                UploadError(
                    message=f"File is {asset.size} bytes; the limit is {self.max_bytes}",
                    filename=asset.filename,
                )
            )

        try:
            name = await asyncio.to_thread(self._write, asset)
        except OSError as exc:
            logger.error("Writing upload %r failed: %s", asset.filename, exc)
            return err(UploadError(message=f"Could not store file: {exc}", filename=asset.filename))

        logger.info("Stored upload %r as %s (%d bytes)", asset.filename, name, asset.size)
        return ok(
            UploadedAsset(
                url=f"{self.url_prefix}/{name}",
                filename=name,
                size=asset.size,
                content_type=asset.content_type,
            )
        )


__all__ = ["LocalUploadStore"]
