"""
Attach uploaded assets to image and gallery blocks.

The upload is the only ``await`` in the editor. While it is in flight the
author may keep editing, so the URL is applied to the block as it is *when
the upload finishes*, never to a copy taken before it started. If the block
(or the gallery item) is gone by then the result is dropped.

A gallery target is the item that was at ``item_index`` when the upload
started. If items before it are removed meanwhile, the URL still lands on
that item; if the item itself was removed or edited, the URL is dropped.
"""

from __future__ import annotations

from blockpress.core.contracts.block import GalleryBlock, GalleryItem, ImageBlock
from blockpress.core.result import Result
from blockpress.core.settings import get_logger
from blockpress.uploads.base import UploadAsset, UploadedAsset, UploadError, Uploader

from .payloads import set_gallery_item
from .session import EditSession

logger = get_logger(__name__)


def _gallery_target(
    session: EditSession, block_id: str, item_index: int | None
) -> GalleryItem | None:
    block = session.find(block_id)
    if not isinstance(block, GalleryBlock) or item_index is None:
        return None
    if not 0 <= item_index < len(block.content.items):
        return None
    return block.content.items[item_index]


def _locate_item(items: tuple[GalleryItem, ...], target: GalleryItem, hint: int) -> int | None:
    if hint < len(items) and items[hint] == target:
        return hint
    found = [i for i, item in enumerate(items) if item == target]
    return found[0] if len(found) == 1 else None


def _apply_url(
    session: EditSession,
    block_id: str,
    url: str,
    item_index: int | None,
    target: GalleryItem | None,
) -> bool:
    block = session.find(block_id)
    if isinstance(block, ImageBlock):
        return session.update(block_id, block.content.model_copy(update={"url": url}))
    if isinstance(block, GalleryBlock):
        index = None
        if target is not None and item_index is not None:
            index = _locate_item(block.content.items, target, item_index)
        if index is None:
            logger.info("Dropped upload for %r: gallery item %s is gone", block_id, item_index)
            return False
        return session.update(block_id, set_gallery_item(block.content, index, url=url))
    logger.info("Dropped upload for %r: block is gone or not an image", block_id)
    return False


async def upload_into(
    session: EditSession,
    block_id: str,
    asset: UploadAsset,
    uploader: Uploader,
    *,
    item_index: int | None = None,
) -> Result[UploadedAsset, UploadError]:
    """Upload ``asset`` and store its URL in ``block_id``.

    Parameters
    ----------
    session : EditSession
        Owner of the Document holding the target block.
    block_id : str
        An image block, or a gallery block together with ``item_index``.
    asset : UploadAsset
        The bytes to store.
    uploader : Uploader
        Storage collaborator.
    item_index : int | None
        Gallery item to receive the URL, as positioned when the call starts.

    Returns
    -------
    Result[UploadedAsset, UploadError]
        The uploader's result, unchanged. On ``Err`` the Document is untouched.
    """
    target = _gallery_target(session, block_id, item_index)
    result = await uploader.upload(asset)
    if result.is_err():
        logger.warning("Upload of %r failed: %s", asset.filename, result.unwrap_err().message)
        return result
    _apply_url(session, block_id, result.unwrap().url, item_index, target)
    return result


__all__ = ["upload_into"]
