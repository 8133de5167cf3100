"""Tests for the local upload store and attaching uploads to blocks."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Callable
from pathlib import Path

import pytest

from blockpress.core.contracts.block import GalleryBlock, ImageBlock
from blockpress.core.ids import SequentialIds
from blockpress.core.result import Result, err, ok
from blockpress.editor import payloads as p
from blockpress.editor.session import EditSession
from blockpress.editor.uploads import upload_into
from blockpress.uploads import (
    LocalUploadStore,
    UploadAsset,
    UploadedAsset,
    UploadError,
    Uploader,
)


class FakeUploader:
    """Returns a fixed URL; runs ``during`` while the upload is in flight."""

    def __init__(self, url: str = "/u/x.png", during: Callable[[], None] | None = None) -> None:
        self.url = url
        self.during = during
        self.calls = 0

    async def upload(self, asset: UploadAsset) -> Result[UploadedAsset, UploadError]:
        self.calls += 1
        await asyncio.sleep(0)
        if self.during is not None:
            self.during()
        return ok(UploadedAsset(url=self.url, filename="x.png", size=asset.size))


class FailingUploader:
    async def upload(self, asset: UploadAsset) -> Result[UploadedAsset, UploadError]:
        return err(UploadError(message="disk full", filename=asset.filename))


def _asset(data: bytes = b"\x89PNG...") -> UploadAsset:
    return UploadAsset(filename="Photo.PNG", data=data, content_type="image/png")


def _session_with(kind: str) -> tuple[EditSession, str]:
    s = EditSession.from_stored("", ids=SequentialIds())
    return s, s.insert_after(s.document[0].id, kind)


def test_fake_uploaders_satisfy_protocol() -> None:
    assert isinstance(FakeUploader(), Uploader)
    assert isinstance(LocalUploadStore(Path(".")), Uploader)


def test_local_store_writes_file_and_returns_url(tmp_path: Path) -> None:
    store = LocalUploadStore(tmp_path / "blocks", url_prefix="/uploads/blocks/", max_bytes=1024)
    result = asyncio.run(store.upload(_asset()))

    assert result.is_ok()
    uploaded = result.unwrap()
    assert uploaded.filename.startswith("block-") and uploaded.filename.endswith(".png")
    assert uploaded.url == f"/uploads/blocks/{uploaded.filename}"
    assert (tmp_path / "blocks" / uploaded.filename).read_bytes() == b"\x89PNG..."


def test_local_store_never_overwrites(tmp_path: Path) -> None:
    store = LocalUploadStore(tmp_path, url_prefix="/u", max_bytes=1024)

    async def both() -> list[str]:
        first = await store.upload(_asset(b"1"))
        second = await store.upload(_asset(b"2"))
        return [first.unwrap().filename, second.unwrap().filename]

    names = asyncio.run(both())
    assert len(set(names)) == 2
    assert sorted(f.read_bytes() for f in tmp_path.iterdir()) == [b"1", b"2"]


def test_local_store_rejects_empty_and_oversize(tmp_path: Path) -> None:
    store = LocalUploadStore(tmp_path, url_prefix="/u", max_bytes=4)
    empty = asyncio.run(store.upload(_asset(b"")))
    big = asyncio.run(store.upload(_asset(b"12345")))
    assert empty.is_err() and big.is_err()
    assert "limit" in big.unwrap_err().message
    assert list(tmp_path.iterdir()) == []


def test_upload_sets_image_url() -> None:
    s, image_id = _session_with("image")
    result = asyncio.run(upload_into(s, image_id, _asset(), FakeUploader("/u/a.png")))
    assert result.is_ok()
    block = s.find(image_id)
    assert isinstance(block, ImageBlock) and block.content.url == "/u/a.png"


def test_upload_applies_to_the_current_block_state() -> None:
    s, image_id = _session_with("image")

    def concurrent_edit() -> None:
        block = s.find(image_id)
        assert isinstance(block, ImageBlock)
        s.update(image_id, block.content.model_copy(update={"alt": "typed meanwhile"}))

    asyncio.run(upload_into(s, image_id, _asset(), FakeUploader("/u/b.png", concurrent_edit)))
    block = s.find(image_id)
    assert isinstance(block, ImageBlock)
    assert block.content.alt == "typed meanwhile"
    assert block.content.url == "/u/b.png"


def test_upload_for_deleted_block_is_dropped() -> None:
    s, image_id = _session_with("image")
    uploader = FakeUploader(during=lambda: s.delete(image_id))
    revision_before = s.revision

    result = asyncio.run(upload_into(s, image_id, _asset(), uploader))
    assert result.is_ok()
    assert s.find(image_id) is None
    assert s.revision == revision_before + 1  # only the delete


def test_upload_into_gallery_item() -> None:
    s, gallery_id = _session_with("gallery")
    s.edit(gallery_id, p.add_gallery_item)
    asyncio.run(upload_into(s, gallery_id, _asset(), FakeUploader("/u/g.png"), item_index=1))

    block = s.find(gallery_id)
    assert isinstance(block, GalleryBlock)
    assert [i.url for i in block.content.items] == ["", "/u/g.png"]

    revision = s.revision
    asyncio.run(upload_into(s, gallery_id, _asset(), FakeUploader(), item_index=5))
    assert s.revision == revision


def test_failed_upload_leaves_document_untouched() -> None:
    s, image_id = _session_with("image")
    before = s.document
    result = asyncio.run(upload_into(s, image_id, _asset(), FailingUploader()))
    assert result.is_err()
    assert result.unwrap_err().message == "disk full"
    assert s.document is before


def _captioned_gallery() -> tuple[EditSession, str]:
    s, gallery_id = _session_with("gallery")
    s.edit(gallery_id, lambda g: p.set_gallery_item(g, 0, caption="one"))
    s.edit(gallery_id, lambda g: p.add_gallery_item(g, caption="two"))
    s.edit(gallery_id, lambda g: p.add_gallery_item(g, caption="three"))
    return s, gallery_id


def _gallery(s: EditSession, gallery_id: str) -> list[tuple[str, str]]:
    block = s.find(gallery_id)
    assert isinstance(block, GalleryBlock)
    return [(i.caption, i.url) for i in block.content.items]


def test_gallery_upload_follows_its_item_when_earlier_items_are_removed() -> None:
    s, gallery_id = _captioned_gallery()
    shift = FakeUploader(
        "/u/three.png", lambda: s.edit(gallery_id, lambda g: p.remove_gallery_item(g, 0))
    )
    asyncio.run(upload_into(s, gallery_id, _asset(), shift, item_index=2))
    assert _gallery(s, gallery_id) == [("two", ""), ("three", "/u/three.png")]


def test_gallery_upload_for_removed_item_is_dropped() -> None:
    s, gallery_id = _captioned_gallery()
    drop = FakeUploader(
        "/u/two.png", lambda: s.edit(gallery_id, lambda g: p.remove_gallery_item(g, 1))
    )
    asyncio.run(upload_into(s, gallery_id, _asset(), drop, item_index=1))
    assert _gallery(s, gallery_id) == [("one", ""), ("three", "")]


class _BrokenFile(io.BytesIO):
    def write(self, data: bytes) -> int:  # type: ignore[override]
        raise OSError("disk full")


def test_local_store_removes_partial_file_on_write_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_open = Path.open

    def open_then_fail(self: Path, mode: str = "r", *args: object, **kwargs: object) -> object:
        if mode == "xb":
            real_open(self, mode).close()
            return _BrokenFile()
        return real_open(self, mode, *args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(Path, "open", open_then_fail)
    store = LocalUploadStore(tmp_path, url_prefix="/u", max_bytes=1024)
    result = asyncio.run(store.upload(_asset()))

    assert result.is_err()
    assert "disk full" in result.unwrap_err().message
    assert list(tmp_path.iterdir()) == []
