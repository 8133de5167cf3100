"""Structural edit operations over an immutable Document.

Every operation takes a Document and returns a Document. Invalid targets
(unknown ids, moves past a boundary, payloads that do not fit the block's
kind) are no-ops: the exact input tuple comes back, so callers can detect a
no-op with ``new is old``.

Invariants kept here
--------------------
- ids never change; ``move`` only reorders.
- ``type`` never changes; a different kind is delete + insert.
- the result is never empty: deleting the last block leaves a fresh empty
  paragraph.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from blockpress.core.contracts.block import (
    BLOCK_ADAPTER,
    AnyBlock,
    BlockKind,
    CorruptBlock,
    Document,
    HeadingBlock,
    ParagraphBlock,
    empty_paragraph,
    new_block,
)
from blockpress.core.ids import IdGenerator, RandomIds
from blockpress.core.settings import get_logger

Direction = Literal["up", "down"]

logger = get_logger(__name__)


def index_of(doc: Document, block_id: str | None) -> int:
    """Return the position of ``block_id`` in ``doc``, or ``-1``."""
    if block_id is None:
        return -1
    for i, block in enumerate(doc):
        if block.id == block_id:
            return i
    return -1


def find_block(doc: Document, block_id: str) -> AnyBlock | None:
    """Return the block with ``block_id``, or ``None``."""
    i = index_of(doc, block_id)
    return doc[i] if i >= 0 else None


def insert_after(
    doc: Document,
    after_id: str | None,
    kind: BlockKind | str,
    *,
    ids: IdGenerator,
) -> tuple[Document, str]:
    """Insert a default block of ``kind`` after ``after_id``.

    When ``after_id`` is ``None`` or unknown the block is appended. Returns the
    new Document and the new block's id (the caller's next focus target).
    """
    block = new_block(kind, ids())
    i = index_of(doc, after_id)
    if i < 0:
        return (*doc, block), block.id
    return (*doc[: i + 1], block, *doc[i + 1 :]), block.id


def _payload_input(payload: Any) -> Any:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="python", by_alias=True)
    return payload


def update_payload(
    doc: Document,
    block_id: str,
    payload: Any,
    *,
    ids: IdGenerator | None = None,
) -> Document:
    """Replace the payload of ``block_id``; id and kind are untouched.

    The payload is validated for the block's kind. Unknown ids and payloads
    that do not validate are no-ops. A corrupt block whose recorded kind is
    known is repaired by a valid payload.
    """
    i = index_of(doc, block_id)
    if i < 0:
        logger.debug("update_payload: no block %r", block_id)
        return doc

    target = doc[i]
    if isinstance(target, CorruptBlock) and target.known_kind is None:
        logger.warning("update_payload: block %r has unknown kind %r", block_id, target.type)
        return doc

    candidate = {"id": target.id, "type": target.type, "content": _payload_input(payload)}
    try:
        updated = BLOCK_ADAPTER.validate_python(
            candidate, context={"ids": ids if ids is not None else RandomIds()}
        )
    except ValidationError as exc:
        logger.warning(
            "update_payload: rejected payload for %s block %r (%d error(s))",
            target.type,
            block_id,
            exc.error_count(),
        )
        return doc
    if updated == target:
        return doc
    return (*doc[:i], updated, *doc[i + 1 :])


def move(doc: Document, block_id: str, direction: Direction) -> Document:
    """Swap ``block_id`` with its neighbour; no-op at either boundary."""
    i = index_of(doc, block_id)
    if i < 0:
        return doc
    j = i - 1 if direction == "up" else i + 1
    if j < 0 or j >= len(doc):
        return doc
    blocks = list(doc)
    blocks[i], blocks[j] = blocks[j], blocks[i]
    return tuple(blocks)


def delete(doc: Document, block_id: str, *, ids: IdGenerator) -> Document:
    """Remove ``block_id``. Removing the only block leaves one empty paragraph."""
    i = index_of(doc, block_id)
    if i < 0:
        return doc
    if len(doc) == 1:
        return (empty_paragraph(ids()),)
    return (*doc[:i], *doc[i + 1 :])


# ---- Text-input ergonomics -----------------------------------------------------


def _is_text_block(block: AnyBlock | None) -> bool:
    return isinstance(block, ParagraphBlock | HeadingBlock)


def submit_text(doc: Document, block_id: str, *, ids: IdGenerator) -> tuple[Document, str | None]:
    """Enter on a paragraph or heading opens a new paragraph right after it.

    Returns the new Document and the id of the new paragraph (``None`` when
    nothing happened).
    """
    if not _is_text_block(find_block(doc, block_id)):
        return doc, None
    return insert_after(doc, block_id, BlockKind.PARAGRAPH, ids=ids)


def erase_empty(doc: Document, block_id: str, *, ids: IdGenerator) -> Document:
    """Backspace on an empty paragraph or heading deletes that block."""
    block = find_block(doc, block_id)
    if not _is_text_block(block) or block.content:  # type: ignore[union-attr]
        return doc
    return delete(doc, block_id, ids=ids)


__all__ = [
    "Direction",
    "delete",
    "erase_empty",
    "find_block",
    "index_of",
    "insert_after",
    "move",
    "submit_text",
    "update_payload",
]
