"""
Metadata Deriver: Document -> structured-data descriptors.

An independent pass over the same Document the renderer reads. One rule per
block kind in ``RULES``; kinds with nothing to say map to ``_nothing``. The
output depends only on block content, so deriving twice gives identical
results and appending a block that derives nothing leaves the output alone.

Rules
-----
- FAQ: pairs with both question and answer non-empty; nothing if none.
- How-To: name (``"Guide"`` when empty); steps with a title and a body.
  A rich step's body is its nested paragraph and heading text. Positions
  count the kept steps from 1. Nothing if no step is kept.
- Review: only when the reviewed item is named and a rating is set.
- Video: always.

Corrupt blocks, and blocks whose rule raises, derive nothing; the failure is
logged and the remaining blocks are still derived.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import TypeAdapter

from blockpress.core.contracts.block import (
    BlockKind,
    CorruptBlock,
    Document,
    FaqBlock,
    HowToBlock,
    ReviewBlock,
    VideoBlock,
)
from blockpress.core.contracts.descriptor import (
    Descriptor,
    FaqDescriptor,
    FaqEntry,
    HowToDescriptor,
    HowToStepEntry,
    ReviewDescriptor,
    VideoDescriptor,
)
from blockpress.core.settings import get_logger

logger = get_logger(__name__)

DEFAULT_HOWTO_NAME = "Guide"

_DESCRIPTORS = TypeAdapter(tuple[Descriptor, ...])


def _faq(b: FaqBlock) -> Descriptor | None:
    entries = tuple(
        FaqEntry(question=item.question, answer=item.answer)
        for item in b.content.items
        if item.question and item.answer
    )
    if not entries:
        return None
    return FaqDescriptor(block_id=b.id, items=entries)


def _howto(b: HowToBlock) -> Descriptor | None:
    kept: list[HowToStepEntry] = []
    for step in b.content.steps:
        text = step.fallback_text()
        if step.title and text:
            kept.append(HowToStepEntry(position=len(kept) + 1, name=step.title, text=text))
    if not kept:
        return None
    return HowToDescriptor(
        block_id=b.id,
        name=b.content.name or DEFAULT_HOWTO_NAME,
        steps=tuple(kept),
    )


def _review(b: ReviewBlock) -> Descriptor | None:
    c = b.content
    if not c.item_name or c.rating is None:
        return None
    return ReviewDescriptor(
        block_id=b.id, item_name=c.item_name, rating=c.rating, author=c.author, text=c.text
    )


def _video(b: VideoBlock) -> Descriptor | None:
    return VideoDescriptor(
        block_id=b.id, video_id=b.content, embed_url=b.embed_url
    )


def _nothing(b: Any) -> Descriptor | None:
    return None


RULES: dict[BlockKind, Callable[[Any], Descriptor | None]] = {
    BlockKind.PARAGRAPH: _nothing,
    BlockKind.H1: _nothing,
    BlockKind.H2: _nothing,
    BlockKind.H3: _nothing,
    BlockKind.IMAGE: _nothing,
    BlockKind.GALLERY: _nothing,
    BlockKind.QUOTE: _nothing,
    BlockKind.CODE: _nothing,
    BlockKind.LIST: _nothing,
    BlockKind.CALLOUT: _nothing,
    BlockKind.DIVIDER: _nothing,
    BlockKind.FAQ: _faq,
    BlockKind.HOWTO: _howto,
    BlockKind.TABLE: _nothing,
    BlockKind.VIDEO: _video,
    BlockKind.REVIEW: _review,
}

_missing = set(BlockKind) - set(RULES)
if _missing:  # pragma: no cover - import-time guard
    raise RuntimeError(f"deriver has no rule for: {sorted(k.value for k in _missing)}")


def derive_descriptors(doc: Document) -> tuple[Descriptor, ...]:
    """Derive descriptors for every qualifying top-level block, in block order."""
    out: list[Descriptor] = []
    for block in doc:
        if isinstance(block, CorruptBlock):
            logger.debug("Skipping corrupt block %r", block.id)
            continue
        try:
            found = RULES[block.kind](block)
        except Exception as exc:
            logger.warning("Deriving from %s block %r failed: %s", block.type, block.id, exc)
            continue
        if found is not None:
            out.append(found)
    logger.debug("Derived %d descriptor(s) from %d block(s)", len(out), len(doc))
    return tuple(out)


def descriptors_to_json(descriptors: Sequence[Descriptor]) -> str:
    """Canonical JSON for ``descriptors`` (sorted keys, compact)."""
    data = _DESCRIPTORS.dump_python(tuple(descriptors), mode="json")
    return json.dumps(data, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


__all__ = ["DEFAULT_HOWTO_NAME", "RULES", "derive_descriptors", "descriptors_to_json"]
