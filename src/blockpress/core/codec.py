"""Document Codec: stored string <-> Document.

Three read shapes are accepted and exactly one is written:

1) ``""``                        -> one empty paragraph.
2) ``[{"id"...`` (block array)   -> decoded blocks; on any decode failure the
                                    raw string becomes one paragraph's text.
3) anything else (legacy text)   -> one paragraph holding the whole string.

``serialize`` always writes the compact block array, so legacy content is
upgraded to the canonical form the first time it is saved.

Decoding never raises. Shape problems (invalid JSON, not a list, an element
that is not an object) fall back to plain text; an element that is an object
but fails validation is kept as a ``CorruptBlock`` so nothing is lost.

Examples
--------
>>> doc = parse("Hello world")
>>> doc[0].type, doc[0].content
('paragraph', 'Hello world')
>>> serialize(doc)
'[{"id":"b1","type":"paragraph","content":"Hello world"}]'
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

from blockpress.core.contracts.block import (
    AnyBlock,
    CorruptBlock,
    Document,
    HowToBlock,
    ParagraphBlock,
    decode_block,
    empty_paragraph,
)
from blockpress.core.ids import IdGenerator, SequentialIds
from blockpress.core.settings import get_logger

BLOCK_ARRAY_PREFIX = '[{"id"'

logger = get_logger(__name__)


# ---- Decoding ------------------------------------------------------------------


def _stored_ids(raw_items: list[Any]) -> Iterable[str]:
    """Yield every string id present in ``raw_items``, nested steps included."""
    for item in raw_items:
        if not isinstance(item, dict):
            continue
        block_id = item.get("id")
        if isinstance(block_id, str) and block_id:
            yield block_id
        content = item.get("content")
        if item.get("type") != "howto" or not isinstance(content, dict):
            continue
        steps = content.get("steps")
        if not isinstance(steps, list):
            continue
        for step in steps:
            nested = step.get("blocks") if isinstance(step, dict) else None
            if isinstance(nested, list):
                yield from _stored_ids(nested)


def _unique_ids(doc: Document, ids: IdGenerator) -> Document:
    """Re-issue duplicate ids within each Document level (first one wins)."""
    seen: set[str] = set()
    out: list[AnyBlock] = []
    for block in doc:
        if block.id in seen:
            block = block.model_copy(update={"id": ids()})
        seen.add(block.id)
        if isinstance(block, HowToBlock) and any(s.blocks for s in block.content.steps):
            steps = tuple(
                s.model_copy(update={"blocks": _unique_ids(s.blocks, ids)}) if s.blocks else s
                for s in block.content.steps
            )
            block = block.model_copy(
                update={"content": block.content.model_copy(update={"steps": steps})}
            )
        out.append(block)
    return tuple(out)


def _decode_block_array(stored: str, ids: IdGenerator) -> Document | None:
    """Decode the canonical encoding; return ``None`` on any shape error."""
    try:
        items = json.loads(stored)
    except (json.JSONDecodeError, RecursionError) as exc:
        logger.warning("Stored block array is not valid JSON (%s); keeping it as text", exc)
        return None

    if not isinstance(items, list) or not items:
        logger.warning("Stored block array has the wrong shape; keeping it as text")
        return None

    ids.reserve(_stored_ids(items))
    try:
        doc = tuple(decode_block(item, ids=ids) for item in items)
    except ValueError as exc:
        logger.warning("Stored block array has a non-object element (%s); keeping it as text", exc)
        return None

    corrupt = sum(1 for b in doc if isinstance(b, CorruptBlock))
    if corrupt:
        logger.warning("Kept %d corrupt block(s) verbatim out of %d", corrupt, len(doc))
    return _unique_ids(doc, ids)


def parse(stored: str | None, *, ids: IdGenerator | None = None) -> Document:
    """Parse a stored string into a Document. Never raises.

    Parameters
    ----------
    stored:
        The persisted content (``None`` is treated as empty).
    ids:
        Generator for ids the content lacks. It is told about every stored id
        first, so fresh ids never collide. Defaults to a new ``SequentialIds``.

    Returns
    -------
    Document
        A non-empty tuple of blocks.
    """
    gen = ids if ids is not None else SequentialIds()
    if not stored:
        return (empty_paragraph(gen()),)

    if stored.startswith(BLOCK_ARRAY_PREFIX):
        doc = _decode_block_array(stored, gen)
        if doc is not None:
            return doc

    return (ParagraphBlock(id=gen(), content=stored),)


# ---- Encoding ------------------------------------------------------------------


def to_stored(doc: Document) -> list[dict[str, Any]]:
    """Return the JSON-ready list of block objects for ``doc``."""
    return [block.model_dump(mode="json", by_alias=True) for block in doc]


def serialize(doc: Document) -> str:
    """Encode ``doc`` in the canonical compact block-array form.

    An empty tuple encodes as ``""``, which parses back to the single empty
    paragraph every authoring Document falls back to.
    """
    if not doc:
        return ""
    return json.dumps(to_stored(doc), ensure_ascii=False, separators=(",", ":"))


def is_block_array(stored: str | None) -> bool:
    """True when ``stored`` is written in the canonical encoding."""
    return bool(stored) and stored.startswith(BLOCK_ARRAY_PREFIX)  # type: ignore[union-attr]


__all__ = ["BLOCK_ARRAY_PREFIX", "is_block_array", "parse", "serialize", "to_stored"]
