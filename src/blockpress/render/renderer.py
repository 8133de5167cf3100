"""
Renderer: Document -> presentation tree.

``render`` is a pure function. Each block kind has exactly one rule in
``RULES``; the table is checked against :class:`BlockKind` at import time so a
new kind cannot be added without a rule.

Failure isolation
-----------------
Corrupt blocks render as nothing. A rule that raises is logged and its block
is skipped; the rest of the Document still renders.

Recursion
---------
A rich How-To step embeds the rendering of its nested Document, using the
same rules, to any depth.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from blockpress.core.contracts.block import (
    AnyBlock,
    BlockKind,
    CalloutBlock,
    CodeBlock,
    CorruptBlock,
    Document,
    FaqBlock,
    GalleryBlock,
    HeadingBlock,
    HowToBlock,
    ImageBlock,
    ListBlock,
    ParagraphBlock,
    QuoteBlock,
    ReviewBlock,
    TableBlock,
    VideoBlock,
)
from blockpress.core.contracts.presentation import RenderNode, node
from blockpress.core.settings import get_logger

from .inline import inline

logger = get_logger(__name__)

LIST_MARKERS = {"bullet": "•", "check": "✓"}
CALLOUT_LABELS = {"info": "Note", "warning": "Caution", "success": "Pro Tip"}
MAX_RATING = 5


def list_marker(style: str, index: int) -> str:
    """Marker for item ``index`` (0-based) of a list in ``style``."""
    if style == "numbered":
        return f"{index + 1}."
    return LIST_MARKERS.get(style, LIST_MARKERS["bullet"])


def stars(rating: int | None) -> str:
    filled = max(0, min(rating or 0, MAX_RATING))
    return "★" * filled + "☆" * (MAX_RATING - filled)


# ---- Rules -----------------------------------------------------------------------


def _paragraph(b: ParagraphBlock) -> RenderNode:
    return node("p", *inline(b.content), class_="block-paragraph")


def _heading(b: HeadingBlock) -> RenderNode:
    return node(b.type, text=b.content)


def _image(b: ImageBlock) -> RenderNode:
    c = b.content
    parts = [node("img", src=c.url, alt=c.alt)]
    if c.caption:
        parts.append(node("figcaption", text=c.caption))
    return node("figure", *parts, class_="block-image")


def _gallery(b: GalleryBlock) -> RenderNode:
    figures = []
    for item in b.content.items:
        parts = [node("img", src=item.url, alt=item.caption or "Gallery image")]
        if item.caption:
            parts.append(node("figcaption", text=item.caption))
        figures.append(node("figure", *parts))
    return node("div", *figures, class_="block-gallery")


def _quote(b: QuoteBlock) -> RenderNode:
    parts = [node("p", text=b.content.text)]
    if b.content.author:
        parts.append(node("cite", text=f"— {b.content.author}"))
    return node("blockquote", *parts, class_="block-quote")


def _code(b: CodeBlock) -> RenderNode:
    label = node("span", text=b.content.language or "Code", class_="code-language")
    body = node("pre", node("code", text=b.content.code))
    return node("div", label, body, class_="block-code")


def _list(b: ListBlock) -> RenderNode:
    style = b.content.style
    items = [
        node(
            "li",
            node("span", text=list_marker(style, i), class_="list-marker"),
            node("span", text=item),
        )
        for i, item in enumerate(b.content.items)
    ]
    return node("ol" if style == "numbered" else "ul", *items, class_=f"block-list list-{style}")


def _callout(b: CalloutBlock) -> RenderNode:
    severity = b.content.severity
    label = node("strong", text=CALLOUT_LABELS[severity], class_="callout-label")
    return node(
        "aside",
        label,
        node("p", text=b.content.text),
        class_=f"block-callout callout-{severity}",
    )


def _divider(b: Any) -> RenderNode:
    return node("hr", class_="block-divider")


def _faq(b: FaqBlock) -> RenderNode:
    pairs = [
        node(
            "div",
            node("p", text=item.question, class_="faq-question"),
            node("p", text=item.answer, class_="faq-answer"),
            class_="faq-item",
        )
        for item in b.content.items
    ]
    return node("div", *pairs, class_="block-faq")


def _howto(b: HowToBlock) -> RenderNode:
    parts: list[RenderNode] = []
    if b.content.name:
        parts.append(node("h3", text=b.content.name))
    steps = []
    for i, step in enumerate(b.content.steps):
        body = (
            node("div", *render_blocks(step.blocks), class_="step-body")
            if step.is_rich
            else node("p", *inline(step.text), class_="step-text")
        )
        steps.append(
            node(
                "li",
                node("span", text=f"Step {i + 1}", class_="step-label"),
                node("strong", text=step.title, class_="step-title"),
                body,
            )
        )
    parts.append(node("ol", *steps, class_="howto-steps"))
    return node("section", *parts, class_="block-howto")


def _table(b: TableBlock) -> RenderNode:
    head = node("thead", node("tr", *(node("th", text=h) for h in b.content.headers)))
    body = node(
        "tbody",
        *(node("tr", *(node("td", text=cell) for cell in row)) for row in b.content.rows),
    )
    return node("table", head, body, class_="block-table")


def _video(b: VideoBlock) -> RenderNode:
    frame = node(
        "iframe",
        src=b.embed_url,
        title="YouTube video",
        allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture",
        allowfullscreen="true",
    )
    return node("div", frame, class_="block-video")


def _review(b: ReviewBlock) -> RenderNode:
    c = b.content
    rating = c.rating if c.rating is not None else 0
    return node(
        "div",
        node("h4", text=c.item_name),
        node("span", text=stars(c.rating), class_="review-stars"),
        node("span", text=f"{rating}/{MAX_RATING}", class_="review-rating"),
        node("p", text=c.text, class_="review-text"),
        node("p", text=f"— {c.author}", class_="review-author"),
        class_="block-review",
    )


RULES: dict[BlockKind, Callable[[Any], RenderNode]] = {
    BlockKind.PARAGRAPH: _paragraph,
    BlockKind.H1: _heading,
    BlockKind.H2: _heading,
    BlockKind.H3: _heading,
    BlockKind.IMAGE: _image,
    BlockKind.GALLERY: _gallery,
    BlockKind.QUOTE: _quote,
    BlockKind.CODE: _code,
    BlockKind.LIST: _list,
    BlockKind.CALLOUT: _callout,
    BlockKind.DIVIDER: _divider,
    BlockKind.FAQ: _faq,
    BlockKind.HOWTO: _howto,
    BlockKind.TABLE: _table,
    BlockKind.VIDEO: _video,
    BlockKind.REVIEW: _review,
}

_missing = set(BlockKind) - set(RULES)
if _missing:  # pragma: no cover - import-time guard
    raise RuntimeError(f"renderer has no rule for: {sorted(k.value for k in _missing)}")


# ---- Entry points ----------------------------------------------------------------


def render_block(block: AnyBlock) -> RenderNode | None:
    """Render one block, keyed by its id; ``None`` when it renders as nothing."""
    if isinstance(block, CorruptBlock):
        logger.debug("Skipping corrupt block %r", block.id)
        return None
    try:
        out = RULES[block.kind](block)
    except Exception as exc:
        logger.warning("Rendering %s block %r failed: %s", block.type, block.id, exc)
        return None
    return out.model_copy(update={"key": block.id})


def render_blocks(blocks: Iterable[AnyBlock]) -> tuple[RenderNode, ...]:
    return tuple(n for n in (render_block(b) for b in blocks) if n is not None)


def render(doc: Document) -> RenderNode:
    """Render ``doc`` to an ``article.block-document`` tree."""
    return node("article", *render_blocks(doc), class_="block-document")


__all__ = [
    "CALLOUT_LABELS",
    "MAX_RATING",
    "RULES",
    "list_marker",
    "render",
    "render_block",
    "render_blocks",
    "stars",
]
