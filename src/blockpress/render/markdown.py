"""Render a Document to Markdown for export.

Blocks are separated by a blank line. Rich How-To steps are rendered
recursively with their nested blocks indented under the step. Corrupt blocks
are skipped.
"""

from __future__ import annotations

from collections.abc import Callable
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
    QuoteBlock,
    ReviewBlock,
    TableBlock,
    VideoBlock,
)

from .renderer import CALLOUT_LABELS, MAX_RATING, stars

STEP_INDENT = "   "


def render_markdown(doc: Document) -> str:
    """Render ``doc`` to Markdown text (no trailing newline)."""
    parts = [text for text in (_render_block(b) for b in doc) if text]
    return "\n\n".join(parts)


to_markdown = render_markdown


def _render_block(block: AnyBlock) -> str:
    if isinstance(block, CorruptBlock):
        return ""
    return RULES[block.kind](block)


def _indent(text: str, prefix: str) -> str:
    return "\n".join(prefix + line if line else line for line in text.splitlines())


def _paragraph(b: Any) -> str:
    return str(b.content)


def _heading(b: HeadingBlock) -> str:
    return f"{'#' * b.level} {b.content}"


def _image(b: ImageBlock) -> str:
    line = f"![{b.content.alt}]({b.content.url})"
    if b.content.caption:
        line += f"\n*{b.content.caption}*"
    return line


def _gallery(b: GalleryBlock) -> str:
    return "\n".join(f"![{item.caption}]({item.url})" for item in b.content.items)


def _quote(b: QuoteBlock) -> str:
    lines = [f"> {line}" for line in b.content.text.splitlines() or [""]]
    if b.content.author:
        lines.append(f"> — {b.content.author}")
    return "\n".join(lines)


def _code(b: CodeBlock) -> str:
    return f"```{b.content.language}\n{b.content.code}\n```"


def _list(b: ListBlock) -> str:
    style = b.content.style
    lines = []
    for i, item in enumerate(b.content.items):
        if style == "numbered":
            lines.append(f"{i + 1}. {item}")
        elif style == "check":
            lines.append(f"- [x] {item}")
        else:
            lines.append(f"- {item}")
    return "\n".join(lines)


def _callout(b: CalloutBlock) -> str:
    return f"> **{CALLOUT_LABELS[b.content.severity]}:** {b.content.text}"


def _divider(b: Any) -> str:
    return "---"


def _faq(b: FaqBlock) -> str:
    return "\n\n".join(f"**Q: {item.question}**\n\nA: {item.answer}" for item in b.content.items)


def _howto(b: HowToBlock) -> str:
    lines = []
    if b.content.name:
        lines.append(f"### {b.content.name}\n")
    for i, step in enumerate(b.content.steps):
        lines.append(f"{i + 1}. **{step.title}**")
        body = render_markdown(step.blocks) if step.is_rich else step.text
        if body:
            lines.append(_indent(body, STEP_INDENT))
    return "\n".join(lines)


def _cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def _table(b: TableBlock) -> str:
    headers = b.content.headers
    lines = [
        "| " + " | ".join(_cell(h) for h in headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    lines.extend("| " + " | ".join(_cell(c) for c in row) + " |" for row in b.content.rows)
    return "\n".join(lines)


def _video(b: VideoBlock) -> str:
    return f"[Watch on YouTube](https://www.youtube.com/watch?v={b.content})"


def _review(b: ReviewBlock) -> str:
    c = b.content
    rating = c.rating if c.rating is not None else 0
    lines = [f"**{c.item_name}** {stars(c.rating)} ({rating}/{MAX_RATING})"]
    if c.text:
        lines.append(f"\n> {c.text}")
    if c.author:
        lines.append(f"\n— {c.author}")
    return "\n".join(lines)


RULES: dict[BlockKind, Callable[[Any], str]] = {
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


__all__ = ["RULES", "render_markdown", "to_markdown"]
