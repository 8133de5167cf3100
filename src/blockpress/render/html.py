"""HTML serialization of a presentation tree.

All text and attribute values are escaped; nothing in block content is ever
emitted as markup.
"""

from __future__ import annotations

from html import escape

from blockpress.core.contracts.block import Document
from blockpress.core.contracts.presentation import RenderNode

from .inline import TEXT_TAG
from .renderer import render

VOID_TAGS = frozenset({"br", "hr", "img"})


def _attrs(node: RenderNode) -> str:
    return "".join(f' {name}="{escape(value, quote=True)}"' for name, value in node.attrs.items())


def to_html(node: RenderNode) -> str:
    """Serialize ``node`` and its descendants to an HTML string."""
    if node.tag == TEXT_TAG:
        return escape(node.text, quote=False)
    if node.tag in VOID_TAGS:
        return f"<{node.tag}{_attrs(node)}>"
    inner = escape(node.text, quote=False) + "".join(to_html(c) for c in node.children)
    return f"<{node.tag}{_attrs(node)}>{inner}</{node.tag}>"


def render_html(doc: Document) -> str:
    return to_html(render(doc))


__all__ = ["VOID_TAGS", "render_html", "to_html"]
