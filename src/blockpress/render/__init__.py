"""Presentation: render a Document to a node tree, HTML or Markdown."""

from __future__ import annotations

from .html import render_html, to_html
from .markdown import render_markdown, to_markdown
from .renderer import render, render_block

__all__ = ["render", "render_block", "render_html", "render_markdown", "to_html", "to_markdown"]
