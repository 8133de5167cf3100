"""Inline Markdown links in plain block text.

Only the ``[label](url)`` form is recognised; everything else is literal text.
Text runs become ``#text`` nodes so the HTML pass escapes them like any other
text. Links are kept only for ``http``, ``https`` and ``mailto`` URLs and for
relative URLs; any other scheme (``javascript:``, ``data:``) stays literal
text.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from blockpress.core.contracts.presentation import RenderNode, node

LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

SAFE_SCHEMES = frozenset({"", "http", "https", "mailto"})

TEXT_TAG = "#text"

# browsers drop these anywhere in a URL before reading its scheme
_IGNORED = re.compile(r"[\x00-\x20\x7f]")


def is_safe_href(url: str) -> bool:
    """True when ``url`` is relative or uses an allowed scheme.

    >>> is_safe_href("https://x.io"), is_safe_href("/docs"), is_safe_href("javascript:x")
    (True, True, False)
    """
    try:
        scheme = urlsplit(_IGNORED.sub("", url)).scheme
    except ValueError:
        return False
    return scheme.lower() in SAFE_SCHEMES


def inline(text: str) -> tuple[RenderNode, ...]:
    """Split ``text`` into text runs and anchor nodes.

    >>> [n.tag for n in inline("see [docs](https://x.io) now")]
    ['#text', 'a', '#text']
    """
    out: list[RenderNode] = []
    pending = ""
    pos = 0
    for match in LINK_RE.finditer(text):
        pending += text[pos : match.start()]
        pos = match.end()
        if not is_safe_href(match.group(2)):
            pending += match.group(0)
            continue
        if pending:
            out.append(node(TEXT_TAG, text=pending))
            pending = ""
        out.append(node("a", text=match.group(1), href=match.group(2)))
    pending += text[pos:]
    if pending:
        out.append(node(TEXT_TAG, text=pending))
    return tuple(out)


__all__ = ["LINK_RE", "SAFE_SCHEMES", "TEXT_TAG", "inline", "is_safe_href"]
