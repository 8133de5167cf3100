"""Per-kind payload helpers.

Each helper takes a payload model and returns a new one; nothing is mutated.
Feed the result to :func:`blockpress.editor.operations.update_payload` (or
``EditSession.update``) to apply it to a block.

Out-of-range indexes are no-ops and return the input unchanged. Table helpers
keep the table rectangular. Removing the last row leaves one row of empty
cells; removing the last column is a no-op.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from blockpress.core.contracts.block import (
    AnyBlock,
    FaqContent,
    FaqItem,
    GalleryContent,
    GalleryItem,
    HowToContent,
    ListContent,
    ListStyle,
    ParagraphBlock,
    Step,
    TableContent,
)
from blockpress.core.ids import IdGenerator

# ---- Table ---------------------------------------------------------------------


def add_row(table: TableContent, index: int | None = None) -> TableContent:
    """Insert an empty row before ``index`` (append when ``None``)."""
    row = ("",) * len(table.headers)
    rows = list(table.rows)
    if index is None:
        rows.append(row)
    elif 0 <= index <= len(rows):
        rows.insert(index, row)
    else:
        return table
    return table.model_copy(update={"rows": tuple(rows)})


def remove_row(table: TableContent, index: int) -> TableContent:
    """Remove one row; removing the last row leaves one row of empty cells."""
    if not 0 <= index < len(table.rows):
        return table
    rows = table.rows[:index] + table.rows[index + 1 :]
    if not rows:
        blank = ("",) * len(table.headers)
        if table.rows == (blank,):
            return table
        rows = (blank,)
    return table.model_copy(update={"rows": rows})


def add_column(
    table: TableContent, header: str | None = None, index: int | None = None
) -> TableContent:
    """Insert a column (empty cells) before ``index``; append when ``None``."""
    width = len(table.headers)
    at = width if index is None else index
    if not 0 <= at <= width:
        return table
    name = header if header is not None else f"Column {width + 1}"
    headers = (*table.headers[:at], name, *table.headers[at:])
    rows = tuple((*row[:at], "", *row[at:]) for row in table.rows)
    return table.model_copy(update={"headers": headers, "rows": rows})


def remove_column(table: TableContent, index: int) -> TableContent:
    if len(table.headers) <= 1 or not 0 <= index < len(table.headers):
        return table
    headers = table.headers[:index] + table.headers[index + 1 :]
    rows = tuple(row[:index] + row[index + 1 :] for row in table.rows)
    return table.model_copy(update={"headers": headers, "rows": rows})


def set_header(table: TableContent, index: int, value: str) -> TableContent:
    if not 0 <= index < len(table.headers):
        return table
    headers = (*table.headers[:index], value, *table.headers[index + 1 :])
    return table.model_copy(update={"headers": headers})


def set_cell(table: TableContent, row: int, col: int, value: str) -> TableContent:
    if not 0 <= row < len(table.rows) or not 0 <= col < len(table.headers):
        return table
    cells = table.rows[row]
    new_row = (*cells[:col], value, *cells[col + 1 :])
    rows = (*table.rows[:row], new_row, *table.rows[row + 1 :])
    return table.model_copy(update={"rows": rows})


# ---- FAQ -----------------------------------------------------------------------


def add_faq_item(faq: FaqContent, question: str = "", answer: str = "") -> FaqContent:
    item = FaqItem(question=question, answer=answer)
    return faq.model_copy(update={"items": (*faq.items, item)})


def remove_faq_item(faq: FaqContent, index: int) -> FaqContent:
    if not 0 <= index < len(faq.items):
        return faq
    return faq.model_copy(update={"items": faq.items[:index] + faq.items[index + 1 :]})


def set_faq_item(
    faq: FaqContent,
    index: int,
    *,
    question: str | None = None,
    answer: str | None = None,
) -> FaqContent:
    """Update the question and/or answer of one pair; ``None`` keeps a field."""
    if not 0 <= index < len(faq.items):
        return faq
    changes: dict[str, str] = {}
    if question is not None:
        changes["question"] = question
    if answer is not None:
        changes["answer"] = answer
    item = faq.items[index].model_copy(update=changes)
    return faq.model_copy(update={"items": (*faq.items[:index], item, *faq.items[index + 1 :])})


# ---- How-To --------------------------------------------------------------------


def _replace_step(howto: HowToContent, index: int, step: Step) -> HowToContent:
    steps = (*howto.steps[:index], step, *howto.steps[index + 1 :])
    return howto.model_copy(update={"steps": steps})


def add_step(howto: HowToContent, title: str = "", text: str = "") -> HowToContent:
    return howto.model_copy(update={"steps": (*howto.steps, Step(title=title, text=text))})


def remove_step(howto: HowToContent, index: int) -> HowToContent:
    if not 0 <= index < len(howto.steps):
        return howto
    return howto.model_copy(update={"steps": howto.steps[:index] + howto.steps[index + 1 :]})


def set_step_title(howto: HowToContent, index: int, title: str) -> HowToContent:
    if not 0 <= index < len(howto.steps):
        return howto
    return _replace_step(howto, index, howto.steps[index].model_copy(update={"title": title}))


def set_step_text(howto: HowToContent, index: int, text: str) -> HowToContent:
    """Set the plain body of a text-mode step; rich steps are left alone."""
    if not 0 <= index < len(howto.steps) or howto.steps[index].is_rich:
        return howto
    return _replace_step(howto, index, howto.steps[index].model_copy(update={"text": text}))


def set_step_blocks(
    howto: HowToContent, index: int, blocks: tuple[AnyBlock, ...]
) -> HowToContent:
    """Replace a step's nested Document.

    An empty ``blocks`` puts the step back in text mode with an empty body.
    """
    if not 0 <= index < len(howto.steps):
        return howto
    step = howto.steps[index].model_copy(update={"blocks": tuple(blocks), "text": ""})
    return _replace_step(howto, index, step)


def step_to_rich(howto: HowToContent, index: int, *, ids: IdGenerator) -> HowToContent:
    """Switch a text step to rich mode, seeding one paragraph with its text."""
    if not 0 <= index < len(howto.steps) or howto.steps[index].is_rich:
        return howto
    step = howto.steps[index]
    seed = ParagraphBlock(id=ids(), content=step.text)
    return _replace_step(howto, index, step.model_copy(update={"blocks": (seed,), "text": ""}))


def step_to_text(howto: HowToContent, index: int) -> HowToContent:
    """Switch a rich step back to text mode.

    The new text is the nested paragraph and heading text joined with spaces.
    Every other nested kind is dropped.
    """
    if not 0 <= index < len(howto.steps) or not howto.steps[index].is_rich:
        return howto
    step = howto.steps[index]
    flat = step.model_copy(update={"text": step.fallback_text(), "blocks": ()})
    return _replace_step(howto, index, flat)


def toggle_step_mode(howto: HowToContent, index: int, *, ids: IdGenerator) -> HowToContent:
    if not 0 <= index < len(howto.steps):
        return howto
    if howto.steps[index].is_rich:
        return step_to_text(howto, index)
    return step_to_rich(howto, index, ids=ids)


# ---- List ----------------------------------------------------------------------


def add_list_item(items: ListContent, text: str = "") -> ListContent:
    return items.model_copy(update={"items": (*items.items, text)})


def remove_list_item(items: ListContent, index: int) -> ListContent:
    if not 0 <= index < len(items.items):
        return items
    return items.model_copy(update={"items": items.items[:index] + items.items[index + 1 :]})


def set_list_item(items: ListContent, index: int, text: str) -> ListContent:
    if not 0 <= index < len(items.items):
        return items
    return items.model_copy(
        update={"items": (*items.items[:index], text, *items.items[index + 1 :])}
    )


def set_list_style(items: ListContent, style: ListStyle) -> ListContent:
    return items.model_copy(update={"style": style})


# ---- Gallery -------------------------------------------------------------------


def add_gallery_item(gallery: GalleryContent, url: str = "", caption: str = "") -> GalleryContent:
    item = GalleryItem(url=url, caption=caption)
    return gallery.model_copy(update={"items": (*gallery.items, item)})


def remove_gallery_item(gallery: GalleryContent, index: int) -> GalleryContent:
    if not 0 <= index < len(gallery.items):
        return gallery
    items = gallery.items[:index] + gallery.items[index + 1 :]
    return gallery.model_copy(update={"items": items})


def set_gallery_item(
    gallery: GalleryContent,
    index: int,
    *,
    url: str | None = None,
    caption: str | None = None,
) -> GalleryContent:
    if not 0 <= index < len(gallery.items):
        return gallery
    changes: dict[str, str] = {}
    if url is not None:
        changes["url"] = url
    if caption is not None:
        changes["caption"] = caption
    item = gallery.items[index].model_copy(update=changes)
    items = (*gallery.items[:index], item, *gallery.items[index + 1 :])
    return gallery.model_copy(update={"items": items})


# ---- Video ---------------------------------------------------------------------

_YOUTUBE_HOSTS = frozenset({"youtube.com", "www.youtube.com", "m.youtube.com"})


def video_id_from_url(value: str) -> str | None:
    """Extract a YouTube video id from a watch, short-link, embed or shorts URL.

    A value without a scheme or slash is taken to be an id already. Returns
    ``None`` for URLs that are not YouTube links.

    >>> video_id_from_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=3")
    'dQw4w9WgXcQ'
    >>> video_id_from_url("https://youtu.be/dQw4w9WgXcQ?si=x")
    'dQw4w9WgXcQ'
    """
    value = value.strip()
    if not value:
        return None
    if "/" not in value and ":" not in value:
        return value

    parsed = urlparse(value if "://" in value else f"https://{value}")
    host = (parsed.hostname or "").lower()
    parts = [p for p in parsed.path.split("/") if p]
    if host == "youtu.be":
        return parts[0] if parts else None
    if host not in _YOUTUBE_HOSTS:
        return None
    if parts[:1] == ["watch"]:
        found = parse_qs(parsed.query).get("v")
        return found[0] if found else None
    if len(parts) >= 2 and parts[0] in ("embed", "shorts", "v", "live"):
        return parts[1]
    return None


__all__ = [
    "add_column",
    "add_faq_item",
    "add_gallery_item",
    "add_list_item",
    "add_row",
    "add_step",
    "remove_column",
    "remove_faq_item",
    "remove_gallery_item",
    "remove_list_item",
    "remove_row",
    "remove_step",
    "set_cell",
    "set_faq_item",
    "set_gallery_item",
    "set_header",
    "set_list_item",
    "set_list_style",
    "set_step_blocks",
    "set_step_text",
    "set_step_title",
    "step_to_rich",
    "step_to_text",
    "toggle_step_mode",
    "video_id_from_url",
]
