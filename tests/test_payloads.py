"""Tests for the per-kind payload helpers."""

from __future__ import annotations

import random

import pytest

from blockpress.core.contracts.block import (
    FaqContent,
    GalleryContent,
    HeadingBlock,
    HowToContent,
    ListContent,
    ParagraphBlock,
    Step,
    TableContent,
    new_block,
)
from blockpress.core.ids import SequentialIds
from blockpress.editor import payloads as p


def _table() -> TableContent:
    return new_block("table", "t").content  # type: ignore[no-any-return]


def _assert_rectangular(table: TableContent) -> None:
    assert len(table.headers) >= 1
    assert len(table.rows) >= 1
    assert all(len(row) == len(table.headers) for row in table.rows)


def test_table_rows_and_columns() -> None:
    t = p.add_row(_table())
    assert t.rows == (("", ""), ("", ""))
    t = p.add_column(t)
    assert t.headers == ("Column 1", "Column 2", "Column 3")
    _assert_rectangular(t)

    t = p.set_cell(t, 1, 2, "x")
    t = p.set_header(t, 0, "Name")
    assert t.rows[1] == ("", "", "x")
    assert t.headers[0] == "Name"

    t = p.remove_column(t, 1)
    assert t.headers == ("Name", "Column 3")
    assert t.rows[1] == ("", "x")
    t = p.remove_row(t, 0)
    assert t.rows == (("", "x"),)


def test_add_column_at_index_with_header() -> None:
    t = p.set_cell(_table(), 0, 0, "a")
    t = p.add_column(t, "Mid", index=1)
    assert t.headers == ("Column 1", "Mid", "Column 2")
    assert t.rows == (("a", "", ""),)


def test_removing_last_row_leaves_empty_cells() -> None:
    t = TableContent(headers=("A", "B"), rows=(("x", "y"),))
    cleared = p.remove_row(t, 0)
    assert cleared.headers == ("A", "B")
    assert cleared.rows == (("", ""),)
    # already blank: nothing left to clear
    assert p.remove_row(cleared, 0) is cleared


def test_table_never_loses_its_last_column() -> None:
    t = TableContent(headers=("A",), rows=(("1",),))
    assert p.remove_column(t, 0) is t


def test_table_out_of_range_is_noop() -> None:
    t = _table()
    assert p.set_cell(t, 5, 0, "x") is t
    assert p.set_cell(t, 0, -1, "x") is t
    assert p.set_header(t, 9, "x") is t
    assert p.add_row(t, index=7) is t
    assert p.add_column(t, index=9) is t


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_table_stays_rectangular_under_random_edits(seed: int) -> None:
    rng = random.Random(seed)
    t = _table()
    for _ in range(200):
        op = rng.choice(["add_row", "remove_row", "add_column", "remove_column", "set_cell"])
        if op == "add_row":
            t = p.add_row(t, rng.randint(0, len(t.rows)))
        elif op == "remove_row":
            t = p.remove_row(t, rng.randrange(len(t.rows)))
        elif op == "add_column":
            t = p.add_column(t, index=rng.randint(0, len(t.headers)))
        elif op == "remove_column":
            t = p.remove_column(t, rng.randrange(len(t.headers)))
        else:
            t = p.set_cell(t, rng.randrange(len(t.rows)), rng.randrange(len(t.headers)), "v")
        _assert_rectangular(t)


def test_faq_helpers() -> None:
    faq = FaqContent()
    faq = p.add_faq_item(faq, "Q?", "A")
    faq = p.add_faq_item(faq)
    faq = p.set_faq_item(faq, 1, question="Q2?")
    assert [(i.question, i.answer) for i in faq.items] == [("Q?", "A"), ("Q2?", "")]
    faq = p.remove_faq_item(faq, 0)
    assert len(faq.items) == 1
    assert p.remove_faq_item(faq, 3) is faq
    assert p.set_faq_item(faq, 3, answer="x") is faq


def test_howto_step_helpers() -> None:
    h = HowToContent()
    h = p.add_step(h, "Boil", "Heat water")
    h = p.add_step(h)
    h = p.set_step_title(h, 1, "Pour")
    h = p.set_step_text(h, 1, "Slowly")
    assert [(s.title, s.text) for s in h.steps] == [("Boil", "Heat water"), ("Pour", "Slowly")]
    h = p.remove_step(h, 0)
    assert [s.title for s in h.steps] == ["Pour"]
    assert p.set_step_title(h, 5, "x") is h


def test_step_mode_switch_round_trip() -> None:
    ids = SequentialIds("s")
    h = HowToContent(steps=(Step(title="T", text="X"),))

    rich = p.step_to_rich(h, 0, ids=ids)
    step = rich.steps[0]
    assert step.is_rich and step.text == ""
    assert isinstance(step.blocks[0], ParagraphBlock)
    assert step.blocks[0].content == "X"

    back = p.step_to_text(rich, 0)
    assert not back.steps[0].is_rich
    assert back.steps[0].text == "X"

    assert p.toggle_step_mode(back, 0, ids=ids).steps[0].is_rich
    assert not p.toggle_step_mode(rich, 0, ids=ids).steps[0].is_rich


def test_step_to_text_keeps_only_paragraph_and_heading_text() -> None:
    blocks = (
        ParagraphBlock(id="a", content="One"),
        new_block("image", "i"),
        HeadingBlock(id="h", type="h3", content="Two"),
    )
    h = p.set_step_blocks(HowToContent(steps=(Step(title="T"),)), 0, blocks)
    assert h.steps[0].is_rich
    assert p.step_to_text(h, 0).steps[0].text == "One Two"


def test_set_step_text_ignores_rich_steps() -> None:
    h = p.step_to_rich(HowToContent(steps=(Step(text="X"),)), 0, ids=SequentialIds())
    assert p.set_step_text(h, 0, "new") is h


def test_list_helpers() -> None:
    items = ListContent()
    items = p.add_list_item(items, "a")
    items = p.add_list_item(items, "b")
    items = p.set_list_item(items, 0, "A")
    items = p.set_list_style(items, "numbered")
    assert items.items == ("A", "b") and items.style == "numbered"
    items = p.remove_list_item(items, 1)
    assert items.items == ("A",)
    assert p.remove_list_item(items, 2) is items


def test_gallery_helpers() -> None:
    g = GalleryContent()
    g = p.add_gallery_item(g, "/a.png", "A")
    g = p.add_gallery_item(g)
    g = p.set_gallery_item(g, 1, url="/b.png")
    assert [(i.url, i.caption) for i in g.items] == [("/a.png", "A"), ("/b.png", "")]
    g = p.remove_gallery_item(g, 0)
    assert [i.url for i in g.items] == ["/b.png"]
    assert p.set_gallery_item(g, 4, url="x") is g


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=3", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ?si=abc", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/embed/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("youtube.com/shorts/abc123", "abc123"),
        ("dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://vimeo.com/123", None),
        ("", None),
    ],
)
def test_video_id_from_url(value: str, expected: str | None) -> None:
    assert p.video_id_from_url(value) == expected
