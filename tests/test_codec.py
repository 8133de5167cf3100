"""Tests for the Document Codec: the three read shapes and the one write shape."""

from __future__ import annotations

import pytest

from blockpress.core.codec import is_block_array, parse, serialize
from blockpress.core.contracts.block import (
    BlockKind,
    CorruptBlock,
    ParagraphBlock,
    TableBlock,
    new_block,
)
from blockpress.core.ids import SequentialIds


def test_empty_and_none_parse_to_one_empty_paragraph() -> None:
    for stored in ("", None):
        doc = parse(stored)
        assert len(doc) == 1
        assert isinstance(doc[0], ParagraphBlock)
        assert doc[0].content == ""


def test_legacy_text_becomes_one_paragraph() -> None:
    doc = parse("Hello world")
    assert len(doc) == 1
    assert doc[0].type == "paragraph"
    assert doc[0].content == "Hello world"
    assert serialize(doc) == '[{"id":"b1","type":"paragraph","content":"Hello world"}]'


def test_legacy_markup_is_kept_as_text() -> None:
    doc = parse("<p>hi</p>")
    assert doc[0].content == "<p>hi</p>"
    assert parse("[]")[0].content == "[]"


def test_truncated_block_array_falls_back_to_text() -> None:
    doc = parse('[{"id":')
    assert len(doc) == 1
    assert doc[0].content == '[{"id":'


def test_non_object_element_falls_back_to_text() -> None:
    stored = '[{"id":"a","type":"paragraph","content":"x"},5]'
    doc = parse(stored)
    assert len(doc) == 1
    assert doc[0].content == stored


def test_round_trip_preserves_ids_and_content() -> None:
    ids = SequentialIds("k")
    doc = tuple(new_block(kind, ids()) for kind in BlockKind)
    again = parse(serialize(doc))
    assert again == doc
    assert [b.id for b in again] == [b.id for b in doc]
    assert serialize(again) == serialize(doc)


def test_serialize_is_compact_and_keeps_unicode() -> None:
    out = serialize(parse("héllo ✓"))
    assert out.startswith('[{"id"')
    assert "héllo ✓" in out
    assert ", " not in out and ": " not in out


def test_serialize_empty_document() -> None:
    assert serialize(()) == ""
    assert len(parse(serialize(()))) == 1


def test_duplicate_and_missing_ids_are_reissued() -> None:
    stored = (
        '[{"id":"a","type":"paragraph","content":"1"},'
        '{"id":"a","type":"paragraph","content":"2"},'
        '{"type":"divider"}]'
    )
    doc = parse(stored, ids=SequentialIds())
    # the missing id is issued while decoding, the duplicate afterwards
    assert [b.id for b in doc] == ["a", "b2", "b1"]
    assert [getattr(b, "content", None) for b in doc[:2]] == ["1", "2"]


def test_corrupt_block_is_kept_and_round_trips() -> None:
    stored = (
        '[{"id":"a","type":"mystery","x":1},'
        '{"id":"b","type":"paragraph","content":"ok"}]'
    )
    doc = parse(stored)
    assert isinstance(doc[0], CorruptBlock)
    assert doc[1].content == "ok"
    assert serialize(doc) == stored


@pytest.mark.parametrize(
    "content",
    [
        '{"steps":5}',
        '{"steps":true}',
        '{"steps":"x"}',
        '{"steps":[5]}',
        '{"steps":[{"title":"t","blocks":7}]}',
        '{"steps":[{"title":"t","blocks":"x"}]}',
        '{"steps":[{"title":"t","blocks":[3]}]}',
    ],
)
def test_howto_with_malformed_steps_is_kept_as_corrupt(content: str) -> None:
    stored = (
        f'[{{"id":"h","type":"howto","content":{content}}},'
        '{"id":"p","type":"paragraph","content":"after"}]'
    )
    doc = parse(stored)
    assert isinstance(doc[0], CorruptBlock)
    assert doc[0].id == "h"
    assert doc[1].content == "after"


def test_ragged_table_is_repaired_on_parse() -> None:
    stored = '[{"id":"t","type":"table","content":{"headers":["A"],"rows":[["1","2"],["3"]]}}]'
    table = parse(stored)[0]
    assert isinstance(table, TableBlock)
    assert table.content.headers == ("A", "Column 2")
    assert table.content.rows == (("1", "2"), ("3", ""))


def test_is_block_array() -> None:
    assert is_block_array('[{"id":"a"}]')
    assert not is_block_array("hello")
    assert not is_block_array("")
    assert not is_block_array(None)
