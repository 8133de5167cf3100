"""Tests for EditSession: revisions, the edit log, callbacks and nested steps."""

from __future__ import annotations

from blockpress.core.codec import parse
from blockpress.core.contracts.block import HowToBlock, ParagraphBlock, TableBlock
from blockpress.core.ids import SequentialIds
from blockpress.editor import payloads as p
from blockpress.editor.session import EditSession


def _session(stored: str = "Hello") -> tuple[EditSession, list[str]]:
    seen: list[str] = []
    return EditSession.from_stored(stored, ids=SequentialIds(), on_change=seen.append), seen


def test_from_stored_hydrates_without_a_revision() -> None:
    s, seen = _session()
    assert s.revision == 0
    assert s.document[0].content == "Hello"  # type: ignore[union-attr]
    assert s.stored == '[{"id":"b1","type":"paragraph","content":"Hello"}]'
    assert seen == []


def test_effective_mutations_bump_revision_and_call_back() -> None:
    s, seen = _session()
    new_id = s.insert_after("b1", "divider")
    assert s.revision == 1
    assert s.focus == new_id
    assert len(seen) == 1
    assert parse(seen[-1]) == s.document

    assert s.update("b1", "Hi")
    assert s.revision == 2
    assert [r.operation for r in s.records()] == ["insert", "update"]
    assert [r.revision for r in s.records()] == [1, 2]
    assert s.records()[0].note == "divider"


def test_noops_leave_no_trace() -> None:
    s, seen = _session()
    assert not s.move("b1", "up")
    assert not s.update("ghost", "x")
    assert not s.update("b1", "Hello")
    assert not s.erase_empty("b1")
    assert s.revision == 0 and seen == [] and s.records() == ()


def test_new_ids_never_collide_with_stored_ones() -> None:
    s = EditSession.from_stored(
        '[{"id":"b1","type":"paragraph","content":"a"},{"id":"b2","type":"divider"}]',
        ids=SequentialIds(),
    )
    assert s.insert_after(None, "paragraph") == "b3"


def test_submit_and_erase_move_focus() -> None:
    s, _ = _session()
    new_id = s.submit_text("b1")
    assert new_id is not None and s.focus == new_id
    assert s.erase_empty(new_id)
    assert s.focus == "b1"
    assert len(s.document) == 1


def test_delete_last_block_keeps_one_paragraph() -> None:
    s, seen = _session()
    assert s.delete("b1")
    assert len(s.document) == 1
    assert isinstance(s.document[0], ParagraphBlock)
    assert s.focus == s.document[0].id
    assert len(seen) == 1


def test_edit_applies_payload_helper_to_current_content() -> None:
    s, _ = _session()
    table_id = s.insert_after("b1", "table")
    assert s.edit(table_id, p.add_row)
    assert s.edit(table_id, lambda t: p.set_cell(t, 1, 0, "x"))
    table = s.find(table_id)
    assert isinstance(table, TableBlock)
    assert table.content.rows == (("", ""), ("x", ""))
    assert not s.edit("ghost", p.add_row)


def test_nested_step_session_commits_into_parent() -> None:
    s, seen = _session()
    howto_id = s.insert_after("b1", "howto")
    s.edit(howto_id, lambda h: p.set_step_title(h, 0, "Mix"))
    before = s.revision

    child = s.open_step(howto_id, 0)
    assert child is not None
    first = child.document[0].id
    assert child.update(first, "Stir well")
    child.insert_after(first, "h3")

    block = s.find(howto_id)
    assert isinstance(block, HowToBlock)
    step = block.content.steps[0]
    assert step.is_rich
    assert step.fallback_text() == "Stir well"
    assert s.revision == before + 2
    assert parse(seen[-1]) == s.document


def test_nested_commit_is_dropped_when_parent_block_is_gone() -> None:
    s, _ = _session()
    howto_id = s.insert_after("b1", "howto")
    child = s.open_step(howto_id, 0)
    assert child is not None
    s.delete(howto_id)
    revision = s.revision

    assert child.update(child.document[0].id, "late")
    assert s.revision == revision
    assert s.find(howto_id) is None


def test_open_step_rejects_bad_targets() -> None:
    s, _ = _session()
    howto_id = s.insert_after("b1", "howto")
    assert s.open_step("b1", 0) is None
    assert s.open_step(howto_id, 3) is None


_THREE_STEPS = (
    '[{"id":"h","type":"howto","content":{"name":"","steps":['
    '{"title":"A","text":"a"},{"title":"B","text":"b"},{"title":"C","text":"c"}]}}]'
)


def _steps(s: EditSession) -> list[tuple[str, str, list[str]]]:
    block = s.find("h")
    assert isinstance(block, HowToBlock)
    return [
        (st.title, st.text, [b.content for b in st.blocks])  # type: ignore[union-attr]
        for st in block.content.steps
    ]


def test_nested_commit_follows_its_step_when_earlier_steps_are_removed() -> None:
    s, _ = _session(_THREE_STEPS)
    child = s.open_step("h", 1)
    assert child is not None
    s.edit("h", lambda h: p.remove_step(h, 0))

    assert child.update(child.document[0].id, "nested for B")
    assert _steps(s) == [("B", "", ["nested for B"]), ("C", "c", [])]

    # renaming the step from outside does not detach the child
    s.edit("h", lambda h: p.set_step_title(h, 0, "B2"))
    child.insert_after(child.document[0].id, "paragraph")
    assert _steps(s) == [("B2", "", ["nested for B", ""]), ("C", "c", [])]


def test_nested_commit_is_dropped_when_its_step_is_removed() -> None:
    s, _ = _session(_THREE_STEPS)
    child = s.open_step("h", 1)
    assert child is not None
    s.edit("h", lambda h: p.remove_step(h, 1))
    revision = s.revision

    assert child.update(child.document[0].id, "late")
    assert s.revision == revision
    assert _steps(s) == [("A", "a", []), ("C", "c", [])]
