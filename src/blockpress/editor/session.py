"""
Edit session: the single owner of one Document while it is being authored.

An :class:`EditSession` wraps the pure operations in
:mod:`blockpress.editor.operations` with the state an editor needs:

- the current Document and the ``IdGenerator`` that issues its ids,
- the focus target (the block that should receive input next),
- a revision counter and an append-only log of :class:`EditRecord`,
- an optional ``on_change(stored)`` callback fed with the canonical encoding.

Only *effective* mutations count. When an operation returns its input
unchanged the revision stays put, nothing is logged and the callback is not
called.

Nested How-To steps are edited through :meth:`EditSession.open_step`, which
returns a child session over the step's nested Document. Every change in the
child is committed into the parent with one payload update, applied only if
the How-To block and the step still exist.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from blockpress.core.codec import parse, serialize
from blockpress.core.contracts.block import (
    AnyBlock,
    BlockKind,
    CorruptBlock,
    Document,
    HowToBlock,
    Step,
    empty_paragraph,
)
from blockpress.core.ids import IdGenerator, make_ids
from blockpress.core.settings import get_logger, load_settings

from . import operations as ops
from .payloads import set_step_blocks
from .trace import EditRecord, utc_timestamp

logger = get_logger(__name__)

OnChange = Callable[[str], None]


class EditSession:
    """
    Revisioned owner of one Document.

    Parameters
    ----------
    doc : Document | None
        Initial Document. ``None`` (or an empty tuple) starts from one empty
        paragraph.
    ids : IdGenerator | None
        Id source for new blocks. Defaults to the configured id style; ids
        already present in ``doc`` are reserved.
    on_change : Callable[[str], None] | None
        Called with the serialized Document after every effective mutation.
    """

    __slots__ = ("_doc", "_ids", "_focus", "_rev", "_records", "_on_change", "_on_commit")

    def __init__(
        self,
        doc: Document | None = None,
        *,
        ids: IdGenerator | None = None,
        on_change: OnChange | None = None,
    ) -> None:
        self._ids: IdGenerator = ids if ids is not None else make_ids(load_settings().id_style)
        if doc:
            self._ids.reserve(_all_ids(doc))
            self._doc: Document = tuple(doc)
        else:
            self._doc = (empty_paragraph(self._ids()),)
        self._focus: str | None = None
        self._rev: int = 0
        self._records: list[EditRecord] = []
        self._on_change = on_change
        self._on_commit: Callable[[Document], None] | None = None

    @classmethod
    def from_stored(
        cls,
        stored: str | None,
        *,
        ids: IdGenerator | None = None,
        on_change: OnChange | None = None,
    ) -> EditSession:
        """Hydrate a session from a stored string (any accepted shape)."""
        gen = ids if ids is not None else make_ids(load_settings().id_style)
        return cls(parse(stored, ids=gen), ids=gen, on_change=on_change)

    # ------------------------------- State ----------------------------------

    @property
    def document(self) -> Document:
        return self._doc

    @property
    def stored(self) -> str:
        """The canonical encoding of the current Document."""
        return serialize(self._doc)

    @property
    def ids(self) -> IdGenerator:
        return self._ids

    @property
    def focus(self) -> str | None:
        """Id of the block that should receive input next, if any."""
        return self._focus

    @property
    def revision(self) -> int:
        return self._rev

    def records(self) -> tuple[EditRecord, ...]:
        return tuple(self._records)

    def find(self, block_id: str) -> AnyBlock | None:
        return ops.find_block(self._doc, block_id)

    def set_focus(self, block_id: str | None) -> None:
        """Move the focus target; unknown ids clear it."""
        self._focus = block_id if ops.index_of(self._doc, block_id) >= 0 else None

    # ----------------------------- Mutations --------------------------------

    def _commit(
        self,
        new_doc: Document,
        operation: str,
        block_id: str | None,
        note: str | None = None,
    ) -> bool:
        if new_doc is self._doc:
            logger.debug("%s on %r was a no-op", operation, block_id)
            return False
        self._doc = new_doc
        self._rev += 1
        self._records.append(
            EditRecord(
                revision=self._rev,
                operation=operation,
                block_id=block_id,
                note=note,
                timestamp=utc_timestamp(),
            )
        )
        if self._on_commit is not None:
            self._on_commit(new_doc)
        if self._on_change is not None:
            self._on_change(serialize(new_doc))
        return True

    def insert_after(self, after_id: str | None, kind: BlockKind | str) -> str:
        """Insert a default block of ``kind``; focus moves to it. Returns its id."""
        new_doc, new_id = ops.insert_after(self._doc, after_id, kind, ids=self._ids)
        self._commit(new_doc, "insert", new_id, note=BlockKind(kind).value)
        self._focus = new_id
        return new_id

    def update(self, block_id: str, payload: Any) -> bool:
        """Replace the payload of ``block_id``. Returns True if anything changed."""
        new_doc = ops.update_payload(self._doc, block_id, payload, ids=self._ids)
        return self._commit(new_doc, "update", block_id)

    def edit(self, block_id: str, change: Callable[[Any], Any]) -> bool:
        """Apply ``change`` to the current payload of ``block_id`` and store it.

        ``change`` is typically one of the helpers in
        :mod:`blockpress.editor.payloads`. Missing and corrupt blocks are no-ops.
        """
        block = self.find(block_id)
        if block is None or isinstance(block, CorruptBlock):
            return False
        return self.update(block_id, change(block.content))

    def move(self, block_id: str, direction: ops.Direction) -> bool:
        return self._commit(ops.move(self._doc, block_id, direction), "move", block_id, direction)

    def delete(self, block_id: str) -> bool:
        """Delete ``block_id``; focus moves to the block that took its place."""
        i = ops.index_of(self._doc, block_id)
        changed = self._commit(ops.delete(self._doc, block_id, ids=self._ids), "delete", block_id)
        if changed:
            self._focus = self._doc[min(max(i - 1, 0), len(self._doc) - 1)].id
        return changed

    def submit_text(self, block_id: str) -> str | None:
        """Enter key: open a paragraph after a text block and focus it."""
        new_doc, new_id = ops.submit_text(self._doc, block_id, ids=self._ids)
        if self._commit(new_doc, "submit", block_id, note=new_id):
            self._focus = new_id
        return new_id

    def erase_empty(self, block_id: str) -> bool:
        """Backspace on an empty text block: delete it, focus the one before."""
        i = ops.index_of(self._doc, block_id)
        changed = self._commit(
            ops.erase_empty(self._doc, block_id, ids=self._ids), "erase", block_id
        )
        if changed:
            self._focus = self._doc[min(max(i - 1, 0), len(self._doc) - 1)].id
        return changed

    # ---------------------------- Nested steps ------------------------------

    def open_step(self, block_id: str, step_index: int) -> EditSession | None:
        """Return a child session over step ``step_index`` of How-To ``block_id``.

        The child shares this session's id generator. Its commits follow the
        step it was opened on, not the position: if steps before it are added
        or removed the commit still lands on that step, and if the step itself
        is gone (or its body was changed from outside) the commit is dropped.
        Returns ``None`` when the block is not a How-To block or the step does
        not exist.
        """
        block = self.find(block_id)
        if not isinstance(block, HowToBlock) or not 0 <= step_index < len(block.content.steps):
            return None
        step = block.content.steps[step_index]
        child = EditSession(step.blocks or None, ids=self._ids)
        child._on_commit = _StepBinding(self, block_id, step_index, step)
        return child

    def _commit_step(self, binding: _StepBinding, nested: Document) -> None:
        block = self.find(binding.block_id)
        index = binding.locate(block)
        if index is None or not isinstance(block, HowToBlock):
            logger.info(
                "Dropped nested edit: the step opened in %r no longer exists", binding.block_id
            )
            return
        content = set_step_blocks(block.content, index, nested)
        self._commit(
            ops.update_payload(self._doc, binding.block_id, content, ids=self._ids),
            "update_step",
            binding.block_id,
            note=str(index),
        )
        updated = self.find(binding.block_id)
        if isinstance(updated, HowToBlock):
            binding.follow(index, updated.content.steps[index])


class _StepBinding:
    """Tracks the step a child session edits, by body rather than position."""

    __slots__ = ("parent", "block_id", "index", "text", "blocks")

    def __init__(self, parent: EditSession, block_id: str, index: int, step: Step) -> None:
        self.parent = parent
        self.block_id = block_id
        self.follow(index, step)

    def follow(self, index: int, step: Step) -> None:
        self.index = index
        self.text = step.text
        self.blocks = step.blocks

    def _matches(self, step: Step) -> bool:
        return step.text == self.text and step.blocks == self.blocks

    def locate(self, block: AnyBlock | None) -> int | None:
        """Current index of the bound step in ``block``, or ``None`` if it is gone.

        The last known position wins when it still matches; otherwise exactly
        one matching step must remain.
        """
        if not isinstance(block, HowToBlock):
            return None
        steps = block.content.steps
        if self.index < len(steps) and self._matches(steps[self.index]):
            return self.index
        found = [i for i, s in enumerate(steps) if self._matches(s)]
        return found[0] if len(found) == 1 else None

    def __call__(self, nested: Document) -> None:
        self.parent._commit_step(self, nested)


def _all_ids(doc: Document) -> list[str]:
    out: list[str] = []
    for block in doc:
        out.append(block.id)
        if isinstance(block, HowToBlock):
            for step in block.content.steps:
                out.extend(_all_ids(step.blocks))
    return out


__all__ = ["EditSession", "OnChange"]
