"""
Block Contract: the closed set of block kinds and their payloads.

A Document is an ordered tuple of blocks. Every block is stored as
``{"id": ..., "type": ..., "content": ...}`` and modelled here as one member
of a pydantic *discriminated union* keyed on ``type``, so a kind can never be
paired with another kind's payload.

Wire names
----------
Payload keys keep the names already present in stored content (``lang`` for
the code language, ``type`` for the callout severity, ``itemName`` for the
reviewed item). Python attributes use snake_case and aliases map them; always
dump with ``by_alias=True``.

Recursion
---------
A How-To ``Step`` may hold a nested Document in ``blocks`` ("rich mode"). The
nested Document uses the very same block types, so How-To blocks can nest to
any depth.

Corrupt blocks
--------------
An element that looks like a block but fails validation is kept verbatim as a
:class:`CorruptBlock`. It round-trips unchanged, renders as nothing and
derives nothing.

Notes
-----
- All models are frozen; edits build new instances.
- Unknown payload keys are kept (``extra="allow"``) so re-serialising stored
  content never drops data written by other tools.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Annotated, Any, Literal, TypeAlias

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_serializer,
    model_validator,
)

from blockpress.core.ids import IdGenerator, RandomIds

# ---- Kinds ---------------------------------------------------------------------


class BlockKind(str, Enum):
    """Stored ``type`` tags of every supported block kind."""

    PARAGRAPH = "paragraph"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    IMAGE = "image"
    GALLERY = "gallery"
    QUOTE = "quote"
    CODE = "code"
    LIST = "list"
    CALLOUT = "callout"
    DIVIDER = "divider"
    FAQ = "faq"
    HOWTO = "howto"
    TABLE = "table"
    VIDEO = "video"
    REVIEW = "review"


YOUTUBE_EMBED = "https://www.youtube.com/embed/{id}"

HEADING_KINDS = frozenset({BlockKind.H1, BlockKind.H2, BlockKind.H3})
TEXT_KINDS = frozenset({BlockKind.PARAGRAPH}) | HEADING_KINDS

ListStyle = Literal["bullet", "numbered", "check"]
Severity = Literal["info", "warning", "success"]

_LIST_STYLES: frozenset[str] = frozenset({"bullet", "numbered", "check"})
_SEVERITIES: frozenset[str] = frozenset({"info", "warning", "success"})


def _text(value: Any) -> Any:
    """Map a stored ``null`` to an empty string; leave everything else alone."""
    return "" if value is None else value


def _cell(value: Any) -> str:
    """Coerce a stored table cell (str, number, null) to text."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


Text = Annotated[str, BeforeValidator(_text)]
"""String field that reads a stored null as empty."""


# ---- Payloads --------------------------------------------------------------------


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")


class ImageContent(_Payload):
    """Single image; ``url`` stays empty until an upload resolves."""

    url: Text = ""
    alt: Text = ""
    caption: Text = ""


class GalleryItem(_Payload):
    url: Text = ""
    caption: Text = ""


class GalleryContent(_Payload):
    items: tuple[GalleryItem, ...] = ()


class QuoteContent(_Payload):
    text: Text = ""
    author: Text = ""


class CodeContent(_Payload):
    language: str = Field(default="javascript", alias="lang")
    code: Text = ""


class ListContent(_Payload):
    """Ordered list of plain-text items rendered with a per-style marker."""

    style: ListStyle = "bullet"
    items: tuple[str, ...] = ()

    @field_validator("style", mode="before")
    @classmethod
    def _known_style(cls, v: Any) -> Any:
        return v if v in _LIST_STYLES else "bullet"

    @field_validator("items", mode="before")
    @classmethod
    def _item_text(cls, v: Any) -> Any:
        if isinstance(v, list | tuple):
            return tuple(_cell(item) for item in v)
        return v


class CalloutContent(_Payload):
    severity: Severity = Field(default="info", alias="type")
    text: Text = ""

    @field_validator("severity", mode="before")
    @classmethod
    def _known_severity(cls, v: Any) -> Any:
        return v if v in _SEVERITIES else "info"


class FaqItem(_Payload):
    question: Text = ""
    answer: Text = ""


class FaqContent(_Payload):
    items: tuple[FaqItem, ...] = ()


class Step(_Payload):
    """One How-To step: plain ``text`` or, in rich mode, a nested Document.

    Rich mode is engaged exactly when ``blocks`` is non-empty; in that case
    ``text`` is cleared on validation so only one body is ever populated.
    """

    title: Text = ""
    text: Text = ""
    blocks: tuple[Block | CorruptBlock, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _single_body(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("blocks") and data.get("text"):
            return {**data, "text": ""}
        return data

    @field_validator("blocks", mode="before")
    @classmethod
    def _decode_nested(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return ()
        if not isinstance(v, list | tuple):
            raise ValueError("step blocks must be a sequence")
        ids = _context_ids(info.context)
        return tuple(decode_block(item, ids=ids) for item in v)

    @property
    def is_rich(self) -> bool:
        """Return True when the step body is a nested Document."""
        return bool(self.blocks)

    def fallback_text(self) -> str:
        """Plain-text body: ``text`` in text mode, joined nested text in rich mode.

        Only paragraphs and headings contribute; other nested kinds are dropped.
        """
        if not self.blocks:
            return self.text
        return document_text(self.blocks)


class HowToContent(_Payload):
    name: Text = ""
    steps: tuple[Step, ...] = ()


class TableContent(_Payload):
    """Rectangular table: every row has exactly ``len(headers)`` cells.

    Both keys are required. Ragged stored rows are repaired on validation
    without losing cells: short rows are padded and extra cells get new
    ``Column N`` headers. A table always keeps at least one row and column.
    """

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]

    @model_validator(mode="before")
    @classmethod
    def _rectangular(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        headers, rows = data.get("headers"), data.get("rows")
        if not isinstance(headers, list | tuple) or not isinstance(rows, list | tuple):
            return data
        if not all(isinstance(row, list | tuple) for row in rows):
            return data

        cols = [_cell(h) for h in headers]
        cells = [[_cell(c) for c in row] for row in rows]
        width = max([len(cols), 1, *(len(row) for row in cells)])
        while len(cols) < width:
            cols.append(f"Column {len(cols) + 1}")
        if not cells:
            cells = [[]]
        fixed = tuple(tuple(row + [""] * (width - len(row))) for row in cells)
        return {**data, "headers": tuple(cols), "rows": fixed}


class ReviewContent(_Payload):
    item_name: Text = Field(default="", alias="itemName")
    rating: int | None = Field(default=None, ge=1, le=5)
    author: Text = ""
    text: Text = ""


# ---- Blocks ----------------------------------------------------------------------


def _context_ids(context: Any) -> IdGenerator | None:
    if isinstance(context, dict):
        ids = context.get("ids")
        if ids is not None:
            return ids  # type: ignore[no-any-return]
    return None


class _BlockBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _ensure_id(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict):
            return data
        block_id = data.get("id")
        if isinstance(block_id, int) and not isinstance(block_id, bool):
            return {**data, "id": str(block_id)}
        if not block_id:
            ids = _context_ids(info.context)
            if ids is not None:
                return {**data, "id": ids()}
        return data

    @property
    def kind(self) -> BlockKind:
        return BlockKind(getattr(self, "type"))


class ParagraphBlock(_BlockBase):
    type: Literal["paragraph"] = "paragraph"
    content: Text = ""


class HeadingBlock(_BlockBase):
    """Heading; the level is carried by the kind (``h1``/``h2``/``h3``)."""

    type: Literal["h1", "h2", "h3"]
    content: Text = ""

    @property
    def level(self) -> int:
        return int(self.type[1])


class ImageBlock(_BlockBase):
    type: Literal["image"] = "image"
    content: ImageContent = Field(default_factory=ImageContent)


class GalleryBlock(_BlockBase):
    type: Literal["gallery"] = "gallery"
    content: GalleryContent = Field(default_factory=GalleryContent)


class QuoteBlock(_BlockBase):
    type: Literal["quote"] = "quote"
    content: QuoteContent = Field(default_factory=QuoteContent)


class CodeBlock(_BlockBase):
    type: Literal["code"] = "code"
    content: CodeContent = Field(default_factory=CodeContent)


class ListBlock(_BlockBase):
    type: Literal["list"] = "list"
    content: ListContent = Field(default_factory=ListContent)


class CalloutBlock(_BlockBase):
    type: Literal["callout"] = "callout"
    content: CalloutContent = Field(default_factory=CalloutContent)


class DividerBlock(_BlockBase):
    type: Literal["divider"] = "divider"
    content: Text = ""


class FaqBlock(_BlockBase):
    type: Literal["faq"] = "faq"
    content: FaqContent = Field(default_factory=FaqContent)


class HowToBlock(_BlockBase):
    type: Literal["howto"] = "howto"
    content: HowToContent = Field(default_factory=HowToContent)


class TableBlock(_BlockBase):
    type: Literal["table"] = "table"
    content: TableContent


class VideoBlock(_BlockBase):
    """Embedded external video; ``content`` is the provider video id."""

    type: Literal["video"] = "video"
    content: Text = ""

    @property
    def embed_url(self) -> str:
        return YOUTUBE_EMBED.format(id=self.content)


class ReviewBlock(_BlockBase):
    type: Literal["review"] = "review"
    content: ReviewContent = Field(default_factory=ReviewContent)


class CorruptBlock(BaseModel):
    """A stored element kept verbatim because it failed validation."""

    model_config = ConfigDict(frozen=True)

    id: str
    raw: dict[str, Any]

    @property
    def type(self) -> str:
        value = self.raw.get("type")
        return value if isinstance(value, str) else ""

    @property
    def known_kind(self) -> BlockKind | None:
        """The kind named by the raw element, if it is a supported one."""
        try:
            return BlockKind(self.type)
        except ValueError:
            return None

    @model_serializer
    def _as_stored(self) -> dict[str, Any]:
        return {"id": self.id, **{k: v for k, v in self.raw.items() if k != "id"}}


Block: TypeAlias = Annotated[
    ParagraphBlock
    | HeadingBlock
    | ImageBlock
    | GalleryBlock
    | QuoteBlock
    | CodeBlock
    | ListBlock
    | CalloutBlock
    | DividerBlock
    | FaqBlock
    | HowToBlock
    | TableBlock
    | VideoBlock
    | ReviewBlock,
    Field(discriminator="type"),
]
"""Any well-formed block (discriminated on ``type``)."""

AnyBlock: TypeAlias = Block | CorruptBlock
Document: TypeAlias = tuple[AnyBlock, ...]

Step.model_rebuild()
HowToContent.model_rebuild()
HowToBlock.model_rebuild()

BLOCK_ADAPTER: TypeAdapter[Any] = TypeAdapter(Block)

BLOCK_CLASSES: dict[BlockKind, type[_BlockBase]] = {
    BlockKind.PARAGRAPH: ParagraphBlock,
    BlockKind.H1: HeadingBlock,
    BlockKind.H2: HeadingBlock,
    BlockKind.H3: HeadingBlock,
    BlockKind.IMAGE: ImageBlock,
    BlockKind.GALLERY: GalleryBlock,
    BlockKind.QUOTE: QuoteBlock,
    BlockKind.CODE: CodeBlock,
    BlockKind.LIST: ListBlock,
    BlockKind.CALLOUT: CalloutBlock,
    BlockKind.DIVIDER: DividerBlock,
    BlockKind.FAQ: FaqBlock,
    BlockKind.HOWTO: HowToBlock,
    BlockKind.TABLE: TableBlock,
    BlockKind.VIDEO: VideoBlock,
    BlockKind.REVIEW: ReviewBlock,
}


# ---- Construction helpers -----------------------------------------------------------


def default_content(kind: BlockKind) -> Any:
    """Return the payload a freshly inserted block of ``kind`` starts with."""
    if kind in TEXT_KINDS or kind in (BlockKind.DIVIDER, BlockKind.VIDEO):
        return ""
    if kind is BlockKind.TABLE:
        return TableContent(headers=("Column 1", "Column 2"), rows=(("", ""),))
    if kind is BlockKind.FAQ:
        return FaqContent(items=(FaqItem(),))
    if kind is BlockKind.HOWTO:
        return HowToContent(steps=(Step(),))
    if kind is BlockKind.GALLERY:
        return GalleryContent(items=(GalleryItem(),))
    if kind is BlockKind.LIST:
        return ListContent(items=("",))
    if kind is BlockKind.REVIEW:
        return ReviewContent(rating=5)
    payloads: dict[BlockKind, type[_Payload]] = {
        BlockKind.IMAGE: ImageContent,
        BlockKind.QUOTE: QuoteContent,
        BlockKind.CODE: CodeContent,
        BlockKind.CALLOUT: CalloutContent,
    }
    return payloads[kind]()


def new_block(kind: BlockKind | str, block_id: str) -> Block:
    """Build a block of ``kind`` with its default payload."""
    kind = BlockKind(kind)
    cls = BLOCK_CLASSES[kind]
    return cls(id=block_id, type=kind.value, content=default_content(kind))  # type: ignore[return-value]


def empty_paragraph(block_id: str) -> ParagraphBlock:
    """The default block an authoring Document falls back to."""
    return ParagraphBlock(id=block_id, content="")


def decode_block(raw: Any, *, ids: IdGenerator | None = None) -> AnyBlock:
    """Validate one stored element; keep it as :class:`CorruptBlock` on failure.

    Raises
    ------
    ValueError
        If ``raw`` is not an object at all (a shape error, not a corrupt block).
    """
    if isinstance(raw, BaseModel):
        return raw  # type: ignore[return-value]
    if not isinstance(raw, dict):
        raise ValueError(f"block must be an object, got {type(raw).__name__}")
    gen = ids if ids is not None else RandomIds()
    try:
        return BLOCK_ADAPTER.validate_python(raw, context={"ids": gen})  # type: ignore[no-any-return]
    except ValidationError:
        block_id = raw.get("id")
        if not isinstance(block_id, str) or not block_id:
            block_id = gen()
        return CorruptBlock(id=block_id, raw=dict(raw))


def document_text(blocks: Iterable[AnyBlock]) -> str:
    """Join the text of paragraphs and headings with single spaces."""
    parts = [
        b.content
        for b in blocks
        if isinstance(b, ParagraphBlock | HeadingBlock) and b.content
    ]
    return " ".join(parts)


__all__ = [
    "AnyBlock",
    "BLOCK_ADAPTER",
    "BLOCK_CLASSES",
    "Block",
    "BlockKind",
    "CalloutBlock",
    "CalloutContent",
    "CodeBlock",
    "CodeContent",
    "CorruptBlock",
    "DividerBlock",
    "Document",
    "FaqBlock",
    "FaqContent",
    "FaqItem",
    "GalleryBlock",
    "GalleryContent",
    "GalleryItem",
    "HEADING_KINDS",
    "HeadingBlock",
    "HowToBlock",
    "HowToContent",
    "ImageBlock",
    "ImageContent",
    "ListBlock",
    "ListContent",
    "ListStyle",
    "ParagraphBlock",
    "QuoteBlock",
    "QuoteContent",
    "ReviewBlock",
    "ReviewContent",
    "Severity",
    "Step",
    "TEXT_KINDS",
    "TableBlock",
    "TableContent",
    "VideoBlock",
    "YOUTUBE_EMBED",
    "decode_block",
    "default_content",
    "document_text",
    "empty_paragraph",
    "new_block",
]
