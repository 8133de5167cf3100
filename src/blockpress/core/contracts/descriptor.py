"""Structured-data descriptors derived from a Document.

Descriptors are the machine-readable facts a published page exposes to
search indexers: FAQ pairs, How-To steps, reviews and embedded videos. They
are derived from block content only, one descriptor per qualifying block, in
block order.
"""

from __future__ import annotations

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class FaqEntry(_Frozen):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class HowToStepEntry(_Frozen):
    position: int = Field(..., ge=1, description="1-based over the kept steps")
    name: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class FaqDescriptor(_Frozen):
    kind: Literal["faq"] = "faq"
    block_id: str
    items: tuple[FaqEntry, ...] = Field(..., min_length=1)


class HowToDescriptor(_Frozen):
    kind: Literal["howto"] = "howto"
    block_id: str
    name: str = Field(..., min_length=1)
    steps: tuple[HowToStepEntry, ...] = Field(..., min_length=1)


class ReviewDescriptor(_Frozen):
    kind: Literal["review"] = "review"
    block_id: str
    item_name: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    author: str = ""
    text: str = ""


class VideoDescriptor(_Frozen):
    kind: Literal["video"] = "video"
    block_id: str
    video_id: str = ""
    embed_url: str = ""


Descriptor: TypeAlias = Annotated[
    FaqDescriptor | HowToDescriptor | ReviewDescriptor | VideoDescriptor,
    Field(discriminator="kind"),
]


__all__ = [
    "Descriptor",
    "FaqDescriptor",
    "FaqEntry",
    "HowToDescriptor",
    "HowToStepEntry",
    "ReviewDescriptor",
    "VideoDescriptor",
]
