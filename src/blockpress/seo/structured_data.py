"""schema.org JSON-LD for derived descriptors.

Each descriptor maps to one self-contained JSON-LD object with its own
``@context``. Field choices follow what search indexers read for FAQ pages,
How-To guides, reviews and embedded videos.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from blockpress.core.contracts.descriptor import (
    Descriptor,
    FaqDescriptor,
    HowToDescriptor,
    ReviewDescriptor,
    VideoDescriptor,
)

SCHEMA_CONTEXT = "https://schema.org"
BEST_RATING = 5
ANONYMOUS = "Anonymous"
VIDEO_NAME = "Tutorial Video"
THUMBNAIL = "https://img.youtube.com/vi/{id}/maxresdefault.jpg"


def _faq(d: FaqDescriptor) -> dict[str, Any]:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": item.question,
                "acceptedAnswer": {"@type": "Answer", "text": item.answer},
            }
            for item in d.items
        ],
    }


def _howto(d: HowToDescriptor) -> dict[str, Any]:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "HowTo",
        "name": d.name,
        "step": [
            {"@type": "HowToStep", "position": s.position, "name": s.name, "text": s.text}
            for s in d.steps
        ],
    }


def _review(d: ReviewDescriptor) -> dict[str, Any]:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "Review",
        "itemReviewed": {"@type": "Thing", "name": d.item_name},
        "reviewRating": {"@type": "Rating", "ratingValue": d.rating, "bestRating": BEST_RATING},
        "author": {"@type": "Person", "name": d.author or ANONYMOUS},
        "reviewBody": d.text,
    }


def _video(d: VideoDescriptor, upload_date: str | None) -> dict[str, Any]:
    out: dict[str, Any] = {
        "@context": SCHEMA_CONTEXT,
        "@type": "VideoObject",
        "name": VIDEO_NAME,
        "embedUrl": d.embed_url,
        "thumbnailUrl": THUMBNAIL.format(id=d.video_id),
    }
    if upload_date is not None:
        out["uploadDate"] = upload_date
    return out


def to_json_ld(
    descriptors: Sequence[Descriptor], *, upload_date: str | None = None
) -> list[dict[str, Any]]:
    """Map descriptors to JSON-LD objects, preserving order.

    ``upload_date`` (ISO-8601) is attached to video objects only when given,
    so the output is a pure function of its inputs.
    """
    out: list[dict[str, Any]] = []
    for d in descriptors:
        if isinstance(d, FaqDescriptor):
            out.append(_faq(d))
        elif isinstance(d, HowToDescriptor):
            out.append(_howto(d))
        elif isinstance(d, ReviewDescriptor):
            out.append(_review(d))
        elif isinstance(d, VideoDescriptor):
            out.append(_video(d, upload_date))
    return out


__all__ = ["to_json_ld"]
