"""Structured data: descriptors derived from a Document and their JSON-LD form."""

from __future__ import annotations

from .deriver import derive_descriptors, descriptors_to_json
from .structured_data import to_json_ld

__all__ = ["derive_descriptors", "descriptors_to_json", "to_json_ld"]
