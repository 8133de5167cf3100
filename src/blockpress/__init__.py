"""Blockpress: block-based rich content documents.

The package is organised leaves first:

- ``blockpress.core``     : schema contracts, codec, ids, settings, result type
- ``blockpress.editor``   : structural edits, payload helpers, edit sessions
- ``blockpress.uploads``  : upload collaborator contract + local store
- ``blockpress.render``   : presentation tree, HTML and Markdown exporters
- ``blockpress.seo``      : structured metadata descriptors and JSON-LD
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.4.0"
