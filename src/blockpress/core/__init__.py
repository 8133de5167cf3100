"""Core package initializer for Blockpress.

Downstream code imports from the concrete modules, e.g.:
    from blockpress.core.settings import settings, load_settings, Settings, get_logger
    from blockpress.core.codec import parse, serialize
"""

from __future__ import annotations

__all__ = ["__doc__"]
