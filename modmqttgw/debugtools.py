"""Helpers for debug output."""

from __future__ import annotations

from collections.abc import Sequence

_MAX_VALUES = 10


class DebugError(Exception):
    """Raised when an internal consistency check fails."""


def registers_to_str(data: Sequence[int]) -> str:
    """Render up to ten register values as hex, noting how many were left out."""
    parts = [f"[{value:x}]" for value in data[:_MAX_VALUES]]
    if len(data) >= _MAX_VALUES:
        parts.append(f" (… and {len(data) - _MAX_VALUES} more)")
    return "".join(parts)