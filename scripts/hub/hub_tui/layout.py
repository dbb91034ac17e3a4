"""Responsive layout mode selection by terminal width."""

from __future__ import annotations

NARROW_MAX_WIDTH = 100
MODAL_MIN_WIDTH = 48


def select_layout_mode(width: int) -> str:
    """Narrow terminals show the modal in place of the chat; wide ones show both."""
    if width < NARROW_MAX_WIDTH:
        return "narrow"
    return "wide"


def modal_width(width: int) -> int:
    return max(MODAL_MIN_WIDTH, width * 9 // 20)
