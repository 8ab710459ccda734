"""Responsive layout mode selection by terminal width."""

from __future__ import annotations

HEADER_ROWS = 4
PANEL_CHROME_ROWS = 3


def select_layout_mode(width: int) -> str:
    if width < 100:
        return "narrow"
    if width < 160:
        return "medium"
    return "wide"


def table_rows(height: int) -> int:
    """Rows left for table bodies once the header and borders are drawn."""
    return max(1, height - HEADER_ROWS - PANEL_CHROME_ROWS)
