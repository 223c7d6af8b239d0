"""Plain-text table rendering.

Column width is the longest cell seen in that column over all rows. Rows
may be ragged; a short row just ends early.
"""

from __future__ import annotations

from typing import Sequence

# Spaces after the widest cell of each column
COLUMN_GAP = 2


def column_widths(rows: Sequence[Sequence[str]]) -> list[int]:
    """Max cell length per column position across all rows."""
    widths: list[int] = []
    for row in rows:
        for i, cell in enumerate(row):
            if i >= len(widths):
                widths.append(len(cell))
            elif len(cell) > widths[i]:
                widths[i] = len(cell)
    return widths


def render_table(rows: Sequence[Sequence[str]]) -> list[str]:
    """Render rows as left-aligned, space-padded text lines."""
    widths = column_widths(rows)
    return [
        "".join(cell.ljust(widths[i] + COLUMN_GAP) for i, cell in enumerate(row))
        for row in rows
    ]
