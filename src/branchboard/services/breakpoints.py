"""Breakpoint resolution for the dashboard grid.

Maps an observed container width (px) to the number of grid columns the
dashboard is displayed with. Pure and total so it can be unit tested headless.

Breakpoints (first match wins):
    < 600px   => 4 columns
    600-899   => 6
    900-1199  => 8
    1200-1599 => 10
    1600-1919 => 11
    >= 1920   => 12

The resize coordinator floors measured widths at ``MIN_CONTAINER_WIDTH``
before resolving (see ``effective_width``), so the 4-column bucket is only
reachable when callers resolve raw widths directly.
"""

from __future__ import annotations

from typing import Tuple

__all__ = [
    "BREAKPOINTS",
    "COLUMN_COUNTS",
    "CANONICAL_COLUMNS",
    "MIN_CONTAINER_WIDTH",
    "effective_width",
    "resolve_columns",
]

CANONICAL_COLUMNS = 12
MIN_CONTAINER_WIDTH = 600

# (exclusive upper width bound, columns); the last bucket is open-ended.
BREAKPOINTS: Tuple[Tuple[int, int], ...] = (
    (600, 4),
    (900, 6),
    (1200, 8),
    (1600, 10),
    (1920, 11),
)

COLUMN_COUNTS: Tuple[int, ...] = tuple(cols for _, cols in BREAKPOINTS) + (CANONICAL_COLUMNS,)


def effective_width(width: float) -> int:
    """Floor a measured content width at ``MIN_CONTAINER_WIDTH``."""
    return max(int(width), MIN_CONTAINER_WIDTH)


def resolve_columns(width: float) -> int:
    for upper, cols in BREAKPOINTS:
        if width < upper:
            return cols
    return CANONICAL_COLUMNS
