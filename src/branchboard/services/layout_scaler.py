"""Bidirectional layout scaling between the canonical and displayed grids.

``to_displayed`` projects the 12 column canonical layout onto the column count
currently resolved from the container width; ``to_canonical`` maps a layout the
user edited on that grid back to 12 columns. Both directions round half-up and
then go through the shared ``clamp_entry`` primitive (width first, position
second) so no entry can end up off-grid.

Round trips are stable up to rounding (+/- 1 cell). Callers must skip the
transform when the column count did not change, otherwise repeated rounding
makes the layout drift.
"""

from __future__ import annotations

import math
from typing import Iterable

from .breakpoints import CANONICAL_COLUMNS
from .grid_layout import (
    CANONICAL_MIN_W,
    DEFAULT_MIN_H,
    CardLayoutEntry,
    Layout,
    clamp,
    clamp_entry,
)

__all__ = ["clamp_entry", "display_min_width", "round_half_up", "to_canonical", "to_displayed"]


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def display_min_width(column_count: int) -> int:
    """Minimum card width on a displayed grid: ``clamp(columns // 4, 2, 3)``."""
    return clamp(column_count // 4, 2, 3)


def _rescale(
    entry: CardLayoutEntry, scale: float, column_count: int, min_w: int
) -> CardLayoutEntry:
    scaled = CardLayoutEntry(
        id=entry.id,
        x=round_half_up(entry.x * scale),
        y=entry.y,
        w=round_half_up(entry.w * scale),
        h=entry.h,
        min_w=min_w,
        min_h=entry.min_h or DEFAULT_MIN_H,
    )
    return clamp_entry(scaled, column_count, min_w)


def to_displayed(canonical: Iterable[CardLayoutEntry], column_count: int) -> Layout:
    scale = column_count / CANONICAL_COLUMNS
    min_w = display_min_width(column_count)
    return tuple(_rescale(e, scale, column_count, min_w) for e in canonical)


def to_canonical(displayed: Iterable[CardLayoutEntry], column_count: int) -> Layout:
    scale = CANONICAL_COLUMNS / column_count
    return tuple(_rescale(e, scale, CANONICAL_COLUMNS, CANONICAL_MIN_W) for e in displayed)
