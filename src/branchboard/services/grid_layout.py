"""Dashboard grid layout data model.

A layout is an ordered tuple of ``CardLayoutEntry`` values, one per known
dashboard card. The canonical layout is always expressed on a 12 column grid
and is what gets persisted; displayed layouts are derived from it by
``layout_scaler``.

Entries serialize to the camelCase mapping used by the grid surface and the
stored JSON (``{"id", "x", "y", "w", "h", "minW", "minH"}``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .breakpoints import CANONICAL_COLUMNS

__all__ = [
    "CARD_IDS",
    "CANONICAL_MIN_W",
    "DEFAULT_MIN_H",
    "CardLayoutEntry",
    "Layout",
    "clamp",
    "clamp_entry",
    "default_layout",
    "layout_from_dicts",
    "layout_to_dicts",
    "normalize_layout",
]

CARD_IDS: Tuple[str, ...] = (
    "sales",
    "inventory",
    "employee",
    "order",
    "revenue",
    "category",
    "attendance",
)

CANONICAL_MIN_W = 3
DEFAULT_MIN_H = 2


@dataclass(frozen=True)
class CardLayoutEntry:
    id: str
    x: int
    y: int
    w: int
    h: int
    min_w: int = CANONICAL_MIN_W
    min_h: int = DEFAULT_MIN_H

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "minW": self.min_w,
            "minH": self.min_h,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CardLayoutEntry":
        """Build an entry from a camelCase mapping.

        Raises ``KeyError`` / ``TypeError`` / ``ValueError`` / ``OverflowError``
        on missing, non-numeric or non-finite fields; ``minW`` / ``minH`` are
        optional.
        """
        min_w = data.get("minW")
        min_h = data.get("minH")
        return cls(
            id=str(data["id"]),
            x=int(data["x"]),
            y=int(data["y"]),
            w=int(data["w"]),
            h=int(data["h"]),
            min_w=int(min_w) if min_w is not None else CANONICAL_MIN_W,
            min_h=int(min_h) if min_h is not None else DEFAULT_MIN_H,
        )


Layout = Tuple[CardLayoutEntry, ...]

_DEFAULT_PLACEMENT: Tuple[Tuple[str, int, int, int, int], ...] = (
    ("sales", 0, 0, 3, 4),
    ("inventory", 3, 0, 3, 4),
    ("employee", 6, 0, 3, 4),
    ("order", 9, 0, 3, 4),
    ("revenue", 0, 4, 8, 8),
    ("category", 8, 4, 4, 8),
    ("attendance", 0, 12, 12, 8),
)


def default_layout() -> Layout:
    """Return the built-in canonical layout (fresh tuple per call)."""
    return tuple(
        CardLayoutEntry(id=cid, x=x, y=y, w=w, h=h) for cid, x, y, w, h in _DEFAULT_PLACEMENT
    )


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(value, hi))


def clamp_entry(
    entry: CardLayoutEntry, column_count: int, min_w: int, min_h: Optional[int] = None
) -> CardLayoutEntry:
    """Constrain ``entry`` onto a ``column_count`` wide grid.

    Width is clamped first so the position bound ``column_count - w`` is
    computed against the final width. Height is floored at ``min_h`` (defaults
    to the entry's own ``min_h``). The returned entry carries the floors used.
    """
    min_w = clamp(min_w, 1, column_count)
    if min_h is None:
        min_h = entry.min_h or DEFAULT_MIN_H
    min_h = max(min_h, 1)
    w = clamp(entry.w, min_w, column_count)
    x = clamp(entry.x, 0, column_count - w)
    return replace(
        entry, x=x, y=max(entry.y, 0), w=w, h=max(entry.h, min_h), min_w=min_w, min_h=min_h
    )


def layout_to_dicts(layout: Iterable[CardLayoutEntry]) -> List[Dict[str, Any]]:
    return [e.to_dict() for e in layout]


def layout_from_dicts(items: Iterable[Any]) -> Dict[str, CardLayoutEntry]:
    """Parse the usable entries of ``items`` keyed by card id.

    Unknown ids, duplicates (first occurrence wins) and malformed items are
    skipped.
    """
    out: Dict[str, CardLayoutEntry] = {}
    for item in items:
        if isinstance(item, CardLayoutEntry):
            entry = item
        elif isinstance(item, Mapping):
            try:
                entry = CardLayoutEntry.from_dict(item)
            except (KeyError, TypeError, ValueError, OverflowError):
                continue
        else:
            continue
        if entry.id not in CARD_IDS or entry.id in out:
            continue
        out[entry.id] = entry
    return out


def normalize_layout(raw: Any) -> Layout:
    """Turn any decoded JSON value into a valid canonical layout.

    Non-list input yields the default layout. Cards missing from ``raw`` are
    filled in from the default and every entry is clamped onto the 12 column
    grid.
    """
    if not isinstance(raw, (list, tuple)):
        return default_layout()
    parsed = layout_from_dicts(raw)
    defaults = {e.id: e for e in default_layout()}
    return tuple(
        clamp_entry(parsed.get(cid, defaults[cid]), CANONICAL_COLUMNS, CANONICAL_MIN_W)
        for cid in CARD_IDS
    )
