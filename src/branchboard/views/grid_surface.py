"""Grid surface hosting dashboard cards.

Places one ``CardWidget`` per layout entry at absolute positions derived from
the displayed layout: ``x * column_width, y * row_height``. The column width is
the surface width divided by the current column count, so cards reflow when
the surface is resized even before a new column count is resolved.

Drag / resize gestures belong to the gesture layer; once a gesture completes it
calls ``commit_edit(entries)`` which emits ``layoutChanged`` with the edited
displayed layout.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QFrame, QLabel, QVBoxLayout, QWidget

from config import settings

from ..services.grid_layout import CardLayoutEntry, Layout, layout_from_dicts

__all__ = ["CARD_TITLES", "CardWidget", "GridSurface", "format_rows"]

CARD_TITLES: Dict[str, str] = {
    "sales": "Sales",
    "inventory": "Inventory",
    "employee": "Employees",
    "order": "Orders",
    "revenue": "Revenue Trend",
    "category": "Sales by Category",
    "attendance": "Attendance",
}

_MAX_SUMMARY_LINES = 8


def format_rows(rows: Iterable[Tuple[str, str]], limit: int = _MAX_SUMMARY_LINES) -> str:
    lines = [f"{label}: {value}" for label, value in rows][:limit]
    return "\n".join(lines) if lines else "No data"


class CardWidget(QFrame):  # pragma: no cover - thin widget container
    def __init__(self, card_id: str, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.card_id = card_id
        self.setObjectName("dashboardCard")
        self.setFrameShape(QFrame.Shape.StyledPanel)
        lay = QVBoxLayout(self)
        self.title_label = QLabel(CARD_TITLES.get(card_id, card_id))
        self.title_label.setObjectName("dashboardCardTitle")
        lay.addWidget(self.title_label)
        self.body_label = QLabel("No data")
        self.body_label.setObjectName("dashboardCardBody")
        self.body_label.setWordWrap(True)
        lay.addWidget(self.body_label)
        lay.addStretch(1)

    def set_rows(self, rows: Iterable[Tuple[str, str]]) -> None:
        self.body_label.setText(format_rows(rows))


class GridSurface(QWidget):
    layoutChanged = pyqtSignal(list)

    def __init__(self, parent: Optional[QWidget] = None, *, row_height: int | None = None):
        super().__init__(parent)
        self.setObjectName("dashboardGrid")
        self._row_height = row_height or settings.GRID_ROW_HEIGHT
        self._columns = 12
        self._layout: Layout = ()
        self._cards: Dict[str, CardWidget] = {}

    # Rendering ---------------------------------------------------------
    def apply_layout(self, layout: Iterable[CardLayoutEntry], columns: int) -> None:
        self._layout = tuple(layout)
        self._columns = max(1, columns)
        for entry in self._layout:
            if entry.id not in self._cards:
                card = CardWidget(entry.id, self)
                card.show()
                self._cards[entry.id] = card
        rows = max((e.y + e.h for e in self._layout), default=0)
        self.setMinimumHeight(rows * self._row_height)
        self._position_cards()

    def set_card_rows(self, card_id: str, rows: Iterable[Tuple[str, str]]) -> None:
        card = self._cards.get(card_id)
        if card is not None:
            card.set_rows(rows)

    def _position_cards(self) -> None:
        col_width = self.width() / self._columns
        for entry in self._layout:
            card = self._cards.get(entry.id)
            if card is None:
                continue
            card.setGeometry(
                int(entry.x * col_width),
                entry.y * self._row_height,
                int(entry.w * col_width),
                entry.h * self._row_height,
            )

    def resizeEvent(self, event) -> None:  # noqa: N802
        super().resizeEvent(event)
        self._position_cards()

    # Edits -------------------------------------------------------------
    def commit_edit(self, entries: Iterable[CardLayoutEntry | Mapping[str, Any]]) -> None:
        """Report a completed drag/resize with the full edited displayed layout."""
        edited = layout_from_dicts(entries)
        self.layoutChanged.emit([edited.get(e.id, e) for e in self._layout])

    # Introspection -----------------------------------------------------
    def displayed_layout(self) -> Layout:
        return self._layout

    def columns(self) -> int:
        return self._columns

    def row_height(self) -> int:
        return self._row_height

    def card(self, card_id: str) -> Optional[CardWidget]:
        return self._cards.get(card_id)
