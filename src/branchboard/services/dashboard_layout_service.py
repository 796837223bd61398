"""Dashboard layout service.

Owns the canonical (12 column) layout for one branch and the layout currently
displayed at the resolved column count. Widgets never hold layout state; they
subscribe and render whatever the service publishes, and report user edits
back through ``apply_user_edit``.

State machine
-------------
``LOADING`` until ``load()`` reads the stored layout, then ``DISPLAYING`` for
the life of the view. Column changes, user edits and resets all recompute the
displayed layout from the *current* canonical layout and notify listeners.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional

from .breakpoints import CANONICAL_COLUMNS, COLUMN_COUNTS
from .event_bus import DashboardEvent, EventBus
from .grid_layout import CARD_IDS, CardLayoutEntry, Layout, default_layout, layout_from_dicts
from .layout_persistence import LayoutPersistenceService
from .layout_scaler import to_canonical, to_displayed

__all__ = ["DashboardLayoutService", "LayoutListener", "LayoutState"]

log = logging.getLogger(__name__)

LayoutListener = Callable[[Layout, int], None]


class LayoutState(str, Enum):
    LOADING = "loading"
    DISPLAYING = "displaying"


class DashboardLayoutService:
    def __init__(
        self,
        store: LayoutPersistenceService,
        branch_id: str | int,
        *,
        event_bus: Optional[EventBus] = None,
        column_count: int = CANONICAL_COLUMNS,
    ):
        self._store = store
        self._branch_id = branch_id
        self._bus = event_bus
        self._columns = column_count
        self._state = LayoutState.LOADING
        self._canonical: Layout = default_layout()
        self._displayed: Layout = to_displayed(self._canonical, column_count)
        self._listeners: List[LayoutListener] = []

    # Properties --------------------------------------------------------
    @property
    def branch_id(self) -> str | int:
        return self._branch_id

    @property
    def state(self) -> LayoutState:
        return self._state

    @property
    def canonical(self) -> Layout:
        return self._canonical

    @property
    def displayed(self) -> Layout:
        return self._displayed

    @property
    def column_count(self) -> int:
        return self._columns

    # Subscription ------------------------------------------------------
    def subscribe(self, listener: LayoutListener) -> Callable[[], None]:
        """Register ``listener(displayed, column_count)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # Operations --------------------------------------------------------
    def load(self) -> Layout:
        self._canonical = self._store.load(self._branch_id)
        self._state = LayoutState.DISPLAYING
        self._redisplay()
        return self._displayed

    def set_column_count(self, column_count: int) -> bool:
        """Rescale for a new column count; returns False when nothing changed."""
        if column_count not in COLUMN_COUNTS:
            log.warning("Unexpected column count %s; using nearest breakpoint", column_count)
            column_count = min(COLUMN_COUNTS, key=lambda c: abs(c - column_count))
        if column_count == self._columns:
            return False
        self._columns = column_count
        if self._state is LayoutState.DISPLAYING:
            self._redisplay()
        return True

    def apply_user_edit(self, entries: Iterable[CardLayoutEntry | dict]) -> Layout:
        """Fold a layout edited on the displayed grid back into the canonical layout.

        Cards absent from ``entries`` keep their current displayed placement;
        unknown card ids are ignored. An edit arriving before ``load()`` first
        loads the stored layout so the placeholder default never overwrites it.
        """
        if self._state is LayoutState.LOADING:
            self.load()
        edited = layout_from_dicts(entries)
        current = {e.id: e for e in self._displayed}
        merged = tuple(edited.get(cid, current[cid]) for cid in CARD_IDS)
        self._canonical = to_canonical(merged, self._columns)
        saved = self._store.save(self._branch_id, self._canonical)
        self._publish(
            DashboardEvent.LAYOUT_PERSISTED, {"branch_id": self._branch_id, "saved": saved}
        )
        self._redisplay()
        return self._canonical

    def reset(self) -> Layout:
        self._canonical = self._store.reset(self._branch_id)
        log.info("Dashboard layout reset for branch %s", self._branch_id)
        self._publish(DashboardEvent.LAYOUT_RESET, {"branch_id": self._branch_id})
        self._redisplay()
        return self._canonical

    # Internal ----------------------------------------------------------
    def _redisplay(self) -> None:
        self._displayed = to_displayed(self._canonical, self._columns)
        for listener in list(self._listeners):
            listener(self._displayed, self._columns)
        self._publish(
            DashboardEvent.LAYOUT_DISPLAYED,
            {"branch_id": self._branch_id, "columns": self._columns},
        )

    def _publish(self, event: DashboardEvent, payload: dict) -> None:
        if self._bus is not None:
            self._bus.publish(event, payload)
