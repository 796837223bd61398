"""Branch dashboard view.

Hosts the KPI/chart grid for one branch and wires the layout engine together:

* ``LayoutReflowCoordinator`` watches the grid container and publishes the
  resolved column count after resizes settle.
* ``DashboardLayoutService`` rescales the canonical layout and pushes the
  displayed layout into the ``GridSurface``; edits coming back from the
  surface are folded into the canonical layout and persisted.
* Metrics are fetched on a ``DashboardLoadWorker`` thread. Failures swap the
  grid for an error panel with a Retry action; layout state is untouched.
"""

from __future__ import annotations

import logging
from typing import Optional, Set

from PyQt6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from ..components.empty_state import EmptyStateWidget
from ..services.dashboard_data_service import (
    DashboardDataError,
    DashboardDataService,
    DashboardSnapshot,
    Period,
)
from ..services.dashboard_layout_service import DashboardLayoutService, LayoutState
from ..services.event_bus import DashboardEvent, EventBus
from ..services.layout_reflow_coordinator import LayoutReflowCoordinator
from ..workers import DashboardLoadWorker
from .grid_surface import GridSurface

__all__ = ["DashboardView"]

log = logging.getLogger(__name__)

_PERIOD_LABELS = ((Period.WEEKLY, "Weekly"), (Period.MONTHLY, "Monthly"), (Period.YEARLY, "Yearly"))


class DashboardView(QWidget):
    GRID_PAGE = 0
    STATE_PAGE = 1

    def __init__(
        self,
        layout_service: DashboardLayoutService,
        data_service: DashboardDataService,
        *,
        period: Period | str = Period.MONTHLY,
        event_bus: Optional[EventBus] = None,
        debounce_ms: int | None = None,
        row_height: int | None = None,
        background: bool = True,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.setObjectName("branchDashboardView")
        self._layout_service = layout_service
        self._data_service = data_service
        self._bus = event_bus
        self._period = Period(period)
        self._request_id = 0
        self._workers: Set[DashboardLoadWorker] = set()
        self._snapshot: Optional[DashboardSnapshot] = None
        self._closed = False
        self._background = background

        # Header -------------------------------------------------------
        root = QVBoxLayout(self)
        header = QHBoxLayout()
        self.title_label = QLabel(f"Branch {layout_service.branch_id}")
        self.title_label.setObjectName("viewTitleLabel")
        header.addWidget(self.title_label)
        header.addStretch(1)
        self.period_group = QButtonGroup(self)
        self.period_group.setExclusive(True)
        self.period_buttons: dict[Period, QPushButton] = {}
        for p, label in _PERIOD_LABELS:
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.setChecked(p is self._period)
            btn.clicked.connect(lambda _checked=False, p=p: self.set_period(p))  # type: ignore
            self.period_group.addButton(btn)
            self.period_buttons[p] = btn
            header.addWidget(btn)
        self.reset_button = QPushButton("Reset Layout")
        self.reset_button.setObjectName("resetLayoutButton")
        self.reset_button.clicked.connect(self.reset_layout)  # type: ignore[attr-defined]
        header.addWidget(self.reset_button)
        root.addLayout(header)

        # Body ---------------------------------------------------------
        self.stack = QStackedWidget(self)
        self.grid = GridSurface(row_height=row_height)
        self.state_panel = EmptyStateWidget("loading")
        self.state_panel.actionRequested.connect(lambda _key: self.refresh())  # type: ignore
        self.stack.addWidget(self.grid)
        self.stack.addWidget(self.state_panel)
        root.addWidget(self.stack, 1)

        # Layout engine wiring -----------------------------------------
        self._unsubscribe = layout_service.subscribe(self.grid.apply_layout)
        self.grid.layoutChanged.connect(self._on_layout_edited)  # type: ignore[attr-defined]
        self.coordinator = LayoutReflowCoordinator(debounce_ms, parent=self)
        self.coordinator.columnsChanged.connect(self._on_columns_changed)  # type: ignore
        self.coordinator.watch(self.grid)
        if layout_service.state is LayoutState.LOADING:
            layout_service.load()
        else:
            self.grid.apply_layout(layout_service.displayed, layout_service.column_count)

    # Layout ------------------------------------------------------------
    def _on_columns_changed(self, columns: int) -> None:
        if self._layout_service.set_column_count(columns) and self._bus is not None:
            self._bus.publish(DashboardEvent.COLUMNS_CHANGED, {"columns": columns})

    def _on_layout_edited(self, entries: list) -> None:
        self._layout_service.apply_user_edit(entries)

    def reset_layout(self) -> None:
        self._layout_service.reset()

    # Data --------------------------------------------------------------
    def period(self) -> Period:
        return self._period

    def set_period(self, period: Period | str, *, background: Optional[bool] = None) -> None:
        period = Period(period)
        self.period_buttons[period].setChecked(True)
        if period is self._period and self._snapshot is not None:
            return
        self._period = period
        self.refresh(background=background)

    def refresh(self, *, background: Optional[bool] = None) -> None:
        """Fetch metrics for the current branch/period; older in-flight results are discarded."""
        if self._closed:
            return
        self._request_id += 1
        request_id = self._request_id
        self.state_panel.set_template("loading")
        self.stack.setCurrentIndex(self.STATE_PAGE)
        branch_id = self._layout_service.branch_id
        if background is None:
            background = self._background
        if not background:
            try:
                snapshot = self._data_service.load(branch_id, self._period)
            except DashboardDataError as e:
                self._on_loaded(None, e.message, request_id)
                return
            self._on_loaded(snapshot, "", request_id)
            return
        worker = DashboardLoadWorker(self._data_service, branch_id, self._period, request_id)
        worker.loaded.connect(self._on_loaded)  # type: ignore[attr-defined]
        # Superseded workers run to completion; their results fail the request id check.
        worker.finished.connect(lambda w=worker: self._workers.discard(w))  # type: ignore
        self._workers.add(worker)
        worker.start()

    def _on_loaded(self, snapshot: Optional[DashboardSnapshot], error: str, request_id: int) -> None:
        if self._closed or request_id != self._request_id:
            return
        branch_id = self._layout_service.branch_id
        if error or snapshot is None:
            log.warning("Dashboard data unavailable for branch %s: %s", branch_id, error)
            self.state_panel.set_template("dashboard_error", description=error or None)
            self.stack.setCurrentIndex(self.STATE_PAGE)
            if self._bus is not None:
                self._bus.publish(
                    DashboardEvent.DATA_LOAD_FAILED, {"branch_id": branch_id, "message": error}
                )
            return
        self._snapshot = snapshot
        for card_id in snapshot.cards:
            self.grid.set_card_rows(card_id, snapshot.rows(card_id))
        self.stack.setCurrentIndex(self.GRID_PAGE)
        if self._bus is not None:
            self._bus.publish(
                DashboardEvent.DATA_LOADED,
                {"branch_id": branch_id, "period": snapshot.period.value},
            )

    def snapshot(self) -> Optional[DashboardSnapshot]:
        return self._snapshot

    # Teardown ----------------------------------------------------------
    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.coordinator.close()
        self._unsubscribe()
        for worker in list(self._workers):
            worker.wait()
        self._workers.clear()

    def closeEvent(self, event) -> None:  # noqa: N802
        self.shutdown()
        super().closeEvent(event)
