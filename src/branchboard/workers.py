"""Background worker threads used by the dashboard view."""

from __future__ import annotations

from PyQt6.QtCore import QThread, pyqtSignal

from branchboard.services.dashboard_data_service import (
    DashboardDataError,
    DashboardDataService,
    Period,
)


class DashboardLoadWorker(QThread):
    loaded = pyqtSignal(object, str, int)  # snapshot | None, error message, request id

    def __init__(
        self, service: DashboardDataService, branch_id: str | int, period: Period, request_id: int
    ):
        super().__init__()
        self.service = service
        self.branch_id = branch_id
        self.period = period
        self.request_id = request_id

    def run(self) -> None:  # type: ignore[override]  # pragma: no cover - thread body
        try:
            snapshot = self.service.load(self.branch_id, self.period)
        except DashboardDataError as e:
            self.loaded.emit(None, e.message, self.request_id)
            return
        self.loaded.emit(snapshot, "", self.request_id)
