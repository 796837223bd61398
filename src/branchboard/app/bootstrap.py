"""Application bootstrap utilities for the branch dashboard.

Responsibilities:
 - Create the QApplication (skipped when headless)
 - Configure logging and attach the in-process LoggingService
 - Build the shared EventBus, layout store and data service
 - Return a single context object with references

PyQt6 is imported lazily so services can be bootstrapped in headless tests.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from config import settings

from ..services.dashboard_data_service import DashboardDataService
from ..services.dashboard_layout_service import DashboardLayoutService
from ..services.event_bus import EventBus
from ..services.layout_persistence import LayoutPersistenceService
from ..services.logging_service import LoggingService

__all__ = ["AppContext", "create_app"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class AppContext:
    """Container with references created during bootstrap.

    Attributes
    ----------
    qt_app: The QApplication instance (None if headless)
    headless: Whether headless bootstrap was used
    event_bus: Shared EventBus
    logging_service: Ring-buffer log capture attached to the ``branchboard`` logger
    layout_store: Per-branch layout persistence
    data_service: Dashboard metrics loader
    duration_s: Total elapsed seconds for bootstrap
    """

    qt_app: Optional[Any]
    headless: bool
    event_bus: EventBus
    logging_service: LoggingService
    layout_store: LayoutPersistenceService
    data_service: DashboardDataService
    duration_s: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def layout_service_for(self, branch_id: str | int) -> DashboardLayoutService:
        return DashboardLayoutService(self.layout_store, branch_id, event_bus=self.event_bus)

    def shutdown(self) -> None:
        self.logging_service.detach()


def create_app(
    *,
    headless: bool = False,
    layout_dir: str | None = None,
    api_url: str | None = None,
    log_level: int = logging.INFO,
) -> AppContext:
    started = time.perf_counter()
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    qt_app = None
    if not headless:
        from PyQt6.QtWidgets import QApplication

        qt_app = QApplication.instance() or QApplication(sys.argv[:1])
    bus = EventBus()
    log_svc = LoggingService(logger_name="branchboard", event_bus=bus)
    log_svc.attach()
    ctx = AppContext(
        qt_app=qt_app,
        headless=headless,
        event_bus=bus,
        logging_service=log_svc,
        layout_store=LayoutPersistenceService(layout_dir or settings.LAYOUT_DIR),
        data_service=DashboardDataService(base_url=api_url),
        duration_s=0.0,
    )
    ctx.duration_s = time.perf_counter() - started
    logging.getLogger(__name__).debug("Bootstrap finished in %.3fs", ctx.duration_s)
    return ctx
