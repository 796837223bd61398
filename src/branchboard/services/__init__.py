"""Service layer exports.

Everything here is pure Python except ``layout_reflow_coordinator`` (PyQt6),
which is deliberately not re-exported.
"""

from .event_bus import DashboardEvent, EventBus  # noqa: F401
from .breakpoints import COLUMN_COUNTS, resolve_columns  # noqa: F401
from .grid_layout import CARD_IDS, CardLayoutEntry, default_layout, normalize_layout  # noqa: F401
from .layout_scaler import clamp_entry, to_canonical, to_displayed  # noqa: F401
from .layout_persistence import LayoutPersistenceService  # noqa: F401
from .dashboard_layout_service import DashboardLayoutService, LayoutState  # noqa: F401

__all__ = [
    "DashboardEvent",
    "EventBus",
    "COLUMN_COUNTS",
    "resolve_columns",
    "CARD_IDS",
    "CardLayoutEntry",
    "default_layout",
    "normalize_layout",
    "clamp_entry",
    "to_canonical",
    "to_displayed",
    "LayoutPersistenceService",
    "DashboardLayoutService",
    "LayoutState",
]
