"""Branch dashboard GUI public API.

Curated, intentionally small surface: the headless layout engine (breakpoints,
scaling, persistence, layout service) and the event bus. Qt widgets live in
``branchboard.views`` and are imported explicitly so test collection does not
pull in PyQt6.
"""

from __future__ import annotations

from .services.event_bus import DashboardEvent, Event, EventBus  # noqa: F401
from .services.breakpoints import resolve_columns  # noqa: F401
from .services.grid_layout import CardLayoutEntry, default_layout  # noqa: F401
from .services.layout_scaler import to_canonical, to_displayed  # noqa: F401
from .services.layout_persistence import LayoutPersistenceService  # noqa: F401
from .services.dashboard_layout_service import DashboardLayoutService  # noqa: F401

__version__ = "0.1.0"
