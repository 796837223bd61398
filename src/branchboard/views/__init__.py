"""Dashboard view layer (Qt widgets).

Exports:
 - DashboardView
 - GridSurface
"""

from .grid_surface import GridSurface  # noqa: F401
from .dashboard_view import DashboardView  # noqa: F401
