"""Global configuration and constants for the branch dashboard."""

from __future__ import annotations

import os
from typing import Final

API_BASE_URL: Final = os.environ.get("BRANCHBOARD_API_URL", "http://localhost:8080")
DEFAULT_TIMEOUT: Final = 15  # seconds
DEFAULT_RETRIES: Final = 3
DEFAULT_BACKOFF_FACTOR: Final = 0.6
DATA_DIR: Final = os.environ.get("BRANCHBOARD_DATA_DIR", "data")
LAYOUT_DIR: Final = os.path.join(DATA_DIR, "layouts")

# Grid surface
GRID_ROW_HEIGHT: Final = 40  # px per grid row
RESIZE_DEBOUNCE_MS: Final = int(os.environ.get("BRANCHBOARD_RESIZE_DEBOUNCE_MS", "150"))

DEFAULT_PERIOD: Final = "MONTHLY"
