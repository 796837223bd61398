"""Dashboard layout persistence service.

Stores one canonical (12 column) layout per branch so several branches viewed
from the same machine keep independent customizations. Each layout lives in a
JSON file named after its storage key (``dashboard-layout-{branch_id}``) whose
content is the JSON array of card entries.

Features:
 - load(branch_id) / save(branch_id, layout) / reset(branch_id)
 - Automatic directory creation, atomic writes (temp file + replace)
 - Graceful fallback: missing or corrupt files yield the default layout
 - Corrupt files are renamed to ``*.corrupt.bak`` so the next save starts clean
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Iterable, Optional

from .grid_layout import CardLayoutEntry, Layout, default_layout, layout_to_dicts, normalize_layout

__all__ = ["LayoutPersistenceService", "STORAGE_KEY_PREFIX"]

log = logging.getLogger(__name__)

STORAGE_KEY_PREFIX = "dashboard-layout-"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LayoutPersistenceService:
    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    # Internal helpers ----------------------------------------------
    @staticmethod
    def storage_key(branch_id: str | int) -> str:
        return f"{STORAGE_KEY_PREFIX}{branch_id}"

    def path_for(self, branch_id: str | int) -> str:
        safe = _UNSAFE_CHARS.sub("_", self.storage_key(branch_id))
        return os.path.join(self.base_dir, f"{safe}.json")

    def _read_raw(self, path: str) -> Optional[object]:
        """Return decoded JSON or None when the file is missing or corrupt."""
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            log.warning("Unreadable dashboard layout %s: %s", path, e)
            self._backup_and_invalidate(path, ".corrupt.bak")
            return None

    def _backup_and_invalidate(self, path: str, suffix: str) -> None:
        """Rename an unusable layout file out of the way (best effort)."""
        new_path = path + suffix
        if os.path.exists(new_path):
            i = 1
            while os.path.exists(f"{new_path}.{i}") and i < 10:
                i += 1
            new_path = f"{new_path}.{i}"
        try:
            os.replace(path, new_path)
        except OSError as e:
            log.debug("Could not back up %s: %s", path, e)

    # Public API ----------------------------------------------------
    def has_layout(self, branch_id: str | int) -> bool:
        return os.path.exists(self.path_for(branch_id))

    def load(self, branch_id: str | int) -> Layout:
        raw = self._read_raw(self.path_for(branch_id))
        if raw is None:
            return default_layout()
        if not isinstance(raw, list):
            log.warning("Stored layout for branch %s is not a list; using default", branch_id)
            return default_layout()
        return normalize_layout(raw)

    def save(self, branch_id: str | int, layout: Iterable[CardLayoutEntry]) -> bool:
        path = self.path_for(branch_id)
        tmp = path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(layout_to_dicts(layout), f)
            os.replace(tmp, path)
            return True
        except OSError as e:
            log.warning("Failed to persist dashboard layout for branch %s: %s", branch_id, e)
            return False

    def reset(self, branch_id: str | int) -> Layout:
        path = self.path_for(branch_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            log.warning("Failed to delete stored layout %s: %s", path, e)
        return default_layout()
