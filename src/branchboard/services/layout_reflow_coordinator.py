"""Layout Reflow Coordinator.

Debounces container resize events for the dashboard grid. Instead of letting
each intermediate resize (user dragging a window corner) trigger a rescale of
every card, we restart a single-shot timer on each event and only measure the
container once it has been quiet for ``debounce_ms``.

On commit the content-box width is floored at ``MIN_CONTAINER_WIDTH`` and
resolved into a column count:

* ``widthChanged(int)`` fires on every commit with the floored width.
* ``columnsChanged(int)`` fires only when the column count differs from the
  previously published one.

Lifecycle
---------
``watch(widget)`` installs the event filter, ``close()`` removes it and stops
any pending timer so no callback can run against a torn down view. The
coordinator is a context manager, so ``with LayoutReflowCoordinator() as c``
guarantees release.

Tests drive it either through real ``QWidget.resize`` calls followed by
``force_commit()`` (deterministic) or by waiting out the timer.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QEvent, QObject, QTimer, pyqtSignal
from PyQt6.QtWidgets import QWidget

from config import settings

from .breakpoints import effective_width, resolve_columns

__all__ = ["LayoutReflowCoordinator"]

log = logging.getLogger(__name__)


class LayoutReflowCoordinator(QObject):
    """Debounce resize-induced column recomputation for one container."""

    widthChanged = pyqtSignal(int)
    columnsChanged = pyqtSignal(int)

    def __init__(self, debounce_ms: int | None = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        if debounce_ms is None:
            debounce_ms = settings.RESIZE_DEBOUNCE_MS
        self._debounce_ms = max(10, min(debounce_ms, 2000))
        self._widget: Optional[QWidget] = None
        self._pending_width: Optional[int] = None
        self._dirty = False
        self._width: Optional[int] = None
        self._columns: Optional[int] = None
        self._closed = False
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)  # type: ignore[attr-defined]

    # Configuration -----------------------------------------------------
    def set_debounce_ms(self, ms: int) -> None:
        self._debounce_ms = max(10, min(ms, 2000))

    def debounce_ms(self) -> int:
        return self._debounce_ms

    # Registration ------------------------------------------------------
    def watch(self, widget: QWidget) -> None:
        if self._closed:
            raise RuntimeError("LayoutReflowCoordinator is closed")
        if self._widget is widget:
            return
        if self._widget is not None:
            self._widget.removeEventFilter(self)
        self._widget = widget
        widget.installEventFilter(self)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._timer.stop()
        self._dirty = False
        self._pending_width = None
        if self._widget is not None:
            try:
                self._widget.removeEventFilter(self)
            except RuntimeError:  # underlying C++ widget already deleted
                pass
            self._widget = None

    def __enter__(self) -> "LayoutReflowCoordinator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # Introspection -----------------------------------------------------
    def pending(self) -> bool:
        return self._dirty

    def is_active(self) -> bool:
        return self._timer.isActive()

    def current_width(self) -> Optional[int]:
        return self._width

    def current_columns(self) -> Optional[int]:
        return self._columns

    # Control -----------------------------------------------------------
    def notify_width(self, width: int) -> None:
        """Record a width observed outside Qt resize events and (re)start the timer."""
        if self._closed:
            return
        self._pending_width = width
        self._mark_dirty()

    def force_commit(self) -> None:
        if self._dirty:
            self._timer.stop()
            self._flush()

    # Internal ----------------------------------------------------------
    def _mark_dirty(self) -> None:
        self._dirty = True
        self._timer.start(self._debounce_ms)

    def _on_timeout(self) -> None:
        self._flush()

    def _measure(self) -> Optional[int]:
        if self._pending_width is not None:
            return self._pending_width
        if self._widget is None:
            return None
        return self._widget.contentsRect().width()

    def _flush(self) -> None:
        self._dirty = False
        if self._closed:
            return
        raw = self._measure()
        self._pending_width = None
        if raw is None:
            return
        width = effective_width(raw)
        columns = resolve_columns(width)
        self._width = width
        self.widthChanged.emit(width)
        if columns != self._columns:
            log.debug("Dashboard container %dpx -> %d columns", width, columns)
            self._columns = columns
            self.columnsChanged.emit(columns)

    # Qt Event Filter ---------------------------------------------------
    def eventFilter(self, obj: QObject, event: QEvent) -> bool:  # noqa: N802
        if obj is self._widget and event.type() == QEvent.Type.Resize and not self._closed:
            self._pending_width = None
            self._mark_dirty()
        return super().eventFilter(obj, event)
