"""Logging service.

In-process logging handler capturing recent log records into a ring buffer,
publishing ``DashboardEvent.LOG_RECORD_ADDED`` on an EventBus (when supplied)
so a diagnostics panel can show what the layout engine and data loader did.

Design goals:
 - Headless testability (no Qt dependency here)
 - Filtering by level name or logger name substring
 - Capacity-bound ring buffer with O(1) append
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from threading import RLock
from typing import Deque, List, Optional

from .event_bus import DashboardEvent, EventBus

__all__ = ["LogEntry", "LoggingService"]


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "LoggingService") -> None:
        super().__init__()
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401
        self._svc._ingest_record(record)


class LoggingService:
    def __init__(
        self,
        capacity: int = 500,
        *,
        logger_name: str = "",
        level: int = logging.DEBUG,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=max(1, capacity))
        self._logger_name = logger_name
        self._level = level
        self._bus = event_bus
        self._handler = _RingBufferHandler(self)
        self._handler.setLevel(level)
        self._attached = False

    # Lifecycle --------------------------------------------------------
    def attach(self) -> None:
        """Attach to ``logger_name`` (root logger when empty)."""
        if self._attached:
            return
        logger = logging.getLogger(self._logger_name or None)
        logger.addHandler(self._handler)
        if logger.level == logging.NOTSET or logger.level > self._level:
            logger.setLevel(self._level)
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        logging.getLogger(self._logger_name or None).removeHandler(self._handler)
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    # Internal ingestion -----------------------------------------------
    def _ingest_record(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
        )
        with self._lock:
            self._entries.append(entry)
        if self._bus is not None:
            self._bus.publish(
                DashboardEvent.LOG_RECORD_ADDED,
                {"level": entry.level, "name": entry.name, "message": entry.message[:120]},
            )

    # Query ------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._lock:
            data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def filter(self, *, level: str | None = None, name_contains: str | None = None) -> List[LogEntry]:
        return [
            e
            for e in self.recent()
            if (not level or e.level == level) and (not name_contains or name_contains in e.name)
        ]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
