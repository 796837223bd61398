"""EventBus core.

Lightweight synchronous publish/subscribe mechanism with typed events.

Goals:
 - Decouple the layout service, data loading and widgets
 - Minimal, testable surface (no Qt dependency)
 - Safe error isolation: one failing handler doesn't break the publish cycle
 - Unsubscribe handles
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Dict, List, Protocol

__all__ = [
    "DashboardEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]


class DashboardEvent(str, Enum):  # str subclass for easier JSON/UI usage
    LAYOUT_DISPLAYED = "layout_displayed"
    LAYOUT_PERSISTED = "layout_persisted"
    LAYOUT_RESET = "layout_reset"
    COLUMNS_CHANGED = "columns_changed"
    DATA_LOADED = "data_loaded"
    DATA_LOAD_FAILED = "data_load_failed"
    LOG_RECORD_ADDED = "log_record_added"


@dataclass
class Event:
    name: str  # matches DashboardEvent value or custom string
    payload: Any
    timestamp: float


class EventHandler(Protocol):  # noqa: D401
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    active: bool = True


def _key(name: str | DashboardEvent) -> str:
    return name.value if isinstance(name, DashboardEvent) else name


class EventBus:
    """Synchronous event dispatcher.

    Handlers are invoked while the lock is NOT held (copy-first strategy) so
    handlers can subscribe/unsubscribe recursively without deadlock. Handler
    exceptions are collected in ``errors`` instead of propagating.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, BaseException]] = []

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------
    def subscribe(self, name: str | DashboardEvent, handler: EventHandler) -> Subscription:
        key = _key(name)
        sub = Subscription(event=key, handler=handler)
        with self._lock:
            self._subs.setdefault(key, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event)
            if bucket:
                self._subs[sub.event] = [s for s in bucket if s is not sub]
                if not self._subs[sub.event]:
                    self._subs.pop(sub.event, None)
        sub.active = False

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------
    def publish(self, name: str | DashboardEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(key, ()))
        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - capture any handler failure
                with self._lock:
                    self._errors.append((evt, exc))
        return evt

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def subscriber_count(self, name: str | DashboardEvent) -> int:
        with self._lock:
            return len(self._subs.get(_key(name), ()))

    @property
    def errors(self) -> list[tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)
