"""Dashboard data service.

Fetches per-card metrics for a branch and period and maps the backend's
response sections onto dashboard card ids. Failures raise
``DashboardDataError`` carrying a user-presentable message; they never touch
layout state.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import httpx

from core.dashboard_client import DashboardHttpError, fetch_dashboard

from .grid_layout import CARD_IDS

__all__ = [
    "CARD_SECTIONS",
    "CardRow",
    "DashboardDataError",
    "DashboardDataService",
    "DashboardSnapshot",
    "Period",
    "card_rows",
    "format_currency",
]

log = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to load dashboard"


class Period(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


# card id -> response section
CARD_SECTIONS: Dict[str, str] = {
    "sales": "salesSummary",
    "inventory": "inventorySummary",
    "employee": "employeeSummary",
    "order": "orderSummary",
    "revenue": "salesTrend",
    "category": "categorySales",
    "attendance": "attendanceSummary",
}


CardRow = Tuple[str, str]


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def format_currency(amount: Any) -> str:
    """Format a won amount like ``₩1,234,500`` (no minor unit, half-up)."""
    number = _number(amount)
    text = f"₩{int(math.floor(abs(number) + 0.5)):,}"
    return f"-{text}" if number < 0 else text


def _percent(value: Any) -> str:
    return f"{_number(value):.1f}%"


def _count(value: Any) -> str:
    return f"{int(_number(value)):,}"


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _records(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def card_rows(card_id: str, section: Any, period: Period | None = None) -> List[CardRow]:
    """Derive the ``(label, value)`` rows shown on a card from its response section.

    Headline figures come first, followed by the card's series (daily sales,
    order status counts, trend points, category totals, weekly attendance).
    Missing or empty sections yield no rows.
    """
    data = _mapping(section)
    if not data:
        return []
    if card_id == "sales":
        rows = [("Total sales", format_currency(data.get("totalSales")))]
        rows += [
            (str(d.get("date", "-")), format_currency(d.get("sales")))
            for d in _records(data.get("last7DaysSales"))
        ]
        return rows
    if card_id == "inventory":
        return [
            ("Products", _count(data.get("totalProducts"))),
            ("Low stock", _count(data.get("lowStockProducts"))),
            ("Fulfillment", _percent(data.get("stockFulfillmentRate"))),
        ]
    if card_id == "employee":
        return [
            ("Employees", _count(data.get("totalEmployees"))),
            ("Present", _count(data.get("presentEmployees"))),
            ("Attendance", _percent(data.get("todayAttendanceRate"))),
        ]
    if card_id == "order":
        rows = [("Orders", _count(data.get("totalOrders")))]
        rows += [
            (str(status), _count(n))
            for status, n in _mapping(data.get("orderStatusDistribution")).items()
        ]
        return rows
    if card_id == "revenue":
        label = data.get("period") or (period.value if period is not None else "-")
        rows = [
            ("Period", str(label)),
            ("Total sales", format_currency(data.get("totalSales"))),
            ("YoY growth", _percent(data.get("yearOverYearGrowth"))),
            ("Goal", _percent(data.get("goalAchievementRate"))),
        ]
        rows += [
            (str(s.get("periodLabel", "-")), format_currency(s.get("sales")))
            for s in _records(data.get("salesData"))
        ]
        return rows
    if card_id == "category":
        rows = [("Top category", str(data.get("topCategory") or "-"))]
        rows += [
            (str(name), format_currency(value))
            for name, value in _mapping(data.get("categorySalesDistribution")).items()
        ]
        return rows
    if card_id == "attendance":
        rows = [
            ("Average rate", _percent(data.get("averageAttendanceRate"))),
            ("Work days", _count(data.get("totalWorkDays"))),
            ("Late", _count(data.get("lateCount"))),
        ]
        for day, counts in _mapping(data.get("weeklyAttendance")).items():
            counts = _mapping(counts)
            rows.append(
                (str(day), f"{_count(counts.get('presentCount'))}/{_count(counts.get('totalCount'))}")
            )
        return rows
    return []


class DashboardDataError(RuntimeError):
    """Dashboard metrics could not be loaded (retryable)."""

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass(frozen=True)
class DashboardSnapshot:
    branch_id: str | int
    period: Period
    cards: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    def card(self, card_id: str) -> Dict[str, Any]:
        return self.cards.get(card_id, {})

    def rows(self, card_id: str) -> List[CardRow]:
        return card_rows(card_id, self.cards.get(card_id), self.period)

    @classmethod
    def from_result(
        cls, branch_id: str | int, period: Period, result: Mapping[str, Any]
    ) -> "DashboardSnapshot":
        cards: Dict[str, Dict[str, Any]] = {}
        for card_id in CARD_IDS:
            section = result.get(CARD_SECTIONS[card_id])
            cards[card_id] = dict(section) if isinstance(section, Mapping) else {}
        return cls(branch_id=branch_id, period=period, cards=cards, raw=dict(result))


Fetcher = Callable[..., Dict[str, Any]]


class DashboardDataService:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        client: Optional[httpx.Client] = None,
        fetcher: Fetcher = fetch_dashboard,
    ):
        self._base_url = base_url
        self._client = client
        self._fetcher = fetcher

    def load(self, branch_id: str | int, period: Period | str = Period.MONTHLY) -> DashboardSnapshot:
        period = Period(period)
        try:
            envelope = self._fetcher(
                branch_id, period.value, client=self._client, base_url=self._base_url
            )
        except DashboardHttpError as e:
            log.error("Dashboard fetch failed for branch %s (%s): %s", branch_id, period.value, e)
            raise DashboardDataError(e.message or DEFAULT_ERROR_MESSAGE, status=e.status) from e
        status = envelope.get("status_code")
        if status != 200:
            message = envelope.get("status_message") or f"{DEFAULT_ERROR_MESSAGE} (code: {status})"
            raise DashboardDataError(message, status=status)
        result = envelope.get("result")
        if not isinstance(result, Mapping):
            raise DashboardDataError("Dashboard response has an unexpected format")
        return DashboardSnapshot.from_result(branch_id, period, result)
