import httpx
import pytest

from core.dashboard_client import DashboardHttpError, fetch_dashboard, normalize_envelope
from branchboard.services.dashboard_data_service import (
    CARD_SECTIONS,
    DashboardDataError,
    DashboardDataService,
    Period,
    card_rows,
    format_currency,
)

BASE = "http://api.test"

RESULT = {
    "salesSummary": {"todaySales": 120000, "monthSales": 3400000},
    "inventorySummary": {"lowStockCount": 3},
    "employeeSummary": {"totalEmployees": 12},
    "orderSummary": {"pendingOrders": 2, "orderStatusDistribution": {"DONE": 4}},
    "salesTrend": {"period": "MONTHLY", "salesData": []},
    "categorySales": {"categorySalesDistribution": {"coffee": 10}},
    "attendanceSummary": {"presentToday": 9},
}


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_normalize_envelope_variants():
    assert normalize_envelope({"status_code": 200, "result": {"a": 1}}) == {
        "status_code": 200,
        "status_message": "",
        "result": {"a": 1},
    }
    assert normalize_envelope({"data": {"a": 1}, "message": "ok"})["result"] == {"a": 1}
    bare = normalize_envelope({"salesSummary": {}})
    assert bare["status_code"] == 200 and bare["result"] == {"salesSummary": {}}
    assert normalize_envelope(None)["status_code"] is None


def test_fetch_builds_url_and_period_param():
    seen = []

    def handler(request):
        seen.append(request.url)
        return httpx.Response(200, json={"status_code": 200, "result": RESULT})

    env = fetch_dashboard(7, "WEEKLY", client=_client(handler), base_url=BASE + "/")
    assert env["result"] == RESULT
    assert seen[0].path == "/api/dashboard/branch/7"
    assert seen[0].params["period"] == "WEEKLY"


def test_fetch_retries_server_errors_then_succeeds():
    attempts = []

    def handler(request):
        attempts.append(1)
        if len(attempts) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"result": RESULT})

    env = fetch_dashboard(
        1, "MONTHLY", client=_client(handler), base_url=BASE, retries=3, backoff_factor=0
    )
    assert len(attempts) == 3
    assert env["status_code"] == 200


def test_fetch_client_error_not_retried_and_carries_message():
    attempts = []

    def handler(request):
        attempts.append(1)
        return httpx.Response(404, json={"status_message": "branch not found"})

    with pytest.raises(DashboardHttpError) as exc:
        fetch_dashboard(1, "MONTHLY", client=_client(handler), base_url=BASE, backoff_factor=0)
    assert len(attempts) == 1
    assert exc.value.status == 404
    assert exc.value.message == "branch not found"


def test_fetch_transport_error_exhausts_retries():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(DashboardHttpError):
        fetch_dashboard(
            1, "MONTHLY", client=_client(handler), base_url=BASE, retries=1, backoff_factor=0
        )


def test_service_maps_sections_to_cards():
    def handler(request):
        return httpx.Response(200, json={"status_code": 200, "result": RESULT})

    svc = DashboardDataService(base_url=BASE, client=_client(handler))
    snap = svc.load("b1", "YEARLY")
    assert snap.period is Period.YEARLY
    assert set(snap.cards) == set(CARD_SECTIONS)
    assert snap.card("sales")["todaySales"] == 120000
    assert snap.card("revenue")["period"] == "MONTHLY"
    assert snap.card("unknown") == {}


def test_service_missing_sections_become_empty_cards():
    svc = DashboardDataService(
        fetcher=lambda *a, **k: {"status_code": 200, "status_message": "", "result": {}}
    )
    snap = svc.load("b1")
    assert snap.period is Period.MONTHLY
    assert all(v == {} for v in snap.cards.values())


def test_service_non_200_status_raises_with_message():
    svc = DashboardDataService(
        fetcher=lambda *a, **k: {"status_code": 500, "status_message": "db down", "result": None}
    )
    with pytest.raises(DashboardDataError) as exc:
        svc.load("b1", Period.WEEKLY)
    assert exc.value.message == "db down"
    assert exc.value.status == 500


def test_service_wraps_transport_errors():
    def failing(*a, **k):
        raise DashboardHttpError("timeout", status=None)

    with pytest.raises(DashboardDataError) as exc:
        DashboardDataService(fetcher=failing).load("b1")
    assert exc.value.message == "timeout"


FULL_RESULT = {
    "salesSummary": {
        "totalSales": 1234500,
        "last7DaysSales": [
            {"date": "2024-05-01", "sales": 150000},
            {"date": "2024-05-02", "sales": 99999.5},
        ],
    },
    "inventorySummary": {"totalProducts": 120, "lowStockProducts": 4, "stockFulfillmentRate": 96.24},
    "employeeSummary": {"totalEmployees": 12, "presentEmployees": 10, "todayAttendanceRate": 83.333},
    "orderSummary": {"totalOrders": 31, "orderStatusDistribution": {"PENDING": 3, "COMPLETED": 28}},
    "salesTrend": {
        "period": "WEEKLY",
        "totalSales": 5000000,
        "yearOverYearGrowth": -2.5,
        "goalAchievementRate": 104,
        "salesData": [{"periodLabel": "W1", "sales": 1200000}, {"periodLabel": "W2"}],
    },
    "categorySales": {
        "topCategory": "Coffee",
        "categorySalesDistribution": {"Coffee": 800000, "Bakery": 200000},
    },
    "attendanceSummary": {
        "averageAttendanceRate": 91,
        "totalWorkDays": 22,
        "lateCount": 2,
        "weeklyAttendance": {"MON": {"presentCount": 9, "totalCount": 10}},
    },
}


def test_format_currency():
    assert format_currency(1234500) == "₩1,234,500"
    assert format_currency(99999.5) == "₩100,000"
    assert format_currency(-1500) == "-₩1,500"
    assert format_currency(None) == "₩0"
    assert format_currency("n/a") == "₩0"
    assert format_currency(float("inf")) == "₩0"


def test_card_rows_from_full_response():
    snap = DashboardDataService(
        fetcher=lambda *a, **k: {"status_code": 200, "status_message": "", "result": FULL_RESULT}
    ).load("b1", Period.WEEKLY)
    assert snap.rows("sales") == [
        ("Total sales", "₩1,234,500"),
        ("2024-05-01", "₩150,000"),
        ("2024-05-02", "₩100,000"),
    ]
    assert snap.rows("inventory") == [
        ("Products", "120"),
        ("Low stock", "4"),
        ("Fulfillment", "96.2%"),
    ]
    assert snap.rows("employee")[2] == ("Attendance", "83.3%")
    assert snap.rows("order") == [("Orders", "31"), ("PENDING", "3"), ("COMPLETED", "28")]
    assert snap.rows("revenue") == [
        ("Period", "WEEKLY"),
        ("Total sales", "₩5,000,000"),
        ("YoY growth", "-2.5%"),
        ("Goal", "104.0%"),
        ("W1", "₩1,200,000"),
        ("W2", "₩0"),
    ]
    assert snap.rows("category") == [
        ("Top category", "Coffee"),
        ("Coffee", "₩800,000"),
        ("Bakery", "₩200,000"),
    ]
    assert snap.rows("attendance") == [
        ("Average rate", "91.0%"),
        ("Work days", "22"),
        ("Late", "2"),
        ("MON", "9/10"),
    ]


def test_card_rows_tolerate_missing_and_malformed_sections():
    assert card_rows("sales", None) == []
    assert card_rows("sales", {}) == []
    assert card_rows("revenue", {"salesData": "oops"}, Period.YEARLY)[0] == ("Period", "YEARLY")
    assert card_rows("category", {"categorySalesDistribution": [1, 2]}) == [("Top category", "-")]
    assert card_rows("attendance", {"weeklyAttendance": {"TUE": None}})[-1] == ("TUE", "0/0")
    assert card_rows("weather", {"x": 1}) == []
