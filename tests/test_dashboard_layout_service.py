from branchboard.services.dashboard_layout_service import DashboardLayoutService, LayoutState
from branchboard.services.event_bus import DashboardEvent, EventBus
from branchboard.services.grid_layout import default_layout
from branchboard.services.layout_persistence import LayoutPersistenceService
from branchboard.services.layout_scaler import to_displayed


def _by_id(layout):
    return {e.id: e for e in layout}


class RecordingStore(LayoutPersistenceService):
    def __init__(self, base_dir):
        super().__init__(base_dir)
        self.saves = 0

    def save(self, branch_id, layout):
        self.saves += 1
        return super().save(branch_id, layout)


def _service(layout_store, **kw):
    calls = []
    svc = DashboardLayoutService(layout_store, "b1", **kw)
    svc.subscribe(lambda layout, cols: calls.append((layout, cols)))
    return svc, calls


def test_load_enters_displaying_with_default(layout_store):
    svc, calls = _service(layout_store)
    assert svc.state is LayoutState.LOADING
    svc.load()
    assert svc.state is LayoutState.DISPLAYING
    assert svc.canonical == default_layout()
    assert calls == [(default_layout(), 12)]


def test_column_change_rescales_latest_canonical(layout_store):
    svc, calls = _service(layout_store)
    svc.load()
    edited = [dict(e.to_dict(), x=0, y=30) if e.id == "order" else e for e in svc.displayed]
    svc.apply_user_edit(edited)
    assert svc.set_column_count(6)
    layout, cols = calls[-1]
    assert cols == 6
    assert layout == to_displayed(svc.canonical, 6)
    assert _by_id(layout)["order"].y == 30


def test_unchanged_column_count_is_noop(layout_store):
    svc, calls = _service(layout_store)
    svc.load()
    svc.set_column_count(8)
    before = len(calls)
    assert svc.set_column_count(8) is False
    assert len(calls) == before


def test_repeated_column_changes_do_not_drift(layout_store):
    svc, _ = _service(layout_store)
    svc.load()
    for cols in (6, 10, 4, 11, 8, 12):
        svc.set_column_count(cols)
    assert svc.canonical == default_layout()
    assert svc.displayed == default_layout()


def test_unknown_column_count_snaps_to_breakpoint(layout_store):
    svc, _ = _service(layout_store)
    svc.load()
    svc.set_column_count(7)
    assert svc.column_count in (6, 8)


def test_drag_persists_and_reloads_exactly(tmp_path):
    store = RecordingStore(str(tmp_path))
    svc, _ = _service(store)
    svc.load()
    edited = [dict(e.to_dict(), x=9, w=3, y=24) if e.id == "order" else e for e in svc.displayed]
    svc.apply_user_edit(edited)
    assert store.saves == 1
    reloaded = _by_id(RecordingStore(str(tmp_path)).load("b1"))
    assert (reloaded["order"].x, reloaded["order"].w) == (9, 3)
    fresh = DashboardLayoutService(RecordingStore(str(tmp_path)), "b1")
    fresh.load()
    assert (_by_id(fresh.canonical)["order"].x, _by_id(fresh.canonical)["order"].w) == (9, 3)


def test_partial_edit_keeps_other_cards(layout_store):
    svc, _ = _service(layout_store)
    svc.load()
    svc.apply_user_edit([{"id": "sales", "x": 6, "y": 40, "w": 6, "h": 4}, {"id": "nope"}])
    canonical = _by_id(svc.canonical)
    assert (canonical["sales"].x, canonical["sales"].w, canonical["sales"].y) == (6, 6, 40)
    assert canonical["revenue"] == _by_id(default_layout())["revenue"]
    assert len(svc.canonical) == len(default_layout())


def test_edit_before_load_keeps_stored_layout(layout_store):
    stored = DashboardLayoutService(layout_store, "b1")
    stored.load()
    stored.apply_user_edit([{"id": "revenue", "x": 4, "y": 30, "w": 8, "h": 8}])

    svc, _ = _service(layout_store)
    assert svc.state is LayoutState.LOADING
    svc.apply_user_edit([{"id": "sales", "x": 0, "y": 50, "w": 3, "h": 4}])
    assert svc.state is LayoutState.DISPLAYING
    canonical = _by_id(layout_store.load("b1"))
    assert (canonical["revenue"].x, canonical["revenue"].y) == (4, 30)
    assert canonical["sales"].y == 50


def test_edit_on_narrow_grid_maps_back_to_twelve_columns(layout_store):
    svc, _ = _service(layout_store)
    svc.load()
    svc.set_column_count(6)
    svc.apply_user_edit([{"id": "category", "x": 3, "y": 4, "w": 3, "h": 8}])
    entry = _by_id(svc.canonical)["category"]
    assert (entry.x, entry.w) == (6, 6)
    assert _by_id(layout_store.load("b1"))["category"].x == 6


def test_reset_restores_default_and_clears_storage(layout_store):
    svc, calls = _service(layout_store)
    svc.load()
    svc.apply_user_edit([{"id": "sales", "x": 6, "y": 40, "w": 6, "h": 4}])
    assert layout_store.has_layout("b1")
    svc.reset()
    assert svc.canonical == default_layout()
    assert not layout_store.has_layout("b1")
    assert calls[-1] == (default_layout(), 12)


def test_events_published(layout_store):
    bus = EventBus()
    seen = []
    for evt in (
        DashboardEvent.LAYOUT_DISPLAYED,
        DashboardEvent.LAYOUT_PERSISTED,
        DashboardEvent.LAYOUT_RESET,
    ):
        bus.subscribe(evt, lambda e: seen.append(e.name))
    svc = DashboardLayoutService(layout_store, "b1", event_bus=bus)
    svc.load()
    svc.apply_user_edit([])
    svc.reset()
    assert seen == [
        "layout_displayed",
        "layout_persisted",
        "layout_displayed",
        "layout_reset",
        "layout_displayed",
    ]


def test_unsubscribe_stops_notifications(layout_store):
    svc = DashboardLayoutService(layout_store, "b1")
    calls = []
    unsubscribe = svc.subscribe(lambda layout, cols: calls.append(cols))
    svc.load()
    unsubscribe()
    svc.set_column_count(10)
    assert calls == [12]
