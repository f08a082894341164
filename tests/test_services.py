from datetime import date, datetime

from tracker.services import DashboardService
from tracker.storage import FinanceStore, MemoryBackend


def make_service(clock=lambda: date(2024, 3, 15)):
    store = FinanceStore(MemoryBackend())
    for i, (amount, on, kind, cat) in enumerate([
        (3000.0, date(2024, 3, 1), "income", "10"),
        (1200.0, date(2024, 3, 3), "expense", "5"),
        (400.0, date(2024, 3, 8), "expense", "1"),
        (500.0, date(2024, 2, 8), "expense", "1"),
    ]):
        store.add_transaction(amount, on, f"tx{i}", kind, cat, now=datetime(2024, 3, 1, 8, i))
    store.add_budget("1", 300.0, "2024-03")
    store.add_budget("5", 2000.0, "2024-03")
    store.add_budget("5", 2000.0, "2024-02")
    return DashboardService(store, clock=clock, recent_count=3)


def test_snapshot_builds_every_view():
    dash = make_service().snapshot()

    assert dash.current_month == "2024-03"
    assert dash.transaction_count == 4
    assert dash.category_count == 13
    assert dash.budget_count == 2

    assert dash.totals.total_income == 3000
    assert dash.totals.total_expenses == 2100
    assert dash.totals.month_expenses == 1600
    assert dash.totals.balance == 900
    assert dash.totals.month_balance == 1400

    assert [m.month for m in dash.monthly] == ["Feb 2024", "Mar 2024"]
    assert dash.by_category[0].category == "Bills & Utilities"
    assert [c.status for c in dash.budget_comparisons] == ["over", "under"]
    assert [i.title for i in dash.insights] == [
        "Monthly Surplus",
        "High Category Spending",
        "Over Budget",
        "Spending Increase",
    ]
    assert [t.description for t in dash.recent] == ["tx3", "tx2", "tx1"]


def test_clock_is_read_once_per_snapshot():
    calls = []

    def clock():
        calls.append(1)
        return date(2024, 3, 15)

    make_service(clock).snapshot()
    assert len(calls) == 1


def test_explicit_today_skips_clock():
    def clock():
        raise AssertionError("clock should not be read")

    dash = make_service(clock).snapshot(today=date(2024, 2, 20))
    assert dash.current_month == "2024-02"
    assert dash.totals.month_expenses == 500
    assert [c.category_id for c in dash.budget_comparisons] == ["5"]


def test_budget_comparisons_for_other_month():
    rows = make_service().budget_comparisons("2024-02")
    assert len(rows) == 1
    assert rows[0].actual == 0
    assert rows[0].status == "under"


def test_empty_store_snapshot():
    dash = DashboardService(FinanceStore(MemoryBackend()), clock=lambda: date(2024, 3, 15)).snapshot()
    assert dash.monthly == ()
    assert dash.by_category == ()
    assert dash.insights == ()
    assert dash.totals.balance == 0
    assert dash.recent == ()
