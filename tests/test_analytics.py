from datetime import date, datetime

import pytest

from tracker.analytics import (
    NEUTRAL_COLOR,
    UNKNOWN_CATEGORY,
    budget_comparisons,
    budget_status,
    category_expenses,
    month_expenses,
    month_income,
    monthly_expenses,
    recent_transactions,
    total_expenses,
    total_income,
)
from tracker.domain import Budget, Category, Transaction

TODAY = date(2024, 3, 15)


def make_tx(id, amount, on, kind="expense", cat="food", created=None):
    return Transaction(
        id=id,
        amount=float(amount),
        date=on,
        description=f"tx {id}",
        kind=kind,
        category_id=cat,
        created_at=created or datetime(2024, 1, 1, 12, 0),
    )


def make_sample():
    cats = (
        Category("food", "Food & Dining", "expense", "#ef4444", "🍽️"),
        Category("car", "Transportation", "expense", "#f97316", "🚗"),
        Category("salary", "Salary", "income", "#10b981", "💼"),
    )
    trans = (
        make_tx("t1", 300, date(2024, 3, 1), cat="food"),
        make_tx("t2", 200, date(2024, 3, 2), cat="car"),
        make_tx("t3", 5000, date(2024, 3, 3), kind="income", cat="salary"),
        make_tx("t4", 700, date(2024, 2, 4), cat="food"),
        make_tx("t5", 100, date(2024, 2, 5), cat="car"),
        make_tx("t6", 1000, date(2024, 1, 10), kind="income", cat="salary"),
    )
    return cats, trans


def test_totals_and_balance():
    _, trans = make_sample()
    assert total_expenses(trans) == 1300
    assert total_income(trans) == 6000
    assert total_income(trans) - total_expenses(trans) == 4700


def test_current_month_totals():
    _, trans = make_sample()
    assert month_expenses(trans, TODAY) == 500
    assert month_income(trans, TODAY) == 5000
    assert month_expenses(trans, date(2024, 2, 28)) == 800
    assert month_income(trans, date(2024, 2, 28)) == 0


def test_current_month_ignores_same_month_of_other_year():
    trans = (make_tx("t1", 50, date(2023, 3, 20)),)
    assert month_expenses(trans, TODAY) == 0


def test_empty_input():
    assert monthly_expenses(()) == ()
    assert category_expenses((), ()) == ()
    assert total_expenses(()) == 0
    assert total_income(()) == 0
    assert month_expenses((), TODAY) == 0
    assert month_income((), TODAY) == 0
    assert recent_transactions(()) == ()


def test_monthly_expenses_groups_and_labels():
    _, trans = make_sample()
    result = monthly_expenses(trans)
    assert [m.month for m in result] == ["Feb 2024", "Mar 2024"]
    assert result[0].amount == 800
    assert result[0].count == 2
    assert result[1].amount == 500
    assert result[1].count == 2


def test_monthly_expenses_sorted_by_calendar_not_label():
    trans = (
        make_tx("a", 10, date(2024, 1, 5)),
        make_tx("b", 20, date(2023, 12, 5)),
        make_tx("c", 30, date(2023, 1, 5)),
        make_tx("d", 40, date(2023, 4, 5)),
    )
    labels = [m.month for m in monthly_expenses(trans)]
    assert labels == ["Jan 2023", "Apr 2023", "Dec 2023", "Jan 2024"]


def test_monthly_expenses_keeps_last_twelve_months():
    trans = tuple(
        make_tx(f"t{i}", i + 1, date(2022 + i // 12, i % 12 + 1, 1)) for i in range(15)
    )
    result = monthly_expenses(trans)
    assert len(result) == 12
    assert result[0].month == "Apr 2022"
    assert result[-1].month == "Mar 2023"
    assert result[-1].amount == 15


def test_category_expenses_sorted_descending_with_lookup():
    cats, trans = make_sample()
    result = category_expenses(trans, cats)
    assert [c.category for c in result] == ["Food & Dining", "Transportation"]
    assert result[0].amount == 1000
    assert result[0].count == 2
    assert result[0].color == "#ef4444"
    assert result[1].amount == 300


def test_category_expenses_unknown_category():
    cats, _ = make_sample()
    trans = (make_tx("t1", 40, TODAY, cat="deleted"), make_tx("t2", 60, TODAY, cat="food"))
    result = category_expenses(trans, cats)
    assert result[1].category == UNKNOWN_CATEGORY
    assert result[1].color == NEUTRAL_COLOR
    assert result[1].amount == 40


def test_category_expenses_ties_keep_encounter_order():
    cats, _ = make_sample()
    trans = (make_tx("t1", 50, TODAY, cat="car"), make_tx("t2", 50, TODAY, cat="food"))
    assert [c.category for c in category_expenses(trans, cats)] == ["Transportation", "Food & Dining"]


def test_category_expenses_sum_matches_total_expenses():
    cats, trans = make_sample()
    trans = trans + (make_tx("t7", 25, TODAY, cat="gone"),)
    assert sum(c.amount for c in category_expenses(trans, cats)) == total_expenses(trans)


@pytest.mark.parametrize(
    "actual, status",
    [(80, "on-track"), (100, "on-track"), (79.99, "under"), (100.01, "over"), (0, "under")],
)
def test_budget_status_bands(actual, status):
    cats, _ = make_sample()
    budgets = (Budget("b1", "food", 100.0, "2024-03", datetime(2024, 3, 1)),)
    trans = (make_tx("t1", actual, date(2024, 3, 10), cat="food"),)
    (row,) = budget_comparisons(trans, budgets, cats, "2024-03")
    assert row.percentage == pytest.approx(actual)
    assert row.status == status


def test_budget_status_function():
    assert budget_status(80.0) == "on-track"
    assert budget_status(100.0) == "on-track"
    assert budget_status(79.999) == "under"
    assert budget_status(100.001) == "over"


def test_budget_comparisons_filters_month_and_category():
    cats, trans = make_sample()
    budgets = (
        Budget("b1", "car", 400.0, "2024-03", datetime(2024, 3, 1)),
        Budget("b2", "food", 250.0, "2024-03", datetime(2024, 3, 1)),
        Budget("b3", "food", 999.0, "2024-02", datetime(2024, 2, 1)),
    )
    result = budget_comparisons(trans, budgets, cats, "2024-03")
    assert [r.category_id for r in result] == ["car", "food"]
    assert result[0].actual == 200
    assert result[0].percentage == 50
    assert result[0].status == "under"
    assert result[1].actual == 300
    assert result[1].percentage == pytest.approx(120)
    assert result[1].status == "over"
    assert result[1].category_name == "Food & Dining"


def test_budget_comparisons_zero_budget_and_unknown_category():
    cats, trans = make_sample()
    budgets = (Budget("b1", "gone", 0.0, "2024-03", datetime(2024, 3, 1)),)
    (row,) = budget_comparisons(trans, budgets, cats, "2024-03")
    assert row.percentage == 0
    assert row.status == "under"
    assert row.category_name == UNKNOWN_CATEGORY
    assert row.color == NEUTRAL_COLOR


def test_recent_transactions_newest_first():
    trans = tuple(
        make_tx(f"t{i}", 10, TODAY, created=datetime(2024, 3, i + 1)) for i in range(8)
    )
    result = recent_transactions(trans)
    assert [t.id for t in result] == ["t7", "t6", "t5", "t4", "t3"]
    assert len(recent_transactions(trans, count=2)) == 2


def test_recent_transactions_ties_keep_input_order_and_input_untouched():
    stamp = datetime(2024, 3, 1)
    trans = [make_tx("a", 1, TODAY, created=stamp), make_tx("b", 1, TODAY, created=stamp)]
    assert [t.id for t in recent_transactions(trans)] == ["a", "b"]
    assert [t.id for t in trans] == ["a", "b"]


def test_functions_accept_generators():
    cats, trans = make_sample()
    assert total_expenses(t for t in trans) == 1300
    assert len(budget_comparisons((t for t in trans), (), cats, "2024-03")) == 0
