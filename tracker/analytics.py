"""Aggregation engine.

Pure functions that turn snapshots of transactions, categories and budgets
into the views the dashboard shows. Nothing here reads the clock or storage:
the caller passes ``today`` and the record snapshots explicitly.
"""
from collections import defaultdict
from datetime import date
from typing import Callable, Iterable, Optional

from tracker.domain import (
    EXPENSE,
    ON_TRACK,
    OVER,
    SUCCESS,
    UNDER,
    WARNING,
    Budget,
    BudgetComparison,
    Category,
    CategoryExpense,
    FinancialInsight,
    MonthlyExpense,
    Transaction,
)
from tracker.functional import compose, pipe, safe_category
from tracker.lazy import (
    all_of,
    by_category,
    by_kind,
    expenses,
    in_month,
    incomes,
    iter_transactions,
    same_month_as,
)
from tracker.periods import month_key, month_label, month_start
from tracker.transforms import total_amount

UNKNOWN_CATEGORY = "Unknown"
NEUTRAL_COLOR = "#6b7280"

MONTHS_SHOWN = 12
ON_TRACK_FROM = 80.0
TOP_CATEGORY_SHARE = 40.0
TREND_THRESHOLD = 20.0


def monthly_expenses(trans: Iterable[Transaction]) -> tuple[MonthlyExpense, ...]:
    """Expense totals per calendar month, oldest first, last 12 months only."""
    monthly: dict[date, list] = defaultdict(lambda: [0.0, 0])
    for t in expenses(trans):
        bucket = monthly[month_start(t.date)]
        bucket[0] += t.amount
        bucket[1] += 1

    ordered = sorted(monthly.items())[-MONTHS_SHOWN:]
    return tuple(
        MonthlyExpense(month=month_label(start), amount=amount, count=count)
        for start, (amount, count) in ordered
    )


def category_expenses(
    trans: Iterable[Transaction], cats: Iterable[Category]
) -> tuple[CategoryExpense, ...]:
    """Expense totals per category, largest first.

    Categories that no longer exist are reported as "Unknown". Equal totals
    keep the order in which their categories were first seen.
    """
    cats = tuple(cats)
    totals: dict[str, list] = {}
    for t in expenses(trans):
        bucket = totals.setdefault(t.category_id, [0.0, 0])
        bucket[0] += t.amount
        bucket[1] += 1

    rows = [
        CategoryExpense(
            category=safe_category(cats, cid).map(lambda c: c.name).get_or_else(UNKNOWN_CATEGORY),
            amount=amount,
            count=count,
            color=safe_category(cats, cid).map(lambda c: c.color).get_or_else(NEUTRAL_COLOR),
        )
        for cid, (amount, count) in totals.items()
    ]
    return tuple(sorted(rows, key=lambda row: row.amount, reverse=True))


def total_expenses(trans: Iterable[Transaction]) -> float:
    return pipe(trans, expenses, total_amount)


def total_income(trans: Iterable[Transaction]) -> float:
    return pipe(trans, incomes, total_amount)


_sum_expenses = compose(total_amount, expenses)
_sum_incomes = compose(total_amount, incomes)


def month_expenses(trans: Iterable[Transaction], today: date) -> float:
    return _sum_expenses(iter_transactions(trans, same_month_as(today)))


def month_income(trans: Iterable[Transaction], today: date) -> float:
    return _sum_incomes(iter_transactions(trans, same_month_as(today)))


def budget_status(percentage: float) -> str:
    if percentage > 100:
        return OVER
    if percentage < ON_TRACK_FROM:
        return UNDER
    return ON_TRACK


def budget_comparisons(
    trans: Iterable[Transaction],
    budgets: Iterable[Budget],
    cats: Iterable[Category],
    month: str,
) -> tuple[BudgetComparison, ...]:
    """Budgeted vs. actual spending for every budget set for ``month`` ("YYYY-MM")."""
    trans = tuple(trans)
    cats = tuple(cats)
    rows = []
    for b in budgets:
        if b.month != month:
            continue
        actual = total_amount(
            iter_transactions(
                trans, all_of(by_kind(EXPENSE), by_category(b.category_id), in_month(month))
            )
        )
        percentage = actual / b.amount * 100 if b.amount > 0 else 0.0
        category = safe_category(cats, b.category_id)
        rows.append(
            BudgetComparison(
                category_id=b.category_id,
                category_name=category.map(lambda c: c.name).get_or_else(UNKNOWN_CATEGORY),
                budgeted=b.amount,
                actual=actual,
                percentage=percentage,
                status=budget_status(percentage),
                color=category.map(lambda c: c.color).get_or_else(NEUTRAL_COLOR),
            )
        )
    return tuple(rows)


# --- insight rules, evaluated in this order

def _balance_insight(trans, cats, budgets, today) -> Optional[FinancialInsight]:
    balance = month_income(trans, today) - month_expenses(trans, today)
    if balance < 0:
        return FinancialInsight(
            WARNING,
            "Monthly Deficit",
            "You're spending more than you earn this month",
            abs(balance),
        )
    if balance > 0:
        return FinancialInsight(
            SUCCESS,
            "Monthly Surplus",
            "Great job! You're saving money this month",
            balance,
        )
    return None


def _top_category_insight(trans, cats, budgets, today) -> Optional[FinancialInsight]:
    rows = category_expenses(trans, cats)
    if not rows:
        return None
    total = sum(row.amount for row in rows)
    if total <= 0:
        return None
    top = rows[0]
    share = top.amount / total * 100
    if share <= TOP_CATEGORY_SHARE:
        return None
    return FinancialInsight(
        WARNING,
        "High Category Spending",
        f"{top.category} accounts for {share:.1f}% of your expenses",
        top.amount,
    )


def _over_budget_insight(trans, cats, budgets, today) -> Optional[FinancialInsight]:
    over = [c for c in budget_comparisons(trans, budgets, cats, month_key(today)) if c.status == OVER]
    if not over:
        return None
    noun = "category" if len(over) == 1 else "categories"
    return FinancialInsight(
        WARNING,
        "Over Budget",
        f"You're over budget in {len(over)} {noun}",
    )


def _trend_insight(trans, cats, budgets, today) -> Optional[FinancialInsight]:
    months = monthly_expenses(trans)
    if len(months) < 2:
        return None
    previous, last = months[-2], months[-1]
    # a zero month has no meaningful percentage change
    if previous.amount == 0:
        return None
    change = last.amount - previous.amount
    change_pct = change / previous.amount * 100
    if change_pct > TREND_THRESHOLD:
        return FinancialInsight(
            WARNING,
            "Spending Increase",
            f"Your spending increased by {change_pct:.1f}% from last month",
            change,
        )
    if change_pct < -TREND_THRESHOLD:
        return FinancialInsight(
            SUCCESS,
            "Spending Decrease",
            f"Great! Your spending decreased by {abs(change_pct):.1f}% from last month",
            abs(change),
        )
    return None


INSIGHT_RULES: tuple[Callable[..., Optional[FinancialInsight]], ...] = (
    _balance_insight,
    _top_category_insight,
    _over_budget_insight,
    _trend_insight,
)


def financial_insights(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    budgets: Iterable[Budget],
    today: date,
) -> tuple[FinancialInsight, ...]:
    trans, cats, budgets = tuple(trans), tuple(cats), tuple(budgets)
    found = (rule(trans, cats, budgets, today) for rule in INSIGHT_RULES)
    return tuple(i for i in found if i is not None)


def recent_transactions(trans: Iterable[Transaction], count: int = 5) -> tuple[Transaction, ...]:
    """Newest transactions by creation time; ties keep their input order."""
    ordered = sorted(trans, key=lambda t: t.created_at, reverse=True)
    return tuple(ordered[: max(0, count)])
