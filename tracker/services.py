import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Tuple

from tracker import analytics
from tracker.domain import (
    Budget,
    BudgetComparison,
    Category,
    CategoryExpense,
    DashboardTotals,
    FinancialInsight,
    MonthlyExpense,
    Transaction,
)
from tracker.periods import month_key
from tracker.storage import FinanceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dashboard:
    today: date
    current_month: str
    transactions: Tuple[Transaction, ...]
    categories: Tuple[Category, ...]
    budgets: Tuple[Budget, ...]
    monthly: Tuple[MonthlyExpense, ...]
    by_category: Tuple[CategoryExpense, ...]
    budget_comparisons: Tuple[BudgetComparison, ...]
    totals: DashboardTotals
    insights: Tuple[FinancialInsight, ...]
    recent: Tuple[Transaction, ...]

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def category_count(self) -> int:
        return len(self.categories)

    @property
    def budget_count(self) -> int:
        return len(self.budget_comparisons)


class DashboardService:
    """Builds every dashboard view from one consistent read of the store.

    ``clock`` is sampled once per snapshot so that the totals, the budget
    comparisons and the insights all agree on which month is current.
    """

    def __init__(self, store: FinanceStore, clock: Callable[[], date] = date.today, recent_count: int = 5):
        self.store = store
        self.clock = clock
        self.recent_count = recent_count

    def snapshot(self, today: Optional[date] = None) -> Dashboard:
        today = today or self.clock()
        month = month_key(today)

        transactions = self.store.get_transactions()
        categories = self.store.get_categories()
        budgets = self.store.get_budgets()

        totals = DashboardTotals(
            total_income=analytics.total_income(transactions),
            total_expenses=analytics.total_expenses(transactions),
            month_income=analytics.month_income(transactions, today),
            month_expenses=analytics.month_expenses(transactions, today),
        )
        dashboard = Dashboard(
            today=today,
            current_month=month,
            transactions=transactions,
            categories=categories,
            budgets=budgets,
            monthly=analytics.monthly_expenses(transactions),
            by_category=analytics.category_expenses(transactions, categories),
            budget_comparisons=analytics.budget_comparisons(transactions, budgets, categories, month),
            totals=totals,
            insights=analytics.financial_insights(transactions, categories, budgets, today),
            recent=analytics.recent_transactions(transactions, self.recent_count),
        )
        logger.debug(
            "Snapshot for %s: %d transactions, %d budgets this month, %d insights",
            month,
            dashboard.transaction_count,
            dashboard.budget_count,
            len(dashboard.insights),
        )
        return dashboard

    def budget_comparisons(self, month: str) -> Tuple[BudgetComparison, ...]:
        """Comparisons for any month, e.g. one picked in the budget manager."""
        return analytics.budget_comparisons(
            self.store.get_transactions(),
            self.store.get_budgets(),
            self.store.get_categories(),
            month,
        )
