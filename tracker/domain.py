from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

INCOME = "income"
EXPENSE = "expense"

UNDER = "under"
ON_TRACK = "on-track"
OVER = "over"

WARNING = "warning"
SUCCESS = "success"
INFO = "info"


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float        # always a positive magnitude, direction is in kind
    date: date
    description: str
    kind: str            # "income" | "expense"
    category_id: str     # may point at a deleted category
    created_at: datetime


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    kind: str
    color: str
    icon: str


@dataclass(frozen=True)
class Budget:
    id: str
    category_id: str
    amount: float
    month: str  # "YYYY-MM"
    created_at: datetime


@dataclass(frozen=True)
class MonthlyExpense:
    month: str  # e.g. "Jan 2024"
    amount: float
    count: int


@dataclass(frozen=True)
class CategoryExpense:
    category: str
    amount: float
    count: int
    color: str


@dataclass(frozen=True)
class BudgetComparison:
    category_id: str
    category_name: str
    budgeted: float
    actual: float
    percentage: float
    status: str  # "under" | "on-track" | "over"
    color: str


@dataclass(frozen=True)
class FinancialInsight:
    type: str  # "warning" | "success" | "info"
    title: str
    message: str
    value: Optional[float] = None


@dataclass(frozen=True)
class DashboardTotals:
    total_income: float
    total_expenses: float
    month_income: float
    month_expenses: float

    @property
    def balance(self) -> float:
        return self.total_income - self.total_expenses

    @property
    def month_balance(self) -> float:
        return self.month_income - self.month_expenses
