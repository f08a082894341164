"""Key-value persistence for transactions, categories and budgets.

Each collection is serialized as a JSON array under its own namespaced key.
Unreadable stored data is logged and replaced by the collection's fallback
(empty, or the default categories) so the dashboard can still render.
Writes never fall back: a mutator over an unreadable collection raises
ValueError and leaves the stored value as it was.
"""
import json
import logging
import os
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple, TypeVar

from tracker.domain import EXPENSE, INCOME, Budget, Category, Transaction
from tracker.transforms import (
    append,
    budget_from_dict,
    budget_to_dict,
    category_from_dict,
    category_to_dict,
    find_by_id,
    prepend,
    remove_by_id,
    replace_by_id,
    transaction_from_dict,
    transaction_to_dict,
)

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "personal-finance-transactions"
CATEGORIES_KEY = "personal-finance-categories"
BUDGETS_KEY = "personal-finance-budgets"

DEFAULT_CATEGORIES: Tuple[Category, ...] = (
    Category("1", "Food & Dining", EXPENSE, "#ef4444", "🍽️"),
    Category("2", "Transportation", EXPENSE, "#f97316", "🚗"),
    Category("3", "Shopping", EXPENSE, "#eab308", "🛍️"),
    Category("4", "Entertainment", EXPENSE, "#22c55e", "🎬"),
    Category("5", "Bills & Utilities", EXPENSE, "#3b82f6", "💡"),
    Category("6", "Healthcare", EXPENSE, "#8b5cf6", "🏥"),
    Category("7", "Education", EXPENSE, "#06b6d4", "📚"),
    Category("8", "Travel", EXPENSE, "#f59e0b", "✈️"),
    Category("9", "Other Expenses", EXPENSE, "#6b7280", "💰"),
    Category("10", "Salary", INCOME, "#10b981", "💼"),
    Category("11", "Freelance", INCOME, "#059669", "💻"),
    Category("12", "Investments", INCOME, "#0d9488", "📈"),
    Category("13", "Other Income", INCOME, "#14b8a6", "💎"),
)

R = TypeVar("R")


class Backend(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryBackend:
    def __init__(self, items: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileBackend:
    """All keys live in a single JSON object file, rewritten on every set."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)


class FinanceStore:
    def __init__(self, backend: Backend):
        self._backend = backend

    def _load(self, key: str, from_dict: Callable[[dict], R]) -> Optional[Tuple[R, ...]]:
        """Return the stored records, None when the key is absent.

        Raises ValueError when the stored value cannot be decoded.
        """
        raw = self._backend.get_item(key)
        if raw is None:
            return None
        try:
            return tuple(from_dict(d) for d in json.loads(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed data under {key}: {e}") from e

    def _load_or(self, key: str, from_dict: Callable[[dict], R], fallback: Tuple[R, ...]) -> Tuple[R, ...]:
        try:
            records = self._load(key, from_dict)
        except ValueError:
            logger.error("Error loading %s, using fallback", key, exc_info=True)
            return fallback
        return fallback if records is None else records

    def _load_for_write(self, key: str, from_dict: Callable[[dict], R]) -> Tuple[R, ...]:
        records = self._load(key, from_dict)
        return () if records is None else records

    def _save(self, key: str, records, to_dict) -> None:
        self._backend.set_item(key, json.dumps([to_dict(r) for r in records], ensure_ascii=False))

    # --- transactions

    def get_transactions(self) -> Tuple[Transaction, ...]:
        return self._load_or(TRANSACTIONS_KEY, transaction_from_dict, ())

    def save_transactions(self, transactions: Tuple[Transaction, ...]) -> None:
        self._save(TRANSACTIONS_KEY, transactions, transaction_to_dict)

    def add_transaction(
        self,
        amount: float,
        date: date,
        description: str,
        kind: str,
        category_id: str,
        *,
        now: Optional[datetime] = None,
    ) -> Transaction:
        t = Transaction(
            id=str(uuid.uuid4()),
            amount=amount,
            date=date,
            description=description,
            kind=kind,
            category_id=category_id,
            created_at=now or datetime.now(),
        )
        transactions = self._load_for_write(TRANSACTIONS_KEY, transaction_from_dict)
        self.save_transactions(prepend(transactions, t))
        logger.info("Added %s transaction %s", kind, t.id)
        return t

    def update_transaction(self, tid: str, **changes) -> Optional[Transaction]:
        transactions = self._load_for_write(TRANSACTIONS_KEY, transaction_from_dict)
        if find_by_id(transactions, tid) is None:
            return None
        updated = replace_by_id(transactions, tid, **changes)
        self.save_transactions(updated)
        return find_by_id(updated, tid)

    def delete_transaction(self, tid: str) -> bool:
        transactions = self._load_for_write(TRANSACTIONS_KEY, transaction_from_dict)
        remaining = remove_by_id(transactions, tid)
        if len(remaining) == len(transactions):
            return False
        self.save_transactions(remaining)
        logger.info("Deleted transaction %s", tid)
        return True

    # --- categories

    def get_categories(self) -> Tuple[Category, ...]:
        try:
            categories = self._load(CATEGORIES_KEY, category_from_dict)
        except ValueError:
            logger.error("Error loading categories, using defaults", exc_info=True)
            return DEFAULT_CATEGORIES
        if categories is None:
            self.save_categories(DEFAULT_CATEGORIES)
            return DEFAULT_CATEGORIES
        return categories

    def save_categories(self, categories: Tuple[Category, ...]) -> None:
        self._save(CATEGORIES_KEY, categories, category_to_dict)

    def get_category_by_id(self, cid: str) -> Optional[Category]:
        return find_by_id(self.get_categories(), cid)

    # --- budgets

    def get_budgets(self) -> Tuple[Budget, ...]:
        return self._load_or(BUDGETS_KEY, budget_from_dict, ())

    def save_budgets(self, budgets: Tuple[Budget, ...]) -> None:
        self._save(BUDGETS_KEY, budgets, budget_to_dict)

    def add_budget(
        self,
        category_id: str,
        amount: float,
        month: str,
        *,
        now: Optional[datetime] = None,
    ) -> Budget:
        """Store a budget, replacing any other budget for the same category and month."""
        b = Budget(
            id=str(uuid.uuid4()),
            category_id=category_id,
            amount=amount,
            month=month,
            created_at=now or datetime.now(),
        )
        kept = tuple(
            other for other in self._load_for_write(BUDGETS_KEY, budget_from_dict)
            if not (other.category_id == category_id and other.month == month)
        )
        self.save_budgets(append(kept, b))
        logger.info("Set budget %s for category %s in %s", b.id, category_id, month)
        return b

    def update_budget(self, bid: str, **changes) -> Optional[Budget]:
        budgets = self._load_for_write(BUDGETS_KEY, budget_from_dict)
        if find_by_id(budgets, bid) is None:
            return None
        updated = replace_by_id(budgets, bid, **changes)
        self.save_budgets(updated)
        return find_by_id(updated, bid)

    def delete_budget(self, bid: str) -> bool:
        budgets = self._load_for_write(BUDGETS_KEY, budget_from_dict)
        remaining = remove_by_id(budgets, bid)
        if len(remaining) == len(budgets):
            return False
        self.save_budgets(remaining)
        logger.info("Deleted budget %s", bid)
        return True

    def get_budget_for(self, category_id: str, month: str) -> Optional[Budget]:
        return next(
            (b for b in self.get_budgets() if b.category_id == category_id and b.month == month),
            None,
        )
