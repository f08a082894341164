from datetime import date
from typing import Callable, Iterable, Iterator

from tracker.domain import EXPENSE, INCOME, Transaction
from tracker.periods import month_key, same_month


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def by_kind(kind: str):
    def _filter(t: Transaction) -> bool:
        return t.kind == kind

    return _filter


def by_category(category_id: str):
    def _filter(t: Transaction) -> bool:
        return t.category_id == category_id

    return _filter


def in_month(month: str):
    """Match transactions dated inside a "YYYY-MM" month."""
    def _filter(t: Transaction) -> bool:
        return month_key(t.date) == month

    return _filter


def same_month_as(today: date):
    def _filter(t: Transaction) -> bool:
        return same_month(t.date, today)

    return _filter


def by_date_range(start: date, end: date):
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def all_of(*preds: Callable[[Transaction], bool]):
    def _filter(t: Transaction) -> bool:
        return all(p(t) for p in preds)

    return _filter


def expenses(trans: Iterable[Transaction]) -> Iterator[Transaction]:
    return iter_transactions(trans, by_kind(EXPENSE))


def incomes(trans: Iterable[Transaction]) -> Iterator[Transaction]:
    return iter_transactions(trans, by_kind(INCOME))
