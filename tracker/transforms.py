from dataclasses import asdict, replace
from datetime import date, datetime, timezone
from functools import reduce
from typing import Iterable, Optional, Tuple, TypeVar

from tracker.domain import Budget, Category, Transaction

R = TypeVar("R", Transaction, Budget, Category)


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO timestamp into a naive datetime.

    Offsets (including a trailing "Z") are converted to UTC and dropped so
    that stored timestamps always compare with each other.
    """
    ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def transaction_from_dict(d: dict) -> Transaction:
    return Transaction(
        id=d["id"],
        amount=float(d["amount"]),
        date=date.fromisoformat(d["date"]),
        description=d.get("description", ""),
        kind=d["kind"],
        category_id=d["category_id"],
        created_at=parse_timestamp(d["created_at"]),
    )


def transaction_to_dict(t: Transaction) -> dict:
    d = asdict(t)
    d["date"] = t.date.isoformat()
    d["created_at"] = t.created_at.isoformat()
    return d


def category_from_dict(d: dict) -> Category:
    return Category(**d)


def category_to_dict(c: Category) -> dict:
    return asdict(c)


def budget_from_dict(d: dict) -> Budget:
    return Budget(
        id=d["id"],
        category_id=d["category_id"],
        amount=float(d["amount"]),
        month=d["month"],
        created_at=parse_timestamp(d["created_at"]),
    )


def budget_to_dict(b: Budget) -> dict:
    d = asdict(b)
    d["created_at"] = b.created_at.isoformat()
    return d


def prepend(records: Tuple[R, ...], r: R) -> Tuple[R, ...]:
    return (r,) + records


def append(records: Tuple[R, ...], r: R) -> Tuple[R, ...]:
    return records + (r,)


def find_by_id(records: Iterable[R], rid: str) -> Optional[R]:
    return next((r for r in records if r.id == rid), None)


def replace_by_id(records: Tuple[R, ...], rid: str, **changes) -> Tuple[R, ...]:
    return tuple(replace(r, **changes) if r.id == rid else r for r in records)


def remove_by_id(records: Tuple[R, ...], rid: str) -> Tuple[R, ...]:
    return tuple(r for r in records if r.id != rid)


def total_amount(trans: Iterable[Transaction]) -> float:
    return reduce(lambda acc, t: acc + t.amount, trans, 0.0)
