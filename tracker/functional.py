from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from tracker.domain import Budget, Category
from tracker.periods import is_month

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Right has no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def compose(*funcs):
    """Return the right-to-left composition of funcs.

    compose(f, g, h)(x) == f(g(h(x)))
    """
    def _composed(x):
        res = x
        for f in reversed(funcs):
            res = f(res)
        return res
    return _composed


def pipe(x, *funcs):
    """pipe(x, f, g, h) == h(g(f(x)))"""
    res = x
    for f in funcs:
        res = f(res)
    return res


# --- category lookup

def safe_category(cats: Iterable[Category], cat_id: str) -> Maybe[Category]:
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def categories_of_kind(cats: Iterable[Category], kind: str) -> tuple[Category, ...]:
    return tuple(c for c in cats if c.kind == kind)


# --- form input validation

def _invalid(field: str, message: str) -> Left:
    return Left({"error": "invalid_input", "field": field, "message": message})


def _parse_amount(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value:  # NaN
        return None
    return value


def _check_amount(data: dict) -> Either[dict, dict]:
    value = _parse_amount(data.get("amount"))
    if value is None or value <= 0:
        return _invalid("amount", "Please enter a valid amount greater than 0")
    return Right({**data, "amount": value})


def _check_date(data: dict) -> Either[dict, dict]:
    raw = data.get("date")
    if isinstance(raw, date):
        return Right(data)
    if not raw:
        return _invalid("date", "Please select a date")
    try:
        parsed = date.fromisoformat(str(raw))
    except ValueError:
        return _invalid("date", f"Not a valid date: {raw}")
    return Right({**data, "date": parsed})


def _check_description(data: dict) -> Either[dict, dict]:
    text = (data.get("description") or "").strip()
    if not text:
        return _invalid("description", "Please enter a description")
    return Right({**data, "description": text})


def _check_category(data: dict) -> Either[dict, dict]:
    if not data.get("category_id"):
        return _invalid("category_id", "Please select a category")
    return Right(data)


def validate_transaction_input(
    amount: Any, on: Any, description: Optional[str], category_id: Optional[str]
) -> Either[dict, dict]:
    """Check raw transaction form values.

    Returns Right with the cleaned values (amount as float, date as date,
    description stripped) or Left describing the first problem found.
    """
    data = {
        "amount": amount,
        "date": on,
        "description": description,
        "category_id": category_id,
    }
    return (
        Right(data)
        .bind(_check_amount)
        .bind(_check_date)
        .bind(_check_description)
        .bind(_check_category)
    )


def validate_budget_input(
    category_id: Optional[str],
    amount: Any,
    month: Optional[str],
    existing: Optional[Budget] = None,
    editing_id: Optional[str] = None,
) -> Either[dict, dict]:
    """Check raw budget form values.

    existing is the budget already stored for (category_id, month), if any;
    it is a duplicate unless it is the budget being edited (editing_id).
    """
    if not category_id:
        return _invalid("category_id", "Please select a category")

    value = _parse_amount(amount)
    if value is None or value <= 0:
        return _invalid("amount", "Please enter a valid amount greater than 0")

    if not month:
        return _invalid("month", "Please select a month")
    if not is_month(month):
        return _invalid("month", f"Month must look like YYYY-MM, got {month}")

    if existing is not None and existing.id != editing_id:
        return _invalid("category_id", "Budget already exists for this category and month")

    return Right({"category_id": category_id, "amount": value, "month": month})
