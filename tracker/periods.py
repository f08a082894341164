from datetime import date
from functools import lru_cache

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_key(d: date) -> str:
    """Return the "YYYY-MM" key budgets are stored under."""
    return d.strftime("%Y-%m")


def month_label(d: date) -> str:
    """Return the chart label for a month, e.g. "Jan 2024", whatever the locale."""
    return f"{MONTH_ABBR[d.month - 1]} {d.year}"


def same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month


@lru_cache(maxsize=256)
def parse_month(month: str) -> date:
    """Parse a "YYYY-MM" string into the first day of that month.

    Raises ValueError for anything else, including out-of-range months.
    """
    parts = month.split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Month must look like YYYY-MM, got {month!r}")
    return date(int(parts[0]), int(parts[1]), 1)


def is_month(month: str) -> bool:
    try:
        parse_month(month)
    except ValueError:
        return False
    return True
