import locale
from datetime import date

import pytest

from tracker.periods import MONTH_ABBR, is_month, month_key, month_label, month_start, parse_month, same_month


def test_month_helpers():
    d = date(2024, 1, 31)
    assert month_start(d) == date(2024, 1, 1)
    assert month_key(d) == "2024-01"
    assert month_label(d) == "Jan 2024"


def test_month_labels_for_every_month():
    labels = [month_label(date(2023, m, 1)) for m in range(1, 13)]
    assert labels[4] == "May 2023"
    assert labels[11] == "Dec 2023"
    assert [label.split()[0] for label in labels] == list(MONTH_ABBR)


def test_month_label_ignores_locale():
    saved = locale.setlocale(locale.LC_TIME)
    try:
        locale.setlocale(locale.LC_TIME, "de_DE.UTF-8")
    except locale.Error:
        pytest.skip("de_DE locale not installed")
    try:
        assert month_label(date(2024, 3, 1)) == "Mar 2024"
        assert month_label(date(2024, 10, 1)) == "Oct 2024"
    finally:
        locale.setlocale(locale.LC_TIME, saved)


def test_same_month_checks_year_too():
    assert same_month(date(2024, 3, 1), date(2024, 3, 31))
    assert not same_month(date(2024, 3, 1), date(2023, 3, 1))
    assert not same_month(date(2024, 3, 31), date(2024, 4, 1))


def test_parse_month():
    assert parse_month("2024-02") == date(2024, 2, 1)
    for bad in ("2024-13", "2024-2", "24-02", "2024/02", "", "2024-02-01"):
        with pytest.raises(ValueError):
            parse_month(bad)


def test_is_month():
    assert is_month("1999-12")
    assert not is_month("1999-00")
