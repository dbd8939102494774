"""Unit tests for calendar month arithmetic"""

from datetime import date
from autosave_ledger.utils.date_utils import add_months


def test_add_months_keeps_day():
    assert add_months(date(2024, 1, 15), 2) == date(2024, 3, 15)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 12, 31), 2) == date(2024, 2, 29)


def test_add_months_crosses_year():
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
