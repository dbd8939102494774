"""Unit tests for emergency withdrawal arithmetic"""

from datetime import date
from autosave_ledger.domain.models import Deposit, COMPLETED, FAILED
from autosave_ledger.domain.withdrawal import count_deposits_to_close, lost_interest, select_deposits


def test_lost_interest_is_one_and_a_half_percent():
    assert lost_interest(20000, 0.015) == 300


def test_lost_interest_rounds_half_up():
    assert lost_interest(100, 0.015) == 2  # 1.5 -> 2
    assert lost_interest(33, 0.015) == 0  # 0.495 -> 0
    assert lost_interest(0, 0.015) == 0


def test_count_deposits_even_allocation():
    """50000 over 4 deposits is 12500 each; 20000 needs two of them"""
    assert count_deposits_to_close(20000, 50000, 4) == 2


def test_count_deposits_exact_multiple():
    assert count_deposits_to_close(25000, 50000, 4) == 2
    assert count_deposits_to_close(25001, 50000, 4) == 3


def test_count_deposits_never_exceeds_available():
    assert count_deposits_to_close(50000, 50000, 4) == 4
    assert count_deposits_to_close(90000, 50000, 4) == 4


def test_count_deposits_no_deposits_is_one_virtual_deposit():
    assert count_deposits_to_close(10, 50000, 0) == 1


def test_count_deposits_empty_goal():
    assert count_deposits_to_close(100, 0, 3) == 0
    assert count_deposits_to_close(0, 50000, 3) == 0


def test_select_deposits_takes_oldest_completed():
    deposits = [
        Deposit(id=1, goal_id=1, amount_cents=10000, date=date(2024, 1, 1), status=COMPLETED),
        Deposit(id=2, goal_id=1, amount_cents=10000, date=date(2024, 2, 1), status=FAILED),
        Deposit(id=3, goal_id=1, amount_cents=10000, date=date(2024, 3, 1), status=COMPLETED),
        Deposit(id=4, goal_id=1, amount_cents=10000, date=date(2024, 4, 1), status=COMPLETED),
    ]
    selected = select_deposits(deposits, 15000, 30000)
    assert [d.id for d in selected] == [1, 3]
