"""Emergency withdrawal plan/confirm over the in-memory store"""

import threading

import pytest
from datetime import date
from autosave_ledger.domain.exceptions import (
    AccountNotFoundError,
    ConflictError,
    GoalNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    StalePlanError,
)
from autosave_ledger.domain.models import Goal, COMPLETED, FAILED, INCOME, OPERATION_EMERGENCY_WITHDRAW
from autosave_ledger.infrastructure.memory.store import InMemoryLedgerStore
from autosave_ledger.services.ledger import Ledger


def snapshot(store: InMemoryLedgerStore):
    return store.accounts.list(), store.goals.list(), store.operations.list()


def test_plan_computes_penalty_and_schedule(ledger: Ledger, car_goal):
    plan = ledger.plan_emergency_withdrawal(20000)

    assert plan.amount_cents == 20000
    assert plan.lost_interest_cents == 300
    assert plan.affected_goals == [car_goal.id]
    assert plan.remaining_cents == 30000
    assert plan.next_deposit_after == date(2024, 6, 1)
    # 50000 across two deposits: 20000 fits inside the oldest one
    assert plan.deposits_to_close == 1
    assert plan.deposit_ids == [car_goal.deposits[0].id]


def test_plan_does_not_mutate(ledger: Ledger, store):
    before = snapshot(store)
    ledger.plan_emergency_withdrawal(20000)
    ledger.plan_emergency_withdrawal(20000)
    assert snapshot(store) == before


def test_plan_is_repeatable(ledger: Ledger):
    first = ledger.plan_emergency_withdrawal(20000)
    second = ledger.plan_emergency_withdrawal(20000)

    assert first.token != second.token
    assert first.lost_interest_cents == second.lost_interest_cents
    assert first.deposit_ids == second.deposit_ids


def test_plan_exceeding_balance(ledger: Ledger, store):
    before = snapshot(store)
    with pytest.raises(InsufficientFundsError) as exc_info:
        ledger.plan_emergency_withdrawal(100000)

    assert exc_info.value.requested_cents == 100000
    assert exc_info.value.available_cents == 50000
    assert snapshot(store) == before


def test_plan_rejects_non_positive_amount(ledger: Ledger):
    with pytest.raises(InvalidAmountError):
        ledger.plan_emergency_withdrawal(0)


def test_plan_without_source_goal(store, car_goal):
    ledger = Ledger(store, home_account_id=1, clock=lambda: date(2024, 3, 15))
    with pytest.raises(GoalNotFoundError):
        ledger.plan_emergency_withdrawal(1000)


def test_confirm_applies_everything(ledger: Ledger, store, car_goal):
    plan = ledger.plan_emergency_withdrawal(20000)
    result = ledger.confirm_emergency_withdrawal(plan)

    assert result.goal.current_cents == 30000
    assert result.goal.next_deposit == date(2024, 6, 1)
    assert result.account.balance_cents == 170000
    assert result.transaction.amount_cents == 20000
    assert result.transaction.type == INCOME
    assert result.transaction.description == 'Emergency withdrawal from goal "Машина"'
    assert result.account.transactions[0] == result.transaction

    operations = ledger.list_operations()
    assert len(operations) == 1
    assert operations[0].type == OPERATION_EMERGENCY_WITHDRAW
    assert operations[0].status == COMPLETED
    assert operations[0].amount_cents == 20000
    assert operations[0].goal == "Машина"

    assert store.goals.get(car_goal.id).current_cents == 30000
    assert store.accounts.get(1).balance_cents == 170000


def test_confirm_whole_balance(ledger: Ledger, store, car_goal):
    plan = ledger.plan_emergency_withdrawal(50000)
    assert plan.deposits_to_close == 2

    result = ledger.confirm_emergency_withdrawal(plan)
    assert result.goal.current_cents == 0


def test_confirm_twice_is_rejected(ledger: Ledger, store):
    plan = ledger.plan_emergency_withdrawal(20000)
    ledger.confirm_emergency_withdrawal(plan)
    before = snapshot(store)

    with pytest.raises(StalePlanError):
        ledger.confirm_emergency_withdrawal(plan)

    assert snapshot(store) == before


def test_confirm_after_goal_edited(ledger: Ledger, store, car_goal):
    """Renaming or retargeting the goal between plan and confirm makes the plan stale"""
    plan = ledger.plan_emergency_withdrawal(20000)
    ledger.update_goal(car_goal.id, {"name": "Мотоцикл"})

    with pytest.raises(StalePlanError):
        ledger.confirm_emergency_withdrawal(plan)

    goal = store.goals.get(car_goal.id)
    assert goal.current_cents == 50000
    assert goal.next_deposit == date(2024, 4, 1)
    assert store.accounts.get(1).balance_cents == 150000

    failed = ledger.list_operations()[0]
    assert failed.status == FAILED
    assert failed.type == OPERATION_EMERGENCY_WITHDRAW


def test_confirm_after_deposit(ledger: Ledger, store, car_goal):
    """A deposit only raises the balance; the plan still applies"""
    plan = ledger.plan_emergency_withdrawal(20000)
    ledger.deposit_to_goal(car_goal.id, 1, 10000)

    result = ledger.confirm_emergency_withdrawal(plan)

    assert result.goal.current_cents == 40000
    assert result.account.balance_cents == 160000


def test_two_plans_both_confirm_when_funds_suffice(ledger: Ledger, store, car_goal):
    first = ledger.plan_emergency_withdrawal(10000)
    second = ledger.plan_emergency_withdrawal(10000)

    ledger.confirm_emergency_withdrawal(first)
    result = ledger.confirm_emergency_withdrawal(second)

    assert result.goal.current_cents == 30000
    # Each confirm shifts the schedule from where the goal stands
    assert result.goal.next_deposit == date(2024, 8, 1)
    assert store.accounts.get(1).balance_cents == 170000
    assert [o.status for o in ledger.list_operations()] == [COMPLETED, COMPLETED]


def test_reordering_keeps_plan_valid(ledger: Ledger, car_goal):
    other = ledger.create_goal("Отпуск", 100000, 0, date(2024, 4, 1), "sber")
    plan = ledger.plan_emergency_withdrawal(20000)
    ledger.move_goal(other.id, "up")

    result = ledger.confirm_emergency_withdrawal(plan)

    assert result.goal.order == 2
    assert result.goal.current_cents == 30000


def test_confirm_lock_timeout_records_failure(ledger: Ledger, store, car_goal):
    plan = ledger.plan_emergency_withdrawal(20000)

    with ledger.locks.hold(("goal", car_goal.id)):
        with pytest.raises(ConflictError):
            ledger.confirm_emergency_withdrawal(plan)

    assert store.goals.get(car_goal.id).current_cents == 50000
    assert store.accounts.get(1).balance_cents == 150000

    operations = ledger.list_operations()
    assert len(operations) == 1
    assert operations[0].status == FAILED
    assert operations[0].type == OPERATION_EMERGENCY_WITHDRAW
    assert "Timed out" in operations[0].error


def test_confirm_after_balance_dropped(ledger: Ledger, store, car_goal):
    """Two plans against the same money: the second confirm finds too little"""
    first = ledger.plan_emergency_withdrawal(40000)
    second = ledger.plan_emergency_withdrawal(40000)
    ledger.confirm_emergency_withdrawal(first)

    with pytest.raises(InsufficientFundsError):
        ledger.confirm_emergency_withdrawal(second)

    assert store.goals.get(car_goal.id).current_cents == 10000
    assert store.accounts.get(1).balance_cents == 190000
    statuses = [o.status for o in ledger.list_operations()]
    assert statuses == [FAILED, COMPLETED]


def test_confirm_expired_plan(ledger: Ledger, store, plan_clock):
    plan = ledger.plan_emergency_withdrawal(20000)
    plan_clock.advance(901)

    with pytest.raises(StalePlanError):
        ledger.confirm_emergency_withdrawal(plan)

    assert store.accounts.get(1).balance_cents == 150000
    assert ledger.list_operations()[0].status == FAILED


def test_confirm_with_missing_home_account_rolls_back(store, car_goal):
    ledger = Ledger(store, home_account_id=42, withdrawal_goal_id=car_goal.id, clock=lambda: date(2024, 3, 15))
    plan = ledger.plan_emergency_withdrawal(20000)

    with pytest.raises(AccountNotFoundError):
        ledger.confirm_emergency_withdrawal(plan)

    goal = store.goals.get(car_goal.id)
    assert goal.current_cents == 50000
    assert goal.version == car_goal.version
    assert ledger.list_operations()[0].status == FAILED


def test_concurrent_confirms_withdraw_once(ledger: Ledger, store, car_goal):
    """Racing confirms of one plan: exactly one succeeds"""
    plan = ledger.plan_emergency_withdrawal(20000)
    outcomes = []

    def confirm():
        try:
            ledger.confirm_emergency_withdrawal(plan)
            outcomes.append("ok")
        except StalePlanError:
            outcomes.append("stale")

    threads = [threading.Thread(target=confirm) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["ok", "stale", "stale", "stale", "stale"]
    assert store.goals.get(car_goal.id).current_cents == 30000
    assert store.accounts.get(1).balance_cents == 170000


def test_large_withdrawal_from_goal_without_deposits(store, car_goal):
    """A balance with no deposit history counts as one virtual deposit"""
    with store.unit_of_work():
        goal = store.goals.create(
            Goal(
                id=0,
                name="Машина",
                target_cents=10_000_000,
                current_cents=0,
                monthly_cents=500_000,
                next_deposit=date(2024, 4, 1),
                bank_id="sber",
                order=2,
            )
        )
        goal.current_cents = 5_000_000
        store.goals.save(goal)
    ledger = Ledger(store, home_account_id=3, withdrawal_goal_id=goal.id, clock=lambda: date(2024, 3, 15))

    with pytest.raises(InsufficientFundsError):
        ledger.plan_emergency_withdrawal(10_000_000)

    plan = ledger.plan_emergency_withdrawal(2_000_000)
    assert plan.lost_interest_cents == 30_000
    assert plan.deposits_to_close == 1
    assert plan.deposit_ids == []

    result = ledger.confirm_emergency_withdrawal(plan)
    assert result.goal.current_cents == 3_000_000
    assert result.goal.next_deposit == date(2024, 6, 1)
    assert result.account.balance_cents == 2_070_000
