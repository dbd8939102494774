"""Ledger behaviour over the SQLAlchemy store"""

import pytest
from datetime import date
from sqlalchemy.orm import Session
from autosave_ledger.domain.exceptions import InsufficientFundsError, StalePlanError
from autosave_ledger.domain.models import Account, COMPLETED, FAILED
from autosave_ledger.domain.ordering import is_dense
from autosave_ledger.infrastructure.database.models import GoalRecord
from autosave_ledger.infrastructure.database.repositories import SqlLedgerStore
from autosave_ledger.services.ledger import Ledger

pytestmark = pytest.mark.integration


@pytest.fixture
def sql_ledger(sql_store: SqlLedgerStore) -> Ledger:
    return Ledger(sql_store, home_account_id=1, withdrawal_goal_id=1, clock=lambda: date(2024, 3, 15))


def test_seeded_state(sql_ledger: Ledger):
    goal = sql_ledger.list_goals()[0]

    assert goal.name == "Машина"
    assert goal.current_cents == 50000
    assert [d.amount_cents for d in goal.deposits] == [25000, 25000]
    assert [t.description for t in sql_ledger.get_account_transactions(1)] == ["Groceries", "Salary"]


def test_version_bumps_on_update(sql_ledger: Ledger):
    before = sql_ledger.list_goals()[0]
    updated = sql_ledger.update_goal(1, {"monthly_cents": 30000})
    assert updated.version == before.version + 1


def test_goal_order_persists_dense(sql_ledger: Ledger, db: Session):
    second = sql_ledger.create_goal("Отпуск", 100000, 5000, date(2024, 4, 1), "sber")
    third = sql_ledger.create_goal("Ремонт", 100000, 5000, date(2024, 4, 1), "sber")

    sql_ledger.move_goal(third.id, "up")
    sql_ledger.delete_goal(1)

    goals = sql_ledger.list_goals()
    assert [g.id for g in goals] == [third.id, second.id]
    assert is_dense(goals)
    assert db.query(GoalRecord).count() == 2


def test_failed_deposit_rolls_back(sql_ledger: Ledger, sql_store: SqlLedgerStore):
    with pytest.raises(InsufficientFundsError):
        sql_ledger.deposit_to_goal(1, 2, 30000)

    goal = sql_store.goals.get(1)
    assert goal.current_cents == 50000
    assert goal.deposits[-1].status == FAILED
    assert sql_store.accounts.get(2).balance_cents == 5000
    assert len(sql_store.accounts.list_transactions(2)) == 0
    assert sql_ledger.list_operations()[0].status == FAILED


def test_withdrawal_round_trip(sql_ledger: Ledger, sql_store: SqlLedgerStore):
    plan = sql_ledger.plan_emergency_withdrawal(20000)
    result = sql_ledger.confirm_emergency_withdrawal(plan)

    assert result.goal.current_cents == 30000
    assert result.goal.next_deposit == date(2024, 6, 1)
    assert sql_store.accounts.get(1).balance_cents == 170000

    operations = sql_ledger.list_operations()
    assert [(o.type, o.status) for o in operations] == [("emergency_withdraw", COMPLETED)]


def test_stale_plan_after_goal_edit(sql_ledger: Ledger, sql_store: SqlLedgerStore):
    plan = sql_ledger.plan_emergency_withdrawal(20000)
    sql_ledger.update_goal(1, {"target_cents": 600000})

    with pytest.raises(StalePlanError):
        sql_ledger.confirm_emergency_withdrawal(plan)

    assert sql_store.goals.get(1).current_cents == 50000
    assert sql_store.accounts.get(1).balance_cents == 150000
    assert sql_ledger.list_operations()[0].status == FAILED


def test_plan_survives_deposit(sql_ledger: Ledger, sql_store: SqlLedgerStore):
    plan = sql_ledger.plan_emergency_withdrawal(20000)
    sql_ledger.deposit_to_goal(1, 1, 10000)

    result = sql_ledger.confirm_emergency_withdrawal(plan)

    assert result.goal.current_cents == 40000
    assert sql_store.accounts.get(1).balance_cents == 160000


def test_import_assigns_transaction_ids(sql_ledger: Ledger):
    imported = sql_ledger.import_accounts(
        [
            Account(id=1, bank_id="sber", number="x", balance_cents=0),
            Account(id=9, bank_id="vtb", number="40817810000000000009", balance_cents=1000),
        ]
    )
    assert [a.id for a in imported] == [9]
    assert sql_ledger.list_accounts()[0].balance_cents == 150000


def test_loan_payment(sql_ledger: Ledger, sql_store: SqlLedgerStore):
    loan = sql_ledger.create_loan("Ипотека", 100000, 0.08, 40000, date(2024, 3, 1), "sber", True)
    operations = sql_ledger.run_auto_payments(date(2024, 3, 15))

    assert [o.status for o in operations] == [COMPLETED]
    stored = sql_store.loans.get(loan.id)
    assert stored.debt_cents == 60000
    assert stored.next_payment == date(2024, 4, 1)
    assert len(stored.payment_history) == 1
