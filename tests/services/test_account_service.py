"""Account reads, snapshot import and cash-flow analysis"""

import pytest
from autosave_ledger.domain.exceptions import AccountNotFoundError
from autosave_ledger.domain.models import Account
from autosave_ledger.services.ledger import Ledger


def test_list_accounts(ledger: Ledger):
    accounts = ledger.list_accounts()
    assert [a.id for a in accounts] == [1, 2, 3]


def test_transactions_newest_first(ledger: Ledger):
    transactions = ledger.get_account_transactions(1)

    assert [t.description for t in transactions] == ["Groceries", "Salary"]
    assert transactions[0].id > transactions[1].id


def test_transactions_of_unknown_account(ledger: Ledger):
    with pytest.raises(AccountNotFoundError):
        ledger.get_account_transactions(99)


def test_import_skips_known_accounts(ledger: Ledger, store):
    imported = ledger.import_accounts(
        [
            Account(id=1, bank_id="sber", number="40817810000000000001", balance_cents=1),
            Account(id=7, bank_id="vtb", number="40817810000000000007", balance_cents=9000),
        ]
    )

    assert [a.id for a in imported] == [7]
    assert store.accounts.get(1).balance_cents == 150000
    assert store.accounts.get(7).balance_cents == 9000


def test_new_account_ids_follow_imported_ones(ledger: Ledger):
    imported = ledger.import_accounts([Account(id=0, bank_id="vtb", number="1", balance_cents=0)])
    assert imported[0].id == 4


def test_capacity(ledger: Ledger):
    assert ledger.estimate_savings_capacity(300000, 250000) == 50000


def test_cash_flow_of_one_account(ledger: Ledger):
    summary = ledger.summarize_cash_flow(account_id=1, period_months=1)

    assert summary.total_income_cents == 300000
    assert summary.total_expenses_cents == 40000
    assert summary.savings_capacity_cents == 260000


def test_cash_flow_over_all_accounts(ledger: Ledger, car_goal):
    ledger.deposit_to_goal(car_goal.id, 3, 10000)
    summary = ledger.summarize_cash_flow(period_months=1)

    assert summary.total_expenses_cents == 50000
