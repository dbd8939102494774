"""Ledger facade - the operations the presentation layer calls"""

from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from autosave_ledger.config import Settings, settings as default_settings
from autosave_ledger.domain.capacity import estimate_savings_capacity, summarize_cash_flow
from autosave_ledger.domain.models import (
    Account,
    CashFlowSummary,
    EmergencyWithdrawPlan,
    Goal,
    GoalProjection,
    Loan,
    Operation,
    Transaction,
    WithdrawalResult,
)
from autosave_ledger.domain.repositories import LedgerStore
from autosave_ledger.services.accounts import AccountService
from autosave_ledger.services.goals import GoalService
from autosave_ledger.services.loans import LoanService
from autosave_ledger.services.locking import LockRegistry
from autosave_ledger.services.operations import OperationLog
from autosave_ledger.services.withdrawals import EmergencyWithdrawalService, PlanRegistry


class Ledger:
    """
    One user's ledger over an injected store.

    The plan registry and lock registry outlive a single request, so the
    HTTP layer shares one of each across every Ledger it builds.
    """

    def __init__(
        self,
        store: LedgerStore,
        plans: Optional[PlanRegistry] = None,
        locks: Optional[LockRegistry] = None,
        config: Optional[Settings] = None,
        home_account_id: Optional[int] = None,
        withdrawal_goal_id: Optional[int] = None,
        clock: Callable[[], date] = date.today,
    ):
        config = config or default_settings
        self.store = store
        self.plans = plans or PlanRegistry(ttl_seconds=config.plan_ttl_seconds)
        self.locks = locks or LockRegistry(timeout=config.lock_timeout_seconds)

        self.operations = OperationLog(store)
        self.accounts = AccountService(store)
        self.goals = GoalService(store, self.operations, self.locks, clock=clock)
        self.loans = LoanService(store, self.operations, self.locks, clock=clock)
        self.withdrawals = EmergencyWithdrawalService(
            store,
            self.operations,
            self.locks,
            self.plans,
            home_account_id=home_account_id if home_account_id is not None else config.home_account_id,
            source_goal_id=withdrawal_goal_id if withdrawal_goal_id is not None else config.withdrawal_goal_id,
            penalty_rate=config.emergency_penalty_rate,
            delay_months=config.withdrawal_delay_months,
            clock=clock,
        )

    # Accounts
    def list_accounts(self) -> List[Account]:
        return self.accounts.list_accounts()

    def get_account_transactions(self, account_id: int) -> List[Transaction]:
        return self.accounts.get_account_transactions(account_id)

    def import_accounts(self, accounts: Iterable[Account]) -> List[Account]:
        return self.accounts.import_accounts(accounts)

    # Goals
    def list_goals(self) -> List[Goal]:
        return self.goals.list_goals()

    def create_goal(self, name: str, target_cents: int, monthly_cents: int, next_deposit: date, bank_id: str) -> Goal:
        return self.goals.create_goal(name, target_cents, monthly_cents, next_deposit, bank_id)

    def update_goal(self, goal_id: int, changes: Dict[str, Any]) -> Goal:
        return self.goals.update_goal(goal_id, changes)

    def delete_goal(self, goal_id: int) -> None:
        self.goals.delete_goal(goal_id)

    def move_goal(self, goal_id: int, direction: str) -> List[Goal]:
        return self.goals.move_goal(goal_id, direction)

    def reorder_goals(self, ordered_ids: Sequence[int]) -> List[Goal]:
        return self.goals.reorder_goals(ordered_ids)

    def deposit_to_goal(self, goal_id: int, account_id: int, amount_cents: int) -> Operation:
        return self.goals.deposit_to_goal(goal_id, account_id, amount_cents)

    def run_scheduled_deposits(self, today: Optional[date] = None) -> List[Operation]:
        return self.goals.run_scheduled_deposits(today)

    def project_goal(self, goal_id: int) -> GoalProjection:
        return self.goals.project_goal(goal_id)

    # Loans
    def list_loans(self) -> List[Loan]:
        return self.loans.list_loans()

    def create_loan(
        self,
        name: str,
        debt_cents: int,
        rate: float,
        monthly_payment_cents: int,
        next_payment: date,
        bank_id: str,
        auto_payment: bool = False,
    ) -> Loan:
        return self.loans.create_loan(name, debt_cents, rate, monthly_payment_cents, next_payment, bank_id, auto_payment)

    def update_loan(self, loan_id: int, changes: Dict[str, Any]) -> Loan:
        return self.loans.update_loan(loan_id, changes)

    def delete_loan(self, loan_id: int) -> None:
        self.loans.delete_loan(loan_id)

    def pay_loan(self, loan_id: int, account_id: int, amount_cents: Optional[int] = None) -> Operation:
        return self.loans.pay_loan(loan_id, account_id, amount_cents)

    def run_auto_payments(self, today: Optional[date] = None) -> List[Operation]:
        return self.loans.run_auto_payments(today)

    # Operations
    def list_operations(self) -> List[Operation]:
        return self.operations.list_operations()

    # Emergency withdrawal
    def plan_emergency_withdrawal(self, amount_cents: int) -> EmergencyWithdrawPlan:
        return self.withdrawals.plan(amount_cents)

    def confirm_emergency_withdrawal(self, plan: EmergencyWithdrawPlan) -> WithdrawalResult:
        return self.withdrawals.confirm(plan)

    # Analysis
    def estimate_savings_capacity(self, avg_salary_cents: int, avg_expenses_cents: int) -> int:
        return estimate_savings_capacity(avg_salary_cents, avg_expenses_cents)

    def summarize_cash_flow(self, account_id: Optional[int] = None, period_months: int = 3) -> CashFlowSummary:
        """Cash flow over one account, or over every account when account_id is None"""
        if account_id is not None:
            transactions = self.accounts.get_account_transactions(account_id)
        else:
            transactions = [t for a in self.accounts.list_accounts() for t in a.transactions]
        return summarize_cash_flow(transactions, period_months)
