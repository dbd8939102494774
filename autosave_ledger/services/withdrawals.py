"""Emergency withdrawal - plan, review, then confirm a return of goal money to the home account"""

import logging
import threading
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from autosave_ledger.domain.exceptions import (
    AccountNotFoundError,
    GoalNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    StalePlanError,
)
from autosave_ledger.domain.models import (
    EmergencyWithdrawPlan,
    WithdrawalResult,
    COMPLETED,
    INCOME,
    OPERATION_EMERGENCY_WITHDRAW,
)
from autosave_ledger.domain.repositories import LedgerStore
from autosave_ledger.domain.withdrawal import count_deposits_to_close, lost_interest, plan_terms, select_deposits
from autosave_ledger.infrastructure.observability.metrics import withdrawal_plans_counter
from autosave_ledger.services.locking import LockRegistry
from autosave_ledger.services.operations import OperationLog
from autosave_ledger.utils.date_utils import add_months


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlanRegistry:
    """
    Server-side holder of issued withdrawal plans.

    A plan is redeemable once: take() removes it, so a second confirm of the
    same token finds nothing. Expired plans are dropped whenever a new one is
    registered.
    """

    def __init__(self, ttl_seconds: int = 900, now: Callable[[], datetime] = _utcnow):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.now = now
        self._lock = threading.Lock()
        self._plans: Dict[str, EmergencyWithdrawPlan] = {}

    def expiry(self) -> datetime:
        return self.now() + self.ttl

    def register(self, plan: EmergencyWithdrawPlan) -> None:
        with self._lock:
            now = self.now()
            for token in [t for t, p in self._plans.items() if p.expires_at <= now]:
                del self._plans[token]
            self._plans[plan.token] = plan

    def take(self, token: str) -> Optional[EmergencyWithdrawPlan]:
        with self._lock:
            return self._plans.pop(token, None)

    def __len__(self) -> int:
        return len(self._plans)


class EmergencyWithdrawalService:
    def __init__(
        self,
        store: LedgerStore,
        operations: OperationLog,
        locks: LockRegistry,
        plans: PlanRegistry,
        home_account_id: Optional[int],
        source_goal_id: Optional[int],
        penalty_rate: float = 0.015,
        delay_months: int = 2,
        clock: Callable[[], date] = date.today,
    ):
        self.store = store
        self.operations = operations
        self.locks = locks
        self.plans = plans
        self.home_account_id = home_account_id
        self.source_goal_id = source_goal_id
        self.penalty_rate = penalty_rate
        self.delay_months = delay_months
        self.clock = clock

    def plan(self, amount_cents: int) -> EmergencyWithdrawPlan:
        """
        Work out what withdrawing amount_cents from the source goal would cost.

        Reads only; the returned plan carries a one-time token that confirm()
        redeems. Planning the same amount twice yields equivalent plans.
        """
        if amount_cents <= 0:
            raise InvalidAmountError("Withdrawal amount must be positive")

        goal = None
        if self.source_goal_id is not None:
            goal = self.store.goals.get(self.source_goal_id)
        if goal is None:
            raise GoalNotFoundError("Withdrawal source goal not found")

        if amount_cents > goal.current_cents:
            raise InsufficientFundsError(amount_cents, goal.current_cents)

        closing = select_deposits(goal.deposits, amount_cents, goal.current_cents)
        # With no completed deposits the balance counts as one virtual deposit
        deposits_to_close = len(closing) or count_deposits_to_close(amount_cents, goal.current_cents, 0)

        plan = EmergencyWithdrawPlan(
            token=uuid.uuid4().hex,
            amount_cents=amount_cents,
            goal_id=goal.id,
            goal_name=goal.name,
            goal_terms=plan_terms(goal),
            deposits_to_close=deposits_to_close,
            deposit_ids=[d.id for d in closing],
            lost_interest_cents=lost_interest(amount_cents, self.penalty_rate),
            affected_goals=[goal.id],
            remaining_cents=goal.current_cents - amount_cents,
            next_deposit_after=add_months(goal.next_deposit, self.delay_months),
            expires_at=self.plans.expiry(),
        )
        self.plans.register(plan)
        withdrawal_plans_counter.inc()

        logging.info(
            "Withdrawal planned",
            extra={
                "step": "withdrawal_planned",
                "goal_id": goal.id,
                "amount_cents": amount_cents,
                "lost_interest_cents": plan.lost_interest_cents,
            },
        )
        return plan

    def confirm(self, plan: EmergencyWithdrawPlan) -> WithdrawalResult:
        return self.confirm_token(plan.token)

    def confirm_token(self, token: str) -> WithdrawalResult:
        """
        Apply a previously issued plan.

        Re-checks the goal under the goal+account lock; the goal debit, the
        schedule shift, the home-account credit and the operation entry land
        in one unit of work. On any failure, including a lock timeout, none
        of them are applied, a failed operation is appended, and the error
        propagates.
        """
        plan = self.plans.take(token)
        if plan is None:
            raise StalePlanError("Withdrawal plan is unknown or was already used")

        today = self.clock()
        try:
            with self.locks.hold(("goal", plan.goal_id), ("account", self.home_account_id)):
                if plan.expires_at <= self.plans.now():
                    raise StalePlanError("Withdrawal plan has expired")

                with self.store.unit_of_work():
                    goal = self.store.goals.get(plan.goal_id, for_update=True)
                    if goal is None:
                        raise GoalNotFoundError(f"Goal {plan.goal_id} not found")
                    if plan.amount_cents > goal.current_cents:
                        raise InsufficientFundsError(plan.amount_cents, goal.current_cents)
                    # Balance moves are covered by the check above
                    if plan_terms(goal) != plan.goal_terms:
                        raise StalePlanError("Goal was edited since the plan was made")

                    account = None
                    if self.home_account_id is not None:
                        account = self.store.accounts.get(self.home_account_id, for_update=True)
                    if account is None:
                        raise AccountNotFoundError("Home account not found")

                    goal.current_cents = max(0, goal.current_cents - plan.amount_cents)
                    goal.next_deposit = add_months(goal.next_deposit, self.delay_months)
                    goal = self.store.goals.save(goal)

                    transaction = self.store.accounts.apply_transaction(
                        account.id,
                        on=today,
                        description=f'Emergency withdrawal from goal "{goal.name}"',
                        amount_cents=plan.amount_cents,
                        type=INCOME,
                    )
                    operation = self.operations.record(
                        today,
                        OPERATION_EMERGENCY_WITHDRAW,
                        plan.amount_cents,
                        COMPLETED,
                        goal=goal.name,
                    )
                    account = self.store.accounts.get(account.id)
        except Exception as e:
            self.operations.record_failure(
                today, OPERATION_EMERGENCY_WITHDRAW, plan.amount_cents, e, goal=plan.goal_name
            )
            raise

        self.operations.publish(operation)
        return WithdrawalResult(goal=goal, account=account, transaction=transaction, operation=operation)
