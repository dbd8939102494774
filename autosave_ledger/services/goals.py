"""Goal service - creation, ordering and funding of savings goals"""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from autosave_ledger.domain import ordering
from autosave_ledger.domain.exceptions import (
    AccountNotFoundError,
    DomainException,
    GoalNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidOrderingError,
    ValidationError,
)
from autosave_ledger.domain.models import (
    Goal,
    GoalProjection,
    Operation,
    COMPLETED,
    EXPENSE,
    FAILED,
    OPERATION_DEPOSIT,
)
from autosave_ledger.domain.projections import project_goal
from autosave_ledger.domain.repositories import LedgerStore
from autosave_ledger.services.locking import LockRegistry
from autosave_ledger.services.operations import OperationLog
from autosave_ledger.utils.date_utils import add_months

# Held by every operation that rewrites goal orders
ORDERING_KEY = ("goals", "ordering")

UPDATABLE_FIELDS = {"name", "target_cents", "monthly_cents", "next_deposit", "bank_id"}


def _ensure_dense(goals: List[Goal]) -> None:
    """Orders must stay exactly 1..N; anything else rolls the unit of work back"""
    if not ordering.is_dense(goals):
        raise InvalidOrderingError(f"Goal orders are not contiguous: {sorted(g.order for g in goals)}")


def _validate_goal_fields(name: str, target_cents: int, monthly_cents: int) -> None:
    if not name or not name.strip():
        raise ValidationError("Goal name must not be empty")
    if target_cents <= 0:
        raise ValidationError("Goal target must be positive")
    if monthly_cents < 0:
        raise ValidationError("Monthly amount must not be negative")


class GoalService:
    def __init__(
        self,
        store: LedgerStore,
        operations: OperationLog,
        locks: LockRegistry,
        clock: Callable[[], date] = date.today,
    ):
        self.store = store
        self.operations = operations
        self.locks = locks
        self.clock = clock

    def list_goals(self) -> List[Goal]:
        """Goals sorted by order ascending"""
        return self.store.goals.list()

    def get_goal(self, goal_id: int) -> Goal:
        goal = self.store.goals.get(goal_id)
        if goal is None:
            raise GoalNotFoundError(f"Goal {goal_id} not found")
        return goal

    def create_goal(
        self,
        name: str,
        target_cents: int,
        monthly_cents: int,
        next_deposit: date,
        bank_id: str,
    ) -> Goal:
        """Append a goal at the end of the queue; it always starts empty"""
        _validate_goal_fields(name, target_cents, monthly_cents)

        with self.locks.hold(ORDERING_KEY):
            with self.store.unit_of_work():
                existing = self.store.goals.list(for_update=True)
                goal = self.store.goals.create(
                    Goal(
                        id=0,
                        name=name.strip(),
                        target_cents=target_cents,
                        current_cents=0,
                        monthly_cents=monthly_cents,
                        next_deposit=next_deposit,
                        bank_id=bank_id,
                        order=ordering.next_order(existing),
                    )
                )
                _ensure_dense(existing + [goal])

        logging.info("Goal created", extra={"goal_id": goal.id, "order": goal.order})
        return goal

    def update_goal(self, goal_id: int, changes: Dict[str, Any]) -> Goal:
        """Apply only the supplied fields; balance and order have their own operations"""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {sorted(unknown)}")
        cleared = sorted(name for name, value in changes.items() if value is None)
        if cleared:
            raise ValidationError(f"Fields cannot be null: {cleared}")

        with self.locks.hold(("goal", goal_id)):
            with self.store.unit_of_work():
                goal = self.store.goals.get(goal_id, for_update=True)
                if goal is None:
                    raise GoalNotFoundError(f"Goal {goal_id} not found")
                for field_name, value in changes.items():
                    setattr(goal, field_name, value)
                _validate_goal_fields(goal.name, goal.target_cents, goal.monthly_cents)
                goal = self.store.goals.save(goal)

        return goal

    def delete_goal(self, goal_id: int) -> None:
        """Remove a goal and close the gap it leaves in the ordering"""
        with self.locks.hold(ORDERING_KEY, ("goal", goal_id)):
            with self.store.unit_of_work():
                goals = self.store.goals.list(for_update=True)
                deleted = next((g for g in goals if g.id == goal_id), None)
                if deleted is None:
                    raise GoalNotFoundError(f"Goal {goal_id} not found")

                self.store.goals.delete(goal_id)
                remaining = [g for g in goals if g.id != goal_id]
                for goal in ordering.compact_after_delete(remaining, deleted.order):
                    self.store.goals.save(goal)
                _ensure_dense(remaining)

        logging.info("Goal deleted", extra={"goal_id": goal_id, "order": deleted.order})

    def move_goal(self, goal_id: int, direction: str) -> List[Goal]:
        """Swap with the neighbour above or below; a no-op at the edges"""
        with self.locks.hold(ORDERING_KEY):
            with self.store.unit_of_work():
                goals = self.store.goals.list(for_update=True)
                for goal in ordering.move(goals, goal_id, direction):
                    self.store.goals.save(goal)
                _ensure_dense(goals)

        return self.store.goals.list()

    def reorder_goals(self, ordered_ids: Sequence[int]) -> List[Goal]:
        with self.locks.hold(ORDERING_KEY):
            with self.store.unit_of_work():
                goals = self.store.goals.list(for_update=True)
                for goal in ordering.reorder(goals, list(ordered_ids)):
                    self.store.goals.save(goal)
                _ensure_dense(goals)

        logging.info("Goals reordered", extra={"goal_ids": list(ordered_ids)})
        return self.store.goals.list()

    def project_goal(self, goal_id: int) -> GoalProjection:
        return project_goal(self.get_goal(goal_id))

    def deposit_to_goal(self, goal_id: int, account_id: int, amount_cents: int) -> Operation:
        """
        Move money from an account into a goal.

        The account debit, goal credit, deposit entry and operation entry are
        written in one unit of work. If anything fails after both entities
        were found, nothing is applied and a failed deposit plus a failed
        operation are recorded instead.
        """
        return self._deposit(goal_id, account_id, amount_cents)

    def _deposit(
        self,
        goal_id: int,
        account_id: int,
        amount_cents: int,
        advance_schedule: bool = False,
        strict: bool = True,
    ) -> Operation:
        if amount_cents <= 0:
            raise InvalidAmountError("Deposit amount must be positive")

        today = self.clock()
        with self.locks.hold(("goal", goal_id), ("account", account_id)):
            goal = self.get_goal(goal_id)
            if self.store.accounts.get(account_id) is None:
                raise AccountNotFoundError(f"Account {account_id} not found")

            try:
                with self.store.unit_of_work():
                    goal = self.store.goals.get(goal_id, for_update=True)
                    account = self.store.accounts.get(account_id, for_update=True)
                    if account.balance_cents < amount_cents:
                        raise InsufficientFundsError(amount_cents, account.balance_cents)

                    self.store.accounts.apply_transaction(
                        account.id,
                        on=today,
                        description=f'Deposit to goal "{goal.name}"',
                        amount_cents=-amount_cents,
                        type=EXPENSE,
                        category="Savings",
                    )
                    goal.current_cents += amount_cents
                    if advance_schedule:
                        goal.next_deposit = add_months(goal.next_deposit, 1)
                    self.store.goals.save(goal)
                    self.store.goals.add_deposit(goal.id, amount_cents, today, COMPLETED)
                    operation = self.operations.record(
                        today, OPERATION_DEPOSIT, amount_cents, COMPLETED, goal=goal.name
                    )
            except Exception as e:
                with self.store.unit_of_work():
                    self.store.goals.add_deposit(goal_id, amount_cents, today, FAILED)
                    operation = self.operations.record(
                        today, OPERATION_DEPOSIT, amount_cents, FAILED, goal=goal.name, error=str(e)
                    )
                self.operations.publish(operation)
                if strict or not isinstance(e, DomainException):
                    raise
                return operation

        self.operations.publish(operation)
        return operation

    def run_scheduled_deposits(self, today: Optional[date] = None) -> List[Operation]:
        """
        Make every monthly deposit that has come due.

        Each goal is funded from the first account held at the goal's bank.
        A failed deposit is recorded and the run moves on to the next goal.
        """
        today = today or self.clock()
        produced = []
        for goal in self.store.goals.list():
            remaining = goal.target_cents - goal.current_cents
            if goal.monthly_cents <= 0 or remaining <= 0 or goal.next_deposit > today:
                continue

            account = self.store.accounts.first_for_bank(goal.bank_id)
            if account is None:
                logging.warning(
                    "No funding account for goal",
                    extra={"goal_id": goal.id, "bank_id": goal.bank_id},
                )
                continue

            amount = min(goal.monthly_cents, remaining)
            produced.append(
                self._deposit(goal.id, account.id, amount, advance_schedule=True, strict=False)
            )

        return produced
