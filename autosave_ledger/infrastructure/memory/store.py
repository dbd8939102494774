"""In-memory ledger store - snapshot/restore units of work behind a reentrant lock"""

import copy
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Dict, Iterator, List, Optional

from autosave_ledger.domain.models import (
    Account,
    Deposit,
    Goal,
    Loan,
    Operation,
    Payment,
    Transaction,
)


class InMemoryLedgerStore:
    """
    Process-local store used by tests and as a fake backend.

    Every read returns a deep copy, so callers must go through save() to
    change anything. A unit of work holds the store lock for its whole
    duration and restores the pre-block state if the block raises.
    Sequences are not restored, so ids are never handed out twice.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._accounts: Dict[int, Account] = {}
        self._goals: Dict[int, Goal] = {}
        self._loans: Dict[int, Loan] = {}
        self._operations: List[Operation] = []
        self._sequences: Dict[str, int] = {
            "account": 0,
            "transaction": 0,
            "goal": 0,
            "deposit": 0,
            "loan": 0,
            "payment": 0,
            "operation": 0,
        }

        self.accounts = InMemoryAccountRepository(self)
        self.goals = InMemoryGoalRepository(self)
        self.loans = InMemoryLoanRepository(self)
        self.operations = InMemoryOperationRepository(self)

    def next_id(self, sequence: str) -> int:
        with self._lock:
            self._sequences[sequence] += 1
            return self._sequences[sequence]

    def bump_sequence(self, sequence: str, seen_id: int) -> None:
        with self._lock:
            self._sequences[sequence] = max(self._sequences[sequence], seen_id)

    @contextmanager
    def unit_of_work(self) -> Iterator["InMemoryLedgerStore"]:
        with self._lock:
            snapshot = copy.deepcopy((self._accounts, self._goals, self._loans, self._operations))
            try:
                yield self
            except Exception:
                self._accounts, self._goals, self._loans, self._operations = snapshot
                raise


class InMemoryAccountRepository:
    def __init__(self, store: InMemoryLedgerStore):
        self._store = store

    def list(self) -> List[Account]:
        with self._store._lock:
            return [copy.deepcopy(a) for _, a in sorted(self._store._accounts.items())]

    def get(self, account_id: int, for_update: bool = False) -> Optional[Account]:
        with self._store._lock:
            account = self._store._accounts.get(account_id)
            return copy.deepcopy(account) if account else None

    def first_for_bank(self, bank_id: str) -> Optional[Account]:
        with self._store._lock:
            for _, account in sorted(self._store._accounts.items()):
                if account.bank_id == bank_id:
                    return copy.deepcopy(account)
            return None

    def add(self, account: Account) -> Account:
        with self._store._lock:
            stored = copy.deepcopy(account)
            if not stored.id:
                stored.id = self._store.next_id("account")
            else:
                self._store.bump_sequence("account", stored.id)
            # Snapshot arrives newest first; number oldest first so ids grow with time
            for txn in reversed(stored.transactions):
                txn.id = self._store.next_id("transaction")
            self._store._accounts[stored.id] = stored
            return copy.deepcopy(stored)

    def list_transactions(self, account_id: int) -> List[Transaction]:
        with self._store._lock:
            account = self._store._accounts.get(account_id)
            return copy.deepcopy(account.transactions) if account else []

    def apply_transaction(
        self,
        account_id: int,
        on: date,
        description: str,
        amount_cents: int,
        type: str,
        category: Optional[str] = None,
        sender: Optional[str] = None,
    ) -> Transaction:
        with self._store._lock:
            account = self._store._accounts[account_id]
            txn = Transaction(
                id=self._store.next_id("transaction"),
                date=on,
                description=description,
                amount_cents=amount_cents,
                type=type,
                category=category,
                sender=sender,
            )
            account.transactions.insert(0, txn)
            account.balance_cents += amount_cents
            return copy.deepcopy(txn)


class InMemoryGoalRepository:
    _SCALARS = ("name", "target_cents", "current_cents", "monthly_cents", "next_deposit", "bank_id", "order")

    def __init__(self, store: InMemoryLedgerStore):
        self._store = store

    def list(self, for_update: bool = False) -> List[Goal]:
        with self._store._lock:
            goals = sorted(self._store._goals.values(), key=lambda g: g.order)
            return [copy.deepcopy(g) for g in goals]

    def get(self, goal_id: int, for_update: bool = False) -> Optional[Goal]:
        with self._store._lock:
            goal = self._store._goals.get(goal_id)
            return copy.deepcopy(goal) if goal else None

    def create(self, goal: Goal) -> Goal:
        with self._store._lock:
            stored = replace(goal, id=self._store.next_id("goal"), version=1, deposits=[])
            self._store._goals[stored.id] = stored
            return copy.deepcopy(stored)

    def save(self, goal: Goal) -> Goal:
        with self._store._lock:
            stored = self._store._goals[goal.id]
            changed = False
            for name in self._SCALARS:
                if getattr(stored, name) != getattr(goal, name):
                    setattr(stored, name, getattr(goal, name))
                    changed = True
            if changed:
                stored.version += 1
            return copy.deepcopy(stored)

    def delete(self, goal_id: int) -> None:
        with self._store._lock:
            self._store._goals.pop(goal_id, None)

    def add_deposit(self, goal_id: int, amount_cents: int, on: date, status: str) -> Deposit:
        with self._store._lock:
            deposit = Deposit(
                id=self._store.next_id("deposit"),
                goal_id=goal_id,
                amount_cents=amount_cents,
                date=on,
                status=status,
            )
            self._store._goals[goal_id].deposits.append(deposit)
            return copy.deepcopy(deposit)


class InMemoryLoanRepository:
    _SCALARS = (
        "name",
        "debt_cents",
        "rate",
        "monthly_payment_cents",
        "next_payment",
        "bank_id",
        "auto_payment",
    )

    def __init__(self, store: InMemoryLedgerStore):
        self._store = store

    def list(self) -> List[Loan]:
        with self._store._lock:
            return [copy.deepcopy(loan) for _, loan in sorted(self._store._loans.items())]

    def get(self, loan_id: int, for_update: bool = False) -> Optional[Loan]:
        with self._store._lock:
            loan = self._store._loans.get(loan_id)
            return copy.deepcopy(loan) if loan else None

    def create(self, loan: Loan) -> Loan:
        with self._store._lock:
            stored = replace(loan, id=self._store.next_id("loan"), payment_history=[])
            self._store._loans[stored.id] = stored
            return copy.deepcopy(stored)

    def save(self, loan: Loan) -> Loan:
        with self._store._lock:
            stored = self._store._loans[loan.id]
            for name in self._SCALARS:
                setattr(stored, name, getattr(loan, name))
            return copy.deepcopy(stored)

    def delete(self, loan_id: int) -> None:
        with self._store._lock:
            self._store._loans.pop(loan_id, None)

    def add_payment(self, loan_id: int, amount_cents: int, on: date, status: str) -> Payment:
        with self._store._lock:
            payment = Payment(
                id=self._store.next_id("payment"),
                loan_id=loan_id,
                amount_cents=amount_cents,
                date=on,
                status=status,
            )
            self._store._loans[loan_id].payment_history.append(payment)
            return copy.deepcopy(payment)


class InMemoryOperationRepository:
    def __init__(self, store: InMemoryLedgerStore):
        self._store = store

    def list(self) -> List[Operation]:
        with self._store._lock:
            ordered = sorted(self._store._operations, key=lambda o: (o.date, o.id), reverse=True)
            return [copy.deepcopy(o) for o in ordered]

    def append(
        self,
        on: date,
        type: str,
        amount_cents: int,
        status: str,
        goal: Optional[str] = None,
        loan: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Operation:
        with self._store._lock:
            operation = Operation(
                id=self._store.next_id("operation"),
                date=on,
                type=type,
                amount_cents=amount_cents,
                status=status,
                goal=goal,
                loan=loan,
                error=error,
            )
            self._store._operations.append(operation)
            return copy.deepcopy(operation)
