"""Store contracts the services depend on; implemented in-memory and on SQLAlchemy"""

from datetime import date
from typing import ContextManager, List, Optional, Protocol

from autosave_ledger.domain.models import Account, Deposit, Goal, Loan, Operation, Payment, Transaction


class AccountRepository(Protocol):
    def list(self) -> List[Account]:
        """Return every account with its transactions (newest first)."""

    def get(self, account_id: int, for_update: bool = False) -> Optional[Account]:
        """Return one account, or None."""

    def first_for_bank(self, bank_id: str) -> Optional[Account]:
        """Return the lowest-id account held at bank_id, or None."""

    def add(self, account: Account) -> Account:
        """Register an account snapshot supplied by the bank connection."""

    def list_transactions(self, account_id: int) -> List[Transaction]:
        """Return the account's transactions, newest first."""

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
        """Append a transaction and move the balance by the same signed amount."""


class GoalRepository(Protocol):
    def list(self, for_update: bool = False) -> List[Goal]:
        """Return every goal sorted by order ascending."""

    def get(self, goal_id: int, for_update: bool = False) -> Optional[Goal]:
        """Return one goal with its deposits, or None."""

    def create(self, goal: Goal) -> Goal:
        """Persist a new goal; the store assigns its id."""

    def save(self, goal: Goal) -> Goal:
        """Write scalar fields back; bumps version when anything changed."""

    def delete(self, goal_id: int) -> None:
        """Remove a goal and its deposit history."""

    def add_deposit(self, goal_id: int, amount_cents: int, on: date, status: str) -> Deposit:
        """Append a deposit to the goal's history."""


class LoanRepository(Protocol):
    def list(self) -> List[Loan]:
        """Return every loan sorted by id."""

    def get(self, loan_id: int, for_update: bool = False) -> Optional[Loan]:
        """Return one loan with its payment history, or None."""

    def create(self, loan: Loan) -> Loan:
        """Persist a new loan; the store assigns its id."""

    def save(self, loan: Loan) -> Loan:
        """Write scalar fields back."""

    def delete(self, loan_id: int) -> None:
        """Remove a loan and its payment history."""

    def add_payment(self, loan_id: int, amount_cents: int, on: date, status: str) -> Payment:
        """Append a payment to the loan's history."""


class OperationRepository(Protocol):
    def list(self) -> List[Operation]:
        """Return operations by date descending, newest id first within a day."""

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
        """Append an operation; ids are never reused."""


class LedgerStore(Protocol):
    """Bundle of repositories sharing one transactional boundary"""

    accounts: AccountRepository
    goals: GoalRepository
    loans: LoanRepository
    operations: OperationRepository

    def unit_of_work(self) -> ContextManager["LedgerStore"]:
        """Apply every write made inside the block, or none of them on error."""
