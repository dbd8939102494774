"""Data access layer for ledger entities"""

from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session

from autosave_ledger.infrastructure.database.models import (
    AccountRecord,
    TransactionRecord,
    GoalRecord,
    DepositRecord,
    LoanRecord,
    PaymentRecord,
    OperationRecord,
)
from autosave_ledger.domain.models import Account, Transaction, Goal, Deposit, Loan, Payment, Operation


def _to_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        date=record.date,
        description=record.description,
        amount_cents=record.amount_cents,
        type=record.type,
        category=record.category,
        sender=record.sender,
    )


def _to_account(record: AccountRecord) -> Account:
    transactions = sorted(record.transactions, key=lambda t: t.id, reverse=True)
    return Account(
        id=record.id,
        bank_id=record.bank_id,
        number=record.number,
        balance_cents=record.balance_cents,
        transactions=[_to_transaction(t) for t in transactions],
    )


def _to_deposit(record: DepositRecord) -> Deposit:
    return Deposit(
        id=record.id,
        goal_id=record.goal_id,
        amount_cents=record.amount_cents,
        date=record.date,
        status=record.status,
    )


def _to_goal(record: GoalRecord) -> Goal:
    return Goal(
        id=record.id,
        name=record.name,
        target_cents=record.target_cents,
        current_cents=record.current_cents,
        monthly_cents=record.monthly_cents,
        next_deposit=record.next_deposit,
        bank_id=record.bank_id,
        order=record.order,
        version=record.version,
        deposits=[_to_deposit(d) for d in sorted(record.deposits, key=lambda d: d.id)],
    )


def _to_payment(record: PaymentRecord) -> Payment:
    return Payment(
        id=record.id,
        loan_id=record.loan_id,
        amount_cents=record.amount_cents,
        date=record.date,
        status=record.status,
    )


def _to_loan(record: LoanRecord) -> Loan:
    return Loan(
        id=record.id,
        name=record.name,
        debt_cents=record.debt_cents,
        rate=record.rate,
        monthly_payment_cents=record.monthly_payment_cents,
        next_payment=record.next_payment,
        bank_id=record.bank_id,
        auto_payment=record.auto_payment,
        payment_history=[_to_payment(p) for p in sorted(record.payments, key=lambda p: p.id)],
    )


def _to_operation(record: OperationRecord) -> Operation:
    return Operation(
        id=record.id,
        date=record.date,
        type=record.type,
        amount_cents=record.amount_cents,
        status=record.status,
        goal=record.goal,
        loan=record.loan,
        error=record.error,
    )


class AccountRepository:
    """Repository for bank accounts and their transactions"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self, for_update: bool = False):
        query = self.db.query(AccountRecord)
        return query.with_for_update() if for_update else query

    def list(self) -> List[Account]:
        return [_to_account(r) for r in self._query().order_by(AccountRecord.id).all()]

    def get(self, account_id: int, for_update: bool = False) -> Optional[Account]:
        record = self._query(for_update).filter(AccountRecord.id == account_id).first()
        return _to_account(record) if record else None

    def first_for_bank(self, bank_id: str) -> Optional[Account]:
        record = (
            self._query()
            .filter(AccountRecord.bank_id == bank_id)
            .order_by(AccountRecord.id)
            .first()
        )
        return _to_account(record) if record else None

    def add(self, account: Account) -> Account:
        """Persist an account snapshot as supplied by the bank connection"""
        record = AccountRecord(
            id=account.id or None,
            bank_id=account.bank_id,
            number=account.number,
            balance_cents=account.balance_cents,
        )
        # Snapshot arrives newest first; insert oldest first so ids grow with time
        for txn in reversed(account.transactions):
            record.transactions.append(
                TransactionRecord(
                    date=txn.date,
                    description=txn.description,
                    amount_cents=txn.amount_cents,
                    type=txn.type,
                    category=txn.category,
                    sender=txn.sender,
                )
            )
        self.db.add(record)
        self.db.flush()
        return _to_account(record)

    def list_transactions(self, account_id: int) -> List[Transaction]:
        records = (
            self.db.query(TransactionRecord)
            .filter(TransactionRecord.account_id == account_id)
            .order_by(TransactionRecord.id.desc())
            .all()
        )
        return [_to_transaction(r) for r in records]

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
        """Append a transaction and move the balance in the same flush"""
        account = self.db.get(AccountRecord, account_id)
        record = TransactionRecord(
            date=on,
            description=description,
            amount_cents=amount_cents,
            type=type,
            category=category,
            sender=sender,
        )
        account.transactions.append(record)
        account.balance_cents = account.balance_cents + amount_cents
        self.db.flush()
        return _to_transaction(record)


class GoalRepository:
    """Repository for savings goals and deposits"""

    _SCALARS = ("name", "target_cents", "current_cents", "monthly_cents", "next_deposit", "bank_id", "order")

    def __init__(self, db: Session):
        self.db = db

    def list(self, for_update: bool = False) -> List[Goal]:
        query = self.db.query(GoalRecord)
        if for_update:
            query = query.with_for_update()
        return [_to_goal(r) for r in query.order_by(GoalRecord.order).all()]

    def get(self, goal_id: int, for_update: bool = False) -> Optional[Goal]:
        query = self.db.query(GoalRecord).filter(GoalRecord.id == goal_id)
        if for_update:
            query = query.with_for_update()
        record = query.first()
        return _to_goal(record) if record else None

    def create(self, goal: Goal) -> Goal:
        record = GoalRecord(**{name: getattr(goal, name) for name in self._SCALARS})
        self.db.add(record)
        self.db.flush()  # Get ID and initial version without committing
        return _to_goal(record)

    def save(self, goal: Goal) -> Goal:
        record = self.db.get(GoalRecord, goal.id)
        for name in self._SCALARS:
            setattr(record, name, getattr(goal, name))
        self.db.flush()
        return _to_goal(record)

    def delete(self, goal_id: int) -> None:
        record = self.db.get(GoalRecord, goal_id)
        if record is not None:
            self.db.delete(record)
            self.db.flush()

    def add_deposit(self, goal_id: int, amount_cents: int, on: date, status: str) -> Deposit:
        goal = self.db.get(GoalRecord, goal_id)
        record = DepositRecord(amount_cents=amount_cents, date=on, status=status)
        goal.deposits.append(record)
        self.db.flush()
        return _to_deposit(record)


class LoanRepository:
    """Repository for loans and their payments"""

    _SCALARS = (
        "name",
        "debt_cents",
        "rate",
        "monthly_payment_cents",
        "next_payment",
        "bank_id",
        "auto_payment",
    )

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Loan]:
        return [_to_loan(r) for r in self.db.query(LoanRecord).order_by(LoanRecord.id).all()]

    def get(self, loan_id: int, for_update: bool = False) -> Optional[Loan]:
        query = self.db.query(LoanRecord).filter(LoanRecord.id == loan_id)
        if for_update:
            query = query.with_for_update()
        record = query.first()
        return _to_loan(record) if record else None

    def create(self, loan: Loan) -> Loan:
        record = LoanRecord(**{name: getattr(loan, name) for name in self._SCALARS})
        self.db.add(record)
        self.db.flush()
        return _to_loan(record)

    def save(self, loan: Loan) -> Loan:
        record = self.db.get(LoanRecord, loan.id)
        for name in self._SCALARS:
            setattr(record, name, getattr(loan, name))
        self.db.flush()
        return _to_loan(record)

    def delete(self, loan_id: int) -> None:
        record = self.db.get(LoanRecord, loan_id)
        if record is not None:
            self.db.delete(record)
            self.db.flush()

    def add_payment(self, loan_id: int, amount_cents: int, on: date, status: str) -> Payment:
        loan = self.db.get(LoanRecord, loan_id)
        record = PaymentRecord(amount_cents=amount_cents, date=on, status=status)
        loan.payments.append(record)
        self.db.flush()
        return _to_payment(record)


class OperationRepository:
    """Repository for the operation log"""

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Operation]:
        records = (
            self.db.query(OperationRecord)
            .order_by(OperationRecord.date.desc(), OperationRecord.id.desc())
            .all()
        )
        return [_to_operation(r) for r in records]

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
        record = OperationRecord(
            date=on,
            type=type,
            amount_cents=amount_cents,
            status=status,
            goal=goal,
            loan=loan,
            error=error,
        )
        self.db.add(record)
        self.db.flush()
        return _to_operation(record)


class SqlLedgerStore:
    """Ledger store on one SQLAlchemy session; a unit of work is a session transaction"""

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountRepository(db)
        self.goals = GoalRepository(db)
        self.loans = LoanRepository(db)
        self.operations = OperationRepository(db)

    @contextmanager
    def unit_of_work(self) -> Iterator["SqlLedgerStore"]:
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
