"""Loan service - loan bookkeeping and (auto-)payments"""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from autosave_ledger.domain.exceptions import (
    AccountNotFoundError,
    DomainException,
    InsufficientFundsError,
    InvalidAmountError,
    LoanNotFoundError,
    ValidationError,
)
from autosave_ledger.domain.models import (
    Loan,
    Operation,
    COMPLETED,
    EXPENSE,
    FAILED,
    OPERATION_LOAN_PAYMENT,
)
from autosave_ledger.domain.repositories import LedgerStore
from autosave_ledger.services.locking import LockRegistry
from autosave_ledger.services.operations import OperationLog
from autosave_ledger.utils.date_utils import add_months

UPDATABLE_FIELDS = {
    "name",
    "debt_cents",
    "rate",
    "monthly_payment_cents",
    "next_payment",
    "bank_id",
    "auto_payment",
}


def _validate_loan_fields(name: str, debt_cents: int, rate: float, monthly_payment_cents: int) -> None:
    if not name or not name.strip():
        raise ValidationError("Loan name must not be empty")
    if debt_cents < 0:
        raise ValidationError("Debt must not be negative")
    if rate < 0:
        raise ValidationError("Rate must not be negative")
    if monthly_payment_cents < 0:
        raise ValidationError("Monthly payment must not be negative")


class LoanService:
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

    def list_loans(self) -> List[Loan]:
        return self.store.loans.list()

    def get_loan(self, loan_id: int) -> Loan:
        loan = self.store.loans.get(loan_id)
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return loan

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
        """Register a loan; its payment history always starts empty"""
        _validate_loan_fields(name, debt_cents, rate, monthly_payment_cents)

        with self.store.unit_of_work():
            loan = self.store.loans.create(
                Loan(
                    id=0,
                    name=name.strip(),
                    debt_cents=debt_cents,
                    rate=rate,
                    monthly_payment_cents=monthly_payment_cents,
                    next_payment=next_payment,
                    bank_id=bank_id,
                    auto_payment=auto_payment,
                )
            )

        logging.info("Loan created", extra={"loan_id": loan.id, "auto_payment": auto_payment})
        return loan

    def update_loan(self, loan_id: int, changes: Dict[str, Any]) -> Loan:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {sorted(unknown)}")
        cleared = sorted(name for name, value in changes.items() if value is None)
        if cleared:
            raise ValidationError(f"Fields cannot be null: {cleared}")

        with self.locks.hold(("loan", loan_id)):
            with self.store.unit_of_work():
                loan = self.store.loans.get(loan_id, for_update=True)
                if loan is None:
                    raise LoanNotFoundError(f"Loan {loan_id} not found")
                for field_name, value in changes.items():
                    setattr(loan, field_name, value)
                _validate_loan_fields(loan.name, loan.debt_cents, loan.rate, loan.monthly_payment_cents)
                loan = self.store.loans.save(loan)

        return loan

    def delete_loan(self, loan_id: int) -> None:
        with self.locks.hold(("loan", loan_id)):
            with self.store.unit_of_work():
                if self.store.loans.get(loan_id, for_update=True) is None:
                    raise LoanNotFoundError(f"Loan {loan_id} not found")
                self.store.loans.delete(loan_id)

    def pay_loan(self, loan_id: int, account_id: int, amount_cents: Optional[int] = None) -> Operation:
        """
        Pay a loan from an account.

        Amount defaults to the monthly payment, capped at the remaining debt.
        Debit, debt reduction, payment entry and operation entry are applied
        together; on failure a failed payment and a failed operation are
        recorded and nothing else changes.
        """
        return self._pay(loan_id, account_id, amount_cents)

    def _pay(
        self,
        loan_id: int,
        account_id: int,
        amount_cents: Optional[int],
        strict: bool = True,
    ) -> Operation:
        today = self.clock()
        with self.locks.hold(("loan", loan_id), ("account", account_id)):
            loan = self.get_loan(loan_id)
            if self.store.accounts.get(account_id) is None:
                raise AccountNotFoundError(f"Account {account_id} not found")

            if amount_cents is None:
                amount_cents = min(loan.monthly_payment_cents, loan.debt_cents)
            if amount_cents <= 0:
                raise InvalidAmountError("Payment amount must be positive")

            try:
                with self.store.unit_of_work():
                    loan = self.store.loans.get(loan_id, for_update=True)
                    account = self.store.accounts.get(account_id, for_update=True)
                    if amount_cents > loan.debt_cents:
                        raise ValidationError(
                            f"Payment {amount_cents} exceeds outstanding debt {loan.debt_cents}"
                        )
                    if account.balance_cents < amount_cents:
                        raise InsufficientFundsError(amount_cents, account.balance_cents)

                    self.store.accounts.apply_transaction(
                        account.id,
                        on=today,
                        description=f'Payment for loan "{loan.name}"',
                        amount_cents=-amount_cents,
                        type=EXPENSE,
                        category="Loans",
                    )
                    loan.debt_cents -= amount_cents
                    loan.next_payment = add_months(loan.next_payment, 1)
                    self.store.loans.save(loan)
                    self.store.loans.add_payment(loan.id, amount_cents, today, COMPLETED)
                    operation = self.operations.record(
                        today, OPERATION_LOAN_PAYMENT, amount_cents, COMPLETED, loan=loan.name
                    )
            except Exception as e:
                with self.store.unit_of_work():
                    self.store.loans.add_payment(loan_id, amount_cents, today, FAILED)
                    operation = self.operations.record(
                        today, OPERATION_LOAN_PAYMENT, amount_cents, FAILED, loan=loan.name, error=str(e)
                    )
                self.operations.publish(operation)
                if strict or not isinstance(e, DomainException):
                    raise
                return operation

        self.operations.publish(operation)
        return operation

    def run_auto_payments(self, today: Optional[date] = None) -> List[Operation]:
        """Pay every auto-payment loan that has come due from the first account at its bank"""
        today = today or self.clock()
        produced = []
        for loan in self.store.loans.list():
            if not loan.auto_payment or loan.debt_cents <= 0 or loan.next_payment > today:
                continue

            account = self.store.accounts.first_for_bank(loan.bank_id)
            if account is None:
                logging.warning(
                    "No paying account for loan",
                    extra={"loan_id": loan.id, "bank_id": loan.bank_id},
                )
                continue

            produced.append(self._pay(loan.id, account.id, None, strict=False))

        return produced
