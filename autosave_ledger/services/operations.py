"""Operation log service - the single record of what happened to money"""

from datetime import date
from typing import List, Optional

from autosave_ledger.domain.models import Operation, FAILED
from autosave_ledger.domain.repositories import LedgerStore
from autosave_ledger.infrastructure.observability.logging import log_operation
from autosave_ledger.infrastructure.observability.metrics import record_operation


class OperationLog:
    """Appends operations inside the caller's unit of work and publishes them once committed"""

    def __init__(self, store: LedgerStore):
        self.store = store

    def list_operations(self) -> List[Operation]:
        return self.store.operations.list()

    def record(
        self,
        on: date,
        operation_type: str,
        amount_cents: int,
        status: str,
        goal: Optional[str] = None,
        loan: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Operation:
        """Append without committing; call publish() after the unit of work succeeds"""
        return self.store.operations.append(
            on=on,
            type=operation_type,
            amount_cents=amount_cents,
            status=status,
            goal=goal,
            loan=loan,
            error=error,
        )

    def record_failure(
        self,
        on: date,
        operation_type: str,
        amount_cents: int,
        error: Exception,
        goal: Optional[str] = None,
        loan: Optional[str] = None,
    ) -> Operation:
        """Append and commit a failed operation in its own unit of work"""
        with self.store.unit_of_work():
            operation = self.record(on, operation_type, amount_cents, FAILED, goal=goal, loan=loan, error=str(error))
        self.publish(operation)
        return operation

    def publish(self, operation: Operation) -> None:
        record_operation(operation.type, operation.status, operation.amount_cents)
        log_operation(operation)
