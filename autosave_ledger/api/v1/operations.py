"""GET /v1/operations - fund movement history, plus the scheduled run trigger"""

from typing import List

from fastapi import APIRouter, Depends

from autosave_ledger.api.dependencies import get_ledger
from autosave_ledger.api.v1.schemas import OperationSchema, ScheduledRunRequest, ScheduledRunResponse
from autosave_ledger.services.ledger import Ledger

router = APIRouter()


@router.get("/operations", response_model=List[OperationSchema])
def list_operations(ledger: Ledger = Depends(get_ledger)):
    """Operations, most recent first"""
    return [OperationSchema.model_validate(o) for o in ledger.list_operations()]


@router.post("/operations/scheduled", response_model=ScheduledRunResponse)
def run_scheduled(body: ScheduledRunRequest, ledger: Ledger = Depends(get_ledger)):
    """Make the goal deposits and loan auto-payments that are due"""
    deposits = ledger.run_scheduled_deposits(body.today)
    payments = ledger.run_auto_payments(body.today)
    return ScheduledRunResponse(
        deposits=[OperationSchema.model_validate(o) for o in deposits],
        loan_payments=[OperationSchema.model_validate(o) for o in payments],
    )
