"""Analysis endpoints - savings capacity and cash-flow summary"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from autosave_ledger.api.dependencies import get_ledger
from autosave_ledger.api.v1.schemas import CapacityRequest, CapacityResponse, CashFlowResponse
from autosave_ledger.services.ledger import Ledger

router = APIRouter()


@router.post("/analysis/capacity", response_model=CapacityResponse)
def estimate_capacity(body: CapacityRequest, ledger: Ledger = Depends(get_ledger)):
    capacity = ledger.estimate_savings_capacity(body.avg_salary_cents, body.avg_expenses_cents)
    return CapacityResponse(savings_capacity_cents=capacity)


@router.get("/analysis/cash-flow", response_model=CashFlowResponse)
def cash_flow(
    account_id: Optional[int] = Query(None, description="Limit to one account"),
    period_months: int = Query(3, ge=1, le=24),
    ledger: Ledger = Depends(get_ledger),
):
    return CashFlowResponse.model_validate(ledger.summarize_cash_flow(account_id, period_months))
