"""Emergency withdrawal endpoints - plan, then confirm by token"""

import logging

from fastapi import APIRouter, Depends, Request

from autosave_ledger.api.dependencies import get_ledger, get_request_id
from autosave_ledger.api.v1.schemas import (
    WithdrawalConfirmRequest,
    WithdrawalPlanRequest,
    WithdrawalPlanResponse,
    WithdrawalResultResponse,
)
from autosave_ledger.services.ledger import Ledger

router = APIRouter()


@router.post("/withdrawals/plan", response_model=WithdrawalPlanResponse)
def plan_withdrawal(body: WithdrawalPlanRequest, ledger: Ledger = Depends(get_ledger)):
    """
    Preview an emergency withdrawal.

    Nothing is changed; the response token is what /withdrawals/confirm
    accepts, once.
    """
    plan = ledger.plan_emergency_withdrawal(body.amount_cents)
    return WithdrawalPlanResponse.model_validate(plan)


@router.post("/withdrawals/confirm", response_model=WithdrawalResultResponse)
def confirm_withdrawal(body: WithdrawalConfirmRequest, request: Request, ledger: Ledger = Depends(get_ledger)):
    """
    Apply a planned withdrawal.

    Returns the updated goal, home account, transaction and operation so the
    client can refresh without another round trip.
    """
    result = ledger.withdrawals.confirm_token(body.token)
    logging.info(
        "Withdrawal confirmed",
        extra={
            "request_id": get_request_id(request),
            "goal_id": result.goal.id,
            "amount_cents": result.operation.amount_cents,
        },
    )
    return WithdrawalResultResponse.model_validate(result)
