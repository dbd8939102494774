"""Goal endpoints - CRUD, ordering, deposits and projections"""

from typing import List

from fastapi import APIRouter, Depends, Response

from autosave_ledger.api.dependencies import get_ledger
from autosave_ledger.api.v1.schemas import (
    DepositRequest,
    GoalCreateRequest,
    GoalProjectionSchema,
    GoalSchema,
    GoalUpdateRequest,
    MoveGoalRequest,
    OperationSchema,
    ReorderGoalsRequest,
)
from autosave_ledger.services.ledger import Ledger

router = APIRouter()


def _goal_list(goals) -> List[GoalSchema]:
    return [GoalSchema.model_validate(g) for g in goals]


@router.get("/goals", response_model=List[GoalSchema])
def list_goals(ledger: Ledger = Depends(get_ledger)):
    """Goals in funding order"""
    return _goal_list(ledger.list_goals())


@router.post("/goals", response_model=GoalSchema, status_code=201)
def create_goal(body: GoalCreateRequest, ledger: Ledger = Depends(get_ledger)):
    goal = ledger.create_goal(
        name=body.name,
        target_cents=body.target_cents,
        monthly_cents=body.monthly_cents,
        next_deposit=body.next_deposit,
        bank_id=body.bank_id,
    )
    return GoalSchema.model_validate(goal)


@router.patch("/goals/{goal_id}", response_model=GoalSchema)
def update_goal(goal_id: int, body: GoalUpdateRequest, ledger: Ledger = Depends(get_ledger)):
    goal = ledger.update_goal(goal_id, body.model_dump(exclude_unset=True))
    return GoalSchema.model_validate(goal)


@router.delete("/goals/{goal_id}", status_code=204)
def delete_goal(goal_id: int, ledger: Ledger = Depends(get_ledger)):
    ledger.delete_goal(goal_id)
    return Response(status_code=204)


@router.post("/goals/{goal_id}/move", response_model=List[GoalSchema])
def move_goal(goal_id: int, body: MoveGoalRequest, ledger: Ledger = Depends(get_ledger)):
    return _goal_list(ledger.move_goal(goal_id, body.direction))


@router.put("/goals/order", response_model=List[GoalSchema])
def reorder_goals(body: ReorderGoalsRequest, ledger: Ledger = Depends(get_ledger)):
    return _goal_list(ledger.reorder_goals(body.goal_ids))


@router.post("/goals/{goal_id}/deposits", response_model=OperationSchema, status_code=201)
def deposit_to_goal(goal_id: int, body: DepositRequest, ledger: Ledger = Depends(get_ledger)):
    operation = ledger.deposit_to_goal(goal_id, body.account_id, body.amount_cents)
    return OperationSchema.model_validate(operation)


@router.get("/goals/{goal_id}/projection", response_model=GoalProjectionSchema)
def project_goal(goal_id: int, ledger: Ledger = Depends(get_ledger)):
    return GoalProjectionSchema.model_validate(ledger.project_goal(goal_id))
