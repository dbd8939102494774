"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    description: str
    amount_cents: int
    type: str
    category: Optional[str] = None
    sender: Optional[str] = None


class AccountSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bank_id: str
    number: str
    balance_cents: int
    transactions: List[TransactionSchema] = []


class DepositSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    goal_id: int
    amount_cents: int
    date: date
    status: str


class GoalSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    target_cents: int
    current_cents: int
    monthly_cents: int
    next_deposit: date
    bank_id: str
    order: int
    version: int
    deposits: List[DepositSchema] = []


class GoalCreateRequest(BaseModel):
    """Request body for POST /v1/goals; the balance always starts at zero"""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    target_cents: int = Field(..., gt=0)
    monthly_cents: int = Field(0, ge=0)
    next_deposit: date
    bank_id: str = Field(..., min_length=1)


class GoalUpdateRequest(BaseModel):
    """Request body for PATCH /v1/goals/{goal_id}; only supplied fields change"""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    target_cents: Optional[int] = Field(None, gt=0)
    monthly_cents: Optional[int] = Field(None, ge=0)
    next_deposit: Optional[date] = None
    bank_id: Optional[str] = Field(None, min_length=1)


class MoveGoalRequest(BaseModel):
    direction: Literal["up", "down"]


class ReorderGoalsRequest(BaseModel):
    goal_ids: List[int]


class DepositRequest(BaseModel):
    account_id: int
    amount_cents: int = Field(..., gt=0)


class GoalProjectionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    goal_id: int
    progress_percent: float
    months_remaining: Optional[int] = None
    estimated_completion: Optional[date] = None


class PaymentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    loan_id: int
    amount_cents: int
    date: date
    status: str


class LoanSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    debt_cents: int
    rate: float
    monthly_payment_cents: int
    next_payment: date
    bank_id: str
    auto_payment: bool
    payment_history: List[PaymentSchema] = []


class LoanCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    debt_cents: int = Field(..., ge=0)
    rate: float = Field(0.0, ge=0)
    monthly_payment_cents: int = Field(0, ge=0)
    next_payment: date
    bank_id: str = Field(..., min_length=1)
    auto_payment: bool = False


class LoanUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    debt_cents: Optional[int] = Field(None, ge=0)
    rate: Optional[float] = Field(None, ge=0)
    monthly_payment_cents: Optional[int] = Field(None, ge=0)
    next_payment: Optional[date] = None
    bank_id: Optional[str] = Field(None, min_length=1)
    auto_payment: Optional[bool] = None


class LoanPaymentRequest(BaseModel):
    account_id: int
    amount_cents: Optional[int] = Field(None, gt=0)


class OperationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date
    type: str
    amount_cents: int
    status: str
    goal: Optional[str] = None
    loan: Optional[str] = None
    error: Optional[str] = None


class ScheduledRunRequest(BaseModel):
    today: Optional[date] = None


class ScheduledRunResponse(BaseModel):
    deposits: List[OperationSchema]
    loan_payments: List[OperationSchema]


class WithdrawalPlanRequest(BaseModel):
    """Request body for POST /v1/withdrawals/plan"""

    amount_cents: int = Field(..., gt=0, description="Amount to return to the home account")


class WithdrawalPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    amount_cents: int
    goal_id: int
    goal_name: str
    deposits_to_close: int
    deposit_ids: List[int]
    lost_interest_cents: int
    affected_goals: List[int]
    remaining_cents: int
    next_deposit_after: date
    expires_at: datetime


class WithdrawalConfirmRequest(BaseModel):
    token: str = Field(..., min_length=1)


class WithdrawalResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    goal: GoalSchema
    account: AccountSchema
    transaction: TransactionSchema
    operation: OperationSchema


class CapacityRequest(BaseModel):
    avg_salary_cents: int = Field(..., ge=0)
    avg_expenses_cents: int = Field(..., ge=0)


class CapacityResponse(BaseModel):
    savings_capacity_cents: int


class CashFlowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_months: int
    total_income_cents: int
    total_expenses_cents: int
    avg_salary_cents: int
    avg_expenses_cents: int
    savings_capacity_cents: int
