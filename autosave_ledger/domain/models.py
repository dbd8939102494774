"""Domain models - pure Python dataclasses representing ledger entities

All money values are integers in minor currency units (kopecks).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Tuple

# Transaction types
INCOME = "income"
EXPENSE = "expense"

# Deposit / payment / operation statuses
PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"

# Operation types
OPERATION_DEPOSIT = "deposit"
OPERATION_LOAN_PAYMENT = "loan_payment"
OPERATION_EMERGENCY_WITHDRAW = "emergency_withdraw"

UP = "up"
DOWN = "down"


@dataclass
class Transaction:
    """Account transaction, immutable once appended"""

    id: int
    date: date
    description: str
    amount_cents: int  # signed: positive for income, negative for expense
    type: str  # "income" or "expense"
    category: Optional[str] = None
    sender: Optional[str] = None


@dataclass
class Account:
    """Bank account supplied by the bank connection"""

    id: int
    bank_id: str
    number: str
    balance_cents: int
    transactions: List[Transaction] = field(default_factory=list)  # newest first


@dataclass
class Deposit:
    """Single contribution toward a goal"""

    id: int
    goal_id: int
    amount_cents: int
    date: date
    status: str


@dataclass
class Goal:
    """Savings goal with its position in the funding queue"""

    id: int
    name: str
    target_cents: int
    current_cents: int
    monthly_cents: int
    next_deposit: date
    bank_id: str
    order: int
    version: int = 1
    deposits: List[Deposit] = field(default_factory=list)


@dataclass
class Payment:
    """Single loan payment"""

    id: int
    loan_id: int
    amount_cents: int
    date: date
    status: str


@dataclass
class Loan:
    """Outstanding debt with an optional auto-payment"""

    id: int
    name: str
    debt_cents: int
    rate: float  # annual %
    monthly_payment_cents: int
    next_payment: date
    bank_id: str
    auto_payment: bool
    payment_history: List[Payment] = field(default_factory=list)


@dataclass
class Operation:
    """Audit-log entry for a fund movement"""

    id: int
    date: date
    type: str
    amount_cents: int
    status: str
    goal: Optional[str] = None
    loan: Optional[str] = None
    error: Optional[str] = None


@dataclass
class EmergencyWithdrawPlan:
    """Reviewed-but-not-applied withdrawal, redeemable once by its token"""

    token: str
    amount_cents: int
    goal_id: int
    goal_name: str
    goal_terms: Tuple[str, int, int, str]  # see domain.withdrawal.plan_terms
    deposits_to_close: int
    deposit_ids: List[int]
    lost_interest_cents: int
    affected_goals: List[int]
    remaining_cents: int
    next_deposit_after: date
    expires_at: datetime


@dataclass
class WithdrawalResult:
    """State touched by a confirmed withdrawal, for the caller to refresh from"""

    goal: Goal
    account: Account
    transaction: Transaction
    operation: Operation


@dataclass
class GoalProjection:
    goal_id: int
    progress_percent: float
    months_remaining: Optional[int]
    estimated_completion: Optional[date]


@dataclass
class CashFlowSummary:
    """Average monthly income and spend over a period"""

    period_months: int
    total_income_cents: int
    total_expenses_cents: int
    avg_salary_cents: int
    avg_expenses_cents: int
    savings_capacity_cents: int
