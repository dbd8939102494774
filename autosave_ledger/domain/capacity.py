"""Savings capacity estimation from average income and spend"""

from typing import Iterable

from autosave_ledger.domain.exceptions import ValidationError
from autosave_ledger.domain.models import Transaction, CashFlowSummary


def estimate_savings_capacity(avg_salary_cents: int, avg_expenses_cents: int) -> int:
    """Recommended monthly deposit: what is left of the salary after expenses, never negative"""
    if avg_salary_cents < 0 or avg_expenses_cents < 0:
        raise ValidationError("Salary and expenses must be non-negative")
    return max(0, avg_salary_cents - avg_expenses_cents)


def summarize_cash_flow(transactions: Iterable[Transaction], period_months: int = 3) -> CashFlowSummary:
    """
    Average monthly income and expenses over period_months.

    Every positive transaction counts as income and every negative one as
    an expense; deciding which income is a salary happens upstream.
    """
    if period_months <= 0:
        raise ValidationError("period_months must be positive")

    total_income = 0
    total_expenses = 0
    for txn in transactions:
        if txn.amount_cents > 0:
            total_income += txn.amount_cents
        else:
            total_expenses += abs(txn.amount_cents)

    avg_salary = total_income // period_months
    avg_expenses = total_expenses // period_months

    return CashFlowSummary(
        period_months=period_months,
        total_income_cents=total_income,
        total_expenses_cents=total_expenses,
        avg_salary_cents=avg_salary,
        avg_expenses_cents=avg_expenses,
        savings_capacity_cents=estimate_savings_capacity(avg_salary, avg_expenses),
    )
