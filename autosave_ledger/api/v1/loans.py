"""Loan endpoints - CRUD and payments"""

from typing import List

from fastapi import APIRouter, Depends, Response

from autosave_ledger.api.dependencies import get_ledger
from autosave_ledger.api.v1.schemas import (
    LoanCreateRequest,
    LoanPaymentRequest,
    LoanSchema,
    LoanUpdateRequest,
    OperationSchema,
)
from autosave_ledger.services.ledger import Ledger

router = APIRouter()


@router.get("/loans", response_model=List[LoanSchema])
def list_loans(ledger: Ledger = Depends(get_ledger)):
    return [LoanSchema.model_validate(loan) for loan in ledger.list_loans()]


@router.post("/loans", response_model=LoanSchema, status_code=201)
def create_loan(body: LoanCreateRequest, ledger: Ledger = Depends(get_ledger)):
    loan = ledger.create_loan(**body.model_dump())
    return LoanSchema.model_validate(loan)


@router.patch("/loans/{loan_id}", response_model=LoanSchema)
def update_loan(loan_id: int, body: LoanUpdateRequest, ledger: Ledger = Depends(get_ledger)):
    loan = ledger.update_loan(loan_id, body.model_dump(exclude_unset=True))
    return LoanSchema.model_validate(loan)


@router.delete("/loans/{loan_id}", status_code=204)
def delete_loan(loan_id: int, ledger: Ledger = Depends(get_ledger)):
    ledger.delete_loan(loan_id)
    return Response(status_code=204)


@router.post("/loans/{loan_id}/payments", response_model=OperationSchema, status_code=201)
def pay_loan(loan_id: int, body: LoanPaymentRequest, ledger: Ledger = Depends(get_ledger)):
    operation = ledger.pay_loan(loan_id, body.account_id, body.amount_cents)
    return OperationSchema.model_validate(operation)
