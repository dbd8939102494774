"""Account endpoints - balances, transactions and bank snapshot import"""

from typing import List

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from autosave_ledger.api.dependencies import get_bank_client, get_ledger
from autosave_ledger.api.v1.schemas import AccountSchema, TransactionSchema
from autosave_ledger.infrastructure.clients.bank import BankClient
from autosave_ledger.services.ledger import Ledger

router = APIRouter()


@router.get("/accounts", response_model=List[AccountSchema])
def list_accounts(ledger: Ledger = Depends(get_ledger)):
    return [AccountSchema.model_validate(a) for a in ledger.list_accounts()]


@router.get("/accounts/{account_id}/transactions", response_model=List[TransactionSchema])
def get_account_transactions(account_id: int, ledger: Ledger = Depends(get_ledger)):
    """Transactions of one account, newest first"""
    return [TransactionSchema.model_validate(t) for t in ledger.get_account_transactions(account_id)]


@router.post("/accounts/sync/{bank_id}", response_model=List[AccountSchema])
async def sync_accounts(
    bank_id: str,
    ledger: Ledger = Depends(get_ledger),
    bank_client: BankClient = Depends(get_bank_client),
):
    """
    Import account snapshots from the bank connection.

    Returns only the accounts that were new; known accounts keep the
    balance the ledger has been tracking.
    """
    accounts = await bank_client.get_accounts(bank_id)
    # The ledger blocks on the database and entity locks
    imported = await run_in_threadpool(ledger.import_accounts, accounts)
    return [AccountSchema.model_validate(a) for a in imported]
