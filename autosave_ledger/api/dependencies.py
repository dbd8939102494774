"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from autosave_ledger.config import settings
from autosave_ledger.infrastructure.clients.bank import BankClient
from autosave_ledger.infrastructure.database.repositories import SqlLedgerStore
from autosave_ledger.infrastructure.database.session import get_db
from autosave_ledger.services.ledger import Ledger
from autosave_ledger.services.locking import LockRegistry
from autosave_ledger.services.withdrawals import PlanRegistry

# Shared by every request: plans must survive between plan and confirm calls
plan_registry = PlanRegistry(ttl_seconds=settings.plan_ttl_seconds)
lock_registry = LockRegistry(timeout=settings.lock_timeout_seconds)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger(db: Session = Depends(get_db)) -> Ledger:
    """Ledger bound to this request's database session"""
    return Ledger(SqlLedgerStore(db), plans=plan_registry, locks=lock_registry, config=settings)


def get_bank_client() -> BankClient:
    """Provide Bank API client instance"""
    return BankClient()
