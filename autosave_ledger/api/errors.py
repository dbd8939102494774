"""Mapping of domain exceptions to HTTP responses"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from autosave_ledger.domain.exceptions import (
    BankAPIError,
    ConflictError,
    DomainException,
    InsufficientFundsError,
    InvalidOrderingError,
    NotFoundError,
    ValidationError,
)

# First match wins, so subclasses go before their bases
STATUS_CODES = (
    (NotFoundError, 404),
    (ValidationError, 422),
    (InvalidOrderingError, 422),
    (InsufficientFundsError, 409),
    (ConflictError, 409),
    (BankAPIError, 503),
)


def status_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 400


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_for(exc)
    level = logging.ERROR if status_code >= 500 else logging.WARNING
    logging.log(
        level,
        f"{type(exc).__name__}: {exc}",
        extra={"request_id": getattr(request.state, "request_id", "unknown"), "status": status_code},
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )
