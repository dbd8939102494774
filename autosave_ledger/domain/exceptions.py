"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input has the wrong shape or is out of range"""

    pass


class InvalidAmountError(ValidationError):
    """Money amount must be strictly positive"""

    pass


class NotFoundError(DomainException):
    """Referenced entity does not exist"""

    pass


class GoalNotFoundError(NotFoundError):
    pass


class AccountNotFoundError(NotFoundError):
    pass


class LoanNotFoundError(NotFoundError):
    pass


class InsufficientFundsError(DomainException):
    """Requested amount exceeds the available balance"""

    def __init__(self, requested_cents: int, available_cents: int):
        super().__init__(
            f"Insufficient funds: requested {requested_cents}, available {available_cents}"
        )
        self.requested_cents = requested_cents
        self.available_cents = available_cents


class InvalidOrderingError(DomainException):
    """Reorder request is not a permutation of the existing goals"""

    pass


class ConflictError(DomainException):
    """State changed underneath the caller or a lock could not be taken"""

    pass


class StalePlanError(ConflictError):
    """Withdrawal plan is unknown, already used, expired or out of date"""

    pass


class BankAPIError(DomainException):
    """Bank API returned an error or is unavailable"""

    pass
