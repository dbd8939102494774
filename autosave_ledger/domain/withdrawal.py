"""Emergency withdrawal arithmetic - deposits to close and interest penalty"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence, Tuple

from autosave_ledger.domain.models import Deposit, Goal, COMPLETED


def count_deposits_to_close(amount_cents: int, current_cents: int, deposit_count: int) -> int:
    """
    Minimum number of deposits whose combined value covers amount_cents.

    Allocation model: the goal balance is split evenly across its deposits,
    so each deposit is worth current_cents / deposit_count. A goal with no
    deposits is treated as one virtual deposit holding the whole balance.

    Example:
        current 50000 across 4 deposits -> 12500 each
        amount 20000 -> ceil(20000 / 12500) = 2 deposits
    """
    deposit_count = max(deposit_count, 1)
    if amount_cents <= 0 or current_cents <= 0:
        return 0

    # ceil(amount / (current / n)) in integer arithmetic
    needed = -(-amount_cents * deposit_count // current_cents)
    return min(needed, deposit_count)


def select_deposits(deposits: Sequence[Deposit], amount_cents: int, current_cents: int) -> List[Deposit]:
    """Oldest completed deposits that would be closed to release amount_cents"""
    completed = [d for d in deposits if d.status == COMPLETED]
    count = count_deposits_to_close(amount_cents, current_cents, len(completed))
    return completed[:count]


def lost_interest(amount_cents: int, penalty_rate: float) -> int:
    """Flat penalty on the withdrawn amount, rounded half-up to whole minor units"""
    penalty = Decimal(amount_cents) * Decimal(str(penalty_rate))
    return int(penalty.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def plan_terms(goal: Goal) -> Tuple[str, int, int, str]:
    """
    Goal fields a withdrawal plan is bound to.

    Balance and schedule are left out: confirm re-checks the balance and
    shifts whatever schedule the goal has at that moment, so deposits,
    earlier withdrawals and reordering do not make a plan stale. Editing
    the goal itself does.
    """
    return (goal.name, goal.target_cents, goal.monthly_cents, goal.bank_id)
