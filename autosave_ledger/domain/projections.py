"""Goal progress and completion estimates"""

from autosave_ledger.domain.models import Goal, GoalProjection
from autosave_ledger.utils.date_utils import add_months


def project_goal(goal: Goal) -> GoalProjection:
    progress = 0.0
    if goal.target_cents > 0:
        progress = min(goal.current_cents / goal.target_cents * 100, 100.0)

    remaining = max(goal.target_cents - goal.current_cents, 0)
    if remaining == 0:
        months_remaining = 0
    elif goal.monthly_cents > 0:
        months_remaining = -(-remaining // goal.monthly_cents)
    else:
        # No monthly contribution, the goal never completes on its own
        months_remaining = None

    estimated_completion = None
    if months_remaining is not None and goal.next_deposit is not None:
        estimated_completion = add_months(goal.next_deposit, months_remaining)

    return GoalProjection(
        goal_id=goal.id,
        progress_percent=round(progress, 2),
        months_remaining=months_remaining,
        estimated_completion=estimated_completion,
    )
