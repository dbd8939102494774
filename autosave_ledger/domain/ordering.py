"""Goal ordering rules - keeps goal orders a dense permutation of 1..N"""

from typing import List, Sequence

from autosave_ledger.domain.exceptions import InvalidOrderingError, GoalNotFoundError, ValidationError
from autosave_ledger.domain.models import Goal, UP, DOWN


def next_order(goals: Sequence[Goal]) -> int:
    """Order assigned to a newly created goal"""
    return len(goals) + 1


def move(goals: Sequence[Goal], goal_id: int, direction: str) -> List[Goal]:
    """
    Swap a goal's order with its immediate neighbour.

    Returns the goals whose order changed (empty when the goal already sits
    at the edge in that direction).
    """
    if direction not in (UP, DOWN):
        raise ValidationError(f"Unknown direction: {direction!r}")

    ranked = sorted(goals, key=lambda g: g.order)
    index = next((i for i, g in enumerate(ranked) if g.id == goal_id), None)
    if index is None:
        raise GoalNotFoundError(f"Goal {goal_id} not found")

    neighbour_index = index - 1 if direction == UP else index + 1
    if neighbour_index < 0 or neighbour_index >= len(ranked):
        return []

    target, neighbour = ranked[index], ranked[neighbour_index]
    target.order, neighbour.order = neighbour.order, target.order
    return [target, neighbour]


def reorder(goals: Sequence[Goal], ordered_ids: Sequence[int]) -> List[Goal]:
    """Assign order = position + 1 following ordered_ids; returns the goals that changed"""
    existing = {g.id for g in goals}
    if len(ordered_ids) != len(set(ordered_ids)):
        raise InvalidOrderingError("Duplicate goal ids in ordering")
    if set(ordered_ids) != existing:
        missing = sorted(existing - set(ordered_ids))
        extra = sorted(set(ordered_ids) - existing)
        raise InvalidOrderingError(f"Ordering does not match goals (missing={missing}, extra={extra})")

    by_id = {g.id: g for g in goals}
    changed = []
    for position, goal_id in enumerate(ordered_ids, start=1):
        goal = by_id[goal_id]
        if goal.order != position:
            goal.order = position
            changed.append(goal)
    return changed


def compact_after_delete(remaining: Sequence[Goal], deleted_order: int) -> List[Goal]:
    """Close the gap left by a deleted goal"""
    changed = []
    for goal in remaining:
        if goal.order > deleted_order:
            goal.order -= 1
            changed.append(goal)
    return changed


def is_dense(goals: Sequence[Goal]) -> bool:
    return sorted(g.order for g in goals) == list(range(1, len(goals) + 1))
