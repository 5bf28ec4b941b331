# SPDX-License-Identifier: Apache-2.0

"""
Status automation domain logic.

Pure functions that derive an Action's lifecycle status from its deadline.
Comparisons are date-only; time of day never matters.
"""

from typing import List, Optional
from dataclasses import dataclass
from datetime import date
from models.entities import Action
from models.enums import ActionStatus


# Statuses the delay rule never overwrites
DELAY_EXEMPT_STATUSES = (ActionStatus.COMPLETED, ActionStatus.DELAYED)


@dataclass(frozen=True)
class StatusChange:
    """A single status transition produced by the automation rule."""
    action_id: str
    action_name: str
    previous_status: ActionStatus
    new_status: ActionStatus


def derive_action_status(
    action: Action,
    today: date,
    revert_delayed: bool = True
) -> Optional[ActionStatus]:
    """
    Compute the status an action should move to, if any.

    Args:
        action: Action to evaluate
        today: Reference date
        revert_delayed: Whether a delayed action whose deadline is no longer
            past is moved back to in_progress

    Returns:
        The new status, or None when the action should not change
    """
    if action.end_date is None:
        return None

    if today > action.end_date and action.status not in DELAY_EXEMPT_STATUSES:
        return ActionStatus.DELAYED

    if revert_delayed and today <= action.end_date and action.status == ActionStatus.DELAYED:
        # Deadline was extended
        return ActionStatus.IN_PROGRESS

    return None


def plan_status_changes(
    actions: List[Action],
    today: date,
    revert_delayed: bool = True
) -> List[StatusChange]:
    """
    Plan the status transitions for a collection of actions.

    Args:
        actions: All actions to scan
        today: Reference date
        revert_delayed: See derive_action_status

    Returns:
        List of transitions, in input order
    """
    changes = []

    for action in actions:
        new_status = derive_action_status(action, today, revert_delayed)
        if new_status is None:
            continue

        changes.append(StatusChange(
            action_id=action.id,
            action_name=action.name,
            previous_status=ActionStatus(action.status),
            new_status=new_status
        ))

    return changes


def apply_status_changes(actions: List[Action], changes: List[StatusChange]) -> List[Action]:
    """Return copies of the actions with the planned transitions applied."""
    new_status_by_id = {change.action_id: change.new_status for change in changes}

    updated = []
    for action in actions:
        if action.id in new_status_by_id:
            action = action.model_copy(update={"status": new_status_by_id[action.id].value})
        updated.append(action)

    return updated
