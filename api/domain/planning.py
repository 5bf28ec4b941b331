# SPDX-License-Identifier: Apache-2.0

"""
Planning domain logic for program creation and action status changes.

This module contains pure functions; persistence and error raising happen
in the service layer.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass
from models.entities import Action, Program
from models.enums import ActionStatus

MAX_PROGRAMS_PER_UNIT = 5

PROGRAM_LIMIT_MESSAGE = f"Unit has reached the limit of {MAX_PROGRAMS_PER_UNIT} programs."
COMPLETION_BLOCKED_MESSAGE = (
    "Action cannot be marked as completed without at least one attached evidence."
)


@dataclass
class RuleCheck:
    """Outcome of a business rule check."""
    allowed: bool
    reason: Optional[str] = None


def check_program_limit(unit_programs: List[Program]) -> RuleCheck:
    """
    Check whether a unit may receive another program.

    Args:
        unit_programs: Programs currently owned by the unit

    Returns:
        RuleCheck denying creation when the unit is at the limit
    """
    if len(unit_programs) >= MAX_PROGRAMS_PER_UNIT:
        return RuleCheck(allowed=False, reason=PROGRAM_LIMIT_MESSAGE)
    return RuleCheck(allowed=True)


def check_status_change(action: Action, new_status: ActionStatus, has_evidence: bool) -> RuleCheck:
    """
    Check whether an action may move to a new status.

    Completing an action requires at least one evidence record. Re-applying
    the current status is not a transition and is always allowed.
    """
    if action.status == new_status:
        return RuleCheck(allowed=True)
    if new_status == ActionStatus.COMPLETED and not has_evidence:
        return RuleCheck(allowed=False, reason=COMPLETION_BLOCKED_MESSAGE)
    return RuleCheck(allowed=True)


def calculate_diff(old: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Compute the field-level diff an update introduces.

    Args:
        old: Document before the update
        updates: Fields being written

    Returns:
        Mapping of changed field to {"old": ..., "new": ...}
    """
    diff = {}
    for key, new_value in updates.items():
        old_value = old.get(key)
        if old_value != new_value:
            diff[key] = {"old": old_value, "new": new_value}
    return diff
