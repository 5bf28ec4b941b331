# SPDX-License-Identifier: Apache-2.0

"""
Program readiness domain logic.

A program is "ready" for presentation and execution tracking when its child
entities meet minimum completeness rules. All rules are evaluated
independently and every violation is reported.
"""

from typing import Dict, List
from dataclasses import dataclass, field
from models.entities import Action, Deliverable, Indicator

MISSING_INDICATOR_ERROR = "Program must have at least 1 strategic indicator."
MISSING_ACTION_ERROR = "Program must have at least 1 action/project."


@dataclass
class ValidationResult:
    """Result of a readiness validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def missing_deliverable_error(action: Action) -> str:
    return f'Action "{action.name}" has no registered deliverables.'


def validate_program_readiness(
    indicators: List[Indicator],
    actions: List[Action],
    deliverables_by_action: Dict[str, List[Deliverable]]
) -> ValidationResult:
    """
    Validate that a program is fully specified.

    Args:
        indicators: Indicators belonging to the program
        actions: Actions belonging to the program
        deliverables_by_action: Deliverables keyed by action ID

    Returns:
        ValidationResult with every violation found
    """
    errors = []

    if not indicators:
        errors.append(MISSING_INDICATOR_ERROR)

    if not actions:
        errors.append(MISSING_ACTION_ERROR)

    for action in actions:
        if not deliverables_by_action.get(action.id):
            errors.append(missing_deliverable_error(action))

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors
    )


def group_by_parent(items: List, parent_field: str) -> Dict[str, List]:
    """Group entities by a parent-id attribute."""
    grouped: Dict[str, List] = {}
    for item in items:
        grouped.setdefault(getattr(item, parent_field), []).append(item)
    return grouped


def is_program_ready(
    program_id: str,
    indicators_by_program: Dict[str, List[Indicator]],
    actions_by_program: Dict[str, List[Action]],
    deliverables_by_action: Dict[str, List[Deliverable]]
) -> bool:
    """Readiness check over pre-grouped collections, for aggregate views."""
    result = validate_program_readiness(
        indicators_by_program.get(program_id, []),
        actions_by_program.get(program_id, []),
        deliverables_by_action
    )
    return result.is_valid
