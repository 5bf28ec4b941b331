# SPDX-License-Identifier: Apache-2.0

"""
Dashboard aggregation domain logic.
"""

from typing import Any, Dict, List
from dataclasses import dataclass, field
from models.entities import Action, ActivityLog, Deliverable, Indicator, Program
from models.enums import ActionStatus
from domain.program_readiness import group_by_parent, is_program_ready


@dataclass
class DashboardSummary:
    """Aggregated numbers shown on the dashboard."""
    totals: Dict[str, int]
    action_status: Dict[str, int]
    program_health: Dict[str, int]
    recent_activity: List[Dict[str, Any]] = field(default_factory=list)


def count_action_statuses(actions: List[Action]) -> Dict[str, int]:
    """Count actions per status; every status is present, even at zero."""
    counts = {status.value: 0 for status in ActionStatus}
    for action in actions:
        status = ActionStatus(action.status).value
        counts[status] += 1
    return counts


def scope_to_programs(items: List, program_ids: List[str]) -> List:
    """Keep entities whose program_id is in the given set."""
    allowed = set(program_ids)
    return [item for item in items if item.program_id in allowed]


def build_dashboard_summary(
    programs: List[Program],
    actions: List[Action],
    indicators: List[Indicator],
    deliverables: List[Deliverable],
    recent_activity: List[ActivityLog]
) -> DashboardSummary:
    """
    Aggregate dashboard numbers over already-scoped collections.

    Args:
        programs: Programs visible to the user
        actions: Actions of those programs
        indicators: Indicators of those programs
        deliverables: Deliverables of those actions
        recent_activity: Latest activity entries

    Returns:
        DashboardSummary
    """
    indicators_by_program = group_by_parent(indicators, "program_id")
    actions_by_program = group_by_parent(actions, "program_id")
    deliverables_by_action = group_by_parent(deliverables, "action_id")

    ready_count = sum(
        1 for program in programs
        if is_program_ready(program.id, indicators_by_program, actions_by_program, deliverables_by_action)
    )

    return DashboardSummary(
        totals={
            "programs": len(programs),
            "actions": len(actions),
            "indicators": len(indicators),
            "ready_programs": ready_count
        },
        action_status=count_action_statuses(actions),
        program_health={
            "ready": ready_count,
            "pending": len(programs) - ready_count
        },
        recent_activity=[entry.model_dump(mode="json") for entry in recent_activity]
    )
