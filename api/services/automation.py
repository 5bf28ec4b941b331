# SPDX-License-Identifier: Apache-2.0

"""
Status automation service.

Runs the deadline rule over every action and persists the resulting
transitions in one batch. Runs are best effort: failures are logged and
reported in the result, never raised.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from opentelemetry import trace

from domain.status_automation import StatusChange, plan_status_changes
from .repository import PlanningRepository

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


@dataclass
class AutomationResult:
    """Outcome of an automation run."""
    updated_count: int
    reference_date: date
    changes: List[StatusChange] = field(default_factory=list)
    error: Optional[str] = None


class StatusAutomationService:
    """Applies the deadline-driven status rule to stored actions."""

    def __init__(self, repository: PlanningRepository, revert_delayed: bool = True):
        self.repository = repository
        self.revert_delayed = revert_delayed

    def run(self, today: Optional[date] = None) -> AutomationResult:
        """
        Scan all actions and persist status transitions.

        Args:
            today: Reference date (defaults to the current local date)

        Returns:
            AutomationResult with the number of updated actions
        """
        today = today or date.today()

        with tracer.start_as_current_span("automation.run") as span:
            span.set_attributes({
                "automation.reference_date": today.isoformat(),
                "automation.revert_delayed": self.revert_delayed
            })

            try:
                actions = self.repository.get_actions()
                changes = plan_status_changes(actions, today, self.revert_delayed)

                if changes:
                    self.repository.update_action_statuses(changes)

            except Exception as e:
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Status automation failed",
                    extra={"reference_date": today.isoformat(), "error": str(e)},
                    exc_info=True
                )
                return AutomationResult(updated_count=0, reference_date=today, error=str(e))

            span.set_attribute("automation.updated_count", len(changes))

            if changes:
                logger.info(
                    f"Automation: updated {len(changes)} actions",
                    extra={
                        "reference_date": today.isoformat(),
                        "updated_count": len(changes),
                        "delayed_count": sum(1 for c in changes if c.new_status == "delayed"),
                        "action_ids": [c.action_id for c in changes]
                    }
                )

            return AutomationResult(updated_count=len(changes), reference_date=today, changes=changes)
