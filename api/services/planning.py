# SPDX-License-Identifier: Apache-2.0

"""
Planning service: program creation, completion gate, readiness validation
and dashboard aggregation on top of the planning repository.
"""

import logging
from typing import Optional
from opentelemetry import trace

from domain.authorization import filter_visible_programs
from domain.dashboard import DashboardSummary, build_dashboard_summary, scope_to_programs
from domain.planning import calculate_diff, check_program_limit, check_status_change
from domain.program_readiness import ValidationResult, validate_program_readiness
from middleware.error_handler import CompletionBlockedError, NotFoundException, ProgramLimitExceededError
from models.entities import Action, Program, SessionUser
from models.enums import ActionStatus, ActivityAction
from models.requests import CreateProgramRequest
from .activity_log import ActivityLogService
from .repository import PlanningRepository

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class PlanningService:
    """Business operations over programs and actions."""

    def __init__(self, repository: PlanningRepository, activity_log: ActivityLogService):
        self.repository = repository
        self.activity_log = activity_log

    def create_program(self, request: CreateProgramRequest, user: Optional[SessionUser] = None) -> Program:
        """
        Create a program, enforcing the per-unit program limit.

        Raises:
            ProgramLimitExceededError: If the unit already has the maximum
                number of programs; nothing is persisted
        """
        with tracer.start_as_current_span("planning.create_program") as span:
            span.set_attribute("program.unit_id", request.unit_id)

            unit_programs = self.repository.get_programs(unit_id=request.unit_id)
            check = check_program_limit(unit_programs)
            if not check.allowed:
                span.set_attribute("program.limit_exceeded", True)
                logger.warning(
                    "Program limit reached",
                    extra={"unit_id": request.unit_id, "program_count": len(unit_programs)}
                )
                raise ProgramLimitExceededError(check.reason, unit_id=request.unit_id)

            program = Program(**request.model_dump())
            self.repository.create_program(program)

            span.set_attribute("program.id", program.id)
            logger.info(
                "Program created",
                extra={"program_id": program.id, "unit_id": program.unit_id}
            )

            self.activity_log.log_activity(
                f'Created program "{program.name}"',
                user=user.display_name if user else None,
                details=program.to_document(),
                entity="program",
                entity_id=program.id,
                action=ActivityAction.CREATE
            )

            return program

    def can_complete(self, action_id: str) -> bool:
        """An action can be completed once at least one evidence is attached."""
        return self.repository.has_evidence(action_id)

    def change_action_status(
        self,
        action_id: str,
        new_status: ActionStatus,
        user: Optional[SessionUser] = None
    ) -> Action:
        """
        Change an action's status, gated on evidence for completion.

        Raises:
            NotFoundException: If the action does not exist
            CompletionBlockedError: If completing an action without evidence
        """
        new_status = ActionStatus(new_status)

        with tracer.start_as_current_span("planning.change_action_status") as span:
            span.set_attributes({"action.id": action_id, "action.new_status": new_status.value})

            action = self.repository.get_action(action_id)
            if action is None:
                raise NotFoundException(f"Action {action_id} not found")

            has_evidence = new_status == ActionStatus.COMPLETED and self.can_complete(action_id)
            check = check_status_change(action, new_status, has_evidence)
            if not check.allowed:
                span.set_attribute("action.completion_blocked", True)
                logger.info(
                    "Completion blocked: no evidence attached",
                    extra={"action_id": action_id}
                )
                raise CompletionBlockedError(check.reason, action_id=action_id)

            updates = {"status": new_status.value}
            diff = calculate_diff(action.to_document(), updates)
            if not diff:
                return action

            self.repository.update_action(action_id, updates)
            updated = action.model_copy(update=updates)

            logger.info(
                "Action status changed",
                extra={
                    "action_id": action_id,
                    "previous_status": action.status,
                    "new_status": new_status.value
                }
            )

            self.activity_log.log_activity(
                f'Updated action "{action.name}"',
                user=user.display_name if user else None,
                details=diff,
                entity="action",
                entity_id=action_id,
                action=ActivityAction.UPDATE
            )

            return updated

    def validate_program(self, program_id: str) -> ValidationResult:
        """
        Validate a program's readiness.

        Raises:
            NotFoundException: If the program does not exist
        """
        with tracer.start_as_current_span("planning.validate_program") as span:
            span.set_attribute("program.id", program_id)

            program = self.repository.get_program(program_id)
            if program is None:
                raise NotFoundException(f"Program {program_id} not found")

            indicators = self.repository.get_indicators(program_id=program_id)
            actions = self.repository.get_actions(program_id=program_id)
            deliverables_by_action = {
                action.id: self.repository.get_deliverables(action_id=action.id)
                for action in actions
            }

            result = validate_program_readiness(indicators, actions, deliverables_by_action)
            span.set_attributes({
                "program.is_valid": result.is_valid,
                "program.error_count": len(result.errors)
            })
            return result

    def get_dashboard_summary(self, user: SessionUser) -> DashboardSummary:
        """Aggregate the dashboard over the programs visible to the user."""
        with tracer.start_as_current_span("planning.dashboard_summary") as span:
            span.set_attributes({"user.id": user.user_id, "user.role": user.role})

            programs = filter_visible_programs(user, self.repository.get_programs())
            program_ids = [program.id for program in programs]

            actions = scope_to_programs(self.repository.get_actions(), program_ids)
            indicators = scope_to_programs(self.repository.get_indicators(), program_ids)

            action_ids = set(action.id for action in actions)
            deliverables = [d for d in self.repository.get_deliverables() if d.action_id in action_ids]

            return build_dashboard_summary(
                programs,
                actions,
                indicators,
                deliverables,
                self.activity_log.get_recent_activity()
            )

    def get_action_with_evidence(self, action_id: str):
        """Load an action and whether it has evidence, for HAL affordances."""
        action = self.repository.get_action(action_id)
        if action is None:
            raise NotFoundException(f"Action {action_id} not found")
        return action, self.repository.has_evidence(action_id)

