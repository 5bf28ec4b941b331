# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Action endpoints: completion gate check and status changes.
"""

from flask import jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from domain.authorization import can_edit_program
from models.entities import Action, SessionUser
from models.requests import ActionPath, UpdateActionStatusRequest
from models.responses import ActionResponse, CompletionCheckResponse, ErrorResponse
from middleware.auth import require_auth

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

actions_tag = Tag(name="Actions", description="Action execution tracking")
actions_bp = APIBlueprint(
    'actions',
    __name__,
    url_prefix='/api/actions',
    abp_tags=[actions_tag]
)


def _can_edit_action(user: SessionUser, action: Action) -> bool:
    program = current_app.repository.get_program(action.program_id)
    return program is not None and can_edit_program(user, program)


def serialize_action(action: Action) -> dict:
    """Action as a JSON-ready dict with ISO dates."""
    return ActionResponse.model_validate(action.model_dump(mode="json")).model_dump()


@actions_bp.get('/<action_id>/completion', responses={200: CompletionCheckResponse, 404: ErrorResponse})
@require_auth
def get_completion_check(path: ActionPath):
    """
    Check whether an action can be marked as completed.

    Completion requires at least one attached evidence.
    """
    session_user = g.session_user

    with tracer.start_as_current_span(
        "actions.completion_check",
        attributes={"user.id": session_user.user_id, "action.id": path.action_id}
    ) as span:
        action, has_evidence = current_app.planning_service.get_action_with_evidence(path.action_id)
        span.set_attribute("action.can_complete", has_evidence)

        payload = CompletionCheckResponse(action_id=action.id, can_complete=has_evidence).model_dump()

        links = current_app.hal_formatter.builder.affordance_builder.build_action_affordances(
            action.id,
            action.status,
            _can_edit_action(session_user, action),
            has_evidence
        )

        return jsonify(current_app.hal_formatter.builder.build_resource_response(payload, links))


@actions_bp.put('/<action_id>/status', responses={200: ActionResponse, 400: ErrorResponse, 404: ErrorResponse})
@require_auth
def change_action_status(path: ActionPath, body: UpdateActionStatusRequest):
    """
    Change an action's status.

    Marking an action as completed without evidence is rejected with a 400
    problem response and the status stays unchanged.
    """
    session_user = g.session_user

    with tracer.start_as_current_span(
        "actions.change_status",
        attributes={
            "user.id": session_user.user_id,
            "action.id": path.action_id,
            "action.new_status": body.status
        }
    ):
        action = current_app.planning_service.change_action_status(
            path.action_id,
            body.status,
            session_user
        )

        response = current_app.hal_formatter.format_action(
            serialize_action(action),
            _can_edit_action(session_user, action),
            current_app.repository.has_evidence(action.id)
        )
        return jsonify(response)
