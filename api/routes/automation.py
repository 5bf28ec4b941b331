# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Status automation endpoint, called by clients when a session loads.
"""

from flask import jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from models.responses import AutomationRunResponse, StatusChangeResponse
from middleware.auth import require_auth

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

automation_tag = Tag(name="Automation", description="Deadline-driven status automation")
automation_bp = APIBlueprint(
    'automation',
    __name__,
    url_prefix='/api/automation',
    abp_tags=[automation_tag]
)


@automation_bp.post('/status', responses={200: AutomationRunResponse})
@require_auth
def run_status_automation():
    """
    Run the status automation over all actions against the current date.

    Overdue actions become "delayed"; delayed actions whose deadline moved
    to today or later return to "in_progress". Failures are reported in the
    "error" field with a count of zero.
    """
    with tracer.start_as_current_span(
        "automation.endpoint",
        attributes={"user.id": g.session_user.user_id}
    ):
        result = current_app.automation_service.run()

        payload = AutomationRunResponse(
            updated_count=result.updated_count,
            reference_date=result.reference_date.isoformat(),
            changes=[
                StatusChangeResponse(
                    action_id=change.action_id,
                    action_name=change.action_name,
                    previous_status=change.previous_status.value,
                    new_status=change.new_status.value
                )
                for change in result.changes
            ],
            error=result.error
        ).model_dump()

        links = {
            'self': current_app.hal_formatter.builder.link_builder.build_link(
                "/api/automation/status",
                method="POST",
                title="Run status automation"
            )
        }
        return jsonify(current_app.hal_formatter.builder.build_resource_response(payload, links))
