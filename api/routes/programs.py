# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Program endpoints: creation under the per-unit limit and readiness validation.
"""

from flask import jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from domain.authorization import can_edit_program
from models.requests import CreateProgramRequest, ProgramPath
from models.responses import ErrorResponse, ProgramResponse, ReadinessResponse
from middleware.auth import require_auth

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

programs_tag = Tag(name="Programs", description="Strategic program management")
programs_bp = APIBlueprint(
    'programs',
    __name__,
    url_prefix='/api/programs',
    abp_tags=[programs_tag]
)


@programs_bp.post('', responses={201: ProgramResponse, 401: ErrorResponse, 409: ErrorResponse})
@require_auth
def create_program(body: CreateProgramRequest):
    """
    Create a program.

    A unit can own at most five programs; the sixth is rejected with a
    409 problem response and nothing is stored.
    """
    session_user = g.session_user

    with tracer.start_as_current_span(
        "programs.create",
        attributes={"user.id": session_user.user_id, "program.unit_id": body.unit_id}
    ):
        program = current_app.planning_service.create_program(body, session_user)

        payload = ProgramResponse.model_validate(program.model_dump()).model_dump(mode="json")
        response = current_app.hal_formatter.format_program(
            payload,
            can_edit_program(session_user, program)
        )
        return jsonify(response), 201


@programs_bp.get('/<program_id>/readiness', responses={200: ReadinessResponse, 404: ErrorResponse})
@require_auth
def get_program_readiness(path: ProgramPath):
    """
    Validate whether a program is ready.

    Every rule is evaluated and all violations are listed in "errors".
    """
    session_user = g.session_user

    with tracer.start_as_current_span(
        "programs.readiness",
        attributes={"user.id": session_user.user_id, "program.id": path.program_id}
    ) as span:
        result = current_app.planning_service.validate_program(path.program_id)
        span.set_attribute("program.is_valid", result.is_valid)

        program = current_app.repository.get_program(path.program_id)

        payload = ReadinessResponse(
            program_id=path.program_id,
            is_valid=result.is_valid,
            errors=result.errors
        ).model_dump()

        links = current_app.hal_formatter.builder.affordance_builder.build_program_affordances(
            path.program_id,
            program is not None and can_edit_program(session_user, program)
        )
        links['dashboard'] = current_app.hal_formatter.builder.link_builder.build_link(
            "/api/dashboard/summary",
            title="Dashboard summary"
        )

        return jsonify(current_app.hal_formatter.builder.build_resource_response(payload, links))
