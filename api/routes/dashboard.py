# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Dashboard endpoints: role-scoped summary and session-scoped login alerts.
"""

from dataclasses import asdict
from flask import jsonify, current_app, g
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging

from models.responses import DashboardSummaryResponse, LoginAlertsResponse
from middleware.auth import require_auth
from routes.actions import serialize_action

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

dashboard_tag = Tag(name="Dashboard", description="Aggregated planning views")
dashboard_bp = APIBlueprint(
    'dashboard',
    __name__,
    url_prefix='/api/dashboard',
    abp_tags=[dashboard_tag]
)


@dashboard_bp.get('/summary', responses={200: DashboardSummaryResponse})
@require_auth
def get_dashboard_summary():
    """
    Dashboard totals, action status counts and program health.

    Admin, mayor and comptroller roles see every unit; other users see their
    own unit; users without a unit see nothing.
    """
    session_user = g.session_user

    with tracer.start_as_current_span(
        "dashboard.summary",
        attributes={"user.id": session_user.user_id, "user.role": session_user.role}
    ):
        summary = current_app.planning_service.get_dashboard_summary(session_user)
        payload = DashboardSummaryResponse(**asdict(summary)).model_dump()

        link_builder = current_app.hal_formatter.builder.link_builder
        links = {
            'self': link_builder.build_self_link("/api/dashboard/summary"),
            'alerts': link_builder.build_link("/api/dashboard/alerts", title="Login alerts"),
            'automation': link_builder.build_link(
                "/api/automation/status",
                method="POST",
                title="Run status automation"
            )
        }
        return jsonify(current_app.hal_formatter.builder.build_resource_response(payload, links))


@dashboard_bp.get('/alerts', responses={200: LoginAlertsResponse})
@require_auth
def get_login_alerts():
    """
    Login alerts not yet shown in this session.

    Lists delayed or overdue actions the user is responsible for and open
    meeting demands assigned to them. Each alert is returned once per session.
    """
    session_user = g.session_user

    with tracer.start_as_current_span(
        "dashboard.alerts",
        attributes={"user.id": session_user.user_id}
    ):
        alerts = current_app.alert_service.check_alerts(session_user)

        payload = LoginAlertsResponse(
            urgent_actions=[serialize_action(a) for a in alerts.urgent_actions],
            pending_demands=[serialize_action(a) for a in alerts.pending_demands]
        ).model_dump()

        links = {
            'self': current_app.hal_formatter.builder.link_builder.build_self_link("/api/dashboard/alerts")
        }
        return jsonify(current_app.hal_formatter.builder.build_resource_response(payload, links))
