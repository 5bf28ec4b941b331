# SPDX-License-Identifier: Apache-2.0

"""
Login alert service.

Loads the session's alert state, scans actions for the current user and
persists the updated state. A failed scan is logged and yields no alerts;
the session state is then left untouched so the next check retries.

Alerts are only returned once the session store has recorded them as
shown. Without a session id or a reachable store no alerts are returned.
"""

import logging
from datetime import date
from typing import Optional
from opentelemetry import trace

from domain.alerts import LoginAlerts, ResponsibleMatcher, collect_login_alerts
from models.entities import SessionUser
from .repository import PlanningRepository
from .session_store import SessionStateService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class LoginAlertService:
    """Computes session-scoped login alerts."""

    def __init__(
        self,
        repository: PlanningRepository,
        session_state: SessionStateService,
        matcher: ResponsibleMatcher
    ):
        self.repository = repository
        self.session_state = session_state
        self.matcher = matcher

    def check_alerts(self, user: SessionUser, today: Optional[date] = None) -> LoginAlerts:
        """
        Return the alerts the user has not yet seen in this session.

        Args:
            user: Current session user
            today: Reference date (defaults to the current local date)

        Returns:
            LoginAlerts, empty when everything was already shown
        """
        today = today or date.today()

        with tracer.start_as_current_span("alerts.check") as span:
            span.set_attributes({
                "user.id": user.user_id,
                "alerts.matcher": type(self.matcher).__name__
            })

            if not user.session_id or not self.session_state.is_available():
                span.set_attribute("alerts.skipped", "session_state_unavailable")
                logger.warning(
                    "Login alerts skipped: session state cannot be recorded",
                    extra={"user_id": user.user_id, "has_session_id": bool(user.session_id)}
                )
                return LoginAlerts()

            state = self.session_state.get_alert_state(user.session_id)

            if state.urgent_alert_shown and state.demands_alert_shown:
                return LoginAlerts()

            try:
                actions = self.repository.get_actions()
            except Exception as e:
                span.record_exception(e)
                logger.error(
                    "Error checking login alerts",
                    extra={"user_id": user.user_id, "error": str(e)},
                    exc_info=True
                )
                return LoginAlerts()

            alerts, new_state = collect_login_alerts(actions, user, state, today, self.matcher)

            if new_state != state and not self.session_state.save_alert_state(user.session_id, new_state):
                span.set_attribute("alerts.skipped", "session_state_write_failed")
                logger.warning(
                    "Login alerts withheld: session state write failed",
                    extra={"user_id": user.user_id}
                )
                return LoginAlerts()

            span.set_attributes({
                "alerts.urgent_count": len(alerts.urgent_actions),
                "alerts.demand_count": len(alerts.pending_demands)
            })

            if not alerts.is_empty():
                logger.info(
                    "Login alerts found",
                    extra={
                        "user_id": user.user_id,
                        "urgent_count": len(alerts.urgent_actions),
                        "demand_count": len(alerts.pending_demands)
                    }
                )

            return alerts
