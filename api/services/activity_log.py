# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Activity log service.

Records the human-readable activity feed shown on the dashboard. Logging is
best effort: a failure to store an entry never fails the operation that
triggered it.
"""

import logging
from typing import Any, Dict, List, Optional
from opentelemetry import trace

from models.entities import ActivityLog
from models.enums import ActivityAction
from .repository import PlanningRepository

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

SYSTEM_USER = "Sistema"


class ActivityLogService:
    """Service for writing and reading activity feed entries."""

    def __init__(self, repository: PlanningRepository):
        self.repository = repository

    def log_activity(
        self,
        message: str,
        user: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        entity: Optional[str] = None,
        entity_id: Optional[str] = None,
        action: Optional[ActivityAction] = None
    ) -> Optional[ActivityLog]:
        """
        Store an activity entry with trace correlation.

        Args:
            message: Human-readable message
            user: Display name of the actor (defaults to the system user)
            details: Entity snapshot or field diff
            entity: Entity type
            entity_id: Entity identifier
            action: CREATE, UPDATE or DELETE

        Returns:
            The stored entry, or None if it could not be stored
        """
        with tracer.start_as_current_span("activity_log.log_activity") as span:
            span_context = span.get_span_context()
            trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else None

            span.set_attributes({
                "activity.entity": entity or "",
                "activity.entity_id": entity_id or "",
                "activity.action": action or ""
            })

            try:
                entry = ActivityLog(
                    message=message,
                    user=user or SYSTEM_USER,
                    details=details,
                    entity=entity,
                    entity_id=entity_id,
                    action=action
                )
                self.repository.create_activity_log(entry)
            except Exception as e:
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                logger.error(
                    "Failed to create activity log entry",
                    extra={
                        "entity": entity,
                        "entity_id": entity_id,
                        "action": action,
                        "error": str(e)
                    },
                    exc_info=True
                )
                return None

            logger.info(
                "Activity log entry created",
                extra={
                    "activity_id": entry.id,
                    "entity": entity,
                    "entity_id": entity_id,
                    "action": action,
                    "user": entry.user,
                    "trace_id": trace_id
                }
            )
            return entry

    def get_recent_activity(self, limit: int = 5) -> List[ActivityLog]:
        """Latest entries, newest first."""
        return self.repository.get_recent_activity(limit)
