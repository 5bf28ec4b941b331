# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Planning repository interface.

Business rules depend only on PlanningRepository. Adapters implement a small
set of document primitives (find/get/insert/update/delete); the typed entity
methods are built on top of them and can be overridden where a backend has a
better native operation (batch writes, limited queries, sorting).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Type
from pydantic import ValidationError
from models.base import BaseEntity, utc_now
from models.enums import ActionStatus
from models.entities import (
    Action, ActivityLog, Axis, Deliverable, Evidence, Indicator,
    Program, Project, Risk, Unit, UserProfile
)

logger = logging.getLogger(__name__)

# Collection names shared by every adapter
UNITS = "units"
AXES = "axes"
PROGRAMS = "programs"
PROJECTS = "projects"
ACTIONS = "actions"
INDICATORS = "indicators"
DELIVERABLES = "deliverables"
RISKS = "risks"
EVIDENCES = "evidences"
USERS = "users"
LOGS = "logs"

COLLECTIONS = [UNITS, AXES, PROGRAMS, PROJECTS, ACTIONS, INDICATORS,
               DELIVERABLES, RISKS, EVIDENCES, USERS, LOGS]


class RepositoryError(Exception):
    """Raised when the storage backend fails or is unreachable."""

    def __init__(self, message: str, collection: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.collection = collection


def _parent_filter(**parents: Optional[str]) -> Dict[str, Any]:
    """Build a camelCase document filter from parent-id keyword arguments."""
    filters = {}
    for name, value in parents.items():
        if value is None:
            continue
        head, *rest = name.split("_")
        filters[head + "".join(part.capitalize() for part in rest)] = value
    return filters


class PlanningRepository(ABC):
    """Typed persistence operations for planning entities."""

    name = "abstract"

    # Document primitives

    @abstractmethod
    def _find(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Return documents matching equality filters. Each carries an 'id' key."""

    @abstractmethod
    def _get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return a single document by id, or None."""

    @abstractmethod
    def _insert(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        """Store a new document under the given id."""

    @abstractmethod
    def _update(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> bool:
        """Merge fields into an existing document. Returns False if it does not exist."""

    @abstractmethod
    def _delete(self, collection: str, doc_id: str) -> bool:
        """Remove a document. Returns False if it does not exist."""

    def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "backend": self.name}

    # Generic entity helpers

    def _list(self, model: Type[BaseEntity], collection: str, filters: Optional[Dict[str, Any]] = None) -> List:
        return self._to_entities(model, collection, self._find(collection, filters))

    def _to_entities(self, model: Type[BaseEntity], collection: str, documents: Iterable[Dict[str, Any]]) -> List:
        """Validate documents one by one; invalid rows are logged and skipped."""
        entities = []
        for document in documents:
            try:
                entities.append(model.from_document(document, document.get("id")))
            except ValidationError as e:
                logger.warning(
                    f"Skipping invalid {collection} document {document.get('id')}",
                    extra={"backend": self.name, "collection": collection, "error_count": e.error_count()}
                )
        return entities

    def _get_entity(self, model: Type[BaseEntity], collection: str, doc_id: str):
        document = self._get(collection, doc_id)
        if document is None:
            return None
        return model.from_document(document, doc_id)

    def _create_entity(self, collection: str, entity: BaseEntity) -> BaseEntity:
        self._insert(collection, entity.id, entity.to_document())
        logger.debug(f"Created {collection} document {entity.id}", extra={"backend": self.name})
        return entity

    def _update_entity(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> bool:
        updates = dict(updates)
        updates["updatedAt"] = utc_now().isoformat()
        return self._update(collection, doc_id, updates)

    # Reference data

    def get_axes(self) -> List[Axis]:
        return self._list(Axis, AXES)

    def create_axis(self, axis: Axis) -> Axis:
        return self._create_entity(AXES, axis)

    def get_units(self) -> List[Unit]:
        return self._list(Unit, UNITS)

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self._get_entity(Unit, UNITS, unit_id)

    def create_unit(self, unit: Unit) -> Unit:
        return self._create_entity(UNITS, unit)

    # Programs and children

    def get_programs(self, unit_id: Optional[str] = None) -> List[Program]:
        return self._list(Program, PROGRAMS, _parent_filter(unit_id=unit_id))

    def get_program(self, program_id: str) -> Optional[Program]:
        return self._get_entity(Program, PROGRAMS, program_id)

    def create_program(self, program: Program) -> Program:
        return self._create_entity(PROGRAMS, program)

    def update_program(self, program_id: str, updates: Dict[str, Any]) -> bool:
        return self._update_entity(PROGRAMS, program_id, updates)

    def delete_program(self, program_id: str) -> bool:
        return self._delete(PROGRAMS, program_id)

    def get_projects(self, program_id: Optional[str] = None) -> List[Project]:
        return self._list(Project, PROJECTS, _parent_filter(program_id=program_id))

    def create_project(self, project: Project) -> Project:
        return self._create_entity(PROJECTS, project)

    def get_actions(self, program_id: Optional[str] = None, project_id: Optional[str] = None) -> List[Action]:
        return self._list(Action, ACTIONS, _parent_filter(program_id=program_id, project_id=project_id))

    def get_action(self, action_id: str) -> Optional[Action]:
        return self._get_entity(Action, ACTIONS, action_id)

    def create_action(self, action: Action) -> Action:
        return self._create_entity(ACTIONS, action)

    def update_action(self, action_id: str, updates: Dict[str, Any]) -> bool:
        return self._update_entity(ACTIONS, action_id, updates)

    def delete_action(self, action_id: str) -> bool:
        return self._delete(ACTIONS, action_id)

    def update_action_statuses(self, changes: List) -> int:
        """
        Persist a batch of status changes.

        Backends without a native batch write apply the changes one by one.

        Args:
            changes: StatusChange items

        Returns:
            Number of actions updated
        """
        updated = 0
        for change in changes:
            if self._update_entity(ACTIONS, change.action_id, {"status": ActionStatus(change.new_status).value}):
                updated += 1
        return updated

    def get_indicators(self, program_id: Optional[str] = None) -> List[Indicator]:
        return self._list(Indicator, INDICATORS, _parent_filter(program_id=program_id))

    def create_indicator(self, indicator: Indicator) -> Indicator:
        return self._create_entity(INDICATORS, indicator)

    def get_deliverables(self, action_id: Optional[str] = None) -> List[Deliverable]:
        return self._list(Deliverable, DELIVERABLES, _parent_filter(action_id=action_id))

    def create_deliverable(self, deliverable: Deliverable) -> Deliverable:
        return self._create_entity(DELIVERABLES, deliverable)

    def get_risks(self, program_id: Optional[str] = None) -> List[Risk]:
        return self._list(Risk, RISKS, _parent_filter(program_id=program_id))

    def create_risk(self, risk: Risk) -> Risk:
        return self._create_entity(RISKS, risk)

    def get_evidences(self, action_id: Optional[str] = None) -> List[Evidence]:
        return self._list(Evidence, EVIDENCES, _parent_filter(action_id=action_id))

    def create_evidence(self, evidence: Evidence) -> Evidence:
        return self._create_entity(EVIDENCES, evidence)

    def has_evidence(self, action_id: str) -> bool:
        return len(self._find(EVIDENCES, {"actionId": action_id})) > 0

    # Users

    def get_users(self) -> List[UserProfile]:
        return self._list(UserProfile, USERS)

    def get_user(self, uid: str) -> Optional[UserProfile]:
        return self._get_entity(UserProfile, USERS, uid)

    def create_user(self, user: UserProfile) -> UserProfile:
        return self._create_entity(USERS, user)

    # Activity log

    def create_activity_log(self, entry: ActivityLog) -> ActivityLog:
        return self._create_entity(LOGS, entry)

    def get_recent_activity(self, limit: int = 5) -> List[ActivityLog]:
        """Latest activity entries, newest first."""
        entries = self._list(ActivityLog, LOGS)
        entries.sort(key=lambda entry: entry.created_at, reverse=True)
        return entries[:limit]
