# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the SPS planning platform.
"""

# Base models
from .base import BaseEntity, BaseEntityCreate

# Enumerations
from .enums import ActionStatus, UserRole, ActivityAction, ResponsibleMatching

# Core entities
from .entities import (
    Unit,
    Axis,
    Program,
    Project,
    Action,
    Deliverable,
    Indicator,
    Risk,
    Evidence,
    UserProfile,
    ActivityLog,
    SessionUser
)

# Request models
from .requests import (
    CreateProgramRequest,
    UpdateActionStatusRequest,
    ProgramPath,
    ActionPath
)

# Response models
from .responses import (
    HalLink,
    ProgramResponse,
    ActionResponse,
    ReadinessResponse,
    CompletionCheckResponse,
    StatusChangeResponse,
    AutomationRunResponse,
    DashboardSummaryResponse,
    LoginAlertsResponse,
    HealthCheckResponse,
    ErrorResponse
)

__all__ = [
    "BaseEntity",
    "BaseEntityCreate",
    "ActionStatus",
    "UserRole",
    "ActivityAction",
    "ResponsibleMatching",
    "Unit",
    "Axis",
    "Program",
    "Project",
    "Action",
    "Deliverable",
    "Indicator",
    "Risk",
    "Evidence",
    "UserProfile",
    "ActivityLog",
    "SessionUser",
    "CreateProgramRequest",
    "UpdateActionStatusRequest",
    "ProgramPath",
    "ActionPath",
    "HalLink",
    "ProgramResponse",
    "ActionResponse",
    "ReadinessResponse",
    "CompletionCheckResponse",
    "StatusChangeResponse",
    "AutomationRunResponse",
    "DashboardSummaryResponse",
    "LoginAlertsResponse",
    "HealthCheckResponse",
    "ErrorResponse"
]
