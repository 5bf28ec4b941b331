# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints with HAL support.
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime


class HalLink(BaseModel):
    """HAL link representation."""

    href: str = Field(..., description="Link URL")
    method: Optional[str] = Field(None, description="HTTP method")
    type: Optional[str] = Field(None, description="Content type")
    title: Optional[str] = Field(None, description="Link title")
    templated: Optional[bool] = Field(None, description="Whether URL is templated")


class ProgramResponse(BaseModel):
    """Program response model."""

    id: str = Field(..., description="Program ID")
    unit_id: str = Field(..., description="Owning unit ID")
    axis_id: str = Field(..., description="Strategic axis ID")
    name: str = Field(..., description="Program name")
    objective: str = Field(default="", description="Program objective")
    public_problem: str = Field(default="", description="Public problem addressed")
    target_audience: str = Field(default="", description="Target audience")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class ActionResponse(BaseModel):
    """Action response model."""

    id: str = Field(..., description="Action ID")
    program_id: str = Field(..., description="Parent program ID")
    project_id: Optional[str] = Field(None, description="Parent project ID")
    name: str = Field(..., description="Action name")
    responsible: str = Field(default="", description="Responsible party")
    responsible_id: Optional[str] = Field(None, description="Responsible user ID")
    start_date: Optional[str] = Field(None, description="Start date")
    end_date: Optional[str] = Field(None, description="End date")
    status: str = Field(..., description="Lifecycle status")
    is_meeting_demand: bool = Field(default=False, description="Meeting deliberation flag")


class ReadinessResponse(BaseModel):
    """Program readiness validation result."""

    program_id: str = Field(..., description="Program ID")
    is_valid: bool = Field(..., description="Whether the program is ready")
    errors: List[str] = Field(default_factory=list, description="Readiness violations")


class CompletionCheckResponse(BaseModel):
    """Completion gate check result."""

    action_id: str = Field(..., description="Action ID")
    can_complete: bool = Field(..., description="Whether the action has evidence attached")


class StatusChangeResponse(BaseModel):
    """Single automated status transition."""

    action_id: str = Field(..., description="Action ID")
    action_name: str = Field(..., description="Action name")
    previous_status: str = Field(..., description="Status before automation")
    new_status: str = Field(..., description="Status after automation")


class AutomationRunResponse(BaseModel):
    """Status automation run summary."""

    updated_count: int = Field(..., description="Number of actions updated")
    reference_date: str = Field(..., description="Date deadlines were evaluated against")
    changes: List[StatusChangeResponse] = Field(default_factory=list, description="Applied transitions")
    error: Optional[str] = Field(None, description="Swallowed failure, if any")


class DashboardSummaryResponse(BaseModel):
    """Aggregated dashboard data."""

    totals: Dict[str, int] = Field(..., description="Entity totals")
    action_status: Dict[str, int] = Field(..., description="Action counts per status")
    program_health: Dict[str, int] = Field(..., description="Ready and pending program counts")
    recent_activity: List[Dict[str, Any]] = Field(default_factory=list, description="Latest activity entries")


class LoginAlertsResponse(BaseModel):
    """Session-scoped login alerts."""

    urgent_actions: List[ActionResponse] = Field(default_factory=list, description="Delayed or overdue actions")
    pending_demands: List[ActionResponse] = Field(default_factory=list, description="Open meeting demands")


class HealthCheckResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    timestamp: datetime = Field(..., description="Check timestamp")
    dependencies: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Dependency health")


class ErrorResponse(BaseModel):
    """Error response model following RFC 7807."""

    type: str = Field(..., description="Error type URI")
    title: str = Field(..., description="Error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Error detail")
    instance: str = Field(..., description="Request instance")
    errors: Optional[List[Any]] = Field(None, description="Validation errors")

