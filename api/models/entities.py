# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the SPS strategic planning platform.
"""

import re
from datetime import date
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, computed_field, ConfigDict
from .base import BaseEntity, coerce_date
from .enums import ActionStatus, UserRole, ActivityAction


class Unit(BaseEntity):
    """Administrative secretariat that owns programs."""

    name: str = Field(..., min_length=1, max_length=200, description="Unit name")
    acronym: str = Field(..., min_length=1, max_length=20, description="Unit acronym (e.g. SEMED)")

    @field_validator('name', 'acronym')
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()


class Axis(BaseEntity):
    """Strategic theme tag, seeded at setup time."""

    name: str = Field(..., min_length=1, max_length=200, description="Axis name")
    color: str = Field(..., description="UI color name")


class Program(BaseEntity):
    """Strategic initiative owned by a unit."""

    unit_id: str = Field(..., description="Owning unit ID")
    axis_id: str = Field(..., description="Strategic axis ID")
    name: str = Field(..., min_length=1, max_length=200, description="Program name")
    objective: str = Field(default="", description="Program objective")
    public_problem: str = Field(default="", description="Public problem addressed")
    target_audience: str = Field(default="", description="Target audience")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate program name."""
        if not v.strip():
            raise ValueError('Program name cannot be empty')
        return v.strip()


class Project(BaseEntity):
    """Grouping of actions inside a program."""

    program_id: str = Field(..., description="Parent program ID")
    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    description: Optional[str] = Field(None, description="Project description")
    responsible: str = Field(default="", description="Responsible party (free text)")
    start_date: Optional[date] = Field(None, description="Start date")
    end_date: Optional[date] = Field(None, description="End date")
    status: ActionStatus = Field(default=ActionStatus.NOT_STARTED, description="Project status")

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def truncate_dates(cls, v):
        return coerce_date(v)


class Action(BaseEntity):
    """Execution-level task under a program."""

    program_id: str = Field(..., description="Parent program ID")
    project_id: Optional[str] = Field(None, description="Optional parent project ID")
    name: str = Field(..., min_length=1, max_length=300, description="Action name")
    description: Optional[str] = Field(None, description="Action description")
    responsible: str = Field(default="", description="Responsible party (free text)")
    responsible_id: Optional[str] = Field(None, description="Responsible user ID")
    start_date: Optional[date] = Field(None, description="Start date")
    end_date: Optional[date] = Field(None, description="End date (deadline)")
    status: ActionStatus = Field(default=ActionStatus.NOT_STARTED, description="Lifecycle status")
    weight: float = Field(default=1, ge=0, description="Relative weight")
    is_meeting_demand: bool = Field(default=False, description="Raised as a meeting deliberation")

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def truncate_dates(cls, v):
        return coerce_date(v)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate action name."""
        if not v.strip():
            raise ValueError('Action name cannot be empty')
        return v.strip()


class Deliverable(BaseEntity):
    """Quantified output of an action."""

    action_id: str = Field(..., description="Parent action ID")
    description: str = Field(..., min_length=1, description="Deliverable description")
    delivery_date: Optional[date] = Field(None, alias="date", description="Delivery date")
    quantity: float = Field(default=0, ge=0, description="Delivered quantity")
    unit: str = Field(default="und", description="Unit of measure (und, kg, km...)")

    @field_validator('delivery_date', mode='before')
    @classmethod
    def truncate_date(cls, v):
        return coerce_date(v)


class Indicator(BaseEntity):
    """Target metric for a program."""

    program_id: str = Field(..., description="Parent program ID")
    name: str = Field(..., min_length=1, max_length=200, description="Indicator name")
    description: str = Field(default="", description="Indicator description")
    baseline: float = Field(default=0, description="Baseline value")
    target: float = Field(default=0, description="Target value")
    unit: str = Field(default="%", description="Unit of measure (%, #, R$...)")


class Risk(BaseEntity):
    """Scored threat to a program."""

    program_id: str = Field(..., description="Parent program ID")
    description: str = Field(..., min_length=1, description="Risk description")
    impact: int = Field(..., ge=1, le=5, description="Impact (1-5)")
    probability: int = Field(..., ge=1, le=5, description="Probability (1-5)")
    mitigation: str = Field(default="", description="Mitigation plan")

    @computed_field
    @property
    def severity(self) -> int:
        """Impact x probability."""
        return self.impact * self.probability


class Evidence(BaseEntity):
    """Proof artifact attached to an action."""

    action_id: str = Field(..., description="Parent action ID")
    url: str = Field(..., min_length=1, description="Retrievable file URL")
    file_name: Optional[str] = Field(None, description="Original file name")
    content_type: Optional[str] = Field(None, description="MIME type")
    description: Optional[str] = Field(None, description="Evidence description")
    uploaded_by: Optional[str] = Field(None, description="Uploader display name")


class UserProfile(BaseEntity):
    """Identity and role of a platform user. The entity id is the identity uid."""

    email: str = Field(..., description="User email address")
    display_name: str = Field(..., min_length=1, max_length=200, description="Display name")
    role: UserRole = Field(default=UserRole.LEITURA, description="User role")
    unit_id: Optional[str] = Field(None, description="Affiliated unit ID")
    active: bool = Field(default=True, description="Whether the user can log in")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Validate email format."""
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, v.lower()):
            raise ValueError('Invalid email format')
        return v.lower()

    @property
    def uid(self) -> str:
        return self.id


class ActivityLog(BaseEntity):
    """Activity feed entry with optional field diff."""

    message: str = Field(..., description="Human-readable message")
    user: str = Field(default="Sistema", description="Display name of the actor")
    details: Optional[Dict[str, Any]] = Field(None, description="Entity snapshot or field diff")
    entity: Optional[str] = Field(None, description="Entity type")
    entity_id: Optional[str] = Field(None, description="Entity identifier")
    action: Optional[ActivityAction] = Field(None, description="Action performed")


class SessionUser(BaseModel):
    """Authenticated user for request processing, built from verified token claims."""

    user_id: str = Field(..., description="Authenticated user ID")
    display_name: str = Field(default="", description="User display name")
    role: UserRole = Field(default=UserRole.LEITURA, description="User role")
    unit_id: Optional[str] = Field(None, description="Affiliated unit ID")
    email: Optional[str] = Field(None, description="User email")
    session_id: Optional[str] = Field(None, description="Session identifier")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")
    token_payload: Optional[Dict[str, Any]] = Field(None, description="Original JWT payload")

    model_config = ConfigDict(
        use_enum_values=True
    )

    def has_role(self, roles: List[str]) -> bool:
        """Check if the user holds any of the given roles."""
        return self.role in roles
