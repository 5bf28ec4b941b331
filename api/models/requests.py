# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from .base import BaseEntityCreate
from .enums import ActionStatus


class CreateProgramRequest(BaseEntityCreate):
    """Request model for creating a program."""

    unit_id: str = Field(..., min_length=1, description="Owning unit ID")
    axis_id: str = Field(..., min_length=1, description="Strategic axis ID")
    name: str = Field(..., min_length=1, max_length=200, description="Program name")
    objective: str = Field(default="", max_length=4000, description="Program objective")
    public_problem: str = Field(default="", max_length=4000, description="Public problem addressed")
    target_audience: str = Field(default="", max_length=2000, description="Target audience")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate program name."""
        if not v.strip():
            raise ValueError('Program name cannot be empty')
        return v.strip()


class UpdateActionStatusRequest(BaseEntityCreate):
    """Request model for changing an action's status."""

    status: ActionStatus = Field(..., description="New lifecycle status")


class ProgramPath(BaseModel):
    """Path parameters for program-scoped endpoints."""

    program_id: str = Field(..., description="Program ID")


class ActionPath(BaseModel):
    """Path parameters for action-scoped endpoints."""

    action_id: str = Field(..., description="Action ID")
