# SPDX-License-Identifier: Apache-2.0

"""
Authorization domain logic for role-based visibility.

Roles only decide which data a user sees and which affordances are offered;
they are not an enforcement boundary.
"""

from typing import List, Optional
from dataclasses import dataclass
from models.entities import Program, SessionUser
from models.enums import UserRole

GLOBAL_VIEW_ROLES = [UserRole.ADMIN.value, UserRole.PREFEITO.value, UserRole.CONTROLADORIA.value]
UNIT_EDIT_ROLES = [UserRole.GESTOR.value, UserRole.FOCAL.value]


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""
    allowed: bool
    reason: Optional[str] = None


def has_global_view(user: SessionUser) -> bool:
    """Admin, mayor and comptroller roles see every unit."""
    return user.has_role(GLOBAL_VIEW_ROLES)


def check_program_edit(user: SessionUser, program: Program) -> AuthorizationResult:
    """
    Check if a user may edit a program and its children.

    Args:
        user: Current user
        program: Program being edited

    Returns:
        AuthorizationResult indicating if editing is offered
    """
    if user.role == UserRole.ADMIN:
        return AuthorizationResult(allowed=True)

    if not user.has_role(UNIT_EDIT_ROLES):
        return AuthorizationResult(
            allowed=False,
            reason=f"Role '{user.role}' is read-only"
        )

    if not user.unit_id or user.unit_id != program.unit_id:
        return AuthorizationResult(
            allowed=False,
            reason=f"Program belongs to another unit ({program.unit_id})"
        )

    return AuthorizationResult(allowed=True)


def can_edit_program(user: SessionUser, program: Program) -> bool:
    return check_program_edit(user, program).allowed


def filter_visible_programs(user: SessionUser, programs: List[Program]) -> List[Program]:
    """
    Restrict programs to what the user may see.

    Global roles see everything, unit-affiliated users see their unit's
    programs, everyone else sees nothing.
    """
    if has_global_view(user):
        return list(programs)

    if user.unit_id:
        return [p for p in programs if p.unit_id == user.unit_id]

    return []
