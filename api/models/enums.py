# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the SPS strategic planning platform.
"""

from enum import Enum


class ActionStatus(str, Enum):
    """Action lifecycle status enumeration."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DELAYED = "delayed"
    COMPLETED = "completed"


class UserRole(str, Enum):
    """User profile roles."""
    ADMIN = "admin"
    GESTOR = "gestor"
    FOCAL = "focal"
    CONTROLADORIA = "controladoria"
    PREFEITO = "prefeito"
    LEITURA = "leitura"


class ActivityAction(str, Enum):
    """Activity log action types."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ResponsibleMatching(str, Enum):
    """Strategies for deciding whether a user is responsible for an action."""
    FUZZY = "fuzzy"
    IDENTIFIER = "identifier"
    IDENTIFIER_WITH_FALLBACK = "identifier_with_fallback"
