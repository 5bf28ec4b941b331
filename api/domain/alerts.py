# SPDX-License-Identifier: Apache-2.0

"""
Login alert domain logic.

Detects the actions a user should be warned about when a session starts:
delayed or overdue actions they are responsible for, and open meeting
demands assigned to them. Session deduplication is explicit state passed in
and returned, never ambient storage.
"""

import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Tuple
from models.entities import Action, SessionUser
from models.enums import ActionStatus, ResponsibleMatching


def normalize_name(value: str) -> str:
    """Lowercase, trim and strip diacritics ("José " -> "jose")."""
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower().strip()


class ResponsibleMatcher(ABC):
    """Strategy deciding whether a user is responsible for an action."""

    @abstractmethod
    def matches(self, action: Action, user: SessionUser) -> bool:
        raise NotImplementedError


class IdentifierMatcher(ResponsibleMatcher):
    """Strict match on the action's responsible user ID."""

    def matches(self, action: Action, user: SessionUser) -> bool:
        return bool(action.responsible_id) and action.responsible_id == user.user_id


class FuzzyNameMatcher(ResponsibleMatcher):
    """
    Free-text match between the action's responsible field and the user's
    display name.

    Containment is checked in both directions after normalization so that
    partial entries ("Maria" vs "Maria da Silva") still match. This can both
    under- and over-match; it is kept as a deprecated fallback for actions
    without a responsible user ID.
    """

    def matches(self, action: Action, user: SessionUser) -> bool:
        responsible = normalize_name(action.responsible)
        display_name = normalize_name(user.display_name)

        if not responsible or not display_name:
            return False

        return display_name in responsible or responsible in display_name


class IdentifierWithNameFallbackMatcher(ResponsibleMatcher):
    """Identifier match when the action has a responsible ID, name match otherwise."""

    def __init__(self):
        self.identifier = IdentifierMatcher()
        self.fallback = FuzzyNameMatcher()

    def matches(self, action: Action, user: SessionUser) -> bool:
        if action.responsible_id:
            return self.identifier.matches(action, user)
        return self.fallback.matches(action, user)


def build_matcher(strategy: str) -> ResponsibleMatcher:
    """Build the matcher for a configured strategy name."""
    strategy = ResponsibleMatching(strategy)

    if strategy == ResponsibleMatching.IDENTIFIER:
        return IdentifierMatcher()
    if strategy == ResponsibleMatching.IDENTIFIER_WITH_FALLBACK:
        return IdentifierWithNameFallbackMatcher()
    return FuzzyNameMatcher()


@dataclass(frozen=True)
class AlertSessionState:
    """Which login alerts were already shown in the current session."""
    urgent_alert_shown: bool = False
    demands_alert_shown: bool = False


@dataclass
class LoginAlerts:
    """Alerts to surface to the user."""
    urgent_actions: List[Action] = field(default_factory=list)
    pending_demands: List[Action] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.urgent_actions and not self.pending_demands


def is_urgent(action: Action, today: date) -> bool:
    """Delayed, or in progress with a deadline already past."""
    if action.status == ActionStatus.DELAYED:
        return True
    return (
        action.status == ActionStatus.IN_PROGRESS
        and action.end_date is not None
        and action.end_date < today
    )


def find_urgent_actions(
    actions: List[Action],
    user: SessionUser,
    today: date,
    matcher: ResponsibleMatcher
) -> List[Action]:
    """Urgent actions the user is responsible for."""
    return [a for a in actions if is_urgent(a, today) and matcher.matches(a, user)]


def find_pending_demands(actions: List[Action], user: SessionUser) -> List[Action]:
    """Open meeting demands assigned to the user by ID."""
    identifier = IdentifierMatcher()
    return [
        a for a in actions
        if a.is_meeting_demand
        and a.status != ActionStatus.COMPLETED
        and identifier.matches(a, user)
    ]


def collect_login_alerts(
    actions: List[Action],
    user: SessionUser,
    state: AlertSessionState,
    today: date,
    matcher: ResponsibleMatcher
) -> Tuple[LoginAlerts, AlertSessionState]:
    """
    Compute the alerts to show and the resulting session state.

    The urgent-action alert is marked as shown after every scan, even an
    empty one. The meeting-demand alert is only marked once demands were
    actually found.

    Args:
        actions: All actions
        user: Current user
        state: Session state before this check
        today: Reference date
        matcher: Responsible matching strategy for urgent actions

    Returns:
        Tuple of (alerts to show, new session state)
    """
    alerts = LoginAlerts()
    new_state = state

    if not state.urgent_alert_shown and user.display_name:
        alerts.urgent_actions = find_urgent_actions(actions, user, today, matcher)
        new_state = replace(new_state, urgent_alert_shown=True)

    if not state.demands_alert_shown:
        alerts.pending_demands = find_pending_demands(actions, user)
        if alerts.pending_demands:
            new_state = replace(new_state, demands_alert_shown=True)

    return alerts, new_state
