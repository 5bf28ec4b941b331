# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for token verification and the activity log service.
"""

import jwt
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from models.enums import ActivityAction
from services.activity_log import SYSTEM_USER, ActivityLogService
from services.auth import AuthService, TokenValidationError

SECRET = "unit-test-secret-key-for-hs256-signing"


class TestAuthService:
    """Test JWT issuing and validation."""

    def setup_method(self):
        self.auth_service = AuthService(SECRET)

    def test_issue_and_validate(self):
        """Test that issued tokens carry the user's claims."""
        token = self.auth_service.issue_token("u1", "Ana", "gestor", unit_id="unit-1", session_id="s1")

        payload = self.auth_service.validate_token(token)

        assert payload["sub"] == "u1"
        assert payload["name"] == "Ana"
        assert payload["role"] == "gestor"
        assert payload["unit_id"] == "unit-1"
        assert payload["sid"] == "s1"

    def test_session_id_generated(self):
        """Test that a session id is generated when omitted."""
        payload = self.auth_service.validate_token(self.auth_service.issue_token("u1", "Ana", "leitura"))

        assert payload["sid"]

    def test_expired_token(self):
        """Test that expired tokens are rejected."""
        token = jwt.encode(
            {"sub": "u1", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            SECRET,
            algorithm="HS256"
        )

        with pytest.raises(TokenValidationError, match="expired"):
            self.auth_service.validate_token(token)

    def test_wrong_secret(self):
        """Test that tokens signed with another key are rejected."""
        other = AuthService("another-secret-key-for-hs256-signing!!")

        with pytest.raises(TokenValidationError):
            self.auth_service.validate_token(other.issue_token("u1", "Ana", "admin"))

    def test_missing_subject(self):
        """Test that tokens without a subject are rejected."""
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256"
        )

        with pytest.raises(TokenValidationError):
            self.auth_service.validate_token(token)

    def test_garbage_token(self):
        """Test that malformed tokens are rejected."""
        with pytest.raises(TokenValidationError):
            self.auth_service.validate_token("not-a-jwt")


class TestActivityLogService:
    """Test activity feed writes."""

    def test_log_activity(self, repository):
        """Test that entries are stored with their details."""
        service = ActivityLogService(repository)

        entry = service.log_activity(
            'Updated action "A"',
            user="Ana",
            details={"status": {"old": "in_progress", "new": "delayed"}},
            entity="action",
            entity_id="a1",
            action=ActivityAction.UPDATE
        )

        assert entry is not None
        stored = service.get_recent_activity()
        assert len(stored) == 1
        assert stored[0].id == entry.id
        assert stored[0].details["status"]["new"] == "delayed"
        assert stored[0].action == "UPDATE"

    def test_defaults_to_system_user(self, repository):
        """Test the default actor."""
        entry = ActivityLogService(repository).log_activity("Automação executada")

        assert entry.user == SYSTEM_USER

    def test_failure_is_swallowed(self):
        """Test that storage failures never propagate."""
        repository = Mock()
        repository.create_activity_log.side_effect = RuntimeError("disk full")

        assert ActivityLogService(repository).log_activity("Mensagem") is None

    def test_recent_activity_limit(self, repository):
        """Test the default feed size."""
        service = ActivityLogService(repository)
        for i in range(8):
            service.log_activity(f"Entrada {i}")

        assert len(service.get_recent_activity()) == 5
        assert len(service.get_recent_activity(limit=2)) == 2
