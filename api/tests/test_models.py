# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for Pydantic models and validation.
"""

import pytest
from datetime import date
from pydantic import ValidationError
from models.entities import (
    Action, ActivityLog, Deliverable, Program, Risk, SessionUser, Unit, UserProfile
)
from models.enums import ActionStatus, UserRole
from models.requests import CreateProgramRequest, UpdateActionStatusRequest


class TestDocuments:
    """Test storage document conversion."""

    def test_to_document_uses_camel_case_without_id(self):
        """Test that documents are camelCase and carry no id."""
        program = Program(unit_id="u1", axis_id="2", name="Saúde na Escola", public_problem="Evasão")

        document = program.to_document()

        assert "id" not in document
        assert document["unitId"] == "u1"
        assert document["axisId"] == "2"
        assert document["publicProblem"] == "Evasão"
        assert isinstance(document["createdAt"], str)

    def test_from_document_round_trip(self):
        """Test rebuilding an entity from its document."""
        action = Action(
            program_id="p1",
            name="Ação",
            end_date=date(2025, 3, 31),
            status=ActionStatus.DELAYED,
            is_meeting_demand=True
        )

        restored = Action.from_document(action.to_document(), action.id)

        assert restored.id == action.id
        assert restored.end_date == date(2025, 3, 31)
        assert restored.status == "delayed"
        assert restored.is_meeting_demand is True

    def test_from_document_ignores_unknown_keys(self):
        """Test that storage-specific keys are ignored."""
        unit = Unit.from_document({"_id": "x", "name": "SMS", "acronym": "SMS", "legacy": 1}, "u2")

        assert unit.id == "u2"

    def test_deliverable_date_alias(self):
        """Test that the deliverable date is stored under 'date'."""
        deliverable = Deliverable.from_document(
            {"actionId": "a1", "description": "Entrega", "date": "2025-02-10T00:00:00.000Z"},
            "d1"
        )

        assert deliverable.delivery_date == date(2025, 2, 10)
        assert deliverable.to_document()["date"] == "2025-02-10"

    def test_empty_date_string_is_none(self):
        """Test that blank dates from forms become None."""
        action = Action.from_document({"programId": "p1", "name": "A", "endDate": ""}, "a1")

        assert action.end_date is None


class TestEntityValidation:
    """Test entity field validation."""

    def test_blank_program_name_rejected(self):
        """Test that whitespace-only names are rejected."""
        with pytest.raises(ValidationError):
            Program(unit_id="u1", axis_id="1", name="   ")

    def test_invalid_action_status_rejected(self):
        """Test that unknown statuses are rejected."""
        with pytest.raises(ValidationError):
            Action(program_id="p1", name="A", status="paused")

    def test_risk_severity(self):
        """Test computed risk severity."""
        risk = Risk(program_id="p1", description="Chuvas", impact=4, probability=3)

        assert risk.severity == 12

    @pytest.mark.parametrize("impact", [0, 6])
    def test_risk_scale(self, impact):
        """Test the 1-5 scale."""
        with pytest.raises(ValidationError):
            Risk(program_id="p1", description="Chuvas", impact=impact, probability=1)

    def test_user_profile_email(self):
        """Test email normalization and validation."""
        profile = UserProfile(email="Ana@Prefeitura.GOV.br", display_name="Ana")

        assert profile.email == "ana@prefeitura.gov.br"
        assert profile.role == UserRole.LEITURA

        with pytest.raises(ValidationError):
            UserProfile(email="not-an-email", display_name="Ana")

    def test_activity_log_defaults_to_system_user(self):
        """Test the default actor."""
        assert ActivityLog(message="Automação executada").user == "Sistema"

    def test_session_user_roles(self):
        """Test role membership checks."""
        user = SessionUser(user_id="u1", role=UserRole.FOCAL)

        assert user.role == "focal"
        assert user.has_role(["gestor", "focal"])
        assert not user.has_role(["admin"])


class TestRequests:
    """Test request models."""

    def test_create_program_accepts_camel_case(self):
        """Test that clients may send camelCase fields."""
        request = CreateProgramRequest.model_validate({
            "unitId": "u1",
            "axisId": "1",
            "name": " Bairro Seguro ",
            "targetAudience": "Moradores"
        })

        assert request.unit_id == "u1"
        assert request.name == "Bairro Seguro"
        assert request.target_audience == "Moradores"

    def test_create_program_requires_unit(self):
        """Test required fields."""
        with pytest.raises(ValidationError):
            CreateProgramRequest(axis_id="1", name="Sem unidade")

    def test_update_status_request(self):
        """Test status parsing."""
        assert UpdateActionStatusRequest(status="completed").status == "completed"

        with pytest.raises(ValidationError):
            UpdateActionStatusRequest(status="done")
