# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Endpoint tests using the Flask test client and the in-memory repository.
"""

import jwt
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch
from urllib.parse import urlparse

from models.entities import Action, Indicator, Program
from models.enums import ActionStatus
from services.repository import RepositoryError


class TestAuthentication:
    """Test bearer token handling."""

    def test_missing_token(self, client):
        """Test that protected endpoints need a token."""
        response = client.get('/api/dashboard/summary')

        assert response.status_code == 401
        problem = response.get_json()
        assert problem["type"].endswith("/authentication-required")
        assert problem["title"] == "Authentication Required"
        assert problem["instance"] == "/api/dashboard/summary"
        assert problem["_links"]["help"]["href"] == problem["type"]

    def test_invalid_token(self, client):
        """Test that bad tokens are rejected."""
        response = client.get('/api/dashboard/summary', headers={'Authorization': 'Bearer nope'})

        assert response.status_code == 401
        problem = response.get_json()
        assert problem["type"].endswith("/invalid-token")
        assert problem["title"] == "Invalid Token"
        assert problem["_links"]["help"]["href"] == problem["type"]

    def test_unknown_role_claim(self, client, app):
        """Test that tokens with an unknown role are rejected."""
        token = app.auth_service.issue_token("u1", "Ana", "superuser")

        response = client.get('/api/dashboard/summary', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401
        assert response.get_json()["detail"] == "Token claims are invalid"


class TestProgramEndpoints:
    """Test program creation and readiness."""

    def test_create_program(self, client, auth_headers, gestor_user, unit, repository):
        """Test creating a program returns HAL with the validate affordance."""
        response = client.post(
            '/api/programs',
            json={"unitId": unit.id, "axisId": "1", "name": "Cidade Limpa"},
            headers=auth_headers(gestor_user)
        )

        assert response.status_code == 201
        data = response.get_json()
        assert data["name"] == "Cidade Limpa"
        assert data["unit_id"] == unit.id
        assert "validate" in data["_links"]
        assert repository.get_program(data["id"]) is not None

    def test_create_program_read_only_user_has_no_validate_link(self, client, auth_headers, leitura_user, unit):
        """Test that roles only change affordances."""
        response = client.post(
            '/api/programs',
            json={"unit_id": unit.id, "axis_id": "1", "name": "Cidade Limpa"},
            headers=auth_headers(leitura_user)
        )

        assert response.status_code == 201
        assert "validate" not in response.get_json()["_links"]

    def test_sixth_program_conflict(self, client, auth_headers, gestor_user, unit, repository):
        """Test that the sixth program returns a 409 problem and is not stored."""
        for i in range(5):
            repository.create_program(Program(unit_id=unit.id, axis_id="1", name=f"Programa {i}"))

        response = client.post(
            '/api/programs',
            json={"unitId": unit.id, "axisId": "1", "name": "Sexto"},
            headers=auth_headers(gestor_user)
        )

        assert response.status_code == 409
        problem = response.get_json()
        assert problem["type"].endswith("/program-limit-exceeded")
        assert problem["detail"] == "Unit has reached the limit of 5 programs."
        assert len(repository.get_programs(unit_id=unit.id)) == 5

    def test_returned_links_resolve(self, client, auth_headers, gestor_user, unit, action, evidence):
        """Test that every GET link in program and action responses is served."""
        headers = auth_headers(gestor_user)
        created = client.post(
            '/api/programs',
            json={"unitId": unit.id, "axisId": "1", "name": "Cidade Limpa"},
            headers=headers
        ).get_json()
        completion = client.get(f'/api/actions/{action.id}/completion', headers=headers).get_json()
        readiness = client.get(urlparse(created["_links"]["self"]["href"]).path, headers=headers).get_json()

        for document in (created, completion, readiness):
            for rel, link in document["_links"].items():
                if link.get("method", "GET") != "GET":
                    continue
                path = urlparse(link["href"]).path
                assert client.get(path, headers=headers).status_code == 200, rel

        assert completion["_links"]["complete"]["href"].endswith(f"/api/actions/{action.id}/status")

    def test_create_program_invalid_body(self, client, auth_headers, gestor_user):
        """Test request validation."""
        response = client.post('/api/programs', json={"name": "Sem unidade"}, headers=auth_headers(gestor_user))

        assert response.status_code == 422

    def test_readiness(self, client, auth_headers, gestor_user, program, action, repository):
        """Test readiness errors for a program without indicators or deliverables."""
        response = client.get(f'/api/programs/{program.id}/readiness', headers=auth_headers(gestor_user))

        assert response.status_code == 200
        data = response.get_json()
        assert data["is_valid"] is False
        assert data["errors"] == [
            "Program must have at least 1 strategic indicator.",
            f'Action "{action.name}" has no registered deliverables.'
        ]
        assert "validate" in data["_links"]

    def test_readiness_ready_program(self, client, auth_headers, admin_user, ready_program):
        """Test a ready program."""
        response = client.get(f'/api/programs/{ready_program.id}/readiness', headers=auth_headers(admin_user))

        data = response.get_json()
        assert data["is_valid"] is True
        assert data["errors"] == []

    def test_readiness_unknown_program(self, client, auth_headers, admin_user):
        """Test readiness of an unknown program."""
        response = client.get('/api/programs/missing/readiness', headers=auth_headers(admin_user))

        assert response.status_code == 404
        assert response.get_json()["type"].endswith("/resource-not-found")


class TestActionEndpoints:
    """Test the completion gate over HTTP."""

    def test_completion_check(self, client, auth_headers, gestor_user, action, repository):
        """Test the completion check before and after evidence."""
        response = client.get(f'/api/actions/{action.id}/completion', headers=auth_headers(gestor_user))
        assert response.get_json()["can_complete"] is False

        from models.entities import Evidence
        repository.create_evidence(Evidence(action_id=action.id, url="https://files.example.com/a.jpg"))

        response = client.get(f'/api/actions/{action.id}/completion', headers=auth_headers(gestor_user))
        assert response.get_json()["can_complete"] is True

    def test_complete_without_evidence(self, client, auth_headers, gestor_user, action, repository):
        """Test that completion without evidence returns 400 and keeps the status."""
        response = client.put(
            f'/api/actions/{action.id}/status',
            json={"status": "completed"},
            headers=auth_headers(gestor_user)
        )

        assert response.status_code == 400
        assert response.get_json()["type"].endswith("/completion-blocked")
        assert repository.get_action(action.id).status == "in_progress"

    def test_complete_with_evidence(self, client, auth_headers, gestor_user, action, evidence, repository):
        """Test a successful completion."""
        response = client.put(
            f'/api/actions/{action.id}/status',
            json={"status": "completed"},
            headers=auth_headers(gestor_user)
        )

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "completed"
        assert "complete" not in data["_links"]
        assert repository.get_action(action.id).status == "completed"

    def test_change_status_links(self, client, auth_headers, gestor_user, action, evidence):
        """Test that the complete affordance is offered once evidence exists."""
        response = client.put(
            f'/api/actions/{action.id}/status',
            json={"status": "delayed"},
            headers=auth_headers(gestor_user)
        )

        links = response.get_json()["_links"]
        assert "change-status" in links
        assert "complete" in links

    def test_unknown_status_value(self, client, auth_headers, gestor_user, action):
        """Test request validation of the status value."""
        response = client.put(
            f'/api/actions/{action.id}/status',
            json={"status": "paused"},
            headers=auth_headers(gestor_user)
        )

        assert response.status_code == 422

    def test_unknown_action(self, client, auth_headers, gestor_user):
        """Test changing an unknown action."""
        response = client.put(
            '/api/actions/missing/status',
            json={"status": "delayed"},
            headers=auth_headers(gestor_user)
        )

        assert response.status_code == 404


class TestAutomationEndpoint:
    """Test the automation endpoint."""

    def test_run_automation(self, client, auth_headers, gestor_user, program, repository):
        """Test a run against the current date."""
        today = date.today()
        repository.create_action(Action(
            id="late", program_id=program.id, name="Atrasada",
            status=ActionStatus.NOT_STARTED, end_date=today - timedelta(days=1)
        ))

        response = client.post('/api/automation/status', headers=auth_headers(gestor_user))

        assert response.status_code == 200
        data = response.get_json()
        assert data["updated_count"] == 1
        assert data["reference_date"] == today.isoformat()
        assert data["changes"][0]["new_status"] == "delayed"
        assert data["error"] is None

        response = client.post('/api/automation/status', headers=auth_headers(gestor_user))
        assert response.get_json()["updated_count"] == 0

    def test_client_cannot_choose_reference_date(self, client, auth_headers, leitura_user, program, repository):
        """Test that a future reference date in the query is ignored."""
        repository.create_action(Action(
            id="on-time", program_id=program.id, name="No prazo",
            status=ActionStatus.IN_PROGRESS, end_date=date.today() + timedelta(days=365)
        ))

        response = client.post(
            '/api/automation/status?reference_date=2099-01-01',
            headers=auth_headers(leitura_user)
        )

        assert response.status_code == 200
        assert response.get_json()["updated_count"] == 0
        assert response.get_json()["reference_date"] == date.today().isoformat()
        assert repository.get_action("on-time").status == "in_progress"

    def test_run_automation_backend_failure(self, client, app, auth_headers, gestor_user):
        """Test that failures are reported in the body, not as errors."""
        with patch.object(app.repository, 'get_actions', side_effect=RepositoryError("down")):
            response = client.post('/api/automation/status', headers=auth_headers(gestor_user))

        assert response.status_code == 200
        assert response.get_json()["updated_count"] == 0
        assert response.get_json()["error"] == "down"


class TestDashboardEndpoints:
    """Test dashboard summary and login alerts."""

    def test_summary_scoped_to_unit(self, client, auth_headers, gestor_user, ready_program, repository):
        """Test that a manager sees only their unit."""
        repository.create_program(Program(unit_id="unit-2", axis_id="1", name="Outra"))

        response = client.get('/api/dashboard/summary', headers=auth_headers(gestor_user))

        assert response.status_code == 200
        data = response.get_json()
        assert data["totals"]["programs"] == 1
        assert data["program_health"] == {"ready": 1, "pending": 0}
        assert set(data["action_status"]) == {"not_started", "in_progress", "delayed", "completed"}
        assert "alerts" in data["_links"]

    def test_summary_admin(self, client, auth_headers, admin_user, program, repository):
        """Test that admins see every unit."""
        repository.create_program(Program(unit_id="unit-2", axis_id="1", name="Outra"))
        repository.create_indicator(Indicator(program_id=program.id, name="I"))

        data = client.get('/api/dashboard/summary', headers=auth_headers(admin_user)).get_json()

        assert data["totals"]["programs"] == 2
        assert data["totals"]["indicators"] == 1

    def test_alerts_once_per_session(self, client, auth_headers, gestor_user, program, repository, today):
        """Test that login alerts are returned once per session."""
        repository.create_action(Action(
            program_id=program.id, name="Atrasada", responsible="maria silva",
            status=ActionStatus.DELAYED
        ))
        headers = auth_headers(gestor_user)

        first = client.get('/api/dashboard/alerts', headers=headers).get_json()
        second = client.get('/api/dashboard/alerts', headers=headers).get_json()

        assert [a["name"] for a in first["urgent_actions"]] == ["Atrasada"]
        assert second["urgent_actions"] == []
        assert second["pending_demands"] == []

    def test_alerts_once_per_token_without_session_claim(self, client, app, program, repository):
        """Test that tokens without a "sid" claim still get alerts once."""
        repository.create_action(Action(
            program_id=program.id, name="Atrasada", responsible="maria silva",
            status=ActionStatus.DELAYED
        ))
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": "user-gestor",
                "name": "Maria Silva",
                "role": "gestor",
                "unit_id": "unit-1",
                "iat": now,
                "exp": now + timedelta(hours=1)
            },
            app.auth_service.secret,
            algorithm="HS256"
        )
        headers = {'Authorization': f'Bearer {token}'}

        first = client.get('/api/dashboard/alerts', headers=headers).get_json()
        second = client.get('/api/dashboard/alerts', headers=headers).get_json()

        assert [a["name"] for a in first["urgent_actions"]] == ["Atrasada"]
        assert second["urgent_actions"] == []


class TestHealthEndpoint:
    """Test the health endpoint."""

    def test_healthy(self, client):
        """Test health with the in-memory repository and Redis available."""
        response = client.get('/api/healthz')

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["repository"]["backend"] == "memory"
        assert "self" in data["_links"]

    def test_degraded_without_redis(self, client, app):
        """Test that losing Redis only degrades the service."""
        app.redis_service.client = None

        response = client.get('/api/healthz')

        assert response.status_code == 200
        assert response.get_json()["status"] == "degraded"

    def test_unhealthy_repository(self, client, app):
        """Test that an unhealthy repository returns 503."""
        with patch.object(app.repository, 'health_check', return_value={"status": "unhealthy"}):
            response = client.get('/api/healthz')

        assert response.status_code == 503
        assert response.get_json()["status"] == "unhealthy"

    def test_repository_error_maps_to_503(self, client, app, auth_headers, admin_user):
        """Test that storage failures surface as 503 problems."""
        with patch.object(app.repository, 'get_programs', side_effect=RepositoryError("down", "programs")):
            response = client.get('/api/dashboard/summary', headers=auth_headers(admin_user))

        assert response.status_code == 503
        assert response.get_json()["type"].endswith("/service-unavailable")
