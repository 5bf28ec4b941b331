# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.
"""

import os
import pytest
from datetime import date
from unittest.mock import Mock

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

from models.entities import (
    Action, Deliverable, Evidence, Indicator, Program, SessionUser, Unit
)
from models.enums import ActionStatus, UserRole
from services.memory_repository import InMemoryPlanningRepository
from services.session_store import RedisService

TODAY = date(2025, 6, 15)


@pytest.fixture
def today():
    """Fixed reference date for deadline rules."""
    return TODAY


@pytest.fixture
def repository():
    """Empty in-memory planning repository."""
    return InMemoryPlanningRepository()


@pytest.fixture
def redis_client():
    """Mock redis-py client backed by a dict."""
    store = {}
    client = Mock()
    client.ping.return_value = True
    client.get.side_effect = lambda key: store.get(key)

    def _setex(key, ttl, value):
        store[key] = value
        return True

    def _set(key, value):
        store[key] = value
        return True

    client.setex.side_effect = _setex
    client.set.side_effect = _set
    client.delete.side_effect = lambda key: 1 if store.pop(key, None) is not None else 0
    client.store = store
    return client


@pytest.fixture
def redis_service(redis_client):
    """Redis service using the mock client."""
    return RedisService(redis_url="redis://test:6379", client=redis_client)


@pytest.fixture
def unit(repository):
    """Stored unit."""
    return repository.create_unit(Unit(id="unit-1", name="Secretaria de Educação", acronym="SEMED"))


@pytest.fixture
def program(repository, unit):
    """Stored program owned by the test unit."""
    return repository.create_program(Program(
        id="program-1",
        unit_id=unit.id,
        axis_id="3",
        name="Escola do Futuro",
        objective="Modernizar a infraestrutura escolar"
    ))


@pytest.fixture
def action(repository, program):
    """Stored in-progress action with a future deadline."""
    return repository.create_action(Action(
        id="action-1",
        program_id=program.id,
        name="Reformar laboratórios",
        responsible="Maria Silva",
        responsible_id="user-gestor",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
        status=ActionStatus.IN_PROGRESS
    ))


@pytest.fixture
def ready_program(repository, program, action):
    """Program with an indicator and a deliverable for its only action."""
    repository.create_indicator(Indicator(program_id=program.id, name="Escolas reformadas", target=10))
    repository.create_deliverable(Deliverable(
        action_id=action.id,
        description="Laboratório entregue",
        delivery_date=date(2025, 5, 1),
        quantity=1
    ))
    return program


@pytest.fixture
def evidence(repository, action):
    """Evidence attached to the test action."""
    return repository.create_evidence(Evidence(
        action_id=action.id,
        url="https://files.example.com/foto.jpg",
        file_name="foto.jpg"
    ))


def make_user(role: str, unit_id: str = None, user_id: str = None, name: str = "Maria Silva",
              session_id: str = "session-1") -> SessionUser:
    return SessionUser(
        user_id=user_id or f"user-{role}",
        display_name=name,
        role=role,
        unit_id=unit_id,
        session_id=session_id
    )


@pytest.fixture
def user_factory():
    """Build session users: user_factory(role, unit_id=None, ...)."""
    return make_user


@pytest.fixture
def admin_user():
    return make_user(UserRole.ADMIN.value, name="Admin")


@pytest.fixture
def gestor_user(unit):
    return make_user(UserRole.GESTOR.value, unit_id=unit.id)


@pytest.fixture
def leitura_user(unit):
    return make_user(UserRole.LEITURA.value, unit_id=unit.id, name="Leitor")


@pytest.fixture
def app(repository, redis_service):
    """Flask application wired to the in-memory repository."""
    from app import create_app

    application = create_app(
        config={
            'ENVIRONMENT': 'test',
            'OTEL_ENABLED': False,
            'DATA_SOURCE': 'memory',
            'BASE_URL': 'http://localhost:5000',
            'JWT_SECRET': 'test-secret-key-for-hs256-signing-only',
            'TESTING': True
        },
        repository=repository,
        redis_service=redis_service
    )
    return application


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Build bearer headers for a session user."""
    def _headers(user: SessionUser):
        token = app.auth_service.issue_token(
            user.user_id,
            user.display_name,
            user.role,
            unit_id=user.unit_id,
            session_id=user.session_id
        )
        return {'Authorization': f'Bearer {token}'}

    return _headers
