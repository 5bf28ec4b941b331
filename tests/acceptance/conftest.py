# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Fixtures for acceptance scenarios run through the HTTP API.
"""

import os
import pytest
from unittest.mock import Mock

os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'

from services.memory_repository import InMemoryPlanningRepository
from services.session_store import RedisService


@pytest.fixture
def test_db():
    """In-memory planning store shared with the application."""
    return InMemoryPlanningRepository()


@pytest.fixture
def test_app(test_db):
    from app import create_app

    redis_client = Mock()
    redis_client.get.return_value = None
    return create_app(
        config={
            'ENVIRONMENT': 'test',
            'OTEL_ENABLED': False,
            'DATA_SOURCE': 'memory',
            'JWT_SECRET': 'acceptance-secret-key-for-hs256-signing'
        },
        repository=test_db,
        redis_service=RedisService(client=redis_client)
    )


@pytest.fixture
def test_client(test_app):
    return test_app.test_client()


@pytest.fixture
def headers_for(test_app):
    """Bearer headers for a user: headers_for(role, unit_id=None)."""
    def _headers(role: str, unit_id: str = None, name: str = "Usuário de Teste"):
        token = test_app.auth_service.issue_token(f"user-{role}", name, role, unit_id=unit_id)
        return {'Authorization': f'Bearer {token}'}

    return _headers
