"""
SPS Planning API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support,
configures middleware, and wires the planning services to the selected
storage backend.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag
from observability.config import setup_observability
from observability.middleware import add_observability_middleware

from domain.alerts import build_matcher
from middleware.auth import AuthMiddleware
from middleware.error_handler import ErrorHandlerMiddleware, register_custom_error_handlers
from services.activity_log import ActivityLogService
from services.alerts import LoginAlertService
from services.auth import AuthService
from services.automation import StatusAutomationService
from services.hal import create_hal_formatter
from models.responses import HealthCheckResponse
from services.health import HealthCheckService, SERVICE_NAME, SERVICE_VERSION
from services.memory_repository import InMemoryPlanningRepository
from services.mongodb import MongoDBService, MongoPlanningRepository
from services.planning import PlanningService
from services.repository import PlanningRepository
from services.rest_repository import RestPlanningRepository
from services.session_store import RedisService, SessionStateService

logger = logging.getLogger(__name__)

# OpenAPI info
info = Info(
    title="SPS Planning API",
    version=SERVICE_VERSION,
    description="Municipal strategic planning API with HATEOAS Level-3 support"
)

health_tag = Tag(name="Health", description="System health and status")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


def load_config() -> Dict[str, Any]:
    """Read configuration from the environment."""
    environment = os.getenv('ENVIRONMENT', 'development')
    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'DOCS_ENABLED': _env_flag('DOCS_ENABLED', 'true'),
        'OTEL_ENABLED': _env_flag('OTEL_ENABLED', 'true'),

        # API configuration
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000'),

        # Storage backend: mongodb, rest or memory
        'DATA_SOURCE': os.getenv('DATA_SOURCE', 'mongodb'),
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/sps_planning_dev'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'sps_planning_dev'),
        'REST_API_URL': os.getenv('REST_API_URL', 'http://localhost:3000/api'),
        'REST_API_TIMEOUT': float(os.getenv('REST_API_TIMEOUT', '10')),

        # Session store
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),
        'SESSION_TTL_SECONDS': int(os.getenv('SESSION_TTL_SECONDS', str(12 * 60 * 60))),

        # Security configuration
        'JWT_SECRET': os.getenv('JWT_SECRET', 'dev-secret-change-me'),

        # Business rule switches
        'AUTOMATION_REVERT_DELAYED': _env_flag('AUTOMATION_REVERT_DELAYED', 'true'),
        'ALERT_RESPONSIBLE_MATCHING': os.getenv('ALERT_RESPONSIBLE_MATCHING', 'fuzzy')
    }


def create_repository(config: Dict[str, Any]) -> PlanningRepository:
    """Build the planning repository selected by DATA_SOURCE."""
    data_source = config['DATA_SOURCE']

    if data_source == 'memory':
        return InMemoryPlanningRepository()
    if data_source == 'rest':
        return RestPlanningRepository(config['REST_API_URL'], timeout=config['REST_API_TIMEOUT'])
    if data_source == 'mongodb':
        return MongoPlanningRepository(MongoDBService(config['MONGODB_URI'], config['MONGODB_DATABASE']))

    raise ValueError(f"Unknown DATA_SOURCE: {data_source}")


def create_app(
    config: Optional[Dict[str, Any]] = None,
    repository: Optional[PlanningRepository] = None,
    redis_service: Optional[RedisService] = None
) -> OpenAPI:
    """
    Application factory.

    Args:
        config: Overrides applied on top of the environment configuration
        repository: Prebuilt repository, used instead of DATA_SOURCE
        redis_service: Prebuilt Redis service, used instead of REDIS_URL

    Returns:
        Configured Flask application
    """
    settings = load_config()
    settings.update(config or {})

    setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])

    app = OpenAPI(__name__, info=info, doc_ui=settings['DOCS_ENABLED'])
    app.config.update(settings)

    add_observability_middleware(app)

    # Initialize services
    repository = repository or create_repository(settings)
    redis_service = redis_service or RedisService(settings['REDIS_URL'])
    auth_service = AuthService(settings['JWT_SECRET'])
    activity_log_service = ActivityLogService(repository)

    planning_service = PlanningService(repository, activity_log_service)
    automation_service = StatusAutomationService(
        repository,
        revert_delayed=settings['AUTOMATION_REVERT_DELAYED']
    )
    session_state_service = SessionStateService(redis_service, settings['SESSION_TTL_SECONDS'])
    alert_service = LoginAlertService(
        repository,
        session_state_service,
        build_matcher(settings['ALERT_RESPONSIBLE_MATCHING'])
    )
    health_service = HealthCheckService(repository, redis_service)

    # Initialize middleware
    hal_formatter = create_hal_formatter(settings['BASE_URL'])
    auth_middleware = AuthMiddleware(auth_service)
    ErrorHandlerMiddleware(app, hal_formatter)
    register_custom_error_handlers(app, hal_formatter)

    # Make services available to routes
    app.repository = repository
    app.redis_service = redis_service
    app.auth_service = auth_service
    app.activity_log_service = activity_log_service
    app.planning_service = planning_service
    app.automation_service = automation_service
    app.session_state_service = session_state_service
    app.alert_service = alert_service
    app.health_service = health_service
    app.hal_formatter = hal_formatter
    app.auth_middleware = auth_middleware

    # Register routes
    from routes.programs import programs_bp
    from routes.actions import actions_bp
    from routes.automation import automation_bp
    from routes.dashboard import dashboard_bp

    app.register_api(programs_bp)
    app.register_api(actions_bp)
    app.register_api(automation_bp)
    app.register_api(dashboard_bp)

    @app.get('/api/healthz', tags=[health_tag], responses={200: HealthCheckResponse, 503: HealthCheckResponse})
    def health_check():
        """Health check with repository, session store and system metrics."""
        health_data = health_service.get_comprehensive_health()

        # Degraded is still operational
        status_code = 503 if health_data["status"] == "unhealthy" else 200

        links = {'self': hal_formatter.builder.link_builder.build_self_link('/api/healthz')}
        return jsonify(hal_formatter.builder.build_resource_response(health_data, links)), status_code

    logger.info(
        "Application created",
        extra={
            "service": SERVICE_NAME,
            "environment": settings['ENVIRONMENT'],
            "data_source": repository.name,
            "started_at": datetime.now(timezone.utc).isoformat()
        }
    )

    return app


if __name__ == '__main__':
    # Development server
    app = create_app()
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=app.config['DEBUG']
    )
