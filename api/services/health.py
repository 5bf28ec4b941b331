"""
Health Check Service

Provides health monitoring for the planning repository, the Redis session
store and basic system metrics.
"""

import os
import time
import psutil
from datetime import datetime, timezone
from typing import Dict, Any, List
from opentelemetry import trace

from services.repository import PlanningRepository
from services.session_store import RedisService

tracer = trace.get_tracer(__name__)

SERVICE_NAME = "sps-planning-api"
SERVICE_VERSION = "1.0.0"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HealthCheckService:
    """Service for system health monitoring."""

    def __init__(self, repository: PlanningRepository, redis_service: RedisService):
        self.repository = repository
        self.redis_service = redis_service
        self.service_version = SERVICE_VERSION

    def get_comprehensive_health(self) -> Dict[str, Any]:
        """Get health status including all dependencies and metrics."""
        with tracer.start_as_current_span("health.comprehensive_check") as span:
            start_time = time.time()

            repository_health = self._check_repository_health()
            redis_health = self._check_redis_health()

            # The session store is optional; only the repository decides "unhealthy"
            overall_status = self._determine_overall_status(
                repository_health["status"],
                [redis_health["status"]]
            )

            response_time_ms = round((time.time() - start_time) * 1000, 2)

            health_data = {
                "status": overall_status,
                "service": SERVICE_NAME,
                "version": self.service_version,
                "environment": os.getenv('ENVIRONMENT', 'development'),
                "timestamp": _now_iso(),
                "response_time_ms": response_time_ms,
                "dependencies": {
                    "repository": repository_health,
                    "redis": redis_health
                },
                "system_metrics": self._get_system_metrics(),
                "feature_flags": self._get_feature_flags()
            }

            span.set_attributes({
                "health.overall_status": overall_status,
                "health.response_time_ms": response_time_ms,
                "health.repository_status": repository_health["status"],
                "health.redis_status": redis_health["status"]
            })

            return health_data

    def _check_repository_health(self) -> Dict[str, Any]:
        with tracer.start_as_current_span("health.repository_check") as span:
            start_time = time.time()
            health_info = dict(self.repository.health_check())
            health_info.setdefault("backend", self.repository.name)
            health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
            health_info["last_check"] = _now_iso()

            span.set_attributes({
                "repository.backend": self.repository.name,
                "repository.status": health_info.get("status", "unknown")
            })
            return health_info

    def _check_redis_health(self) -> Dict[str, Any]:
        with tracer.start_as_current_span("health.redis_check") as span:
            health_info = dict(self.redis_service.health_check())
            health_info["last_check"] = _now_iso()
            span.set_attribute("redis.status", health_info["status"])
            return health_info

    def _get_system_metrics(self) -> Dict[str, Any]:
        """Get basic system performance metrics."""
        try:
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')

            return {
                "cpu_percent": psutil.cpu_percent(interval=None),
                "memory": {
                    "used_mb": round(memory.used / 1024 / 1024, 2),
                    "total_mb": round(memory.total / 1024 / 1024, 2),
                    "percent": memory.percent
                },
                "disk": {
                    "used_gb": round(disk.used / 1024 / 1024 / 1024, 2),
                    "total_gb": round(disk.total / 1024 / 1024 / 1024, 2),
                    "percent": round((disk.used / disk.total) * 100, 2)
                },
                "load_average": list(os.getloadavg()) if hasattr(os, 'getloadavg') else None
            }
        except (psutil.Error, OSError) as e:
            return {
                "error": f"Failed to collect system metrics: {str(e)}"
            }

    def _get_feature_flags(self) -> Dict[str, Any]:
        """Get current feature flag status."""
        return {
            "docs_enabled": os.getenv('DOCS_ENABLED', 'true').lower() == 'true',
            "otel_enabled": os.getenv('OTEL_ENABLED', 'true').lower() == 'true',
            "automation_revert_delayed": os.getenv('AUTOMATION_REVERT_DELAYED', 'true').lower() == 'true',
            "alert_responsible_matching": os.getenv('ALERT_RESPONSIBLE_MATCHING', 'fuzzy')
        }

    def _determine_overall_status(self, primary_status: str, optional_statuses: List[str]) -> str:
        """Determine overall system status based on dependency health."""
        if primary_status != "healthy":
            return "unhealthy"
        if all(status == "healthy" for status in optional_statuses):
            return "healthy"
        return "degraded"
