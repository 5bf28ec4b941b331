# SPDX-License-Identifier: Apache-2.0

"""
Redis-backed session store.

Keeps per-session state, such as which login alerts were already shown,
using the standard redis-py client. When Redis is unreachable every
operation degrades to a no-op so requests keep working.
"""

import os
import json
import time
from dataclasses import asdict
from typing import Optional, Dict, Any, Union
import redis
from opentelemetry import trace
import logging

from domain.alerts import AlertSessionState

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = 12 * 60 * 60


class RedisService:
    """Thin redis-py wrapper with JSON values and tracing."""

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize the Redis service.

        Args:
            redis_url: Redis connection URL (redis://host:port)
            client: Preconfigured client, used instead of connecting
        """
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")

        if client is not None:
            self.client = client
            return

        try:
            self.client = redis.from_url(self.redis_url, decode_responses=True)
            self.client.ping()
            logger.info(f"Redis service initialized successfully at {self.redis_url}")
        except redis.RedisError as e:
            logger.error(f"Failed to initialize Redis service: {str(e)}")
            self.client = None

    def is_available(self) -> bool:
        """Check if Redis service is available."""
        return self.client is not None

    def health_check(self) -> Dict[str, Any]:
        if not self.client:
            return {"status": "unhealthy", "error": "Redis client not initialized"}
        try:
            start = time.time()
            self.client.ping()
            return {
                "status": "healthy",
                "response_time_ms": round((time.time() - start) * 1000, 2)
            }
        except redis.RedisError as e:
            return {"status": "unhealthy", "error": str(e)}

    def set(self, key: str, value: Union[str, Dict[str, Any]], ttl: Optional[int] = None) -> bool:
        """
        Set a key-value pair in Redis.

        Args:
            key: Redis key
            value: Value to store (JSON serialized if not a string)
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        if not self.client:
            logger.warning("Redis client not available, skipping set operation")
            return False

        with tracer.start_as_current_span("redis.set") as span:
            span.set_attributes({
                "redis.key": key,
                "redis.ttl": ttl or 0
            })

            if isinstance(value, dict):
                value = json.dumps(value)

            try:
                if ttl:
                    result = self.client.setex(key, ttl, value)
                else:
                    result = self.client.set(key, value)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis set failed for key {key}: {str(e)}")
                return False

            span.set_attribute("redis.result", "success")
            return bool(result)

    def get(self, key: str) -> Optional[Any]:
        """
        Get a value from Redis.

        Returns:
            Deserialized value if found, None otherwise
        """
        if not self.client:
            logger.warning("Redis client not available, skipping get operation")
            return None

        with tracer.start_as_current_span("redis.get") as span:
            span.set_attribute("redis.key", key)

            try:
                value = self.client.get(key)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis get failed for key {key}: {str(e)}")
                return None

            if value is None:
                span.set_attribute("redis.result", "not_found")
                return None

            try:
                return json.loads(value)
            except (json.JSONDecodeError, TypeError):
                return value

    def delete(self, key: str) -> bool:
        """Delete a key from Redis."""
        if not self.client:
            return False

        try:
            return bool(self.client.delete(key))
        except redis.RedisError as e:
            logger.error(f"Redis delete failed for key {key}: {str(e)}")
            return False


class SessionStateService:
    """Stores login alert state per session."""

    def __init__(self, redis_service: RedisService, ttl_seconds: int = DEFAULT_SESSION_TTL):
        self.redis_service = redis_service
        self.ttl_seconds = ttl_seconds

    def is_available(self) -> bool:
        return self.redis_service.is_available()

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:{session_id}:alerts"

    def get_alert_state(self, session_id: Optional[str]) -> AlertSessionState:
        """Load the session's alert state; unknown sessions start fresh."""
        if not session_id:
            return AlertSessionState()

        stored = self.redis_service.get(self._key(session_id))
        if not isinstance(stored, dict):
            return AlertSessionState()

        return AlertSessionState(
            urgent_alert_shown=bool(stored.get("urgent_alert_shown", False)),
            demands_alert_shown=bool(stored.get("demands_alert_shown", False))
        )

    def save_alert_state(self, session_id: Optional[str], state: AlertSessionState) -> bool:
        if not session_id:
            return False
        return self.redis_service.set(self._key(session_id), asdict(state), self.ttl_seconds)

    def clear(self, session_id: str) -> bool:
        """Forget a session's state (logout)."""
        return self.redis_service.delete(self._key(session_id))
