# SPDX-License-Identifier: Apache-2.0

"""
Authentication middleware for JWT token validation and session user extraction.

This module provides Flask middleware for validating bearer tokens and
building the session user for request processing.
"""

from functools import wraps
from flask import request, g, current_app
from typing import Optional, Dict, Any, Callable
from opentelemetry import trace
from pydantic import ValidationError
import logging

from models.entities import SessionUser
from services.auth import AuthService, TokenValidationError
from middleware.error_handler import AuthenticationException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    JWT authentication middleware for Flask applications.

    Handles token extraction, validation and session user building for
    protected endpoints.
    """

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service

    def extract_token_from_request(self) -> Optional[str]:
        """
        Extract JWT token from request headers.

        Returns:
            JWT token string or None if not found
        """
        auth_header = request.headers.get('Authorization', '')

        if not auth_header:
            return None

        if auth_header.startswith('Bearer '):
            return auth_header[7:]

        return auth_header

    def build_session_user(self, token_payload: Dict[str, Any], request_info: Dict[str, Any]) -> SessionUser:
        """
        Build the session user from validated token claims and request information.

        The session id comes from the token's "sid" claim, falling back to the
        X-Session-ID header and then to a key derived from the token itself.
        """
        session_id = (
            token_payload.get("sid")
            or request_info.get("session_id")
            or self.derive_session_id(token_payload)
        )

        return SessionUser(
            user_id=token_payload["sub"],
            display_name=token_payload.get("name") or "",
            role=token_payload.get("role") or "leitura",
            unit_id=token_payload.get("unit_id"),
            email=token_payload.get("email"),
            session_id=session_id,
            ip_address=request_info.get("ip_address"),
            user_agent=request_info.get("user_agent"),
            token_payload=token_payload
        )

    @staticmethod
    def derive_session_id(token_payload: Dict[str, Any]) -> Optional[str]:
        """
        Session key for tokens issued without a "sid" claim.

        A login yields a new token, so the subject plus the token's issue
        time (or expiry when "iat" is absent) is stable for one session.
        """
        issued = token_payload.get("iat") or token_payload.get("exp")
        if issued is None:
            return None
        return f"{token_payload['sub']}:{issued}"

    def get_request_info(self) -> Dict[str, Any]:
        """Extract request metadata for the session user."""
        return {
            "ip_address": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', ''),
            "session_id": request.headers.get('X-Session-ID'),
            "request_id": request.headers.get('X-Request-ID')
        }


def require_auth(f: Callable) -> Callable:
    """
    Decorator requiring a valid bearer token.

    The authenticated user is stored in g.session_user.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_middleware: AuthMiddleware = current_app.auth_middleware

        with tracer.start_as_current_span("auth.middleware.validate_request") as span:
            span.set_attribute("auth.operation", "validate_request")

            token = auth_middleware.extract_token_from_request()
            if not token:
                span.set_attribute("auth.result", "missing_token")
                logger.warning("Authentication failed: missing token")
                raise AuthenticationException("Missing authorization token")

            try:
                token_payload = auth_middleware.auth_service.validate_token(token)
            except TokenValidationError as e:
                span.set_attribute("auth.result", "invalid_token")
                logger.warning(f"Authentication failed: {str(e)}")
                raise AuthenticationException(str(e), error_type="invalid-token", title="Invalid Token")

            try:
                session_user = auth_middleware.build_session_user(
                    token_payload,
                    auth_middleware.get_request_info()
                )
            except ValidationError as e:
                span.set_attribute("auth.result", "invalid_claims")
                logger.warning(f"Authentication failed: invalid claims: {e.error_count()} errors")
                raise AuthenticationException(
                    "Token claims are invalid",
                    error_type="invalid-token",
                    title="Invalid Token"
                )

            g.session_user = session_user

            span.set_attributes({
                "auth.result": "success",
                "user.id": session_user.user_id,
                "user.role": session_user.role
            })

            logger.debug(
                "Authentication successful",
                extra={
                    "user_id": session_user.user_id,
                    "role": session_user.role,
                    "ip_address": session_user.ip_address
                }
            )

        return f(*args, **kwargs)

    return decorated_function
