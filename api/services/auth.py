# SPDX-License-Identifier: Apache-2.0

"""
Authentication service for JWT token validation.

Identity is owned by an external provider; the API only verifies HS256
bearer tokens and reads the user's claims. Token issuing exists for local
development and tests.
"""

import os
import uuid
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class TokenValidationError(Exception):
    """Raised when token validation fails."""
    pass


class AuthService:
    """JWT verification with a shared HS256 secret."""

    REQUIRED_CLAIMS = ["sub", "exp"]

    def __init__(self, secret: Optional[str] = None, token_expire_minutes: int = 60):
        """
        Initialize the authentication service.

        Args:
            secret: HS256 shared secret
            token_expire_minutes: Lifetime of issued tokens
        """
        self.secret = secret or os.getenv("JWT_SECRET")
        if not self.secret:
            logger.warning("JWT_SECRET not set, using development secret")
            self.secret = "dev-secret-change-me"
        self.algorithm = "HS256"
        self.token_expire_minutes = token_expire_minutes

    def issue_token(
        self,
        user_id: str,
        name: str,
        role: str,
        unit_id: Optional[str] = None,
        session_id: Optional[str] = None,
        email: Optional[str] = None
    ) -> str:
        """
        Issue a signed token carrying the user's claims.

        Args:
            user_id: Identity uid
            name: Display name
            role: Profile role
            unit_id: Affiliated unit
            session_id: Session identifier; generated when omitted
            email: User email

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "name": name,
            "role": role,
            "unit_id": unit_id,
            "sid": session_id or str(uuid.uuid4()),
            "iat": now,
            "exp": now + timedelta(minutes=self.token_expire_minutes)
        }
        if email:
            payload["email"] = email

        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate_token(self, token: str) -> Dict[str, Any]:
        """
        Validate and decode a JWT token.

        Args:
            token: JWT token string to validate

        Returns:
            Decoded token payload

        Raises:
            TokenValidationError: If token is invalid or expired
        """
        with tracer.start_as_current_span("auth.validate_token") as span:
            span.set_attribute("auth.operation", "validate_token")

            try:
                payload = jwt.decode(
                    token,
                    self.secret,
                    algorithms=[self.algorithm],
                    options={"require": self.REQUIRED_CLAIMS}
                )

                span.set_attributes({
                    "auth.validation_result": "success",
                    "user.id": payload.get("sub"),
                    "user.role": payload.get("role") or ""
                })

                logger.debug(
                    "Token validated successfully",
                    extra={
                        "user_id": payload.get("sub"),
                        "role": payload.get("role")
                    }
                )

                return payload

            except jwt.ExpiredSignatureError:
                span.set_attribute("auth.validation_result", "expired")
                logger.warning("Token validation failed: token expired")
                raise TokenValidationError("Token has expired")

            except jwt.InvalidTokenError as e:
                span.set_attribute("auth.validation_result", "invalid")
                logger.warning(f"Token validation failed: {str(e)}")
                raise TokenValidationError(f"Invalid token: {str(e)}")
