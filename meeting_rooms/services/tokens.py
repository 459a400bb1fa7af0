"""Bearer credential issuing and verification."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..errors import AuthError
from ..models.entities import TokenClaims, User

logger = logging.getLogger(__name__)


class JWTManager:
    """Signs and verifies HS256 credentials with an injected secret."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_delta: timedelta = timedelta(hours=24)):
        if not secret_key:
            raise ValueError("A JWT secret key is required.")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def create_token(self, user: User, expires_delta: Optional[timedelta] = None) -> str:
        """Issue a credential embedding the user's id, role and expiry."""

        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.user_id,
            "role": user.role,
            "iat": now,
            "exp": now + (expires_delta or self.expires_delta),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """Verify signature and expiry and return the typed claims.

        Every failure raises the same AuthError so callers cannot tell a
        forged credential from an expired one.
        """

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired credential")
            raise AuthError()
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected invalid credential: %s", exc.__class__.__name__)
            raise AuthError()

        user_id = payload.get("sub")
        role = payload.get("role")
        if not isinstance(user_id, str) or not isinstance(role, str):
            raise AuthError()
        return TokenClaims(
            user_id=user_id,
            role=role,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
