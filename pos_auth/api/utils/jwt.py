"""
Token Service

Issues and verifies the signed access/refresh token pair (HS256).
Access and refresh tokens use different secrets so one can never be
replayed as the other.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from pos_auth.domain.entities import UserRole
from pos_auth.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenService:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        issuer: str = "grocery-pos",
        audience: str = "grocery-pos-client",
        access_token_ttl: timedelta = timedelta(hours=2),
        refresh_token_ttl: timedelta = timedelta(days=7),
    ):
        if not access_secret or not refresh_secret:
            raise ConfigurationError(
                "JWT_SECRET and JWT_REFRESH_SECRET must be configured"
            )
        if access_secret == refresh_secret:
            raise ConfigurationError("JWT_SECRET and JWT_REFRESH_SECRET must differ")

        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.issuer = issuer
        self.audience = audience
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            access_secret=config.JWT_SECRET,
            refresh_secret=config.JWT_REFRESH_SECRET,
            issuer=config.JWT_ISSUER,
            audience=config.JWT_AUDIENCE,
            access_token_ttl=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_token_ttl=timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    @property
    def access_token_expires_in(self) -> int:
        return int(self.access_token_ttl.total_seconds())

    def _claims(self, ttl: timedelta) -> dict:
        now = datetime.now(timezone.utc)
        return {
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + ttl,
            "jti": str(uuid.uuid4()),
        }

    def generate_access_token(self, user, session_id: str) -> str:
        """
        Args:
            user: anything with id, username and role (User, UserInfo)
            session_id: session the token is bound to
        """
        payload = {
            "user_id": str(user.id),
            "username": user.username,
            "role": UserRole(user.role).value,
            "session_id": session_id,
            "token_type": "access",
            **self._claims(self.access_token_ttl),
        }
        return jwt.encode(payload, self.access_secret, algorithm=ALGORITHM)

    def generate_refresh_token(self, user_id, session_id: str) -> str:
        payload = {
            "user_id": str(user_id),
            "session_id": session_id,
            "token_type": "refresh",
            **self._claims(self.refresh_token_ttl),
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=ALGORITHM)

    def generate_token_pair(self, user, session_id: str) -> dict:
        return {
            "access_token": self.generate_access_token(user, session_id),
            "refresh_token": self.generate_refresh_token(user.id, session_id),
            "expires_in": self.access_token_expires_in,
        }

    def _decode(self, token: str, secret: str, token_type: str) -> Optional[dict]:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.debug(f"Rejected {token_type} token: {e}")
            return None

        if payload.get("token_type") != token_type:
            return None
        if not payload.get("user_id") or not payload.get("session_id"):
            return None
        return payload

    def verify_access_token(self, token: str) -> Optional[dict]:
        """
        Verify and decode an access token

        Returns:
            Decoded payload dict or None if invalid, expired or not an access token
        """
        return self._decode(token, self.access_secret, "access")

    def verify_refresh_token(self, token: str) -> Optional[dict]:
        return self._decode(token, self.refresh_secret, "refresh")
