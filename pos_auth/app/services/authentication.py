"""
Authentication Service

Turns a bearer token into a verified, current identity.
"""

import logging
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from pos_auth.api.utils.jwt import TokenService
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.app.use_cases.auth.dtos import UserInfo
from pos_auth.domain import errors
from pos_auth.domain.entities import UserStatus
from pos_auth.libs.result import Result, Return

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """Identity attached to a request after authentication"""

    user: UserInfo
    session_id: str

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def role(self) -> str:
        return self.user.role


class AuthenticationService:
    """
    Business Rules:
    - Token must verify as an access token
    - The session it names must exist and still be active
    - User comes from the identity cache, else from the store (cached after)
    - User must be active and not explicitly unapproved (None = legacy, approved)
    - A successful check refreshes the session's last activity
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_service: TokenService,
        sessions: SessionRegistry,
        user_cache: UserCache,
    ):
        self.uow = uow
        self.token_service = token_service
        self.sessions = sessions
        self.user_cache = user_cache

    async def _load_user(self, user_id: str) -> Optional[UserInfo]:
        cached = self.user_cache.get(user_id)
        if cached is not None:
            return cached

        try:
            user_uuid = UUID(user_id)
        except ValueError:
            return None

        async with self.uow:
            user = await self.uow.users.get_by_id(user_uuid)
            if user is None:
                return None
            info = UserInfo.from_user(user)

        self.user_cache.set(user_id, info)
        return info

    async def authenticate(self, token: Optional[str]) -> Result[AuthenticatedUser]:
        if not token:
            return Return.err(errors.AUTHENTICATION_REQUIRED)

        payload = self.token_service.verify_access_token(token)
        if payload is None:
            return Return.err(errors.INVALID_TOKEN)

        session_id = payload["session_id"]
        session = self.sessions.get_session(session_id)
        if session is None or not session.is_active:
            return Return.err(errors.INVALID_TOKEN)

        user = await self._load_user(payload["user_id"])
        if user is None:
            return Return.err(errors.INVALID_TOKEN)

        if user.status != UserStatus.active.value:
            return Return.err(errors.ACCOUNT_DEACTIVATED)

        if user.is_approved is False:
            return Return.err(errors.ACCOUNT_PENDING_APPROVAL)

        self.sessions.update_session_activity(session_id)

        return Return.ok(AuthenticatedUser(user=user, session_id=session_id))
