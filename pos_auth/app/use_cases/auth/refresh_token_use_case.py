"""
Refresh Token Use Case

Mints a new token pair for a still-live session.
"""

from uuid import UUID

from pos_auth.api.utils.jwt import TokenService
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain import errors
from pos_auth.domain.entities import UserStatus
from pos_auth.libs.result import Result, Return
from .dtos import RefreshTokenResponse, TokenPair


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT tokens.

    Business Rules:
    - Refresh token must verify against the refresh secret with token_type=refresh
    - The session it names must exist and still be active
    - User must still be active and not unapproved
    - The new pair is bound to the same session
    """

    def __init__(
        self, uow: UnitOfWork, token_service: TokenService, sessions: SessionRegistry
    ):
        self.uow = uow
        self.token_service = token_service
        self.sessions = sessions

    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        payload = self.token_service.verify_refresh_token(refresh_token)
        if payload is None:
            return Return.err(errors.INVALID_TOKEN)

        session_id = payload["session_id"]
        session = self.sessions.get_session(session_id)
        if session is None or not session.is_active:
            return Return.err(errors.INVALID_TOKEN)

        try:
            user_id = UUID(payload["user_id"])
        except ValueError:
            return Return.err(errors.INVALID_TOKEN)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)

            if user is None or str(user.id) != session.user_id:
                return Return.err(errors.INVALID_TOKEN)

            if user.status != UserStatus.active:
                return Return.err(errors.ACCOUNT_DEACTIVATED)

            if user.is_approved is False:
                return Return.err(errors.ACCOUNT_PENDING_APPROVAL)

            tokens = self.token_service.generate_token_pair(user, session_id)

        return Return.ok(
            RefreshTokenResponse(tokens=TokenPair(**tokens), session_id=session_id)
        )
