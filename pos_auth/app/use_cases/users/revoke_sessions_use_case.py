"""
Session management use cases: listing, stats and forced revocation.
"""

import logging
from typing import Optional
from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.use_cases.auth.dtos import SessionInfo
from pos_auth.domain import errors
from pos_auth.domain.entities import UserRole
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.libs.result import Result, Return
from .approve_user_use_case import USER_NOT_FOUND
from .dtos import RevokeSessionsResponse, SessionStatsResponse, UserSessionsResponse

logger = logging.getLogger(__name__)


class ListSessionsUseCase:
    def __init__(self, sessions: SessionRegistry, clock: Clock = utcnow):
        self.sessions = sessions
        self.clock = clock

    def list_user_sessions(
        self, user_id: str, current_session_id: Optional[str] = None
    ) -> Result[UserSessionsResponse]:
        sessions = sorted(
            self.sessions.get_user_sessions(user_id),
            key=lambda s: s.last_activity,
            reverse=True,
        )
        return Return.ok(
            UserSessionsResponse(
                current_session_id=current_session_id,
                sessions=[
                    SessionInfo(**s.model_dump(exclude={"user_id"})) for s in sessions
                ],
            )
        )

    def session_stats(self) -> Result[SessionStatsResponse]:
        stats = self.sessions.get_session_stats()
        return Return.ok(SessionStatsResponse(**stats, generated_at=self.clock()))


class RevokeSessionsUseCase:
    """
    Business Rules:
    - Users may revoke their own sessions
    - Revoking someone else's requires manage permission on their role
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authorization: AuthorizationEngine,
        sessions: SessionRegistry,
    ):
        self.uow = uow
        self.authorization = authorization
        self.sessions = sessions

    async def revoke_all_sessions(
        self, target_user_id: UUID, actor_id: str, actor_role: str
    ) -> Result[RevokeSessionsResponse]:
        async with self.uow:
            target = await self.uow.users.get_by_id(target_user_id)
            if target is None:
                return Return.err(USER_NOT_FOUND)

            is_self = str(target.id) == actor_id
            if not is_self and not self.authorization.has_permission(
                actor_role, "manage", UserRole(target.role).value
            ):
                return Return.err(errors.INSUFFICIENT_PERMISSIONS)

        count = self.sessions.deactivate_all_user_sessions(str(target_user_id))
        logger.info(f"{actor_id} revoked {count} session(s) of user {target_user_id}")

        return Return.ok(
            RevokeSessionsResponse(target_user_id=str(target_user_id), revoked_count=count)
        )
