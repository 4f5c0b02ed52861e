"""
Delete User Use Case

Soft delete: the row stays with status=deleted and can no longer log in.
"""

import logging
from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.domain import errors
from pos_auth.domain.entities import TerminationReason, UserRole, UserStatus
from pos_auth.domain.errors import ErrorCode
from pos_auth.domain.events import SessionTerminated
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.libs.result import Error, Result, Return
from .approve_user_use_case import USER_NOT_FOUND
from .dtos import DeleteUserResponse

logger = logging.getLogger(__name__)


class DeleteUserUseCase:
    """
    Business Rules:
    - Superadmin accounts are exempt from deletion
    - Actor's role must be allowed to manage the target's role
    - Deleted is terminal; deleting twice is rejected
    - All sessions of the target end, and its cached identity is dropped
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authorization: AuthorizationEngine,
        sessions: SessionRegistry,
        user_cache: UserCache,
        outbox: Outbox,
        clock: Clock = utcnow,
    ):
        self.uow = uow
        self.authorization = authorization
        self.sessions = sessions
        self.user_cache = user_cache
        self.outbox = outbox
        self.clock = clock

    async def execute(
        self, target_user_id: UUID, actor_id: str, actor_role: str
    ) -> Result[DeleteUserResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(USER_NOT_FOUND)

            role = UserRole(user.role)
            if role == UserRole.superadmin:
                return Return.err(
                    Error(ErrorCode.INVALID_STATE, "Superadmin accounts cannot be deleted")
                )

            if user.status == UserStatus.deleted:
                return Return.err(Error(ErrorCode.INVALID_STATE, "User is already deleted"))

            if not self.authorization.has_permission(actor_role, "manage", role.value):
                return Return.err(errors.INSUFFICIENT_PERMISSIONS)

            user.status = UserStatus.deleted
            user.updated_at = self.clock()
            await self.uow.users.update(user)
            await self.uow.commit()

            target_id = str(user.id)

        terminated = self.sessions.deactivate_all_user_sessions(target_id)
        self.user_cache.invalidate(target_id)

        if terminated:
            self.outbox.publish(
                SessionTerminated(
                    user_id=target_id,
                    reason=TerminationReason.account_deleted,
                    message="Your account has been deleted.",
                )
            )

        logger.info(f"User {target_id} deleted by {actor_role} {actor_id}")

        return Return.ok(
            DeleteUserResponse(
                user_id=target_id,
                status=UserStatus.deleted.value,
                sessions_terminated=terminated,
            )
        )
