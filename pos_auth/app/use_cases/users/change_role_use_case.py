"""
Change User Role Use Case
"""

import logging
from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.app.use_cases.auth.dtos import UserInfo
from pos_auth.domain import errors
from pos_auth.domain.entities import UserRole, UserStatus
from pos_auth.domain.errors import ErrorCode
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.libs.result import Error, Result, Return
from .approve_user_use_case import USER_NOT_FOUND
from .dtos import ChangeRoleResponse

logger = logging.getLogger(__name__)


class ChangeRoleUseCase:
    """
    Business Rules:
    - Actor must be allowed to manage the target's current role
      and to create the new role
    - The superadmin role is never assigned or taken away here
    - Deleted accounts keep their role
    - Existing tokens stay valid; the cached identity is invalidated so
      the next request sees the new role
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authorization: AuthorizationEngine,
        user_cache: UserCache,
        clock: Clock = utcnow,
    ):
        self.uow = uow
        self.authorization = authorization
        self.user_cache = user_cache
        self.clock = clock

    async def execute(
        self, target_user_id: UUID, new_role: str, actor_id: str, actor_role: str
    ) -> Result[ChangeRoleResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(USER_NOT_FOUND)

            current_role = UserRole(user.role)
            if current_role == UserRole.superadmin or new_role == UserRole.superadmin.value:
                return Return.err(
                    Error(ErrorCode.INVALID_STATE, "The superadmin role cannot be changed")
                )

            if user.status == UserStatus.deleted:
                return Return.err(Error(ErrorCode.INVALID_STATE, "User is deleted"))

            if not (
                self.authorization.has_permission(actor_role, "manage", current_role.value)
                and self.authorization.has_permission(actor_role, "create", new_role)
            ):
                return Return.err(errors.INSUFFICIENT_PERMISSIONS)

            user.role = UserRole(new_role)
            user.updated_at = self.clock()
            user = await self.uow.users.update(user)
            await self.uow.commit()

            info = UserInfo.from_user(user)

        self.user_cache.invalidate(info.id)
        logger.info(
            f"Role of user {info.id} changed {current_role.value} -> {new_role} by {actor_id}"
        )

        return Return.ok(ChangeRoleResponse(user=info, previous_role=current_role.value))
