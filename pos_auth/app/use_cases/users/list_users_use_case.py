"""
Approval work-queue and user directory.

Each approver only sees the roles the permission table lets it act on.
"""

import math
from typing import List, Optional

from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.use_cases.auth.dtos import UserInfo
from pos_auth.domain import errors
from pos_auth.domain.entities import UserRole, UserStatus
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.libs.result import Result, Return
from .dtos import PendingUsersResponse, UserListResponse


def _roles_allowed(
    authorization: AuthorizationEngine, actor_role: str, action: str
) -> List[UserRole]:
    return [
        role
        for role in UserRole
        if authorization.has_permission(actor_role, action, role.value)
    ]


class ListPendingUsersUseCase:
    """
    Business Rules:
    - Lists active accounts with is_approved=False, oldest first
    - Only roles the actor may approve are included
    - An actor that may approve nothing is refused
    """

    def __init__(self, uow: UnitOfWork, authorization: AuthorizationEngine):
        self.uow = uow
        self.authorization = authorization

    async def execute(self, actor_role: str) -> Result[PendingUsersResponse]:
        roles = _roles_allowed(self.authorization, actor_role, "approve")
        if not roles:
            return Return.err(errors.INSUFFICIENT_PERMISSIONS)

        async with self.uow:
            users = await self.uow.users.list_pending(roles)
            infos = [UserInfo.from_user(user) for user in users]

        return Return.ok(PendingUsersResponse(users=infos, count=len(infos)))


class ListUsersUseCase:
    def __init__(self, uow: UnitOfWork, authorization: AuthorizationEngine):
        self.uow = uow
        self.authorization = authorization

    async def execute(
        self,
        actor_role: str,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Result[UserListResponse]:
        roles = _roles_allowed(self.authorization, actor_role, "view")
        if role is not None:
            roles = [r for r in roles if r.value == role]
        if not roles:
            return Return.err(errors.INSUFFICIENT_PERMISSIONS)

        async with self.uow:
            users, total = await self.uow.users.list_by_roles(
                roles,
                status=UserStatus(status) if status else None,
                search=search,
                offset=(page - 1) * limit,
                limit=limit,
            )
            infos = [UserInfo.from_user(user) for user in users]

        return Return.ok(
            UserListResponse(
                users=infos,
                total=total,
                page=page,
                limit=limit,
                pages=math.ceil(total / limit) if total else 0,
            )
        )
