"""
Profile Use Case

Reads and edits the authenticated user's own record.
"""

from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.app.use_cases.auth.dtos import UserInfo
from pos_auth.app.use_cases.auth.register_cashier_use_case import USER_ALREADY_EXISTS
from pos_auth.libs.result import Result, Return
from .approve_user_use_case import USER_NOT_FOUND
from .dtos import UpdateProfileCommand


class ProfileUseCase:
    def __init__(self, uow: UnitOfWork, user_cache: UserCache, clock: Clock = utcnow):
        self.uow = uow
        self.user_cache = user_cache
        self.clock = clock

    async def get_profile(self, user_id: str) -> Result[UserInfo]:
        async with self.uow:
            user = await self.uow.users.get_by_id(UUID(user_id))
            if user is None:
                return Return.err(USER_NOT_FOUND)
            return Return.ok(UserInfo.from_user(user))

    async def update_profile(
        self, user_id: str, command: UpdateProfileCommand
    ) -> Result[UserInfo]:
        async with self.uow:
            user = await self.uow.users.get_by_id(UUID(user_id))
            if user is None:
                return Return.err(USER_NOT_FOUND)

            if command.email is not None:
                email = command.email.strip().lower()
                if email != user.email:
                    owner = await self.uow.users.get_by_email(email)
                    if owner is not None and owner.id != user.id:
                        return Return.err(USER_ALREADY_EXISTS)
                    user.email = email

            if command.first_name is not None:
                user.first_name = command.first_name
            if command.last_name is not None:
                user.last_name = command.last_name

            user.updated_at = self.clock()
            user = await self.uow.users.update(user)
            await self.uow.commit()

            info = UserInfo.from_user(user)

        self.user_cache.invalidate(user_id)
        return Return.ok(info)
