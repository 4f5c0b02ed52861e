from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.passwords import hash_password, verify_password
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain.errors import ErrorCode
from pos_auth.libs.result import Error, Result, Return
from .confirm_password_reset_use_case import SAME_PASSWORD, validate_new_password
from .dtos import ChangePasswordResponse


class ChangePasswordUseCase:
    """Authenticated password change. Other sessions stay alive."""

    def __init__(self, uow: UnitOfWork, min_password_length: int = 6, clock: Clock = utcnow):
        self.uow = uow
        self.min_password_length = min_password_length
        self.clock = clock

    async def execute(
        self, user_id: str, current_password: str, new_password: str
    ) -> Result[ChangePasswordResponse]:
        validation = validate_new_password(new_password, self.min_password_length)
        if validation.is_err():
            return Return.err(validation.error)

        async with self.uow:
            user = await self.uow.users.get_by_id(UUID(user_id))
            if user is None:
                return Return.err(Error(ErrorCode.USER_NOT_FOUND, "User not found"))

            if not verify_password(current_password, user.password_hash):
                return Return.err(
                    Error(ErrorCode.INVALID_PASSWORD, "Current password is incorrect")
                )

            if current_password == new_password:
                return Return.err(SAME_PASSWORD)

            user.password_hash = hash_password(new_password)
            user.updated_at = self.clock()
            await self.uow.users.update(user)
            await self.uow.commit()

        return Return.ok(
            ChangePasswordResponse(status="success", message="Password changed successfully")
        )
