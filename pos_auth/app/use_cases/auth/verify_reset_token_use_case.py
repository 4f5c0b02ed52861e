from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain import errors
from pos_auth.domain.entities import UserStatus
from pos_auth.libs.result import Result, Return
from .dtos import UserInfo, VerifyResetTokenResponse
from .request_password_reset_use_case import hash_reset_token


class VerifyResetTokenUseCase:
    """A token is valid iff unused, unexpired and its user is still active"""

    def __init__(self, uow: UnitOfWork, clock: Clock = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, token: str) -> Result[VerifyResetTokenResponse]:
        async with self.uow:
            row = await self.uow.password_reset_tokens.get_by_token_hash(
                hash_reset_token(token)
            )
            if row is None or not row.is_valid(self.clock()):
                return Return.err(errors.RESET_TOKEN_INVALID)

            user = await self.uow.users.get_by_id(row.user_id)
            if user is None or user.status != UserStatus.active:
                return Return.err(errors.RESET_TOKEN_INVALID)

            return Return.ok(
                VerifyResetTokenResponse(
                    valid=True, user=UserInfo.from_user(user), expires_at=row.expires_at
                )
            )
