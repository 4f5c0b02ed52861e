"""
Password reset reporting for administrators.
"""

from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain.errors import ErrorCode
from pos_auth.libs.result import Error, Result, Return
from .dtos import ResetHistoryResponse, ResetTokenRecord, ResetTokenStatsResponse

USER_NOT_FOUND = Error(ErrorCode.USER_NOT_FOUND, "User not found")


class ResetTokenReportsUseCase:
    def __init__(self, uow: UnitOfWork, clock: Clock = utcnow):
        self.uow = uow
        self.clock = clock

    async def token_stats(self) -> Result[ResetTokenStatsResponse]:
        now = self.clock()
        async with self.uow:
            stats = await self.uow.password_reset_tokens.get_stats(now)
        return Return.ok(ResetTokenStatsResponse(**stats, generated_at=now))

    async def user_history(
        self, user_id: UUID, limit: int = 10
    ) -> Result[ResetHistoryResponse]:
        async with self.uow:
            if await self.uow.users.get_by_id(user_id) is None:
                return Return.err(USER_NOT_FOUND)

            tokens = await self.uow.password_reset_tokens.list_for_user(user_id, limit)
            records = [
                ResetTokenRecord(
                    id=str(token.id),
                    created_at=token.created_at,
                    expires_at=token.expires_at,
                    used=token.used,
                    used_at=token.used_at,
                    ip_address=token.ip_address,
                    user_agent=token.user_agent,
                )
                for token in tokens
            ]

        return Return.ok(ResetHistoryResponse(user_id=str(user_id), tokens=records))
