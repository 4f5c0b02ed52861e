"""
Confirm Password Reset Use Case

Redeems a reset token and logs the user out everywhere.
"""

import logging

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.passwords import (
    hash_password,
    password_too_long,
    verify_password,
)
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.domain import errors
from pos_auth.domain.entities import TerminationReason, UserStatus
from pos_auth.domain.errors import ErrorCode
from pos_auth.domain.events import SessionTerminated
from pos_auth.libs.result import Error, Result, Return
from .dtos import ConfirmPasswordResetResponse
from .request_password_reset_use_case import hash_reset_token

logger = logging.getLogger(__name__)

PASSWORD_RESET_MESSAGE = (
    "Your password has been reset. Please log in again with your new password."
)


def validate_new_password(password: str, min_length: int) -> Result[None]:
    if len(password) < min_length:
        return Return.err(
            Error(
                ErrorCode.INVALID_PASSWORD,
                f"Password must be at least {min_length} characters long",
            )
        )
    if password_too_long(password):
        return Return.err(errors.PASSWORD_TOO_LONG)
    return Return.ok(None)


SAME_PASSWORD = Error(
    ErrorCode.SAME_PASSWORD, "New password must be different from the current password"
)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token must be unused, unexpired and belong to an active user
    - New password must meet the minimum length and differ from the current one
    - Token is marked used; any other unused tokens of the user too
    - Every session of the user is terminated and the clients are told
    """

    def __init__(
        self,
        uow: UnitOfWork,
        sessions: SessionRegistry,
        user_cache: UserCache,
        outbox: Outbox,
        min_password_length: int = 6,
        clock: Clock = utcnow,
    ):
        self.uow = uow
        self.sessions = sessions
        self.user_cache = user_cache
        self.outbox = outbox
        self.min_password_length = min_password_length
        self.clock = clock

    async def execute(
        self, token: str, new_password: str
    ) -> Result[ConfirmPasswordResetResponse]:
        validation = validate_new_password(new_password, self.min_password_length)
        if validation.is_err():
            return Return.err(validation.error)

        async with self.uow:
            now = self.clock()
            row = await self.uow.password_reset_tokens.get_by_token_hash(
                hash_reset_token(token)
            )
            if row is None or not row.is_valid(now):
                return Return.err(errors.RESET_TOKEN_INVALID)

            user = await self.uow.users.get_by_id(row.user_id)
            if user is None or user.status != UserStatus.active:
                return Return.err(errors.RESET_TOKEN_INVALID)

            if verify_password(new_password, user.password_hash):
                return Return.err(SAME_PASSWORD)

            user.password_hash = hash_password(new_password)
            user.updated_at = now
            await self.uow.users.update(user)

            row.used = True
            row.used_at = now
            row.updated_at = now
            await self.uow.password_reset_tokens.update(row)
            await self.uow.password_reset_tokens.invalidate_unused_for_user(user.id, now)

            await self.uow.commit()

            user_id = str(user.id)

        terminated = self.sessions.deactivate_all_user_sessions(user_id)
        self.user_cache.invalidate(user_id)

        self.outbox.publish(
            SessionTerminated(
                user_id=user_id,
                reason=TerminationReason.password_reset,
                message=PASSWORD_RESET_MESSAGE,
            )
        )
        logger.info(f"Password reset for user {user_id}: {terminated} session(s) terminated")

        return Return.ok(
            ConfirmPasswordResetResponse(
                status="success",
                message=(
                    "Password has been reset successfully. All devices have been "
                    "logged out. You can now log in with your new password."
                ),
                sessions_terminated=terminated,
            )
        )
