"""
Request Password Reset Use Case

Issues a single-use reset token and emails the reset link.
"""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional

from pos_auth.app.services import email_templates
from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.notifications import IEmailSender
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain.entities import PasswordResetToken
from pos_auth.domain.errors import ErrorCode
from pos_auth.libs.result import Error, Result, Return
from .dtos import RequestPasswordResetResponse

logger = logging.getLogger(__name__)

GENERIC_RESPONSE = RequestPasswordResetResponse(
    status="sent",
    message="If an account with that email exists, a password reset link has been sent.",
)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Same response whether or not the email belongs to an active user
    - At most one request per user inside the rate-limit window
    - Earlier unused tokens of the user are invalidated
    - Token: 32 random bytes hex, stored as SHA-256, short TTL
    - If the email cannot be sent the new token row is deleted again
    """

    def __init__(
        self,
        uow: UnitOfWork,
        email_sender: IEmailSender,
        client_url: str,
        store_name: str = "SmartGrocery",
        token_ttl: timedelta = timedelta(minutes=15),
        rate_limit_minutes: int = 5,
        clock: Clock = utcnow,
    ):
        self.uow = uow
        self.email_sender = email_sender
        self.client_url = client_url.rstrip("/")
        self.store_name = store_name
        self.token_ttl = token_ttl
        self.rate_limit_minutes = rate_limit_minutes
        self.clock = clock

    async def has_recent_reset_attempts(self, email: str, minutes: int = 5) -> bool:
        async with self.uow:
            user = await self.uow.users.get_active_by_email(email)
            if user is None:
                return False
            since = self.clock() - timedelta(minutes=minutes)
            return await self.uow.password_reset_tokens.count_created_since(user.id, since) > 0

    async def execute(
        self,
        email: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[RequestPasswordResetResponse]:
        if await self.has_recent_reset_attempts(email, self.rate_limit_minutes):
            return Return.err(
                Error(
                    ErrorCode.RATE_LIMITED,
                    "A reset link was sent recently. Please wait a few minutes "
                    "before requesting another.",
                )
            )

        async with self.uow:
            user = await self.uow.users.get_active_by_email(email)

            if user is None:
                logger.info("Password reset requested for unknown email")
                return Return.ok(GENERIC_RESPONSE)

            now = self.clock()
            invalidated = await self.uow.password_reset_tokens.invalidate_unused_for_user(
                user.id, now
            )

            reset_token = secrets.token_hex(32)
            row = PasswordResetToken(
                user_id=user.id,
                token_hash=hash_reset_token(reset_token),
                used=False,
                ip_address=ip_address,
                user_agent=user_agent,
                expires_at=now + self.token_ttl,
                created_at=now,
                updated_at=now,
            )
            row = await self.uow.password_reset_tokens.create(row)
            await self.uow.commit()

            message = email_templates.password_reset_email(
                user.email,
                user.first_name,
                f"{self.client_url}/reset-password/{reset_token}",
                int(self.token_ttl.total_seconds() // 60),
                self.store_name,
            )
            try:
                delivered = await self.email_sender.send_email(message)
            except Exception as e:
                logger.error(f"Password reset email for user {user.id} raised: {e}")
                delivered = False

            if not delivered:
                await self.uow.password_reset_tokens.delete(row)
                await self.uow.commit()
                return Return.err(
                    Error(
                        ErrorCode.EMAIL_DELIVERY_FAILED,
                        "Failed to send password reset email. Please try again later.",
                    )
                )

            logger.info(
                f"Password reset token issued for user {user.id} "
                f"({invalidated} earlier token(s) invalidated)"
            )
            return Return.ok(GENERIC_RESPONSE)
