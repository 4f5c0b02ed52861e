"""
Login Use Case

Verifies credentials, enforces the single-active-session policy and issues
a token pair bound to a fresh session.
"""

import logging
from typing import Optional

from pos_auth.api.utils.jwt import TokenService
from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.passwords import burn_password_check, verify_password
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain import errors
from pos_auth.domain.entities import DeviceInfo, TerminationReason, User, UserRole
from pos_auth.domain.errors import ErrorCode
from pos_auth.domain.events import (
    ConcurrentLoginDetected,
    SessionTerminated,
    UserSummary,
)
from pos_auth.libs.result import Error, Result, Return
from .dtos import LoginResponse, SessionInfo, TokenPair, UserInfo

logger = logging.getLogger(__name__)

CONCURRENT_LOGIN_MESSAGE = (
    "Your session has been terminated due to a new login from another device"
)

# Roles allowed through each login screen
LOGIN_MODE_ROLES = {
    "admin": (UserRole.superadmin.value, UserRole.manager.value),
    "cashier": (UserRole.cashier.value,),
}


class LoginUseCase:
    """
    Use case for user login and JWT issuance.

    Business Rules:
    - Identifier is a username or an email (case-insensitive)
    - User must have status=active; is_approved=False is rejected
    - Password check costs the same whether or not the user exists
    - Only one live session per user: earlier sessions are evicted, their
      clients are told before the sessions are deactivated, and the user
      plus every active superadmin are emailed
    - Notification failures never fail the login
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_service: TokenService,
        sessions: SessionRegistry,
        outbox: Outbox,
        clock: Clock = utcnow,
    ):
        self.uow = uow
        self.token_service = token_service
        self.sessions = sessions
        self.outbox = outbox
        self.clock = clock

    async def execute(
        self,
        identifier: str,
        password: str,
        device_info: Optional[DeviceInfo] = None,
        login_mode: Optional[str] = None,
    ) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            identifier: Username or email
            password: Plain text password
            device_info: Client description stored on the session
            login_mode: "admin" or "cashier" to restrict which roles may log in

        Returns:
            Result with LoginResponse (user, tokens, session), or Error
        """
        async with self.uow:
            user = await self.uow.users.get_active_by_identifier(identifier.strip())

            if user is None:
                burn_password_check(password)
                return Return.err(errors.INVALID_CREDENTIALS)

            if not verify_password(password, user.password_hash):
                return Return.err(errors.INVALID_CREDENTIALS)

            if user.is_approved is False:
                return Return.err(errors.ACCOUNT_PENDING_APPROVAL)

            role = UserRole(user.role).value
            if login_mode is not None and role not in LOGIN_MODE_ROLES.get(login_mode, ()):
                return Return.err(
                    Error(
                        ErrorCode.ROLE_MISMATCH,
                        f"This account cannot sign in through the {login_mode} login.",
                    )
                )

            await self._evict_existing_sessions(user, device_info)

            now = self.clock()
            user.last_login = now
            user.updated_at = now
            await self.uow.users.update(user)
            await self.uow.commit()

            session_id = self.sessions.generate_session_id()
            session = self.sessions.create_session(str(user.id), session_id, device_info)
            tokens = self.token_service.generate_token_pair(user, session_id)

            logger.info(f"User {user.username} logged in, session {session_id[:8]}...")

            return Return.ok(
                LoginResponse(
                    user=UserInfo.from_user(user),
                    tokens=TokenPair(**tokens),
                    session=SessionInfo(**session.model_dump(exclude={"user_id"})),
                )
            )

    async def _evict_existing_sessions(
        self, user: User, device_info: Optional[DeviceInfo]
    ) -> None:
        user_id = str(user.id)
        existing = self.sessions.get_user_sessions(user_id)
        if not existing:
            return

        for session in existing:
            self.outbox.publish(
                SessionTerminated(
                    user_id=user_id,
                    session_id=session.session_id,
                    reason=TerminationReason.concurrent_login,
                    message=CONCURRENT_LOGIN_MESSAGE,
                    new_device_info=device_info,
                )
            )

        # Clients must get the push while their session is still live
        await self.outbox.flush()

        terminated = self.sessions.deactivate_all_user_sessions(user_id)

        superadmins = await self.uow.users.list_active_by_role(UserRole.superadmin)
        self.outbox.publish(
            ConcurrentLoginDetected(
                user=UserSummary.from_user(user),
                new_device_info=device_info,
                terminated_count=terminated,
                superadmin_emails=[admin.email for admin in superadmins],
            )
        )

        logger.warning(
            f"Concurrent login: {terminated} session(s) terminated for user {user.username}"
        )
