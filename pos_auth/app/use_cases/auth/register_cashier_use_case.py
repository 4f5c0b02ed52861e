"""
Register Cashier Use Case

Public self-registration. The account exists immediately but cannot log in
until a manager or superadmin approves it.
"""

import logging

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.passwords import hash_password, password_too_long
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain import errors
from pos_auth.domain.entities import User, UserRole, UserStatus
from pos_auth.domain.errors import ErrorCode
from pos_auth.domain.events import UserRegistered, UserSummary
from pos_auth.libs.result import Error, Result, Return
from .dtos import UserInfo
from .registration_dto import RegisterUserCommand, RegistrationResponse

logger = logging.getLogger(__name__)

USER_ALREADY_EXISTS = Error(
    ErrorCode.USER_ALREADY_EXISTS, "User with this username or email already exists"
)


class RegisterCashierUseCase:
    """
    Business Rules:
    - Role is always cashier, whatever the request says
    - Username and email must be unused (email compared lowercase)
    - New account: status=active, is_approved=False (pending approval)
    - Managers and superadmins are notified in real time
    """

    def __init__(self, uow: UnitOfWork, outbox: Outbox, clock: Clock = utcnow):
        self.uow = uow
        self.outbox = outbox
        self.clock = clock

    async def execute(self, command: RegisterUserCommand) -> Result[RegistrationResponse]:
        if password_too_long(command.password):
            return Return.err(errors.PASSWORD_TOO_LONG)

        email = command.email.strip().lower()

        async with self.uow:
            existing = await self.uow.users.find_by_username_or_email(
                command.username, email
            )
            if existing is not None:
                return Return.err(USER_ALREADY_EXISTS)

            now = self.clock()
            user = User(
                username=command.username,
                email=email,
                password_hash=hash_password(command.password),
                role=UserRole.cashier,
                first_name=command.first_name,
                last_name=command.last_name,
                status=UserStatus.active,
                is_approved=False,
                created_at=now,
                updated_at=now,
            )
            user = await self.uow.users.create(user)
            await self.uow.commit()

            self.outbox.publish(
                UserRegistered(user=UserSummary.from_user(user), self_registered=True)
            )
            logger.info(f"Cashier {user.username} self-registered, pending approval")

            return Return.ok(
                RegistrationResponse(
                    user=UserInfo.from_user(user),
                    requires_approval=True,
                    message="Registration successful. Your account is pending approval.",
                )
            )
