"""
Setup Superadmin Use Case

Creates the one superadmin account of a fresh installation.
"""

import logging

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.passwords import hash_password, password_too_long
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain import errors
from pos_auth.domain.entities import User, UserRole, UserStatus
from pos_auth.domain.errors import ErrorCode
from pos_auth.libs.result import Error, Result, Return
from .dtos import UserInfo
from .register_cashier_use_case import USER_ALREADY_EXISTS
from .registration_dto import RegisterUserCommand, RegistrationResponse

logger = logging.getLogger(__name__)


class SetupSuperadminUseCase:
    def __init__(self, uow: UnitOfWork, clock: Clock = utcnow):
        self.uow = uow
        self.clock = clock

    async def execute(self, command: RegisterUserCommand) -> Result[RegistrationResponse]:
        if password_too_long(command.password):
            return Return.err(errors.PASSWORD_TOO_LONG)

        email = command.email.strip().lower()

        async with self.uow:
            if await self.uow.users.get_superadmin() is not None:
                return Return.err(
                    Error(ErrorCode.SUPERADMIN_EXISTS, "System is already set up")
                )

            if await self.uow.users.find_by_username_or_email(command.username, email):
                return Return.err(USER_ALREADY_EXISTS)

            now = self.clock()
            user = User(
                username=command.username,
                email=email,
                password_hash=hash_password(command.password),
                role=UserRole.superadmin,
                first_name=command.first_name,
                last_name=command.last_name,
                status=UserStatus.active,
                is_approved=True,
                approved_at=now,
                created_at=now,
                updated_at=now,
            )
            user = await self.uow.users.create(user)
            await self.uow.commit()

            logger.info(f"Superadmin {user.username} created")

            return Return.ok(
                RegistrationResponse(
                    user=UserInfo.from_user(user),
                    requires_approval=False,
                    message="Superadmin account created successfully.",
                )
            )
