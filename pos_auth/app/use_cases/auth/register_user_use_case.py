"""
Register User Use Case

Account creation by a manager or superadmin.
"""

import logging
from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.passwords import hash_password, password_too_long
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.domain import errors
from pos_auth.domain.entities import User, UserRole, UserStatus
from pos_auth.domain.errors import ErrorCode
from pos_auth.domain.events import UserRegistered, UserSummary
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.libs.result import Error, Result, Return
from .dtos import UserInfo
from .register_cashier_use_case import USER_ALREADY_EXISTS
from .registration_dto import RegisterUserCommand, RegistrationResponse

logger = logging.getLogger(__name__)


class RegisterUserUseCase:
    """
    Business Rules:
    - The actor's role must be allowed to create the requested role
    - At most one superadmin may exist
    - Approval on creation comes from the permission table (auto_approve)
    - created_by records the actor; approved_by/approved_at when auto-approved
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authorization: AuthorizationEngine,
        outbox: Outbox,
        clock: Clock = utcnow,
    ):
        self.uow = uow
        self.authorization = authorization
        self.outbox = outbox
        self.clock = clock

    async def execute(
        self, command: RegisterUserCommand, actor_id: str, actor_role: str
    ) -> Result[RegistrationResponse]:
        # Unknown roles are never creatable
        if not self.authorization.has_permission(actor_role, "create", command.role):
            return Return.err(errors.INSUFFICIENT_PERMISSIONS)
        if password_too_long(command.password):
            return Return.err(errors.PASSWORD_TOO_LONG)
        role = UserRole(command.role)

        email = command.email.strip().lower()

        async with self.uow:
            if role == UserRole.superadmin and await self.uow.users.get_superadmin():
                return Return.err(
                    Error(ErrorCode.SUPERADMIN_EXISTS, "A superadmin already exists")
                )

            existing = await self.uow.users.find_by_username_or_email(
                command.username, email
            )
            if existing is not None:
                return Return.err(USER_ALREADY_EXISTS)

            auto_approved = self.authorization.should_auto_approve(actor_role, role.value)
            now = self.clock()
            creator = UUID(actor_id)

            user = User(
                username=command.username,
                email=email,
                password_hash=hash_password(command.password),
                role=role,
                first_name=command.first_name,
                last_name=command.last_name,
                status=UserStatus.active,
                is_approved=auto_approved,
                approved_by=creator if auto_approved else None,
                approved_at=now if auto_approved else None,
                created_by=creator,
                created_at=now,
                updated_at=now,
            )
            user = await self.uow.users.create(user)
            await self.uow.commit()

            if not auto_approved:
                self.outbox.publish(
                    UserRegistered(user=UserSummary.from_user(user), self_registered=False)
                )

            logger.info(
                f"{actor_role} {actor_id} created {role.value} {user.username} "
                f"(approved={auto_approved})"
            )

            return Return.ok(
                RegistrationResponse(
                    user=UserInfo.from_user(user),
                    requires_approval=not auto_approved,
                    message=(
                        "User created successfully."
                        if auto_approved
                        else "User created and is pending approval."
                    ),
                    created_by=actor_id,
                )
            )
