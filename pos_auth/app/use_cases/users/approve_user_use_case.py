"""
Approve User Use Case

Moves a pending account to approved, or rejects it.
"""

import logging
from typing import Optional
from uuid import UUID

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.outbox import Outbox
from pos_auth.app.services.session_registry import SessionRegistry
from pos_auth.app.services.unit_of_work import UnitOfWork
from pos_auth.app.services.user_cache import UserCache
from pos_auth.app.use_cases.auth.dtos import UserInfo
from pos_auth.domain import errors
from pos_auth.domain.entities import ApprovalState, UserRole, UserStatus
from pos_auth.domain.errors import ErrorCode
from pos_auth.domain.events import UserApprovalChanged, UserSummary
from pos_auth.domain.permissions import AuthorizationEngine
from pos_auth.libs.result import Error, Result, Return
from .dtos import ApprovalResponse

logger = logging.getLogger(__name__)

USER_NOT_FOUND = Error(ErrorCode.USER_NOT_FOUND, "User not found")


class ApproveUserUseCase:
    """
    Business Rules:
    - Actor's role must be allowed to approve the target's role
    - Deleted accounts cannot be approved or rejected
    - Approve: is_approved=True, approved_by/approved_at set, status=active
    - Reject: is_approved=False, approved_by/approved_at cleared,
      status=inactive, live sessions ended
    - Cached identity of the target is invalidated
    """

    def __init__(
        self,
        uow: UnitOfWork,
        authorization: AuthorizationEngine,
        sessions: SessionRegistry,
        user_cache: UserCache,
        outbox: Outbox,
        clock: Clock = utcnow,
    ):
        self.uow = uow
        self.authorization = authorization
        self.sessions = sessions
        self.user_cache = user_cache
        self.outbox = outbox
        self.clock = clock

    async def execute(
        self,
        target_user_id: UUID,
        approve: bool,
        actor_id: str,
        actor_role: str,
        reason: Optional[str] = None,
    ) -> Result[ApprovalResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(target_user_id)
            if user is None:
                return Return.err(USER_NOT_FOUND)

            if user.approval_state == ApprovalState.deleted:
                return Return.err(
                    Error(ErrorCode.INVALID_STATE, "Deleted accounts cannot be approved")
                )

            if not self.authorization.has_permission(
                actor_role, "approve", UserRole(user.role).value
            ):
                return Return.err(errors.INSUFFICIENT_PERMISSIONS)

            actor = await self.uow.users.get_by_id(UUID(actor_id))
            if actor is None:
                return Return.err(errors.INVALID_TOKEN)

            now = self.clock()
            if approve:
                user.is_approved = True
                user.approved_by = actor.id
                user.approved_at = now
                user.status = UserStatus.active
            else:
                user.is_approved = False
                user.approved_by = None
                user.approved_at = None
                user.status = UserStatus.inactive
            user.updated_at = now

            user = await self.uow.users.update(user)
            await self.uow.commit()

            target_id = str(user.id)
            info = UserInfo.from_user(user)
            event = UserApprovalChanged(
                user=UserSummary.from_user(user),
                approved=approve,
                approver=UserSummary.from_user(actor),
                reason=reason,
            )

        if not approve:
            self.sessions.deactivate_all_user_sessions(target_id)
        self.user_cache.invalidate(target_id)
        self.outbox.publish(event)

        verdict = "approved" if approve else "rejected"
        logger.info(f"User {target_id} {verdict} by {actor_role} {actor_id}")

        return Return.ok(
            ApprovalResponse(user=info, approved=approve, message=f"User {verdict} successfully")
        )
