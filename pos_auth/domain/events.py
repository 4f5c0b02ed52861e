"""
Domain events published by the auth core.

Use cases record what happened; notification handlers decide how it is
delivered (real-time push, email). Events carry everything a handler needs
so that handlers never touch the credential store.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from pos_auth.domain.entities import (
    DeviceInfo,
    TerminationReason,
    User,
    UserRole,
    UserStatus,
)


def _now() -> datetime:
    return datetime.utcnow()


class DomainEvent(BaseModel):
    occurred_at: datetime = Field(default_factory=_now)


class UserSummary(BaseModel):
    id: str
    username: str
    email: str
    role: str
    first_name: str
    last_name: str
    status: str
    is_approved: Optional[bool] = None

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            role=UserRole(user.role).value,
            first_name=user.first_name,
            last_name=user.last_name,
            status=UserStatus(user.status).value,
            is_approved=user.is_approved,
        )


class SessionTerminated(DomainEvent):
    """A user's live connections must be told their session ended"""

    user_id: str
    session_id: Optional[str] = None
    reason: TerminationReason
    message: str
    new_device_info: Optional[DeviceInfo] = None


class ConcurrentLoginDetected(DomainEvent):
    """Previous sessions were evicted by a login from another device"""

    user: UserSummary
    new_device_info: Optional[DeviceInfo] = None
    terminated_count: int
    superadmin_emails: List[str] = Field(default_factory=list)


class UserRegistered(DomainEvent):
    """A new account was created and may need approval"""

    user: UserSummary
    self_registered: bool = True


class UserApprovalChanged(DomainEvent):
    """An approver approved or rejected an account"""

    user: UserSummary
    approved: bool
    approver: UserSummary
    reason: Optional[str] = None
