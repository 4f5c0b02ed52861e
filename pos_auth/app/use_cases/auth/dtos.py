"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from pos_auth.domain.entities import DeviceInfo, User, UserRole, UserStatus


# ============================================================================
# Shared models
# ============================================================================


class UserInfo(BaseModel):
    """Outward view of a user. Never carries the password hash."""

    id: str
    username: str
    email: str
    role: str
    first_name: str
    last_name: str
    status: str
    is_approved: Optional[bool] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            role=UserRole(user.role).value,
            first_name=user.first_name,
            last_name=user.last_name,
            status=UserStatus(user.status).value,
            is_approved=user.is_approved,
            last_login=user.last_login,
            created_at=user.created_at,
        )


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


class SessionInfo(BaseModel):
    session_id: str
    device_info: Optional[DeviceInfo] = None
    is_active: bool
    last_activity: datetime
    created_at: datetime
    expires_at: datetime


# ============================================================================
# Response DTOs
# ============================================================================


class LoginResponse(BaseModel):
    """Response for user login use case"""

    user: UserInfo
    tokens: TokenPair
    session: SessionInfo


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case"""

    tokens: TokenPair
    session_id: str


class LogoutResponse(BaseModel):
    status: str
    message: str
    sessions_terminated: int = 1


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    status: str
    message: str


class VerifyResetTokenResponse(BaseModel):
    """Token is valid; identifies whose password it resets"""

    valid: bool
    user: UserInfo
    expires_at: datetime


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    status: str
    message: str
    sessions_terminated: int = 0


class ChangePasswordResponse(BaseModel):
    status: str
    message: str


class ResetTokenStatsResponse(BaseModel):
    total_tokens: int
    active_tokens: int
    expired_tokens: int
    used_tokens: int
    generated_at: datetime


class ResetTokenRecord(BaseModel):
    """A reset request as shown to administrators; the token hash is never included"""

    id: str
    created_at: datetime
    expires_at: datetime
    used: bool
    used_at: Optional[datetime] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class ResetHistoryResponse(BaseModel):
    user_id: str
    tokens: List[ResetTokenRecord]
