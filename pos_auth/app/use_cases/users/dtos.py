"""
User management DTOs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from pos_auth.app.use_cases.auth.dtos import SessionInfo, UserInfo


class ApprovalResponse(BaseModel):
    user: UserInfo
    approved: bool
    message: str


class DeleteUserResponse(BaseModel):
    user_id: str
    status: str
    sessions_terminated: int


class ChangeRoleResponse(BaseModel):
    user: UserInfo
    previous_role: str


class RevokeSessionsResponse(BaseModel):
    target_user_id: str
    revoked_count: int


class UserSessionsResponse(BaseModel):
    current_session_id: Optional[str] = None
    sessions: List[SessionInfo]


class SessionStatsResponse(BaseModel):
    total_sessions: int
    active_sessions: int
    expired_sessions: int
    generated_at: datetime


class UpdateProfileCommand(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class PendingUsersResponse(BaseModel):
    users: List[UserInfo]
    count: int


class UserListResponse(BaseModel):
    users: List[UserInfo]
    total: int
    page: int
    limit: int
    pages: int


class BulkApprovalFailure(BaseModel):
    user_id: str
    code: str
    message: str


class BulkApprovalResponse(BaseModel):
    approved: bool
    succeeded: List[str]
    failed: List[BulkApprovalFailure]
