"""
User Management Use Cases

All user-related business logic.
"""

from .approve_user_use_case import ApproveUserUseCase
from .bulk_approve_use_case import BulkApproveUseCase
from .delete_user_use_case import DeleteUserUseCase
from .change_role_use_case import ChangeRoleUseCase
from .revoke_sessions_use_case import ListSessionsUseCase, RevokeSessionsUseCase
from .profile_use_case import ProfileUseCase
from .list_users_use_case import ListPendingUsersUseCase, ListUsersUseCase
from .dtos import (
    ApprovalResponse,
    BulkApprovalResponse,
    ChangeRoleResponse,
    DeleteUserResponse,
    PendingUsersResponse,
    RevokeSessionsResponse,
    SessionStatsResponse,
    UpdateProfileCommand,
    UserListResponse,
    UserSessionsResponse,
)

__all__ = [
    "ApproveUserUseCase",
    "BulkApproveUseCase",
    "DeleteUserUseCase",
    "ChangeRoleUseCase",
    "ListSessionsUseCase",
    "RevokeSessionsUseCase",
    "ProfileUseCase",
    "ListPendingUsersUseCase",
    "ListUsersUseCase",
    "ApprovalResponse",
    "BulkApprovalResponse",
    "ChangeRoleResponse",
    "DeleteUserResponse",
    "PendingUsersResponse",
    "RevokeSessionsResponse",
    "SessionStatsResponse",
    "UpdateProfileCommand",
    "UserListResponse",
    "UserSessionsResponse",
]
