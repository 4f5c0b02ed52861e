"""
Authentication Use Cases

All authentication-related business logic.
"""

from .dtos import (
    ChangePasswordResponse,
    ConfirmPasswordResetResponse,
    LoginResponse,
    LogoutResponse,
    RefreshTokenResponse,
    RequestPasswordResetResponse,
    ResetHistoryResponse,
    ResetTokenStatsResponse,
    SessionInfo,
    TokenPair,
    UserInfo,
    VerifyResetTokenResponse,
)
from .registration_dto import RegisterUserCommand, RegistrationResponse
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .register_cashier_use_case import RegisterCashierUseCase
from .register_user_use_case import RegisterUserUseCase
from .setup_superadmin_use_case import SetupSuperadminUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .verify_reset_token_use_case import VerifyResetTokenUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .change_password_use_case import ChangePasswordUseCase
from .cleanup_reset_tokens import cleanup_expired_tokens
from .reset_token_reports_use_case import ResetTokenReportsUseCase

__all__ = [
    # Use Cases
    "LoginUseCase",
    "LogoutUseCase",
    "RefreshTokenUseCase",
    "RegisterCashierUseCase",
    "RegisterUserUseCase",
    "SetupSuperadminUseCase",
    "RequestPasswordResetUseCase",
    "VerifyResetTokenUseCase",
    "ConfirmPasswordResetUseCase",
    "ChangePasswordUseCase",
    "cleanup_expired_tokens",
    "ResetTokenReportsUseCase",
    # DTOs - Commands
    "RegisterUserCommand",
    # DTOs - Responses
    "LoginResponse",
    "LogoutResponse",
    "RefreshTokenResponse",
    "RegistrationResponse",
    "RequestPasswordResetResponse",
    "VerifyResetTokenResponse",
    "ConfirmPasswordResetResponse",
    "ChangePasswordResponse",
    "ResetTokenStatsResponse",
    "ResetHistoryResponse",
    # DTOs - Nested Models
    "UserInfo",
    "TokenPair",
    "SessionInfo",
]
