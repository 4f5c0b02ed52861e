"""
Error codes returned by POS auth use cases.

Authentication messages are deliberately generic so callers cannot tell
"no such user" from "wrong password".
"""

from enum import Enum

from pos_auth.libs.result import Error


class ErrorCode(str, Enum):
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    ACCOUNT_DEACTIVATED = "ACCOUNT_DEACTIVATED"
    ACCOUNT_PENDING_APPROVAL = "ACCOUNT_PENDING_APPROVAL"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ROLE_MISMATCH = "ROLE_MISMATCH"
    RESET_TOKEN_INVALID = "RESET_TOKEN_INVALID"
    RATE_LIMITED = "RATE_LIMITED"
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    SAME_PASSWORD = "SAME_PASSWORD"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    SUPERADMIN_EXISTS = "SUPERADMIN_EXISTS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"


class ConfigurationError(Exception):
    """Raised at startup when required settings (signing secrets) are missing"""


AUTHENTICATION_REQUIRED = Error(
    ErrorCode.AUTHENTICATION_REQUIRED, "Access denied. No token provided."
)
INVALID_TOKEN = Error(ErrorCode.INVALID_TOKEN, "Invalid or expired token.")
ACCOUNT_DEACTIVATED = Error(ErrorCode.ACCOUNT_DEACTIVATED, "Account is deactivated.")
ACCOUNT_PENDING_APPROVAL = Error(
    ErrorCode.ACCOUNT_PENDING_APPROVAL,
    "Account is not approved. Please wait for approval.",
)
INSUFFICIENT_PERMISSIONS = Error(
    ErrorCode.INSUFFICIENT_PERMISSIONS, "Access denied. Insufficient permissions."
)
INVALID_CREDENTIALS = Error(
    ErrorCode.INVALID_CREDENTIALS,
    "Invalid credentials. Please check your email/username and password.",
)
RESET_TOKEN_INVALID = Error(
    ErrorCode.RESET_TOKEN_INVALID,
    "Invalid or expired reset token. Please request a new password reset.",
)
PASSWORD_TOO_LONG = Error(
    ErrorCode.INVALID_PASSWORD, "Password cannot be longer than 72 bytes"
)
