"""
POS Auth Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    ApprovalState,
    TerminationReason,
    UserRole,
    UserStatus,
)

# Export all entities
from .user import User
from .session import DeviceInfo, Session
from .password_reset_token import PasswordResetToken

__all__ = [
    # Enums
    "ApprovalState",
    "TerminationReason",
    "UserRole",
    "UserStatus",
    # Entities
    "User",
    "DeviceInfo",
    "Session",
    "PasswordResetToken",
]
