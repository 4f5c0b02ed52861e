"""
POS Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Closed set of staff roles"""

    superadmin = "superadmin"
    manager = "manager"
    cashier = "cashier"


class UserStatus(str, Enum):
    """User account status"""

    active = "active"
    inactive = "inactive"
    deleted = "deleted"


class ApprovalState(str, Enum):
    """Derived approval lifecycle state of a user"""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    deleted = "deleted"


class TerminationReason(str, Enum):
    """Why a session was forcibly ended"""

    concurrent_login = "concurrent_login"
    password_reset = "password_reset"
    account_deleted = "account_deleted"
