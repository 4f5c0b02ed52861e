"""
User Entity

Identity and authorization record for POS staff.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from .enums import ApprovalState, UserRole, UserStatus


class User(SQLModel, table=True):
    """
    User entity - a superadmin, manager or cashier account.

    Business Rules:
    - Username and email are unique; email is stored lowercase
    - Password stored as bcrypt hash, never serialized outward
    - Only one superadmin may exist (checked on creation)
    - is_approved=None marks a legacy record and counts as approved
    - Deletion is soft: status=deleted, the row is kept
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, min_length=3, max_length=30)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    role: UserRole = Field(default=UserRole.cashier, index=True)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)

    status: UserStatus = Field(default=UserStatus.active, index=True)

    # Approval workflow
    is_approved: Optional[bool] = Field(default=False)
    approved_by: Optional[UUID] = Field(default=None, foreign_key="users.id")
    approved_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_by: Optional[UUID] = Field(default=None, foreign_key="users.id")

    # Timestamps
    last_login: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )

    __table_args__ = (Index("idx_user_is_approved", "is_approved"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def effectively_approved(self) -> bool:
        # Records created before the approval workflow carry no flag
        return self.is_approved is not False

    @property
    def approval_state(self) -> ApprovalState:
        if self.status == UserStatus.deleted:
            return ApprovalState.deleted
        if self.status == UserStatus.inactive:
            return ApprovalState.rejected
        if self.effectively_approved:
            return ApprovalState.approved
        return ApprovalState.pending
