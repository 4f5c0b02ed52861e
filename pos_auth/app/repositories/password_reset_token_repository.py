from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pos_auth.domain.entities import PasswordResetToken


class IPasswordResetTokenRepository(ABC):
    """PasswordResetToken repository interface - application layer"""

    @abstractmethod
    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Create a new password reset token"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by token hash"""
        pass

    @abstractmethod
    async def update(self, token: PasswordResetToken) -> PasswordResetToken:
        """Update existing password reset token"""
        pass

    @abstractmethod
    async def delete(self, token: PasswordResetToken) -> None:
        """Remove a token row"""
        pass

    @abstractmethod
    async def invalidate_unused_for_user(self, user_id: UUID, used_at: datetime) -> int:
        """Mark every unused token of a user as used. Returns count."""
        pass

    @abstractmethod
    async def count_created_since(self, user_id: UUID, since: datetime) -> int:
        """Count tokens issued to a user at or after ``since``"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime, used_before: datetime) -> int:
        """Delete expired tokens and tokens used before ``used_before``. Returns count."""
        pass

    @abstractmethod
    async def get_stats(self, now: datetime) -> Dict[str, int]:
        """Counts of total, active (unused, unexpired), expired and used tokens"""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: UUID, limit: int = 10) -> List[PasswordResetToken]:
        """Most recent tokens issued to a user, newest first"""
        pass
