from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from pos_auth.domain.entities import User, UserRole, UserStatus


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (lowercased) email address, any status"""
        pass

    @abstractmethod
    async def get_active_by_email(self, email: str) -> Optional[User]:
        """Get user with status=active by (lowercased) email address"""
        pass

    @abstractmethod
    async def get_active_by_identifier(self, identifier: str) -> Optional[User]:
        """Get user with status=active whose username or email matches"""
        pass

    @abstractmethod
    async def find_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[User]:
        """Find any user already holding the username or the email"""
        pass

    @abstractmethod
    async def get_superadmin(self) -> Optional[User]:
        """Get the superadmin account, if one exists"""
        pass

    @abstractmethod
    async def list_active_by_role(self, role: UserRole) -> List[User]:
        """List users with status=active and the given role"""
        pass

    @abstractmethod
    async def list_pending(self, roles: List[UserRole]) -> List[User]:
        """Active accounts awaiting approval (is_approved=False), oldest first"""
        pass

    @abstractmethod
    async def list_by_roles(
        self,
        roles: List[UserRole],
        status: Optional[UserStatus] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        """Page of users with one of the roles, newest first, plus the total match count"""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count all user records"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass
