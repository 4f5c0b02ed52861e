from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from pos_auth.app.repositories.user_repository import IUserRepository
from pos_auth.domain.entities import User, UserRole, UserStatus


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(
            User.email == email.lower(), User.status == UserStatus.active
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_identifier(self, identifier: str) -> Optional[User]:
        """Username match is exact, email match is case-insensitive"""
        stmt = select(User).where(
            or_(User.username == identifier, User.email == identifier.lower()),
            User.status == UserStatus.active,
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def find_by_username_or_email(
        self, username: str, email: str
    ) -> Optional[User]:
        stmt = select(User).where(
            or_(User.username == username, User.email == email.lower())
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def get_superadmin(self) -> Optional[User]:
        stmt = select(User).where(User.role == UserRole.superadmin)
        result = await self.session.exec(stmt)
        return result.first()

    async def list_active_by_role(self, role: UserRole) -> List[User]:
        stmt = select(User).where(User.role == role, User.status == UserStatus.active)
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_pending(self, roles: List[UserRole]) -> List[User]:
        if not roles:
            return []
        stmt = (
            select(User)
            .where(
                User.role.in_(roles),
                User.status == UserStatus.active,
                User.is_approved.is_(False),
            )
            .order_by(User.created_at.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_by_roles(
        self,
        roles: List[UserRole],
        status: Optional[UserStatus] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        if not roles:
            return [], 0

        conditions = [User.role.in_(roles)]
        if status is not None:
            conditions.append(User.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(User.username).like(pattern),
                    func.lower(User.email).like(pattern),
                    func.lower(User.first_name).like(pattern),
                    func.lower(User.last_name).like(pattern),
                )
            )

        total_stmt = select(func.count()).select_from(User).where(*conditions)
        total = (await self.session.exec(total_stmt)).one()

        stmt = (
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def count(self) -> int:
        stmt = select(func.count()).select_from(User)
        result = await self.session.exec(stmt)
        return result.one()

    async def create(self, user: User) -> User:
        """Create a new user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user
