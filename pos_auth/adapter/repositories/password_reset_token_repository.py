from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from pos_auth.app.repositories.password_reset_token_repository import IPasswordResetTokenRepository
from pos_auth.domain.entities import PasswordResetToken


class PasswordResetTokenRepository(IPasswordResetTokenRepository):
    """PasswordResetToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, token: PasswordResetToken) -> PasswordResetToken:
        """Create a new password reset token"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetToken]:
        """Get password reset token by token hash"""
        stmt = select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def update(self, token: PasswordResetToken) -> PasswordResetToken:
        """Update existing password reset token"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def delete(self, token: PasswordResetToken) -> None:
        await self.session.delete(token)
        await self.session.flush()

    async def invalidate_unused_for_user(self, user_id: UUID, used_at: datetime) -> int:
        stmt = (
            update(PasswordResetToken)
            .where(
                PasswordResetToken.user_id == user_id,
                PasswordResetToken.used == False,  # noqa: E712
            )
            .values(used=True, used_at=used_at, updated_at=used_at)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def count_created_since(self, user_id: UUID, since: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(PasswordResetToken)
            .where(
                PasswordResetToken.user_id == user_id,
                PasswordResetToken.created_at >= since,
            )
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def delete_expired(self, now: datetime, used_before: datetime) -> int:
        stmt = delete(PasswordResetToken).where(
            or_(
                PasswordResetToken.expires_at < now,
                and_(
                    PasswordResetToken.used == True,  # noqa: E712
                    PasswordResetToken.used_at < used_before,
                ),
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def get_stats(self, now: datetime) -> Dict[str, int]:
        async def count(*conditions) -> int:
            stmt = select(func.count()).select_from(PasswordResetToken).where(*conditions)
            return (await self.session.exec(stmt)).one()

        return {
            "total_tokens": await count(),
            "active_tokens": await count(
                PasswordResetToken.used == False,  # noqa: E712
                PasswordResetToken.expires_at > now,
            ),
            "expired_tokens": await count(PasswordResetToken.expires_at < now),
            "used_tokens": await count(PasswordResetToken.used == True),  # noqa: E712
        }

    async def list_for_user(self, user_id: UUID, limit: int = 10) -> List[PasswordResetToken]:
        stmt = (
            select(PasswordResetToken)
            .where(PasswordResetToken.user_id == user_id)
            .order_by(PasswordResetToken.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())
