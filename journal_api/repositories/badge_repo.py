from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.repositories.base import BaseRepository
from journal_api.models import BadgeType, UserBadge


class BadgeRepository(BaseRepository[UserBadge]):
    """Repository for badges. A user holds each badge type at most once."""

    def __init__(self, db: AsyncSession):
        super().__init__(UserBadge, db)

    async def award(self, user_id: UUID, badge_type: BadgeType) -> bool:
        """Returns True if the badge was newly awarded."""
        return await self.insert_ignore_conflict(
            ["user_id", "type"],
            user_id=user_id,
            type=badge_type,
        )

    async def list_for_user(self, user_id: UUID) -> List[UserBadge]:
        result = await self.db.execute(
            select(UserBadge)
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.created_at)
        )
        return list(result.scalars().all())
