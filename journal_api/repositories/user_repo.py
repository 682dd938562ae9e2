"""
User Repository

Data access layer for users, follows and languages.
"""

from typing import Optional, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from journal_api.repositories.base import BaseRepository
from journal_api.models import User, Follow, Language, LanguageLevel, UserLanguage


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================
    # Declared level in a language
    # =================
    async def get_language_level(self, user_id: UUID, language_id: UUID) -> Optional[LanguageLevel]:
        """The user's self-declared level in a language, if they declared one."""
        result = await self.db.execute(
            select(UserLanguage.level).where(
                UserLanguage.user_id == user_id,
                UserLanguage.language_id == language_id,
            )
        )
        return result.scalar_one_or_none()


class FollowRepository(BaseRepository[Follow]):
    """Repository for Follow model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Follow, db)

    async def follow(self, follower_id: UUID, following_id: UUID) -> bool:
        """Create the follow edge. Returns False if it already existed."""
        return await self.insert_ignore_conflict(
            ["follower_id", "following_id"],
            follower_id=follower_id,
            following_id=following_id,
        )

    async def unfollow(self, follower_id: UUID, following_id: UUID) -> bool:
        result = await self.db.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )
        return result.rowcount > 0

    async def get_followers(self, user_id: UUID) -> List[User]:
        """Users following `user_id`, oldest follow first."""
        result = await self.db.execute(
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id)
            .order_by(Follow.created_at)
        )
        return list(result.scalars().all())


class LanguageRepository(BaseRepository[Language]):
    """Repository for Language model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Language, db)
