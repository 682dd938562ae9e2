"""
Post Repository

Data access layer for Post, PostClap and PostComment models.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from journal_api.repositories.base import BaseRepository
from journal_api.models import Post, PostClap, PostComment, PostCommentSubscription


class PostRepository(BaseRepository[Post]):
    """Repository for posts."""

    def __init__(self, db: AsyncSession):
        super().__init__(Post, db)

    async def get_with_author(self, post_id: UUID) -> Optional[Post]:
        result = await self.db.execute(
            select(Post)
            .where(Post.id == post_id)
            .options(selectinload(Post.author))
        )
        return result.scalar_one_or_none()

    async def list_by_author(self, author_id: UUID) -> List[Post]:
        """An author's posts, newest first."""
        result = await self.db.execute(
            select(Post)
            .where(Post.author_id == author_id)
            .order_by(Post.created_at.desc(), Post.id)
        )
        return list(result.scalars().all())

    async def get_with_comment_subscribers(self, post_id: UUID) -> Optional[Post]:
        """Get a post with its author and post-comment subscribers loaded."""
        result = await self.db.execute(
            select(Post)
            .where(Post.id == post_id)
            .options(
                selectinload(Post.author),
                selectinload(Post.post_comment_subscriptions).selectinload(PostCommentSubscription.user),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


class PostClapRepository(BaseRepository[PostClap]):
    """Repository for claps on posts."""

    def __init__(self, db: AsyncSession):
        super().__init__(PostClap, db)

    async def add(self, author_id: UUID, post_id: UUID) -> bool:
        """Record a clap. Returns False if this author already clapped."""
        return await self.insert_ignore_conflict(
            ["author_id", "post_id"],
            author_id=author_id,
            post_id=post_id,
        )

    async def get_for(self, author_id: UUID, post_id: UUID) -> Optional[PostClap]:
        result = await self.db.execute(
            select(PostClap).where(
                PostClap.author_id == author_id,
                PostClap.post_id == post_id,
            )
        )
        return result.scalar_one_or_none()

    async def remove(self, author_id: UUID, post_id: UUID) -> bool:
        result = await self.db.execute(
            delete(PostClap).where(
                PostClap.author_id == author_id,
                PostClap.post_id == post_id,
            )
        )
        return result.rowcount > 0


class PostCommentRepository(BaseRepository[PostComment]):
    """Repository for post-level comments."""

    def __init__(self, db: AsyncSession):
        super().__init__(PostComment, db)

    async def get_with_author(self, post_comment_id: UUID) -> Optional[PostComment]:
        result = await self.db.execute(
            select(PostComment)
            .where(PostComment.id == post_comment_id)
            .options(selectinload(PostComment.author))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
