"""
Thread Repository

Data access layer for Thread, Comment and CommentThanks models.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from journal_api.repositories.base import BaseRepository
from journal_api.models import Thread, Comment, CommentThanks, Post, ThreadSubscription


class ThreadRepository(BaseRepository[Thread]):
    """Repository for threads."""

    def __init__(self, db: AsyncSession):
        super().__init__(Thread, db)

    async def get_with_context(self, thread_id: UUID) -> Optional[Thread]:
        """
        Get a thread with everything a new comment needs:
        its subscribers and its post (with author).
        """
        result = await self.db.execute(
            select(Thread)
            .where(Thread.id == thread_id)
            .options(
                selectinload(Thread.subscriptions).selectinload(ThreadSubscription.user),
                selectinload(Thread.post).selectinload(Post.author),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_comments(self, thread_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Comment.id)).where(Comment.thread_id == thread_id)
        )
        return result.scalar() or 0


class CommentRepository(BaseRepository[Comment]):
    """Repository for thread comments."""

    def __init__(self, db: AsyncSession):
        super().__init__(Comment, db)

    async def get_with_author(self, comment_id: UUID) -> Optional[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .options(selectinload(Comment.author))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


class CommentThanksRepository(BaseRepository[CommentThanks]):
    """Repository for thanks left on comments."""

    def __init__(self, db: AsyncSession):
        super().__init__(CommentThanks, db)

    async def add(self, author_id: UUID, comment_id: UUID) -> bool:
        """Record thanks. Returns False if this author already thanked."""
        return await self.insert_ignore_conflict(
            ["author_id", "comment_id"],
            author_id=author_id,
            comment_id=comment_id,
        )

    async def get_for(self, author_id: UUID, comment_id: UUID) -> Optional[CommentThanks]:
        result = await self.db.execute(
            select(CommentThanks).where(
                CommentThanks.author_id == author_id,
                CommentThanks.comment_id == comment_id,
            )
        )
        return result.scalar_one_or_none()

    async def remove(self, author_id: UUID, comment_id: UUID) -> bool:
        result = await self.db.execute(
            delete(CommentThanks).where(
                CommentThanks.author_id == author_id,
                CommentThanks.comment_id == comment_id,
            )
        )
        return result.rowcount > 0
