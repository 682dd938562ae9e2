"""
Subscription Repository

Idempotent enrollment of users to threads and posts. Every subscribe call
is an upsert on the natural key, so repeated or concurrent calls leave
exactly one row.
"""

from typing import List
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.repositories.base import BaseRepository
from journal_api.models import ThreadSubscription, PostCommentSubscription


class ThreadSubscriptionRepository(BaseRepository[ThreadSubscription]):

    def __init__(self, db: AsyncSession):
        super().__init__(ThreadSubscription, db)

    async def subscribe(self, user_id: UUID, thread_id: UUID) -> bool:
        """Returns True if a new subscription was created."""
        return await self.insert_ignore_conflict(
            ["user_id", "thread_id"],
            user_id=user_id,
            thread_id=thread_id,
        )

    async def list_for_thread(self, thread_id: UUID) -> List[ThreadSubscription]:
        result = await self.db.execute(
            select(ThreadSubscription)
            .where(ThreadSubscription.thread_id == thread_id)
            .order_by(ThreadSubscription.created_at)
        )
        return list(result.scalars().all())

    async def delete_for_thread(self, thread_id: UUID) -> int:
        result = await self.db.execute(
            delete(ThreadSubscription).where(ThreadSubscription.thread_id == thread_id)
        )
        return result.rowcount


class PostCommentSubscriptionRepository(BaseRepository[PostCommentSubscription]):

    def __init__(self, db: AsyncSession):
        super().__init__(PostCommentSubscription, db)

    async def subscribe(self, user_id: UUID, post_id: UUID) -> bool:
        """Returns True if a new subscription was created."""
        return await self.insert_ignore_conflict(
            ["user_id", "post_id"],
            user_id=user_id,
            post_id=post_id,
        )

    async def list_for_post(self, post_id: UUID) -> List[PostCommentSubscription]:
        result = await self.db.execute(
            select(PostCommentSubscription)
            .where(PostCommentSubscription.post_id == post_id)
            .order_by(PostCommentSubscription.created_at)
        )
        return list(result.scalars().all())
