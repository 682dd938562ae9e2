"""
Comment Service

Business logic for threads and thread comments:
- Open a thread on a highlighted span of a post
- Comment in a thread and notify the thread's subscribers
- Edit / delete own comments
- Delete an empty thread

Key Concepts:
------------
1. Subscriptions: the post author is subscribed when a thread opens,
   every commenter is subscribed when they comment. Subscribing is an
   upsert, so it is safe to repeat.
2. Fan-out: a new comment notifies every subscriber except its author,
   in-app and by email. The subscriber list is read before the commenter
   is subscribed.
3. Language level: each comment stores the author's level in the post's
   language as it was when the comment was written.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.core.config import settings
from journal_api.models import (
    BadgeType,
    EmailNotificationType,
    LanguageLevel,
    NotificationType,
    Post,
    User,
)
from journal_api.models.base import as_utc, utcnow
from journal_api.repositories.badge_repo import BadgeRepository
from journal_api.repositories.post_repo import PostRepository
from journal_api.repositories.subscription_repo import ThreadSubscriptionRepository
from journal_api.repositories.thread_repo import ThreadRepository, CommentRepository
from journal_api.repositories.user_repo import UserRepository
from journal_api.schemas.comment import CommentResponse, ThreadResponse
from journal_api.services.email_backend import EmailBackend
from journal_api.services.errors import (
    InvariantViolationError,
    NotFoundError,
    PermissionDeniedError,
    require_user,
)
from journal_api.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


async def resolve_language_level(
    user_repo: UserRepository,
    user_id: UUID,
    language_id: UUID,
) -> LanguageLevel:
    """Declared level of the user in the language, BEGINNER if none."""
    level = await user_repo.get_language_level(user_id, language_id)
    return level or LanguageLevel.BEGINNER


def is_late_reply(post: Post, commenter_id: UUID) -> bool:
    """True when someone other than the author replies to an old post."""
    if post.author_id == commenter_id:
        return False
    threshold = timedelta(days=settings.LATE_REPLY_BADGE_AFTER_DAYS)
    return utcnow() - as_utc(post.created_at) > threshold


class CommentService:
    """
    Service for thread and comment operations.
    """

    def __init__(self, db: AsyncSession, email_backend: Optional[EmailBackend] = None):
        self.db = db
        self.post_repo = PostRepository(db)
        self.thread_repo = ThreadRepository(db)
        self.comment_repo = CommentRepository(db)
        self.subscription_repo = ThreadSubscriptionRepository(db)
        self.user_repo = UserRepository(db)
        self.badge_repo = BadgeRepository(db)
        self.dispatcher = NotificationDispatcher(db, email_backend)

    # ============================================================
    # THREADS
    # ============================================================

    async def create_thread(
        self,
        user: Optional[User],
        post_id: UUID,
        start_index: int,
        end_index: int,
        highlighted_content: str,
    ) -> ThreadResponse:
        """
        Open a thread on a post and subscribe the post author to it.

        Raises:
            AuthenticationRequiredError: Anonymous caller
            NotFoundError: Post does not exist
        """
        user = require_user(user)

        post = await self.post_repo.get_by_id(post_id)
        if not post:
            raise NotFoundError("Post not found")

        thread = await self.thread_repo.create(
            post_id=post.id,
            start_index=start_index,
            end_index=end_index,
            highlighted_content=highlighted_content,
        )
        await self.subscription_repo.subscribe(post.author_id, thread.id)
        await self.db.commit()

        logger.info(f"User {user.id} opened thread {thread.id} on post {post.id}")
        return ThreadResponse.model_validate(thread)

    async def delete_thread(self, user: Optional[User], thread_id: UUID) -> None:
        """
        Delete a thread that has no comments, with its subscriptions.

        Raises:
            NotFoundError: Thread does not exist
            InvariantViolationError: Thread still has comments
        """
        require_user(user)

        thread = await self.thread_repo.get_by_id(thread_id)
        if not thread:
            raise NotFoundError("Thread not found")

        if await self.thread_repo.count_comments(thread.id) > 0:
            raise InvariantViolationError("Cannot delete a thread that has comments")

        await self.subscription_repo.delete_for_thread(thread.id)
        await self.thread_repo.delete(thread)
        await self.db.commit()

        logger.info(f"Deleted thread {thread_id}")

    # ============================================================
    # COMMENTS
    # ============================================================

    async def create_comment(
        self,
        user: Optional[User],
        thread_id: UUID,
        body: str,
    ) -> CommentResponse:
        """
        Comment in a thread.

        Steps:
        1. Snapshot the commenter's language level
        2. Save the comment and subscribe the commenter
        3. Notify every earlier subscriber except the commenter
        4. Award the late-reply badge when it applies
        5. Commit, then queue the emails

        Returns:
            CommentResponse with the delivery report
        """
        user = require_user(user)

        thread = await self.thread_repo.get_with_context(thread_id)
        if not thread:
            raise NotFoundError("Thread not found")
        post = thread.post

        # Read before the commenter subscribes
        subscriber_ids = [subscription.user_id for subscription in thread.subscriptions]

        level = await resolve_language_level(self.user_repo, user.id, post.language_id)
        comment = await self.comment_repo.create(
            author_id=user.id,
            thread_id=thread.id,
            body=body,
            author_language_level=level,
        )
        await self.subscription_repo.subscribe(user.id, thread.id)

        recipients = self.dispatcher.select_recipients(subscriber_ids, user.id)
        await self.dispatcher.notify(
            recipients,
            NotificationType.THREAD_COMMENT,
            comment.id,
            post_id=post.id,
            email_type=EmailNotificationType.THREAD_COMMENT,
            email_refs={"comment_id": comment.id},
        )

        if is_late_reply(post, user.id):
            if await self.badge_repo.award(user.id, BadgeType.NECROMANCER):
                logger.info(f"User {user.id} earned {BadgeType.NECROMANCER.value}")

        await self.db.commit()
        report = await self.dispatcher.deliver()

        logger.info(
            f"User {user.id} commented in thread {thread.id}, "
            f"notified {len(recipients)} subscribers"
        )

        comment = await self.comment_repo.get_with_author(comment.id)
        response = CommentResponse.model_validate(comment)
        response.delivery = report
        return response

    async def update_comment(
        self,
        user: Optional[User],
        comment_id: UUID,
        body: str,
    ) -> CommentResponse:
        """Edit the body of one's own comment."""
        user = require_user(user)

        comment = await self.comment_repo.get_with_author(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        if comment.author_id != user.id:
            raise PermissionDeniedError("You can only edit your own comments")

        await self.comment_repo.update(comment, body=body)
        await self.db.commit()

        return CommentResponse.model_validate(comment)

    async def delete_comment(self, user: Optional[User], comment_id: UUID) -> None:
        """
        Delete one's own comment.

        Notifications already sent for it stay; their reference is cleared.
        """
        user = require_user(user)

        comment = await self.comment_repo.get_by_id(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        if comment.author_id != user.id:
            raise PermissionDeniedError("You can only delete your own comments")

        await self.comment_repo.delete(comment)
        await self.db.commit()

        logger.info(f"User {user.id} deleted comment {comment_id}")
