"""
Post Comment Service

Comments left on a post as a whole. Same rules as thread comments, scoped
to the post: commenters subscribe to the post's comments and every
earlier subscriber is notified. The post author is always among the
subscribers, so they hear about the first comment too.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.models import EmailNotificationType, NotificationType, User
from journal_api.repositories.post_repo import PostRepository, PostCommentRepository
from journal_api.repositories.subscription_repo import PostCommentSubscriptionRepository
from journal_api.repositories.user_repo import UserRepository
from journal_api.schemas.comment import PostCommentResponse
from journal_api.services.comment_service import resolve_language_level
from journal_api.services.email_backend import EmailBackend
from journal_api.services.errors import NotFoundError, PermissionDeniedError, require_user
from journal_api.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


class PostCommentService:
    """Service for post-level comments."""

    def __init__(self, db: AsyncSession, email_backend: Optional[EmailBackend] = None):
        self.db = db
        self.post_repo = PostRepository(db)
        self.post_comment_repo = PostCommentRepository(db)
        self.subscription_repo = PostCommentSubscriptionRepository(db)
        self.user_repo = UserRepository(db)
        self.dispatcher = NotificationDispatcher(db, email_backend)

    async def create_post_comment(
        self,
        user: Optional[User],
        post_id: UUID,
        body: str,
    ) -> PostCommentResponse:
        """
        Comment on a post and notify its subscribers.

        Raises:
            AuthenticationRequiredError: Anonymous caller
            NotFoundError: Post does not exist
        """
        user = require_user(user)

        post = await self.post_repo.get_with_comment_subscribers(post_id)
        if not post:
            raise NotFoundError("Post not found")

        subscriber_ids = [s.user_id for s in post.post_comment_subscriptions]
        if post.author_id not in subscriber_ids:
            subscriber_ids.insert(0, post.author_id)

        level = await resolve_language_level(self.user_repo, user.id, post.language_id)
        post_comment = await self.post_comment_repo.create(
            author_id=user.id,
            post_id=post.id,
            body=body,
            author_language_level=level,
        )
        await self.subscription_repo.subscribe(post.author_id, post.id)
        await self.subscription_repo.subscribe(user.id, post.id)

        recipients = self.dispatcher.select_recipients(subscriber_ids, user.id)
        await self.dispatcher.notify(
            recipients,
            NotificationType.POST_COMMENT,
            post_comment.id,
            post_id=post.id,
            email_type=EmailNotificationType.POST_COMMENT,
            email_refs={"post_comment_id": post_comment.id},
        )

        await self.db.commit()
        report = await self.dispatcher.deliver()

        logger.info(
            f"User {user.id} commented on post {post.id}, "
            f"notified {len(recipients)} subscribers"
        )

        post_comment = await self.post_comment_repo.get_with_author(post_comment.id)
        response = PostCommentResponse.model_validate(post_comment)
        response.delivery = report
        return response

    async def update_post_comment(
        self,
        user: Optional[User],
        post_comment_id: UUID,
        body: str,
    ) -> PostCommentResponse:
        user = require_user(user)

        post_comment = await self.post_comment_repo.get_with_author(post_comment_id)
        if not post_comment:
            raise NotFoundError("Post comment not found")
        if post_comment.author_id != user.id:
            raise PermissionDeniedError("You can only edit your own comments")

        await self.post_comment_repo.update(post_comment, body=body)
        await self.db.commit()

        return PostCommentResponse.model_validate(post_comment)

    async def delete_post_comment(self, user: Optional[User], post_comment_id: UUID) -> None:
        user = require_user(user)

        post_comment = await self.post_comment_repo.get_by_id(post_comment_id)
        if not post_comment:
            raise NotFoundError("Post comment not found")
        if post_comment.author_id != user.id:
            raise PermissionDeniedError("You can only delete your own comments")

        await self.post_comment_repo.delete(post_comment)
        await self.db.commit()

        logger.info(f"User {user.id} deleted post comment {post_comment_id}")
