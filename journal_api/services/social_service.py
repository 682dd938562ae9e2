"""
Social Service

The smaller events that also produce notifications:

| Action        | Notifies           | Type                   | Email |
|---------------|--------------------|------------------------|-------|
| thank comment | comment author     | THREAD_COMMENT_THANKS  | no    |
| clap post     | post author        | POST_CLAP              | no    |
| follow user   | followed user      | NEW_FOLLOWER           | no    |
| publish post  | author's followers | NEW_POST               | yes   |

Profiles are read-only and open to anonymous callers.

Undoing an action (unthank, unclap, unfollow) never retracts a
notification that was already sent.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from journal_api.models import EmailNotificationType, NotificationType, User
from journal_api.repositories.post_repo import PostRepository, PostClapRepository
from journal_api.repositories.thread_repo import CommentRepository, CommentThanksRepository
from journal_api.repositories.user_repo import UserRepository, FollowRepository, LanguageRepository
from journal_api.schemas.social import (
    ClapResponse,
    FollowResponse,
    PostResponse,
    ProfileResponse,
    ThanksResponse,
)
from journal_api.schemas.user import UserSummary
from journal_api.services.email_backend import EmailBackend
from journal_api.services.errors import InvariantViolationError, NotFoundError, require_user
from journal_api.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


class SocialService:
    """Service for thanks, claps, follows and publishing posts."""

    def __init__(self, db: AsyncSession, email_backend: Optional[EmailBackend] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.follow_repo = FollowRepository(db)
        self.language_repo = LanguageRepository(db)
        self.post_repo = PostRepository(db)
        self.clap_repo = PostClapRepository(db)
        self.comment_repo = CommentRepository(db)
        self.thanks_repo = CommentThanksRepository(db)
        self.dispatcher = NotificationDispatcher(db, email_backend)

    # ============================================================
    # THANKS
    # ============================================================

    async def thank_comment(self, user: Optional[User], comment_id: UUID) -> ThanksResponse:
        """
        Thank the author of a comment.

        Raises:
            NotFoundError: Comment does not exist
            InvariantViolationError: Own comment, or already thanked
        """
        user = require_user(user)

        comment = await self.comment_repo.get_by_id(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        if comment.author_id == user.id:
            raise InvariantViolationError("You cannot thank your own comment")
        if not await self.thanks_repo.add(user.id, comment.id):
            raise InvariantViolationError("You already thanked this comment")
        thanks = await self.thanks_repo.get_for(user.id, comment.id)

        recipients = self.dispatcher.select_recipients([comment.author_id], user.id)
        await self.dispatcher.notify(
            recipients,
            NotificationType.THREAD_COMMENT_THANKS,
            thanks.id,
            triggering_user_id=user.id,
        )

        await self.db.commit()
        report = await self.dispatcher.deliver()

        logger.info(f"User {user.id} thanked comment {comment.id}")
        response = ThanksResponse.model_validate(thanks)
        response.delivery = report
        return response

    async def unthank_comment(self, user: Optional[User], comment_id: UUID) -> None:
        user = require_user(user)

        if not await self.thanks_repo.remove(user.id, comment_id):
            raise NotFoundError("You have not thanked this comment")
        await self.db.commit()

    # ============================================================
    # CLAPS
    # ============================================================

    async def clap_post(self, user: Optional[User], post_id: UUID) -> ClapResponse:
        """
        Clap for someone else's post.

        Raises:
            NotFoundError: Post does not exist
            InvariantViolationError: Own post, or already clapped
        """
        user = require_user(user)

        post = await self.post_repo.get_by_id(post_id)
        if not post:
            raise NotFoundError("Post not found")
        if post.author_id == user.id:
            raise InvariantViolationError("You cannot clap for your own post")
        if not await self.clap_repo.add(user.id, post.id):
            raise InvariantViolationError("You already clapped for this post")
        clap = await self.clap_repo.get_for(user.id, post.id)

        recipients = self.dispatcher.select_recipients([post.author_id], user.id)
        await self.dispatcher.notify(
            recipients,
            NotificationType.POST_CLAP,
            clap.id,
            post_id=post.id,
        )

        await self.db.commit()
        report = await self.dispatcher.deliver()

        logger.info(f"User {user.id} clapped for post {post.id}")
        response = ClapResponse.model_validate(clap)
        response.delivery = report
        return response

    async def unclap_post(self, user: Optional[User], post_id: UUID) -> None:
        user = require_user(user)

        if not await self.clap_repo.remove(user.id, post_id):
            raise NotFoundError("You have not clapped for this post")
        await self.db.commit()

    # ============================================================
    # FOLLOWS
    # ============================================================

    async def follow_user(self, user: Optional[User], user_id: UUID) -> FollowResponse:
        """
        Follow another user.

        Raises:
            NotFoundError: User does not exist
            InvariantViolationError: Following yourself, or already following
        """
        user = require_user(user)

        if user_id == user.id:
            raise InvariantViolationError("You cannot follow yourself")
        target = await self.user_repo.get_by_id(user_id)
        if not target:
            raise NotFoundError("User not found")

        if not await self.follow_repo.follow(user.id, target.id):
            raise InvariantViolationError("You already follow this user")

        recipients = self.dispatcher.select_recipients([target.id], user.id)
        await self.dispatcher.notify(recipients, NotificationType.NEW_FOLLOWER, user.id)

        await self.db.commit()
        report = await self.dispatcher.deliver()

        logger.info(f"User {user.id} followed {target.id}")
        return FollowResponse(follower_id=user.id, following_id=target.id, delivery=report)

    async def unfollow_user(self, user: Optional[User], user_id: UUID) -> None:
        user = require_user(user)

        if not await self.follow_repo.unfollow(user.id, user_id):
            raise NotFoundError("You do not follow this user")
        await self.db.commit()

    # ============================================================
    # POSTS
    # ============================================================

    async def publish_post(
        self,
        user: Optional[User],
        language_id: UUID,
        title: str,
        body: str = "",
        headline_image_url: Optional[str] = None,
    ) -> PostResponse:
        """
        Publish a post and tell the author's followers about it.

        Raises:
            NotFoundError: Language does not exist
        """
        user = require_user(user)

        language = await self.language_repo.get_by_id(language_id)
        if not language:
            raise NotFoundError("Language not found")

        post = await self.post_repo.create(
            author_id=user.id,
            language_id=language.id,
            title=title,
            body=body,
            headline_image_url=headline_image_url,
        )

        followers = await self.follow_repo.get_followers(user.id)
        recipients = self.dispatcher.select_recipients([f.id for f in followers], user.id)
        await self.dispatcher.notify(
            recipients,
            NotificationType.NEW_POST,
            post.id,
            email_type=EmailNotificationType.NEW_POST,
            email_refs={"post_id": post.id},
        )

        await self.db.commit()
        report = await self.dispatcher.deliver()

        logger.info(f"User {user.id} published post {post.id} to {len(recipients)} followers")
        response = PostResponse.model_validate(post)
        response.delivery = report
        return response

    # ============================================================
    # PROFILES
    # ============================================================

    async def get_profile(self, current_user: Optional[User], user_id: UUID) -> ProfileResponse:
        """
        A user's profile with their posts, newest first.

        Raises:
            NotFoundError: User does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        posts = await self.post_repo.list_by_author(user.id)
        return ProfileResponse(
            user=UserSummary.model_validate(user),
            posts=[PostResponse.model_validate(post) for post in posts],
            is_logged_in_user=current_user is not None and current_user.id == user.id,
        )
