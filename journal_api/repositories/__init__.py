from journal_api.repositories.base import BaseRepository
from journal_api.repositories.user_repo import UserRepository, FollowRepository, LanguageRepository
from journal_api.repositories.post_repo import PostRepository, PostClapRepository, PostCommentRepository
from journal_api.repositories.thread_repo import ThreadRepository, CommentRepository, CommentThanksRepository
from journal_api.repositories.subscription_repo import (
    ThreadSubscriptionRepository,
    PostCommentSubscriptionRepository,
)
from journal_api.repositories.badge_repo import BadgeRepository
from journal_api.repositories.notification_repo import (
    InAppNotificationRepository,
    EmailNotificationRepository,
)

__all__ = [
    "BaseRepository",
    "UserRepository",
    "FollowRepository",
    "LanguageRepository",
    "PostRepository",
    "PostClapRepository",
    "PostCommentRepository",
    "ThreadRepository",
    "CommentRepository",
    "CommentThanksRepository",
    "ThreadSubscriptionRepository",
    "PostCommentSubscriptionRepository",
    "BadgeRepository",
    "InAppNotificationRepository",
    "EmailNotificationRepository",
]
