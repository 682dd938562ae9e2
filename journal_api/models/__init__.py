from journal_api.models.base import Base
from journal_api.models.user import User, Language, LanguageLevel, UserLanguage
from journal_api.models.post import Post, PostClap
from journal_api.models.thread import Thread, Comment, CommentThanks
from journal_api.models.post_comment import PostComment
from journal_api.models.subscription import ThreadSubscription, PostCommentSubscription
from journal_api.models.follow import Follow
from journal_api.models.badge import BadgeType, UserBadge
from journal_api.models.notification import (
    NotificationType,
    NotificationReadStatus,
    InAppNotification,
    ThreadCommentNotification,
    PostCommentNotification,
    PostClapNotification,
    ThreadCommentThanksNotification,
    NewPostNotification,
    NewFollowerNotification,
)
from journal_api.models.email_notification import (
    EmailNotification,
    EmailNotificationType,
    EmailDeliveryStatus,
)

__all__ = [
    "Base",
    "User",
    "Language",
    "LanguageLevel",
    "UserLanguage",
    "Post",
    "PostClap",
    "Thread",
    "Comment",
    "CommentThanks",
    "PostComment",
    "ThreadSubscription",
    "PostCommentSubscription",
    "Follow",
    "BadgeType",
    "UserBadge",
    "NotificationType",
    "NotificationReadStatus",
    "InAppNotification",
    "ThreadCommentNotification",
    "PostCommentNotification",
    "PostClapNotification",
    "ThreadCommentThanksNotification",
    "NewPostNotification",
    "NewFollowerNotification",
    "EmailNotification",
    "EmailNotificationType",
    "EmailDeliveryStatus",
]
