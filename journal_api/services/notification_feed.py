"""
Notification Feed

Turns a user's stored notifications into the two views the client shows.

Pipeline:
--------
1. flatten_notifications: parent rows -> one FeedEvent per folded event
2. build_level_one: FeedEvents -> one summary entry per parent, newest first
3. build_level_two: one parent -> expanded detail (threads, comments, users)

Everything here is pure: it only reads relations that the repository
loaded up front. A relation that is gone (deleted post, comment or
follower) drops the element that depends on it; aggregation never fails.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from journal_api.models import (
    Comment,
    CommentThanks,
    InAppNotification,
    NotificationReadStatus,
    NotificationType,
    Post,
    PostComment,
    User,
)
from journal_api.models.base import as_utc
from journal_api.schemas.notification import (
    CommentItem,
    LevelOneNotification,
    LevelTwoNotification,
    PostSummary,
    ThanksItem,
    ThreadGroup,
    ThreadSummary,
)
from journal_api.schemas.user import UserSummary


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass
class FeedEvent:
    """
    One event folded into a parent notification.

    Attributes:
        notification_id: Parent the event belongs to (the level one key)
        type / read_status: Copied from the parent
        occurred_at: When the event was recorded
        post: Context post of the parent, if any
        is_post_author: Whether the recipient wrote the context post
        actor: User who caused the event, if still present
        comment / post_comment / thanks / new_post: The referenced record
    """
    notification_id: UUID
    type: NotificationType
    read_status: NotificationReadStatus
    occurred_at: datetime
    post: Optional[Post] = None
    is_post_author: bool = False
    actor: Optional[User] = None
    comment: Optional[Comment] = None
    post_comment: Optional[PostComment] = None
    thanks: Optional[CommentThanks] = None
    new_post: Optional[Post] = None


# ============================================================
# TRANSLATION KEYS
# ============================================================

_TRANSLATION_KEYS = {
    NotificationType.POST_CLAP: "postClaps",
    NotificationType.THREAD_COMMENT_THANKS: "threadCommentThanks",
    NotificationType.NEW_POST: "newPosts",
    NotificationType.NEW_FOLLOWER: "newFollowers",
}


def translation_key(notification_type: NotificationType, is_post_author: bool) -> str:
    """Front-end string key; comment types differ for the post's author."""
    if notification_type == NotificationType.THREAD_COMMENT:
        return "threadComments" if is_post_author else "threadCommentsSubscribed"
    if notification_type == NotificationType.POST_COMMENT:
        return "postComments" if is_post_author else "postCommentsSubscribed"
    return _TRANSLATION_KEYS[notification_type]


# ============================================================
# FLATTEN
# ============================================================

def flatten_notifications(notifications: Iterable[InAppNotification]) -> List[FeedEvent]:
    """
    Expand parents into per-event rows, in each parent's arrival order.

    Args:
        notifications: Parents loaded with their sub-notifications

    Returns:
        List of FeedEvent
    """
    events: List[FeedEvent] = []

    for notification in notifications:
        post = notification.post
        is_post_author = post is not None and post.author_id == notification.user_id

        def event(sub, **refs) -> FeedEvent:
            return FeedEvent(
                notification_id=notification.id,
                type=notification.type,
                read_status=notification.read_status,
                occurred_at=as_utc(sub.created_at),
                post=post,
                is_post_author=is_post_author,
                **refs,
            )

        for sub in notification.thread_comment_notifications:
            comment = sub.comment
            events.append(event(
                sub,
                comment=comment,
                actor=comment.author if comment else None,
            ))

        for sub in notification.post_comment_notifications:
            post_comment = sub.post_comment
            events.append(event(
                sub,
                post_comment=post_comment,
                actor=post_comment.author if post_comment else None,
            ))

        for sub in notification.post_clap_notifications:
            clap = sub.post_clap
            events.append(event(sub, actor=clap.author if clap else None))

        for sub in notification.thread_comment_thanks_notifications:
            thanks = sub.thanks
            events.append(event(
                sub,
                thanks=thanks,
                actor=thanks.author if thanks else notification.triggering_user,
            ))

        for sub in notification.new_post_notifications:
            new_post = sub.post
            events.append(event(
                sub,
                new_post=new_post,
                actor=new_post.author if new_post else None,
            ))

        for sub in notification.new_follower_notifications:
            events.append(event(sub, actor=sub.follower))

    return events


# ============================================================
# LEVEL ONE
# ============================================================

def _user_summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary.model_validate(user)


def _post_summary(post: Optional[Post]) -> Optional[PostSummary]:
    if post is None:
        return None
    return PostSummary(
        id=post.id,
        title=post.title,
        headline_image_url=post.headline_image_url,
        author=_user_summary(post.author),
    )


def _distinct_users(users: Iterable[Optional[User]]) -> List[UserSummary]:
    seen = set()
    result = []
    for user in users:
        if user is None or user.id in seen:
            continue
        seen.add(user.id)
        result.append(UserSummary.model_validate(user))
    return result


def build_level_one(events: Iterable[FeedEvent]) -> List[LevelOneNotification]:
    """
    Group events by their parent into feed entries.

    Entries are ranked by their latest event, newest first. Within an
    entry, actors keep the order of their first event.
    """
    groups: Dict[UUID, List[FeedEvent]] = {}
    for e in events:
        groups.setdefault(e.notification_id, []).append(e)

    entries = []
    for notification_id, group in groups.items():
        group.sort(key=lambda e: e.occurred_at)
        first = group[0]
        entries.append(LevelOneNotification(
            id=notification_id,
            type=first.type,
            read_status=first.read_status,
            count=len(group),
            translation_key=translation_key(first.type, first.is_post_author),
            occurred_at=group[-1].occurred_at,
            is_post_author=first.is_post_author,
            post=_post_summary(first.post),
            actors=_distinct_users(e.actor for e in group),
        ))

    entries.sort(key=lambda entry: entry.occurred_at, reverse=True)
    return entries


# ============================================================
# LEVEL TWO
# ============================================================

def thread_comment_link(post_id: UUID, thread_id: UUID) -> str:
    return f"/post/{post_id}#t={thread_id}"


def post_comment_link(post_id: UUID, post_comment_id: UUID) -> str:
    return f"/post/{post_id}#pc-{post_comment_id}"


def _thread_group(groups: Dict[UUID, ThreadGroup], thread) -> ThreadGroup:
    if thread.id not in groups:
        groups[thread.id] = ThreadGroup(
            thread=ThreadSummary(id=thread.id, highlighted_content=thread.highlighted_content)
        )
    return groups[thread.id]


def build_level_two(notification: InAppNotification) -> LevelTwoNotification:
    """
    Expanded view of a single parent notification.

    Thread comments and thanks are grouped by thread, keeping the arrival
    order of threads and of the items inside each thread.
    """
    events = flatten_notifications([notification])
    is_post_author = events[0].is_post_author if events else (
        notification.post is not None and notification.post.author_id == notification.user_id
    )

    thread_groups: Dict[UUID, ThreadGroup] = {}
    comments: List[CommentItem] = []
    posts: List[PostSummary] = []

    for e in events:
        if e.comment is not None and e.comment.thread is not None and e.actor is not None:
            thread = e.comment.thread
            _thread_group(thread_groups, thread).comments.append(CommentItem(
                id=e.comment.id,
                body=e.comment.body,
                author=UserSummary.model_validate(e.actor),
                link=thread_comment_link(thread.post_id, thread.id),
            ))

        elif e.thanks is not None and e.thanks.comment is not None and e.thanks.comment.thread is not None:
            comment = e.thanks.comment
            _thread_group(thread_groups, comment.thread).thanks.append(ThanksItem(
                id=e.thanks.id,
                comment_id=comment.id,
                comment_body=comment.body,
            ))

        elif e.post_comment is not None and e.actor is not None:
            comments.append(CommentItem(
                id=e.post_comment.id,
                body=e.post_comment.body,
                author=UserSummary.model_validate(e.actor),
                link=post_comment_link(e.post_comment.post_id, e.post_comment.id),
            ))

        elif e.new_post is not None:
            posts.append(_post_summary(e.new_post))

    users: List[UserSummary] = []
    if notification.type in (NotificationType.POST_CLAP, NotificationType.NEW_FOLLOWER):
        users = _distinct_users(e.actor for e in events)

    return LevelTwoNotification(
        id=notification.id,
        type=notification.type,
        read_status=notification.read_status,
        count=len(events),
        translation_key=translation_key(notification.type, is_post_author),
        post=_post_summary(notification.post),
        triggering_user=_user_summary(notification.triggering_user),
        thread_groups=list(thread_groups.values()),
        comments=comments,
        users=users,
        posts=posts,
    )
