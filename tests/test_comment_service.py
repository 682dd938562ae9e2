from datetime import timedelta

import pytest
from sqlalchemy import func, select

from conftest import FakeEmailBackend, declare_level, make_post
from journal_api.models import (
    BadgeType,
    EmailNotification,
    InAppNotification,
    LanguageLevel,
    NotificationType,
    ThreadCommentNotification,
    ThreadSubscription,
)
from journal_api.models.base import utcnow
from journal_api.repositories.badge_repo import BadgeRepository
from journal_api.repositories.notification_repo import InAppNotificationRepository
from journal_api.repositories.subscription_repo import ThreadSubscriptionRepository
from journal_api.services.comment_service import CommentService
from journal_api.services.errors import (
    AuthenticationRequiredError,
    InvariantViolationError,
    NotFoundError,
    PermissionDeniedError,
)


async def open_thread(svc, user, post):
    return await svc.create_thread(user, post.id, 0, 4, "Hoy")


async def subscriber_ids(session_factory, thread_id):
    async with session_factory() as s:
        subs = await ThreadSubscriptionRepository(s).list_for_thread(thread_id)
        return {sub.user_id for sub in subs}


async def notifications_for(session_factory, user_id):
    async with session_factory() as s:
        return await InAppNotificationRepository(s).get_feed(user_id)


@pytest.mark.asyncio
async def test_create_thread_subscribes_post_author(db, session_factory, email_backend, alice, bobs_post, bob):
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, alice, bobs_post)

    assert thread.post_id == bobs_post.id
    assert await subscriber_ids(session_factory, thread.id) == {bob.id}


@pytest.mark.asyncio
async def test_create_thread_requires_user(db, email_backend, bobs_post):
    svc = CommentService(db, email_backend)
    with pytest.raises(AuthenticationRequiredError):
        await open_thread(svc, None, bobs_post)


@pytest.mark.asyncio
async def test_create_thread_on_missing_post(db, email_backend, alice, bobs_post):
    svc = CommentService(db, email_backend)
    with pytest.raises(NotFoundError):
        await svc.create_thread(alice, alice.id, 0, 1, "x")


@pytest.mark.asyncio
async def test_thread_comment_scenario(db, session_factory, email_backend, alice, bob, carol, bobs_post):
    """A opens a thread on B's post, C replies; deleting the reply keeps the notifications."""
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, alice, bobs_post)
    first = await svc.create_comment(alice, thread.id, "¿Por qué 'fui'?")

    # Only B was subscribed before A's comment
    assert [o.recipient_id for o in first.delivery.outcomes] == [bob.id, bob.id]
    assert await subscriber_ids(session_factory, thread.id) == {alice.id, bob.id}

    reply = await svc.create_comment(carol, thread.id, "Pretérito de 'ir'.")

    assert set(reply.delivery.recipient_ids) == {alice.id, bob.id}
    assert carol.id not in reply.delivery.recipient_ids
    assert all(o.delivered for o in reply.delivery.outcomes)

    alice_feed = await notifications_for(session_factory, alice.id)
    assert len(alice_feed) == 1
    assert len(alice_feed[0].thread_comment_notifications) == 1
    # B's notifications from both comments are folded into one parent
    bob_feed = await notifications_for(session_factory, bob.id)
    assert len(bob_feed) == 1
    assert len(bob_feed[0].thread_comment_notifications) == 2
    assert await notifications_for(session_factory, carol.id) == []

    await svc.delete_comment(carol, reply.id)

    alice_feed = await notifications_for(session_factory, alice.id)
    assert len(alice_feed) == 1
    assert alice_feed[0].thread_comment_notifications[0].comment_id is None


@pytest.mark.asyncio
async def test_commenter_is_never_notified(db, session_factory, email_backend, bob, bobs_post):
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, bob, bobs_post)
    result = await svc.create_comment(bob, thread.id, "Nota")

    assert result.delivery.outcomes == []
    assert await notifications_for(session_factory, bob.id) == []
    assert email_backend.queued == []


@pytest.mark.asyncio
async def test_repeat_comments_keep_one_subscription(db, session_factory, email_backend, alice, bobs_post):
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, alice, bobs_post)
    await svc.create_comment(alice, thread.id, "uno")
    await svc.create_comment(alice, thread.id, "dos")

    async with session_factory() as s:
        count = await s.scalar(
            select(func.count(ThreadSubscription.id)).where(
                ThreadSubscription.thread_id == thread.id,
                ThreadSubscription.user_id == alice.id,
            )
        )
    assert count == 1


@pytest.mark.asyncio
async def test_comment_records_language_level(db, email_backend, alice, carol, language, bobs_post):
    await declare_level(db, alice, language, LanguageLevel.ADVANCED)
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, alice, bobs_post)

    declared = await svc.create_comment(alice, thread.id, "Bien")
    undeclared = await svc.create_comment(carol, thread.id, "Bien")

    assert declared.author_language_level == LanguageLevel.ADVANCED
    assert undeclared.author_language_level == LanguageLevel.BEGINNER


@pytest.mark.asyncio
async def test_late_reply_earns_badge(db, session_factory, email_backend, alice, bob, language):
    old_post = await make_post(db, bob, language, created_at=utcnow() - timedelta(days=10))
    new_post = await make_post(db, bob, language, title="Nuevo")
    svc = CommentService(db, email_backend)

    fresh_thread = await open_thread(svc, alice, new_post)
    await svc.create_comment(alice, fresh_thread.id, "hola")
    async with session_factory() as s:
        assert await BadgeRepository(s).list_for_user(alice.id) == []

    old_thread = await open_thread(svc, bob, old_post)
    await svc.create_comment(bob, old_thread.id, "own post")
    await svc.create_comment(alice, old_thread.id, "tarde")
    await svc.create_comment(alice, old_thread.id, "otra vez")

    async with session_factory() as s:
        assert [b.type for b in await BadgeRepository(s).list_for_user(alice.id)] == [BadgeType.NECROMANCER]
        assert await BadgeRepository(s).list_for_user(bob.id) == []


@pytest.mark.asyncio
async def test_delete_thread_with_comments_fails(db, email_backend, alice, bobs_post):
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, alice, bobs_post)
    await svc.create_comment(alice, thread.id, "hola")

    with pytest.raises(InvariantViolationError):
        await svc.delete_thread(alice, thread.id)


@pytest.mark.asyncio
async def test_delete_empty_thread_removes_subscriptions(db, session_factory, email_backend, alice, bobs_post):
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, alice, bobs_post)

    await svc.delete_thread(alice, thread.id)

    assert await subscriber_ids(session_factory, thread.id) == set()
    with pytest.raises(NotFoundError):
        await svc.delete_thread(alice, thread.id)


@pytest.mark.asyncio
async def test_only_author_edits_or_deletes_comment(db, email_backend, alice, carol, bobs_post):
    svc = CommentService(db, email_backend)
    thread = await open_thread(svc, alice, bobs_post)
    created = await svc.create_comment(alice, thread.id, "hola")

    with pytest.raises(PermissionDeniedError):
        await svc.update_comment(carol, created.id, "adiós")
    with pytest.raises(PermissionDeniedError):
        await svc.delete_comment(carol, created.id)

    updated = await svc.update_comment(alice, created.id, "hola de nuevo")
    assert updated.body == "hola de nuevo"
    assert updated.delivery is None


@pytest.mark.asyncio
async def test_failed_email_does_not_affect_others(db, session_factory, alice, bob, carol, bobs_post):
    backend = FakeEmailBackend(fail_on={0})
    svc = CommentService(db, backend)
    thread = await open_thread(svc, alice, bobs_post)
    await svc.create_comment(alice, thread.id, "hola")  # email call 0 (to bob) fails

    result = await svc.create_comment(carol, thread.id, "hola")

    assert len(backend.queued) == 2
    assert result.delivery.failed == []

    async with session_factory() as s:
        emails = (await s.execute(select(EmailNotification))).scalars().all()
        statuses = sorted(e.status.value for e in emails)
    assert statuses == ["failed", "pending", "pending"]


@pytest.mark.asyncio
async def test_failed_email_is_reported_per_recipient(db, session_factory, alice, bob, carol, bobs_post):
    svc = CommentService(db, FakeEmailBackend())
    thread = await open_thread(svc, alice, bobs_post)
    await svc.create_comment(alice, thread.id, "hola")

    backend = FakeEmailBackend(fail_on={1})
    svc = CommentService(db, backend)
    result = await svc.create_comment(carol, thread.id, "hola")

    failed = result.delivery.failed
    assert len(failed) == 1
    assert failed[0].channel.value == "email"
    assert failed[0].error == "redis unavailable"
    assert result.delivery.delivered_count == 3

    # In-app notifications for both recipients still exist
    async with session_factory() as s:
        total = await s.scalar(select(func.count(ThreadCommentNotification.id)))
        parents = await s.scalar(
            select(func.count(InAppNotification.id)).where(
                InAppNotification.type == NotificationType.THREAD_COMMENT
            )
        )
    assert total == 3
    assert parents == 2
