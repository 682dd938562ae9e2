from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

from journal_api.models import NotificationReadStatus, NotificationType
from journal_api.services.notification_feed import (
    build_level_one,
    build_level_two,
    flatten_notifications,
)


T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes):
    return T0 + timedelta(minutes=minutes)


def user(handle, name=None):
    return SimpleNamespace(id=uuid4(), handle=handle, name=name, avatar_url=None, identifier=name or handle)


def post(author, title="Post"):
    return SimpleNamespace(id=uuid4(), author_id=author.id, author=author, title=title, headline_image_url=None)


def thread(p, text="highlight"):
    return SimpleNamespace(id=uuid4(), post_id=p.id, highlighted_content=text)


def comment(author, t, body="hola"):
    return SimpleNamespace(id=uuid4(), author=author, thread=t, body=body)


def parent(recipient, type_, post=None, triggering_user=None, read_status=NotificationReadStatus.UNREAD, **subs):
    n = SimpleNamespace(
        id=uuid4(),
        user_id=recipient.id,
        type=type_,
        read_status=read_status,
        post=post,
        triggering_user=triggering_user,
        thread_comment_notifications=[],
        post_comment_notifications=[],
        post_clap_notifications=[],
        thread_comment_thanks_notifications=[],
        new_post_notifications=[],
        new_follower_notifications=[],
    )
    for key, value in subs.items():
        setattr(n, key, value)
    return n


def sub(minutes, **refs):
    return SimpleNamespace(created_at=at(minutes), **refs)


def test_level_one_counts_events_and_keeps_actor_order():
    bob, alice, carol = user("bob"), user("alice", "Alice"), user("carol")
    p = post(bob)
    t = thread(p)
    n = parent(bob, NotificationType.THREAD_COMMENT, post=p, thread_comment_notifications=[
        sub(1, comment=comment(carol, t)),
        sub(2, comment=comment(alice, t)),
        sub(3, comment=comment(carol, t)),
    ])

    entries = build_level_one(flatten_notifications([n]))

    assert len(entries) == 1
    entry = entries[0]
    assert entry.count == 3
    assert [a.handle for a in entry.actors] == ["carol", "alice"]
    assert entry.actors[1].identifier == "Alice"
    assert entry.translation_key == "threadComments"
    assert entry.is_post_author is True
    assert entry.occurred_at == at(3)


def test_level_one_uses_subscribed_key_for_non_authors():
    bob, alice = user("bob"), user("alice")
    p = post(bob)
    n = parent(alice, NotificationType.POST_COMMENT, post=p, post_comment_notifications=[
        sub(1, post_comment=SimpleNamespace(id=uuid4(), post_id=p.id, author=bob, body="gracias")),
    ])

    entry = build_level_one(flatten_notifications([n]))[0]

    assert entry.translation_key == "postCommentsSubscribed"
    assert entry.is_post_author is False


def test_level_one_ranks_by_latest_activity():
    bob, alice = user("bob"), user("alice")
    p = post(bob)
    older = parent(bob, NotificationType.POST_CLAP, post=p, post_clap_notifications=[
        sub(1, post_clap=SimpleNamespace(author=alice)),
        sub(10, post_clap=SimpleNamespace(author=user("dan"))),
    ])
    newer = parent(bob, NotificationType.NEW_FOLLOWER, new_follower_notifications=[
        sub(5, follower=alice),
    ])

    entries = build_level_one(flatten_notifications([newer, older]))

    assert [e.id for e in entries] == [older.id, newer.id]
    assert entries[0].translation_key == "postClaps"
    assert entries[1].translation_key == "newFollowers"


def test_level_two_groups_comments_by_thread_in_arrival_order():
    bob, alice, carol = user("bob"), user("alice"), user("carol")
    p = post(bob)
    t1, t2 = thread(p, "uno"), thread(p, "dos")
    c1, c2, c3 = comment(alice, t1, "a"), comment(carol, t2, "b"), comment(carol, t1, "c")
    n = parent(bob, NotificationType.THREAD_COMMENT, post=p, thread_comment_notifications=[
        sub(1, comment=c1),
        sub(2, comment=c2),
        sub(3, comment=c3),
    ])

    detail = build_level_two(n)

    assert detail.count == 3
    assert [g.thread.id for g in detail.thread_groups] == [t1.id, t2.id]
    assert [c.body for c in detail.thread_groups[0].comments] == ["a", "c"]
    assert detail.thread_groups[0].comments[0].link == f"/post/{p.id}#t={t1.id}"


def test_level_two_post_comment_links():
    bob, alice = user("bob"), user("alice")
    p = post(bob)
    pc = SimpleNamespace(id=uuid4(), post_id=p.id, author=alice, body="¡Qué bien!")
    n = parent(bob, NotificationType.POST_COMMENT, post=p, post_comment_notifications=[sub(1, post_comment=pc)])

    detail = build_level_two(n)

    assert detail.translation_key == "postComments"
    assert detail.comments[0].link == f"/post/{p.id}#pc-{pc.id}"


def test_level_two_groups_thanks_under_their_thread():
    bob, alice = user("bob"), user("alice")
    p = post(alice)
    t = thread(p)
    c = comment(bob, t, "corrección")
    thanks = SimpleNamespace(id=uuid4(), author=alice, comment=c)
    n = parent(
        bob,
        NotificationType.THREAD_COMMENT_THANKS,
        triggering_user=alice,
        thread_comment_thanks_notifications=[sub(1, thanks=thanks)],
    )

    detail = build_level_two(n)

    assert detail.translation_key == "threadCommentThanks"
    assert detail.triggering_user.handle == "alice"
    assert detail.thread_groups[0].thanks[0].comment_body == "corrección"


def test_missing_relations_are_skipped():
    bob, alice = user("bob"), user("alice")
    t = thread(post(bob))
    comments = parent(bob, NotificationType.THREAD_COMMENT, post=None, thread_comment_notifications=[
        sub(1, comment=None),
        sub(2, comment=comment(alice, t)),
    ])
    followers = parent(bob, NotificationType.NEW_FOLLOWER, new_follower_notifications=[
        sub(3, follower=None),
    ])
    new_posts = parent(bob, NotificationType.NEW_POST, new_post_notifications=[sub(4, post=None)])

    entries = build_level_one(flatten_notifications([comments, followers, new_posts]))
    detail = build_level_two(comments)

    assert {e.type for e in entries} == {
        NotificationType.THREAD_COMMENT,
        NotificationType.NEW_FOLLOWER,
        NotificationType.NEW_POST,
    }
    comment_entry = next(e for e in entries if e.type == NotificationType.THREAD_COMMENT)
    assert comment_entry.post is None
    assert comment_entry.count == 2
    assert [a.handle for a in comment_entry.actors] == ["alice"]
    assert len(detail.thread_groups[0].comments) == 1
    assert build_level_two(followers).users == []
    assert build_level_two(new_posts).posts == []
