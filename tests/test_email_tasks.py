import pytest
from sqlalchemy import select

from journal_api.models import EmailDeliveryStatus, EmailNotification
from journal_api.services.comment_service import CommentService
from journal_api.services.post_comment_service import PostCommentService
from journal_api.tasks import email_tasks
from journal_api.tasks.email_tasks import send_email_notification


class SmtpRecorder:
    """Stands in for send_email; returns the queued results in order."""

    def __init__(self, *results):
        self.results = list(results) or [True]
        self.sent = []

    def __call__(self, recipients, subject, content, content_type="plain", plain_content=None):
        self.sent.append((recipients, subject, content, content_type, plain_content))
        return self.results.pop(0) if len(self.results) > 1 else self.results[0]


async def only_email(session_factory):
    async with session_factory() as s:
        return (await s.execute(select(EmailNotification))).scalar_one()


async def thread_reply_email(db, email_backend, alice, bobs_post):
    comments = CommentService(db, email_backend)
    thread = await comments.create_thread(alice, bobs_post.id, 0, 3, "Hoy")
    comment = await comments.create_comment(alice, thread.id, "¿Está bien 'fui'?")
    return thread, comment


@pytest.mark.asyncio
async def test_sends_thread_comment_email(monkeypatch, db, session_factory, email_backend, alice, bob, bobs_post):
    smtp = SmtpRecorder(True)
    monkeypatch.setattr(email_tasks, "send_email", smtp)
    thread, _ = await thread_reply_email(db, email_backend, alice, bobs_post)
    email = await only_email(session_factory)

    result = await send_email_notification({"session_factory": session_factory}, str(email.id))

    assert result["success"] is True
    recipients, subject, html, content_type, plain = smtp.sent[0]
    assert recipients == ["bob@example.com"]
    assert content_type == "html"
    assert "Mi primer día" in subject
    assert "Alice replied in a thread on your post" in html
    assert f"/post/{bobs_post.id}#t={thread.id}" in html
    assert "Alice replied in a thread on your post" in plain

    email = await only_email(session_factory)
    assert email.status == EmailDeliveryStatus.SENT
    assert email.sent_at is not None


@pytest.mark.asyncio
async def test_sends_one_message_with_plain_alternative(monkeypatch, db, session_factory, email_backend, alice, bobs_post):
    smtp = SmtpRecorder(False)
    monkeypatch.setattr(email_tasks, "send_email", smtp)
    await PostCommentService(db, email_backend).create_post_comment(alice, bobs_post.id, "¡Bravo!")
    email = await only_email(session_factory)

    result = await send_email_notification({"session_factory": session_factory}, str(email.id))

    assert result["success"] is False
    assert len(smtp.sent) == 1
    _, _, html, content_type, plain = smtp.sent[0]
    assert content_type == "html"
    assert "¡Bravo!" in html
    assert "¡Bravo!" in plain
    assert (await only_email(session_factory)).status == EmailDeliveryStatus.FAILED


@pytest.mark.asyncio
async def test_smtp_failure_marks_failed(monkeypatch, db, session_factory, email_backend, alice, bobs_post):
    monkeypatch.setattr(email_tasks, "send_email", SmtpRecorder(False))
    await thread_reply_email(db, email_backend, alice, bobs_post)
    email = await only_email(session_factory)

    result = await send_email_notification({"session_factory": session_factory}, str(email.id))

    assert result["success"] is False
    email = await only_email(session_factory)
    assert email.status == EmailDeliveryStatus.FAILED
    assert email.error == "SMTP delivery failed"


@pytest.mark.asyncio
async def test_deleted_comment_is_not_emailed(monkeypatch, db, session_factory, email_backend, alice, bobs_post):
    smtp = SmtpRecorder(True)
    monkeypatch.setattr(email_tasks, "send_email", smtp)
    _, comment = await thread_reply_email(db, email_backend, alice, bobs_post)
    await CommentService(db, email_backend).delete_comment(alice, comment.id)
    email = await only_email(session_factory)

    result = await send_email_notification({"session_factory": session_factory}, str(email.id))

    assert result["success"] is False
    assert smtp.sent == []
    assert (await only_email(session_factory)).status == EmailDeliveryStatus.FAILED


@pytest.mark.asyncio
async def test_sent_email_is_not_resent(monkeypatch, db, session_factory, email_backend, alice, bobs_post):
    smtp = SmtpRecorder(True)
    monkeypatch.setattr(email_tasks, "send_email", smtp)
    await thread_reply_email(db, email_backend, alice, bobs_post)
    email = await only_email(session_factory)
    ctx = {"session_factory": session_factory}

    await send_email_notification(ctx, str(email.id))
    again = await send_email_notification(ctx, str(email.id))

    assert again["skipped"] is True
    assert len(smtp.sent) == 1


@pytest.mark.asyncio
async def test_unknown_or_malformed_id(session_factory):
    ctx = {"session_factory": session_factory}

    assert (await send_email_notification(ctx, "not-a-uuid"))["success"] is False
    missing = await send_email_notification(ctx, "00000000-0000-0000-0000-000000000000")
    assert missing["error"] == "Email notification not found"
