"""
Email Utility

Helper functions for sending emails and rendering notification emails.
"""

import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import Optional, List
import logging

from journal_api.core.config import settings
from journal_api.models import EmailNotification, EmailNotificationType
from journal_api.services.notification_feed import thread_comment_link, post_comment_link

logger = logging.getLogger(__name__)


def send_email(
    recipients: List[str],
    subject: str,
    content: str,
    content_type: str = "plain",
    plain_content: Optional[str] = None,
) -> bool:
    """
    Send an email using SMTP settings from config.

    Args:
        recipients: List of email addresses
        subject: Email subject
        content: Email body
        content_type: "plain" or "html"
        plain_content: Plain-text alternative sent alongside an html body

    Returns:
        True if successful, False otherwise
    """
    if not settings.SMTP_SERVER or not settings.SMTP_EMAIL:
        logger.warning(f"SMTP settings not configured. Email to {recipients} not sent.")
        return False

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = settings.SMTP_EMAIL
        msg["To"] = ", ".join(recipients)

        # Clients show the last alternative they can render
        if plain_content is not None:
            msg.attach(MIMEText(plain_content, "plain"))
        msg.attach(MIMEText(content, content_type))

        port = int(settings.SMTP_PORT) if settings.SMTP_PORT else 587

        with smtplib.SMTP(settings.SMTP_SERVER, port) as server:
            server.starttls()
            if settings.SMTP_PASSWORD:
                server.login(settings.SMTP_EMAIL, settings.SMTP_PASSWORD)
            server.send_message(msg)

        logger.info(f"Email sent to {recipients}")
        return True

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email: {str(e)}")
        return False


# ============================================================
# NOTIFICATION EMAILS
# ============================================================

@dataclass
class RenderedEmail:
    subject: str
    html: str
    plain: str


def _wrap_html(heading: str, excerpt: str, link: str, action: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
    <meta charset="UTF-8" />
    <title>{escape(heading)}</title>
    </head>
    <body style="
    margin: 0;
    padding: 0;
    background-color: #f3f4f6;
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;
    color: #111827;
    ">
    <table width="100%" cellpadding="0" cellspacing="0" role="presentation">
        <tr>
        <td align="center" style="padding: 40px 16px;">
            <table width="100%" cellpadding="0" cellspacing="0" style="
            max-width: 600px;
            background-color: #ffffff;
            border-radius: 14px;
            overflow: hidden;
            ">
            <tr>
                <td style="padding: 32px;">
                <h2 style="margin-top: 0; font-size: 20px; font-weight: 600;">
                    {escape(heading)}
                </h2>
                <blockquote style="
                    margin: 24px 0;
                    padding: 12px 16px;
                    border-left: 4px solid #6366f1;
                    color: #374151;
                ">
                    {escape(excerpt)}
                </blockquote>
                <a href="{escape(link)}" style="
                    display: inline-block;
                    padding: 12px 20px;
                    background-color: #4f46e5;
                    color: #ffffff;
                    border-radius: 8px;
                    text-decoration: none;
                ">{escape(action)}</a>
                </td>
            </tr>
            <tr>
                <td style="
                padding: 20px;
                text-align: center;
                background-color: #f9fafb;
                border-top: 1px solid #e5e7eb;
                ">
                <p style="margin: 0; font-size: 12px; color: #9ca3af;">
                    © {escape(settings.PROJECT_NAME)} · Automated message · Do not reply
                </p>
                </td>
            </tr>
            </table>
        </td>
        </tr>
    </table>
    </body>
    </html>
    """


def _render(subject: str, heading: str, excerpt: str, path: str, action: str) -> RenderedEmail:
    link = f"{settings.FRONTEND_URL.rstrip('/')}{path}"
    excerpt = excerpt if len(excerpt) <= 280 else excerpt[:277] + "..."
    plain = f"""
    {heading}

    "{excerpt}"

    {action}: {link}

    ---
    This is an automated message from {settings.PROJECT_NAME}. Please do not reply to this email.
    """
    return RenderedEmail(subject=subject, html=_wrap_html(heading, excerpt, link, action), plain=plain)


def render_notification_email(email: EmailNotification) -> Optional[RenderedEmail]:
    """
    Build the email for a queued notification.

    Returns:
        RenderedEmail, or None when the record it points at no longer
        exists (nothing left to tell the recipient about)
    """
    if email.type == EmailNotificationType.THREAD_COMMENT:
        comment = email.comment
        if comment is None or comment.thread is None or comment.thread.post is None:
            return None
        post = comment.thread.post
        author = comment.author.identifier
        if post.author_id == email.user_id:
            heading = f"{author} replied in a thread on your post \"{post.title}\""
        else:
            heading = f"{author} replied in a thread you follow on \"{post.title}\""
        return _render(
            subject=f"New reply on \"{post.title}\"",
            heading=heading,
            excerpt=comment.body,
            path=thread_comment_link(post.id, comment.thread.id),
            action="View thread",
        )

    if email.type == EmailNotificationType.POST_COMMENT:
        post_comment = email.post_comment
        if post_comment is None or post_comment.post is None:
            return None
        post = post_comment.post
        author = post_comment.author.identifier
        if post.author_id == email.user_id:
            heading = f"{author} commented on your post \"{post.title}\""
        else:
            heading = f"{author} commented on \"{post.title}\""
        return _render(
            subject=f"New comment on \"{post.title}\"",
            heading=heading,
            excerpt=post_comment.body,
            path=post_comment_link(post.id, post_comment.id),
            action="View comment",
        )

    if email.type == EmailNotificationType.NEW_POST:
        post = email.post
        if post is None:
            return None
        author = post.author.identifier
        return _render(
            subject=f"{author} published \"{post.title}\"",
            heading=f"{author} published a new post: \"{post.title}\"",
            excerpt=post.body,
            path=f"/post/{post.id}",
            action="Read post",
        )

    return None
