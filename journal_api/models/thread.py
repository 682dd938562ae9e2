"""
Thread Models

- Thread: a discussion anchored to a highlighted span of a post
- Comment: a reply inside a thread
- CommentThanks: a "thank you" left on a comment by another user
"""

from sqlalchemy import Column, Boolean, ForeignKey, Integer, Text, Enum, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from journal_api.models.base import BaseModel
from journal_api.models.user import LanguageLevel


class Thread(BaseModel):
    """
    Attributes:
        post_id: Post the thread is anchored to
        start_index / end_index: Character range of the highlight
        highlighted_content: The highlighted text at creation time
        archived: Hidden from the post but kept for history
    """
    __tablename__ = "threads"

    post_id = Column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    start_index = Column(Integer, nullable=False)
    end_index = Column(Integer, nullable=False)
    highlighted_content = Column(Text, nullable=False)
    archived = Column(Boolean, default=False, nullable=False)

    post = relationship("Post", back_populates="threads")
    comments = relationship(
        "Comment",
        back_populates="thread",
        order_by="Comment.created_at",
        passive_deletes=True,
    )
    subscriptions = relationship(
        "ThreadSubscription",
        back_populates="thread",
        passive_deletes=True,
    )


class Comment(BaseModel):
    __tablename__ = "comments"

    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    thread_id = Column(Uuid(as_uuid=True), ForeignKey("threads.id", ondelete="CASCADE"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    # Snapshot of the author's level in the post's language when they wrote it
    author_language_level = Column(
        Enum(LanguageLevel, name="language_level", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=LanguageLevel.BEGINNER,
    )

    author = relationship("User")
    thread = relationship("Thread", back_populates="comments")
    thanks = relationship("CommentThanks", back_populates="comment", passive_deletes=True)


class CommentThanks(BaseModel):
    __tablename__ = "comment_thanks"
    __table_args__ = (
        UniqueConstraint("author_id", "comment_id", name="uq_comment_thanks_author_comment"),
    )

    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    comment_id = Column(Uuid(as_uuid=True), ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True)

    author = relationship("User")
    comment = relationship("Comment", back_populates="thanks")
