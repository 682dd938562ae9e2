from sqlalchemy import Column, String, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel


class Post(BaseModel):
    __tablename__ = "posts"

    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    language_id = Column(Uuid(as_uuid=True), ForeignKey("languages.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False, default="")
    headline_image_url = Column(String(500), nullable=True)

    author = relationship("User")
    language = relationship("Language")
    threads = relationship("Thread", back_populates="post", passive_deletes=True)
    post_comments = relationship(
        "PostComment",
        back_populates="post",
        order_by="PostComment.created_at",
        passive_deletes=True,
    )
    claps = relationship("PostClap", back_populates="post", passive_deletes=True)
    post_comment_subscriptions = relationship(
        "PostCommentSubscription",
        back_populates="post",
        passive_deletes=True,
    )


class PostClap(BaseModel):
    __tablename__ = "post_claps"
    __table_args__ = (
        UniqueConstraint("author_id", "post_id", name="uq_post_clap_author_post"),
    )

    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)

    author = relationship("User")
    post = relationship("Post", back_populates="claps")
