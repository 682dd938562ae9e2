from sqlalchemy import Column, ForeignKey, Text, Enum, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel
from .user import LanguageLevel


class PostComment(BaseModel):
    """A comment on a post as a whole, outside any thread."""
    __tablename__ = "post_comments"

    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(Uuid(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    body = Column(Text, nullable=False)
    author_language_level = Column(
        Enum(LanguageLevel, name="language_level", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=LanguageLevel.BEGINNER,
    )

    author = relationship("User")
    post = relationship("Post", back_populates="post_comments")
