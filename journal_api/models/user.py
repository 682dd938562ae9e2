import enum

from sqlalchemy import Column, String, Boolean, ForeignKey, Enum, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel


class LanguageLevel(enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    NATIVE = "native"


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    handle = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    languages = relationship(
        "UserLanguage",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def identifier(self) -> str:
        """Display name shown in notifications: name if set, else handle."""
        return self.name or self.handle


class Language(BaseModel):
    __tablename__ = "languages"

    name = Column(String(100), nullable=False, unique=True)
    code = Column(String(10), nullable=False, unique=True)


class UserLanguage(BaseModel):
    """A language a user studies or speaks, with their self-declared level."""
    __tablename__ = "user_languages"
    __table_args__ = (
        UniqueConstraint("user_id", "language_id", name="uq_user_language"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    language_id = Column(Uuid(as_uuid=True), ForeignKey("languages.id", ondelete="CASCADE"), nullable=False, index=True)
    level = Column(
        Enum(LanguageLevel, name="language_level", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=LanguageLevel.BEGINNER,
    )

    user = relationship("User", back_populates="languages")
    language = relationship("Language")
