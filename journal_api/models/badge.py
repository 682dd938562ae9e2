import enum

from sqlalchemy import Column, ForeignKey, Enum, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel


class BadgeType(enum.Enum):
    NECROMANCER = "necromancer"  # replied to a post more than a week old


class UserBadge(BaseModel):
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "type", name="uq_user_badge_type"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        Enum(BadgeType, name="badge_type", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )

    user = relationship("User", backref="badges")
