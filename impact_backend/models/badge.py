"""Badge catalog and grant model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from impact_backend.database import Base


class Badge(Base):
    """An achievement unlocked once a user's coin balance crosses a threshold."""
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text)
    icon = Column(String)
    coins_required = Column(Integer, nullable=False)
    type = Column(String, default="milestone")  # milestone/special
    created_at = Column(DateTime, default=datetime.now)


class UserBadge(Base):
    """Grants a badge to a user exactly once."""
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    badge_id = Column(Integer, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False)
    earned_at = Column(DateTime, default=datetime.now)
