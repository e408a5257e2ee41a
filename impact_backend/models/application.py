"""Application model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from impact_backend.database import Base
from impact_backend.models.opportunity import Opportunity
from impact_backend.models.user import User

APPLICATION_STATUSES = (
    "pending",
    "accepted",
    "hours_submitted",
    "hours_approved",
    "completed",
    "rejected",
)


class Application(Base):
    """A student's request to take part in an opportunity."""
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("user_id", "opportunity_id", name="uq_applications_user_opportunity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    opportunity_id = Column(
        Integer,
        ForeignKey("opportunities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(String, nullable=False, default="pending")
    applied_at = Column(DateTime, default=datetime.now)
    completed_at = Column(DateTime)
    notes = Column(Text)
    coins_awarded = Column(Integer, nullable=False, default=0)
    hours_completed = Column(Float, nullable=False, default=0)
    submitted_hours = Column(Float, nullable=False, default=0)
    hour_submission_date = Column(DateTime)
    admin_feedback = Column(Text)

    user = relationship(User)
    opportunity = relationship(Opportunity)
