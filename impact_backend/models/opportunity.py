"""Opportunity model definitions."""

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from impact_backend.database import Base


class Opportunity(Base):
    """Represents a volunteer activity students can apply to."""
    __tablename__ = "opportunities"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    short_description = Column(String(160), nullable=False)
    full_description = Column(Text, nullable=False)
    type = Column(String, nullable=False)
    duration = Column(String, nullable=False)
    custom_duration = Column(String)
    skills = Column(JSON, default=list)
    location = Column(String)
    schedule = Column(String)
    capacity = Column(Integer)
    total_required_hours = Column(Integer)
    status = Column(String, nullable=False, default="open", index=True)
    coins_per_hour = Column(Integer)
    max_coins = Column(Integer)
    visibility = Column(String, default="public")
    contact_email = Column(String)
    contact_phone = Column(String)
    image_url = Column(String)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
