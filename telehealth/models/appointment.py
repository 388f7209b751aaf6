"""Appointment model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, String
from telehealth.database import Base, UTCDateTime

STATUS_SCHEDULED = 'SCHEDULED'
STATUS_COMPLETED = 'COMPLETED'
STATUS_CANCELLED = 'CANCELLED'


class Appointment(Base):
    """Represents a booked video consultation."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    status = Column(String, nullable=False, default=STATUS_SCHEDULED)
    patient_description = Column(String)
    video_session_id = Column(String)
    video_session_token = Column(String)
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
