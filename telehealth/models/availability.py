"""Availability model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, String, Time, UniqueConstraint
from telehealth.database import Base, UTCDateTime

AVAILABILITY_AVAILABLE = 'AVAILABLE'
AVAILABILITY_UNAVAILABLE = 'UNAVAILABLE'


class Availability(Base):
    """A doctor's recurring daily window, one row per doctor."""
    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint('doctor_id', name='uq_availability_doctor'),
    )

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default=AVAILABILITY_AVAILABLE)
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
