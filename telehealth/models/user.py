"""User model definitions."""

from sqlalchemy import CheckConstraint, Column, Integer, String
from telehealth.database import Base

ROLE_UNASSIGNED = 'UNASSIGNED'
ROLE_PATIENT = 'PATIENT'
ROLE_DOCTOR = 'DOCTOR'
ROLE_ADMIN = 'ADMIN'

VERIFICATION_PENDING = 'PENDING'
VERIFICATION_VERIFIED = 'VERIFIED'
VERIFICATION_REJECTED = 'REJECTED'


class User(Base):
    """Represents a patient, doctor or admin known to the external auth provider."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint('credits >= 0', name='ck_users_credits_non_negative'),
    )

    id = Column(Integer, primary_key=True, index=True)
    auth_subject = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True)
    name = Column(String)
    role = Column(String, nullable=False, default=ROLE_UNASSIGNED)
    specialty = Column(String)
    verification_status = Column(String)
    credits = Column(Integer, nullable=False, default=0)
    timezone = Column(String)  # IANA name, doctors only

    @property
    def is_patient(self) -> bool:
        return self.role == ROLE_PATIENT

    @property
    def is_doctor(self) -> bool:
        return self.role == ROLE_DOCTOR

    @property
    def is_verified_doctor(self) -> bool:
        return self.is_doctor and self.verification_status == VERIFICATION_VERIFIED
