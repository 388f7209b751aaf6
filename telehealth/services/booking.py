"""
Appointment booking.

A booking walks a fixed sequence: validate the request, make sure the doctor's
calendar is free, open a video session, move the credits and store the
appointment. The overlap check, the credit transfer and the insert share one
database transaction and run while holding a per-doctor lock, so two patients
racing for the same interval cannot both succeed.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from threading import Lock

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from telehealth.clients.video import MEDIA_MODE_ROUTED, VideoProvisioner
from telehealth.core.errors import CreditTransferError, ErrorCode, ServiceError, VideoProvisioningError
from telehealth.core.time_utils import as_utc
from telehealth.models.appointment import STATUS_SCHEDULED, Appointment
from telehealth.models.user import VERIFICATION_VERIFIED
from telehealth.services import repositories
from telehealth.services.credit_ledger import APPOINTMENT_CREDIT_COST, CreditLedger

logger = logging.getLogger(__name__)


@dataclass
class BookingResult:
    appointment: Appointment | None = None
    error: ServiceError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class DoctorLocks:
    """One process-local lock per doctor id."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[int, Lock] = {}

    def for_doctor(self, doctor_id: int) -> Lock:
        with self._guard:
            lock = self._locks.get(doctor_id)
            if lock is None:
                lock = Lock()
                self._locks[doctor_id] = lock
            return lock


_doctor_locks = DoctorLocks()


def _failure(code: ErrorCode, message: str, **details) -> BookingResult:
    return BookingResult(error=ServiceError(code, message, details))


class BookingCoordinator:
    def __init__(
        self,
        video_provisioner: VideoProvisioner,
        ledger: CreditLedger | None = None,
        locks: DoctorLocks | None = None,
    ) -> None:
        self._video = video_provisioner
        self._ledger = ledger or CreditLedger()
        self._locks = locks or _doctor_locks

    def book_appointment(
        self,
        db: Session,
        patient_id: int,
        doctor_id: int | None,
        start: datetime | None,
        end: datetime | None,
        description: str | None = None,
    ) -> BookingResult:
        patient = repositories.get_patient(db, patient_id)
        if patient is None:
            return BookingResult(error=ServiceError.not_found('patient', 'Patient not found. Please complete your profile.'))

        if not doctor_id or start is None or end is None:
            return _failure(ErrorCode.INVALID_REQUEST, 'Doctor, start time, and end time are required.')

        start = as_utc(start)
        end = as_utc(end)
        if start >= end:
            return _failure(ErrorCode.INVALID_REQUEST, 'Start time must be before end time.')

        doctor = repositories.get_doctor(db, doctor_id)
        if doctor is None:
            return BookingResult(error=ServiceError.not_found('doctor', 'Doctor not found.'))
        if doctor.verification_status != VERIFICATION_VERIFIED:
            return _failure(ErrorCode.NOT_VERIFIED, 'Doctor is not verified.', doctor_id=doctor.id)

        if (patient.credits or 0) < APPOINTMENT_CREDIT_COST:
            return _failure(
                ErrorCode.INSUFFICIENT_CREDITS,
                'Insufficient credits to book an appointment.',
                required=APPOINTMENT_CREDIT_COST,
                available=patient.credits or 0,
            )

        description = (description or '').strip() or None
        patient_key = patient.id
        doctor_key = doctor.id

        with self._locks.for_doctor(doctor_key):
            try:
                return self._reserve(db, patient_key, doctor_key, start, end, description)
            except SQLAlchemyError:
                db.rollback()
                raise

    def _reserve(
        self,
        db: Session,
        patient_id: int,
        doctor_id: int,
        start: datetime,
        end: datetime,
        description: str | None,
    ) -> BookingResult:
        # Row lock serializes bookers for this doctor across processes.
        repositories.get_doctor(db, doctor_id, for_update=True)

        if repositories.find_overlapping_appointment(db, doctor_id, start, end) is not None:
            db.rollback()
            return _failure(
                ErrorCode.SLOT_UNAVAILABLE,
                'This time slot is already booked. Please select another time.',
                doctor_id=doctor_id,
            )

        try:
            session_id = self._video.create_session(MEDIA_MODE_ROUTED)
        except VideoProvisioningError as exc:
            db.rollback()
            logger.error('Video session provisioning failed for doctor %s: %s', doctor_id, exc)
            return _failure(ErrorCode.PROVISIONING_FAILED, 'Failed to create video session.')

        try:
            self._ledger.transfer(db, patient_id, doctor_id, APPOINTMENT_CREDIT_COST)
        except CreditTransferError as exc:
            db.rollback()
            logger.warning(
                'Credit transfer failed for patient %s; video session %s left unused: %s',
                patient_id,
                session_id,
                exc,
            )
            return _failure(ErrorCode.CREDIT_TRANSFER_FAILED, 'Failed to deduct credits.')

        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            start_time=start,
            end_time=end,
            patient_description=description,
            status=STATUS_SCHEDULED,
            video_session_id=session_id,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)

        logger.info('Booked appointment %s for patient %s with doctor %s', appointment.id, patient_id, doctor_id)
        return BookingResult(appointment=appointment)
