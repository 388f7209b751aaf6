"""Query helpers for users, availability windows and appointments."""

from datetime import datetime, time

from sqlalchemy.orm import Session

from telehealth.models.appointment import STATUS_SCHEDULED, Appointment
from telehealth.models.availability import AVAILABILITY_AVAILABLE, Availability
from telehealth.models.user import ROLE_DOCTOR, ROLE_PATIENT, VERIFICATION_VERIFIED, User


def get_patient(db: Session, patient_id: int | None) -> User | None:
    if patient_id is None:
        return None
    return db.query(User).filter(User.id == patient_id, User.role == ROLE_PATIENT).first()


def get_doctor(db: Session, doctor_id: int | None, for_update: bool = False) -> User | None:
    if doctor_id is None:
        return None
    query = db.query(User).filter(User.id == doctor_id, User.role == ROLE_DOCTOR)
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_verified_doctor(db: Session, doctor_id: int) -> User | None:
    return db.query(User).filter(
        User.id == doctor_id,
        User.role == ROLE_DOCTOR,
        User.verification_status == VERIFICATION_VERIFIED,
    ).first()


def list_verified_doctors(db: Session, specialty: str | None = None) -> list[User]:
    query = db.query(User).filter(
        User.role == ROLE_DOCTOR,
        User.verification_status == VERIFICATION_VERIFIED,
    )
    if specialty:
        query = query.filter(User.specialty == specialty)
    return query.order_by(User.name.asc(), User.id.asc()).all()


def get_availability_window(db: Session, doctor_id: int) -> Availability | None:
    return db.query(Availability).filter(
        Availability.doctor_id == doctor_id,
        Availability.status == AVAILABILITY_AVAILABLE,
    ).first()


def upsert_availability_window(db: Session, doctor_id: int, start_time: time, end_time: time) -> Availability:
    window = db.query(Availability).filter(Availability.doctor_id == doctor_id).first()
    if window is None:
        window = Availability(doctor_id=doctor_id)
        db.add(window)

    window.start_time = start_time.replace(tzinfo=None)
    window.end_time = end_time.replace(tzinfo=None)
    window.status = AVAILABILITY_AVAILABLE
    db.commit()
    db.refresh(window)
    return window


def find_overlapping_appointment(db: Session, doctor_id: int, start: datetime, end: datetime) -> Appointment | None:
    return db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.status == STATUS_SCHEDULED,
        Appointment.start_time < end,
        Appointment.end_time > start,
    ).first()


def list_scheduled_intervals(
    db: Session,
    doctor_id: int,
    range_start: datetime,
    range_end: datetime,
) -> list[tuple[datetime, datetime]]:
    rows = db.query(Appointment.start_time, Appointment.end_time).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.status == STATUS_SCHEDULED,
        Appointment.start_time < range_end,
        Appointment.end_time > range_start,
    ).order_by(Appointment.start_time.asc()).all()
    return [(start, end) for start, end in rows]


def get_appointment(db: Session, appointment_id: int) -> Appointment | None:
    return db.query(Appointment).filter(Appointment.id == appointment_id).first()


def list_appointments_for_user(db: Session, user: User) -> list[Appointment]:
    if user.is_doctor:
        owner_filter = Appointment.doctor_id == user.id
    else:
        owner_filter = Appointment.patient_id == user.id
    return db.query(Appointment).filter(owner_filter).order_by(Appointment.start_time.asc()).all()
