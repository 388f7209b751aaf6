from datetime import datetime, time, timedelta, timezone

from telehealth.core.errors import ErrorCode
from telehealth.models.appointment import STATUS_CANCELLED, STATUS_SCHEDULED, Appointment
from telehealth.models.availability import AVAILABILITY_UNAVAILABLE, Availability
from telehealth.models.user import ROLE_DOCTOR, VERIFICATION_PENDING, VERIFICATION_VERIFIED
from telehealth.services.availability import list_available_slots

NOW = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)


def set_window(db, doctor, start=time(9, 0), end=time(17, 0), status=None) -> Availability:
    window = Availability(doctor_id=doctor.id, start_time=start, end_time=end)
    if status:
        window.status = status
    db.add(window)
    db.commit()
    return window


def book(db, patient, doctor, start, minutes=60, status=STATUS_SCHEDULED) -> None:
    db.add(
        Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            start_time=start,
            end_time=start + timedelta(minutes=minutes),
            status=status,
            video_session_id='s',
        )
    )
    db.commit()


def test_listing_excludes_scheduled_appointments_only(db, patient, doctor) -> None:
    set_window(db, doctor)
    book(db, patient, doctor, datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc))
    book(db, patient, doctor, datetime(2026, 1, 5, 14, 0, tzinfo=timezone.utc), status=STATUS_CANCELLED)

    listing = list_available_slots(db, doctor.id, NOW)

    assert listing.success
    assert listing.timezone == 'UTC'
    today = listing.days['2026-01-05']
    assert len(today) == 14
    assert datetime(2026, 1, 5, 14, 0, tzinfo=timezone.utc) in [slot.start for slot in today]


def test_listing_reflects_a_new_booking_on_the_next_read(db, patient, doctor) -> None:
    set_window(db, doctor)
    before = list_available_slots(db, doctor.id, NOW)

    book(db, patient, doctor, datetime(2026, 1, 6, 9, 0, tzinfo=timezone.utc), minutes=30)
    after = list_available_slots(db, doctor.id, NOW)

    assert len(before.days['2026-01-06']) == 16
    assert len(after.days['2026-01-06']) == 15


def test_listing_uses_the_doctor_time_zone(db, make_user) -> None:
    berlin_doctor = make_user(ROLE_DOCTOR, verification_status=VERIFICATION_VERIFIED, timezone='Europe/Berlin')
    set_window(db, berlin_doctor)

    listing = list_available_slots(db, berlin_doctor.id, NOW)

    first = listing.days['2026-01-05'][0]
    assert listing.timezone == 'Europe/Berlin'
    assert first.start == datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)
    assert first.label == '9:00 AM - 9:30 AM'
    assert len(listing.days['2026-01-05']) == 16


def test_missing_window_is_reported(db, doctor) -> None:
    listing = list_available_slots(db, doctor.id, NOW)

    assert listing.error.code == ErrorCode.NOT_FOUND
    assert listing.error.details == {'resource': 'availability'}


def test_unavailable_window_is_reported_as_missing(db, doctor) -> None:
    set_window(db, doctor, status=AVAILABILITY_UNAVAILABLE)

    listing = list_available_slots(db, doctor.id, NOW)

    assert listing.error.details == {'resource': 'availability'}


def test_unverified_doctor_has_no_slots(db, make_user) -> None:
    pending = make_user(ROLE_DOCTOR, verification_status=VERIFICATION_PENDING)
    set_window(db, pending)

    listing = list_available_slots(db, pending.id, NOW)

    assert listing.error.code == ErrorCode.NOT_FOUND
    assert listing.error.details == {'resource': 'doctor'}
