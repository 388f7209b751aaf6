from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from telehealth.core.errors import ServiceError
from telehealth.core.time_utils import as_utc, resolve_timezone
from telehealth.services import repositories
from telehealth.services.slot_generator import SLOT_HORIZON_DAYS, Slot, generate_slots


@dataclass
class SlotListing:
    days: dict[str, list[Slot]] = field(default_factory=dict)
    timezone: str | None = None
    error: ServiceError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def list_available_slots(
    db: Session,
    doctor_id: int,
    now: datetime,
    horizon_days: int = SLOT_HORIZON_DAYS,
) -> SlotListing:
    """Compute the doctor's free slots from the current store state."""
    doctor = repositories.get_verified_doctor(db, doctor_id)
    if doctor is None:
        return SlotListing(error=ServiceError.not_found('doctor', 'Doctor not found or not verified.'))

    window = repositories.get_availability_window(db, doctor.id)
    if window is None:
        return SlotListing(error=ServiceError.not_found('availability', 'No availability set by doctor.'))

    tz = resolve_timezone(doctor.timezone)
    reference = as_utc(now)
    local_midnight = reference.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
    # A day of slack on each side covers windows that straddle midnight in UTC.
    range_start = local_midnight - timedelta(days=1)
    range_end = local_midnight + timedelta(days=horizon_days + 1)
    booked = repositories.list_scheduled_intervals(db, doctor.id, range_start, range_end)

    days = generate_slots(window, booked, reference, horizon_days=horizon_days, tz=tz)
    return SlotListing(days=days, timezone=tz.key)
