from datetime import date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from telehealth.auth.dependencies import get_current_user
from telehealth.core.time_utils import format_day
from telehealth.database import get_db
from telehealth.models.user import User
from telehealth.routes.common import database_unavailable, ensure_database_ready, get_now, raise_service_error
from telehealth.services import repositories
from telehealth.services.availability import list_available_slots

router = APIRouter(tags=['availability'])


class SetAvailabilityRequest(BaseModel):
    start_time: time
    end_time: time

    @field_validator('start_time', 'end_time')
    @classmethod
    def strip_timezone(cls, value: time) -> time:
        return value.replace(second=0, microsecond=0, tzinfo=None)


class AvailabilityResponse(BaseModel):
    id: int
    doctor_id: int
    start_time: time
    end_time: time
    status: str

    class Config:
        from_attributes = True


class SlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    formatted: str
    day: str


class DaySlotsResponse(BaseModel):
    date: date
    display_date: str
    slots: list[SlotResponse]


class DoctorSlotsResponse(BaseModel):
    doctor_id: int
    timezone: str
    days: list[DaySlotsResponse]


def require_doctor(user: User) -> None:
    if not user.is_doctor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only doctors can manage availability.',
        )


@router.put('/me', response_model=AvailabilityResponse)
def set_my_availability(
    data: SetAvailabilityRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_doctor(current_user)

    if data.start_time >= data.end_time:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Start time must be before end time.',
        )

    ensure_database_ready()

    try:
        return repositories.upsert_availability_window(db, current_user.id, data.start_time, data.end_time)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.get('/me', response_model=AvailabilityResponse)
def get_my_availability(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_doctor(current_user)
    ensure_database_ready()

    try:
        window = repositories.get_availability_window(db, current_user.id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if window is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='No availability set.',
        )
    return window


@router.get('/doctors/{doctor_id}/slots', response_model=DoctorSlotsResponse)
def list_doctor_slots(
    doctor_id: int,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    ensure_database_ready()

    try:
        listing = list_available_slots(db, doctor_id, now)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if listing.error is not None:
        raise_service_error(listing.error)

    days = []
    for day_key, slots in listing.days.items():
        day = date.fromisoformat(day_key)
        days.append(
            DaySlotsResponse(
                date=day,
                display_date=format_day(day),
                slots=[
                    SlotResponse(
                        start_time=slot.start,
                        end_time=slot.end,
                        formatted=slot.label,
                        day=format_day(slot.day),
                    )
                    for slot in slots
                ],
            )
        )

    return DoctorSlotsResponse(doctor_id=doctor_id, timezone=listing.timezone, days=days)
