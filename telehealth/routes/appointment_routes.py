from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from telehealth.auth.dependencies import get_current_user
from telehealth.clients.video import VideoProvisioner
from telehealth.database import get_db
from telehealth.models.user import User
from telehealth.routes.common import (
    database_unavailable,
    ensure_database_ready,
    get_booking_coordinator,
    get_now,
    get_video_provisioner,
    raise_service_error,
)
from telehealth.services import repositories
from telehealth.services.booking import BookingCoordinator
from telehealth.services.video_access import issue_join_token

router = APIRouter(tags=['appointments'])

MAX_DESCRIPTION_LENGTH = 1000


class CreateAppointmentRequest(BaseModel):
    doctor_id: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    description: str | None = None

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')

        return normalized


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    start_time: datetime
    end_time: datetime
    status: str
    patient_description: str | None = None
    video_session_id: str | None = None

    class Config:
        from_attributes = True


class VideoTokenResponse(BaseModel):
    video_session_id: str
    token: str


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
    data: CreateAppointmentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
):
    ensure_database_ready()

    try:
        result = coordinator.book_appointment(
            db,
            patient_id=current_user.id,
            doctor_id=data.doctor_id,
            start=data.start_time,
            end=data.end_time,
            description=data.description,
        )
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if result.error is not None:
        raise_service_error(result.error)
    return result.appointment


@router.get('/me', response_model=list[AppointmentResponse])
def list_my_appointments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return repositories.list_appointments_for_user(db, current_user)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/{appointment_id}/video-token', response_model=VideoTokenResponse)
def create_video_token(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    provisioner: VideoProvisioner = Depends(get_video_provisioner),
    now: datetime = Depends(get_now),
):
    ensure_database_ready()

    try:
        result = issue_join_token(db, provisioner, appointment_id, current_user, now)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    if result.error is not None:
        raise_service_error(result.error)
    return VideoTokenResponse(video_session_id=result.session_id, token=result.token)
