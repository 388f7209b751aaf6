"""Dependencies and error translation shared by the route modules."""

from datetime import datetime

from fastapi import HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError

from telehealth.clients.chat import ChatAssistant
from telehealth.clients.video import UnconfiguredVideoProvisioner, VideoProvisioner
from telehealth.core.errors import ErrorCode, ServiceError
from telehealth.core.time_utils import utc_now
from telehealth.database import ensure_appointment_schema, ensure_availability_schema
from telehealth.services.booking import BookingCoordinator

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and Postgres credentials.'

ERROR_STATUS_CODES = {
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NOT_VERIFIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.INSUFFICIENT_CREDITS: status.HTTP_402_PAYMENT_REQUIRED,
    ErrorCode.SLOT_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.PROVISIONING_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.CREDIT_TRANSFER_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_SCHEDULED: status.HTTP_409_CONFLICT,
    ErrorCode.TOO_EARLY: status.HTTP_425_TOO_EARLY,
}


def raise_service_error(error: ServiceError) -> None:
    raise HTTPException(
        status_code=ERROR_STATUS_CODES.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={'code': error.code.value, 'message': error.message, **error.details},
    )


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def ensure_database_ready() -> None:
    try:
        ensure_availability_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


def get_now() -> datetime:
    return utc_now()


def get_video_provisioner(request: Request) -> VideoProvisioner:
    return getattr(request.app.state, 'video_provisioner', None) or UnconfiguredVideoProvisioner()


def get_booking_coordinator(request: Request) -> BookingCoordinator:
    coordinator = getattr(request.app.state, 'booking_coordinator', None)
    if coordinator is None:
        coordinator = BookingCoordinator(get_video_provisioner(request))
    return coordinator


def get_chat_assistant(request: Request) -> ChatAssistant | None:
    return getattr(request.app.state, 'chat_assistant', None)
