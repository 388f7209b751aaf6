import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from telehealth.clients.video import ROLE_PUBLISHER, VideoProvisioner
from telehealth.core.errors import ErrorCode, ServiceError, VideoProvisioningError
from telehealth.core.time_utils import as_utc, minutes_between
from telehealth.models.appointment import STATUS_SCHEDULED
from telehealth.models.user import User
from telehealth.services import repositories

logger = logging.getLogger(__name__)

JOIN_WINDOW_MINUTES = 30
TOKEN_GRACE_MINUTES = 60


@dataclass
class JoinResult:
    session_id: str | None = None
    token: str | None = None
    error: ServiceError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def issue_join_token(
    db: Session,
    provisioner: VideoProvisioner,
    appointment_id: int,
    requesting_user: User,
    now: datetime,
) -> JoinResult:
    """Issue a publisher token for one of the two participants of an appointment.

    The room opens 30 minutes before the start and stays open afterwards; the
    token itself expires an hour after the scheduled end. The new token
    replaces any earlier one stored on the appointment.
    """
    appointment = repositories.get_appointment(db, appointment_id)
    if appointment is None:
        return JoinResult(error=ServiceError.not_found('appointment', 'Appointment not found.'))

    if requesting_user.id not in (appointment.doctor_id, appointment.patient_id):
        return JoinResult(
            error=ServiceError(ErrorCode.NOT_AUTHORIZED, 'You are not authorized to join this call.'),
        )

    if appointment.status != STATUS_SCHEDULED:
        return JoinResult(
            error=ServiceError(ErrorCode.NOT_SCHEDULED, 'This appointment is not currently scheduled.'),
        )

    if minutes_between(now, appointment.start_time) > JOIN_WINDOW_MINUTES:
        return JoinResult(
            error=ServiceError(
                ErrorCode.TOO_EARLY,
                f'The call will be available {JOIN_WINDOW_MINUTES} minutes before the scheduled time.',
                {'opens_at': (as_utc(appointment.start_time) - timedelta(minutes=JOIN_WINDOW_MINUTES)).isoformat()},
            ),
        )

    expire_at = as_utc(appointment.end_time) + timedelta(minutes=TOKEN_GRACE_MINUTES)
    connection_data = json.dumps({
        'name': requesting_user.name,
        'role': requesting_user.role,
        'userId': requesting_user.id,
    })

    try:
        token = provisioner.generate_token(
            appointment.video_session_id,
            role=ROLE_PUBLISHER,
            expire_time=int(expire_at.timestamp()),
            data=connection_data,
        )
    except VideoProvisioningError as exc:
        logger.error('Video token generation failed for appointment %s: %s', appointment.id, exc)
        return JoinResult(error=ServiceError(ErrorCode.PROVISIONING_FAILED, 'Failed to generate video token.'))

    appointment.video_session_token = token
    db.commit()

    return JoinResult(session_id=appointment.video_session_id, token=token)
