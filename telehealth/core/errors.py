"""Error values returned by the scheduling services."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    INVALID_REQUEST = 'INVALID_REQUEST'
    NOT_FOUND = 'NOT_FOUND'
    NOT_VERIFIED = 'NOT_VERIFIED'
    INSUFFICIENT_CREDITS = 'INSUFFICIENT_CREDITS'
    SLOT_UNAVAILABLE = 'SLOT_UNAVAILABLE'
    PROVISIONING_FAILED = 'PROVISIONING_FAILED'
    CREDIT_TRANSFER_FAILED = 'CREDIT_TRANSFER_FAILED'
    NOT_AUTHORIZED = 'NOT_AUTHORIZED'
    NOT_SCHEDULED = 'NOT_SCHEDULED'
    TOO_EARLY = 'TOO_EARLY'


@dataclass(frozen=True)
class ServiceError:
    """A business or collaborator failure, reported to the caller as a value."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def not_found(cls, resource: str, message: str | None = None) -> 'ServiceError':
        return cls(
            ErrorCode.NOT_FOUND,
            message or f'{resource.capitalize()} not found.',
            {'resource': resource},
        )


class VideoProvisioningError(Exception):
    """The video provider could not create a session or issue a token."""


class CreditTransferError(Exception):
    """A credit transfer between two users could not be applied."""
