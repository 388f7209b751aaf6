from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from telehealth.auth.dependencies import get_current_user
from telehealth.database import get_db
from telehealth.models.user import User
from telehealth.routes.common import database_unavailable
from telehealth.services import repositories

router = APIRouter()
doctors_router = APIRouter(tags=['doctors'])


class CurrentUserResponse(BaseModel):
    role: str
    name: str | None = None
    email: str | None = None


class CreditBalanceResponse(BaseModel):
    credits: int


class DoctorResponse(BaseModel):
    id: int
    name: str | None = None
    email: str | None = None
    specialty: str | None = None
    timezone: str | None = None

    class Config:
        from_attributes = True


@router.get('/me', response_model=CurrentUserResponse)
def me(current_user: User = Depends(get_current_user)):
    return CurrentUserResponse(role=current_user.role, name=current_user.name, email=current_user.email)


@router.get('/me/credits', response_model=CreditBalanceResponse)
def my_credits(current_user: User = Depends(get_current_user)):
    return CreditBalanceResponse(credits=current_user.credits or 0)


@doctors_router.get('', response_model=list[DoctorResponse])
def list_doctors(
    specialty: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    try:
        return repositories.list_verified_doctors(db, specialty.strip() if specialty else None)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@doctors_router.get('/{doctor_id}', response_model=DoctorResponse)
def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    try:
        doctor = repositories.get_verified_doctor(db, doctor_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if doctor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Doctor not found.')
    return doctor
