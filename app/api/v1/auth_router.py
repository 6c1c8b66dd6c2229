# app/api/v1/auth_router.py
from fastapi import APIRouter, Depends
from sqlalchemy import select
from app.core import PasswordHasher, get_password_hasher
from app.db import UnitOfWork, get_uow
from app.db.models import Patient
from app.db.schemas import LoginRequest, LoginResponse
from app.services.v1 import IdentityService
from common.api_error import AuthFailureError

auth_router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


@auth_router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in with ID card and password",
    responses={401: {"description": "Invalid ID Card or Password"}},
)
async def login(
    payload: LoginRequest,
    uow: UnitOfWork = Depends(get_uow),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    account = await IdentityService(uow, hasher).verify(payload.id_card, payload.password)

    patient = await uow.query_optional(
        select(Patient)
        .where(Patient.id_card == account.id_card)
        .order_by(Patient.id)
        .limit(1)
        .execution_options(logging_token="auth_router.login")
    )
    # an account with no patient row cannot use the app; same answer as a bad login
    if patient is None:
        raise AuthFailureError()

    return LoginResponse(
        id=str(patient.id),
        user_id=account.id,
        title_name=patient.title_name,
        first_name=patient.first_name,
        last_name=patient.last_name,
    )


__all__ = ["auth_router"]
