# app/api/v1/patient_router.py
from fastapi import APIRouter, Depends, status
from app.core import PasswordHasher, get_password_hasher
from app.db import UnitOfWork, get_uow
from app.db.schemas import (
    PatientCreate,
    PatientUpdate,
    PatientProfileResponse,
    PatientCreatedResponse,
    HealthMeasurements,
    HealthMetricsResponse,
    PasswordChangeRequest,
    MessageResponse,
)
from app.services.v1 import PatientService, IdentityService

patient_router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
)


@patient_router.post(
    "",
    response_model=PatientCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a patient",
    description="""
    Creates the patient record, its health metrics and its login account
    in one transaction.

    **Database Impact:** 1 duplicate lookup + 4 inserts.
    """,
    responses={
        409: {"description": "ID card already registered"},
        422: {"description": "Invalid input"},
        500: {"description": "Internal Server Error"},
    },
)
async def create_patient(
    payload: PatientCreate,
    uow: UnitOfWork = Depends(get_uow),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    patient_id = await PatientService(uow, hasher).create_patient(payload)
    await uow.commit()
    return PatientCreatedResponse(id=patient_id)


@patient_router.get(
    "/{patient_id}",
    response_model=PatientProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get patient profile",
    description="""
    Fetches the full profile with the latest BMI and waist-to-height ratio.

    **Database Impact:** - LEFT JOIN with health_data.
    - Expected Query Count: 1
    """,
    responses={
        404: {"description": "Patient not found"},
        500: {"description": "Internal Database Error"},
    },
)
async def get_patient(patient_id: int, uow: UnitOfWork = Depends(get_uow)):
    return await PatientService(uow).get_profile(patient_id)


@patient_router.put(
    "/{patient_id}",
    response_model=MessageResponse,
    summary="Update patient profile",
    responses={
        404: {"description": "Patient not found"},
        409: {"description": "ID card already registered"},
        422: {"description": "Invalid input"},
    },
)
async def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    uow: UnitOfWork = Depends(get_uow),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    await PatientService(uow, hasher).update_profile(patient_id, payload)
    await uow.commit()
    return MessageResponse(message="Patient updated successfully")


@patient_router.put(
    "/{patient_id}/health",
    response_model=HealthMetricsResponse,
    summary="Record new measurements",
    description="Recomputes BMI and waist-to-height ratio; one row per patient.",
    responses={404: {"description": "Patient not found"}},
)
async def update_health(
    patient_id: int,
    payload: HealthMeasurements,
    uow: UnitOfWork = Depends(get_uow),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    health = await PatientService(uow, hasher).update_health(patient_id, payload)
    await uow.commit()
    return health


@patient_router.put(
    "/{patient_id}/password",
    response_model=MessageResponse,
    summary="Change password",
    responses={404: {"description": "Patient or user not found"}},
)
async def change_password(
    patient_id: int,
    payload: PasswordChangeRequest,
    uow: UnitOfWork = Depends(get_uow),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    await IdentityService(uow, hasher).change_password(patient_id, payload.password)
    await uow.commit()
    return MessageResponse(message="Password updated successfully")


__all__ = ["patient_router"]
