# app/api/v1/appointment_router.py
from typing import List
from fastapi import APIRouter, Depends, status
from app.db import UnitOfWork, get_uow
from app.db.schemas import (
    EvaluationCreate,
    AppointmentCreate,
    AppointmentWithResultCreate,
    AppointmentResponse,
    AppointmentOverviewResponse,
    AppointmentDetailResponse,
    AppointmentCreatedResponse,
    MessageResponse,
)
from app.services.v1 import AppointmentService
from common.logger.logger_middleware import enable_perf_headers

appointment_router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
)


@appointment_router.post(
    "/evaluations",
    response_model=AppointmentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Store an evaluation result",
    responses={404: {"description": "User not found"}},
)
async def record_evaluation(
    payload: EvaluationCreate, uow: UnitOfWork = Depends(get_uow)
):
    appointment_id = await AppointmentService(uow).record_evaluation(
        payload.user_id, payload.program_name, payload.result_program
    )
    await uow.commit()
    return AppointmentCreatedResponse(id=appointment_id)


@appointment_router.post(
    "/with-result",
    response_model=AppointmentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule an appointment together with an evaluation result",
    responses={404: {"description": "User not found"}},
)
async def schedule_with_result(
    payload: AppointmentWithResultCreate, uow: UnitOfWork = Depends(get_uow)
):
    appointment_id = await AppointmentService(uow).schedule_appointment(
        payload.user_id,
        payload.program_name,
        payload.appointment_date,
        payload.result_program,
    )
    await uow.commit()
    return AppointmentCreatedResponse(id=appointment_id)


@appointment_router.post(
    "",
    response_model=AppointmentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule an appointment",
    description="appointment_date accepts YYYY-MM-DD or DD/MM/YYYY.",
    responses={404: {"description": "User not found"}},
)
async def schedule_appointment(
    payload: AppointmentCreate, uow: UnitOfWork = Depends(get_uow)
):
    appointment_id = await AppointmentService(uow).schedule_appointment(
        payload.user_id, payload.program_name, payload.appointment_date
    )
    await uow.commit()
    return AppointmentCreatedResponse(id=appointment_id)


@appointment_router.get(
    "/upcoming/{user_id}",
    response_model=List[AppointmentResponse],
    summary="Latest scheduled appointment of a user",
    description="Zero or one element.",
)
async def list_upcoming(user_id: int, uow: UnitOfWork = Depends(get_uow)):
    appointment = await AppointmentService(uow).list_upcoming(user_id)
    return [appointment] if appointment is not None else []


@appointment_router.get(
    "/user/{user_id}",
    response_model=List[AppointmentResponse],
    summary="All scheduled appointments of a user, newest first",
)
async def list_for_user(user_id: int, uow: UnitOfWork = Depends(get_uow)):
    return await AppointmentService(uow).list_all(user_id)


@appointment_router.get(
    "",
    response_model=List[AppointmentOverviewResponse],
    dependencies=[Depends(enable_perf_headers)],
    summary="All scheduled appointments with patient details, soonest first",
    description="""
    **Database Impact:** - JOIN appointments, users and patient.
    - Expected Query Count: 1
    """,
)
async def list_all_with_details(uow: UnitOfWork = Depends(get_uow)):
    return await AppointmentService(uow).list_all_with_details()


@appointment_router.get(
    "/{appointment_id}",
    response_model=AppointmentDetailResponse,
    summary="Appointment with patient profile and latest metrics",
    responses={404: {"description": "Appointment not found"}},
)
async def get_appointment(appointment_id: int, uow: UnitOfWork = Depends(get_uow)):
    return await AppointmentService(uow).get_details(appointment_id)


@appointment_router.delete(
    "/{appointment_id}",
    response_model=MessageResponse,
    summary="Delete an appointment",
    description="Succeeds whether or not the appointment exists.",
)
async def delete_appointment(appointment_id: int, uow: UnitOfWork = Depends(get_uow)):
    await AppointmentService(uow).delete(appointment_id)
    await uow.commit()
    return MessageResponse(message="Appointment deleted successfully")


__all__ = ["appointment_router"]
