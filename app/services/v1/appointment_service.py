# app/services/v1/appointment_service.py
from datetime import date
from typing import Any, Optional, Sequence, Union
from sqlalchemy import select, delete
from app.db.models import Account, Appointment, Patient, HealthData
from app.db.schemas import AppointmentOverviewResponse, AppointmentDetailResponse
from app.db.unit_of_work import UnitOfWork
from app.core.formatting import format_id_card, format_phone, parse_appointment_date
from common import get_app_logger
from common.api_error import NotFoundError

logger = get_app_logger(__name__)


class AppointmentService:
    """
    Evaluation results and follow-up appointments, owned by an account.

    Appointment rows are write-once; the only mutation is delete.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def _require_account(self, user_id: int) -> None:
        if await self.uow.get(Account, user_id) is None:
            raise NotFoundError("User not found")

    async def _insert(
        self,
        user_id: int,
        program_name: str,
        result_program: Any,
        appointment_date: Optional[date],
    ) -> int:
        await self._require_account(user_id)
        appointment = Appointment(
            user_id=user_id,
            program_name=program_name,
            result_program=result_program,
            appointment_date=appointment_date,
        )
        self.uow.add(appointment)
        await self.uow.flush()
        logger.info(
            "Appointment recorded",
            appointment_id=appointment.id,
            user_id=user_id,
            program_name=program_name,
            scheduled=appointment_date is not None,
        )
        return appointment.id

    async def record_evaluation(
        self, user_id: int, program_name: str, result_program: Any
    ) -> int:
        """Store an evaluation result with no appointment date."""
        return await self._insert(user_id, program_name, result_program, None)

    async def schedule_appointment(
        self,
        user_id: int,
        program_name: str,
        appointment_date: Union[date, str],
        result_program: Any = None,
    ) -> int:
        return await self._insert(
            user_id,
            program_name,
            result_program,
            parse_appointment_date(appointment_date),
        )

    async def list_upcoming(self, user_id: int) -> Optional[Appointment]:
        """The account's latest-dated appointment, if any."""
        query = (
            select(Appointment)
            .where(
                Appointment.user_id == user_id,
                Appointment.appointment_date.is_not(None),
            )
            .order_by(Appointment.appointment_date.desc(), Appointment.id.desc())
            .limit(1)
            .execution_options(logging_token="AppointmentService.list_upcoming")
        )
        return await self.uow.query_optional(query)

    async def list_all(self, user_id: int) -> Sequence[Appointment]:
        query = (
            select(Appointment)
            .where(
                Appointment.user_id == user_id,
                Appointment.appointment_date.is_not(None),
            )
            .order_by(Appointment.appointment_date.desc(), Appointment.id.desc())
            .execution_options(logging_token="AppointmentService.list_all")
        )
        return await self.uow.query_many(query)

    async def list_all_with_details(self) -> list[AppointmentOverviewResponse]:
        """Every dated appointment with its patient, soonest first."""
        query = (
            select(Appointment, Patient)
            .join(Account, Account.id == Appointment.user_id)
            .join(Patient, Patient.id_card == Account.id_card)
            .where(Appointment.appointment_date.is_not(None))
            .order_by(Appointment.appointment_date.asc(), Appointment.id.asc())
            .execution_options(logging_token="AppointmentService.list_all_with_details")
        )
        rows = await self.uow.query_many(query)
        return [
            AppointmentOverviewResponse(**_overview_fields(appointment, patient))
            for appointment, patient in rows
        ]

    async def get_details(self, appointment_id: int) -> AppointmentDetailResponse:
        query = (
            select(Appointment, Patient, HealthData)
            .join(Account, Account.id == Appointment.user_id)
            .join(Patient, Patient.id_card == Account.id_card)
            .outerjoin(HealthData, HealthData.patient_id == Patient.id)
            .where(Appointment.id == appointment_id)
            .order_by(HealthData.record_date.desc())
            .limit(1)
            .execution_options(logging_token="AppointmentService.get_details")
        )
        appointment, patient, health = await self.uow.query_one(
            query, not_found="Appointment not found"
        )
        return AppointmentDetailResponse(
            **_overview_fields(appointment, patient),
            gender=patient.gender,
            date_birth=patient.date_birth,
            house_number=patient.house_number,
            street=patient.street,
            village=patient.village,
            subdistrict=patient.subdistrict,
            district=patient.district,
            province=patient.province,
            weight=patient.weight,
            height=patient.height,
            waist=patient.waist,
            bmi=health.bmi if health else None,
            waist_to_height_ratio=health.waist_to_height_ratio if health else None,
        )

    async def delete(self, appointment_id: int) -> int:
        """Delete by id. Deleting a missing appointment is not an error."""
        rows = await self.uow.execute(
            delete(Appointment).where(Appointment.id == appointment_id)
        )
        logger.info("Appointment deleted", appointment_id=appointment_id, rows=rows)
        return rows


def _overview_fields(appointment: Appointment, patient: Patient) -> dict[str, Any]:
    return {
        "id": appointment.id,
        "user_id": appointment.user_id,
        "program_name": appointment.program_name,
        "result_program": appointment.result_program,
        "appointment_date": appointment.appointment_date,
        "patient_id": patient.id,
        "title_name": patient.title_name,
        "first_name": patient.first_name,
        "last_name": patient.last_name,
        "id_card": format_id_card(patient.id_card),
        "phone": format_phone(patient.phone),
    }


__all__ = ["AppointmentService"]
