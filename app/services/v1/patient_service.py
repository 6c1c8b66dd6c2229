# app/services/v1/patient_service.py
from typing import Optional
from sqlalchemy import select
from app.core.security import PasswordHasher
from app.db.models import Patient, HealthData, utc_now
from app.db.schemas import (
    PatientCreate,
    PatientUpdate,
    PatientProfileResponse,
    HealthMeasurements,
)
from app.db.unit_of_work import UnitOfWork
from common import get_app_logger
from common.api_error import AppError, InternalFailureError, NotFoundError
from app.core.formatting import format_id_card, format_phone
from .health_metrics import compute_health_metrics
from .identity_service import IdentityService

logger = get_app_logger(__name__)

_DEMOGRAPHIC_FIELDS = (
    "title_name",
    "first_name",
    "last_name",
    "id_card",
    "phone",
    "gender",
    "date_birth",
    "house_number",
    "street",
    "village",
    "subdistrict",
    "district",
    "province",
)


class PatientService:
    def __init__(self, uow: UnitOfWork, hasher: Optional[PasswordHasher] = None):
        """The hasher is needed only by operations that write credentials."""
        self.uow = uow
        self.hasher = hasher

    @property
    def identity(self) -> IdentityService:
        if self.hasher is None:
            raise RuntimeError(
                "PatientService needs a PasswordHasher for this operation"
            )
        return IdentityService(self.uow, self.hasher)

    async def _get_patient(self, patient_id: int) -> Patient:
        patient = await self.uow.get(Patient, patient_id)
        if patient is None:
            raise NotFoundError("Patient not found")
        return patient

    async def _upsert_health_data(self, patient: Patient) -> HealthData:
        metrics = compute_health_metrics(patient.weight, patient.height, patient.waist)
        query = (
            select(HealthData)
            .where(HealthData.patient_id == patient.id)
            .execution_options(logging_token="PatientService._upsert_health_data")
        )
        health = await self.uow.query_optional(query)
        if health is None:
            health = HealthData(patient_id=patient.id)
            self.uow.add(health)
        health.bmi = metrics.bmi
        health.waist_to_height_ratio = metrics.waist_to_height_ratio
        health.record_date = utc_now()
        await self.uow.flush()
        return health

    async def create_patient(self, data: PatientCreate) -> int:
        """
        Insert patient, health metrics and login account as one unit.

        Typed failures propagate unchanged; anything else becomes an
        InternalFailureError carrying the original message.
        """
        try:
            patient = Patient(
                **data.model_dump(include=set(_DEMOGRAPHIC_FIELDS)),
                weight=data.weight,
                height=data.height,
                waist=data.waist,
            )
            self.uow.add(patient)
            await self.uow.flush()

            await self._upsert_health_data(patient)
            account = await self.identity.register(data.id_card, data.password)
            patient.password = account.password
            await self.uow.flush()
        except AppError:
            raise
        except Exception as e:
            logger.error("Patient creation failed", error_type=type(e).__name__)
            raise InternalFailureError(cause=str(e)) from e

        logger.info("Patient created", patient_id=patient.id, user_id=account.id)
        return patient.id

    async def get_profile(self, patient_id: int) -> PatientProfileResponse:
        """Patient with latest metrics; id card and phone in display form."""
        query = (
            select(Patient, HealthData)
            .outerjoin(HealthData, HealthData.patient_id == Patient.id)
            .where(Patient.id == patient_id)
            .order_by(HealthData.record_date.desc())
            .limit(1)
            .execution_options(logging_token="PatientService.get_profile")
        )
        patient, health = await self.uow.query_one(query, not_found="Patient not found")
        return build_profile(patient, health)

    async def update_profile(self, patient_id: int, data: PatientUpdate) -> None:
        patient = await self._get_patient(patient_id)
        old_id_card = patient.id_card

        for field in _DEMOGRAPHIC_FIELDS:
            setattr(patient, field, getattr(data, field))

        measurements = data.measurements
        if measurements is not None:
            self._apply_measurements(patient, measurements)
            await self._upsert_health_data(patient)
        else:
            await self.uow.flush()

        if old_id_card != data.id_card:
            await self.identity.sync_identity_number(old_id_card, data.id_card)

        if data.password:
            await self.identity.change_password(patient.id, data.password)

        logger.info("Patient profile updated", patient_id=patient.id)

    async def update_health(
        self, patient_id: int, measurements: HealthMeasurements
    ) -> HealthData:
        patient = await self._get_patient(patient_id)
        self._apply_measurements(patient, measurements)
        health = await self._upsert_health_data(patient)
        logger.info(
            "Health data updated",
            patient_id=patient.id,
            bmi=health.bmi,
            waist_to_height_ratio=health.waist_to_height_ratio,
        )
        return health

    @staticmethod
    def _apply_measurements(patient: Patient, measurements: HealthMeasurements) -> None:
        patient.weight = measurements.weight
        patient.height = measurements.height
        patient.waist = measurements.waist


def build_profile(
    patient: Patient, health: Optional[HealthData]
) -> PatientProfileResponse:
    """Read model for a patient row; the only place display formatting happens."""
    return PatientProfileResponse(
        id=patient.id,
        title_name=patient.title_name,
        first_name=patient.first_name,
        last_name=patient.last_name,
        id_card=format_id_card(patient.id_card),
        phone=format_phone(patient.phone),
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


__all__ = ["PatientService", "build_profile"]
