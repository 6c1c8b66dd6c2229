"""Tests for patient registration, profile and health updates."""

import pytest
from sqlalchemy import select, func

from app.db.models import Account, Patient, HealthData
from app.db.schemas import PatientCreate, PatientUpdate, HealthMeasurements
from app.services.v1 import PatientService, IdentityService
from common.api_error import (
    DuplicateIdentityError,
    InternalFailureError,
    NotFoundError,
)

pytestmark = pytest.mark.anyio


async def _count(db_manager, model) -> int:
    async with db_manager.unit_of_work() as uow:
        return await uow.query_one(select(func.count()).select_from(model))


class _BrokenHasher:
    def hash(self, password: str) -> str:
        raise RuntimeError("hash backend unavailable")

    def verify(self, password: str, hashed_password: str) -> bool:
        return False


class TestCreatePatient:
    async def test_creates_patient_metrics_and_account(
        self, db_manager, hasher, patient_id
    ):
        async with db_manager.unit_of_work() as uow:
            patient = await uow.get(Patient, patient_id)
            account = await uow.query_one(
                select(Account).where(Account.id_card == "1234567890123")
            )
            health = await uow.query_one(
                select(HealthData).where(HealthData.patient_id == patient_id)
            )

        assert patient.id_card == "1234567890123"
        assert patient.phone == "0812345678"
        # legacy column holds the hash, never the raw password
        assert patient.password == account.password
        assert patient.password != "secret-pass"
        assert health.bmi == 22.86
        assert health.waist_to_height_ratio == 0.46

    async def test_duplicate_rolls_back_everything(
        self, db_manager, hasher, patient_id, patient_payload
    ):
        second = PatientCreate(**{**patient_payload, "first_name": "อีกคน"})

        with pytest.raises(DuplicateIdentityError):
            async with db_manager.unit_of_work() as uow:
                await PatientService(uow, hasher).create_patient(second)

        assert await _count(db_manager, Patient) == 1
        assert await _count(db_manager, HealthData) == 1
        assert await _count(db_manager, Account) == 1

    async def test_unexpected_failure_becomes_internal_failure(
        self, db_manager, patient_create
    ):
        with pytest.raises(InternalFailureError) as exc_info:
            async with db_manager.unit_of_work() as uow:
                await PatientService(uow, _BrokenHasher()).create_patient(patient_create)

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Internal Server Error"
        assert "hash backend unavailable" in exc_info.value.cause
        assert await _count(db_manager, Patient) == 0


class TestGetProfile:
    async def test_display_forms_and_metrics(self, db_manager, hasher, patient_id):
        async with db_manager.unit_of_work() as uow:
            profile = await PatientService(uow, hasher).get_profile(patient_id)

        assert profile.id_card == "1-2345-67890-12-3"
        assert profile.phone == "081-234-5678"
        assert profile.bmi == 22.86
        assert profile.waist_to_height_ratio == 0.46
        assert profile.province == "เชียงใหม่"

    async def test_missing_patient(self, uow, hasher):
        with pytest.raises(NotFoundError):
            await PatientService(uow, hasher).get_profile(404)


class TestUpdateHealth:
    async def test_second_update_replaces_first(self, db_manager, hasher, patient_id):
        for weight in (80, 60):
            async with db_manager.unit_of_work() as uow:
                await PatientService(uow, hasher).update_health(
                    patient_id, HealthMeasurements(weight=weight, height=160, waist=72)
                )

        async with db_manager.unit_of_work() as uow:
            rows = await uow.query_many(
                select(HealthData).where(HealthData.patient_id == patient_id)
            )
            patient = await uow.get(Patient, patient_id)

        assert len(rows) == 1
        assert rows[0].bmi == 23.44
        assert rows[0].waist_to_height_ratio == 0.45
        assert (patient.weight, patient.height, patient.waist) == (60, 160, 72)

    async def test_missing_patient(self, uow, hasher):
        with pytest.raises(NotFoundError):
            await PatientService(uow, hasher).update_health(
                1, HealthMeasurements(weight=60, height=160, waist=70)
            )


class TestUpdateProfile:
    async def test_identity_change_moves_account(
        self, db_manager, hasher, patient_id, patient_payload
    ):
        update = PatientUpdate(
            **{
                **patient_payload,
                "id_card": "3-2109-87654-32-1",
                "last_name": "ใจงาม",
                "password": None,
            }
        )
        async with db_manager.unit_of_work() as uow:
            await PatientService(uow, hasher).update_profile(patient_id, update)

        async with db_manager.unit_of_work() as uow:
            accounts = await uow.query_many(select(Account.id_card))
            account = await IdentityService(uow, hasher).verify(
                "3210987654321", "secret-pass"
            )
            profile = await PatientService(uow, hasher).get_profile(patient_id)

        assert accounts == ["3210987654321"]
        assert account.id_card == "3210987654321"
        assert profile.last_name == "ใจงาม"
        assert profile.id_card == "3-2109-87654-32-1"

    async def test_measurements_and_password(
        self, db_manager, hasher, patient_id, patient_payload
    ):
        update = PatientUpdate(
            **{**patient_payload, "weight": 60, "height": 160, "waist": 72, "password": "rotated"}
        )
        async with db_manager.unit_of_work() as uow:
            await PatientService(uow, hasher).update_profile(patient_id, update)

        async with db_manager.unit_of_work() as uow:
            await IdentityService(uow, hasher).verify("1234567890123", "rotated")
            profile = await PatientService(uow, hasher).get_profile(patient_id)

        assert profile.bmi == 23.44

    async def test_without_measurements_keeps_metrics(
        self, db_manager, hasher, patient_id, patient_payload
    ):
        payload = {
            k: v
            for k, v in patient_payload.items()
            if k not in ("weight", "height", "waist", "password")
        }
        async with db_manager.unit_of_work() as uow:
            await PatientService(uow, hasher).update_profile(
                patient_id, PatientUpdate(**{**payload, "phone": "0899999999"})
            )

        async with db_manager.unit_of_work() as uow:
            profile = await PatientService(uow, hasher).get_profile(patient_id)

        assert profile.phone == "089-999-9999"
        assert profile.bmi == 22.86

    async def test_duplicate_identity_rolls_back(
        self, db_manager, hasher, patient_id, patient_payload
    ):
        async with db_manager.unit_of_work() as uow:
            await IdentityService(uow, hasher).register("3210987654321", "other")

        update = PatientUpdate(
            **{**patient_payload, "id_card": "3210987654321", "password": None}
        )
        with pytest.raises(DuplicateIdentityError):
            async with db_manager.unit_of_work() as uow:
                await PatientService(uow, hasher).update_profile(patient_id, update)

        async with db_manager.unit_of_work() as uow:
            patient = await uow.get(Patient, patient_id)
        assert patient.id_card == "1234567890123"

    async def test_missing_patient(self, uow, hasher, patient_payload):
        with pytest.raises(NotFoundError):
            await PatientService(uow, hasher).update_profile(
                12, PatientUpdate(**{**patient_payload, "password": None})
            )


class TestSchemas:
    def test_partial_measurements_rejected(self, patient_payload):
        with pytest.raises(ValueError):
            PatientUpdate(**{**patient_payload, "waist": None})

    def test_seed_records_are_valid_and_unique(self):
        from scripts.db import PATIENT_DATA_TEMPLATE

        records = PatientCreate.seed_records(PATIENT_DATA_TEMPLATE, 5)
        assert len({r.id_card for r in records}) == 5
        assert all(len(r.id_card) == 13 and len(r.phone) == 10 for r in records)


class TestReadWithoutHasher:
    async def test_get_profile_needs_no_hasher(self, db_manager, patient_id):
        async with db_manager.unit_of_work() as uow:
            profile = await PatientService(uow).get_profile(patient_id)
        assert profile.id == patient_id

    async def test_credential_writes_require_hasher(self, uow):
        with pytest.raises(RuntimeError):
            PatientService(uow).identity
