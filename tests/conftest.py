"""Pytest configuration and fixtures."""

import os
import pytest
from typing import AsyncGenerator

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("APP_TITLE", "Patient Records Test")
os.environ.setdefault("APP_VERSION", "1.0.0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from common.config import initialize_config

initialize_config()

from app.core import PasswordHasher
from app.db import DbManager, UnitOfWork
from app.db.models import DbBaseModel
from app.db.schemas import PatientCreate
from app.reference import load_thai_divisions
from app.services.v1 import PatientService


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def hasher() -> PasswordHasher:
    """Minimum bcrypt cost keeps the suite fast."""
    return PasswordHasher(rounds=4)


@pytest.fixture
async def db_manager(tmp_path) -> AsyncGenerator[DbManager, None]:
    """Fresh file-backed SQLite database per test."""
    manager = DbManager(f"sqlite+aiosqlite:///{tmp_path}/test.db", pool_size=2)
    async with manager.engine.begin() as conn:
        await conn.run_sync(DbBaseModel.metadata.create_all)

    yield manager

    await manager.dispose()


@pytest.fixture
async def uow(db_manager) -> AsyncGenerator[UnitOfWork, None]:
    async with db_manager.unit_of_work() as unit:
        yield unit


@pytest.fixture
def patient_payload() -> dict:
    """Registration body as the mobile app sends it."""
    return {
        "title_name": "นาง",
        "first_name": "สมศรี",
        "last_name": "ใจดี",
        "id_card": "1-2345-67890-12-3",
        "phone": "081-234-5678",
        "gender": "female",
        "date_birth": "1965-04-12",
        "house_number": "99/1",
        "street": "ถนนห้วยแก้ว",
        "village": "หมู่ 3",
        "subdistrict": "สุเทพ",
        "district": "อำเภอเมืองเชียงใหม่",
        "province": "เชียงใหม่",
        "weight": 70,
        "height": 175,
        "waist": 80,
        "password": "secret-pass",
    }


@pytest.fixture
def patient_create(patient_payload) -> PatientCreate:
    return PatientCreate(**patient_payload)


@pytest.fixture
async def patient_id(db_manager, hasher, patient_create) -> int:
    """A registered patient, committed."""
    async with db_manager.unit_of_work() as unit:
        return await PatientService(unit, hasher).create_patient(patient_create)


@pytest.fixture
async def client(db_manager, hasher):
    """HTTP client against the app; lifespan state is wired by hand."""
    from httpx import ASGITransport, AsyncClient
    from main import app

    app.state.db_manager = db_manager
    app.state.password_hasher = hasher
    app.state.thai_divisions = load_thai_divisions()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client
