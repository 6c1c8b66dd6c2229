# scripts/db/seed_db.py
"""
Demo data through the real service layer, so every seeded patient has a
login account and health metrics exactly as if registered over HTTP.
"""

import csv
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Optional
from sqlalchemy import select

from app.core import PasswordHasher
from app.db import DbManager
from app.db.models import Account
from app.db.schemas import PatientCreate
from app.services.v1 import PatientService, AppointmentService
from common import get_app_logger

logger = get_app_logger(__name__)

# the CSV never carries credentials
CSV_EXCLUDE = {"password"}


def write_records_to_csv(filename: str, records: list[PatientCreate]) -> None:
    """Write patient records to CSV, without passwords."""
    if not records:
        return

    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = list(records[0].model_dump(exclude=CSV_EXCLUDE).keys())

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for record in records:
            writer.writerow(record.model_dump(mode="json", exclude=CSV_EXCLUDE))


def read_records_from_csv(filename: str, password: str) -> list[PatientCreate]:
    """Parse a patient CSV back into validated PatientCreate records."""
    records = []
    with open(filename, newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            # empty cells are missing optional fields
            data: dict[str, Any] = {k: v for k, v in row.items() if v != ""}
            records.append(PatientCreate(**data, password=password))
    return records


async def _create_patients(
    db_manager: DbManager, hasher: PasswordHasher, records: list[PatientCreate]
) -> list[int]:
    patient_ids = []
    for record in records:
        async with db_manager.unit_of_work() as uow:
            patient_ids.append(await PatientService(uow, hasher).create_patient(record))
    return patient_ids


async def _create_appointments(
    db_manager: DbManager,
    template: dict[str, Any],
    patients: list[PatientCreate],
) -> int:
    created = 0
    first_date: date = template["first_date"]
    async with db_manager.unit_of_work() as uow:
        service = AppointmentService(uow)
        for i, patient in enumerate(patients):
            user_id = await uow.query_one(
                select(Account.id).where(Account.id_card == patient.id_card)
            )
            await service.record_evaluation(
                user_id, template["program_name"], template["result_program"]
            )
            await service.schedule_appointment(
                user_id,
                template["program_name"],
                first_date + timedelta(days=i * template["interval_days"]),
            )
            created += 2
    return created


async def seed_db(
    db_manager: DbManager,
    hasher: PasswordHasher,
    data_template: dict[str, dict],
    records: int,
    start_index: int = 0,
    export_csv: bool = False,
    csv_dir: str = "data/seed",
) -> dict[str, int]:
    """
    Seed the database with generated patients and, if templated, appointments.

    Args:
        db_manager: Initialized DbManager instance
        hasher: Password hasher used for the seeded accounts
        data_template: Dict mapping "patients" / "appointments" to template dicts
        records: Number of patients to generate
        start_index: Starting index for record generation
        export_csv: Whether to export generated patients to CSV
        csv_dir: Directory to save CSV files

    Returns:
        Dict mapping table names to the number of rows created
    """
    patients = PatientCreate.seed_records(data_template["patients"], records, start_index)
    if export_csv:
        write_records_to_csv(str(Path(csv_dir) / "patients.csv"), patients)

    counts = {"patients": len(await _create_patients(db_manager, hasher, patients))}

    appointment_template: Optional[dict] = data_template.get("appointments")
    if appointment_template:
        counts["appointments"] = await _create_appointments(
            db_manager, appointment_template, patients
        )

    logger.info("Database seeded", **counts)
    return counts


async def seed_from_csv(
    db_manager: DbManager, hasher: PasswordHasher, filename: str, password: str
) -> int:
    """Register every patient in a CSV previously written by seed_db."""
    records = read_records_from_csv(filename, password)
    created = len(await _create_patients(db_manager, hasher, records))
    logger.info("Patients imported from CSV", filename=filename, patients=created)
    return created


__all__ = [
    "seed_db",
    "seed_from_csv",
    "write_records_to_csv",
    "read_records_from_csv",
]
