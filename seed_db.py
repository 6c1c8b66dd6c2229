# seed_db.py
"""
Database Seeding Script
=======================

Command-line utilities to fill a migrated database with demo patients.
Records go through the service layer, so each patient gets a login account
and health metrics just like a real registration.

It supports two modes:
- `patients`: Generate patients (plus an evaluation and an appointment each),
  with optional CSV export.
- `csv`: Register the patients listed in a CSV previously exported by `patients`.

Usage:
    python seed_db.py patients --records 50 --export-csv --csv-dir data/seed
    python seed_db.py csv --file data/seed/patients.csv --password password123

Requirements:
    - A valid database configuration (via environment variables or .env).
    - `alembic upgrade head` already applied.
"""

import sys
import argparse
import asyncio
from typing import Optional
from scripts.db import seed_db, seed_from_csv, DEFAULT_DATA_TEMPLATE
from app.core import PasswordHasher
from app.db import DbManager
from common.config import AppConfig, DatabaseConfig, initialize_config
from common.api_error import ConfigurationError
from dotenv import load_dotenv


def get_db_config() -> tuple[AppConfig, DatabaseConfig]:
    """
    Load and validate database configuration.

    Raises:
        SystemExit: If configuration cannot be loaded.
    """
    try:
        config = initialize_config()
    except ConfigurationError as e:
        print(f"FATAL: Configuration error:\n{e}")
        sys.exit(1)

    if config.database is None:
        print("FATAL: Database configuration required (set DB_HOST and friends)")
        sys.exit(1)
    return config, config.database


async def run_seed_patients(
    config: AppConfig,
    records: int,
    export_csv: bool,
    csv_dir: str,
) -> None:
    """
    Example:
        >>> asyncio.run(run_seed_patients(config, records=20, export_csv=True, csv_dir="data/test"))
    """
    db_manager = DbManager.from_config(config.database)
    try:
        await db_manager.verify_connection()
        await db_manager.verify_migrations_current()
        counts = await seed_db(
            db_manager=db_manager,
            hasher=PasswordHasher(rounds=config.security.password_hash_rounds),
            data_template=DEFAULT_DATA_TEMPLATE,
            records=records,
            export_csv=export_csv,
            csv_dir=csv_dir,
        )
        print(f"Seeded: {counts}")
    finally:
        await db_manager.dispose()


async def run_seed_csv(config: AppConfig, filename: str, password: str) -> None:
    db_manager = DbManager.from_config(config.database)
    try:
        await db_manager.verify_connection()
        await db_manager.verify_migrations_current()
        created = await seed_from_csv(
            db_manager,
            PasswordHasher(rounds=config.security.password_hash_rounds),
            filename,
            password,
        )
        print(f"Imported {created} patients from {filename}")
    finally:
        await db_manager.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed the patient database")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    patients_parser = subparsers.add_parser(
        "patients", help="Generate demo patients and appointments"
    )
    patients_parser.add_argument(
        "--records",
        type=int,
        required=True,
        help="Number of patients to insert (REQUIRED)",
    )
    patients_parser.add_argument(
        "--export-csv", action="store_true", help="Export seeded patients to CSV"
    )
    patients_parser.add_argument(
        "--csv-dir", type=str, default="data/seed", help="Directory to export CSV files"
    )

    csv_parser = subparsers.add_parser("csv", help="Register patients from a CSV file")
    csv_parser.add_argument("--file", type=str, required=True, help="CSV to import")
    csv_parser.add_argument(
        "--password",
        type=str,
        required=True,
        help="Initial password for every imported patient",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config, _ = get_db_config()

    if args.mode == "patients":
        asyncio.run(
            run_seed_patients(config, args.records, args.export_csv, args.csv_dir)
        )
    elif args.mode == "csv":
        asyncio.run(run_seed_csv(config, args.file, args.password))


if __name__ == "__main__":
    load_dotenv()
    main()
