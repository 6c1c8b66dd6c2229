"""
Alembic environment for the patient record schema.

The database URL comes from the same DatabaseConfig the application uses,
with the async driver swapped for its sync counterpart.
"""

import os
import sys
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url
from alembic import context
from dotenv import load_dotenv

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app.db.models import DbBaseModel
from common.api_error import ConfigurationError
from common.config import DatabaseConfig, initialize_config

# async driver -> driver Alembic can run synchronously
SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql+psycopg2",
    "postgresql+psycopg": "postgresql+psycopg",
    "sqlite+aiosqlite": "sqlite",
}

load_dotenv()
try:
    app_config = initialize_config()
except ConfigurationError as e:
    print(f"FATAL: Configuration error:\n{e}")
    sys.exit(1)

if app_config.database is None:
    print("FATAL: Database configuration not found in environment")
    sys.exit(1)

db_config: DatabaseConfig = app_config.database
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = DbBaseModel.metadata


def get_sync_url() -> str:
    url = make_url(db_config.get_connection_url(include_password=True))
    url = url.set(drivername=SYNC_DRIVERS[url.drivername])
    return url.render_as_string(hide_password=False)


def get_connect_args() -> dict:
    """libpq spelling of the application's SSL settings."""
    if db_config.driver.is_sqlite or not db_config.ssl_mode:
        return {}

    connect_args = {"sslmode": db_config.ssl_mode.value}
    if db_config.requires_ssl():
        for key, path in (
            ("sslrootcert", db_config.ssl_ca_path),
            ("sslcert", db_config.ssl_cert_path),
            ("sslkey", db_config.ssl_key_path),
        ):
            if path:
                connect_args[key] = str(path)
    return connect_args


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it."""
    context.configure(
        url=get_sync_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = get_sync_url()

    # NullPool: one short-lived connection per migration run
    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=get_connect_args(),
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            # SQLite cannot ALTER most constraints in place
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
