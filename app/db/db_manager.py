# app/db/db_manager.py
"""
Database manager focused on connection management and transactions.
Schema migrations are handled separately via Alembic CLI.

Design principles:
- Single responsibility: Connection/transaction management only
- Fail fast: Invalid configuration crashes on startup
- Explicit over implicit: No magic auto-migrations
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Any, Optional, Union

from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
)

from common import DatabaseConfig, get_app_logger, request_timer_context_var
from .unit_of_work import UnitOfWork

logger = get_app_logger(__name__)


def _record_statement_start(conn, cursor, statement, parameters, context, executemany):
    conn.info.setdefault("query_start_time", []).append(time.perf_counter())


def _record_statement_end(conn, cursor, statement, parameters, context, executemany):
    started = conn.info["query_start_time"].pop(-1)
    timer = request_timer_context_var.get()
    if timer is not None:
        timer.add("sql", (time.perf_counter() - started) * 1000)
        timer.add("query_count", 1)


def _discard_statement_start(exception_context):
    # a failed statement never reaches after_cursor_execute
    conn = exception_context.connection
    if conn is None or exception_context.statement is None:
        return
    started = conn.info.get("query_start_time")
    if started:
        started.pop(-1)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DbManager:
    """
    Database connection and transaction manager.

    Usage:
        # Startup
        db_manager = DbManager.from_config(config.database)
        await db_manager.verify_connection()

        # Runtime
        async with db_manager.unit_of_work() as uow:
            await PatientService(uow, hasher).update_health(...)

        # Shutdown
        await db_manager.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        echo: bool = False,
        connect_args: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize database manager.

        Args:
            url: Database URL (postgresql+asyncpg://, postgresql+psycopg://
                or sqlite+aiosqlite:///path)
            pool_size: Number of persistent connections
            max_overflow: Additional connections beyond pool_size
            pool_timeout: Seconds to wait for connection from pool
            pool_recycle: Recycle connections after N seconds
            pool_pre_ping: Test connections before using
            echo: Log all SQL statements (use for debugging)
            connect_args: Driver-specific connection arguments (SSL, etc.)
        """
        self._validate_url(url)
        self.is_sqlite = url.startswith("sqlite")

        self._config: dict[str, Union[str, int]] = {
            "url": url,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
        }

        engine_kwargs: dict[str, Any] = {
            "echo": echo,
            "pool_pre_ping": pool_pre_ping,
            # keeps bound values (password hashes, id cards) out of errors and logs
            "hide_parameters": True,
            "connect_args": connect_args or {},
        }
        # in-memory SQLite runs on a static pool, which takes no sizing options
        if ":memory:" not in url:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self._install_listeners(self.engine.sync_engine)

        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        self._verified = False

        logger.info(
            "DbManager initialized",
            pool_size=pool_size,
            max_overflow=max_overflow,
            pre_ping=pool_pre_ping,
        )

    def _install_listeners(self, sync_engine: Engine) -> None:
        event.listen(sync_engine, "before_cursor_execute", _record_statement_start)
        event.listen(sync_engine, "after_cursor_execute", _record_statement_end)
        event.listen(sync_engine, "handle_error", _discard_statement_start)
        if self.is_sqlite:
            event.listen(sync_engine, "connect", _enable_sqlite_foreign_keys)

    @classmethod
    def from_config(
        cls,
        config: DatabaseConfig,
        *,
        ssl_cert_path: Optional[Path] = None,
        ssl_key_path: Optional[Path] = None,
        ssl_ca_path: Optional[Path] = None,
        **kwargs: Any,
    ) -> "DbManager":
        """
        Create DbManager from DatabaseConfig with SSL support.

        Example:
            db_manager = DbManager.from_config(config.database)
        """
        url = config.get_connection_url(include_password=True)
        connect_args = kwargs.pop("connect_args", {})

        final_ssl_mode = config.ssl_mode.value if config.ssl_mode else None
        final_ssl_cert = ssl_cert_path or config.ssl_cert_path
        final_ssl_key = ssl_key_path or config.ssl_key_path
        final_ssl_ca = ssl_ca_path or config.ssl_ca_path

        if final_ssl_mode and config.driver.value == "asyncpg":
            import ssl as ssl_module

            if final_ssl_mode == "disable":
                connect_args["ssl"] = False
            elif final_ssl_mode in ["require", "verify-ca", "verify-full"]:
                ssl_context = ssl_module.create_default_context()
                if final_ssl_ca:
                    ssl_context.load_verify_locations(cafile=str(final_ssl_ca))
                if final_ssl_cert and final_ssl_key:
                    ssl_context.load_cert_chain(
                        certfile=str(final_ssl_cert),
                        keyfile=str(final_ssl_key),
                    )
                if final_ssl_mode == "require":
                    ssl_context.check_hostname = False
                    ssl_context.verify_mode = ssl_module.CERT_NONE
                connect_args["ssl"] = ssl_context

        return cls(
            url=url,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            connect_args=connect_args,
            **kwargs,
        )

    @staticmethod
    def _validate_url(url: str) -> None:
        if not url or not url.startswith(
            ("postgresql+asyncpg://", "postgresql+psycopg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "Invalid database URL. Expected postgresql+asyncpg://, "
                f"postgresql+psycopg:// or sqlite+aiosqlite://, got: {url[:20]}..."
            )

    async def verify_connection(self) -> None:
        """
        Verify database connection on startup.

        Raises:
            ConnectionError: If connection fails
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self._verified = True
            logger.info("Database connection verified")
        except Exception as e:
            logger.error("Database connection failed", error=str(e))
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    async def verify_migrations_current(self) -> str:
        """
        Check that Alembic has stamped the database.

        Returns:
            The current migration revision

        Raises:
            RuntimeError: If alembic_version table doesn't exist or is empty
        """
        if self.is_sqlite:
            exists_sql = (
                "SELECT COUNT(*) FROM sqlite_master "
                "WHERE type = 'table' AND name = 'alembic_version'"
            )
        else:
            exists_sql = (
                "SELECT COUNT(*) FROM information_schema.tables "
                "WHERE table_name = 'alembic_version'"
            )

        async with self.engine.connect() as conn:
            if not (await conn.execute(text(exists_sql))).scalar():
                raise RuntimeError(
                    "alembic_version table not found. "
                    "Have you run 'alembic upgrade head'?"
                )
            current_version = (
                await conn.execute(text("SELECT version_num FROM alembic_version"))
            ).scalar()

        if not current_version:
            raise RuntimeError("No migration applied. Run 'alembic upgrade head'.")
        logger.info("Current migration version", version=current_version)
        return current_version

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional database session.

        Commits on success, rolls back on exception, and charges the
        elapsed time to the request timer as "db".
        """
        timer = request_timer_context_var.get()
        start = time.perf_counter()
        session = self.session_maker()
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning("Session rolled back", error=str(e), error_type=type(e).__name__)
            raise
        finally:
            await session.close()
            if timer is not None:
                timer.add("db", (time.perf_counter() - start) * 1000)

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncGenerator[UnitOfWork, None]:
        """
        All-or-nothing execution of one business operation.

        Usage:
            async with db_manager.unit_of_work() as uow:
                patient_id = await PatientService(uow, hasher).create_patient(data)
        """
        async with self.session() as session:
            yield UnitOfWork(session)

    async def health_check(self) -> dict[str, Any]:
        """
        Connectivity probe with pool metrics.

        Example:
            {"healthy": True, "response_time_ms": 1.2, "pool_status": "..."}
        """
        start = time.perf_counter()
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            return {"healthy": False, "error": str(e)}

        return {
            "healthy": True,
            "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
            "pool_status": self.engine.pool.status(),
        }

    async def dispose(self) -> None:
        """Dispose of all connections. Call on application shutdown."""
        await self.engine.dispose()
        logger.info("Database connections disposed")

    def get_config_snapshot(self) -> dict[str, Any]:
        """Current configuration with the URL password masked."""
        snapshot = self._config.copy()
        snapshot["url"] = self.engine.url.render_as_string(hide_password=True)
        return snapshot


__all__ = ["DbManager"]
