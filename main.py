# main.py
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from datetime import datetime
from pydantic import BaseModel, Field
from dotenv import load_dotenv
from common.config import initialize_config, get_config, is_configured, Environment
from common.logger import get_app_logger
from common.logger.logger_middleware import RequestLoggingMiddleware
from common.api_error import ConfigurationError, AppError
from typing import Any, Optional
from app.api.v1 import routers
from app.core import PasswordHasher
from app.db import DbManager
from app.reference import load_thai_divisions
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse

load_dotenv()
try:
    initialize_config()
except ConfigurationError as e:
    # Can't use logger yet, but that's OK - this is a fatal startup error
    print(f"FATAL: Configuration error:\n{e}")
    import sys

    sys.exit(1)

config = get_config()
logger = get_app_logger(name=__name__, track_timing=True)

app_title = config.app_title
app_version = config.app_version


@asynccontextmanager
async def lifespan(app: FastAPI):
    _db_config = config.database
    if not _db_config:
        raise RuntimeError("Database configuration required")

    logger.info("Database configuration", **_db_config.to_dict_safe())

    db_manager = DbManager.from_config(_db_config)
    await db_manager.verify_connection()

    # Ensure migrations are up-to-date (fail fast if not)
    try:
        await db_manager.verify_migrations_current()
        logger.info("All migrations applied")
    except RuntimeError as e:
        logger.error("Migration check failed", error=str(e))
        logger.error("Run 'alembic upgrade head'")
        raise

    app.state.db_manager = db_manager
    app.state.password_hasher = PasswordHasher(
        rounds=config.security.password_hash_rounds
    )
    app.state.thai_divisions = load_thai_divisions(config.reference.thai_divisions_path)

    yield
    logger.info("shutting down")
    await db_manager.dispose()


app = FastAPI(
    title=app_title,
    version=app_version,
    description=f"Running in {config.environment} environment",
    lifespan=lifespan,
)
app.add_middleware(
    RequestLoggingMiddleware,
    expose_performance_headers=config.environment.lower()
    != Environment.PRODUCTION.value.lower(),
    slow_query_threshold=(
        config.database.slow_query_threshold if config.database else 500.0
    ),
)
for router in routers:
    app.include_router(router)


def _error_body(code: str, message: str, cause: Optional[str] = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": code, "message": message}
    if cause is not None:
        body["cause"] = cause
    body["timestamp"] = datetime.now().isoformat()
    return body


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Domain Error: {exc.code}",
        path=request.url.path,
        error_code=exc.code,
        message=exc.message,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.message, exc.cause),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        field = ".".join(str(x) for x in error["loc"] if x != "body")
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])

    logger.warning("Validation failed", path=request.url.path, errors=len(messages))
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_FAILURE", "; ".join(messages)),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.critical(
        "Unhandled error", path=request.url.path, error=str(exc), exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content=_error_body("INTERNAL_FAILURE", "Internal Server Error", str(exc)),
    )


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Current system health status")
    timestamp: datetime = Field(..., description="Server time in ISO 8601 format")
    version: str = Field(..., description="Application version")
    logging_configured: bool = Field(..., description="Logging configuration status")
    log_level: str = Field(..., description="Application log level")
    database: dict[str, Any] = Field(..., description="Database probe result")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error message describing the failure")
    timestamp: datetime = Field(..., description="Server time when the error occurred")


@app.get(
    "/health",
    response_model=HealthCheckResponse,
    responses={
        200: {"description": "System is healthy", "model": HealthCheckResponse},
        503: {"description": "System is unhealthy", "model": ErrorResponse},
    },
)
async def check_health(request: Request) -> HealthCheckResponse:
    db_manager: Optional[DbManager] = getattr(request.app.state, "db_manager", None)
    database = (
        await db_manager.health_check()
        if db_manager
        else {"healthy": False, "error": "not initialized"}
    )

    if not database["healthy"]:
        logger.error("Health check failed", endpoint="/health", **database)
        err = ErrorResponse(
            error=f"database unavailable: {database.get('error')}",
            timestamp=datetime.now(),
        )
        raise HTTPException(status_code=503, detail=err.model_dump(mode="json"))

    logger.info("Health check passed", version=app_version, endpoint="/health")
    return HealthCheckResponse(
        status="Healthy",
        timestamp=datetime.now(),
        version=app_version,
        logging_configured=is_configured(),
        log_level=get_config().logging.level_value,
        database=database,
    )


@app.get("/metrics")
async def metrics(request: Request) -> dict[str, Any]:
    """Logger overhead and connection pool state."""
    db_manager: Optional[DbManager] = getattr(request.app.state, "db_manager", None)
    return {
        "logger": logger.get_timing_stats(),
        "database": (
            {
                **db_manager.get_config_snapshot(),
                "pool_status": db_manager.engine.pool.status(),
            }
            if db_manager
            else None
        ),
    }


__all__ = ["app", "config"]
