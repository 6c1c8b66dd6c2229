# app/db/deps.py
from fastapi import Request
from typing import AsyncGenerator
from .db_manager import DbManager
from .unit_of_work import UnitOfWork

# Note: No import from main.py here!


def get_db_manager(request: Request) -> DbManager:
    """
    The DbManager created during lifespan, pulled from app.state so several
    app instances (and tests) can each carry their own.
    """
    manager = getattr(request.app.state, "db_manager", None)
    if not manager:
        raise RuntimeError(
            "DbManager not found in app.state. Ensure lifespan is configured."
        )
    return manager


async def get_uow(request: Request) -> AsyncGenerator[UnitOfWork, None]:
    """
    One unit of work per request.

    Routes commit explicitly before building the response; anything still
    pending is committed here, and any exception rolls the transaction back.
    """
    async with get_db_manager(request).unit_of_work() as uow:
        yield uow


__all__ = ["get_uow", "get_db_manager"]
