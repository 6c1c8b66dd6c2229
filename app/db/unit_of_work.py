# app/db/unit_of_work.py
"""
Transactional unit of work handed to every service operation.

One UnitOfWork wraps one AsyncSession, i.e. one database transaction.
Services run all statements of an operation through it; whoever opened it
(DbManager.unit_of_work() or the request dependency) commits on success
and rolls back on any exception.
"""

from typing import Any, Optional, Sequence
from sqlalchemy.sql.base import Executable
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from common.api_error import DatabaseError, NotFoundError


class UnitOfWork:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def execute(self, statement: Executable) -> int:
        """Run a write statement; returns rows affected."""
        result = await self.session.execute(statement)
        return result.rowcount  # type: ignore[attr-defined]

    async def query_one(
        self, statement: Executable, not_found: str = "Resource not found"
    ) -> Any:
        """First row of the result, or NotFoundError."""
        row = await self.query_optional(statement)
        if row is None:
            raise NotFoundError(not_found)
        return row

    async def query_optional(self, statement: Executable) -> Optional[Any]:
        """
        First row of the result or None.

        Single-entity selects yield the entity, multi-column selects the Row.
        """
        result = await self.session.execute(statement)
        row = result.first()
        if row is None:
            return None
        return row[0] if len(row) == 1 else row

    async def query_many(self, statement: Executable) -> Sequence[Any]:
        result = await self.session.execute(statement)
        rows = result.all()
        return [row[0] if len(row) == 1 else row for row in rows]

    async def get(self, model: type, ident: Any) -> Optional[Any]:
        return await self.session.get(model, ident)

    def add(self, instance: Any) -> None:
        self.session.add(instance)

    async def flush(self) -> None:
        """Send pending writes so generated ids and constraint errors surface now."""
        await self.session.flush()

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(cause=str(e)) from e

    async def rollback(self) -> None:
        await self.session.rollback()


__all__ = ["UnitOfWork"]
