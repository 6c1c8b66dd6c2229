"""Tests for DbManager connection bookkeeping."""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

pytestmark = pytest.mark.anyio


class TestStatementTiming:
    async def test_failed_statement_leaves_no_start_time(self, db_manager):
        async with db_manager.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            for _ in range(3):
                with pytest.raises(OperationalError):
                    await conn.execute(text("SELECT * FROM no_such_table"))

            assert conn.info.get("query_start_time") == []

    async def test_health_check(self, db_manager):
        health = await db_manager.health_check()
        assert health["healthy"] is True
