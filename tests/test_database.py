from unittest.mock import MagicMock

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.dialects import sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from chat_service.database import dialect_insert
from chat_service.models.db.user_model import UserModel


async def test_database_connection(test_db: AsyncSession) -> None:
    """Test that we can connect to the database."""
    result = await test_db.execute(text("SELECT 1"))
    assert result.scalar() == 1


async def test_database_tables_exist(test_engine: AsyncEngine) -> None:
    """Test that required tables exist."""
    async with test_engine.connect() as conn:
        tables = await conn.run_sync(
            lambda sync_conn: set(inspect(sync_conn).get_table_names())
        )

    assert {
        "users",
        "conversations",
        "conversation_members",
        "messages",
        "message_read_receipts",
    } <= tables


async def test_foreign_keys_enforced(test_db: AsyncSession) -> None:
    result = await test_db.execute(text("PRAGMA foreign_keys"))
    assert result.scalar() == 1


async def test_dialect_insert_matches_session(test_db: AsyncSession) -> None:
    statement = dialect_insert(test_db, UserModel.__table__)
    assert isinstance(statement, sqlite.Insert)


def test_dialect_insert_rejects_unsupported_store() -> None:
    session = MagicMock()
    session.get_bind.return_value.dialect.name = "mysql"

    with pytest.raises(ValueError, match="mysql"):
        dialect_insert(session, UserModel.__table__)
