"""Tests for the asyncpg query executor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from todos import db


class FakeAcquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


def make_pool(records, status):
    prepared = MagicMock()
    prepared.fetch = AsyncMock(return_value=records)
    prepared.get_statusmsg.return_value = status
    conn = MagicMock()
    conn.prepare = AsyncMock(return_value=prepared)
    pool = MagicMock()
    pool.acquire.return_value = FakeAcquire(conn)
    return pool, conn, prepared


@pytest.fixture
def no_pool(monkeypatch):
    monkeypatch.setattr(db, "_pool", None)


class TestParseRowCount:
    def test_command_tags(self):
        assert db.parse_row_count("UPDATE 3") == 3
        assert db.parse_row_count("INSERT 0 1") == 1
        assert db.parse_row_count("DELETE 0") == 0
        assert db.parse_row_count("SELECT 12") == 12

    def test_missing_or_odd_status(self):
        assert db.parse_row_count(None) == 0
        assert db.parse_row_count("") == 0
        assert db.parse_row_count("CREATE TABLE") == 0


class TestDbQuery:
    @pytest.mark.asyncio
    async def test_requires_pool(self, no_pool):
        assert db.is_enabled() is False
        with pytest.raises(RuntimeError, match="not initialized"):
            await db.db_query("SELECT 1")

    @pytest.mark.asyncio
    async def test_returns_rows_and_row_count(self, monkeypatch):
        pool, conn, prepared = make_pool([{"id": 1, "title": "Work"}], "SELECT 1")
        monkeypatch.setattr(db, "_pool", pool)

        result = await db.db_query("SELECT id, title FROM todolists WHERE username = $1", "admin")

        assert result.rows == [{"id": 1, "title": "Work"}]
        assert result.row_count == 1
        conn.prepare.assert_awaited_once_with("SELECT id, title FROM todolists WHERE username = $1")
        prepared.fetch.assert_awaited_once_with("admin")

    @pytest.mark.asyncio
    async def test_write_statement_reports_affected_rows(self, monkeypatch):
        pool, _, _ = make_pool([], "UPDATE 2")
        monkeypatch.setattr(db, "_pool", pool)

        result = await db.db_query("UPDATE todos SET done = TRUE WHERE todolist_id = $1", 4)

        assert result.rows == []
        assert result.row_count == 2

    @pytest.mark.asyncio
    async def test_errors_are_logged_and_reraised(self, monkeypatch, caplog):
        pool, _, prepared = make_pool([], None)
        prepared.fetch.side_effect = RuntimeError("connection lost")
        monkeypatch.setattr(db, "_pool", pool)

        with pytest.raises(RuntimeError, match="connection lost"):
            await db.db_query("DELETE FROM todos WHERE id = $1", 5)
        assert "Database query failed" in caplog.text


class TestPoolLifecycle:
    @pytest.mark.asyncio
    async def test_init_and_close(self, monkeypatch, no_pool):
        pool = MagicMock()
        pool.close = AsyncMock()
        create_pool = AsyncMock(return_value=pool)
        monkeypatch.setattr(db.asyncpg, "create_pool", create_pool)

        await db.init_db("postgresql://localhost/todos", min_size=2, max_size=4)
        await db.init_db("postgresql://localhost/todos")
        assert db.is_enabled() is True
        create_pool.assert_awaited_once_with(dsn="postgresql://localhost/todos", min_size=2, max_size=4)

        await db.close_db()
        assert db.is_enabled() is False
        pool.close.assert_awaited_once()
