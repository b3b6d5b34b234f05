"""Tests for the PostgreSQL connection pool wrapper."""

import pytest
from unittest.mock import MagicMock, patch

from estatemap.database import connection_pool
from estatemap.database.connection_pool import DatabasePool


@pytest.fixture
def pg_pool():
    with patch("estatemap.database.connection_pool.psycopg2.pool.ThreadedConnectionPool") as factory:
        raw_pool = MagicMock()
        raw_pool.minconn = 1
        raw_pool.maxconn = 4
        raw_pool.closed = False
        factory.return_value = raw_pool
        yield factory, raw_pool


@pytest.mark.unit
def test_pool_uses_configured_dsn(pg_pool):
    factory, _ = pg_pool
    DatabasePool(dsn="postgresql://u@db/estate", min_connections=1, max_connections=4)

    kwargs = factory.call_args.kwargs
    assert kwargs["dsn"] == "postgresql://u@db/estate"
    assert kwargs["minconn"] == 1
    assert kwargs["maxconn"] == 4


@pytest.mark.unit
def test_execute_query_commits_and_returns_rows(pg_pool):
    _, raw_pool = pg_pool
    conn = raw_pool.getconn.return_value
    cursor = conn.cursor.return_value
    cursor.fetchall.return_value = [{"id": 1}]

    rows = DatabasePool(dsn="postgresql://db").execute_query("SELECT 1", (1,))

    assert rows == [{"id": 1}]
    cursor.execute.assert_called_once_with("SELECT 1", (1,))
    conn.commit.assert_called_once()
    cursor.close.assert_called_once()
    raw_pool.putconn.assert_called_once_with(conn)


@pytest.mark.unit
def test_error_rolls_back_and_returns_connection(pg_pool):
    _, raw_pool = pg_pool
    conn = raw_pool.getconn.return_value
    conn.cursor.return_value.execute.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        DatabasePool(dsn="postgresql://db").execute_one("SELECT 1")

    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()
    raw_pool.putconn.assert_called_once_with(conn)


@pytest.mark.unit
def test_pool_status(pg_pool):
    status = DatabasePool(dsn="postgresql://db").get_pool_status()
    assert status == {"min_connections": 1, "max_connections": 4, "closed": False}


@pytest.mark.unit
def test_shared_pool_is_created_once(pg_pool):
    factory, raw_pool = pg_pool
    connection_pool.close_db_pool()
    try:
        first = connection_pool.get_db_pool()
        second = connection_pool.get_db_pool()
        assert first is second
        assert factory.call_count == 1
    finally:
        connection_pool.close_db_pool()
    raw_pool.closeall.assert_called_once()
