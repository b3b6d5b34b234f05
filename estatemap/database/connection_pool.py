"""Database connection pooling for the property store"""

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
from typing import Optional
import structlog
import threading

from estatemap.config.settings import settings

logger = structlog.get_logger(__name__)

class DatabasePool:
    """Thread-safe connection pool for PostgreSQL"""

    def __init__(self, dsn: Optional[str] = None,
                 min_connections: Optional[int] = None,
                 max_connections: Optional[int] = None):
        self.db_url = dsn or settings.DATABASE_URL
        self.min_connections = min_connections or settings.DB_MIN_CONNECTIONS
        self.max_connections = max_connections or settings.DB_MAX_CONNECTIONS

        try:
            self._pool = psycopg2.pool.ThreadedConnectionPool(
                minconn=self.min_connections,
                maxconn=self.max_connections,
                dsn=self.db_url,
                cursor_factory=RealDictCursor
            )
            logger.info("Database connection pool created",
                        min_connections=self.min_connections,
                        max_connections=self.max_connections)
        except psycopg2.Error as e:
            logger.error("Failed to create connection pool", error=str(e))
            raise

    @contextmanager
    def get_connection(self):
        """Get a connection from the pool"""
        conn = None
        try:
            conn = self._pool.getconn()
            yield conn
            conn.commit()
        except Exception as e:
            if conn:
                conn.rollback()
            logger.error("Database error", error=str(e))
            raise
        finally:
            if conn:
                self._pool.putconn(conn)

    @contextmanager
    def get_cursor(self):
        """Get a cursor with automatic connection management"""
        with self.get_connection() as conn:
            cursor = conn.cursor(cursor_factory=RealDictCursor)
            try:
                yield cursor
            finally:
                cursor.close()

    def execute_query(self, query: str, params: tuple = None) -> list:
        """Execute a query and return results"""
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            return cursor.fetchall()

    def execute_one(self, query: str, params: tuple = None) -> Optional[dict]:
        """Execute a query and return single result"""
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            return cursor.fetchone()

    def close_all(self):
        """Close all connections in the pool"""
        self._pool.closeall()
        logger.info("All database connections closed")

    def get_pool_status(self) -> dict:
        """Get current pool status"""
        return {
            'min_connections': self._pool.minconn,
            'max_connections': self._pool.maxconn,
            'closed': self._pool.closed
        }

# Global pool instance, created on first use
_db_pool: Optional[DatabasePool] = None
_lock = threading.Lock()

def get_db_pool() -> DatabasePool:
    """Get or create the shared pool"""
    global _db_pool
    if _db_pool is None:
        with _lock:
            if _db_pool is None:
                _db_pool = DatabasePool()
    return _db_pool

def close_db_pool() -> None:
    """Close and forget the shared pool"""
    global _db_pool
    with _lock:
        if _db_pool is not None:
            _db_pool.close_all()
            _db_pool = None

# Convenience functions
def execute_query(query: str, params: tuple = None) -> list:
    """Execute a query using the pool"""
    return get_db_pool().execute_query(query, params)

def execute_one(query: str, params: tuple = None) -> Optional[dict]:
    """Execute a query and return one result using the pool"""
    return get_db_pool().execute_one(query, params)
