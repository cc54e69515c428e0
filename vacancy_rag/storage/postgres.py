# vacancy_rag/storage/postgres.py
"""
PostgreSQL connection management.

Handles:
- Connection pooling via psycopg_pool with health checks
- pgvector type registration on every pooled connection
- Schema creation (units + ingestion jobs tables)

One manager per runtime; there is no module-level instance.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator, Optional

from vacancy_rag.core.exceptions import ConfigurationError
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import STORAGE
from vacancy_rag.storage.config import StorageConfig
from vacancy_rag.storage.schema import CREATE_EXTENSION, schema_statements

if TYPE_CHECKING:
    from psycopg import Connection
    from psycopg_pool import ConnectionPool

logger = get_logger(__name__)


def _configure_connection(conn: "Connection") -> None:
    """Register pgvector adapters on a fresh pooled connection."""
    from pgvector.psycopg import register_vector

    register_vector(conn)


class PostgresConnectionManager:
    """
    Owns the connection pool for one PostgreSQL database.

    Usage:
        manager = PostgresConnectionManager(config)
        manager.start()

        with manager.connection() as conn:
            conn.execute("SELECT 1")

        manager.stop()
    """

    def __init__(self, config: StorageConfig):
        self.config = config
        self._pool: Optional["ConnectionPool"] = None
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._pool is not None

    def start(self) -> None:
        """
        Open the connection pool.

        Raises:
            ConfigurationError: If no connection string is configured.
        """
        with self._lock:
            if self._pool is not None:
                return

            if not self.config.connection_string:
                raise ConfigurationError(
                    "Database connection string is not set. "
                    "Set DATABASE_URL or storage.connection_string."
                )

            from psycopg_pool import ConnectionPool

            self._ensure_extension()

            # check= verifies connections before handing them out
            self._pool = ConnectionPool(
                self.config.connection_string,
                min_size=self.config.pool_min_size,
                max_size=self.config.pool_max_size,
                open=True,
                configure=_configure_connection,
                check=ConnectionPool.check_connection,
                timeout=self.config.pool_timeout,
            )
            logger.info(f"{STORAGE} Connection pool opened")

    def _ensure_extension(self) -> None:
        """
        Create the vector extension before the pool registers its types.

        Managed databases often pre-install it and deny CREATE EXTENSION,
        so a failure here is only a warning.
        """
        import psycopg

        try:
            with psycopg.connect(self.config.connection_string, autocommit=True) as conn:
                conn.execute(CREATE_EXTENSION)
        except psycopg.Error as e:
            logger.warning(f"{STORAGE} Could not create vector extension: {e}")

    @contextmanager
    def connection(self) -> Generator["Connection", None, None]:
        """
        Borrow a connection from the pool.

        The transaction is committed when the block exits normally and
        rolled back when it raises.
        """
        if self._pool is None:
            self.start()

        with self._pool.connection() as conn:
            yield conn

    def ensure_schema(self) -> None:
        """Create tables, indexes and the updated_at trigger if missing."""
        with self.connection() as conn:
            for statement in schema_statements(self.config):
                conn.execute(statement)
            conn.commit()

        logger.info(
            f"{STORAGE} Schema ready "
            f"(units={self.config.units_table}, jobs={self.config.jobs_table})"
        )

    def is_healthy(self) -> tuple[bool, str]:
        """
        Check if the database answers.

        Returns:
            Tuple of (is_healthy, message)
        """
        try:
            with self.connection() as conn:
                conn.execute("SELECT 1")
            return True, "PostgreSQL is healthy"
        except Exception as e:
            return False, f"Health check failed: {e}"

    def stop(self) -> None:
        """Close the pool. Safe to call more than once."""
        with self._lock:
            if self._pool is None:
                return
            try:
                self._pool.close()
                logger.debug(f"{STORAGE} Connection pool closed")
            except Exception as e:
                logger.warning(f"{STORAGE} Error closing pool: {e}")
            finally:
                self._pool = None


__all__ = ["PostgresConnectionManager"]
