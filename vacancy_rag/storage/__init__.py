# vacancy_rag/storage/__init__.py
"""
PostgreSQL storage for vacancy_rag.

Usage:
    from vacancy_rag.storage import PostgresConnectionManager, StorageConfig

    manager = PostgresConnectionManager(StorageConfig(connection_string=url))
    manager.start()
    manager.ensure_schema()

    with manager.connection() as conn:
        conn.execute("SELECT count(*) FROM units_vacancy")
"""

from vacancy_rag.storage.config import StorageConfig
from vacancy_rag.storage.postgres import PostgresConnectionManager
from vacancy_rag.storage.schema import schema_statements

__all__ = [
    "StorageConfig",
    "PostgresConnectionManager",
    "schema_statements",
]
