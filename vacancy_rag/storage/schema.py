# vacancy_rag/storage/schema.py
"""
DDL for the units and ingestion-jobs tables.

The units table keeps the Supabase layout the CSV pipeline has always
written to: a nullable uid column (not unique; uniqueness per source is
enforced by the upsert engine), created/updated timestamps with a trigger
refreshing updated_at, and an ivfflat cosine index on the embedding.
"""

from __future__ import annotations

from typing import List

from vacancy_rag.storage.config import StorageConfig

CREATE_EXTENSION = "CREATE EXTENSION IF NOT EXISTS vector"

CREATE_UNITS_TABLE = """
    CREATE TABLE IF NOT EXISTS {table} (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        content TEXT NOT NULL,
        embedding VECTOR({dim}),
        metadata JSONB,
        source TEXT,
        chunk_index INTEGER,
        uid TEXT,
        created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
        updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
    )
"""

CREATE_UNITS_INDEXES = [
    """
    CREATE INDEX IF NOT EXISTS {table}_embedding_idx
    ON {table} USING ivfflat (embedding vector_cosine_ops)
    WITH (lists = 100)
    """,
    "CREATE INDEX IF NOT EXISTS {table}_metadata_idx ON {table} USING gin (metadata)",
    "CREATE INDEX IF NOT EXISTS {table}_source_idx ON {table} (source)",
    "CREATE INDEX IF NOT EXISTS {table}_uid_idx ON {table} (uid)",
    "CREATE INDEX IF NOT EXISTS {table}_source_uid_idx ON {table} (source, uid)",
]

CREATE_UPDATED_AT_FUNCTION = """
    CREATE OR REPLACE FUNCTION update_updated_at_column()
    RETURNS TRIGGER AS $$
    BEGIN
        NEW.updated_at = NOW();
        RETURN NEW;
    END;
    $$ LANGUAGE plpgsql
"""

DROP_UPDATED_AT_TRIGGER = "DROP TRIGGER IF EXISTS {table}_updated_at ON {table}"

CREATE_UPDATED_AT_TRIGGER = """
    CREATE TRIGGER {table}_updated_at
    BEFORE UPDATE ON {table}
    FOR EACH ROW
    EXECUTE FUNCTION update_updated_at_column()
"""

CREATE_JOBS_TABLE = """
    CREATE TABLE IF NOT EXISTS {table} (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        file_name TEXT NOT NULL,
        status TEXT NOT NULL
            CHECK (status IN ('pending', 'processing', 'completed', 'failed')),
        total_chunks INTEGER,
        processed_chunks INTEGER DEFAULT 0,
        error_message TEXT,
        file_hash TEXT,
        started_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
        completed_at TIMESTAMP WITH TIME ZONE
    )
"""

CREATE_JOBS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS {table}_file_hash_idx ON {table} (file_hash)",
]


def schema_statements(config: StorageConfig) -> List[str]:
    """
    Return the ordered DDL statements for a storage configuration.

    Every statement is idempotent, so the list can be replayed against an
    existing database.
    """
    units = config.units_table
    jobs = config.jobs_table

    statements = [CREATE_EXTENSION]
    statements.append(CREATE_UNITS_TABLE.format(table=units, dim=config.embedding_dimension))
    statements.extend(sql.format(table=units) for sql in CREATE_UNITS_INDEXES)
    statements.append(CREATE_UPDATED_AT_FUNCTION)
    statements.append(DROP_UPDATED_AT_TRIGGER.format(table=units))
    statements.append(CREATE_UPDATED_AT_TRIGGER.format(table=units))
    statements.append(CREATE_JOBS_TABLE.format(table=jobs))
    statements.extend(sql.format(table=jobs) for sql in CREATE_JOBS_INDEXES)
    return statements


__all__ = ["schema_statements"]
