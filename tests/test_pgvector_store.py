# tests/test_pgvector_store.py
"""
Unit tests for PgVectorStore.

The connection manager is mocked; these tests check the SQL sent and the
mapping of rows back to records.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, Mock

import numpy as np
import pytest

from vacancy_rag.vector_db.base import UnitRecord, VectorStore
from vacancy_rag.vector_db.pgvector import PgVectorStore

pytestmark = [pytest.mark.postgres, pytest.mark.tier2]

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def mock_connection():
    conn = MagicMock()
    cursor = MagicMock()
    conn.cursor.return_value.__enter__ = Mock(return_value=cursor)
    conn.cursor.return_value.__exit__ = Mock(return_value=False)
    return conn


@pytest.fixture
def mock_manager(mock_connection):
    manager = MagicMock()
    manager.config.units_table = "units_vacancy"
    manager.connection.return_value.__enter__ = Mock(return_value=mock_connection)
    manager.connection.return_value.__exit__ = Mock(return_value=False)
    return manager


@pytest.fixture
def pg_store(mock_manager):
    return PgVectorStore(mock_manager)


def _row(uid="S1_A", updated=T0):
    return (
        "0b6f1c7e-0000-0000-0000-000000000001",
        "Unit: A",
        np.array([0.1, 0.2], dtype=np.float32),
        {"UID": uid},
        "a.csv",
        0,
        uid,
        T0,
        updated,
    )


# =============================================================================
# Tests
# =============================================================================


class TestPgVectorStore:
    def test_satisfies_protocol(self, pg_store):
        assert isinstance(pg_store, VectorStore)
        assert pg_store.table == "units_vacancy"

    def test_insert(self, pg_store, mock_connection):
        mock_connection.execute.return_value.fetchone.return_value = ("new-id",)

        record_id = pg_store.insert(
            UnitRecord(
                content="Unit: A",
                embedding=[0.1, 0.2],
                metadata={"UID": "S1_A"},
                source="a.csv",
                chunk_index=3,
                uid="S1_A",
            )
        )

        sql, params = mock_connection.execute.call_args[0]
        assert record_id == "new-id"
        assert "INSERT INTO units_vacancy" in sql
        assert "RETURNING id" in sql
        assert isinstance(params[1], np.ndarray)
        assert params[1].dtype == np.float32
        assert params[2].obj == {"UID": "S1_A"}
        assert params[3:] == ("a.csv", 3, "S1_A")
        mock_connection.commit.assert_called_once()

    def test_insert_many(self, pg_store, mock_connection):
        records = [UnitRecord(content=f"u{i}", embedding=[1.0], source="a.csv") for i in range(3)]

        assert pg_store.insert_many(records) == 3

        cursor = mock_connection.cursor.return_value.__enter__.return_value
        sql, rows = cursor.executemany.call_args[0]
        assert "INSERT INTO units_vacancy" in sql
        assert len(rows) == 3

    def test_insert_many_empty(self, pg_store, mock_manager):
        assert pg_store.insert_many([]) == 0
        mock_manager.connection.assert_not_called()

    def test_update_sets_updated_at(self, pg_store, mock_connection):
        pg_store.update("rid", content="x", embedding=[1.0], metadata={}, uid="S1_A")

        sql, params = mock_connection.execute.call_args[0]
        assert "updated_at = NOW()" in sql
        assert params[-1] == "rid"
        assert params[-2] == "S1_A"

    def test_find_by_uid_orders_oldest_first(self, pg_store, mock_connection):
        mock_connection.execute.return_value.fetchall.return_value = [
            _row(updated=T0 + timedelta(seconds=5))
        ]

        units = pg_store.find_by_uid("a.csv", "S1_A")

        sql, params = mock_connection.execute.call_args[0]
        assert "ORDER BY created_at, id" in sql
        assert params == ("a.csv", "S1_A")
        assert units[0].uid == "S1_A"
        assert units[0].embedding == pytest.approx([0.1, 0.2])
        assert units[0].was_updated

    def test_delete_by_source(self, pg_store, mock_connection):
        mock_connection.execute.return_value.rowcount = 4

        assert pg_store.delete_by_source("a.csv") == 4
        sql, params = mock_connection.execute.call_args[0]
        assert sql.startswith("DELETE FROM units_vacancy")
        assert params == ("a.csv",)


class TestPgVectorSearch:
    def test_search_without_source(self, pg_store, mock_connection):
        mock_connection.execute.return_value.fetchall.return_value = [
            ("id-1", "Unit: A", {"UID": "S1_A"}, "a.csv", 0.91),
        ]

        hits = pg_store.search([1.0, 0.0], limit=5, threshold=0.7)

        sql, params = mock_connection.execute.call_args[0]
        assert "1 - (embedding <=> %s) > %s" in sql
        assert "AND source" not in sql
        assert params[2] == 0.7
        assert params[-1] == 5
        assert hits[0].similarity == pytest.approx(0.91)
        assert hits[0].metadata == {"UID": "S1_A"}

    def test_search_with_source_filters_in_query(self, pg_store, mock_connection):
        mock_connection.execute.return_value.fetchall.return_value = []

        pg_store.search([1.0, 0.0], limit=5, threshold=0.7, source="a.csv")

        sql, params = mock_connection.execute.call_args[0]
        assert "AND source = %s" in sql
        assert params[3] == "a.csv"
        assert params[-1] == 5


class TestPgVectorCounts:
    def test_count(self, pg_store, mock_connection):
        mock_connection.execute.return_value.fetchone.return_value = (7,)
        assert pg_store.count() == 7
        assert pg_store.count("a.csv") == 7

    def test_list_sources(self, pg_store, mock_connection):
        mock_connection.execute.return_value.fetchall.return_value = [("a.csv",), ("b.csv",)]
        assert pg_store.list_sources() == ["a.csv", "b.csv"]

    def test_fetch_all(self, pg_store, mock_connection):
        mock_connection.execute.return_value.fetchall.return_value = [_row(), _row(uid=None)]

        units = pg_store.fetch_all("a.csv")

        assert [u.uid for u in units] == ["S1_A", None]
        assert not units[0].was_updated
