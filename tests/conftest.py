# tests/conftest.py
"""
Shared fixtures.

Test Tiers:
- tier1: Pure logic, no I/O (UID derivation, text, chunking, config)
         Run: pytest -m tier1
- tier2: Collaborators mocked or in-memory (pipeline, store, agent, CLI)
         Run: pytest -m "tier1 or tier2"

Feature markers:
- postgres: pgvector / PostgreSQL code paths (mocked connections)
"""

from __future__ import annotations

from typing import Dict, List

import pytest

from vacancy_rag.vector_db.memory import InMemoryVectorStore

from .fakes import FakeEmbedder

TIER1_MODULES = (
    "test_uid_deriver",
    "test_uid_annotator",
    "test_text",
    "test_units",
    "test_hashing",
    "test_config",
    "test_credentials",
    "test_csv_reader",
)


def pytest_collection_modifyitems(items):
    """Mark tests tier1 or tier2 by module unless already marked."""
    for item in items:
        if any(item.get_closest_marker(m) for m in ("tier1", "tier2")):
            continue
        module = item.module.__name__.rsplit(".", 1)[-1]
        if module in TIER1_MODULES:
            item.add_marker(pytest.mark.tier1)
        else:
            item.add_marker(pytest.mark.tier2)


UNITS_CSV = (
    "Property Name,Unit,Status,Rent\n"
    "S0002 - 101 Maple,D2,Vacant,1200\n"
    "S0020 - Oak Plaza,1N,Occupied,950\n"
    "S0020 - Oak Plaza,  1 S ,Vacant,975\n"
)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def units_csv(tmp_path):
    """Three-row CSV with one whitespace-padded unit label."""
    path = tmp_path / "units.csv"
    path.write_text(UNITS_CSV, encoding="utf-8")
    return path


@pytest.fixture
def sample_rows() -> List[Dict[str, str]]:
    return [
        {"Property Name": "S0002 - 101 Maple", "Unit": "D2", "Status": "Vacant", "Rent": "1200"},
        {"Property Name": "S0020 - Oak Plaza", "Unit": "1N", "Status": "Occupied", "Rent": "950"},
        {"Property Name": "S0020 - Oak Plaza", "Unit": "1 S", "Status": "Vacant", "Rent": "975"},
    ]
