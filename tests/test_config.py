# tests/test_config.py
"""Tests for settings loading and environment overrides."""

from __future__ import annotations

import pytest

from vacancy_rag.config.schema import AppSettings, IngestSettings, load_settings
from vacancy_rag.core.config import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    load_yaml,
)


class TestLoadYaml:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigNotFoundError):
            load_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("ingest: [unclosed")
        with pytest.raises(ConfigParseError):
            load_yaml(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigParseError, match="mapping"):
            load_yaml(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml(path) == {}


class TestLoadSettings:
    def test_defaults_without_file_or_env(self):
        settings = load_settings(environ={})

        assert settings == AppSettings()
        assert settings.columns.property_column == "Property Name"
        assert settings.ingest.clear_existing is False
        assert settings.retrieval.top_k == 5
        assert settings.retrieval.similarity_threshold == 0.7
        assert settings.storage.connection_string is None

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "columns:\n"
            "  unit_column: Apt\n"
            "ingest:\n"
            "  max_workers: 8\n"
            "  clear_existing: true\n"
            "retrieval:\n"
            "  top_k: 3\n"
        )
        settings = load_settings(path, environ={})

        assert settings.columns.unit_column == "Apt"
        assert settings.ingest.max_workers == 8
        assert settings.ingest.clear_existing is True
        assert settings.retrieval.top_k == 3

    def test_env_overrides_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("retrieval:\n  top_k: 3\n")
        env = {
            "TOP_K_RESULTS": "9",
            "SIMILARITY_THRESHOLD": "0.5",
            "DATABASE_URL": "postgresql://localhost/db",
            "EMAIL_PORT": "143",
        }
        settings = load_settings(path, environ=env)

        assert settings.retrieval.top_k == 9
        assert settings.retrieval.similarity_threshold == 0.5
        assert settings.storage.connection_string == "postgresql://localhost/db"
        assert settings.email.port == 143

    def test_database_url_wins_over_supabase_url(self):
        settings = load_settings(
            environ={"DATABASE_URL": "postgresql://a/db", "SUPABASE_DB_URL": "postgresql://b/db"}
        )
        assert settings.storage.connection_string == "postgresql://a/db"

    def test_supabase_url_is_accepted(self):
        settings = load_settings(environ={"SUPABASE_DB_URL": "postgresql://b/db"})
        assert settings.storage.connection_string == "postgresql://b/db"

    def test_config_path_from_env(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("chat:\n  model: gpt-4o\n")

        settings = load_settings(environ={"VACANCY_RAG_CONFIG": str(path)})

        assert settings.chat.model == "gpt-4o"

    def test_unknown_keys_are_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("ingest:\n  batch: 5\n")
        with pytest.raises(ConfigValidationError):
            load_settings(path, environ={})

    def test_invalid_env_value(self):
        with pytest.raises(ConfigValidationError):
            load_settings(environ={"TOP_K_RESULTS": "many"})


class TestIngestSettings:
    def test_overlap_must_be_smaller_than_chunk(self):
        with pytest.raises(ValueError):
            IngestSettings(chunk_size=100, chunk_overlap=100)

    def test_embed_batch_size_bounds(self):
        with pytest.raises(ValueError):
            IngestSettings(embed_batch_size=101)


class TestEmailSettings:
    def test_has_credentials(self):
        assert not AppSettings().email.has_credentials()
        settings = load_settings(environ={"EMAIL_USER": "u", "EMAIL_PASSWORD": "p"})
        assert settings.email.has_credentials()
