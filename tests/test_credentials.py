# tests/test_credentials.py
"""Tests for API key resolution."""

from __future__ import annotations

import pytest

from vacancy_rag.core.exceptions import ConfigurationError
from vacancy_rag.llm.credentials import CredentialError, resolve_api_key


class TestResolveApiKey:
    def test_explicit_key_wins(self):
        env = {"OPENAI_API_KEY": "env-key"}
        assert resolve_api_key(provider="openai", api_key="explicit", environ=env) == "explicit"

    def test_provider_env(self):
        env = {"OPENAI_API_KEY": "env-key"}
        assert resolve_api_key(provider="openai", environ=env) == "env-key"

    def test_generic_fallback(self):
        env = {"VACANCY_RAG_API_KEY": "generic"}
        assert resolve_api_key(provider="openai", environ=env) == "generic"

    def test_missing_key(self):
        with pytest.raises(CredentialError, match="OPENAI_API_KEY"):
            resolve_api_key(provider="openai", environ={})

    def test_is_a_configuration_error(self):
        assert issubclass(CredentialError, ConfigurationError)
