# vacancy_rag/llm/credentials.py
"""
Centralized credential resolution for LLM providers.

Rules:
- Clients must NOT read environment variables directly.
- Resolution order:
  1. Explicit config value
  2. Provider-specific env var
  3. Generic fallback env var
- Fail with actionable errors.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from vacancy_rag.core.exceptions import ConfigurationError
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import CHAT

logger = get_logger(__name__)

# Universal fallback (lowest priority)
GENERIC_API_KEY_ENV = "VACANCY_RAG_API_KEY"

PROVIDER_ENV_MAP: dict[str, list[str]] = {
    "openai": ["OPENAI_API_KEY"],
}


class CredentialError(ConfigurationError):
    """Raised when credentials cannot be resolved."""

    pass


def resolve_api_key(
    *,
    provider: str,
    api_key: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Resolve the API key for a provider.

    Args:
        provider: Logical provider name (e.g. "openai")
        api_key: Explicit key from settings; wins when set
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved API key

    Raises:
        CredentialError: If no API key could be resolved
    """
    if api_key:
        logger.debug(f"{CHAT} Using API key from explicit config for provider '{provider}'")
        return api_key

    env = os.environ if environ is None else environ

    env_vars = PROVIDER_ENV_MAP.get(provider, [])
    for env_name in env_vars:
        value = env.get(env_name)
        if value:
            logger.debug(f"{CHAT} Using API key from env '{env_name}' for provider '{provider}'")
            return value

    fallback = env.get(GENERIC_API_KEY_ENV)
    if fallback:
        logger.debug(
            f"{CHAT} Using API key from env '{GENERIC_API_KEY_ENV}' for provider '{provider}'"
        )
        return fallback

    expected_str = ", ".join(env_vars + [GENERIC_API_KEY_ENV])
    raise CredentialError(
        f"API key for provider '{provider}' not found. "
        f"Set one of: {expected_str}, or provide 'api_key' in config."
    )


__all__ = ["CredentialError", "resolve_api_key", "GENERIC_API_KEY_ENV"]
