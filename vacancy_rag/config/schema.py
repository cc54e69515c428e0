# vacancy_rag/config/schema.py
"""
Application settings.

Settings come from an optional YAML file and are then overridden by
environment variables, so a deployment can run on env vars alone.

Usage:
    from vacancy_rag.config import load_settings

    settings = load_settings()                 # env only (+ VACANCY_RAG_CONFIG)
    settings = load_settings("config.yaml")    # YAML, then env overrides
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from vacancy_rag.core.config import load_yaml, validate_config
from vacancy_rag.storage.config import StorageConfig

CONFIG_ENV_VAR = "VACANCY_RAG_CONFIG"


class ColumnSettings(BaseModel):
    """Column names used to derive UIDs."""

    model_config = ConfigDict(extra="forbid")

    property_column: str = Field(default="Property Name", min_length=1)
    unit_column: str = Field(default="Unit", min_length=1)
    uid_column: str = Field(default="UID", min_length=1)


class IngestSettings(BaseModel):
    """Ingestion pipeline tuning."""

    model_config = ConfigDict(extra="forbid")

    embed_batch_size: int = Field(default=50, ge=1, le=100, description="Texts per embedding call")
    upsert_batch_size: int = Field(default=100, ge=1, description="Units per upsert batch")
    max_workers: int = Field(default=4, ge=1, le=32, description="In-flight writes per batch")
    max_retries: int = Field(default=0, ge=0, le=10, description="Per-unit write retries")
    retry_backoff: float = Field(default=0.5, ge=0.0, description="Base backoff in seconds")
    chunk_size: int = Field(default=1000, ge=1, description="Rebuild-mode chunk size")
    chunk_overlap: int = Field(default=200, ge=0, description="Rebuild-mode chunk overlap")
    clear_existing: bool = Field(
        default=False,
        description="Default ingestion mode: True = destroy-and-rebuild, False = UID upsert",
    )
    strict_uids: bool = Field(
        default=False,
        description="Reject derived UIDs that fail the UID validation pattern",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "IngestSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be < chunk_size ({self.chunk_size})"
            )
        return self


class EmbeddingSettings(BaseModel):
    """Embedding provider settings."""

    model_config = ConfigDict(extra="forbid")

    model: str = "text-embedding-3-small"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    max_retries: int = Field(default=2, ge=0)
    timeout: float = Field(default=30.0, gt=0)


class ChatSettings(BaseModel):
    """Chat completion settings for the retrieval agent."""

    model_config = ConfigDict(extra="forbid")

    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    timeout: float = Field(default=120.0, gt=0)


class RetrievalSettings(BaseModel):
    """Similarity search settings."""

    model_config = ConfigDict(extra="forbid")

    top_k: int = Field(default=5, ge=1, le=100)
    similarity_threshold: float = Field(default=0.7, ge=-1.0, le=1.0)


class EmailSettings(BaseModel):
    """IMAP polling settings."""

    model_config = ConfigDict(extra="forbid")

    host: str = "imap.gmail.com"
    port: int = Field(default=993, ge=1, le=65535)
    user: Optional[str] = None
    password: Optional[str] = None
    mailbox: str = "INBOX"
    from_address: Optional[str] = None
    subject_contains: Optional[str] = None
    max_emails: int = Field(default=50, ge=1)
    poll_interval_seconds: float = Field(default=300.0, gt=0)
    mark_seen: bool = True

    def has_credentials(self) -> bool:
        return bool(self.user and self.password)


class AppSettings(BaseModel):
    """Root settings model."""

    model_config = ConfigDict(extra="forbid")

    columns: ColumnSettings = Field(default_factory=ColumnSettings)
    ingest: IngestSettings = Field(default_factory=IngestSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    chat: ChatSettings = Field(default_factory=ChatSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    email: EmailSettings = Field(default_factory=EmailSettings)


# =============================================================================
# Environment overrides
# =============================================================================

# env var -> (section, key). First match wins for keys listed twice.
ENV_OVERRIDES: Dict[str, tuple[str, str]] = {
    "DATABASE_URL": ("storage", "connection_string"),
    "SUPABASE_DB_URL": ("storage", "connection_string"),
    "EMBEDDING_MODEL": ("embedding", "model"),
    "LLM_MODEL": ("chat", "model"),
    "LLM_TEMPERATURE": ("chat", "temperature"),
    "MAX_TOKENS": ("chat", "max_tokens"),
    "CHUNK_SIZE": ("ingest", "chunk_size"),
    "CHUNK_OVERLAP": ("ingest", "chunk_overlap"),
    "TOP_K_RESULTS": ("retrieval", "top_k"),
    "SIMILARITY_THRESHOLD": ("retrieval", "similarity_threshold"),
    "EMAIL_USER": ("email", "user"),
    "EMAIL_PASSWORD": ("email", "password"),
    "EMAIL_HOST": ("email", "host"),
    "EMAIL_PORT": ("email", "port"),
    "MAX_EMAILS_PER_CHECK": ("email", "max_emails"),
    "POLL_INTERVAL_SECONDS": ("email", "poll_interval_seconds"),
}


def apply_env_overrides(data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Overlay environment variables onto raw settings data.

    Values stay strings; Pydantic coerces them during validation.
    """
    merged = {section: dict(values) for section, values in data.items() if isinstance(values, dict)}
    merged.update({k: v for k, v in data.items() if not isinstance(v, dict)})

    applied: set[tuple[str, str]] = set()
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if not value or (section, key) in applied:
            continue
        merged.setdefault(section, {})[key] = value
        applied.add((section, key))

    return merged


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppSettings:
    """
    Load settings from YAML (optional) plus environment overrides.

    Args:
        path: YAML file. Defaults to $VACANCY_RAG_CONFIG when set.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated AppSettings

    Raises:
        ConfigNotFoundError: If an explicit path doesn't exist
        ConfigValidationError: If values don't match the schema
    """
    env = os.environ if environ is None else environ

    if path is None and env.get(CONFIG_ENV_VAR):
        path = env[CONFIG_ENV_VAR]

    data: Dict[str, Any] = load_yaml(path) if path is not None else {}
    data = apply_env_overrides(data, env)

    return validate_config(data, AppSettings, path=Path(path) if path is not None else None)


__all__ = [
    "AppSettings",
    "ColumnSettings",
    "IngestSettings",
    "EmbeddingSettings",
    "ChatSettings",
    "RetrievalSettings",
    "EmailSettings",
    "ENV_OVERRIDES",
    "apply_env_overrides",
    "load_settings",
]
