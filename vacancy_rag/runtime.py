# vacancy_rag/runtime.py
"""
Explicit wiring of vacancy_rag components.

Every collaborator (store, embedder, job tracker, upsert engine) is built
here from AppSettings and passed down; nothing lives in module globals.
Missing configuration fails here, before any row is touched.

Usage:
    from vacancy_rag.config import load_settings
    from vacancy_rag.runtime import build_runtime

    runtime = build_runtime(load_settings())
    try:
        runtime.pipeline.ingest_file("units.csv")
        print(runtime.agent().run("Which units are vacant?").answer)
    finally:
        runtime.close()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from vacancy_rag.agent.agent import RetrievalAgent
from vacancy_rag.config.schema import AppSettings
from vacancy_rag.core.exceptions import ConfigurationError
from vacancy_rag.ingestion.jobs import (
    InMemoryJobRepository,
    JobTracker,
    NullJobTracker,
    PostgresJobRepository,
    RepositoryJobTracker,
)
from vacancy_rag.ingestion.pipeline import IngestionPipeline
from vacancy_rag.ingestion.upsert import UpsertEngine
from vacancy_rag.llm.chat import ChatClient, OpenAIChatClient
from vacancy_rag.llm.embedding import Embedder, OpenAIEmbeddingClient
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.retrieval.retriever import Retriever
from vacancy_rag.storage.postgres import PostgresConnectionManager
from vacancy_rag.vector_db.base import VectorStore
from vacancy_rag.vector_db.memory import InMemoryVectorStore

logger = get_logger(__name__)

BACKEND_POSTGRES = "postgres"
BACKEND_MEMORY = "memory"
BACKENDS = (BACKEND_POSTGRES, BACKEND_MEMORY)


@dataclass
class Runtime:
    """Wired components for one process."""

    settings: AppSettings
    store: VectorStore
    embedder: Embedder
    job_tracker: JobTracker
    engine: UpsertEngine
    pipeline: IngestionPipeline
    manager: Optional[PostgresConnectionManager] = None
    chat_client: Optional[ChatClient] = None
    _agent: Optional[RetrievalAgent] = field(default=None, repr=False)

    def retriever(self) -> Retriever:
        r = self.settings.retrieval
        return Retriever(
            self.store,
            self.embedder,
            top_k=r.top_k,
            similarity_threshold=r.similarity_threshold,
        )

    def agent(self) -> RetrievalAgent:
        """The retrieval agent; the chat client is created on first use."""
        if self._agent is None:
            if self.chat_client is None:
                c = self.settings.chat
                self.chat_client = OpenAIChatClient(
                    api_key=c.api_key,
                    model=c.model,
                    temperature=c.temperature,
                    max_tokens=c.max_tokens,
                    base_url=c.base_url,
                    timeout=c.timeout,
                )
            self._agent = RetrievalAgent(
                self.chat_client,
                self.retriever(),
                uid_column=self.settings.columns.uid_column,
            )
        return self._agent

    def close(self) -> None:
        if self.manager is not None:
            self.manager.stop()


def build_embedder(settings: AppSettings) -> Embedder:
    e = settings.embedding
    return OpenAIEmbeddingClient(
        api_key=e.api_key,
        model=e.model,
        base_url=e.base_url,
        max_retries=e.max_retries,
        timeout=e.timeout,
    )


def build_runtime(
    settings: AppSettings,
    backend: str = BACKEND_POSTGRES,
    embedder: Optional[Embedder] = None,
    chat_client: Optional[ChatClient] = None,
    track_jobs: bool = True,
) -> Runtime:
    """
    Build a Runtime from settings.

    Args:
        settings: Validated settings
        backend: "postgres" (pgvector) or "memory" (process-local)
        embedder: Override the OpenAI embedder (tests, other providers)
        chat_client: Override the OpenAI chat client
        track_jobs: Record ingestion jobs

    Raises:
        ConfigurationError: Unknown backend, missing database URL or
            missing API key
    """
    if backend not in BACKENDS:
        raise ConfigurationError(f"Unknown backend {backend!r}; expected one of {BACKENDS}")

    if embedder is None:
        embedder = build_embedder(settings)

    manager: Optional[PostgresConnectionManager] = None
    if backend == BACKEND_POSTGRES:
        if not settings.storage.connection_string:
            raise ConfigurationError(
                "Database connection string is not set. "
                "Set DATABASE_URL or storage.connection_string."
            )
        from vacancy_rag.vector_db.pgvector import PgVectorStore

        manager = PostgresConnectionManager(settings.storage)
        store: VectorStore = PgVectorStore(manager)
        repository = PostgresJobRepository(manager)
    else:
        store = InMemoryVectorStore()
        repository = InMemoryJobRepository()

    job_tracker: JobTracker = RepositoryJobTracker(repository) if track_jobs else NullJobTracker()

    i = settings.ingest
    engine = UpsertEngine(
        store,
        max_workers=i.max_workers,
        batch_size=i.upsert_batch_size,
        max_retries=i.max_retries,
        retry_backoff=i.retry_backoff,
    )
    pipeline = IngestionPipeline(
        store,
        embedder,
        job_tracker=job_tracker,
        engine=engine,
        settings=i,
        columns=settings.columns,
    )

    logger.debug(f"Runtime built (backend={backend}, track_jobs={track_jobs})")

    return Runtime(
        settings=settings,
        store=store,
        embedder=embedder,
        job_tracker=job_tracker,
        engine=engine,
        pipeline=pipeline,
        manager=manager,
        chat_client=chat_client,
    )


__all__ = ["Runtime", "build_runtime", "build_embedder", "BACKENDS"]
