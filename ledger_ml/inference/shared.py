"""Shared infrastructure for the classification service.

This module defines the long-lived resources that are built once at app
startup and shared across all requests: external service clients, the
session maker, the background job runner and the response cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ledger_ml.config.thresholds import ClassifierConfig

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from ledger_ml.config.settings import Settings
    from ledger_ml.inference.embedding import EmbeddingPort
    from ledger_ml.inference.vector_index import VectorIndexPort
    from ledger_ml.jobs import JobRunner
    from ledger_ml.storage import ResponseCache

logger = logging.getLogger(__name__)

SUGGESTED_RULES_CACHE = "suggested_rules"
ANALYTICS_CACHE = "analytics"


@dataclass
class SharedInfrastructure:
    """Resources shared across all requests (one instance per app lifespan).

    - embedder: embedding service client
    - vector_index: vector index client
    - session_maker: opens sessions for work outside a request session
    - jobs: background job runner
    - cache: TTL cache for expensive read endpoints
    """

    settings: Settings
    config: ClassifierConfig
    embedder: EmbeddingPort
    vector_index: VectorIndexPort
    session_maker: async_sessionmaker[AsyncSession]
    jobs: JobRunner
    cache: ResponseCache

    @classmethod
    def from_settings(cls, settings: Settings) -> SharedInfrastructure:
        """Build the production clients from settings."""
        from ledger_ml.inference.embedding import OllamaEmbeddingClient
        from ledger_ml.inference.vector_index import QdrantVectorIndex
        from ledger_ml.jobs import JobRunner
        from ledger_ml.storage import ResponseCache, get_session_maker

        return cls(
            settings=settings,
            config=ClassifierConfig.from_settings(settings),
            embedder=OllamaEmbeddingClient(
                base_url=settings.ollama_url,
                model=settings.embedding_model,
                timeout=settings.embedding_timeout,
                health_timeout=settings.health_timeout,
                retry_attempts=settings.retry_attempts,
                retry_base_delay=settings.retry_base_delay,
            ),
            vector_index=QdrantVectorIndex(
                url=settings.qdrant_url,
                api_key=settings.qdrant_api_key,
                timeout=settings.qdrant_timeout,
                vector_size=settings.vector_size,
                collection_prefix=settings.collection_prefix,
                retry_attempts=settings.retry_attempts,
                retry_base_delay=settings.retry_base_delay,
            ),
            session_maker=get_session_maker(),
            jobs=JobRunner(
                max_attempts=settings.retry_attempts,
                base_delay=settings.retry_base_delay,
            ),
            cache=ResponseCache(
                {
                    SUGGESTED_RULES_CACHE: settings.suggestions_cache_ttl,
                    ANALYTICS_CACHE: settings.analytics_cache_ttl,
                }
            ),
        )

    async def close(self) -> None:
        """Drain background jobs, then close the service clients."""
        await self.jobs.shutdown()
        await self.embedder.close()
        await self.vector_index.close()
        logger.info("Shared infrastructure closed")
