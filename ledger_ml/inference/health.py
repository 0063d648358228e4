"""Dependency health checks and capability flags."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ledger_ml.inference.embedding import EmbeddingPort, ServiceStatus
    from ledger_ml.inference.vector_index import VectorIndexPort


@dataclass
class HealthReport:
    embedding_service: ServiceStatus
    vector_index: ServiceStatus

    @property
    def capabilities(self) -> dict[str, bool]:
        """Rule and exact matching only need the database."""
        semantic = self.embedding_service.healthy and self.vector_index.healthy
        return {
            "rule_based": True,
            "exact_match": True,
            "semantic_search": semantic,
            "indexing": semantic,
        }

    @property
    def overall_status(self) -> str:
        return "healthy" if all(self.capabilities.values()) else "degraded"


async def check_health(embedder: EmbeddingPort, vector_index: VectorIndexPort) -> HealthReport:
    embedding, index = await asyncio.gather(embedder.health_check(), vector_index.health_check())
    return HealthReport(embedding_service=embedding, vector_index=index)
