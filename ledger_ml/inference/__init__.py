"""Classification engine and its collaborators.

Orchestrators and services (for the API layer):
- ClassificationOrchestrator: rule -> historical -> semantic -> entity -> manual
- IndexingService: vector indexing of classified transactions
- FeedbackService, RuleSuggestionAnalyzer: learning from corrections
- AnalyticsService: feedback analytics and stage metrics

Integrations:
- OllamaEmbeddingClient: embedding service
- QdrantVectorIndex: vector index
"""

from __future__ import annotations

from .classification import ClassificationOrchestrator, ClassificationResult
from .embedding import OllamaEmbeddingClient
from .feedback import FeedbackService, RuleSuggestionAnalyzer
from .health import HealthReport, check_health
from .indexing import IndexingService, IndexResult
from .metrics import AnalyticsService, MetricsRecorder
from .shared import SharedInfrastructure
from .vector_index import QdrantVectorIndex

__all__ = [
    # Orchestrators / services (API layer)
    "AnalyticsService",
    "ClassificationOrchestrator",
    "FeedbackService",
    "IndexingService",
    "RuleSuggestionAnalyzer",
    "SharedInfrastructure",
    "MetricsRecorder",
    # Types
    "ClassificationResult",
    "HealthReport",
    "IndexResult",
    # Integrations
    "OllamaEmbeddingClient",
    "QdrantVectorIndex",
    "check_health",
]
