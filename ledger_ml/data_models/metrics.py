"""Classification metrics domain model."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ClassificationMetric(BaseModel):
    """Outcome of one classification that reached a result."""

    transaction_id: UUID
    stage_used: str
    confidence: float
    latency_ms: int
    vector_score: float | None = None
    amount_score: float | None = None
    recency_score: float | None = None
    frequency_score: float | None = None
    candidates_count: int | None = None
    cluster_count: int | None = None
    created_at: datetime | None = None
