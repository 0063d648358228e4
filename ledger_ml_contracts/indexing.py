"""Vector indexing request/response models."""

from uuid import UUID

from pydantic import BaseModel, Field

from .common import TenantScoped


class IndexTransactionRequest(TenantScoped):
    transaction_id: UUID


class IndexBatchRequest(TenantScoped):
    # Upper bound is enforced by the service so the error names the limit
    transaction_ids: list[UUID] = Field(default_factory=list)


class ReindexRequest(TenantScoped):
    limit: int | None = Field(None, ge=1)


class IndexResponse(BaseModel):
    indexed_count: int
    skipped_count: int
    collection: str | None = None
    latency_ms: int
    avg_latency_per_transaction_ms: float = 0.0
