"""Classification request/response models."""

from datetime import date
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from .common import TargetRef, TenantScoped

ClassificationMethod = Literal[
    "rule", "entity_match", "exact", "feedback_learning", "semantic", "manual"
]


class TransactionInput(BaseModel):
    """Transaction data for classification."""

    transaction_id: UUID
    description: str = Field(..., min_length=1)
    amount: Decimal
    date: date
    payment_type: str | None = None
    owner_id: str | None = None


class ClassifyRequest(TenantScoped):
    transaction: TransactionInput


class ClassifyBatchRequest(TenantScoped):
    transactions: list[TransactionInput] = Field(..., min_length=1, max_length=500)


class SimilarTransaction(BaseModel):
    transaction_id: str
    description: str
    amount: float | None = None
    transaction_date: str | None = None
    score: float


class Suggestion(BaseModel):
    """A ranked alternative (one cluster of similar transactions)."""

    classification: TargetRef
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str
    similar_transactions: list[SimilarTransaction] = []


class ClassificationResponse(BaseModel):
    """Result for one transaction. `needs_review` iff `classification` is null."""

    transaction_id: UUID
    success: bool = True
    classification: TargetRef | None = None
    confidence: int = Field(0, ge=0, le=100)
    method: ClassificationMethod = "manual"
    reasoning: str = ""
    needs_review: bool = True
    suggestions: list[Suggestion] = []
    similar_transactions: list[SimilarTransaction] = []
    debug: dict[str, Any] = {}
    latency_ms: int = Field(0, ge=0)
    error: str | None = None


class ClassificationStats(BaseModel):
    total: int
    by_method: dict[str, int]
    needs_review: int
    failed: int


class ClassifyBatchResponse(BaseModel):
    results: list[ClassificationResponse]
    stats: ClassificationStats
    processing_time_ms: int = Field(..., ge=0)
