"""Classification result structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import UUID

from ledger_ml.data_models import Target


class ClassificationMethod(str, Enum):
    """Stage that produced a classification."""

    RULE = "rule"
    ENTITY_MATCH = "entity_match"
    EXACT = "exact"
    FEEDBACK_LEARNING = "feedback_learning"
    SEMANTIC = "semantic"
    MANUAL = "manual"


@dataclass
class SimilarTransaction:
    """An indexed transaction close to the one being classified."""

    transaction_id: str
    description: str
    amount: float | None
    transaction_date: str | None
    score: float


@dataclass
class Suggestion:
    """A ranked alternative target (one semantic cluster)."""

    target: Target
    confidence: int
    reasoning: str
    similar_transactions: list[SimilarTransaction] = field(default_factory=list)
    debug: dict[str, Any] = field(default_factory=dict)


@dataclass
class StageMatch:
    """A stage's accepted decision."""

    target: Target
    confidence: int
    method: ClassificationMethod
    reasoning: str
    debug: dict[str, Any] = field(default_factory=dict)
    similar_transactions: list[SimilarTransaction] = field(default_factory=list)


@dataclass
class SemanticOutcome:
    """Semantic stage output: an optional match plus ranked suggestions."""

    match: StageMatch | None = None
    suggestions: list[Suggestion] = field(default_factory=list)
    candidates_count: int = 0
    cluster_count: int = 0


@dataclass
class ClassificationResult:
    """Final output from the classification cascade.

    `needs_review` is True exactly when `classification` is None.
    """

    transaction_id: UUID
    success: bool = True
    classification: Target | None = None
    confidence: int = 0
    method: ClassificationMethod = ClassificationMethod.MANUAL
    reasoning: str = ""
    debug: dict[str, Any] = field(default_factory=dict)
    suggestions: list[Suggestion] = field(default_factory=list)
    similar_transactions: list[SimilarTransaction] = field(default_factory=list)
    latency_ms: int = 0
    error: str | None = None

    @property
    def needs_review(self) -> bool:
        return self.classification is None

    @classmethod
    def from_match(
        cls,
        transaction_id: UUID,
        match: StageMatch,
        latency_ms: int,
        suggestions: list[Suggestion] | None = None,
    ) -> ClassificationResult:
        return cls(
            transaction_id=transaction_id,
            classification=match.target,
            confidence=max(0, min(100, match.confidence)),
            method=match.method,
            reasoning=match.reasoning,
            debug=match.debug,
            suggestions=suggestions or [],
            similar_transactions=match.similar_transactions,
            latency_ms=latency_ms,
        )

    @classmethod
    def manual(
        cls,
        transaction_id: UUID,
        latency_ms: int,
        suggestions: list[Suggestion] | None = None,
    ) -> ClassificationResult:
        suggestions = suggestions or []
        reasoning = (
            "No confident match, review suggested classifications"
            if suggestions
            else "No match found, manual classification required"
        )
        return cls(
            transaction_id=transaction_id,
            reasoning=reasoning,
            suggestions=suggestions,
            latency_ms=latency_ms,
        )

    @classmethod
    def failed(cls, transaction_id: UUID, error: str, latency_ms: int) -> ClassificationResult:
        return cls(
            transaction_id=transaction_id,
            success=False,
            reasoning="Classification failed",
            latency_ms=latency_ms,
            error=error,
        )
