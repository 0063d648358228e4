"""Immutable classifier configuration: stage gates and scoring weights."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .settings import Settings


@dataclass(frozen=True)
class Thresholds:
    """Confidence gates (0-100) and similarity floors (0-1)."""

    rule_confidence_min: int = 95
    exact_confidence_min: int = 85
    semantic_confidence_min: int = 70
    entity_confidence_min: int = 80
    vector_similarity_min: float = 0.82
    amount_proximity_min: float = 0.70
    original_similarity_min: float = 0.85
    normalized_similarity_min: float = 0.70
    normalized_confidence_cap: int = 92
    token_confidence_cap: int = 88


@dataclass(frozen=True)
class ExactWeights:
    """Historical original / normalized level composite weights."""

    text: float = 0.50
    amount: float = 0.30
    recency: float = 0.10
    frequency: float = 0.10


@dataclass(frozen=True)
class TokenWeights:
    """Historical token-overlap level composite weights."""

    overlap: float = 0.40
    amount: float = 0.35
    recency: float = 0.15
    frequency: float = 0.10


@dataclass(frozen=True)
class SemanticWeights:
    """Vector hit re-ranking weights."""

    vector: float = 0.40
    amount: float = 0.30
    recency: float = 0.15
    frequency: float = 0.15


@dataclass(frozen=True)
class ClassifierConfig:
    """Everything the stages need to score and gate, fixed at construction."""

    thresholds: Thresholds = field(default_factory=Thresholds)
    exact: ExactWeights = field(default_factory=ExactWeights)
    token: TokenWeights = field(default_factory=TokenWeights)
    semantic: SemanticWeights = field(default_factory=SemanticWeights)

    # Candidate windows
    exact_window_days: int = 180
    token_window_days: int = 365
    entity_window_days: int = 365
    recency_horizon_days: int = 180
    semantic_recency_months: int = 12

    # Vector search
    search_limit: int = 12
    max_suggestions: int = 3
    max_similar_transactions: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> ClassifierConfig:
        return cls(
            thresholds=Thresholds(
                rule_confidence_min=settings.rule_confidence_min,
                exact_confidence_min=settings.exact_confidence_min,
                semantic_confidence_min=settings.semantic_confidence_min,
                entity_confidence_min=settings.entity_confidence_min,
                vector_similarity_min=settings.vector_similarity_min,
                amount_proximity_min=settings.amount_proximity_min,
                original_similarity_min=settings.original_similarity_min,
                normalized_similarity_min=settings.normalized_similarity_min,
                normalized_confidence_cap=settings.normalized_confidence_cap,
                token_confidence_cap=settings.token_confidence_cap,
            ),
            exact=ExactWeights(
                text=settings.exact_weight_text,
                amount=settings.exact_weight_amount,
                recency=settings.exact_weight_recency,
                frequency=settings.exact_weight_frequency,
            ),
            semantic=SemanticWeights(
                vector=settings.semantic_weight_vector,
                amount=settings.semantic_weight_amount,
                recency=settings.semantic_weight_recency,
                frequency=settings.semantic_weight_frequency,
            ),
        )
