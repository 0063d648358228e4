from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ledger_ml.config.thresholds import ClassifierConfig
from ledger_ml.data_models import TargetKey
from ledger_ml.errors import DependencyUnavailableError
from ledger_ml.inference.classification.scoring import (
    amount_proximity,
    build_embedding_text,
    frequency_score,
    monthly_recency_score,
    to_confidence,
)

from ..result import (
    ClassificationMethod,
    SemanticOutcome,
    SimilarTransaction,
    StageMatch,
    Suggestion,
)

if TYPE_CHECKING:
    from ledger_ml.inference.embedding import EmbeddingPort
    from ledger_ml.inference.vector_index import VectorHit, VectorIndexPort

    from ..context import ClassificationContext

logger = logging.getLogger(__name__)

FREQUENCY_SATURATION = 20

CLUSTER_WEIGHT_AVG = 0.50
CLUSTER_WEIGHT_SIZE = 0.30
CLUSTER_WEIGHT_TOP = 0.20


@dataclass
class RankedHit:
    """A vector hit re-scored with amount, recency and frequency."""

    target_key: TargetKey
    transaction_id: str
    description: str
    amount: float | None
    transaction_date: str | None
    vector_score: float
    amount_score: float
    recency_score: float
    frequency_score: float
    composite: float

    def as_similar(self) -> SimilarTransaction:
        return SimilarTransaction(
            transaction_id=self.transaction_id,
            description=self.description,
            amount=self.amount,
            transaction_date=self.transaction_date,
            score=round(self.composite, 4),
        )


def _target_key(payload: dict[str, Any]) -> TargetKey:
    detail = payload.get("detail_id")
    return (
        UUID(str(payload["category_id"])),
        UUID(str(payload["subject_id"])),
        UUID(str(detail)) if detail else None,
    )


def _booking_date(value: Any) -> date | None:
    """Date part of a stored `transaction_date` (plain date or full timestamp)."""
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


class SemanticMatcher:
    """Stage 3: vector search over indexed transactions, clustered by target.

    Fails open: an unreachable embedding service or vector index yields an
    empty outcome instead of an error.
    """

    name = "semantic"

    def __init__(
        self,
        embedder: EmbeddingPort,
        vector_index: VectorIndexPort,
        config: ClassifierConfig,
    ):
        self._embedder = embedder
        self._index = vector_index
        self._config = config

    async def classify(self, ctx: ClassificationContext) -> SemanticOutcome:
        text = build_embedding_text(ctx.transaction.description, ctx.transaction.amount)
        try:
            vector = await self._embedder.embed(text)
            hits = await self._index.search(
                ctx.tenant,
                vector,
                limit=self._config.search_limit,
                score_threshold=self._config.thresholds.vector_similarity_min,
            )
        except DependencyUnavailableError as e:
            logger.warning("Semantic stage skipped for %s: %s", ctx.transaction.id, e)
            return SemanticOutcome()

        ranked = self._rank(ctx, hits)
        if not ranked:
            logger.debug("Semantic stage: no hits for %s", ctx.transaction.id)
            return SemanticOutcome(candidates_count=len(hits))

        clusters: dict[TargetKey, list[RankedHit]] = {}
        for hit in ranked:
            clusters.setdefault(hit.target_key, []).append(hit)

        targets = await ctx.repos.taxonomy.resolve_many(clusters.keys())
        suggestions: list[Suggestion] = []
        for key, members in clusters.items():
            target = targets.get(key)
            if target is None:
                logger.debug("Semantic stage: dropping cluster with stale target %s", key)
                continue
            suggestions.append(self._cluster_suggestion(target, members, len(ranked)))

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        outcome = SemanticOutcome(candidates_count=len(ranked), cluster_count=len(clusters))
        if not suggestions:
            return outcome

        limit = self._config.max_suggestions
        best = suggestions[0]
        if best.confidence < self._config.thresholds.semantic_confidence_min:
            logger.debug(
                "Semantic stage: best cluster %d below gate, %d suggestions",
                best.confidence,
                min(limit, len(suggestions)),
            )
            outcome.suggestions = suggestions[:limit]
            return outcome

        top = clusters[best.target.key][0]
        outcome.match = StageMatch(
            target=best.target,
            confidence=best.confidence,
            method=ClassificationMethod.SEMANTIC,
            reasoning=best.reasoning,
            similar_transactions=best.similar_transactions,
            debug={
                **best.debug,
                "vector_score": round(top.vector_score, 4),
                "amount_score": round(top.amount_score, 4),
                "recency_score": round(top.recency_score, 4),
                "frequency_score": round(top.frequency_score, 4),
                "candidates_count": len(ranked),
                "cluster_count": len(clusters),
            },
        )
        outcome.suggestions = suggestions[1:limit]
        logger.info(
            "Semantic stage: matched %s (confidence=%d, clusters=%d)",
            ctx.transaction.id,
            best.confidence,
            len(clusters),
        )
        return outcome

    def _rank(self, ctx: ClassificationContext, hits: list[VectorHit]) -> list[RankedHit]:
        weights = self._config.semantic
        ranked: list[RankedHit] = []
        for hit in hits:
            payload = hit.payload
            try:
                key = _target_key(payload)
            except (KeyError, ValueError):
                logger.debug("Semantic stage: skipping hit %s without a valid target", hit.id)
                continue

            amount = payload.get("amount")
            amount_score = amount_proximity(amount, ctx.amount) if amount is not None else 0.0
            booked = payload.get("transaction_date")
            booked_on = _booking_date(booked)
            recency = (
                monthly_recency_score(booked_on, ctx.now, self._config.semantic_recency_months)
                if booked_on
                else 0.0
            )
            frequency = frequency_score(
                int(payload.get("classification_frequency") or 0), FREQUENCY_SATURATION
            )
            composite = (
                hit.score * weights.vector
                + amount_score * weights.amount
                + recency * weights.recency
                + frequency * weights.frequency
            )
            ranked.append(
                RankedHit(
                    target_key=key,
                    transaction_id=str(payload.get("transaction_id", hit.id)),
                    description=payload.get("description", ""),
                    amount=float(amount) if amount is not None else None,
                    transaction_date=booked,
                    vector_score=hit.score,
                    amount_score=amount_score,
                    recency_score=recency,
                    frequency_score=frequency,
                    composite=composite,
                )
            )

        ranked.sort(key=lambda h: h.composite, reverse=True)
        return ranked

    def _cluster_suggestion(self, target, members: list[RankedHit], total: int) -> Suggestion:
        scores = [m.composite for m in members]
        avg = _mean(scores)
        top = max(scores)
        confidence = to_confidence(
            avg * CLUSTER_WEIGHT_AVG
            + (len(members) / total) * CLUSTER_WEIGHT_SIZE
            + top * CLUSTER_WEIGHT_TOP
        )
        return Suggestion(
            target=target,
            confidence=confidence,
            reasoning=(
                f"Cluster of {len(members)} similar transactions (avg score {avg:.0%})"
            ),
            similar_transactions=[
                m.as_similar() for m in members[: self._config.max_similar_transactions]
            ],
            debug={
                "cluster_size": len(members),
                "avg_score": round(avg, 4),
                "top_score": round(top, 4),
            },
        )
