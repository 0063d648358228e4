from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ledger_ml.errors import TransactionNotFoundError
from ledger_ml.inference.classification.scoring import (
    NEAR_ZERO_PROXIMITY,
    amount_proximity,
    trigram_similarity,
)
from ledger_ml.storage import RepositoryFactory

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ledger_ml.data_models import FeedbackEntry, NewFeedback
    from ledger_ml.inference.indexing import IndexingService
    from ledger_ml.inference.shared import SharedInfrastructure

logger = logging.getLogger(__name__)

LEARNING_SIMILARITY_MIN = 0.3

# Best match: text similarity prefilter, then a weighted text + amount score
BEST_MATCH_SIMILARITY_MIN = 0.5
BEST_MATCH_SCORE_MIN = 0.6
BEST_MATCH_TEXT_WEIGHT = 0.7
BEST_MATCH_AMOUNT_WEIGHT = 0.3
BEST_MATCH_METHOD = "feedback_learning_v2"


@dataclass
class FeedbackOutcome:
    stored: bool
    feedback_id: UUID | None = None
    reason: str | None = None
    reindex_scheduled: bool = False


@dataclass
class BestMatch:
    """The single past correction closest to a description and amount."""

    entry: FeedbackEntry
    text_similarity: float
    amount_proximity: float
    score: float
    method: str = BEST_MATCH_METHOD

    @property
    def confidence(self) -> int:
        return round(self.score * 100)


class FeedbackService:
    """Stores user corrections and keeps the vector index in step with them."""

    def __init__(
        self,
        infra: SharedInfrastructure,
        indexing: IndexingService,
        repository_factory: Callable[[AsyncSession, str], RepositoryFactory] = RepositoryFactory,
    ):
        self._infra = infra
        self._indexing = indexing
        self._repository_factory = repository_factory

    async def record(
        self,
        session: AsyncSession,
        tenant: str,
        feedback: NewFeedback,
    ) -> FeedbackOutcome:
        """Store a correction; a confirmed suggestion carries no information."""
        if not feedback.is_correction:
            logger.debug("Feedback for %s not stored: no correction", feedback.transaction_id)
            return FeedbackOutcome(stored=False, reason="no correction")

        repos = self._repository_factory(session, tenant)
        feedback_id = await repos.feedback.add(feedback)
        logger.info(
            "Stored feedback %s for transaction %s (method=%s)",
            feedback_id,
            feedback.transaction_id,
            feedback.suggestion_method,
        )

        task = self._infra.jobs.submit(
            f"reindex:{tenant}:{feedback.transaction_id}",
            lambda: self._reindex(tenant, feedback.transaction_id),
        )
        return FeedbackOutcome(
            stored=True,
            feedback_id=feedback_id,
            reindex_scheduled=task is not None,
        )

    async def _reindex(self, tenant: str, transaction_id: UUID) -> None:
        async with self._infra.session_maker() as session:
            try:
                await self._indexing.index_transaction(session, tenant, transaction_id)
            except TransactionNotFoundError:
                logger.info(
                    "Transaction %s not indexable yet, skipping re-index", transaction_id
                )

    async def stats(self, session: AsyncSession, tenant: str) -> dict[str, Any]:
        repos = self._repository_factory(session, tenant)
        return await repos.feedback.stats()

    async def learning_data(
        self,
        session: AsyncSession,
        tenant: str,
        description: str,
        limit: int = 10,
    ) -> list[tuple[FeedbackEntry, float]]:
        """Past feedback with descriptions similar to `description`, best first."""
        repos = self._repository_factory(session, tenant)
        entries = await repos.feedback.find()

        lowered = description.lower()
        scored = []
        for entry in entries:
            similarity = trigram_similarity(lowered, entry.original_description.lower())
            if similarity > LEARNING_SIMILARITY_MIN:
                scored.append((entry, similarity))

        # entries arrive newest first, and the sort is stable
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[:limit]

    async def find_best_match(
        self,
        session: AsyncSession,
        tenant: str,
        description: str,
        amount: Decimal | None = None,
    ) -> BestMatch | None:
        """Best past correction by text similarity (70%) and amount proximity (30%).

        Only feedback with similarity above 0.5 is considered, and the winner
        must score at least 0.6. A missing amount on either side counts as 0.5.
        """
        repos = self._repository_factory(session, tenant)
        entries = await repos.feedback.find()

        best: BestMatch | None = None
        for entry in entries:
            similarity = trigram_similarity(description, entry.original_description)
            if similarity <= BEST_MATCH_SIMILARITY_MIN:
                continue
            proximity = (
                amount_proximity(entry.amount, amount)
                if entry.amount is not None and amount is not None
                else NEAR_ZERO_PROXIMITY
            )
            score = similarity * BEST_MATCH_TEXT_WEIGHT + proximity * BEST_MATCH_AMOUNT_WEIGHT
            if score < BEST_MATCH_SCORE_MIN:
                continue
            # newest first: ties keep the most recent correction
            if best is None or score > best.score:
                best = BestMatch(entry, similarity, proximity, score)

        if best is not None:
            logger.debug(
                "Best feedback match for %r: %s (score=%.3f)",
                description,
                best.entry.id,
                best.score,
            )
        return best
