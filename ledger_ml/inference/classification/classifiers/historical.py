from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from ledger_ml.config.thresholds import ClassifierConfig
from ledger_ml.data_models import FeedbackEntry, TargetKey
from ledger_ml.inference.classification.preprocessing import (
    extract_significant_tokens,
    normalize_description,
)
from ledger_ml.inference.classification.scoring import (
    amount_proximity,
    frequency_score,
    recency_score,
    to_confidence,
    trigram_similarity,
)
from ledger_ml.storage.filters import FeedbackFilter

from ..result import ClassificationMethod, StageMatch
from .base import Stage

if TYPE_CHECKING:
    from ..context import ClassificationContext

logger = logging.getLogger(__name__)

FREQUENCY_SATURATION = 10


@dataclass
class ScoredCandidate:
    entry: FeedbackEntry
    text_score: float
    amount_score: float
    recency_score: float
    frequency_score: float
    composite: float
    overlap: int = 0


class HistoricalMatcher(Stage):
    """Stage 2: reuse past corrections of similar descriptions.

    Three levels, first success wins:
    1. raw description trigram similarity
    2. normalized description trigram similarity (confidence capped)
    3. significant-token overlap (confidence capped)
    """

    name = "historical"

    def __init__(self, config: ClassifierConfig):
        self._config = config

    async def classify(self, ctx: ClassificationContext) -> StageMatch | None:
        since = ctx.now - timedelta(days=self._config.exact_window_days)
        pool = await ctx.repos.feedback.find(FeedbackFilter(since=since, with_amount=True))
        counts = await ctx.repos.feedback.count_by_target()

        match = self._original_level(ctx, pool, counts)
        if match is None:
            match = self._normalized_level(ctx, pool, counts)
        if match is None:
            match = await self._token_level(ctx, counts)

        if match is not None:
            logger.info(
                "Historical stage: %s match for %s (confidence=%d)",
                match.debug["match_type"],
                ctx.transaction.id,
                match.confidence,
            )
        return match

    def _score_exact(
        self,
        ctx: ClassificationContext,
        entry: FeedbackEntry,
        text_score: float,
        counts: dict[TargetKey, int],
    ) -> ScoredCandidate | None:
        amount = amount_proximity(entry.amount, ctx.amount)
        if amount < self._config.thresholds.amount_proximity_min:
            return None

        weights = self._config.exact
        recency = recency_score(entry.created_at, ctx.now, self._config.recency_horizon_days)
        frequency = frequency_score(counts.get(entry.target_key, 0), FREQUENCY_SATURATION)
        composite = (
            text_score * weights.text
            + amount * weights.amount
            + recency * weights.recency
            + frequency * weights.frequency
        )
        return ScoredCandidate(entry, text_score, amount, recency, frequency, composite)

    def _original_level(
        self,
        ctx: ClassificationContext,
        pool: list[FeedbackEntry],
        counts: dict[TargetKey, int],
    ) -> StageMatch | None:
        floor = self._config.thresholds.original_similarity_min
        scored = []
        for entry in pool:
            text = trigram_similarity(ctx.description_lower, entry.original_description.lower())
            if text <= floor:
                continue
            candidate = self._score_exact(ctx, entry, text, counts)
            if candidate is not None:
                scored.append(candidate)

        return self._accept(
            scored,
            cap=100,
            method=ClassificationMethod.EXACT,
            match_type="original_description",
        )

    def _normalized_level(
        self,
        ctx: ClassificationContext,
        pool: list[FeedbackEntry],
        counts: dict[TargetKey, int],
    ) -> StageMatch | None:
        if not ctx.normalized_description:
            return None

        floor = self._config.thresholds.normalized_similarity_min
        scored = []
        for entry in pool:
            normalized = normalize_description(entry.original_description)
            text = trigram_similarity(ctx.normalized_description, normalized)
            if text <= floor:
                continue
            candidate = self._score_exact(ctx, entry, text, counts)
            if candidate is not None:
                scored.append(candidate)

        return self._accept(
            scored,
            cap=self._config.thresholds.normalized_confidence_cap,
            method=ClassificationMethod.EXACT,
            match_type="normalized_description",
        )

    async def _token_level(
        self,
        ctx: ClassificationContext,
        counts: dict[TargetKey, int],
    ) -> StageMatch | None:
        tokens = extract_significant_tokens(ctx.transaction.description)
        if not tokens:
            return None

        since = ctx.now - timedelta(days=self._config.token_window_days)
        pool = await ctx.repos.feedback.find(
            FeedbackFilter(since=since, description_contains_any=tokens, with_amount=True)
        )

        # Frequency at this level ignores the detail
        subject_counts: dict[tuple[UUID, UUID], int] = defaultdict(int)
        for (category_id, subject_id, _), count in counts.items():
            subject_counts[(category_id, subject_id)] += count

        weights = self._config.token
        scored = []
        for entry in pool:
            description = entry.original_description.lower()
            overlap = sum(1 for token in tokens if token in description)
            if overlap == 0:
                continue
            amount = amount_proximity(entry.amount, ctx.amount)
            if amount < self._config.thresholds.amount_proximity_min:
                continue

            ratio = overlap / len(tokens)
            recency = recency_score(entry.created_at, ctx.now, self._config.recency_horizon_days)
            key = (entry.target.category_id, entry.target.subject_id)
            frequency = frequency_score(subject_counts.get(key, 0), FREQUENCY_SATURATION)
            composite = (
                ratio * weights.overlap
                + amount * weights.amount
                + recency * weights.recency
                + frequency * weights.frequency
            )
            scored.append(
                ScoredCandidate(entry, ratio, amount, recency, frequency, composite, overlap)
            )

        scored.sort(key=lambda c: (c.composite, c.overlap), reverse=True)
        match = self._accept(
            scored,
            cap=self._config.thresholds.token_confidence_cap,
            method=ClassificationMethod.FEEDBACK_LEARNING,
            match_type="token_overlap",
        )
        if match is not None:
            match.debug["matched_tokens"] = [
                t for t in tokens if t in scored[0].entry.original_description.lower()
            ]
            match.debug["token_count"] = len(tokens)
        return match

    def _accept(
        self,
        scored: list[ScoredCandidate],
        cap: int,
        method: ClassificationMethod,
        match_type: str,
    ) -> StageMatch | None:
        if not scored:
            return None

        best = max(scored, key=lambda c: c.composite)
        confidence = to_confidence(best.composite, cap=cap)
        if confidence < self._config.thresholds.exact_confidence_min:
            logger.debug("Historical %s: best confidence %d below gate", match_type, confidence)
            return None

        entry = best.entry
        if match_type == "token_overlap":
            reasoning = (
                f'Shares {best.overlap} keyword(s) with past classification of '
                f'"{entry.original_description}"'
            )
        else:
            reasoning = (
                f'Similar to past classification of "{entry.original_description}" '
                f"({best.text_score:.0%} text, {best.amount_score:.0%} amount)"
            )

        return StageMatch(
            target=entry.target,
            confidence=confidence,
            method=method,
            reasoning=reasoning,
            debug={
                "match_type": match_type,
                "matched_description": entry.original_description,
                "feedback_id": str(entry.id),
                "text_score": round(best.text_score, 4),
                "amount_score": round(best.amount_score, 4),
                "recency_score": round(best.recency_score, 4),
                "frequency_score": round(best.frequency_score, 4),
                "composite_score": round(best.composite, 4),
                "candidates_count": len(scored),
            },
        )
