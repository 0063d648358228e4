from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from ledger_ml.config.thresholds import ClassifierConfig
from ledger_ml.data_models import FeedbackEntry, Target, TargetKey
from ledger_ml.inference.classification.scoring import entity_amount_similarity
from ledger_ml.storage.filters import FeedbackFilter

from ..result import ClassificationMethod, StageMatch
from .base import Stage

if TYPE_CHECKING:
    from ..context import ClassificationContext

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3
LONG_NAME_LENGTH = 8

EXACT_SUBJECT_SCORE = 100
EXACT_DETAIL_SCORE = 95

NAME_SCORE_CAP = 40
FREQUENCY_SCORE_CAP = 30
FREQUENCY_POINTS_PER_USE = 3
AMOUNT_SCORE_WEIGHT = 30


@dataclass
class EntityUsage:
    """Feedback usage of one target within the lookback window."""

    target: Target
    usage_count: int = 0
    amount_similarities: list[float] = field(default_factory=list)

    @property
    def avg_amount_similarity(self) -> float:
        if not self.amount_similarities:
            return 0.0
        return sum(self.amount_similarities) / len(self.amount_similarities)


def aggregate_usage(entries: list[FeedbackEntry], amount: float) -> list[EntityUsage]:
    """Group feedback by corrected target, scoring amount agreement per record."""
    usage: dict[TargetKey, EntityUsage] = {}
    for entry in entries:
        item = usage.setdefault(entry.target_key, EntityUsage(target=entry.target))
        item.usage_count += 1
        if entry.amount is not None:
            item.amount_similarities.append(entity_amount_similarity(entry.amount, amount))
    return list(usage.values())


def _contained(name: str, *texts: str) -> bool:
    return len(name) >= MIN_NAME_LENGTH and any(name in text for text in texts)


def name_score(target: Target, description_lower: str) -> float:
    """Specificity of the matched name: exact and longer names score higher."""
    subject = target.subject_name.lower()
    detail = (target.detail_name or "").lower()

    if subject == description_lower:
        return EXACT_SUBJECT_SCORE
    if detail and detail == description_lower:
        return EXACT_DETAIL_SCORE
    if len(subject) >= LONG_NAME_LENGTH:
        return len(subject) * 3
    if detail and len(detail) >= LONG_NAME_LENGTH:
        return len(detail) * 2.5
    return len(subject) * 2


class EntityMatcher(Stage):
    """Stage 3.5: a known subject/detail name literally present in the description."""

    name = "entity_match"

    def __init__(self, config: ClassifierConfig):
        self._config = config

    async def classify(self, ctx: ClassificationContext) -> StageMatch | None:
        since = ctx.now - timedelta(days=self._config.entity_window_days)
        entries = await ctx.repos.feedback.find(FeedbackFilter(since=since))
        if not entries:
            return None

        texts = (ctx.description_lower, ctx.normalized_description)
        candidates = []
        for usage in aggregate_usage(entries, ctx.amount):
            subject = usage.target.subject_name.lower()
            detail = (usage.target.detail_name or "").lower()
            if not (_contained(subject, *texts) or _contained(detail, *texts)):
                continue
            candidates.append((name_score(usage.target, ctx.description_lower), usage))

        if not candidates:
            logger.debug("Entity stage: no known names in %r", ctx.description_lower)
            return None

        candidates.sort(
            key=lambda c: (c[0], c[1].usage_count, c[1].avg_amount_similarity),
            reverse=True,
        )
        score, best = candidates[0]

        name_points = min(NAME_SCORE_CAP, score)
        frequency_points = min(FREQUENCY_SCORE_CAP, best.usage_count * FREQUENCY_POINTS_PER_USE)
        amount_points = best.avg_amount_similarity * AMOUNT_SCORE_WEIGHT
        confidence = round(name_points + frequency_points + amount_points)

        if confidence < self._config.thresholds.entity_confidence_min:
            logger.debug(
                "Entity stage: '%s' below threshold (%d)",
                best.target.subject_name,
                confidence,
            )
            return None

        matched = best.target.detail_name or best.target.subject_name
        if best.target.detail_name and not _contained(best.target.detail_name.lower(), *texts):
            matched = best.target.subject_name

        logger.info("Entity stage: '%s' matched (confidence=%d)", matched, confidence)
        return StageMatch(
            target=best.target,
            confidence=min(100, confidence),
            method=ClassificationMethod.ENTITY_MATCH,
            reasoning=f'Detected "{matched}" in description (used {best.usage_count} times)',
            debug={
                "matched_entity": matched,
                "usage_count": best.usage_count,
                "avg_amount_similarity": round(best.avg_amount_similarity, 4),
                "name_score": name_points,
                "frequency_score": frequency_points,
                "amount_score": round(amount_points, 2),
                "candidates_count": len(candidates),
            },
        )
