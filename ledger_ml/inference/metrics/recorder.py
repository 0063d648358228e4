from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ledger_ml.data_models import ClassificationMetric

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ledger_ml.inference.classification.result import ClassificationResult
    from ledger_ml.storage import RepositoryFactory

logger = logging.getLogger(__name__)

SUB_SCORES = ("vector_score", "amount_score", "recency_score", "frequency_score")
COUNTERS = ("candidates_count", "cluster_count")


def metric_from_result(result: ClassificationResult) -> ClassificationMetric:
    debug = result.debug or {}
    return ClassificationMetric(
        transaction_id=result.transaction_id,
        stage_used=result.method.value,
        confidence=result.confidence,
        latency_ms=result.latency_ms,
        **{key: debug.get(key) for key in SUB_SCORES + COUNTERS},
    )


class MetricsRecorder:
    """Best-effort persistence of classification metrics.

    Never raises: a failed write is logged and the session rolled back.
    """

    async def record(
        self,
        session: AsyncSession,
        repos: RepositoryFactory,
        result: ClassificationResult,
    ) -> bool:
        try:
            await repos.metrics.add(metric_from_result(result))
        except Exception as e:
            logger.warning(
                "Failed to record metrics for %s: %s", result.transaction_id, e, exc_info=True
            )
            try:
                await session.rollback()
            except Exception:
                logger.debug("Rollback after metrics failure also failed", exc_info=True)
            return False
        return True
