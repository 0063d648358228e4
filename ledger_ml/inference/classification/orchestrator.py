"""Classification cascade orchestrator.

This module provides the ClassificationOrchestrator, an application service
that runs one transaction through the stages in a fixed order:

    rule -> historical -> semantic (if confident) -> entity match -> manual

The first stage with a confident decision wins. Manual review carries the
semantic suggestions, if any. Stage errors never escape: they produce a
`success=False` result that needs review.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ledger_ml.inference.metrics.recorder import MetricsRecorder
from ledger_ml.storage import RepositoryFactory

from .classifiers import EntityMatcher, HistoricalMatcher, RuleClassifier, SemanticMatcher
from .context import ClassificationContext
from .result import ClassificationResult

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ledger_ml.data_models import Transaction
    from ledger_ml.inference.shared import SharedInfrastructure

logger = logging.getLogger(__name__)

RepositoryFactoryType = Callable[["AsyncSession", str], RepositoryFactory]


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class ClassificationOrchestrator:
    """Application service for classification.

    Created once at app startup; each call receives its own database session.

    Usage:
        orchestrator = ClassificationOrchestrator(infra)
        result = await orchestrator.classify(session, transaction, tenant="acme")
    """

    def __init__(
        self,
        infra: SharedInfrastructure,
        repository_factory: RepositoryFactoryType = RepositoryFactory,
    ) -> None:
        self._infra = infra
        self._repository_factory = repository_factory
        config = infra.config

        self.rule_stage = RuleClassifier()
        self.historical_stage = HistoricalMatcher(config)
        self.semantic_stage = SemanticMatcher(infra.embedder, infra.vector_index, config)
        self.entity_stage = EntityMatcher(config)
        self._recorder = MetricsRecorder()

    async def classify(
        self,
        session: AsyncSession,
        transaction: Transaction,
        tenant: str,
        record_metrics: bool = True,
    ) -> ClassificationResult:
        """Classify one transaction. Never raises."""
        start = time.perf_counter()
        repos = self._repository_factory(session, tenant)

        try:
            ctx = ClassificationContext(tenant=tenant, transaction=transaction, repos=repos)
            result = await self._run_stages(ctx, start)
        except Exception as e:
            logger.exception("Classification failed for transaction %s", transaction.id)
            return ClassificationResult.failed(transaction.id, str(e), _elapsed_ms(start))

        logger.info(
            "Classified %s: method=%s confidence=%d needs_review=%s (%dms)",
            transaction.id,
            result.method.value,
            result.confidence,
            result.needs_review,
            result.latency_ms,
        )
        if record_metrics:
            await self._recorder.record(session, repos, result)
        return result

    async def _run_stages(
        self,
        ctx: ClassificationContext,
        start: float,
    ) -> ClassificationResult:
        txn_id = ctx.transaction.id

        match = await self.rule_stage.classify(ctx)
        if match is not None:
            return ClassificationResult.from_match(txn_id, match, _elapsed_ms(start))

        match = await self.historical_stage.classify(ctx)
        if match is not None:
            return ClassificationResult.from_match(txn_id, match, _elapsed_ms(start))

        semantic = await self.semantic_stage.classify(ctx)
        if semantic.match is not None:
            return ClassificationResult.from_match(
                txn_id, semantic.match, _elapsed_ms(start), semantic.suggestions
            )

        match = await self.entity_stage.classify(ctx)
        if match is not None:
            return ClassificationResult.from_match(
                txn_id, match, _elapsed_ms(start), semantic.suggestions
            )

        return ClassificationResult.manual(txn_id, _elapsed_ms(start), semantic.suggestions)

    async def classify_batch(
        self,
        transactions: list[Transaction],
        tenant: str,
    ) -> list[ClassificationResult]:
        """Classify transactions in windows of bounded concurrency.

        Each classification gets its own session; results keep input order.
        """
        window = self._infra.settings.batch_concurrency
        results: list[ClassificationResult] = []

        logger.info(
            "Starting batch classification: tenant=%s, transactions=%d",
            tenant,
            len(transactions),
        )
        for offset in range(0, len(transactions), window):
            chunk = transactions[offset : offset + window]
            results.extend(
                await asyncio.gather(*(self._classify_in_session(t, tenant) for t in chunk))
            )

        n_classified = sum(1 for r in results if not r.needs_review)
        logger.info(
            "Batch classification complete: %d/%d classified",
            n_classified,
            len(results),
        )
        return results

    async def _classify_in_session(
        self,
        transaction: Transaction,
        tenant: str,
    ) -> ClassificationResult:
        async with self._infra.session_maker() as session:
            return await self.classify(session, transaction, tenant)
