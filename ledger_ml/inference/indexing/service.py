"""Vector indexing of classified transactions.

Indexing is at-least-once and idempotent: points are keyed by transaction id,
so re-running an index operation overwrites the same point.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from ledger_ml.errors import InvalidRequestError, TransactionNotFoundError
from ledger_ml.storage import RepositoryFactory

from .points import build_point, embedding_text

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from ledger_ml.data_models import IndexableTransaction
    from ledger_ml.inference.shared import SharedInfrastructure
    from ledger_ml.inference.vector_index import VectorPoint

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


@dataclass
class IndexResult:
    """Outcome of an indexing operation."""

    indexed_count: int
    skipped_count: int
    collection: str | None
    latency_ms: int

    @property
    def avg_latency_per_transaction_ms(self) -> float:
        if self.indexed_count == 0:
            return 0.0
        return round(self.latency_ms / self.indexed_count, 2)


class IndexingService:
    """Embeds classified transactions and upserts them into the vector index."""

    def __init__(
        self,
        infra: SharedInfrastructure,
        repository_factory: Callable[[AsyncSession, str], RepositoryFactory] = RepositoryFactory,
    ):
        self._embedder = infra.embedder
        self._index = infra.vector_index
        self._settings = infra.settings
        self._repository_factory = repository_factory

    async def _points(
        self, tenant: str, transactions: list[IndexableTransaction]
    ) -> list[VectorPoint]:
        vectors = await asyncio.gather(
            *(self._embedder.embed(embedding_text(txn)) for txn in transactions)
        )
        return [build_point(tenant, txn, vector) for txn, vector in zip(transactions, vectors)]

    async def index_transaction(
        self,
        session: AsyncSession,
        tenant: str,
        transaction_id: UUID,
    ) -> IndexResult:
        """Index one completed, classified transaction.

        Raises:
            TransactionNotFoundError: missing, unclassified or not completed.
        """
        start = time.perf_counter()
        repos = self._repository_factory(session, tenant)
        txn = await repos.transactions.get_indexable(transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id, tenant)

        vector = await self._embedder.embed(embedding_text(txn))
        collection = await self._index.ensure_collection(tenant)
        await self._index.upsert(tenant, [build_point(tenant, txn, vector)])

        logger.info("Indexed transaction %s into %s", transaction_id, collection)
        return IndexResult(
            indexed_count=1,
            skipped_count=0,
            collection=collection,
            latency_ms=_elapsed_ms(start),
        )

    async def index_batch(
        self,
        session: AsyncSession,
        tenant: str,
        transaction_ids: list[UUID],
    ) -> IndexResult:
        """Index up to `index_batch_max` transactions; ineligible ones are skipped."""
        start = time.perf_counter()
        if not transaction_ids:
            return IndexResult(0, 0, None, 0)

        limit = self._settings.index_batch_max
        if len(transaction_ids) > limit:
            msg = f"At most {limit} transactions per batch (got {len(transaction_ids)})"
            raise InvalidRequestError(msg)

        unique_ids = list(dict.fromkeys(transaction_ids))
        repos = self._repository_factory(session, tenant)
        transactions = await repos.transactions.list_indexable(unique_ids)
        if not transactions:
            logger.info("Batch index: none of %d transactions eligible", len(unique_ids))
            return IndexResult(0, len(unique_ids), None, _elapsed_ms(start))

        points = await self._points(tenant, transactions)
        collection = await self._index.ensure_collection(tenant)
        await self._index.upsert(tenant, points)

        result = IndexResult(
            indexed_count=len(points),
            skipped_count=len(unique_ids) - len(points),
            collection=collection,
            latency_ms=_elapsed_ms(start),
        )
        logger.info(
            "Batch index: %d indexed, %d skipped into %s (%dms)",
            result.indexed_count,
            result.skipped_count,
            collection,
            result.latency_ms,
        )
        return result

    async def reindex_all(
        self,
        session: AsyncSession,
        tenant: str,
        limit: int | None = None,
    ) -> IndexResult:
        """Drop and rebuild the tenant collection from the newest classified transactions."""
        start = time.perf_counter()
        if limit is None:
            limit = self._settings.reindex_default_limit
        batch_size = self._settings.reindex_batch_size

        repos = self._repository_factory(session, tenant)
        transactions = await repos.transactions.list_recent_indexable(limit)
        collection = await self._index.recreate_collection(tenant)

        logger.info("Reindexing %d transactions into %s", len(transactions), collection)
        indexed = 0
        for offset in range(0, len(transactions), batch_size):
            batch = transactions[offset : offset + batch_size]
            await self._index.upsert(tenant, await self._points(tenant, batch))
            indexed += len(batch)
            logger.info("Reindex progress: %d/%d", indexed, len(transactions))

        return IndexResult(
            indexed_count=indexed,
            skipped_count=0,
            collection=collection,
            latency_ms=_elapsed_ms(start),
        )
