"""Tests for vector indexing of classified transactions."""

from uuid import uuid4

import pytest

from ledger_ml.errors import InvalidRequestError, TransactionNotFoundError
from ledger_ml.inference.indexing import IndexingService, IndexResult


@pytest.fixture
def indexing(infra) -> IndexingService:
    return IndexingService(infra)


class TestIndexTransaction:
    @pytest.mark.asyncio
    async def test_indexes_classified_transaction(
        self, indexing, session, taxonomy, add_transaction, embedder, vector_index
    ) -> None:
        txn_id = await add_transaction(
            "EDISON BOLLETTA LUCE", amount="-60.00", target=taxonomy.utilities_edison
        )

        result = await indexing.index_transaction(session, "acme", txn_id)

        assert result.indexed_count == 1
        assert result.collection == "transactions_acme"
        embedder.embed.assert_awaited_once_with("EDISON BOLLETTA LUCE | Importo: medium (50-150€)")
        (tenant, points), _ = vector_index.upsert.await_args
        assert tenant == "acme"
        payload = points[0].payload
        assert points[0].id == str(txn_id)
        assert payload["subject_name"] == "Edison"
        assert payload["amount_bucket"] == "medium"
        assert payload["detail_id"] is None
        assert payload["classification_frequency"] == 1

    @pytest.mark.asyncio
    async def test_pending_transaction_not_found(
        self, indexing, session, taxonomy, add_transaction, vector_index
    ) -> None:
        txn_id = await add_transaction(
            "EDISON", target=taxonomy.utilities_edison, status="pending"
        )

        with pytest.raises(TransactionNotFoundError):
            await indexing.index_transaction(session, "acme", txn_id)
        vector_index.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unclassified_transaction_not_found(
        self, indexing, session, taxonomy, add_transaction
    ) -> None:
        txn_id = await add_transaction("UNKNOWN SHOP")

        with pytest.raises(TransactionNotFoundError):
            await indexing.index_transaction(session, "acme", txn_id)


class TestIndexBatch:
    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_calls(
        self, indexing, session, embedder, vector_index
    ) -> None:
        result = await indexing.index_batch(session, "acme", [])

        assert result == IndexResult(0, 0, None, 0)
        embedder.embed.assert_not_awaited()
        vector_index.ensure_collection.assert_not_awaited()
        vector_index.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_batch_limit(self, indexing, session) -> None:
        with pytest.raises(InvalidRequestError):
            await indexing.index_batch(session, "acme", [uuid4() for _ in range(51)])

    @pytest.mark.asyncio
    async def test_ineligible_skipped_and_duplicates_collapsed(
        self, indexing, session, taxonomy, add_transaction, vector_index
    ) -> None:
        first = await add_transaction("EDISON LUCE", target=taxonomy.utilities_edison)
        second = await add_transaction("EDISON GAS", target=taxonomy.utilities_edison)
        pending = await add_transaction(
            "EDISON", target=taxonomy.utilities_edison, status="pending"
        )

        result = await indexing.index_batch(session, "acme", [first, second, pending, first])

        assert result.indexed_count == 2
        assert result.skipped_count == 1
        vector_index.upsert.assert_awaited_once()
        (_, points), _ = vector_index.upsert.await_args
        assert {p.payload["classification_frequency"] for p in points} == {2}

    @pytest.mark.asyncio
    async def test_nothing_eligible(
        self, indexing, session, taxonomy, add_transaction, vector_index
    ) -> None:
        txn_id = await add_transaction("UNKNOWN SHOP")

        result = await indexing.index_batch(session, "acme", [txn_id])

        assert result.indexed_count == 0
        assert result.skipped_count == 1
        vector_index.upsert.assert_not_awaited()


class TestReindexAll:
    @pytest.mark.asyncio
    async def test_rebuilds_collection_in_batches(
        self, infra, session, taxonomy, add_transaction, vector_index
    ) -> None:
        infra.settings = infra.settings.model_copy(update={"reindex_batch_size": 2})
        indexing = IndexingService(infra)
        for i in range(5):
            await add_transaction(f"AFFITTO {i}", amount="-800.00", target=taxonomy.housing_rent)

        result = await indexing.reindex_all(session, "acme", limit=4)

        assert result.indexed_count == 4
        vector_index.recreate_collection.assert_awaited_once_with("acme")
        assert vector_index.upsert.await_count == 2

    @pytest.mark.asyncio
    async def test_zero_limit_indexes_nothing(
        self, infra, session, taxonomy, add_transaction, vector_index
    ) -> None:
        await add_transaction("AFFITTO", amount="-800.00", target=taxonomy.housing_rent)

        result = await IndexingService(infra).reindex_all(session, "acme", limit=0)

        assert result.indexed_count == 0
        vector_index.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_default_limit(
        self, infra, session, taxonomy, add_transaction, vector_index
    ) -> None:
        await add_transaction("AFFITTO", amount="-800.00", target=taxonomy.housing_rent)

        result = await IndexingService(infra).reindex_all(session, "acme")

        assert result.indexed_count == 1

    def test_avg_latency(self) -> None:
        assert IndexResult(4, 0, "c", 10).avg_latency_per_transaction_ms == 2.5
        assert IndexResult(0, 0, None, 0).avg_latency_per_transaction_ms == 0.0
