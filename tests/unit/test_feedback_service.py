"""Tests for feedback recording and learning data."""

from decimal import Decimal

import pytest

from ledger_ml.inference.feedback import FeedbackService
from ledger_ml.inference.indexing import IndexingService


@pytest.fixture
def feedback_service(infra) -> FeedbackService:
    return FeedbackService(infra, IndexingService(infra))


class TestRecord:
    """Tests for FeedbackService.record."""

    @pytest.mark.asyncio
    async def test_confirmed_suggestion_not_stored(
        self, feedback_service, infra, session, repos, taxonomy, new_feedback
    ) -> None:
        target = taxonomy.utilities_edison
        outcome = await feedback_service.record(session, "acme", new_feedback(target, target))

        assert not outcome.stored
        assert outcome.reason == "no correction"
        assert infra.jobs.pending == 0
        assert await repos.feedback.find() == []

    @pytest.mark.asyncio
    async def test_correction_stored_and_reindexed(
        self,
        feedback_service,
        infra,
        session,
        repos,
        taxonomy,
        add_transaction,
        new_feedback,
        vector_index,
    ) -> None:
        """A correction is stored and the transaction re-indexed in the background."""
        txn_id = await add_transaction("ESSELUNGA MILANO", target=taxonomy.food_supermarket)
        feedback = new_feedback(
            taxonomy.utilities_edison,
            taxonomy.food_supermarket,
            transaction_id=txn_id,
            suggestion_method="semantic",
            suggestion_confidence=72.0,
        )

        outcome = await feedback_service.record(session, "acme", feedback)
        await infra.jobs.shutdown()

        assert outcome.stored
        assert outcome.reindex_scheduled
        stored = await repos.feedback.find()
        assert [e.id for e in stored] == [outcome.feedback_id]
        assert stored[0].target.subject_name == "Supermarket"
        vector_index.upsert.assert_awaited_once()
        assert infra.jobs.succeeded == 1

    @pytest.mark.asyncio
    async def test_unindexable_transaction_is_not_a_failure(
        self, feedback_service, infra, session, taxonomy, new_feedback, vector_index
    ) -> None:
        outcome = await feedback_service.record(
            session, "acme", new_feedback(None, taxonomy.housing_rent)
        )
        await infra.jobs.shutdown()

        assert outcome.stored
        vector_index.upsert.assert_not_awaited()
        assert infra.jobs.succeeded == 1
        assert infra.jobs.failed == 0

    @pytest.mark.asyncio
    async def test_no_reindex_after_shutdown(
        self, feedback_service, infra, session, taxonomy, new_feedback
    ) -> None:
        await infra.jobs.shutdown()

        outcome = await feedback_service.record(
            session, "acme", new_feedback(None, taxonomy.housing_rent)
        )

        assert outcome.stored
        assert not outcome.reindex_scheduled


class TestLearningData:
    @pytest.mark.asyncio
    async def test_similar_descriptions_best_first(
        self, feedback_service, session, taxonomy, add_feedback
    ) -> None:
        await add_feedback(taxonomy.utilities_edison, "EDISON BOLLETTA LUCE")
        await add_feedback(taxonomy.utilities_edison, "EDISON BOLLETTA GAS")
        await add_feedback(taxonomy.housing_rent, "AFFITTO ROSSI")

        items = await feedback_service.learning_data(session, "acme", "edison bolletta luce")

        descriptions = [entry.original_description for entry, _ in items]
        assert descriptions == ["EDISON BOLLETTA LUCE", "EDISON BOLLETTA GAS"]
        assert items[0][1] == 1.0

    @pytest.mark.asyncio
    async def test_limit(self, feedback_service, session, taxonomy, add_feedback) -> None:
        for _ in range(5):
            await add_feedback(taxonomy.utilities_edison, "EDISON BOLLETTA LUCE")

        items = await feedback_service.learning_data(
            session, "acme", "EDISON BOLLETTA LUCE", limit=2
        )
        assert len(items) == 2


class TestStats:
    @pytest.mark.asyncio
    async def test_counts(self, feedback_service, session, taxonomy, add_feedback) -> None:
        await add_feedback(taxonomy.utilities_edison, "EDISON", confidence=95.0)
        await add_feedback(taxonomy.housing_rent, "AFFITTO", confidence=50.0)

        stats = await feedback_service.stats(session, "acme")

        assert stats["total_feedbacks"] == 2
        assert stats["high_confidence_corrections"] == 1
        assert stats["low_confidence_corrections"] == 1
        assert stats["categories_involved"] == 2


class TestFindBestMatch:
    """Tests for the single best past correction lookup."""

    @pytest.mark.asyncio
    async def test_amount_separates_same_description(
        self, feedback_service, session, taxonomy, add_feedback
    ) -> None:
        """Same supplier, different amounts: the closer amount wins."""
        await add_feedback(taxonomy.housing_rent, "EDISON ENERGIA SPA", amount="-500.00")
        await add_feedback(taxonomy.utilities_edison, "EDISON ENERGIA SPA", amount="-60.00")

        match = await feedback_service.find_best_match(
            session, "acme", "EDISON ENERGIA SPA", Decimal("-58.00")
        )

        assert match is not None
        assert match.entry.target == taxonomy.utilities_edison
        assert match.text_similarity == 1.0
        assert match.amount_proximity == pytest.approx(0.9887, abs=1e-4)
        assert match.confidence == 100
        assert match.method == "feedback_learning_v2"

    @pytest.mark.asyncio
    async def test_combined_score_gate(
        self, feedback_service, session, taxonomy, add_feedback
    ) -> None:
        # similarity 0.75: passes only when the amount is close enough
        await add_feedback(taxonomy.utilities_edison, "EDISON LUCE GAS", amount="-1000.00")

        far = await feedback_service.find_best_match(
            session, "acme", "edison luce", Decimal("-10.00")
        )
        near = await feedback_service.find_best_match(
            session, "acme", "edison luce", Decimal("-1000.00")
        )

        assert far is None
        assert near is not None
        assert near.text_similarity == 0.75
        assert near.amount_proximity == 1.0

    @pytest.mark.asyncio
    async def test_missing_amount_counts_half(
        self, feedback_service, session, taxonomy, add_feedback
    ) -> None:
        await add_feedback(taxonomy.utilities_edison, "EDISON LUCE GAS", amount="-1000.00")

        match = await feedback_service.find_best_match(session, "acme", "edison luce")

        assert match is not None
        assert match.amount_proximity == 0.5

    @pytest.mark.asyncio
    async def test_similarity_prefilter(
        self, feedback_service, session, taxonomy, add_feedback
    ) -> None:
        """Similarity 0.4375 is excluded even though the combined score would pass."""
        await add_feedback(taxonomy.utilities_edison, "EDISON GAS", amount="-60.00")

        match = await feedback_service.find_best_match(
            session, "acme", "edison luce", Decimal("-60.00")
        )

        assert match is None

    @pytest.mark.asyncio
    async def test_no_feedback(self, feedback_service, session) -> None:
        assert await feedback_service.find_best_match(session, "acme", "ANYTHING") is None
