from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from ledger_ml.inference.classification.result import ClassificationMethod, ClassificationResult
from ledger_ml.inference.metrics import MetricsRecorder
from ledger_ml.inference.metrics.recorder import metric_from_result


class TestMetricFromResult:
    def test_copies_debug_scores(self) -> None:
        result = ClassificationResult(
            transaction_id=uuid4(),
            confidence=84,
            method=ClassificationMethod.SEMANTIC,
            latency_ms=37,
            debug={"vector_score": 0.93, "cluster_count": 2, "unrelated": "x"},
        )

        metric = metric_from_result(result)

        assert metric.stage_used == "semantic"
        assert metric.confidence == 84
        assert metric.latency_ms == 37
        assert metric.vector_score == 0.93
        assert metric.cluster_count == 2
        assert metric.amount_score is None


class TestMetricsRecorder:
    @pytest.mark.asyncio
    async def test_write_failure_is_swallowed(self) -> None:
        """A failing insert rolls back and reports False instead of raising."""
        session = AsyncMock()
        repos = MagicMock()
        repos.metrics.add = AsyncMock(side_effect=RuntimeError("disk full"))
        result = ClassificationResult.manual(uuid4(), latency_ms=5)

        recorded = await MetricsRecorder().record(session, repos, result)

        assert recorded is False
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_records(self, session, repos) -> None:
        result = ClassificationResult.manual(uuid4(), latency_ms=5)

        assert await MetricsRecorder().record(session, repos, result) is True
