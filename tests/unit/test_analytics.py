"""Tests for analytics and metrics summaries."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from ledger_ml.data_models import ClassificationMetric, FeedbackEntry, Target
from ledger_ml.inference.metrics import aggregate_analytics, summarize_metrics
from ledger_ml.inference.metrics.analytics import AnalyticsService, confidence_range

EDISON = Target(
    category_id=uuid4(), category_name="Utilities", subject_id=uuid4(), subject_name="Edison"
)
RENT = Target(
    category_id=uuid4(), category_name="Housing", subject_id=uuid4(), subject_name="Rent"
)
NOW = datetime(2025, 3, 12, tzinfo=timezone.utc)


def _feedback(target: Target, suggested: Target | None, confidence: float, method: str):
    return FeedbackEntry(
        id=uuid4(),
        transaction_id=uuid4(),
        original_description="X",
        suggested_category_id=suggested.category_id if suggested else None,
        suggested_subject_id=suggested.subject_id if suggested else None,
        suggestion_confidence=confidence,
        suggestion_method=method,
        target=target,
        created_at=datetime(2025, 3, 5, 10, tzinfo=timezone.utc),
    )


def _metric(stage: str, confidence: float, latency_ms: int) -> ClassificationMetric:
    return ClassificationMetric(
        transaction_id=uuid4(), stage_used=stage, confidence=confidence, latency_ms=latency_ms
    )


class TestConfidenceRange:
    @pytest.mark.parametrize(
        ("confidence", "label"),
        [(100, "95-100%"), (95, "95-100%"), (94.9, "90-95%"), (80, "80-90%"), (10, "<70%")],
    )
    def test_labels(self, confidence: float, label: str) -> None:
        assert confidence_range(confidence) == label


class TestAggregateAnalytics:
    """Tests for feedback-window aggregation."""

    def test_overall_and_distribution(self) -> None:
        entries = [
            _feedback(EDISON, EDISON, 92.0, "semantic"),
            _feedback(RENT, EDISON, 72.0, "semantic"),
            _feedback(RENT, None, 0.0, "manual"),
        ]

        data = aggregate_analytics(entries, {"total_rules": 2}, window_days=30, now=NOW)

        overall = data["overall"]
        assert overall["total_classifications"] == 3
        assert overall["overall_accuracy"] == pytest.approx(33.33)
        assert overall["min_confidence"] == 0.0
        assert overall["max_confidence"] == 92.0
        assert overall["avg_per_day"] == 0.1

        methods = {row["method"]: row for row in data["method_distribution"]}
        assert methods["semantic"]["count"] == 2
        assert methods["semantic"]["accuracy"] == 50.0
        assert data["method_distribution"][0]["method"] == "semantic"

        assert data["confidence_trend"] == [
            {"week": "2025-03-03", "count": 3, "avg_confidence": 54.67}
        ]
        assert [r["range"] for r in data["confidence_ranges"]] == ["90-95%", "70-80%", "<70%"]
        assert data["top_subjects"][0] == {
            "subject_id": str(RENT.subject_id),
            "subject_name": "Rent",
            "count": 2,
        }
        assert data["rules"] == {"total_rules": 2}

    def test_empty(self) -> None:
        data = aggregate_analytics([], {}, window_days=7, now=NOW)

        assert data["overall"]["total_classifications"] == 0
        assert data["overall"]["avg_confidence"] is None
        assert data["overall"]["overall_accuracy"] == 0.0
        assert data["method_distribution"] == []


class TestSummarizeMetrics:
    def test_per_stage_statistics(self) -> None:
        metrics = [
            _metric("rule", 98, 10),
            _metric("rule", 98, 20),
            _metric("rule", 98, 30),
            _metric("manual", 0, 40),
        ]

        summary = summarize_metrics(metrics, days=7)

        stages = {row["stage"]: row for row in summary["stages"]}
        assert summary["stages"][0]["stage"] == "rule"
        assert stages["rule"]["count"] == 3
        assert stages["rule"]["avg_latency_ms"] == 20.0
        assert stages["rule"]["stddev_confidence"] == 0.0
        assert stages["rule"]["high_confidence_pct"] == 100.0
        assert stages["manual"]["manual_review_count"] == 1
        assert stages["manual"]["stddev_confidence"] == 0.0
        assert summary["totals"] == {
            "classifications": 4,
            "avg_latency_ms": 25.0,
            "high_confidence_count": 3,
            "manual_review_count": 1,
        }

    def test_empty(self) -> None:
        summary = summarize_metrics([], days=1)
        assert summary["stages"] == []
        assert summary["totals"]["avg_latency_ms"] is None


class TestAnalyticsService:
    @pytest.mark.asyncio
    async def test_reads_feedback_window_and_rule_counts(
        self, repos, taxonomy, add_feedback
    ) -> None:
        await add_feedback(taxonomy.utilities_edison, "EDISON", days_ago=2)
        await add_feedback(taxonomy.utilities_edison, "EDISON", days_ago=60)
        target = taxonomy.taxes_f24
        await repos.rules.create(
            rule_name="F24",
            description_patterns=["F24"],
            category_id=target.category_id,
            subject_id=target.subject_id,
        )

        data = await AnalyticsService().analytics(repos, window_days=30)

        assert data["overall"]["total_classifications"] == 1
        assert data["rules"] == {"total_rules": 1, "active_rules": 1, "disabled_rules": 0}

    @pytest.mark.asyncio
    async def test_metrics_summary(self, repos) -> None:
        await repos.metrics.add(_metric("exact", 92, 15))

        summary = await AnalyticsService().metrics_summary(repos, days=7)

        assert summary["totals"]["classifications"] == 1
        assert summary["stages"][0]["stage"] == "exact"
