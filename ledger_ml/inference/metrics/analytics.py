"""Classification analytics.

Aggregations are computed in memory from one fetch of the feedback window,
plus the rule counters. Stage metrics summaries use numpy.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any

import numpy as np

from ledger_ml.data_models import ClassificationMetric, FeedbackEntry
from ledger_ml.storage.filters import FeedbackFilter

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 85
MANUAL_CONFIDENCE = 70
TOP_LIMIT = 10

# (label, lower bound inclusive), checked top-down
CONFIDENCE_RANGES = [
    ("95-100%", 95),
    ("90-95%", 90),
    ("80-90%", 80),
    ("70-80%", 70),
    ("<70%", float("-inf")),
]


def confidence_range(confidence: float) -> str:
    for label, lower in CONFIDENCE_RANGES:
        if confidence >= lower:
            return label
    return CONFIDENCE_RANGES[-1][0]


def _avg(values: list[float]) -> float | None:
    return round(float(np.mean(values)), 2) if values else None


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _week_start(moment: datetime) -> str:
    return (moment.date() - timedelta(days=moment.weekday())).isoformat()


def _method_distribution(entries: list[FeedbackEntry]) -> list[dict[str, Any]]:
    by_method: dict[str, list[FeedbackEntry]] = defaultdict(list)
    for entry in entries:
        by_method[entry.suggestion_method or "unknown"].append(entry)

    rows = []
    for method, group in by_method.items():
        confidences = [
            e.suggestion_confidence for e in group if e.suggestion_confidence is not None
        ]
        rows.append(
            {
                "method": method,
                "count": len(group),
                "avg_confidence": _avg(confidences),
                "accuracy": _percent(sum(1 for e in group if e.accepted), len(group)),
            }
        )
    rows.sort(key=lambda row: row["count"], reverse=True)
    return rows


def _confidence_trend(entries: list[FeedbackEntry]) -> list[dict[str, Any]]:
    by_week: dict[str, list[float]] = defaultdict(list)
    for entry in entries:
        if entry.suggestion_confidence is not None:
            by_week[_week_start(entry.created_at)].append(entry.suggestion_confidence)
    return [
        {"week": week, "count": len(values), "avg_confidence": _avg(values)}
        for week, values in sorted(by_week.items())
    ]


def _confidence_ranges(entries: list[FeedbackEntry]) -> list[dict[str, Any]]:
    by_range: dict[str, list[FeedbackEntry]] = defaultdict(list)
    for entry in entries:
        if entry.suggestion_confidence is not None:
            by_range[confidence_range(entry.suggestion_confidence)].append(entry)
    return [
        {
            "range": label,
            "count": len(by_range[label]),
            "accuracy": _percent(
                sum(1 for e in by_range[label] if e.accepted), len(by_range[label])
            ),
        }
        for label, _ in CONFIDENCE_RANGES
        if by_range[label]
    ]


def _top(entries: list[FeedbackEntry], attr: str) -> list[dict[str, Any]]:
    counts = Counter(
        (getattr(e.target, f"{attr}_id"), getattr(e.target, f"{attr}_name")) for e in entries
    )
    return [
        {f"{attr}_id": str(item_id), f"{attr}_name": name, "count": count}
        for (item_id, name), count in counts.most_common(TOP_LIMIT)
    ]


def aggregate_analytics(
    entries: list[FeedbackEntry],
    rule_counts: dict[str, int],
    window_days: int,
    now: datetime,
) -> dict[str, Any]:
    """Feedback-window analytics: methods, trend, accuracy by confidence, tops."""
    confidences = [
        e.suggestion_confidence for e in entries if e.suggestion_confidence is not None
    ]
    total = len(entries)
    return {
        "period": {
            "window_days": window_days,
            "from": (now - timedelta(days=window_days)).isoformat(),
            "to": now.isoformat(),
        },
        "overall": {
            "total_classifications": total,
            "unique_transactions": len({e.transaction_id for e in entries}),
            "avg_confidence": _avg(confidences),
            "min_confidence": min(confidences) if confidences else None,
            "max_confidence": max(confidences) if confidences else None,
            "overall_accuracy": _percent(sum(1 for e in entries if e.accepted_exactly), total),
            "avg_per_day": round(total / window_days, 2) if window_days else 0.0,
        },
        "method_distribution": _method_distribution(entries),
        "confidence_trend": _confidence_trend(entries),
        "confidence_ranges": _confidence_ranges(entries),
        "top_categories": _top(entries, "category"),
        "top_subjects": _top(entries, "subject"),
        "rules": rule_counts,
    }


def summarize_metrics(metrics: list[ClassificationMetric], days: int) -> dict[str, Any]:
    """Per-stage confidence and latency statistics."""
    by_stage: dict[str, list[ClassificationMetric]] = defaultdict(list)
    for metric in metrics:
        by_stage[metric.stage_used].append(metric)

    stages = []
    for stage, group in by_stage.items():
        confidence = np.array([m.confidence for m in group], dtype=float)
        latency = np.array([m.latency_ms for m in group], dtype=float)
        high = int(np.count_nonzero(confidence >= HIGH_CONFIDENCE))
        stages.append(
            {
                "stage": stage,
                "count": len(group),
                "avg_confidence": round(float(confidence.mean()), 2),
                "stddev_confidence": round(float(confidence.std(ddof=1)), 2)
                if len(group) > 1
                else 0.0,
                "avg_latency_ms": round(float(latency.mean()), 2),
                "p95_latency_ms": round(float(np.percentile(latency, 95)), 2),
                "high_confidence_count": high,
                "high_confidence_pct": _percent(high, len(group)),
                "manual_review_count": int(np.count_nonzero(confidence < MANUAL_CONFIDENCE)),
            }
        )
    stages.sort(key=lambda row: row["count"], reverse=True)

    all_latency = [m.latency_ms for m in metrics]
    return {
        "period_days": days,
        "stages": stages,
        "totals": {
            "classifications": len(metrics),
            "avg_latency_ms": _avg(all_latency),
            "high_confidence_count": sum(s["high_confidence_count"] for s in stages),
            "manual_review_count": sum(s["manual_review_count"] for s in stages),
        },
    }


class AnalyticsService:
    """Loads the data for analytics and metrics summaries."""

    async def analytics(self, repos, window_days: int = 30) -> dict[str, Any]:
        now = datetime.now(tz=timezone.utc)
        entries = await repos.feedback.find(
            FeedbackFilter(since=now - timedelta(days=window_days))
        )
        rule_counts = await repos.rules.counts()
        logger.debug("Analytics over %d feedback records (%d days)", len(entries), window_days)
        return aggregate_analytics(entries, rule_counts, window_days, now)

    async def metrics_summary(self, repos, days: int = 7) -> dict[str, Any]:
        since = datetime.now(tz=timezone.utc) - timedelta(days=days)
        metrics = await repos.metrics.list_since(since)
        return summarize_metrics(metrics, days)
