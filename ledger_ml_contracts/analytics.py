"""Analytics and metrics contracts.

Aggregations are returned as plain nested mappings; their keys are listed
with the producing functions.
"""

from typing import Any

from pydantic import BaseModel


class AnalyticsResponse(BaseModel):
    period: dict[str, Any]
    overall: dict[str, Any]
    method_distribution: list[dict[str, Any]]
    confidence_trend: list[dict[str, Any]]
    confidence_ranges: list[dict[str, Any]]
    top_categories: list[dict[str, Any]]
    top_subjects: list[dict[str, Any]]
    rules: dict[str, int]
    cached: bool = False


class MetricsSummaryResponse(BaseModel):
    period_days: int
    stages: list[dict[str, Any]]
    totals: dict[str, Any]
